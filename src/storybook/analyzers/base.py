"""Base classes for narrative analyzers."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from storybook.config import StorybookSettings, get_logger, get_settings
from storybook.exceptions import AnalyzerExecutionError, StorybookError
from storybook.text.entities import (
    NameSpan,
    document_vocabulary,
    find_location,
    names_in,
)
from storybook.text.segmenter import Paragraph, split_paragraphs
from storybook.text.tagger import SpacyTagger, Tagger, Token

logger = get_logger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


@dataclass(frozen=True)
class ParagraphView:
    """A paragraph with its tokens, character names and detected place."""

    paragraph: Paragraph
    tokens: list[Token]
    names: list[NameSpan]
    location: str | None

    @property
    def number(self) -> int:
        return self.paragraph.number

    def unique_names(self) -> list[str]:
        """Names in order of first mention, without repeats."""
        return list(dict.fromkeys(span.name for span in self.names))


class BaseNarrativeAnalyzer(ABC, Generic[ResultT]):
    """Base class for the manuscript analyzers.

    Analyzers hold no state between calls: every ``run`` starts from the
    supplied text alone, so one instance may serve concurrent callers.
    """

    def __init__(
        self,
        settings: StorybookSettings | None = None,
        tagger: Tagger | None = None,
    ) -> None:
        """Initialize analyzer.

        Args:
            settings: Thresholds to use; the global settings when omitted
            tagger: Tagger implementation; spaCy with ``nlp_model`` when omitted
        """
        self.settings = settings or get_settings()
        self.tagger = tagger or SpacyTagger(self.settings.nlp_model)

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique name for this analyzer."""

    @property
    def version(self) -> str:
        return "1.0.0"

    @abstractmethod
    def analyze(self, text: str, **options: Any) -> ResultT:
        """Analyze the manuscript text and return a result record."""

    def run(self, text: str, **options: Any) -> ResultT:
        """Run ``analyze`` with logging and uniform error wrapping.

        Raises:
            StorybookError: Engine errors propagate unchanged.
            AnalyzerExecutionError: Any other failure, with the cause attached.
        """
        logger.debug("Analyzer started", analyzer=self.name, characters=len(text))
        try:
            result = self.analyze(text, **options)
        except StorybookError:
            raise
        except Exception as e:
            logger.error("Analyzer failed", analyzer=self.name, error=str(e))
            raise AnalyzerExecutionError(
                f"Failed to analyze {self.name}: {e}",
                analyzer=self.name,
                cause=e,
            ) from e
        logger.debug("Analyzer finished", analyzer=self.name)
        return result

    async def run_async(self, text: str, **options: Any) -> ResultT:
        """Run the analyzer on a worker thread."""
        return await asyncio.to_thread(self.run, text, **options)

    def read_paragraphs(
        self, text: str, allowed_names: Sequence[str] | None = None
    ) -> list[ParagraphView]:
        """Segment and tag the text paragraph by paragraph."""
        vocabulary = document_vocabulary(text)
        views: list[ParagraphView] = []
        for paragraph in split_paragraphs(text):
            tokens = self.tagger.tag(paragraph.text)
            views.append(
                ParagraphView(
                    paragraph=paragraph,
                    tokens=tokens,
                    names=names_in(paragraph.text, tokens, vocabulary, allowed_names),
                    location=find_location(tokens),
                )
            )
        return views

    def __str__(self) -> str:
        return f"{self.name} v{self.version}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}', version='{self.version}')"
