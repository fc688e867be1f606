"""spaCy pipelines used for tagging and sentence splitting."""

from __future__ import annotations

import threading
from functools import lru_cache

import spacy
from spacy.language import Language
from spacy.tokens import Doc

from storybook.config import get_logger
from storybook.exceptions import ConfigurationError

logger = get_logger(__name__)

DEFAULT_MODEL = "en_core_web_sm"

# Pipelines are shared by analyzers running on worker threads
_LOCK = threading.Lock()


@lru_cache(maxsize=4)
def load_pipeline(model: str = DEFAULT_MODEL) -> Language:
    """Load a trained spaCy pipeline once per process.

    Raises:
        ConfigurationError: If the model package is not installed
    """
    try:
        nlp = spacy.load(model)
    except OSError as e:
        raise ConfigurationError(
            f"spaCy model '{model}' is not installed",
            hint=f"Install it with: python -m spacy download {model}",
            details={"model": model},
        ) from e
    logger.info("Loaded spaCy pipeline", model=model, components=nlp.pipe_names)
    return nlp


@lru_cache(maxsize=1)
def sentence_pipeline() -> Language:
    """Blank English pipeline with the rule-based sentencizer."""
    nlp = spacy.blank("en")
    nlp.add_pipe("sentencizer")
    return nlp


def parse(text: str, model: str = DEFAULT_MODEL) -> Doc:
    """Run the trained pipeline over ``text``."""
    nlp = load_pipeline(model)
    with _LOCK:
        return nlp(text)


def sentence_doc(text: str) -> Doc:
    """Run the sentencizer over ``text``."""
    nlp = sentence_pipeline()
    with _LOCK:
        return nlp(text)
