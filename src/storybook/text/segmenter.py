"""Paragraph, scene and sentence segmentation shared by every analyzer."""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

from storybook.text.nlp import sentence_doc

_BLANK_LINES = re.compile(r"\n\s*\n")
_WORD = re.compile(r"\w")


@dataclass(frozen=True)
class Paragraph:
    """A blank-line separated block of text, numbered from 1."""

    number: int
    text: str
    start: int


@dataclass(frozen=True)
class SceneSpan:
    """An inclusive paragraph range treated as one narrative unit."""

    start_paragraph: int
    end_paragraph: int

    def __post_init__(self) -> None:
        if self.start_paragraph > self.end_paragraph:
            raise ValueError(
                f"Scene start {self.start_paragraph} is after end {self.end_paragraph}"
            )

    def __len__(self) -> int:
        return self.end_paragraph - self.start_paragraph + 1

    def select(self, paragraphs: Sequence[Paragraph]) -> list[Paragraph]:
        """Return the paragraphs covered by this span."""
        return [
            p
            for p in paragraphs
            if self.start_paragraph <= p.number <= self.end_paragraph
        ]


def split_paragraphs(text: str) -> list[Paragraph]:
    """Split text on blank lines; empty text gives no paragraphs."""
    text = text.replace("\r\n", "\n")
    paragraphs: list[Paragraph] = []
    position = 0
    for block_match in [*_BLANK_LINES.finditer(text), None]:
        end = block_match.start() if block_match else len(text)
        block = text[position:end]
        stripped = block.strip()
        if stripped:
            offset = position + (len(block) - len(block.lstrip()))
            paragraphs.append(Paragraph(len(paragraphs) + 1, stripped, offset))
        if block_match:
            position = block_match.end()
    return paragraphs


def is_scene_break(paragraph: Paragraph, delimiter: str | None) -> bool:
    """True when the delimiter occurs anywhere in the paragraph."""
    return bool(delimiter) and delimiter in paragraph.text


def scene_breaks(paragraph: Paragraph, delimiter: str | None) -> tuple[bool, bool]:
    """Where the paragraph's delimiters cut the text: (before it, after it).

    A delimiter trailing the paragraph's text closes the scene after the
    paragraph; any other occurrence opens a new scene with the paragraph.
    """
    if not is_scene_break(paragraph, delimiter):
        return False, False
    pieces = paragraph.text.split(delimiter)
    text_before = bool(_WORD.search(pieces[0]))
    text_after = bool(_WORD.search(pieces[-1]))
    return text_after or not text_before, not text_after


def scene_text(paragraph: Paragraph, delimiter: str | None) -> str:
    """Paragraph text with the delimiters cut out."""
    if not delimiter:
        return paragraph.text
    pieces = (piece.strip() for piece in paragraph.text.split(delimiter))
    return "\n".join(piece for piece in pieces if piece)


def split_scenes(
    paragraphs: Sequence[Paragraph],
    delimiter: str | None,
    max_length: int = 40,
    min_length: int = 3,
) -> list[SceneSpan]:
    """Group paragraphs into scenes.

    When the delimiter occurs, the text is cut wherever it appears and empty
    pieces are dropped. Otherwise paragraphs are chunked into scenes of at
    most ``max_length``, folding a short trailing chunk into the one before
    it. Either way the spans cover every paragraph exactly once.
    """
    if not paragraphs:
        return []
    if delimiter and any(is_scene_break(p, delimiter) for p in paragraphs):
        return _delimited_scenes(paragraphs, delimiter)
    return _chunked_scenes(paragraphs, max_length, min_length)


def _delimited_scenes(
    paragraphs: Sequence[Paragraph], delimiter: str
) -> list[SceneSpan]:
    spans: list[SceneSpan] = []
    start = paragraphs[0].number
    has_content = False
    closed = False
    for paragraph in paragraphs:
        opens, closes = scene_breaks(paragraph, delimiter)
        if (opens or closed) and has_content:
            spans.append(SceneSpan(start, paragraph.number - 1))
            start = paragraph.number
            has_content = False
        if _WORD.search(scene_text(paragraph, delimiter)):
            has_content = True
        closed = closes

    end = paragraphs[-1].number
    if has_content or not spans:
        spans.append(SceneSpan(start, end))
    else:
        # A trailing delimiter with nothing after it belongs to the last scene
        spans[-1] = SceneSpan(spans[-1].start_paragraph, end)
    return spans


def _chunked_scenes(
    paragraphs: Sequence[Paragraph], max_length: int, min_length: int
) -> list[SceneSpan]:
    first = paragraphs[0].number
    last = paragraphs[-1].number
    spans = [
        SceneSpan(start, min(start + max_length - 1, last))
        for start in range(first, last + 1, max_length)
    ]
    if len(spans) > 1 and len(spans[-1]) < min_length:
        tail = spans.pop()
        spans[-1] = SceneSpan(spans[-1].start_paragraph, tail.end_paragraph)
    return spans


def split_sentences(text: str) -> list[tuple[int, str]]:
    """Split text into (offset, sentence) pairs with spaCy's sentencizer.

    Abbreviations the tokenizer knows, such as "Dr.", do not end a sentence.
    """
    sentences: list[tuple[int, str]] = []
    if not text.strip():
        return sentences
    for span in sentence_doc(text).sents:
        chunk = span.text
        stripped = chunk.strip()
        if stripped:
            offset = span.start_char + len(chunk) - len(chunk.lstrip())
            sentences.append((offset, stripped))
    return sentences


_WORD_SPAN = re.compile(r"[^\W\d_]+(?:['’][^\W\d_]+)*")


def word_spans(text: str) -> list[tuple[int, str]]:
    """Lowercased words with their character offsets."""
    return [(m.start(), m.group().lower()) for m in _WORD_SPAN.finditer(text)]


def words(text: str) -> list[str]:
    """Lowercased words of the text, in order."""
    return [word for _, word in word_spans(text)]
