"""Text segmentation, tagging and entity helpers shared by the analyzers."""

from storybook.text.segmenter import Paragraph, SceneSpan, split_paragraphs, split_scenes
from storybook.text.tagger import SpacyTagger, Tagger, Token, TokenRole

__all__ = [
    "Paragraph",
    "SceneSpan",
    "SpacyTagger",
    "Tagger",
    "Token",
    "TokenRole",
    "split_paragraphs",
    "split_scenes",
]
