"""Pytest configuration and fixtures."""

import re

import pytest
from typer.testing import CliRunner

from storybook.config import StorybookSettings, reset_settings, set_settings

_ANSI = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def strip_ansi_codes(text: str) -> str:
    """Strip ANSI escape sequences from CLI output."""
    return _ANSI.sub("", text)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test against default settings, unaffected by the environment."""
    for name in ("STORYBOOK_LOG_LEVEL", "STORYBOOK_DEBUG", "STORYBOOK_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    set_settings(StorybookSettings())
    yield
    reset_settings()


@pytest.fixture
def settings() -> StorybookSettings:
    """Default settings instance."""
    return StorybookSettings()


@pytest.fixture
def runner() -> CliRunner:
    """Typer CLI runner."""
    return CliRunner()


@pytest.fixture
def clean_output():
    """Return a function that strips ANSI codes from CLI output."""
    return strip_ansi_codes


@pytest.fixture
def kitchen_story() -> str:
    """Two paragraphs where Bob leaves and Alice stays."""
    return "Alice entered the kitchen.\n\nBob left the kitchen. Alice smiled."


@pytest.fixture
def missing_return_story() -> str:
    """Alice leaves in paragraph 3 and acts again in paragraph 5."""
    return "\n\n".join(
        [
            "Alice entered the kitchen.",
            "Bob stirred the soup.",
            "Alice left the house.",
            "Bob waited alone.",
            "Alice picked up the knife.",
        ]
    )


@pytest.fixture
def three_scene_story() -> str:
    """Three scenes of rising fear separated by the default delimiter."""
    return "\n\n".join(
        [
            "The room was quiet and the clock ticked on the wall.",
            "***",
            "She felt a flicker of fear in the quiet room.",
            "***",
            "Terror! Panic and horror and dread filled her.",
        ]
    )


@pytest.fixture
def dialogue_story() -> str:
    """Three exchanges, the last one without a speaker."""
    return "\n\n".join(
        [
            '"Where were you?" Bob asked.',
            '"Out," Alice replied.',
            '"Somewhere."',
        ]
    )


@pytest.fixture
def shadow_story() -> str:
    """'the shadow' five times within twenty words."""
    return (
        "The shadow moved. The shadow grew. The shadow fell. "
        "The shadow waited. The shadow spoke."
    )


@pytest.fixture
def reader_profile() -> dict:
    """An average adult reader."""
    return {
        "age": 35,
        "educationLevel": "undergraduate",
        "readingSpeed": "average",
        "attentionSpan": "medium",
        "interests": [],
        "genre_preferences": [],
        "language_proficiency": "native",
    }
