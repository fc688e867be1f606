"""Exception hierarchy for the narrative analysis engine."""

from __future__ import annotations

from typing import Any


class StorybookError(Exception):
    """Base exception for all engine errors.

    Carries a primary message plus an optional hint and a details mapping so
    the CLI and the tool layer can render something actionable.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details."""
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class ConfigurationError(StorybookError):
    """Invalid settings or unreadable configuration files."""


class ValidationError(StorybookError):
    """Input validation errors, such as a malformed reader profile."""


class AnalyzerError(StorybookError):
    """Base class for analyzer failures."""


class AnalyzerExecutionError(AnalyzerError):
    """An analyzer raised while processing a manuscript."""

    def __init__(
        self,
        message: str,
        analyzer: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.analyzer = analyzer
        self.cause = cause
        merged = {"analyzer": analyzer}
        if cause is not None:
            merged["cause"] = f"{type(cause).__name__}: {cause}"
        if details:
            merged.update(details)
        super().__init__(message, hint=hint, details=merged)


class ThoughtSequenceError(StorybookError):
    """A sequential-thinking step failed validation."""


# Keys people commonly write instead of the real setting names
_CONFIG_KEY_CORRECTIONS = {
    "delimiter": "scene_delimiter",
    "scene_separator": "scene_delimiter",
    "min_repetitions": "repetition_min_count",
    "repetition_threshold": "repetition_min_count",
    "window": "repetition_window",
    "proximity_window": "repetition_window",
    "loglevel": "log_level",
    "log": "log_level",
    "logging_level": "log_level",
    "verbose": "debug",
    "spacy_model": "nlp_model",
}


def check_config_keys(config: dict[str, Any]) -> None:
    """Raise ConfigurationError when a config mapping uses a known-wrong key.

    Args:
        config: Raw mapping loaded from a configuration file

    Raises:
        ConfigurationError: If a key matches a common misspelling
    """
    for wrong_key, correct_key in _CONFIG_KEY_CORRECTIONS.items():
        if wrong_key in config and correct_key not in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong_key}'",
                hint=f"Did you mean '{correct_key}'?",
                details={"found": wrong_key, "expected": correct_key},
            )
