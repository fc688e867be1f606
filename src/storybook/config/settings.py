"""Storybook configuration settings."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, cast

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from storybook.exceptions import ConfigurationError, check_config_keys


class StorybookSettings(BaseSettings):
    """Engine configuration.

    Settings are loaded with the following precedence (highest to lowest):
    1. CLI arguments (when provided via command flags)
    2. Config file values (YAML, TOML, or JSON), later files override earlier
    3. Environment variables prefixed with STORYBOOK_
       Example: export STORYBOOK_REPETITION_WINDOW=80
    4. .env file in the current directory
    5. Default values below

    The analyzer thresholds are tuned heuristics. Only their relative
    ordering (high > medium > low severity) is meaningful.
    """

    model_config = SettingsConfigDict(
        env_prefix="STORYBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Debug settings
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Logging settings
    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        pattern="^(?i)(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="console",
        description="Log output format (console, json, structured)",
        pattern="^(?i)(console|json|structured)$",
    )
    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # Language processing
    nlp_model: str = Field(
        default="en_core_web_sm",
        description="spaCy pipeline used for tagging and name detection",
        min_length=1,
    )

    # Segmentation
    scene_delimiter: str = Field(
        default="***",
        description="Literal marker separating scenes",
        min_length=1,
    )
    max_scene_paragraphs: int = Field(
        default=40,
        description="Longest scene built when the text carries no delimiter",
        ge=1,
    )
    min_scene_paragraphs: int = Field(
        default=3,
        description="Trailing undelimited chunks shorter than this are merged back",
        ge=1,
    )

    # Emotional scoring
    emotion_highpoint_threshold: float = Field(
        default=3.0,
        description="Dominant-axis intensity (hits per 100 words) for a high point",
        ge=0.0,
    )
    pacing_flat_ratio: float = Field(
        default=0.25,
        description="Scene magnitude below this share of its neighbours is flat",
        gt=0.0,
        le=1.0,
    )
    pacing_spike_ratio: float = Field(
        default=3.0,
        description="Scene magnitude above this multiple of the previous is a spike",
        gt=1.0,
    )

    # Dialogue
    dialogue_attribution_distance: int = Field(
        default=80,
        description="Maximum characters between a quote and an unverbed name",
        ge=0,
    )
    dialogue_long_segment: int = Field(
        default=200,
        description="Quoted span length that triggers a break-up suggestion",
        ge=1,
    )
    dialogue_run_length: int = Field(
        default=4,
        description="Consecutive dialogue-only paragraphs flagged as lacking beats",
        ge=2,
    )
    dialogue_dominance_share: float = Field(
        default=0.7,
        description="Share of lines above which one speaker dominates",
        gt=0.0,
        le=1.0,
    )

    # Repetition
    repetition_min_count: int = Field(
        default=3,
        description="Minimum occurrences inside the proximity window",
        ge=2,
    )
    repetition_window: int = Field(
        default=50,
        description="Proximity window size in word tokens",
        ge=2,
    )
    repetition_max_contexts: int = Field(
        default=10,
        description="Maximum context samples stored per repetition",
        ge=1,
    )
    repetition_context_width: int = Field(
        default=50,
        description="Characters captured on each side of a repeated term",
        ge=0,
    )

    # Reader simulation
    skim_attention_threshold: float = Field(
        default=0.35,
        description="Attention below this starts counting toward skimming",
        ge=0.0,
        le=1.0,
    )
    skim_sustain_paragraphs: int = Field(
        default=2,
        description="Consecutive low-attention paragraphs before skimming starts",
        ge=1,
    )
    skim_recovery_margin: float = Field(
        default=0.1,
        description="Attention must exceed the threshold by this much to stop skimming",
        ge=0.0,
        le=1.0,
    )
    long_skim_paragraphs: int = Field(
        default=3,
        description="Skimmed run length that triggers a pacing suggestion",
        ge=1,
    )
    low_comprehension_threshold: float = Field(
        default=0.4,
        description="Comprehension below this counts as struggling",
        ge=0.0,
        le=1.0,
    )
    low_comprehension_paragraphs: int = Field(
        default=3,
        description="Run length of low comprehension that triggers a suggestion",
        ge=1,
    )

    @field_validator("log_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        """Expand environment variables and ~ in path settings."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(os.path.expandvars(v)).expanduser().resolve()
        if isinstance(v, Path):
            return v.resolve()
        raise ValueError(
            f"Path fields must be str or Path, got {type(v).__name__}: {v!r}"
        )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> str:
        """Normalize log level to uppercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.upper()
        raise ValueError(f"log_level must be a string, got {type(v).__name__}")

    @field_validator("log_format", mode="before")
    @classmethod
    def normalize_log_format(cls, v: Any) -> str:
        """Normalize log format to lowercase for case-insensitive handling."""
        if isinstance(v, str):
            return v.lower()
        raise ValueError(f"log_format must be a string, got {type(v).__name__}")

    @classmethod
    def from_env(cls) -> StorybookSettings:
        """Create settings from environment variables."""
        return cls()

    @classmethod
    def from_file(cls, config_path: Path | str) -> StorybookSettings:
        """Load settings from a configuration file.

        Args:
            config_path: Path to configuration file (YAML, TOML, or JSON).

        Returns:
            Settings loaded from the file.

        Raises:
            ConfigurationError: If the format is unsupported or a key is wrong.
            FileNotFoundError: If config file doesn't exist.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        suffix = config_path.suffix.lower()
        if suffix in {".yml", ".yaml"}:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        elif suffix == ".toml":
            with config_path.open("rb") as f:
                data = tomllib.load(f)
        elif suffix == ".json":
            with config_path.open(encoding="utf-8") as f:
                data = json.load(f)
        else:
            raise ConfigurationError(
                message=f"Unsupported configuration file format: {suffix}",
                hint="Use one of the supported formats: .yml, .yaml, .toml, or .json",
                details={
                    "file": str(config_path),
                    "supported_formats": [".yml", ".yaml", ".toml", ".json"],
                },
            )

        check_config_keys(data)
        return cls(**data)

    @classmethod
    def from_multiple_sources(
        cls,
        config_files: list[Path | str] | None = None,
        env_file: Path | str | None = None,
        cli_args: dict[str, Any] | None = None,
    ) -> StorybookSettings:
        """Load settings with proper precedence from multiple sources.

        Args:
            config_files: Config files to load (later files override earlier).
            env_file: Path to a .env file.
            cli_args: CLI arguments; None values are ignored.

        Returns:
            Merged settings from all sources.
        """
        data: dict[str, Any] = {}
        for config_file in config_files or []:
            # Only explicitly set keys so file defaults do not mask env vars
            data.update(cls.from_file(config_file).model_dump(exclude_unset=True))

        if env_file:
            settings = cast(
                "StorybookSettings", cast(Any, cls)(_env_file=env_file, **data)
            )
        else:
            settings = cls(**data)

        cli_data = {k: v for k, v in (cli_args or {}).items() if v is not None}
        if cli_data:
            updated = settings.model_dump()
            updated.update(cli_data)
            settings = cls(**updated)
        return settings


# Global settings instance
_settings: StorybookSettings | None = None


def _get_config_paths() -> list[Path | str]:
    """Return the standard config files that exist, lowest priority first."""
    potential_paths = [
        Path.home() / ".config" / "storybook" / "config.yaml",
        Path.home() / ".config" / "storybook" / "config.toml",
        Path.cwd() / "storybook.yaml",
        Path.cwd() / "storybook.toml",
        Path.cwd() / "storybook.json",
    ]
    existing: list[Path | str] = []
    for path in potential_paths:
        try:
            if path.is_file():
                existing.append(path)
        except OSError:
            continue
    return existing


def get_settings() -> StorybookSettings:
    """Get the global settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        config_paths = _get_config_paths()
        if config_paths:
            _settings = StorybookSettings.from_multiple_sources(
                config_files=config_paths
            )
        else:
            _settings = StorybookSettings.from_env()
    return _settings


def set_settings(settings: StorybookSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings


def clear_settings_cache() -> None:
    """Force get_settings() to re-read environment and files on next call."""
    global _settings
    _settings = None


def reset_settings() -> None:
    """Reset the global settings instance."""
    clear_settings_cache()


def get_settings_for_cli(
    config_file: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> StorybookSettings:
    """Get settings for CLI commands with consistent precedence.

    Args:
        config_file: Optional specific config file to load.
        cli_overrides: CLI argument overrides; None values are skipped.

    Returns:
        StorybookSettings with all sources merged.

    Raises:
        FileNotFoundError: If config_file is given but doesn't exist.
    """
    if config_file:
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_file}")
        return StorybookSettings.from_multiple_sources(
            config_files=[config_file], cli_args=cli_overrides
        )

    settings = get_settings()
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    if overrides:
        data = settings.model_dump()
        data.update(overrides)
        settings = StorybookSettings(**data)
    return settings
