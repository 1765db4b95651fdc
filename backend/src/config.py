"""
Recognizer configuration for pagelens.

Provides Pydantic-validated settings for the recognition pipeline and the
tree walker, loadable from YAML files and ``PAGELENS_*`` environment variables.
"""

from __future__ import annotations

import os
from enum import StrEnum
from functools import cached_property
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or validated."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Invalid configuration in {path}: {reason}")


class HTMLParser(StrEnum):
    """BeautifulSoup tree builders the walker may use."""

    HTML_PARSER = "html.parser"
    LXML = "lxml"
    HTML5LIB = "html5lib"


class RecognizerConfig(BaseModel):
    """Configuration for component recognition and tree walking."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    manual_review_threshold: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Results below this confidence are flagged for manual review",
    )
    enable_boosting: bool = Field(
        default=True,
        description="Run the confidence booster after pattern matching",
    )
    enable_cross_validation: bool = Field(
        default=True,
        description="Run the cross validator after boosting",
    )
    max_validation_adjustment: int = Field(
        default=10,
        ge=0,
        le=50,
        description="Largest net confidence change the cross validator may apply",
    )
    style_concurrency: int = Field(
        default=16,
        ge=1,
        le=256,
        description="Maximum concurrent style extractions during a walk",
    )
    html_parser: HTMLParser = Field(
        default=HTMLParser.HTML_PARSER,
        description="BeautifulSoup tree builder used to parse documents",
    )
    min_confidence: int = Field(
        default=0,
        ge=0,
        le=100,
        description="Elements below this confidence are omitted from CLI output",
    )


class RecognizerSettings(BaseSettings):
    """Environment-based settings loader for recognizer configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PAGELENS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    manual_review_threshold: int = 70
    enable_boosting: bool = True
    enable_cross_validation: bool = True
    max_validation_adjustment: int = 10
    style_concurrency: int = 16
    html_parser: str = HTMLParser.HTML_PARSER.value
    min_confidence: int = 0

    config_file: Path | None = None

    @cached_property
    def config(self) -> RecognizerConfig:
        """Build RecognizerConfig from the environment and optional file."""
        file_config: dict[str, Any] = {}
        if self.config_file and self.config_file.exists():
            file_config = _read_yaml(self.config_file)

        merged = {
            name: getattr(self, name) for name in RecognizerConfig.model_fields
        }
        # Explicitly set environment variables win over the file
        for name, value in file_config.items():
            if name not in self.model_fields_set:
                merged[name] = value

        return _build_config(merged, self.config_file or "<environment>")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(path, str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError(path, "top-level YAML value must be a mapping")
    # Allow the settings to live under a `recognizer:` section
    section = data.get("recognizer", data)
    if not isinstance(section, dict):
        raise ConfigError(path, "`recognizer` must be a mapping")
    return section


def _build_config(data: dict[str, Any], source: Path | str) -> RecognizerConfig:
    try:
        return RecognizerConfig(**data)
    except ValidationError as e:
        raise ConfigError(source, str(e)) from e


def load_recognizer_config(
    config_file: Path | str | None = None,
    env_override: bool = True,
) -> RecognizerConfig:
    """
    Load recognizer configuration from file and/or environment.

    Priority (highest to lowest):
    1. Environment variables (if env_override=True)
    2. Config file (explicit, then $PAGELENS_CONFIG, then standard locations)
    3. Defaults

    Args:
        config_file: Optional path to YAML config file
        env_override: Whether environment variables override file config

    Returns:
        Complete RecognizerConfig instance

    Raises:
        ConfigError: If a config file exists but cannot be parsed or validated
    """
    candidates: list[Path] = []
    if config_file:
        candidates.append(Path(config_file))
    if env_path := os.getenv("PAGELENS_CONFIG"):
        candidates.append(Path(env_path))
    candidates.extend(
        [
            Path("pagelens.yaml"),
            Path("pagelens.yml"),
            Path.home() / ".pagelens" / "config.yaml",
        ]
    )

    resolved = next((p for p in candidates if p.exists()), None)

    if env_override:
        return RecognizerSettings(config_file=resolved).config

    if resolved is not None:
        return _build_config(_read_yaml(resolved), resolved)

    return RecognizerConfig()
