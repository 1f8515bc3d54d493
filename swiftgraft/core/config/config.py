"""Top-level configuration for swiftgraft.

Precedence (lowest to highest): defaults, JSON config file, environment
variables, CLI arguments. The config file is ``.swiftgraft.json``; unless
given explicitly it is searched for upward from the working directory.
"""

from __future__ import annotations

import argparse
import json
import os
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator

from swiftgraft.core.config.generation_config import GenerationConfig
from swiftgraft.core.exceptions import ConfigurationError
from swiftgraft.core.models.declaration import DECLARATION_KEYWORDS

CONFIG_FILE_NAME = ".swiftgraft.json"


class Config(BaseModel):
    """Complete swiftgraft configuration."""

    generation: GenerationConfig = Field(default_factory=GenerationConfig)

    documentation_declarations: list[str] = Field(
        default_factory=lambda: ["func", "class", "struct", "init", "enum", "protocol"],
        description="Declaration keywords that receive generated documentation",
    )

    tests_directory: str = Field(
        default="", description="Where generated test files go (relative to the source file)"
    )

    max_file_size_mb: int = Field(default=1, gt=0, description="Largest source file accepted")

    @field_validator("documentation_declarations")
    def validate_declarations(cls, v: list[str]) -> list[str]:
        """Only Swift declaration keywords are meaningful here."""
        unknown = [k for k in v if k not in DECLARATION_KEYWORDS]
        if unknown:
            raise ValueError(
                f"Unknown declaration keywords: {unknown}. "
                f"Must be among {sorted(DECLARATION_KEYWORDS)}"
            )
        if not v:
            raise ValueError("At least one declaration keyword is required")
        return v

    @property
    def max_file_size(self) -> int:
        """Maximum source size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @classmethod
    def add_cli_arguments(cls, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--config",
            type=Path,
            help=f"Path to a JSON config file (default: nearest {CONFIG_FILE_NAME})",
        )
        GenerationConfig.add_cli_arguments(parser)

    @classmethod
    def load_from_env(cls) -> dict[str, Any]:
        config: dict[str, Any] = {}
        generation = GenerationConfig.load_from_env()
        if generation:
            config["generation"] = generation
        if declarations := os.getenv("SWIFTGRAFT_DOCUMENTATION_DECLARATIONS"):
            config["documentation_declarations"] = [
                d.strip() for d in declarations.split(",") if d.strip()
            ]
        if tests_dir := os.getenv("SWIFTGRAFT_TESTS_DIRECTORY"):
            config["tests_directory"] = tests_dir
        return config

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        args: Any | None = None,
        start_dir: Path | None = None,
    ) -> Config:
        """Build the effective configuration.

        Args:
            config_path: Explicit config file; must exist when given
            args: Parsed CLI namespace supplying overrides
            start_dir: Directory the upward config search starts from

        Raises:
            ConfigurationError: On unreadable/invalid files or invalid values
        """
        if config_path is None and args is not None:
            config_path = getattr(args, "config", None)

        data: dict[str, Any] = {}
        if config_path is not None:
            if not Path(config_path).is_file():
                raise ConfigurationError(f"Config file not found: {config_path}")
            data = _read_config_file(Path(config_path))
        else:
            found = find_config_file(start_dir or Path.cwd())
            if found is not None:
                logger.debug(f"Using config file {found}")
                data = _read_config_file(found)
            else:
                logger.debug("No config file found, using defaults")

        try:
            _deep_merge(data, cls.load_from_env())
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment override: {e}") from e
        if args is not None:
            overrides = GenerationConfig.extract_cli_overrides(args)
            if overrides:
                _deep_merge(data, {"generation": overrides})

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def find_config_file(start_dir: Path, file_name: str = CONFIG_FILE_NAME) -> Path | None:
    """Search ``start_dir`` and its parents for ``file_name``."""
    current = start_dir.resolve()
    while True:
        candidate = current / file_name
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def _read_config_file(path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Failed to read config file {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")
    return raw


def _deep_merge(base: dict[str, Any], extra: dict[str, Any]) -> None:
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
