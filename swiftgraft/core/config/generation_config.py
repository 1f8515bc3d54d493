"""Generation configuration for swiftgraft.

This module holds the settings of the external generation bridge: which
binary and model to run, and the retry/timeout policy around each call.
"""

import argparse
import os
from typing import Any

from pydantic import BaseModel, Field, field_validator


class GenerationConfig(BaseModel):
    """Settings for the out-of-process text generator.

    Configuration can be provided via:
    - Environment variables (SWIFTGRAFT_GENERATION__*)
    - Configuration files
    - CLI arguments
    - Default values
    """

    binary: str = Field(default="ollama", description="Generator executable name or path")

    model: str = Field(
        default="qwen2.5-coder:14b", description="Model identifier passed to the generator"
    )

    max_retries: int = Field(
        default=3, gt=0, description="Attempts per request before giving up"
    )

    timeout_seconds: float = Field(
        default=240.0, gt=0, description="Wall-clock timeout for a single attempt"
    )

    backoff_cap_seconds: float = Field(
        default=8.0, ge=0, description="Upper bound of the exponential backoff delay"
    )

    backoff_jitter_seconds: float = Field(
        default=0.5, ge=0, description="Maximum random jitter added to each backoff delay"
    )

    termination_grace_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Time between SIGTERM and SIGKILL when reclaiming a generator process",
    )

    prompt_max_length: int = Field(
        default=120_000, gt=0, description="Maximum prompt length in characters"
    )

    @field_validator("binary", "model")
    def validate_not_blank(cls, v: str) -> str:
        """Reject empty binary/model names."""
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()

    @classmethod
    def add_cli_arguments(cls, parser: argparse.ArgumentParser) -> None:
        """Add generation-related CLI arguments."""
        parser.add_argument(
            "--model",
            help="Model to use (default: from config file or qwen2.5-coder:14b)",
        )

        parser.add_argument(
            "--max-retries",
            type=int,
            help="Attempts per generation request",
        )

        parser.add_argument(
            "--timeout",
            type=float,
            help="Timeout in seconds for a single generation attempt",
        )

    @classmethod
    def load_from_env(cls) -> dict[str, Any]:
        """Load generation config from environment variables."""
        config: dict[str, Any] = {}
        if binary := os.getenv("SWIFTGRAFT_GENERATION__BINARY"):
            config["binary"] = binary
        if model := os.getenv("SWIFTGRAFT_GENERATION__MODEL"):
            config["model"] = model
        if retries := os.getenv("SWIFTGRAFT_GENERATION__MAX_RETRIES"):
            config["max_retries"] = int(retries)
        if timeout := os.getenv("SWIFTGRAFT_GENERATION__TIMEOUT_SECONDS"):
            config["timeout_seconds"] = float(timeout)
        if max_len := os.getenv("SWIFTGRAFT_GENERATION__PROMPT_MAX_LENGTH"):
            config["prompt_max_length"] = int(max_len)
        return config

    @classmethod
    def extract_cli_overrides(cls, args: Any) -> dict[str, Any]:
        """Extract generation config from CLI arguments."""
        overrides: dict[str, Any] = {}
        if getattr(args, "model", None):
            overrides["model"] = args.model
        if getattr(args, "max_retries", None) is not None:
            overrides["max_retries"] = args.max_retries
        if getattr(args, "timeout", None) is not None:
            overrides["timeout_seconds"] = args.timeout
        return overrides

    def __repr__(self) -> str:
        return (
            f"GenerationConfig(binary={self.binary}, model={self.model}, "
            f"max_retries={self.max_retries}, timeout_seconds={self.timeout_seconds})"
        )
