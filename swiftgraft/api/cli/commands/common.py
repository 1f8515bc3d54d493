"""Helpers shared by CLI commands."""

from __future__ import annotations

import argparse

from swiftgraft.core.config import Config
from swiftgraft.providers.generation import CancellationToken, OllamaCLIGenerator
from swiftgraft.services.pipeline import Pipeline, RunResult


def build_pipeline(
    args: argparse.Namespace, config: Config, token: CancellationToken | None = None
) -> Pipeline:
    generator = OllamaCLIGenerator(config.generation)
    return Pipeline(
        config,
        generator,
        token=token,
        show_progress=not getattr(args, "no_progress", False),
    )


def print_previews(result: RunResult, header: str) -> None:
    for signature, text in result.previews:
        print(f"{header} {signature}:\n")
        print(text)
        print("\n" + "-" * 60 + "\n")
