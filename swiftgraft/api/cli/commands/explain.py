"""Explain command: print an explanation of one function."""

from __future__ import annotations

import argparse

from swiftgraft.api.cli.commands.common import build_pipeline
from swiftgraft.core.config import Config
from swiftgraft.providers.generation import CancellationToken


async def explain_command(
    args: argparse.Namespace, config: Config, token: CancellationToken | None = None
) -> None:
    pipeline = build_pipeline(args, config, token)
    signature, explanation = await pipeline.explain(args.file, args.target)
    print(f"Explanation for: {signature}\n")
    print(explanation)
