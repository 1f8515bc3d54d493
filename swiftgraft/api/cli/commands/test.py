"""Test command: write generated XCTest files."""

from __future__ import annotations

import argparse

from swiftgraft.api.cli.commands.common import build_pipeline
from swiftgraft.core.config import Config
from swiftgraft.providers.generation import CancellationToken


async def test_command(
    args: argparse.Namespace, config: Config, token: CancellationToken | None = None
) -> None:
    pipeline = build_pipeline(args, config, token)
    result = await pipeline.generate_tests(
        args.file, args.targets, output=args.output, custom_prompt=args.prompt
    )
    for path in result.files:
        print(f"Tests written to {path}")
    if not result.files:
        print(f"No test files written for {result.path}")
