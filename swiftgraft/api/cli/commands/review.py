"""Review command: insert // REVIEW: comments or print them (dry run)."""

from __future__ import annotations

import argparse

from swiftgraft.api.cli.commands.common import build_pipeline
from swiftgraft.core.config import Config
from swiftgraft.providers.generation import CancellationToken


async def review_command(
    args: argparse.Namespace, config: Config, token: CancellationToken | None = None
) -> None:
    pipeline = build_pipeline(args, config, token)
    result = await pipeline.review(
        args.file,
        args.targets,
        skip_existing=args.skip_existing,
        dry_run=args.dry_run,
    )
    if args.dry_run:
        if not result.previews:
            print("No target functions found or no review content generated.")
        else:
            print("----- DRY RUN: generated review blocks (no file changes) -----")
            for signature, review in result.previews:
                print(f"\n// REVIEW: {signature}\n{review}\n")
            print("----- END DRY RUN -----")
    print(result.summary())
