"""Fix command: generate function fixes, then print or apply them."""

from __future__ import annotations

import argparse

from swiftgraft.api.cli.commands.common import build_pipeline, print_previews
from swiftgraft.core.config import Config
from swiftgraft.providers.generation import CancellationToken


async def fix_command(
    args: argparse.Namespace, config: Config, token: CancellationToken | None = None
) -> None:
    pipeline = build_pipeline(args, config, token)
    result = await pipeline.fix(args.file, args.targets, goals=args.goals, apply=args.apply)
    if not args.apply:
        print_previews(result, "Fixed")
    print(result.summary())
