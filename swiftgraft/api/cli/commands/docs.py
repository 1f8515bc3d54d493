"""Docs command: insert /// documentation into a Swift file."""

from __future__ import annotations

import argparse

from swiftgraft.api.cli.commands.common import build_pipeline
from swiftgraft.core.config import Config
from swiftgraft.providers.generation import CancellationToken
from swiftgraft.services.prompts import DocumentationStyle


async def docs_command(
    args: argparse.Namespace, config: Config, token: CancellationToken | None = None
) -> None:
    pipeline = build_pipeline(args, config, token)
    result = await pipeline.insert_docs(
        args.file,
        args.targets,
        style=DocumentationStyle(args.style),
        skip_existing=args.skip_existing,
    )
    print(result.summary())
