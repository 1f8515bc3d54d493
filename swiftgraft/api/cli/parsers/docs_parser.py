"""Docs command argument parser for swiftgraft CLI."""

import argparse
from pathlib import Path
from typing import Any, cast

from swiftgraft.services.prompts import DocumentationStyle


def add_docs_subparser(subparsers: Any) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "docs",
        help="Insert /// documentation comments into a Swift file",
        description=(
            "Document the given declarations (names or full signatures). Without "
            "targets every configured declaration kind in the file is documented."
        ),
    )

    parser.add_argument("file", type=Path, help="Swift file to document")
    parser.add_argument(
        "targets",
        nargs="*",
        help="Declaration names or signatures (default: all declarations)",
    )
    parser.add_argument(
        "--style",
        choices=[s.value for s in DocumentationStyle],
        default=DocumentationStyle.DETAILED.value,
        help="Documentation style (default: detailed)",
    )
    parser.add_argument(
        "--skip-existing",
        action="store_true",
        help="Leave declarations that already have documentation alone",
    )

    return cast(argparse.ArgumentParser, parser)


__all__: list[str] = ["add_docs_subparser"]
