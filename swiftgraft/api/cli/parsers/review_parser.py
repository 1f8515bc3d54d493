"""Review command argument parser for swiftgraft CLI."""

import argparse
from pathlib import Path
from typing import Any, cast


def add_review_subparser(subparsers: Any) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "review",
        help="Insert // REVIEW: comments above selected functions",
        description="Review selected Swift functions and insert inline review comments.",
    )

    parser.add_argument("file", type=Path, help="Swift file to review")
    parser.add_argument(
        "targets",
        nargs="+",
        help="Functions to review (name or full signature)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generated review blocks without modifying the file",
    )
    parser.add_argument(
        "--no-skip-existing",
        dest="skip_existing",
        action="store_false",
        help="Review functions even if they already carry a REVIEW comment",
    )

    return cast(argparse.ArgumentParser, parser)


__all__: list[str] = ["add_review_subparser"]
