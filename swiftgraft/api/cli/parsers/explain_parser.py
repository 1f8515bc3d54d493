"""Explain command argument parser for swiftgraft CLI."""

import argparse
from pathlib import Path
from typing import Any, cast


def add_explain_subparser(subparsers: Any) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "explain",
        help="Explain a single Swift function",
        description="Print a plain-text explanation of one function.",
    )

    parser.add_argument("file", type=Path, help="Swift file containing the function")
    parser.add_argument("target", help="Function name or full signature")

    return cast(argparse.ArgumentParser, parser)


__all__: list[str] = ["add_explain_subparser"]
