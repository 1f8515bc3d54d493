"""Fix command argument parser for swiftgraft CLI."""

import argparse
from pathlib import Path
from typing import Any, cast


def add_fix_subparser(subparsers: Any) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "fix",
        help="AI-assisted fixes for Swift functions",
        description=(
            "Generate minimal fixes (memory, threading, error handling) for the "
            "given functions. Results are printed unless --apply is given."
        ),
    )

    parser.add_argument("file", type=Path, help="Swift file to fix")
    parser.add_argument(
        "targets",
        nargs="*",
        help="Function names or full signatures (default: all functions)",
    )
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply fixes to the source file in place",
    )
    parser.add_argument(
        "--goals",
        help="High-level goals, e.g. 'avoid retain cycles; main-thread UI'",
    )

    return cast(argparse.ArgumentParser, parser)


__all__: list[str] = ["add_fix_subparser"]
