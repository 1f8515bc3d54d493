"""Test command argument parser for swiftgraft CLI."""

import argparse
from pathlib import Path
from typing import Any, cast


def add_test_subparser(subparsers: Any) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(
        "test",
        help="Generate XCTest files for Swift functions",
        description=(
            "Write one <File>_<function>Tests.swift per function into the tests "
            "directory (--output, then config tests_directory, then GeneratedTests/)."
        ),
    )

    parser.add_argument("file", type=Path, help="Swift file to generate tests for")
    parser.add_argument(
        "targets",
        nargs="*",
        help="Function names or signatures (default: all functions)",
    )
    parser.add_argument("-p", "--prompt", help="Extra instructions for the model")
    parser.add_argument("-o", "--output", help="Output directory for generated tests")

    return cast(argparse.ArgumentParser, parser)


__all__: list[str] = ["add_test_subparser"]
