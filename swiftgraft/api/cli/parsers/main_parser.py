"""Top-level argument parser for the swiftgraft CLI."""

import argparse

from swiftgraft import __version__
from swiftgraft.api.cli.parsers.docs_parser import add_docs_subparser
from swiftgraft.api.cli.parsers.explain_parser import add_explain_subparser
from swiftgraft.api.cli.parsers.fix_parser import add_fix_subparser
from swiftgraft.api.cli.parsers.review_parser import add_review_subparser
from swiftgraft.api.cli.parsers.test_parser import add_test_subparser
from swiftgraft.core.config import Config


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Options every subcommand accepts."""
    Config.add_cli_arguments(parser)
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not show a spinner while waiting for the model",
    )


def create_main_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="swiftgraft",
        description="Insert AI-generated docs, reviews, fixes and tests into Swift sources",
    )
    parser.add_argument("--version", action="version", version=f"swiftgraft {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    for add in (
        add_docs_subparser,
        add_review_subparser,
        add_fix_subparser,
        add_explain_subparser,
        add_test_subparser,
    ):
        add_common_arguments(add(subparsers))
    return parser


__all__: list[str] = ["add_common_arguments", "create_main_parser"]
