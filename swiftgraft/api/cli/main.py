"""Entry point of the swiftgraft command line."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from collections.abc import Awaitable, Callable

from loguru import logger

from swiftgraft.api.cli.commands.docs import docs_command
from swiftgraft.api.cli.commands.explain import explain_command
from swiftgraft.api.cli.commands.fix import fix_command
from swiftgraft.api.cli.commands.review import review_command
from swiftgraft.api.cli.commands.test import test_command
from swiftgraft.api.cli.parsers.main_parser import create_main_parser
from swiftgraft.core.config import Config
from swiftgraft.core.exceptions import SwiftGraftError
from swiftgraft.providers.generation import CancellationToken

Command = Callable[[argparse.Namespace, Config, CancellationToken], Awaitable[None]]

COMMANDS: dict[str, Command] = {
    "docs": docs_command,
    "review": review_command,
    "fix": fix_command,
    "explain": explain_command,
    "test": test_command,
}

EXIT_FAILURE = 1
EXIT_UNEXPECTED = 2


def setup_logging(verbose: bool = False) -> None:
    """Route loguru output to stderr; stdout is reserved for command output."""
    logger.remove()
    if verbose:
        logger.add(
            sys.stderr,
            level="DEBUG",
            format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        )
    else:
        logger.add(sys.stderr, level="WARNING", format="<level>{level}</level>: {message}")


async def run_command(args: argparse.Namespace, config: Config) -> None:
    token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
        loop.add_signal_handler(signal.SIGTERM, token.cancel)
    except NotImplementedError:
        # no loop signal handlers on this platform; Ctrl-C raises KeyboardInterrupt instead
        pass
    await COMMANDS[args.command](args, config, token)


def main(argv: list[str] | None = None) -> int:
    parser = create_main_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = Config.load(args=args)
        logger.debug(f"Effective generation config: {config.generation!r}")
        asyncio.run(run_command(args, config))
    except SwiftGraftError as e:
        print(f"Failed, no changes written: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except ValueError as e:
        print(f"Invalid arguments: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("Interrupted, no changes written", file=sys.stderr)
        return EXIT_FAILURE
    except Exception:
        logger.exception("Unexpected error")
        return EXIT_UNEXPECTED
    return 0


if __name__ == "__main__":
    sys.exit(main())
