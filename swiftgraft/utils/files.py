"""Source file checks, reading and atomic writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from loguru import logger

from swiftgraft.core.exceptions import SourceFileError

DEFAULT_TESTS_DIRECTORY = "GeneratedTests"


def validate_source_file(path: Path, max_size: int) -> Path:
    """Resolve ``path`` and check it is a readable Swift file within ``max_size`` bytes.

    Raises:
        SourceFileError: If any check fails
    """
    resolved = path.expanduser().resolve()
    if resolved.suffix != ".swift":
        raise SourceFileError(f"Only Swift files (.swift) are supported: {resolved}")
    if not resolved.exists():
        raise SourceFileError(f"File not found: {resolved}")
    if not resolved.is_file():
        raise SourceFileError(f"Not a regular file: {resolved}")
    if not os.access(resolved, os.R_OK):
        raise SourceFileError(f"File is not readable: {resolved}")
    size = resolved.stat().st_size
    if size > max_size:
        raise SourceFileError(
            f"File is too large ({size} bytes, limit {max_size} bytes): {resolved}"
        )
    return resolved


def read_source(path: Path) -> str:
    """Read a UTF-8 source file without newline translation."""
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except UnicodeDecodeError as e:
        raise SourceFileError(f"File is not valid UTF-8: {path}") from e
    except OSError as e:
        raise SourceFileError(f"Cannot read {path}: {e}") from e


def write_atomically(path: Path, text: str) -> None:
    """Write ``text`` to a temp file beside ``path`` and move it into place."""
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o7777)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    logger.debug(f"Wrote {len(text)} characters to {path}")


def resolve_tests_directory(
    source_path: Path, cli_override: str | None = None, configured: str = ""
) -> Path:
    """Pick the output directory for generated tests and create it.

    Precedence: CLI override, then configured directory, then
    ``GeneratedTests/`` beside the source file. Relative paths are taken
    relative to the source file's directory.
    """
    chosen = cli_override or configured or DEFAULT_TESTS_DIRECTORY
    directory = Path(chosen).expanduser()
    if not directory.is_absolute():
        directory = source_path.parent / directory
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise SourceFileError(f"Cannot create tests directory {directory}: {e}") from e
    return directory
