"""Spinner shown while a generation call is outstanding.

Purely observational: it never touches the call it wraps and renders on
stderr so stdout stays clean for command output.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn


def create_progress(enabled: bool = True) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        transient=True,
        disable=not enabled,
    )


@contextmanager
def spinner(description: str, enabled: bool = True) -> Iterator[None]:
    with create_progress(enabled) as progress:
        progress.add_task(description, total=None)
        yield
