"""Cancellation token for generator invocations.

The token is created by the caller and passed into a generation call. It
holds the reference to the child process of the attempt currently running,
so cancellation state belongs to one invocation and never to a shared
generator instance. The token only signals; the attempt that spawned a
process is the one that reclaims it, so a cancel can never hit a newer,
unrelated process.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any

from swiftgraft.core.exceptions import GenerationCancelledError


class CancellationToken:
    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._lock = threading.Lock()
        self._process: Any | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Request cancellation. Must be called from the event loop thread."""
        self._event.set()

    async def wait(self) -> None:
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise GenerationCancelledError()

    # ----- current process -----

    @property
    def current_process(self) -> Any | None:
        with self._lock:
            return self._process

    def attach(self, process: Any) -> None:
        with self._lock:
            if self._process is not None and self._process is not process:
                raise RuntimeError("Cancellation token already owns a running process")
            self._process = process

    def detach(self, process: Any) -> None:
        """Clear the process reference if it still points at ``process``."""
        with self._lock:
            if self._process is process:
                self._process = None
