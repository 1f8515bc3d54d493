"""Ollama CLI generator for swiftgraft.

Wraps ``ollama run <model>`` as an out-of-process text generator with
bounded retries, a hard per-attempt timeout and two-phase process
shutdown. Never writes to stdout; output is only returned to the caller.
"""

from __future__ import annotations

import asyncio
import random
import shutil
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from swiftgraft.core.config.generation_config import GenerationConfig
from swiftgraft.core.exceptions import (
    GenerationCancelledError,
    GeneratorExecutionError,
    GeneratorNotInstalledError,
    GeneratorTimeoutError,
    ModelMissingError,
)
from swiftgraft.interfaces.text_generator import TextGenerator
from swiftgraft.providers.generation.cancellation import CancellationToken

READ_CHUNK_SIZE = 64 * 1024


class OllamaCLIGenerator(TextGenerator):
    """Generator that shells out to the Ollama CLI.

    Notes
    - The prompt is written to stdin, which is then closed; the CLI only
      starts answering once it sees end-of-input.
    - stdout and stderr are drained concurrently so a full pipe buffer on
      either side can never stall the child.
    - Each attempt races the child against a timer; the loser is cancelled.
    - Attempts are strictly sequential: the next one starts only after the
      previous child has been reclaimed.
    """

    # Timeouts used by the pre-flight checks (seconds)
    MODEL_CHECK_TIMEOUT = 15

    def __init__(
        self,
        config: GenerationConfig | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: random.Random | None = None,
        verify_model: bool = True,
    ) -> None:
        self._config = config or GenerationConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self._verify_model = verify_model

        # Usage accounting
        self._requests_made = 0
        self._attempts_made = 0
        self._failed_attempts = 0

    @property
    def name(self) -> str:  # pragma: no cover - trivial
        return "ollama-cli"

    @property
    def model(self) -> str:
        return self._config.model

    @property
    def attempts_made(self) -> int:
        return self._attempts_made

    # ----- Public -----

    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> str:
        """Send ``prompt`` to the model and return its trimmed output.

        Raises:
            GeneratorNotInstalledError: The binary is not on PATH
            ModelMissingError: The model is not available locally
            GeneratorExecutionError: Last attempt exited non-zero
            GeneratorTimeoutError: Last attempt timed out
            GenerationCancelledError: The token was cancelled
        """
        model = model or self._config.model
        token = token or CancellationToken()

        binary = self._resolve_binary()
        if self._verify_model:
            await self._ensure_model_exists(binary, model)

        self._requests_made += 1
        logger.info(f"Sending prompt to {self.name} (model: {model}, length: {len(prompt)})")

        max_retries = self._config.max_retries
        last_error: Exception | None = None
        for attempt in range(1, max_retries + 1):
            token.raise_if_cancelled()
            try:
                output = await self._run_attempt(binary, prompt, model, token)
                logger.info(f"Received response from {self.name} on attempt {attempt}")
                return output
            except (GeneratorExecutionError, GeneratorTimeoutError) as e:
                last_error = e
                self._failed_attempts += 1
                logger.warning(f"{self.name} attempt {attempt} failed: {e}")
                if attempt < max_retries:
                    delay = self.backoff_delay(attempt)
                    logger.info(f"Retrying in {delay:.2f}s...")
                    await self._sleep(delay)

        assert last_error is not None
        raise last_error

    def backoff_delay(self, attempt: int) -> float:
        """Delay before the attempt after ``attempt`` (1-based)."""
        base = min(self._config.backoff_cap_seconds, float(2 ** (attempt - 1)))
        return base + self._rng.uniform(0, self._config.backoff_jitter_seconds)

    def get_usage_stats(self) -> dict[str, Any]:
        return {
            "requests_made": self._requests_made,
            "attempts_made": self._attempts_made,
            "failed_attempts": self._failed_attempts,
        }

    # ----- Validation -----

    def _resolve_binary(self) -> str:
        resolved = shutil.which(self._config.binary)
        if resolved is None:
            raise GeneratorNotInstalledError(self._config.binary)
        return resolved

    async def _ensure_model_exists(self, binary: str, model: str) -> None:
        """Run ``<binary> show <model>``; any failure means the model is missing."""
        proc = await asyncio.create_subprocess_exec(
            binary,
            "show",
            model,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self.MODEL_CHECK_TIMEOUT
            )
        except asyncio.TimeoutError:
            await self._reclaim(proc)
            raise GeneratorTimeoutError(self.MODEL_CHECK_TIMEOUT) from None
        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            logger.debug(f"Model check for {model} failed: {detail}")
            raise ModelMissingError(model)

    # ----- One attempt -----

    async def _run_attempt(
        self, binary: str, prompt: str, model: str, token: CancellationToken
    ) -> str:
        timeout = self._config.timeout_seconds
        self._attempts_made += 1

        proc = await asyncio.create_subprocess_exec(
            binary,
            "run",
            model,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        token.attach(proc)

        exec_task = asyncio.create_task(self._communicate(proc, prompt))
        timer_task = asyncio.create_task(asyncio.sleep(timeout))
        cancel_task = asyncio.create_task(token.wait())
        try:
            done, _ = await asyncio.wait(
                {exec_task, timer_task, cancel_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            if exec_task in done:
                stdout, stderr, returncode = exec_task.result()
            elif cancel_task in done:
                logger.warning(f"Cancelling {self.name} process...")
                raise GenerationCancelledError()
            else:
                raise GeneratorTimeoutError(timeout)
        finally:
            pending = [t for t in (exec_task, timer_task, cancel_task) if not t.done()]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            await self._reclaim(proc)
            token.detach(proc)

        if returncode != 0:
            err = stderr.decode("utf-8", errors="replace").strip()
            raise GeneratorExecutionError(returncode, err or "unknown error")
        return stdout.decode("utf-8", errors="replace").strip()

    async def _communicate(
        self, proc: asyncio.subprocess.Process, prompt: str
    ) -> tuple[bytes, bytes, int]:
        """Feed stdin and drain both output streams concurrently."""
        assert proc.stdin is not None
        assert proc.stdout is not None
        assert proc.stderr is not None

        _, stdout, stderr = await asyncio.gather(
            self._feed(proc.stdin, prompt),
            self._drain(proc.stdout),
            self._drain(proc.stderr),
        )
        returncode = await proc.wait()
        return stdout, stderr, returncode

    @staticmethod
    async def _feed(stdin: asyncio.StreamWriter, prompt: str) -> None:
        try:
            stdin.write(prompt.encode("utf-8"))
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # the child exited without reading everything; its exit status tells the story
            logger.debug("Generator closed stdin early")
        finally:
            stdin.close()

    @staticmethod
    async def _drain(stream: asyncio.StreamReader) -> bytes:
        chunks: list[bytes] = []
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)

    async def _reclaim(self, proc: asyncio.subprocess.Process) -> None:
        """Terminate gracefully, then kill if the process outlives the grace period."""
        if proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=self._config.termination_grace_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"{self.name} process ignored SIGTERM; killing")
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            await proc.wait()
