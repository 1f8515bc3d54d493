"""Tests for the Ollama CLI bridge.

Throw-away shell scripts play the generator binary so retry, timeout,
kill and pipe-draining behavior run against real child processes.
"""

import asyncio
import os
import random
import stat
import sys
import time

import pytest

from swiftgraft.core.config import GenerationConfig
from swiftgraft.core.exceptions import (
    GenerationCancelledError,
    GeneratorExecutionError,
    GeneratorNotInstalledError,
    GeneratorTimeoutError,
    ModelMissingError,
)
from swiftgraft.providers.generation import CancellationToken, OllamaCLIGenerator

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell scripts")


def _script(tmp_path, body: str, show_exit: int = 0):
    """Write an executable fake ``ollama`` that handles ``show`` then runs ``body``."""
    path = tmp_path / "fake-ollama"
    path.write_text(
        "#!/bin/sh\n"
        f'if [ "$1" = "show" ]; then exit {show_exit}; fi\n'
        f"{body}\n"
    )
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(path)


def _failing_then_ok(tmp_path, fails: int) -> str:
    counter = tmp_path / "attempts"
    return _script(
        tmp_path,
        f'n=$(cat "{counter}" 2>/dev/null || echo 0)\n'
        "n=$((n + 1))\n"
        f'echo "$n" > "{counter}"\n'
        "cat > /dev/null\n"
        f'if [ "$n" -le {fails} ]; then echo "boom $n" >&2; exit 3; fi\n'
        'echo "generated text"',
    )


def _config(binary: str, **overrides) -> GenerationConfig:
    values = {
        "binary": binary,
        "model": "test-model",
        "max_retries": 3,
        "timeout_seconds": 10,
        "backoff_jitter_seconds": 0,
        "termination_grace_seconds": 0.2,
    }
    values.update(overrides)
    return GenerationConfig(**values)


class _RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _pid_gone(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return True
    return False


@pytest.mark.asyncio
async def test_success_returns_trimmed_stdout(tmp_path):
    binary = _script(tmp_path, 'cat > /dev/null\nprintf "\\n  hello world  \\n\\n"')
    generator = OllamaCLIGenerator(_config(binary))
    assert await generator.generate("prompt") == "hello world"
    assert generator.attempts_made == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("fails", [1, 2])
async def test_retries_until_success(tmp_path, fails):
    sleep = _RecordingSleep()
    generator = OllamaCLIGenerator(_config(_failing_then_ok(tmp_path, fails)), sleep=sleep)

    assert await generator.generate("prompt") == "generated text"
    assert generator.attempts_made == fails + 1
    assert (tmp_path / "attempts").read_text().strip() == str(fails + 1)
    assert sleep.delays == [1.0, 2.0][:fails]


@pytest.mark.asyncio
async def test_exhausted_retries_raise_last_error(tmp_path):
    sleep = _RecordingSleep()
    generator = OllamaCLIGenerator(_config(_failing_then_ok(tmp_path, 99)), sleep=sleep)

    with pytest.raises(GeneratorExecutionError) as exc:
        await generator.generate("prompt")

    assert exc.value.exit_code == 3
    assert exc.value.stderr == "boom 3"
    assert generator.attempts_made == 3
    assert len(sleep.delays) == 2
    assert generator.get_usage_stats()["failed_attempts"] == 3


@pytest.mark.asyncio
async def test_empty_stderr_is_reported_as_unknown(tmp_path):
    binary = _script(tmp_path, "exit 9")
    generator = OllamaCLIGenerator(_config(binary, max_retries=1))
    with pytest.raises(GeneratorExecutionError, match="unknown error"):
        await generator.generate("prompt")


@pytest.mark.asyncio
async def test_timeout_kills_the_process(tmp_path):
    pid_file = tmp_path / "pid"
    binary = _script(tmp_path, f'echo $$ > "{pid_file}"\nexec sleep 30')
    generator = OllamaCLIGenerator(_config(binary, max_retries=1, timeout_seconds=0.5))

    started = time.monotonic()
    with pytest.raises(GeneratorTimeoutError):
        await generator.generate("prompt")

    assert time.monotonic() - started < 10
    assert _pid_gone(int(pid_file.read_text()))


@pytest.mark.asyncio
async def test_process_ignoring_sigterm_is_killed(tmp_path):
    pid_file = tmp_path / "pid"
    binary = _script(
        tmp_path,
        f"trap '' TERM\necho $$ > \"{pid_file}\"\nwhile true; do sleep 0.05; done",
    )
    generator = OllamaCLIGenerator(
        _config(binary, max_retries=1, timeout_seconds=0.5, termination_grace_seconds=0.2)
    )

    with pytest.raises(GeneratorTimeoutError):
        await generator.generate("prompt")
    assert _pid_gone(int(pid_file.read_text()))


@pytest.mark.asyncio
async def test_timeouts_are_retried(tmp_path):
    sleep = _RecordingSleep()
    binary = _script(tmp_path, "exec sleep 30")
    generator = OllamaCLIGenerator(
        _config(binary, max_retries=2, timeout_seconds=0.3), sleep=sleep
    )
    with pytest.raises(GeneratorTimeoutError):
        await generator.generate("prompt")
    assert generator.attempts_made == 2
    assert sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_large_prompt_and_output_do_not_deadlock(tmp_path):
    # echo stdin back and flood stderr at the same time
    binary = _script(
        tmp_path,
        "head -c 300000 /dev/zero | tr '\\0' 'e' >&2 &\ncat\nwait",
    )
    generator = OllamaCLIGenerator(_config(binary, max_retries=1, timeout_seconds=20))
    prompt = "x" * 1_000_000
    assert await generator.generate(prompt) == prompt


@pytest.mark.asyncio
async def test_missing_binary(tmp_path):
    generator = OllamaCLIGenerator(_config(str(tmp_path / "no-such-binary")))
    with pytest.raises(GeneratorNotInstalledError):
        await generator.generate("prompt")
    assert generator.attempts_made == 0


@pytest.mark.asyncio
async def test_missing_model_is_not_retried(tmp_path):
    binary = _script(tmp_path, 'echo "should not run"', show_exit=1)
    generator = OllamaCLIGenerator(_config(binary))
    with pytest.raises(ModelMissingError):
        await generator.generate("prompt")
    assert generator.attempts_made == 0


@pytest.mark.asyncio
async def test_cancel_before_start(tmp_path):
    binary = _script(tmp_path, "echo ok")
    token = CancellationToken()
    token.cancel()
    generator = OllamaCLIGenerator(_config(binary))
    with pytest.raises(GenerationCancelledError):
        await generator.generate("prompt", token=token)
    assert generator.attempts_made == 0


@pytest.mark.asyncio
async def test_cancel_while_running_reclaims_process(tmp_path):
    pid_file = tmp_path / "pid"
    binary = _script(tmp_path, f'echo $$ > "{pid_file}"\nexec sleep 30')
    generator = OllamaCLIGenerator(_config(binary, timeout_seconds=30))
    token = CancellationToken()

    asyncio.get_running_loop().call_later(0.5, token.cancel)
    with pytest.raises(GenerationCancelledError):
        await generator.generate("prompt", token=token)

    assert token.current_process is None
    assert generator.attempts_made == 1
    assert _pid_gone(int(pid_file.read_text()))


def test_backoff_is_capped_and_jittered():
    generator = OllamaCLIGenerator(
        _config("ollama", backoff_cap_seconds=8, backoff_jitter_seconds=0.5),
        rng=random.Random(7),
    )
    assert [int(generator.backoff_delay(n)) for n in (1, 2, 3, 4, 5, 10)] == [1, 2, 4, 8, 8, 8]
    for attempt in (1, 5):
        delay = generator.backoff_delay(attempt)
        base = min(8, 2 ** (attempt - 1))
        assert base <= delay <= base + 0.5


class TestCancellationToken:
    def test_attach_detach(self):
        token = CancellationToken()
        first, second = object(), object()
        token.attach(first)
        with pytest.raises(RuntimeError):
            token.attach(second)
        token.detach(second)
        assert token.current_process is first
        token.detach(first)
        assert token.current_process is None
        token.attach(second)
        assert token.current_process is second
