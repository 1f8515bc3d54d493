"""Text helpers for prompts and generated output."""

from __future__ import annotations

import re

from swiftgraft.core.exceptions import PromptTooLongError

_FENCE = re.compile(r"^[ \t]*```[A-Za-z0-9_+-]*[ \t]*$", re.MULTILINE)


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def clean_generated_text(text: str) -> str:
    """Strip markdown code fences, normalize line endings and trim.

    Models often wrap their answer in ```swift ... ``` even when told not
    to; only whole fence lines are removed so inline backticks survive.
    """
    text = normalize_newlines(text)
    text = _FENCE.sub("", text)
    return text.strip()


def normalized_code(text: str) -> str:
    """Whitespace-insensitive form used to detect no-op replacements."""
    return " ".join(normalize_newlines(text).split())


def sanitize_prompt(prompt: str, max_length: int) -> str:
    """Return ``prompt`` unchanged if it fits.

    Raises:
        PromptTooLongError: If the prompt exceeds ``max_length`` characters
    """
    if len(prompt) > max_length:
        raise PromptTooLongError(len(prompt), max_length)
    return prompt
