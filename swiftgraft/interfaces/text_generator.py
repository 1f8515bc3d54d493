"""Text generator interface.

A generator is an opaque text-in/text-out function with failure modes.
Implementations own their retry/timeout policy; callers only see the final
text or a ``GeneratorError`` subclass.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from swiftgraft.providers.generation.cancellation import CancellationToken


class TextGenerator(ABC):
    """Abstract base for text generators."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Generator name."""

    @property
    @abstractmethod
    def model(self) -> str:
        """Default model identifier."""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        model: str | None = None,
        *,
        token: CancellationToken | None = None,
    ) -> str:
        """Turn a prompt into generated text.

        Args:
            prompt: Complete prompt text
            model: Model override; defaults to :attr:`model`
            token: Cancellation token owning the running process, if any

        Raises:
            GeneratorError: On any generator failure after retries
        """

    def get_usage_stats(self) -> dict[str, Any]:
        return {}
