"""Text generation providers for swiftgraft."""

from .cancellation import CancellationToken
from .ollama_cli_provider import OllamaCLIGenerator

__all__ = ["CancellationToken", "OllamaCLIGenerator"]
