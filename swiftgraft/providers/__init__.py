"""Providers package for swiftgraft - concrete implementations of abstract interfaces.

Use lazy import so parsing-only commands never touch subprocess machinery.
"""

__all__ = [
    "CancellationToken",
    "OllamaCLIGenerator",
]


def __getattr__(name: str):
    if name == "OllamaCLIGenerator":
        from .generation import OllamaCLIGenerator  # lazy

        return OllamaCLIGenerator
    if name == "CancellationToken":
        from .generation import CancellationToken  # lazy

        return CancellationToken
    raise AttributeError(name)
