"""Exception hierarchy for swiftgraft.

Errors fall into four families that the pipeline treats differently:

- Input errors (unparsable source, unknown or ambiguous target) are
  reported immediately and never retried.
- Generator errors come from the external generation process. Execution
  failures and timeouts are retried by the bridge; the last one is raised.
- Alignment errors abort the run before anything is written; callers fall
  back to whole-file regeneration.
- Configuration and file errors are raised before any generation starts.
"""

from __future__ import annotations


class SwiftGraftError(Exception):
    """Base class for all swiftgraft errors."""


# ----- Input errors -----


class SourceParseError(SwiftGraftError):
    """Source text could not be parsed into a syntax tree."""

    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        self.line = line
        self.column = column
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"{message}{location}")


class DeclarationNotFoundError(SwiftGraftError):
    """No declaration matched a user-supplied target."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(f"No declaration matches target: {target!r}")


class AmbiguousTargetError(SwiftGraftError):
    """A bare-name target matched several overloads where one was required."""

    def __init__(self, target: str, candidates: list[str]):
        self.target = target
        self.candidates = candidates
        listing = "; ".join(candidates)
        super().__init__(
            f"Target {target!r} is ambiguous ({len(candidates)} matches): {listing}. "
            "Pass a full signature instead."
        )


class SourceFileError(SwiftGraftError):
    """The source file is missing, unreadable, too large or not Swift."""


# ----- Generator errors -----


class GeneratorError(SwiftGraftError):
    """Base class for failures of the external generator."""


class GeneratorNotInstalledError(GeneratorError):
    def __init__(self, binary: str):
        self.binary = binary
        super().__init__(
            f"Generator binary {binary!r} is not installed or not available in PATH"
        )


class ModelMissingError(GeneratorError):
    def __init__(self, model: str):
        self.model = model
        super().__init__(f"Model {model!r} is not available locally (try: ollama pull {model})")


class GeneratorExecutionError(GeneratorError):
    """The generator exited with a non-zero status."""

    def __init__(self, exit_code: int, stderr: str):
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Generator execution failed (exit code {exit_code}): {stderr}")


class GeneratorTimeoutError(GeneratorError):
    def __init__(self, seconds: float):
        self.seconds = seconds
        super().__init__(f"Generator timed out after {seconds:g}s")


class GenerationCancelledError(GeneratorError):
    def __init__(self) -> None:
        super().__init__("Generation was cancelled")


class EmptyResponseError(GeneratorError):
    """The generator succeeded but returned nothing usable."""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"Generator returned an empty {what}")


# ----- Alignment / configuration / prompt -----


class AlignmentError(SwiftGraftError):
    """Generated blocks could not be matched one-to-one with declarations."""

    def __init__(self, declarations: int, blocks: int):
        self.declarations = declarations
        self.blocks = blocks
        super().__init__(
            f"Cannot align {blocks} generated block(s) with {declarations} declaration(s)"
        )


class ConfigurationError(SwiftGraftError):
    pass


class PromptTooLongError(SwiftGraftError):
    def __init__(self, length: int, max_length: int):
        self.length = length
        self.max_length = max_length
        super().__init__(
            f"Prompt is {length} characters long, limit is {max_length}"
        )
