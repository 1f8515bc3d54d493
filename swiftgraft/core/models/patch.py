"""Patch models: insertion kinds, per-declaration outcomes and statistics."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from swiftgraft.core.models.declaration import Declaration


class InsertionKind(Enum):
    """How generated content is spliced into the source."""

    DOCUMENTATION = "documentation"
    REVIEW = "review"
    REPLACEMENT = "replacement"

    @property
    def comment_prefix(self) -> str:
        if self is InsertionKind.DOCUMENTATION:
            return "///"
        if self is InsertionKind.REVIEW:
            return "// REVIEW:"
        raise ValueError("Replacement patches have no comment prefix")


class OutcomeKind(Enum):
    APPLY = "apply"
    SKIP = "skip"
    NO_CONTENT = "no_content"


@dataclass(frozen=True)
class PatchOutcome:
    """Result of aligning generated content with one declaration.

    ``APPLY`` carries text to splice in; ``SKIP`` means the generator
    explicitly asked to leave the declaration alone; ``NO_CONTENT`` means
    nothing usable came back (empty after cleaning).
    """

    kind: OutcomeKind
    text: str | None = None

    @classmethod
    def apply(cls, text: str) -> PatchOutcome:
        return cls(OutcomeKind.APPLY, text)

    @classmethod
    def skip(cls) -> PatchOutcome:
        return cls(OutcomeKind.SKIP)

    @classmethod
    def no_content(cls) -> PatchOutcome:
        return cls(OutcomeKind.NO_CONTENT)

    @property
    def is_apply(self) -> bool:
        return self.kind is OutcomeKind.APPLY


@dataclass(frozen=True)
class AlignedPatch:
    """A declaration paired with what should happen to it."""

    declaration: Declaration
    outcome: PatchOutcome


@dataclass(frozen=True)
class PatchStats:
    processed: int = 0
    skipped: int = 0

    def __add__(self, other: PatchStats) -> PatchStats:
        return PatchStats(self.processed + other.processed, self.skipped + other.skipped)


@dataclass(frozen=True)
class PatchResult:
    """New source text plus the statistics of the rewrite that produced it."""

    text: str
    stats: PatchStats
