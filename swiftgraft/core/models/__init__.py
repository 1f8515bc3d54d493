"""Core data models for swiftgraft."""

from .declaration import DECLARATION_KEYWORDS, Declaration, DeclarationKind
from .patch import (
    AlignedPatch,
    InsertionKind,
    OutcomeKind,
    PatchOutcome,
    PatchResult,
    PatchStats,
)

__all__ = [
    "AlignedPatch",
    "DECLARATION_KEYWORDS",
    "Declaration",
    "DeclarationKind",
    "InsertionKind",
    "OutcomeKind",
    "PatchOutcome",
    "PatchResult",
    "PatchStats",
]
