"""Declaration model: a read-only view over one parsed Swift declaration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from swiftgraft.core.models.patch import InsertionKind


class DeclarationKind(Enum):
    """Closed set of declaration kinds the collector understands."""

    FUNCTION = "function"
    INITIALIZER = "initializer"
    TYPE = "type"
    PROTOCOL = "protocol"
    EXTENSION = "extension"

    @classmethod
    def from_keyword(cls, keyword: str) -> DeclarationKind:
        """Map a Swift declaration keyword to its kind.

        Raises:
            ValueError: If the keyword is not a supported declaration keyword
        """
        try:
            return _KEYWORD_KINDS[keyword]
        except KeyError:
            raise ValueError(f"Unsupported declaration keyword: {keyword!r}") from None


_KEYWORD_KINDS: dict[str, DeclarationKind] = {
    "func": DeclarationKind.FUNCTION,
    "init": DeclarationKind.INITIALIZER,
    "class": DeclarationKind.TYPE,
    "struct": DeclarationKind.TYPE,
    "enum": DeclarationKind.TYPE,
    "actor": DeclarationKind.TYPE,
    "protocol": DeclarationKind.PROTOCOL,
    "extension": DeclarationKind.EXTENSION,
}

DECLARATION_KEYWORDS: frozenset[str] = frozenset(_KEYWORD_KINDS)


@dataclass(frozen=True)
class Declaration:
    """One declaration found in a parsed source file.

    Byte offsets index into the UTF-8 encoding of the source the
    declaration was collected from. ``leading_start`` is the start of the
    line holding the first comment of the declaration's leading comment
    block (or of the declaration itself when it has none); generated
    comments are inserted there. ``indent`` is the whitespace the
    declaration line starts with. ``leading_comments`` holds the text of
    every comment in the leading block, in source order.
    """

    kind: DeclarationKind
    keyword: str
    name: str
    signature: str
    canonical_signature: str
    source_order_index: int
    start_byte: int
    end_byte: int
    leading_start: int
    indent: str = ""
    leading_comments: tuple[str, ...] = ()
    node: Any = field(default=None, compare=False, hash=False, repr=False)

    def has_existing_annotation(self, kind: InsertionKind) -> bool:
        """Return True if the leading trivia already has a comment of ``kind``."""
        from swiftgraft.core.models.patch import InsertionKind

        if kind is InsertionKind.DOCUMENTATION:
            return any(
                c.startswith("///") or c.startswith("/**") for c in self.leading_comments
            )
        if kind is InsertionKind.REVIEW:
            return any(
                c.startswith("//") and "REVIEW:" in c for c in self.leading_comments
            )
        return False

    def text(self, source: bytes) -> str:
        """Return the declaration's own text (no leading trivia)."""
        return source[self.start_byte : self.end_byte].decode("utf-8")
