"""Declaration collection and lookup over a parsed Swift file.

A single traversal handles every declaration kind: node types are mapped
to a ``DeclarationKind`` and then go through the same extraction path
(keyword, name, signature, leading comment block).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger
from tree_sitter import Node as TSNode

from swiftgraft.core.exceptions import AmbiguousTargetError, DeclarationNotFoundError
from swiftgraft.core.models.declaration import DECLARATION_KEYWORDS, Declaration, DeclarationKind
from swiftgraft.parsers.signature import canonicalize, looks_like_signature
from swiftgraft.parsers.swift_parser import COMMENT_NODE_TYPES, ParsedSource, parse_swift

# tree-sitter-swift node types that carry a declaration.
FUNCTION_NODE_TYPES = frozenset({"function_declaration", "protocol_function_declaration"})
DECLARATION_NODE_TYPES = FUNCTION_NODE_TYPES | {
    "init_declaration",
    "class_declaration",
    "protocol_declaration",
}

_TYPE_KEYWORDS = ("class", "struct", "enum", "actor", "extension", "protocol")
_WHITESPACE = b" \t\r\n"


@dataclass(frozen=True)
class CollectedDeclarations(Sequence[Declaration]):
    """Ordered declarations of one parse, with target lookup."""

    parsed: ParsedSource
    declarations: tuple[Declaration, ...]

    def __getitem__(self, index):  # type: ignore[override]
        return self.declarations[index]

    def __len__(self) -> int:
        return len(self.declarations)

    def named(self, name: str) -> list[Declaration]:
        return [d for d in self.declarations if d.name == name]

    def find(self, target: str) -> list[Declaration]:
        """Resolve a free-form target to declarations.

        A bare name returns every declaration with that name (all
        overloads). A signature-like target is canonicalized and matched
        exactly; when nothing matches exactly, declarations whose key
        starts with the target key are returned so a truncated header
        still resolves. A prefix may not stop inside a name, so
        ``func foo`` does not pick up ``foobar``. Targets written without
        the leading keyword (``foo(x: Int)``) are compared against keys
        without it.
        """
        t = target.strip()
        if not t:
            return []
        if not looks_like_signature(t):
            return self.named(t)

        key = canonicalize(t)
        with_keyword = key.split(" ", 1)[0] in DECLARATION_KEYWORDS
        keyed = [
            (d, d.canonical_signature if with_keyword else _without_keyword(d))
            for d in self.declarations
        ]
        exact = [d for d, k in keyed if k == key]
        if exact:
            return exact
        return [d for d, k in keyed if _is_prefix_key(key, k)]

    def find_all(self, targets: Iterable[str], *, strict: bool = True) -> list[Declaration]:
        """Resolve several targets, keeping source order and dropping duplicates.

        Raises:
            DeclarationNotFoundError: If ``strict`` and a target matches nothing
        """
        found: dict[int, Declaration] = {}
        for target in targets:
            matches = self.find(target)
            if not matches:
                if strict:
                    raise DeclarationNotFoundError(target)
                logger.warning(f"No declaration matches target: {target!r}")
            for decl in matches:
                found.setdefault(decl.source_order_index, decl)
        return [found[i] for i in sorted(found)]

    def require_one(self, target: str) -> Declaration:
        """Resolve a target that must identify exactly one declaration."""
        matches = self.find(target)
        if not matches:
            raise DeclarationNotFoundError(target)
        if len(matches) > 1:
            raise AmbiguousTargetError(target, [d.signature for d in matches])
        return matches[0]


class DeclarationCollector:
    """Collects declarations of the configured kinds in source order.

    Args:
        keywords: Swift keywords to keep (``func``, ``struct``, ...); None keeps all
        kinds: Declaration kinds to keep; None keeps all
        top_level_only: Skip declarations nested in another declaration
    """

    def __init__(
        self,
        keywords: Iterable[str] | None = None,
        kinds: Iterable[DeclarationKind] | None = None,
        top_level_only: bool = False,
    ) -> None:
        self._keywords = frozenset(keywords) if keywords is not None else None
        self._kinds = frozenset(kinds) if kinds is not None else None
        self._top_level_only = top_level_only

    def collect(self, parsed: ParsedSource) -> CollectedDeclarations:
        comments_by_end = {
            node.end_byte: node
            for node in parsed.walk()
            if node.type in COMMENT_NODE_TYPES
        }

        found: list[Declaration] = []
        for node in parsed.walk():
            if node.type not in DECLARATION_NODE_TYPES:
                continue
            keyword = _declaration_keyword(node, parsed)
            if keyword is None:
                logger.debug(f"Skipping {node.type} without a recognizable keyword")
                continue
            kind = DeclarationKind.from_keyword(keyword)
            if self._keywords is not None and keyword not in self._keywords:
                continue
            if self._kinds is not None and kind not in self._kinds:
                continue
            if self._top_level_only and not _is_top_level(node):
                continue
            found.append(
                _build_declaration(node, kind, keyword, len(found), parsed, comments_by_end)
            )

        logger.debug(f"Collected {len(found)} declarations")
        return CollectedDeclarations(parsed=parsed, declarations=tuple(found))

    def collect_from_source(self, source: str) -> CollectedDeclarations:
        """Parse ``source`` and collect from it.

        Raises:
            SourceParseError: If the source does not parse
        """
        return self.collect(parse_swift(source))


def collect_functions(
    parsed: ParsedSource, top_level_only: bool = False
) -> CollectedDeclarations:
    return DeclarationCollector(
        kinds=[DeclarationKind.FUNCTION], top_level_only=top_level_only
    ).collect(parsed)


# ----- Extraction helpers -----


def _without_keyword(decl: Declaration) -> str:
    prefix = f"{decl.keyword} "
    key = decl.canonical_signature
    return key[len(prefix) :] if key.startswith(prefix) else key


def _is_identifier_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _is_prefix_key(prefix: str, key: str) -> bool:
    """Prefix match that does not end inside an identifier."""
    if not key.startswith(prefix) or len(key) == len(prefix):
        return key == prefix
    return not (_is_identifier_char(prefix[-1]) and _is_identifier_char(key[len(prefix)]))


def _declaration_keyword(node: TSNode, parsed: ParsedSource) -> str | None:
    if node.type in FUNCTION_NODE_TYPES:
        return "func"
    if node.type == "init_declaration":
        return "init"
    kind_node = node.child_by_field_name("declaration_kind")
    if kind_node is not None:
        text = parsed.node_text(kind_node)
        if text in _TYPE_KEYWORDS:
            return text
    token = _keyword_token(node)
    return token.type if token is not None else None


def _keyword_token(node: TSNode) -> TSNode | None:
    """The keyword child a declaration header starts with (after modifiers)."""
    if node.type in FUNCTION_NODE_TYPES:
        wanted = {"func"}
    elif node.type == "init_declaration":
        wanted = {"init"}
    else:
        wanted = set(_TYPE_KEYWORDS)
    for child in node.children:
        if child.type in wanted:
            return child
    return None


def _is_top_level(node: TSNode) -> bool:
    parent = node.parent
    while parent is not None:
        if parent.type in DECLARATION_NODE_TYPES:
            return False
        parent = parent.parent
    return True


def _declaration_name(node: TSNode, keyword: str, parsed: ParsedSource) -> str:
    if keyword == "init":
        return "init"
    name_node = node.child_by_field_name("name")
    if name_node is not None:
        return parsed.node_text(name_node).strip()
    # operator functions and grammar variants without a name field
    token = _keyword_token(node)
    if token is not None and token.next_sibling is not None:
        return parsed.node_text(token.next_sibling).strip()
    return "<anonymous>"


def _header_range(node: TSNode) -> tuple[int, int]:
    token = _keyword_token(node)
    start = token.start_byte if token is not None else node.start_byte
    body = node.child_by_field_name("body")
    end = body.start_byte if body is not None else node.end_byte
    return start, end


def _signature_text(node: TSNode, parsed: ParsedSource) -> str:
    """Header text with attributes, comments and default values removed."""
    start, end = _header_range(node)
    removed: list[tuple[int, int]] = []

    in_default = False
    default_start = 0
    for child in node.children:
        if child.end_byte <= start or child.start_byte >= end:
            continue
        if in_default:
            if child.type in (",", ")"):
                removed.append((default_start, child.start_byte))
                in_default = False
            continue
        if child.type == "=":
            in_default = True
            default_start = child.start_byte
        elif child.type == "attribute":
            removed.append((child.start_byte, child.end_byte))
    if in_default:
        removed.append((default_start, end))

    for sub in _walk_within(node, start, end):
        if sub.type in COMMENT_NODE_TYPES:
            removed.append((sub.start_byte, sub.end_byte))

    pieces: list[bytes] = []
    cursor = start
    for r_start, r_end in sorted(removed):
        if r_start > cursor:
            pieces.append(parsed.data[cursor:r_start])
        cursor = max(cursor, r_end)
    pieces.append(parsed.data[cursor:end])

    text = b" ".join(pieces).decode("utf-8")
    text = re.sub(r"\s+", " ", text).strip()
    text = re.sub(r"\(\s+", "(", text)
    text = re.sub(r"\s+([,)])", r"\1", text)
    return text


def _walk_within(node: TSNode, start: int, end: int):
    stack = [node]
    while stack:
        current = stack.pop()
        if current.end_byte <= start or current.start_byte >= end:
            continue
        yield current
        stack.extend(reversed(current.children))


def _line_start(data: bytes, pos: int) -> int:
    return data.rfind(b"\n", 0, pos) + 1


def _starts_line(data: bytes, pos: int) -> bool:
    return data[_line_start(data, pos) : pos].strip(_WHITESPACE) == b""


def _leading_block(
    node: TSNode, parsed: ParsedSource, comments_by_end: dict[int, TSNode]
) -> tuple[int, str, tuple[str, ...]]:
    """Find the comment block directly above a declaration.

    Comments belong to the block when each one starts its own line and no
    blank line separates it from the next element below. Returns the
    insertion offset, the declaration's indentation and the comment texts.
    """
    data = parsed.data
    decl_start = node.start_byte
    if not _starts_line(data, decl_start):
        return decl_start, "", ()

    line_start = _line_start(data, decl_start)
    indent = data[line_start:decl_start].decode("utf-8")
    comments: list[TSNode] = []
    top = line_start
    while top > 0:
        prev_line_end = top - 1  # the "\n" ending the previous line
        prev_line_start = _line_start(data, prev_line_end)
        prev_line = data[prev_line_start:prev_line_end]
        if prev_line.strip(_WHITESPACE) == b"":
            break
        comment = _comment_ending_between(
            comments_by_end, prev_line_start + len(prev_line.rstrip(_WHITESPACE)), prev_line_end
        )
        if comment is None or not _starts_line(data, comment.start_byte):
            break
        comments.append(comment)
        top = _line_start(data, comment.start_byte)

    comments.reverse()
    return top, indent, tuple(parsed.node_text(c) for c in comments)


def _comment_ending_between(
    comments_by_end: dict[int, TSNode], low: int, high: int
) -> TSNode | None:
    # line comments may or may not include trailing blanks and "\r"
    for end in range(low, high + 1):
        comment = comments_by_end.get(end)
        if comment is not None:
            return comment
    return None


def _build_declaration(
    node: TSNode,
    kind: DeclarationKind,
    keyword: str,
    index: int,
    parsed: ParsedSource,
    comments_by_end: dict[int, TSNode],
) -> Declaration:
    signature = _signature_text(node, parsed)
    leading_start, indent, comments = _leading_block(node, parsed, comments_by_end)
    return Declaration(
        kind=kind,
        keyword=keyword,
        name=_declaration_name(node, keyword, parsed),
        signature=signature,
        canonical_signature=canonicalize(signature),
        source_order_index=index,
        start_byte=node.start_byte,
        end_byte=node.end_byte,
        leading_start=leading_start,
        indent=indent,
        leading_comments=comments,
        node=node,
    )
