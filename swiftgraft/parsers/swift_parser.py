"""Tree-sitter parsing for Swift sources.

One ``ParsedSource`` is produced per command invocation. Everything
downstream (collection, lookup, patching) works from the byte offsets of
that single parse.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from functools import lru_cache

from loguru import logger

try:
    from tree_sitter import Node as TSNode
    from tree_sitter import Parser
    from tree_sitter import Tree as TSTree
    from tree_sitter_language_pack import get_language
except ImportError as e:
    raise ImportError(
        "tree-sitter-language-pack is required. "
        "Install with: pip install tree-sitter tree-sitter-language-pack"
    ) from e

from swiftgraft.core.exceptions import SourceParseError

COMMENT_NODE_TYPES = frozenset({"comment", "multiline_comment"})


@lru_cache(maxsize=1)
def _swift_language():
    return get_language("swift")


def create_parser() -> Parser:
    """Return a fresh tree-sitter parser for Swift."""
    return Parser(_swift_language())


@dataclass(frozen=True)
class ParsedSource:
    """Source text together with its syntax tree."""

    text: str
    data: bytes
    tree: TSTree

    @property
    def root(self) -> TSNode:
        return self.tree.root_node

    def node_text(self, node: TSNode) -> str:
        return self.data[node.start_byte : node.end_byte].decode("utf-8")

    def slice(self, start: int, end: int) -> str:
        return self.data[start:end].decode("utf-8")

    def walk(self) -> Iterator[TSNode]:
        """Yield every node in pre-order (document order)."""
        return walk_tree(self.root)


def walk_tree(root: TSNode) -> Iterator[TSNode]:
    """Depth-first pre-order traversal that does not recurse in Python."""
    cursor = root.walk()
    visited_children = False
    while True:
        if not visited_children:
            yield cursor.node
            if cursor.goto_first_child():
                continue
        if cursor.goto_next_sibling():
            visited_children = False
        elif cursor.goto_parent():
            visited_children = True
        else:
            return


def parse_swift(source: str, *, strict: bool = True) -> ParsedSource:
    """Parse Swift source text.

    Args:
        source: Complete text of one Swift file
        strict: Raise when the tree contains syntax errors

    Returns:
        ParsedSource wrapping the text and its tree

    Raises:
        SourceParseError: If ``strict`` and the source does not parse cleanly
    """
    data = source.encode("utf-8")
    tree = create_parser().parse(data)
    if tree is None:
        raise SourceParseError("Failed to parse Swift source")

    parsed = ParsedSource(text=source, data=data, tree=tree)
    if tree.root_node.has_error:
        error_node = first_error_node(tree.root_node)
        line = column = None
        if error_node is not None:
            line = error_node.start_point[0] + 1
            column = error_node.start_point[1] + 1
        if strict:
            raise SourceParseError("Swift source contains syntax errors", line, column)
        logger.warning(f"Swift source has syntax errors near line {line}; continuing")
    return parsed


def first_error_node(root: TSNode) -> TSNode | None:
    for node in walk_tree(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None
