"""Alignment of generated content with collected declarations.

Two strategies exist and a command uses exactly one of them:

- Signature-keyed: content arrives as a mapping from canonical signature
  key to text; each declaration looks up its own key. Declarations with
  no entry are left untouched.
- Ordinal: one generation returns delimiter-separated blocks in source
  order. The block count must equal the declaration count, otherwise
  nothing is applied and the caller falls back to whole-file generation.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from loguru import logger

from swiftgraft.core.exceptions import AlignmentError
from swiftgraft.core.models import AlignedPatch, Declaration, PatchOutcome
from swiftgraft.utils.text import clean_generated_text

# Reserved answers meaning "leave this declaration alone"
NO_COMMENT_SENTINEL = "__NO_COMMENT__"
NO_CHANGE_SENTINEL = "__NO_CHANGE__"

BLOCK_DELIMITER = "@@@"


def outcome_from_text(text: str | None, sentinel: str = NO_COMMENT_SENTINEL) -> PatchOutcome:
    """Classify one piece of generated text."""
    if text is None:
        return PatchOutcome.no_content()
    cleaned = clean_generated_text(text)
    if not cleaned:
        return PatchOutcome.no_content()
    if cleaned == sentinel:
        return PatchOutcome.skip()
    return PatchOutcome.apply(cleaned)


def align_by_signature(
    declarations: Sequence[Declaration],
    texts_by_key: Mapping[str, str],
    sentinel: str = NO_COMMENT_SENTINEL,
) -> list[AlignedPatch]:
    """Pair each declaration with the text stored under its canonical key."""
    patches: list[AlignedPatch] = []
    for decl in declarations:
        if decl.canonical_signature not in texts_by_key:
            continue
        outcome = outcome_from_text(texts_by_key[decl.canonical_signature], sentinel)
        patches.append(AlignedPatch(decl, outcome))

    unused = set(texts_by_key) - {d.canonical_signature for d in declarations}
    for key in sorted(unused):
        logger.debug(f"Generated content for unknown signature ignored: {key}")
    return patches


def split_blocks(text: str, delimiter: str = BLOCK_DELIMITER) -> list[str]:
    """Split a multi-declaration answer on lines that hold only ``delimiter``.

    Leading and trailing empty blocks (delimiter at the very start or end)
    are dropped; empty blocks in between are kept so positions stay stable.
    """
    cleaned = clean_generated_text(text)
    if not cleaned:
        return []
    pattern = re.compile(rf"^[ \t]*{re.escape(delimiter)}[ \t]*$", re.MULTILINE)
    blocks = [b.strip() for b in pattern.split(cleaned)]
    while blocks and not blocks[0]:
        blocks.pop(0)
    while blocks and not blocks[-1]:
        blocks.pop()
    return blocks


def align_by_order(
    declarations: Sequence[Declaration],
    blocks: Sequence[str],
    sentinel: str = NO_COMMENT_SENTINEL,
) -> list[AlignedPatch]:
    """Pair blocks with declarations by position.

    Raises:
        AlignmentError: If the number of blocks differs from the number of
            declarations
    """
    if len(blocks) != len(declarations):
        raise AlignmentError(len(declarations), len(blocks))
    ordered = sorted(declarations, key=lambda d: d.source_order_index)
    return [
        AlignedPatch(decl, outcome_from_text(block, sentinel))
        for decl, block in zip(ordered, blocks)
    ]
