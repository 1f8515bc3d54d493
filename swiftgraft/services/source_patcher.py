"""Byte-preserving source patcher.

All transforms here are pure: they take the single ``ParsedSource`` of the
command plus aligned patches and return the new text with statistics.
Edits are computed against the original byte offsets and spliced in one
pass, so every byte outside an edited range is copied through unchanged.
Writing the result is the caller's job.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger

from swiftgraft.core.exceptions import SourceParseError
from swiftgraft.core.models import (
    AlignedPatch,
    Declaration,
    InsertionKind,
    PatchResult,
    PatchStats,
)
from swiftgraft.parsers.declaration_collector import collect_functions
from swiftgraft.parsers.swift_parser import ParsedSource, parse_swift
from swiftgraft.utils.text import clean_generated_text, normalized_code

_REVIEW_LABEL = re.compile(r"^review:\s*", re.IGNORECASE)


@dataclass(frozen=True)
class _Edit:
    start: int
    end: int
    replacement: bytes


def splice(data: bytes, edits: Iterable[_Edit]) -> str:
    """Apply non-overlapping edits to ``data`` in a single pass."""
    out: list[bytes] = []
    cursor = 0
    for edit in sorted(edits, key=lambda e: (e.start, e.end)):
        if edit.start < cursor:
            raise ValueError(f"Overlapping edit at byte {edit.start}")
        out.append(data[cursor : edit.start])
        out.append(edit.replacement)
        cursor = edit.end
    out.append(data[cursor:])
    return b"".join(out).decode("utf-8")


# ----- Comment insertion -----


def comment_lines(text: str) -> list[str]:
    """Reduce generated comment text to bare lines.

    Code fences and any comment markers the model echoed back (``///``,
    ``//``, ``/* */``, leading ``*``, a ``REVIEW:`` label) are removed so
    they can be re-emitted with the right prefix.
    """
    lines: list[str] = []
    for raw in clean_generated_text(text).split("\n"):
        s = raw.strip()
        if s.startswith("/**"):
            s = s[3:]
        elif s.startswith("/*"):
            s = s[2:]
        if s.endswith("*/"):
            s = s[:-2]
        s = s.strip()
        if s == "*":
            s = ""
        elif s.startswith("* "):
            s = s[2:]
        elif s.startswith("///"):
            s = s[3:]
        elif s.startswith("//"):
            s = s[2:]
        s = _REVIEW_LABEL.sub("", s.strip()).strip()
        lines.append(s)

    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


def render_comment(lines: Sequence[str], kind: InsertionKind) -> list[str]:
    prefix = kind.comment_prefix
    if kind is InsertionKind.REVIEW:
        head, *rest = lines
        return [f"{prefix} {head}"] + [f"// {line}" if line else "//" for line in rest]
    return [f"{prefix} {line}" if line else prefix for line in lines]


def line_ending(data: bytes) -> str:
    """The newline sequence of the first line break in ``data``."""
    at = data.find(b"\n")
    return "\r\n" if at > 0 and data[at - 1 : at] == b"\r" else "\n"


def _comment_edit(decl: Declaration, data: bytes, lines: Sequence[str]) -> _Edit:
    newline = line_ending(data)
    rendered = "".join(f"{decl.indent}{line}{newline}" for line in lines)
    at = decl.leading_start
    at_line_start = at == 0 or data[at - 1 : at] == b"\n"
    if not at_line_start:
        # declaration shares its line with earlier code
        rendered = newline + rendered
    return _Edit(at, at, rendered.encode("utf-8"))


def apply_comments(
    parsed: ParsedSource,
    patches: Sequence[AlignedPatch],
    kind: InsertionKind,
    *,
    skip_existing: bool = False,
) -> PatchResult:
    """Insert generated comments above their declarations.

    New lines go immediately before the declaration's leading comment
    block, which is kept after them; the declaration's indentation is
    reused. Skipped: non-apply outcomes, content that is empty once
    cleaned, and (with ``skip_existing``) declarations that already carry
    a comment of ``kind``.
    """
    edits: list[_Edit] = []
    processed = skipped = 0
    for patch in sorted(patches, key=lambda p: p.declaration.source_order_index):
        decl = patch.declaration
        if not patch.outcome.is_apply:
            logger.debug(f"No {kind.value} for {decl.signature} ({patch.outcome.kind.value})")
            skipped += 1
            continue
        if skip_existing and decl.has_existing_annotation(kind):
            logger.debug(f"Existing {kind.value} kept for {decl.signature}")
            skipped += 1
            continue
        lines = comment_lines(patch.outcome.text or "")
        if not lines:
            skipped += 1
            continue
        edits.append(_comment_edit(decl, parsed.data, render_comment(lines, kind)))
        processed += 1

    return PatchResult(splice(parsed.data, edits), PatchStats(processed, skipped))


# ----- Function replacement -----


def _extract_replacement(decl: Declaration, source: str) -> tuple[str, str] | None:
    """Parse replacement source and pull out the one function named like ``decl``.

    Returns the function text and the indentation of its first line in the
    replacement, or None when the replacement is unusable.
    """
    try:
        parsed = parse_swift(source)
    except SourceParseError as e:
        logger.warning(f"Replacement for {decl.signature} does not parse: {e}")
        return None

    matches = collect_functions(parsed, top_level_only=True).named(decl.name)
    if len(matches) != 1:
        logger.warning(
            f"Replacement for {decl.signature} must contain exactly one function "
            f"named {decl.name!r}, found {len(matches)}"
        )
        return None

    fn = matches[0]
    line_start = parsed.data.rfind(b"\n", 0, fn.start_byte) + 1
    prefix = parsed.data[line_start : fn.start_byte].decode("utf-8")
    base_indent = prefix if not prefix.strip() else ""
    return fn.text(parsed.data), base_indent


def reindent(text: str, base_indent: str, indent: str, newline: str = "\n") -> str:
    """Move continuation lines from ``base_indent`` to ``indent``.

    Lines are rejoined with ``newline`` whatever their original ending.
    """
    first, *rest = (line.rstrip("\r") for line in text.split("\n"))
    out = [first]
    for line in rest:
        if not line.strip():
            out.append("")
            continue
        if base_indent and line.startswith(base_indent):
            line = line[len(base_indent) :]
        out.append(indent + line)
    return newline.join(out)


def apply_function_patches(
    parsed: ParsedSource, patches: Sequence[AlignedPatch]
) -> PatchResult:
    """Replace whole function declarations with generated source.

    Each replacement is re-parsed and must hold exactly one top-level
    function with the original's name; anything else is skipped. The
    declaration's leading comments and trailing text stay where they are.
    Replacements equal to the original up to whitespace, and patches for
    functions nested inside an already replaced one, are skipped too.
    """
    edits: list[_Edit] = []
    processed = skipped = 0
    ordered = sorted(patches, key=lambda p: p.declaration.start_byte)
    for patch in ordered:
        decl = patch.declaration
        if not patch.outcome.is_apply:
            skipped += 1
            continue
        if any(e.start <= decl.start_byte and decl.end_byte <= e.end for e in edits):
            logger.debug(f"{decl.signature} lies inside a replaced function; skipped")
            skipped += 1
            continue

        extracted = _extract_replacement(decl, patch.outcome.text or "")
        if extracted is None:
            skipped += 1
            continue
        new_text, base_indent = extracted

        original = decl.text(parsed.data)
        if normalized_code(new_text) == normalized_code(original):
            logger.info(f"Replacement for {decl.signature} is identical; skipped")
            skipped += 1
            continue

        new_text = reindent(new_text, base_indent, decl.indent, line_ending(parsed.data))
        edits.append(_Edit(decl.start_byte, decl.end_byte, new_text.encode("utf-8")))
        processed += 1

    return PatchResult(splice(parsed.data, edits), PatchStats(processed, skipped))
