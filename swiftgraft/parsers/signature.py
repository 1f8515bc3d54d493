"""Signature canonicalization.

Both derived declaration signatures and hand-typed targets are turned into
comparison keys by the same :func:`canonicalize`, so a target matches a
declaration regardless of how either was formatted. Whitespace, leading
modifiers, parameter attributes and default values are normalised away;
parameter order and spelling are significant.
"""

from __future__ import annotations

import re

from swiftgraft.core.models.declaration import DECLARATION_KEYWORDS

_MODIFIERS = (
    "public|private|fileprivate|internal|package|open|static|final|override|"
    "mutating|nonmutating|convenience|required|dynamic|nonisolated|indirect|"
    "optional|prefix|postfix|infix|distributed"
)

_LEADING_DECORATION = re.compile(
    r"^(?:@\w+(?:\([^)]*\))?"
    rf"|(?:{_MODIFIERS})(?:\(set\))?"
    r"|class(?=\s+func\b))\s+"
)

# Applied in order. Commas run before the bracket rules so that a space
# the comma rule adds in front of "(" is removed again in the same pass.
_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\s+"), " "),
    (re.compile(r"\s*,\s*"), ", "),
    (re.compile(r"\s*->\s*"), "->"),
    (re.compile(r"\s*:\s*"), ":"),
    (re.compile(r"\s*\(\s*"), "("),
    (re.compile(r"\s*\)\s*"), ")"),
    (re.compile(r"\s*<\s*"), "<"),
    (re.compile(r"\s*>\s*"), ">"),
    (re.compile(r"\s*\[\s*"), "["),
    (re.compile(r"\s*\]\s*"), "]"),
)

_PARAMETER_ATTRIBUTE = re.compile(r"@\w+(?:\([^)]*\))?\s*")
_OPENERS = "([{"
_CLOSERS = ")]}"

_EFFECT_WORDS = re.compile(r"\b(async|throws|rethrows)\b")
_WHERE_CLAUSE = re.compile(r"\swhere\s")


def canonicalize(signature_like: str) -> str:
    """Normalise a signature or header to its comparison key.

    >>> canonicalize("public func  foo (\\n  x : Int\\n)  ->  Int")
    'func foo(x:Int)->Int'
    """
    text = signature_like.strip()
    while True:
        stripped = _LEADING_DECORATION.sub("", text, count=1)
        if stripped == text:
            break
        text = stripped
    text = _strip_parameter_decorations(text)
    for pattern, replacement in _RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def _string_end(text: str, start: int) -> int:
    """Index just past the string literal opening at ``start``."""
    if text.startswith('"""', start):
        end = text.find('"""', start + 3)
        return len(text) if end < 0 else end + 3
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i + 1
        i += 1
    return len(text)


def _default_end(text: str, start: int) -> int:
    """Index of the ``,`` or closing bracket that ends a default value."""
    depth = 0
    i = start
    while i < len(text):
        ch = text[i]
        if ch == '"':
            i = _string_end(text, i)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            if depth == 0:
                return i
            depth -= 1
        elif ch == "," and depth == 0:
            return i
        i += 1
    return i


def _is_default_marker(text: str, i: int) -> bool:
    return text[i + 1 : i + 2] != "=" and text[i - 1] not in "=!"


def _strip_parameter_decorations(text: str) -> str:
    """Drop default values and attributes from the first parameter list."""
    start = text.find("(")
    if start < 0:
        return text
    out = [text[: start + 1]]
    depth = 1
    i = start + 1
    while i < len(text) and depth > 0:
        ch = text[i]
        if ch == '"':
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
            continue
        if depth == 1 and ch == "@":
            match = _PARAMETER_ATTRIBUTE.match(text, i)
            if match:
                i = match.end()
                continue
        if depth == 1 and ch == "=" and _is_default_marker(text, i):
            i = _default_end(text, i + 1)
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth -= 1
        out.append(ch)
        i += 1
    out.append(text[i:])
    return "".join(out)


def looks_like_signature(text: str) -> bool:
    """Heuristic: is ``text`` a signature/header rather than a bare name?"""
    s = text.strip()
    if not s:
        return False
    if s.split(None, 1)[0] in DECLARATION_KEYWORDS:
        return True
    if "(" in s and ")" in s:
        return True
    if "<" in s and ">" in s:
        return True
    if "->" in s or _EFFECT_WORDS.search(s):
        return True
    return bool(_WHERE_CLAUSE.search(f" {s} "))
