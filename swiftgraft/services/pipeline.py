"""Command pipelines: read, parse once, generate, align, patch, write once.

Each use case follows the same shape. The source file is validated and
parsed a single time; declarations are collected from that parse; one
generation call per declaration (or one per file) goes through the
bridge; results are aligned and spliced by the pure patcher; the file is
written atomically at most once, and only when something changed. Any
exception escapes before the write, so a failed run never touches the
file.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from loguru import logger

from swiftgraft.core.config import Config
from swiftgraft.core.exceptions import AlignmentError, EmptyResponseError
from swiftgraft.core.models import (
    AlignedPatch,
    Declaration,
    InsertionKind,
    PatchResult,
    PatchStats,
)
from swiftgraft.interfaces.text_generator import TextGenerator
from swiftgraft.parsers.declaration_collector import (
    CollectedDeclarations,
    DeclarationCollector,
    collect_functions,
)
from swiftgraft.parsers.swift_parser import ParsedSource, parse_swift
from swiftgraft.providers.generation.cancellation import CancellationToken
from swiftgraft.services import prompts
from swiftgraft.services.alignment import (
    NO_CHANGE_SENTINEL,
    align_by_order,
    align_by_signature,
    outcome_from_text,
    split_blocks,
)
from swiftgraft.services.prompts import DocumentationFormat, DocumentationStyle
from swiftgraft.services.source_patcher import apply_comments, apply_function_patches
from swiftgraft.utils.files import (
    read_source,
    resolve_tests_directory,
    validate_source_file,
    write_atomically,
)
from swiftgraft.utils.progress import spinner
from swiftgraft.utils.text import clean_generated_text, sanitize_prompt


class RunStatus(Enum):
    UNCHANGED = "unchanged"
    APPLIED = "applied"
    PARTIAL = "partial"
    PREVIEW = "preview"
    REWRITTEN = "rewritten"


@dataclass
class RunResult:
    """What a pipeline run did to its file."""

    path: Path
    status: RunStatus
    stats: PatchStats = field(default_factory=PatchStats)
    previews: list[tuple[str, str]] = field(default_factory=list)
    files: list[Path] = field(default_factory=list)

    def summary(self) -> str:
        if self.status is RunStatus.UNCHANGED:
            return f"Nothing changed ({self.stats.skipped} skipped): {self.path}"
        if self.status is RunStatus.PARTIAL:
            return (
                f"Partially applied ({self.stats.processed} processed, "
                f"{self.stats.skipped} skipped): {self.path}"
            )
        if self.status is RunStatus.REWRITTEN:
            return f"File regenerated as a whole: {self.path}"
        if self.status is RunStatus.PREVIEW:
            return f"Dry run, {len(self.previews)} result(s), no changes written: {self.path}"
        return f"Applied ({self.stats.processed} processed): {self.path}"


def status_for(stats: PatchStats) -> RunStatus:
    if stats.processed == 0:
        return RunStatus.UNCHANGED
    if stats.skipped:
        return RunStatus.PARTIAL
    return RunStatus.APPLIED


_UNSAFE_FILE_CHARS = re.compile(r"[^A-Za-z0-9_]")


class Pipeline:
    """Runs swiftgraft use cases against one generator.

    Args:
        config: Effective configuration
        generator: Text generator (normally the Ollama CLI bridge)
        token: Cancellation token shared by every call of this run
        show_progress: Show a spinner on stderr while generating
    """

    def __init__(
        self,
        config: Config,
        generator: TextGenerator,
        *,
        token: CancellationToken | None = None,
        show_progress: bool = True,
    ) -> None:
        self._config = config
        self._generator = generator
        self._token = token or CancellationToken()
        self._show_progress = show_progress

    # ----- Shared steps -----

    def _load(self, path: Path) -> tuple[Path, ParsedSource]:
        resolved = validate_source_file(Path(path), self._config.max_file_size)
        parsed = parse_swift(read_source(resolved))
        logger.info(f"Parsed {resolved}")
        return resolved, parsed

    async def _generate(self, prompt: str, label: str) -> str:
        prompt = sanitize_prompt(prompt, self._config.generation.prompt_max_length)
        with spinner(label, enabled=self._show_progress):
            return await self._generator.generate(prompt, token=self._token)

    def _commit(self, path: Path, parsed: ParsedSource, result: PatchResult) -> RunResult:
        status = status_for(result.stats)
        if status is RunStatus.UNCHANGED or result.text == parsed.text:
            logger.info(f"No changes written to {path}")
            return RunResult(path, RunStatus.UNCHANGED, result.stats)
        write_atomically(path, result.text)
        logger.info(
            f"Wrote {path} (processed={result.stats.processed}, skipped={result.stats.skipped})"
        )
        return RunResult(path, status, result.stats)

    @staticmethod
    def _select(collected: CollectedDeclarations, targets: Sequence[str]) -> list[Declaration]:
        if not targets:
            return list(collected)
        return collected.find_all(targets)

    async def _generate_by_signature(
        self, declarations: Sequence[Declaration], build_prompt, label: str
    ) -> dict[str, str]:
        """One generation per distinct canonical key, in source order."""
        texts: dict[str, str] = {}
        for decl in declarations:
            if decl.canonical_signature in texts:
                continue
            logger.info(f"{label}: {decl.signature}")
            texts[decl.canonical_signature] = await self._generate(
                build_prompt(decl), f"{label} {decl.name}"
            )
        return texts

    # ----- Documentation -----

    async def insert_docs(
        self,
        path: Path,
        targets: Sequence[str] = (),
        *,
        style: DocumentationStyle = DocumentationStyle.DETAILED,
        skip_existing: bool = False,
    ) -> RunResult:
        """Insert ``///`` documentation above declarations.

        With targets, each selected declaration gets its own generation and
        results are matched by signature. Without targets, the whole file
        is documented in one call whose blocks are matched by position;
        when the block count is off, the file is regenerated as a whole.
        """
        path, parsed = self._load(path)
        collector = DeclarationCollector(keywords=self._config.documentation_declarations)
        collected = collector.collect(parsed)
        logger.info(f"Found {len(collected)} declarations")

        if targets:
            return await self._insert_docs_by_signature(
                path, parsed, collected, targets, style, skip_existing
            )
        if not collected:
            logger.warning("No declarations to document")
            return RunResult(path, RunStatus.UNCHANGED)

        answer = await self._generate(
            prompts.documentation_file_prompt(
                parsed.text,
                style,
                self._config.documentation_declarations,
                DocumentationFormat.SEPARATE_BLOCKS,
            ),
            "Documenting file",
        )
        blocks = split_blocks(answer)
        try:
            patches = align_by_order(collected, blocks)
        except AlignmentError as e:
            logger.warning(f"{e}; falling back to whole-file documentation")
            return await self._rewrite_whole_file(path, parsed, style)

        result = apply_comments(
            parsed, patches, InsertionKind.DOCUMENTATION, skip_existing=skip_existing
        )
        return self._commit(path, parsed, result)

    async def _insert_docs_by_signature(
        self,
        path: Path,
        parsed: ParsedSource,
        collected: CollectedDeclarations,
        targets: Sequence[str],
        style: DocumentationStyle,
        skip_existing: bool,
    ) -> RunResult:
        selected = collected.find_all(targets)
        pending, pre_skipped = self._partition_existing(
            selected, InsertionKind.DOCUMENTATION, skip_existing
        )
        texts = await self._generate_by_signature(
            pending,
            lambda d: prompts.documentation_function_prompt(d.text(parsed.data), style),
            "Documenting",
        )
        result = apply_comments(
            parsed,
            align_by_signature(pending, texts),
            InsertionKind.DOCUMENTATION,
            skip_existing=skip_existing,
        )
        result = PatchResult(result.text, result.stats + PatchStats(0, pre_skipped))
        return self._commit(path, parsed, result)

    async def _rewrite_whole_file(
        self, path: Path, parsed: ParsedSource, style: DocumentationStyle
    ) -> RunResult:
        answer = await self._generate(
            prompts.documentation_file_prompt(
                parsed.text,
                style,
                self._config.documentation_declarations,
                DocumentationFormat.FULL_CODE,
            ),
            "Regenerating file",
        )
        code = clean_generated_text(answer)
        if not code:
            raise EmptyResponseError("documented file")
        # the rewrite replaces the file, so it must at least be valid Swift
        parse_swift(code)
        if not code.endswith("\n") and parsed.text.endswith("\n"):
            code += "\n"
        write_atomically(path, code)
        logger.info(f"Full documentation inserted into {path}")
        return RunResult(path, RunStatus.REWRITTEN)

    @staticmethod
    def _partition_existing(
        declarations: Sequence[Declaration], kind: InsertionKind, skip_existing: bool
    ) -> tuple[list[Declaration], int]:
        if not skip_existing:
            return list(declarations), 0
        pending = [d for d in declarations if not d.has_existing_annotation(kind)]
        return pending, len(declarations) - len(pending)

    # ----- Review -----

    async def review(
        self,
        path: Path,
        targets: Sequence[str],
        *,
        skip_existing: bool = True,
        dry_run: bool = False,
    ) -> RunResult:
        """Insert ``// REVIEW:`` comments above the targeted functions."""
        if not targets:
            raise ValueError("Review needs at least one target function")
        path, parsed = self._load(path)
        selected = collect_functions(parsed).find_all(targets)
        pending, pre_skipped = self._partition_existing(
            selected, InsertionKind.REVIEW, skip_existing
        )
        texts = await self._generate_by_signature(
            pending,
            lambda d: prompts.review_prompt(d.text(parsed.data), d.signature),
            "Reviewing",
        )

        if dry_run:
            previews = [
                (d.signature, clean_generated_text(texts[d.canonical_signature]))
                for d in pending
                if d.canonical_signature in texts
            ]
            return RunResult(
                path, RunStatus.PREVIEW, PatchStats(0, pre_skipped), previews=previews
            )

        result = apply_comments(
            parsed,
            align_by_signature(pending, texts),
            InsertionKind.REVIEW,
            skip_existing=skip_existing,
        )
        result = PatchResult(result.text, result.stats + PatchStats(0, pre_skipped))
        return self._commit(path, parsed, result)

    # ----- Fix -----

    async def fix(
        self,
        path: Path,
        targets: Sequence[str] = (),
        *,
        goals: str | None = None,
        apply: bool = False,
    ) -> RunResult:
        """Ask for a fixed version of each targeted function.

        Without ``apply`` the fixed sources are only returned as previews.
        Replacements are paired with the declaration they were generated
        for, so same-signature functions in different types never swap
        bodies.
        """
        path, parsed = self._load(path)
        selected = self._select(collect_functions(parsed), targets)
        if not selected:
            logger.warning("No matching functions found")
            return RunResult(path, RunStatus.UNCHANGED)

        patches: list[AlignedPatch] = []
        previews: list[tuple[str, str]] = []
        for decl in selected:
            logger.info(f"Fixing: {decl.signature}")
            answer = await self._generate(
                prompts.fix_prompt(decl.text(parsed.data), goals), f"Fixing {decl.name}"
            )
            outcome = outcome_from_text(answer, NO_CHANGE_SENTINEL)
            if not outcome.is_apply:
                logger.info(f"No changes for: {decl.signature}")
            else:
                previews.append((decl.signature, outcome.text or ""))
            patches.append(AlignedPatch(decl, outcome))

        if not apply:
            return RunResult(
                path,
                RunStatus.PREVIEW,
                PatchStats(0, len(selected) - len(previews)),
                previews=previews,
            )
        return self._commit(path, parsed, apply_function_patches(parsed, patches))

    # ----- Explain -----

    async def explain(self, path: Path, target: str) -> tuple[str, str]:
        """Explain one function; returns its signature and the explanation.

        Raises:
            DeclarationNotFoundError: Nothing matches ``target``
            AmbiguousTargetError: ``target`` names several overloads
        """
        _, parsed = self._load(path)
        decl = collect_functions(parsed).require_one(target)
        answer = await self._generate(
            prompts.explain_prompt(decl.text(parsed.data)), f"Explaining {decl.name}"
        )
        explanation = clean_generated_text(answer)
        if not explanation:
            raise EmptyResponseError("explanation")
        return decl.signature, explanation

    # ----- Tests -----

    async def generate_tests(
        self,
        path: Path,
        targets: Sequence[str] = (),
        *,
        output: str | None = None,
        custom_prompt: str | None = None,
    ) -> RunResult:
        """Write one XCTest file per targeted function.

        Files are named ``<SourceStem>_<function>Tests.swift``. When a name
        is already taken in this run (overloads, or a function whose name
        matches a numbered one) a ``_2``, ``_3``... suffix is added, so no
        file is written twice.
        """
        path, parsed = self._load(path)
        selected = self._select(collect_functions(parsed), targets)
        logger.info(f"Found {len(selected)} functions to test")
        tests_dir = resolve_tests_directory(path, output, self._config.tests_directory)

        written: list[Path] = []
        taken: set[str] = set()
        skipped = 0
        for decl in selected:
            answer = await self._generate(
                prompts.tests_function_prompt(
                    parsed.text, decl.name, decl.signature, custom_prompt
                ),
                f"Generating tests for {decl.name}",
            )
            code = clean_generated_text(answer)
            if not code:
                logger.warning(f"Empty test file generated for {decl.signature}; skipped")
                skipped += 1
                continue

            stem = _UNSAFE_FILE_CHARS.sub("_", decl.name) or "function"
            target = tests_dir / _unique_test_file(f"{path.stem}_{stem}", taken)
            write_atomically(target, code + "\n")
            logger.info(f"Tests for {decl.signature} written to {target}")
            written.append(target)

        stats = PatchStats(len(written), skipped)
        return RunResult(path, status_for(stats), stats, files=written)


def _unique_test_file(base: str, taken: set[str]) -> str:
    name = f"{base}Tests.swift"
    n = 1
    while name in taken:
        n += 1
        name = f"{base}_{n}Tests.swift"
    taken.add(name)
    return name
