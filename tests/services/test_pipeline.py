"""End-to-end tests of the command pipelines with a fake generator."""

import pytest

from swiftgraft.core.config import Config
from swiftgraft.core.exceptions import (
    AmbiguousTargetError,
    DeclarationNotFoundError,
    EmptyResponseError,
    GeneratorExecutionError,
    PromptTooLongError,
    SourceParseError,
)
from swiftgraft.services.pipeline import Pipeline, RunStatus
from tests.fixtures.fake_generator import FakeGenerator
from tests.fixtures.swift_sources import GREETER, OVERLOADS

TWO_FUNCTIONS = """\
import Foundation

func first() -> Int {
    return 1
}

func second() -> Int {
    return 2
}
"""


@pytest.fixture
def config():
    return Config(documentation_declarations=["func"])


@pytest.fixture
def swift_file(tmp_path):
    def _write(source: str, name: str = "Sample.swift"):
        path = tmp_path / name
        path.write_text(source)
        return path

    return _write


def _pipeline(config, responses):
    generator = FakeGenerator(responses)
    return Pipeline(config, generator, show_progress=False), generator


class TestInsertDocs:
    @pytest.mark.asyncio
    async def test_ordinal_blocks(self, config, swift_file):
        path = swift_file(TWO_FUNCTIONS)
        pipeline, generator = _pipeline(config, ["Returns one.\n@@@\nReturns two."])

        result = await pipeline.insert_docs(path)

        assert result.status is RunStatus.APPLIED
        assert result.stats.processed == 2
        assert path.read_text() == TWO_FUNCTIONS.replace(
            "func first", "/// Returns one.\nfunc first"
        ).replace("func second", "/// Returns two.\nfunc second")
        assert len(generator.prompts) == 1
        assert "- func" in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_no_comment_sentinel_gives_partial_result(self, config, swift_file):
        path = swift_file(TWO_FUNCTIONS)
        pipeline, _ = _pipeline(config, ["__NO_COMMENT__\n@@@\nReturns two."])

        result = await pipeline.insert_docs(path)

        assert result.status is RunStatus.PARTIAL
        assert "Partially applied (1 processed, 1 skipped)" in result.summary()
        assert "/// Returns two.\nfunc second" in path.read_text()

    @pytest.mark.asyncio
    async def test_block_count_mismatch_falls_back_to_whole_file(self, config, swift_file):
        path = swift_file(TWO_FUNCTIONS)
        documented = "```swift\n/// One.\nfunc first() -> Int { 1 }\n```"
        pipeline, generator = _pipeline(config, ["Only one block.", documented])

        result = await pipeline.insert_docs(path)

        assert result.status is RunStatus.REWRITTEN
        assert path.read_text() == "/// One.\nfunc first() -> Int { 1 }\n"
        assert len(generator.prompts) == 2

    @pytest.mark.asyncio
    async def test_unparsable_fallback_is_not_written(self, config, swift_file):
        path = swift_file(TWO_FUNCTIONS)
        pipeline, _ = _pipeline(config, ["Only one block.", "func broken( {"])

        with pytest.raises(SourceParseError):
            await pipeline.insert_docs(path)
        assert path.read_text() == TWO_FUNCTIONS

    @pytest.mark.asyncio
    async def test_targets_use_one_call_per_declaration(self, config, swift_file):
        path = swift_file(OVERLOADS)
        pipeline, generator = _pipeline(config, ["Doubles a string."])

        result = await pipeline.insert_docs(path, ["func foo(y: String) -> String"])

        assert result.stats.processed == 1
        assert "/// Doubles a string.\nfunc foo(y: String)" in path.read_text()
        assert "func foo(y: String) -> String" in generator.prompts[0]

    @pytest.mark.asyncio
    async def test_skip_existing_avoids_generation(self, config, swift_file):
        path = swift_file("/// Already documented.\nfunc done() {}\n")
        pipeline, generator = _pipeline(config, [])

        result = await pipeline.insert_docs(path, ["done"], skip_existing=True)

        assert result.status is RunStatus.UNCHANGED
        assert result.stats.skipped == 1
        assert generator.prompts == []

    @pytest.mark.asyncio
    async def test_generator_failure_writes_nothing(self, config, swift_file):
        path = swift_file(TWO_FUNCTIONS)
        pipeline, _ = _pipeline(config, [GeneratorExecutionError(1, "model crashed")])

        with pytest.raises(GeneratorExecutionError):
            await pipeline.insert_docs(path)
        assert path.read_text() == TWO_FUNCTIONS

    @pytest.mark.asyncio
    async def test_unknown_target(self, config, swift_file):
        path = swift_file(TWO_FUNCTIONS)
        pipeline, generator = _pipeline(config, [])
        with pytest.raises(DeclarationNotFoundError):
            await pipeline.insert_docs(path, ["third"])
        assert generator.prompts == []

    @pytest.mark.asyncio
    async def test_prompt_too_long(self, swift_file):
        config = Config(generation={"prompt_max_length": 50})
        path = swift_file(TWO_FUNCTIONS)
        pipeline, generator = _pipeline(config, [])
        with pytest.raises(PromptTooLongError):
            await pipeline.insert_docs(path)
        assert generator.prompts == []


class TestReview:
    @pytest.mark.asyncio
    async def test_inserts_review_comments(self, config, swift_file):
        path = swift_file(GREETER)
        pipeline, _ = _pipeline(config, ["Use string interpolation."])

        result = await pipeline.review(path, ["greet"])

        assert result.status is RunStatus.APPLIED
        assert "    // REVIEW: Use string interpolation.\n    func greet()" in path.read_text()

    @pytest.mark.asyncio
    async def test_dry_run_does_not_write(self, config, swift_file):
        path = swift_file(GREETER)
        pipeline, _ = _pipeline(config, ["Fine.", "Also fine."])

        result = await pipeline.review(path, ["greet", "farewell"], dry_run=True)

        assert result.status is RunStatus.PREVIEW
        assert [sig for sig, _ in result.previews] == [
            "func greet() -> String",
            "func farewell() -> String",
        ]
        assert path.read_text() == GREETER

    @pytest.mark.asyncio
    async def test_requires_a_target(self, config, swift_file):
        pipeline, _ = _pipeline(config, [])
        with pytest.raises(ValueError):
            await pipeline.review(swift_file(GREETER), [])


class TestFix:
    @pytest.mark.asyncio
    async def test_preview_without_apply(self, config, swift_file):
        path = swift_file(GREETER)
        fixed = 'func greet() -> String {\n    return "Hello, \\(name)"\n}'
        pipeline, _ = _pipeline(config, [fixed, "__NO_CHANGE__"])

        result = await pipeline.fix(path)

        assert result.status is RunStatus.PREVIEW
        assert result.previews == [("func greet() -> String", fixed)]
        assert path.read_text() == GREETER

    @pytest.mark.asyncio
    async def test_apply(self, config, swift_file):
        path = swift_file(GREETER)
        fixed = '```swift\nfunc greet() -> String {\n    return "Hi, \\(name)"\n}\n```'
        pipeline, _ = _pipeline(config, [fixed])

        result = await pipeline.fix(path, ["greet"], apply=True)

        assert result.status is RunStatus.APPLIED
        assert path.read_text() == GREETER.replace(
            '        return "Hello, " + name\n', '        return "Hi, \\(name)"\n'
        )

    @pytest.mark.asyncio
    async def test_rejected_replacement_leaves_file_untouched(self, config, swift_file):
        path = swift_file(GREETER)
        pipeline, _ = _pipeline(config, ["let nothing = 0"])

        result = await pipeline.fix(path, ["greet"], apply=True)

        assert result.status is RunStatus.UNCHANGED
        assert result.stats.skipped == 1
        assert path.read_text() == GREETER


class TestExplain:
    @pytest.mark.asyncio
    async def test_explains_one_function(self, config, swift_file):
        pipeline, _ = _pipeline(config, ["  It doubles x.  "])
        signature, text = await pipeline.explain(
            swift_file(OVERLOADS), "func foo(x: Int) -> Int"
        )
        assert signature == "func foo(x: Int) -> Int"
        assert text == "It doubles x."

    @pytest.mark.asyncio
    async def test_ambiguous_target(self, config, swift_file):
        pipeline, generator = _pipeline(config, [])
        with pytest.raises(AmbiguousTargetError):
            await pipeline.explain(swift_file(OVERLOADS), "foo")
        assert generator.prompts == []

    @pytest.mark.asyncio
    async def test_empty_explanation(self, config, swift_file):
        pipeline, _ = _pipeline(config, ["```\n```"])
        with pytest.raises(EmptyResponseError):
            await pipeline.explain(swift_file(GREETER), "greet")


class TestGenerateTests:
    @pytest.mark.asyncio
    async def test_writes_one_file_per_function(self, config, swift_file):
        path = swift_file(OVERLOADS, name="Math.swift")
        pipeline, _ = _pipeline(
            config, ["```swift\nimport XCTest\nfinal class A {}\n```", "import XCTest"]
        )

        result = await pipeline.generate_tests(path)

        tests_dir = path.resolve().parent / "GeneratedTests"
        assert [p.name for p in result.files] == ["Math_fooTests.swift", "Math_foo_2Tests.swift"]
        assert (tests_dir / "Math_fooTests.swift").read_text() == (
            "import XCTest\nfinal class A {}\n"
        )

    @pytest.mark.asyncio
    async def test_numbered_names_never_overwrite_real_functions(self, config, swift_file):
        source = (
            "func foo(x: Int) -> Int { x }\n"
            "func foo(y: String) -> String { y }\n"
            "func foo_2() {}\n"
        )
        path = swift_file(source, name="Math.swift")
        pipeline, _ = _pipeline(config, ["// a", "// b", "// c"])

        result = await pipeline.generate_tests(path)

        assert [p.name for p in result.files] == [
            "Math_fooTests.swift",
            "Math_foo_2Tests.swift",
            "Math_foo_2_2Tests.swift",
        ]
        assert [p.read_text() for p in result.files] == ["// a\n", "// b\n", "// c\n"]

    @pytest.mark.asyncio
    async def test_output_override_and_custom_prompt(self, config, swift_file):
        path = swift_file(GREETER, name="Greeter.swift")
        pipeline, generator = _pipeline(config, ["import XCTest"])

        result = await pipeline.generate_tests(
            path, ["farewell"], output="Out", custom_prompt="Use Quick"
        )

        assert result.files == [path.resolve().parent / "Out" / "Greeter_farewellTests.swift"]
        assert "Use Quick" in generator.prompts[0]
