"""XCTest generation prompts."""

from swiftgraft.services.prompts.common import ROLE_INSTRUCTION, join_sections


def _custom(custom_prompt: str | None) -> str | None:
    if not custom_prompt:
        return None
    return f"This is custom prompt from user:\n\n{custom_prompt}"


def get_function_prompt(
    code: str, function_name: str, signature: str, custom_prompt: str | None = None
) -> str:
    """Prompt for a test file covering one function of ``code``."""
    file_header = f"This file contains the following Swift code:\n\n{code}"
    instruction = f"""Write unit tests for the function named "{function_name}" with signature `{signature}` using XCTest.
Each test should be independent and cover typical use cases and edge cases.
Use descriptive test method names that reflect behavior being tested.
If the function is asynchronous, use `XCTestExpectation` or `async/await`.
Return ONLY the Swift source of the test file."""
    return join_sections(file_header, ROLE_INSTRUCTION, instruction, _custom(custom_prompt))


def get_file_prompt(code: str, custom_prompt: str | None = None) -> str:
    """Prompt for a test file covering a whole source file."""
    file_header = f"Generate a complete Swift unit test file for the following source code:\n\n{code}"
    instruction = (
        "Use XCTest, avoid redundant tests, and ensure good naming conventions.\n"
        "Return ONLY the Swift source of the test file."
    )
    return join_sections(file_header, ROLE_INSTRUCTION, instruction, _custom(custom_prompt))
