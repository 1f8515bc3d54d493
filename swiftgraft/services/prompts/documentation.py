"""Documentation prompts.

Single-function prompts return plain comment text for one declaration.
Whole-file prompts either return one block per declaration, separated by a
delimiter line, or the complete file with comments already inserted.
"""

from enum import Enum

from swiftgraft.services.alignment import BLOCK_DELIMITER, NO_COMMENT_SENTINEL
from swiftgraft.services.prompts.common import ROLE_INSTRUCTION


class DocumentationStyle(str, Enum):
    BRIEF = "brief"
    DETAILED = "detailed"


class DocumentationFormat(str, Enum):
    SEPARATE_BLOCKS = "separate-blocks"
    FULL_CODE = "full-code"


def _function_style(style: DocumentationStyle) -> str:
    if style is DocumentationStyle.BRIEF:
        return "Write concise summary focusing on what the function does. Limit: 3-4 lines."
    return "Write detailed documentation including parameters and return value."


def _file_style(style: DocumentationStyle) -> str:
    if style is DocumentationStyle.BRIEF:
        return "Write concise, single-line documentation focusing on what the element does."
    return (
        "Write detailed documentation including parameters, return values, "
        "and usage examples where appropriate."
    )


def get_function_prompt(function_source: str, style: DocumentationStyle) -> str:
    """Prompt for the doc comment of a single declaration.

    Args:
        function_source: Source text of the declaration
        style: Brief or detailed documentation

    Returns:
        Complete prompt text
    """
    return f"""{ROLE_INSTRUCTION}

Generate Swift documentation comment for the following single function ONLY.

Output rules:
- Return ONLY plain text of the doc comment (no code fences, no /// prefixes).
- Do NOT include the original code.
- Do NOT use block comments (`/** ... */`).
- Use Xcode Quick Help sections.
- Include sections only when applicable.

Example:
Brief description of what the function does.

- Parameter name: Description
- Returns: Description
- Throws: Error conditions

Documentation style: {_function_style(style)}

Function:
{function_source}"""


def get_file_prompt(
    code: str,
    style: DocumentationStyle,
    declarations: list[str],
    return_format: DocumentationFormat,
) -> str:
    """Prompt documenting every declaration of the listed kinds in a file."""
    if return_format is DocumentationFormat.SEPARATE_BLOCKS:
        format_instruction = f"""Output format:
   - Each documentation block should be plain text (no /// prefixes)
   - Put a line containing only {BLOCK_DELIMITER} between consecutive blocks
   - Produce exactly one block per declaration; if a declaration needs no documentation, its block is {NO_COMMENT_SENTINEL}
   - Do NOT include the original code in your response"""
    else:
        format_instruction = """Output format:
   - Return the modified Swift source code with the generated documentation comments (///) directly inserted
   - Do NOT return the original unmodified code
   - Do NOT wrap the response in markdown or any additional formatting"""

    kinds = "\n   ".join(f"- {d}" for d in declarations)
    return f"""Generate Swift documentation comments for the following code. Follow these rules EXACTLY:

1. Generate documentation ONLY for these declaration types:
   {kinds}

2. Process declarations in the EXACT order they appear in the source code

3. Generate documentation for ALL declarations of the above types, regardless of access level, including nested ones

4. {format_instruction}

5. Documentation style: {_file_style(style)}

Swift code to document:

{code}"""
