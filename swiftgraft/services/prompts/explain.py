"""Single-function explanation prompt."""

from swiftgraft.services.prompts.common import ROLE_INSTRUCTION


def get_prompt(function_source: str) -> str:
    return f"""{ROLE_INSTRUCTION}

Explain the SINGLE Swift function below.

Output rules (strict):
- Plain text only (no code blocks, no markdown fences).
- Be concise but specific.
- Cover: purpose, inputs/outputs, side effects (I/O, file system), errors thrown, notable edge cases.
- Mention only what is visible in the function (no assumptions).

Function:
{function_source}"""
