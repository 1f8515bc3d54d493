"""Single-function code review prompt."""

from swiftgraft.services.prompts.common import ROLE_INSTRUCTION


def get_prompt(function_source: str, signature: str) -> str:
    return f"""{ROLE_INSTRUCTION}

Do a focused code review of the SINGLE Swift function.

Strict:
- Plain text only. No code, no fences, no headings, no prefixes.
- Mention ONLY things present in the function (no assumptions).
- If no issues: output ONE short positive sentence.

Focus: correctness, safety, performance, API design, readability, Swift best practices.

Function signature:
{signature}

Function source:
{function_source}"""
