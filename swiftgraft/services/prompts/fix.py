"""Single-function fix prompt."""

from swiftgraft.services.alignment import NO_CHANGE_SENTINEL
from swiftgraft.services.prompts.common import join_sections

SYSTEM_ROLE = """You are a senior Swift engineer. Make minimal, safe fixes.
Preserve API/signature, semantics, and surrounding style.
Prefer clarity, thread-safety, ARC-safety, and correct error handling."""


def get_prompt(function_source: str, goals: str | None = None) -> str:
    """Ask for the fixed source of one function, or the no-change sentinel.

    Args:
        function_source: Source text of the function to fix
        goals: Optional free-form goals from the user
    """
    goals_text = f"Additional goals (optional, prioritize safety): {goals}" if goals else None
    instructions = f"""Fix the SINGLE Swift function below. Make minimal changes that improve:
- memory safety (avoid retain cycles, capture lists where needed)
- thread safety (e.g., main-thread UI)
- error handling and resource management
- readability and Swift best practices

STRICT OUTPUT:
- Return ONLY the fixed function source code.
- Keep the EXACT same signature (name, params, throws/async, generics, attributes).
- Do NOT add imports or surrounding types.
- Do NOT add comments unless necessary to clarify non-obvious change.
- If no change is needed, return exactly {NO_CHANGE_SENTINEL}"""
    return join_sections(
        SYSTEM_ROLE, instructions, goals_text, f"Function to fix:\n{function_source}"
    )
