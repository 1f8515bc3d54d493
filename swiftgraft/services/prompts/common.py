"""Fragments shared by several prompts."""

ROLE_INSTRUCTION = """You are a Senior iOS Developer who writes clean, maintainable Swift code.
Follow Apple's coding guidelines and best practices."""


def join_sections(*sections: str | None) -> str:
    """Join non-empty prompt sections with blank lines."""
    return "\n\n".join(s.strip() for s in sections if s and s.strip())
