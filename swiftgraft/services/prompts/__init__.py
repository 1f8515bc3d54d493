"""Prompt builders for every generation use case."""

from .documentation import DocumentationFormat, DocumentationStyle
from .documentation import get_file_prompt as documentation_file_prompt
from .documentation import get_function_prompt as documentation_function_prompt
from .explain import get_prompt as explain_prompt
from .fix import get_prompt as fix_prompt
from .review import get_prompt as review_prompt
from .tests import get_file_prompt as tests_file_prompt
from .tests import get_function_prompt as tests_function_prompt

__all__ = [
    "DocumentationFormat",
    "DocumentationStyle",
    "documentation_file_prompt",
    "documentation_function_prompt",
    "explain_prompt",
    "fix_prompt",
    "review_prompt",
    "tests_file_prompt",
    "tests_function_prompt",
]
