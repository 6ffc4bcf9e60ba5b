"""Utility helpers."""

from agentstories.utils.text import (
    SLUG_PATTERN,
    docstring_text,
    escape_table_cell,
    escape_yaml,
    generate_slug,
    is_valid_slug,
    python_identifier,
    python_string,
    single_line,
)

__all__ = [
    "SLUG_PATTERN",
    "docstring_text",
    "escape_table_cell",
    "escape_yaml",
    "generate_slug",
    "is_valid_slug",
    "python_identifier",
    "python_string",
    "single_line",
]
