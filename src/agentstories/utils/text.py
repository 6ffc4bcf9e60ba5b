"""
Shared text helpers for every generator.

Slugs, YAML scalar escaping, Markdown table cells and Python source literals
are handled here so that all exporters and harness adapters treat special
characters the same way.
"""

from __future__ import annotations

import json
import keyword
import re
from pathlib import PurePosixPath

import yaml

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")
SLUG_MAX_LENGTH = 64

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")

# Characters that always force a quoted YAML scalar
_YAML_SPECIAL = re.compile(r"[:#\"'\[\]{}|>&*!?%@`,\n\r\t]")


# ---------------------------------------------------------------------------
# Slugs
# ---------------------------------------------------------------------------


def generate_slug(text: str) -> str:
    """
    Derive a slug from a human-readable name.

    Lowercases, collapses every run of non-alphanumerics to a single hyphen
    and strips leading/trailing hyphens. Deriving from an existing slug
    returns it unchanged.

    Example:
        >>> generate_slug("Tell Jokes!")
        'tell-jokes'
    """
    slug = _NON_SLUG_CHARS.sub("-", (text or "").lower()).strip("-")
    if len(slug) > SLUG_MAX_LENGTH:
        slug = slug[:SLUG_MAX_LENGTH].rstrip("-")
    return slug


def is_valid_slug(text: str | None) -> bool:
    """Check that ``text`` is a lowercase alphanumeric, hyphen-separated slug."""
    return bool(text) and SLUG_PATTERN.match(text) is not None


# ---------------------------------------------------------------------------
# File names
# ---------------------------------------------------------------------------


def safe_filename(name: str, fallback: str = "file") -> str:
    """
    Reduce a user-supplied name to a single path component.

    Directory parts are dropped, so the result can never leave the directory
    it is written to.

    Example:
        >>> safe_filename("../../agent.md")
        'agent.md'
    """
    base = PurePosixPath((name or "").replace("\\", "/")).name.strip()
    if base in ("", ".", ".."):
        return fallback
    return base


def unique_filename(name: str, taken: set[str]) -> str:
    """
    Return ``name``, or ``name`` with a ``-2``, ``-3``... suffix before the
    extension when it is already in ``taken``. The result is added to ``taken``.
    """
    path = PurePosixPath(name)
    stem, suffix = (path.stem, path.suffix) if path.stem else (name, "")
    candidate = name
    counter = 2
    while candidate in taken:
        candidate = f"{stem}-{counter}{suffix}"
        counter += 1
    taken.add(candidate)
    return candidate


# ---------------------------------------------------------------------------
# YAML / Markdown
# ---------------------------------------------------------------------------


def escape_yaml(value: object) -> str:
    """
    Render ``value`` as a YAML scalar for hand-written YAML documents.

    Plain text is emitted as-is. Values containing YAML syntax characters,
    newlines, surrounding whitespace, or text that YAML would read as a
    non-string (``true``, ``null``, ``1.0``) are wrapped in double quotes with
    backslashes, quotes and control characters escaped.
    """
    text = str(value)
    if not _needs_quotes(text):
        return text
    escaped = (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def _needs_quotes(text: str) -> bool:
    if not text or text != text.strip():
        return True
    if _YAML_SPECIAL.search(text) or text[0] == "-":
        return True
    try:
        return yaml.safe_load(text) != text
    except yaml.YAMLError:
        return True


def escape_table_cell(value: object) -> str:
    """Make ``value`` safe for a single Markdown table cell."""
    text = str(value) if value is not None else ""
    text = text.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return text.replace("|", "\\|")


def single_line(value: object) -> str:
    """Collapse all whitespace runs (including newlines) to single spaces."""
    return " ".join(str(value).split())


# ---------------------------------------------------------------------------
# Python source
# ---------------------------------------------------------------------------


def python_identifier(text: str, fallback: str = "unnamed") -> str:
    """Derive a snake_case Python identifier from a display name."""
    ident = generate_slug(text).replace("-", "_") or fallback
    if ident[0].isdigit():
        ident = f"_{ident}"
    if keyword.iskeyword(ident):
        ident = f"{ident}_"
    return ident


def python_string(text: str) -> str:
    """Render ``text`` as a double-quoted Python string literal."""
    return json.dumps(text, ensure_ascii=False)


def docstring_text(text: str) -> str:
    """Escape ``text`` for use inside a triple-quoted docstring."""
    escaped = text.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
    if escaped.endswith('"'):
        escaped = escaped[:-1] + '\\"'
    return escaped
