"""
Exception hierarchy for the export pipeline.

Configuration problems on a single skill fail fast with a ``SkillExportError``
subclass; callers decide whether to substitute a fallback or abort.
Compatibility problems are never raised, they are reported as data on
``HarnessCompatibility``.
"""

from __future__ import annotations


class AgentStoriesError(Exception):
    """Base class for all agentstories errors."""


class SkillExportError(AgentStoriesError):
    """A skill could not be packaged."""

    def __init__(self, skill_name: str, message: str) -> None:
        super().__init__(message)
        self.skill_name = skill_name


class MissingSlugError(SkillExportError):
    """The skill has no slug and slug generation is disabled."""

    def __init__(self, skill_name: str) -> None:
        super().__init__(
            skill_name,
            f'Missing slug for skill "{skill_name}". '
            "Configure portability settings or enable generate_missing_slug.",
        )


class InvalidSlugError(SkillExportError):
    """The skill's explicit slug does not match the slug pattern."""

    def __init__(self, skill_name: str, slug: str) -> None:
        super().__init__(
            skill_name,
            f'Invalid slug "{slug}" for skill "{skill_name}". '
            "Must be lowercase alphanumeric with hyphens.",
        )
        self.slug = slug


class SpecificationLoadError(AgentStoriesError):
    """A specification document could not be read or parsed."""
