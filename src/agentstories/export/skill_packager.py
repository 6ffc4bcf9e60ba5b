"""
Skill packager.

Converts one ``Skill`` into a portable ``SKILL.md`` document (YAML
frontmatter plus a Markdown body with a fixed heading hierarchy) and
collects the skill's attached scripts and references as sibling files.

Packaging is pure: no I/O, and the input skill is never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import assert_never

from agentstories.config import SkillPackOptions
from agentstories.errors import InvalidSlugError, MissingSlugError
from agentstories.export.files import ExportedFile
from agentstories.models import (
    AdaptiveBehavior,
    AttachedFile,
    Behavior,
    IterativeBehavior,
    SequentialBehavior,
    Skill,
    WorkflowBehavior,
)
from agentstories.utils.text import (
    escape_table_cell,
    escape_yaml,
    generate_slug,
    is_valid_slug,
    safe_filename,
    unique_filename,
)

DESCRIPTION_MAX_LENGTH = 1024


@dataclass
class SkillPackage:
    """Result of packaging one skill."""

    artifact: str  # SKILL.md content
    slug: str
    scripts: list[ExportedFile] = field(default_factory=list)  # scripts/<filename>
    references: list[ExportedFile] = field(default_factory=list)  # references/<filename>
    warnings: list[str] = field(default_factory=list)

    @property
    def files(self) -> list[ExportedFile]:
        """SKILL.md followed by auxiliary files, relative to the skill directory."""
        return [ExportedFile("SKILL.md", self.artifact), *self.scripts, *self.references]


def resolve_slug(skill: Skill, options: SkillPackOptions) -> tuple[str, list[str]]:
    """
    Resolve the directory slug for ``skill``.

    Returns:
        The slug and any warnings produced while resolving it.

    Raises:
        MissingSlugError: No slug is configured and generation is disabled,
            or the name yields an empty slug.
        InvalidSlugError: The configured slug fails the slug pattern.
    """
    warnings: list[str] = []
    slug = skill.explicit_slug
    if not slug and options.generate_missing_slug:
        slug = generate_slug(skill.name)
        if slug:
            warnings.append(f'Generated slug "{slug}" from skill name')
    if not slug:
        raise MissingSlugError(skill.name)
    if not is_valid_slug(slug):
        raise InvalidSlugError(skill.name, slug)
    return slug, warnings


def pack_skill(skill: Skill, options: SkillPackOptions | None = None) -> SkillPackage:
    """
    Package ``skill`` as a portable skill directory.

    Args:
        skill: The skill to package
        options: Packaging options (defaults when None)

    Returns:
        SkillPackage with the SKILL.md artifact and auxiliary files
    """
    options = options or SkillPackOptions()
    slug, warnings = resolve_slug(skill, options)

    artifact = f"---\n{build_frontmatter(skill, slug)}---\n\n{build_body(skill)}"

    scripts: list[ExportedFile] = []
    references: list[ExportedFile] = []
    if skill.portability:
        if options.include_scripts:
            scripts = auxiliary_files("scripts", skill.portability.scripts, warnings)
        if options.include_references:
            references = auxiliary_files("references", skill.portability.references, warnings)

    return SkillPackage(
        artifact=artifact,
        slug=slug,
        scripts=scripts,
        references=references,
        warnings=warnings,
    )


def auxiliary_files(
    directory: str, attachments: list[AttachedFile], warnings: list[str]
) -> list[ExportedFile]:
    """Attachments with content as files under ``directory``, one path each."""
    taken: set[str] = set()
    files: list[ExportedFile] = []
    for attachment in attachments:
        if not attachment.content:
            continue
        filename = unique_filename(safe_filename(attachment.filename), taken)
        if filename != attachment.filename:
            warnings.append(f'"{attachment.filename}" exported as {directory}/{filename}')
        files.append(ExportedFile(f"{directory}/{filename}", attachment.content))
    return files


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


def build_frontmatter(skill: Skill, slug: str) -> str:
    lines = [
        f"name: {slug}",
        f"description: {escape_yaml(skill.description[:DESCRIPTION_MAX_LENGTH])}",
    ]

    portability = skill.portability
    if portability and portability.license:
        lines.append(f"license: {escape_yaml(portability.license)}")
    if portability and portability.compatibility:
        lines.append(f"compatibility: {escape_yaml(portability.compatibility)}")

    if skill.tools:
        tool_slugs = " ".join(generate_slug(t.name) for t in skill.tools)
        lines.append(f"allowed-tools: {escape_yaml(tool_slugs)}")

    lines.append("metadata:")
    lines.append(f"  domain: {escape_yaml(skill.domain)}")
    lines.append(f"  acquired: {skill.acquisition_mode.value}")
    if skill.id:
        lines.append(f"  source-id: {escape_yaml(skill.id)}")

    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------


def render_behavior(behavior: Behavior, heading: str = "###") -> list[str]:
    """
    Render a behavior's variant-specific content as Markdown lines.

    ``heading`` is the marker for the variant's section heading; stage
    headings inside a workflow use one level deeper.
    """
    lines: list[str] = []
    if isinstance(behavior, SequentialBehavior):
        lines.append(f"{heading} Steps\n")
        lines.extend(f"{i}. {step}" for i, step in enumerate(behavior.steps, start=1))
        lines.append("")
    elif isinstance(behavior, WorkflowBehavior):
        lines.append(f"{heading} Stages\n")
        for stage in behavior.stages:
            lines.append(f"{heading}# {stage.name}\n")
            if stage.purpose:
                lines.append(f"{stage.purpose}\n")
            if stage.actions:
                lines.append("Actions:")
                lines.extend(f"- {action}" for action in stage.actions)
            if stage.transitions:
                lines.append("\nTransitions:")
                lines.extend(f"- → {t.to} when {t.when}" for t in stage.transitions)
            lines.append("")
    elif isinstance(behavior, AdaptiveBehavior):
        lines.append(f"{heading} Capabilities\n")
        lines.extend(f"- {capability}" for capability in behavior.capabilities)
        if behavior.selection_strategy:
            lines.append(f"\n**Selection Strategy**: {behavior.selection_strategy}")
        lines.append("")
    elif isinstance(behavior, IterativeBehavior):
        lines.append(f"{heading} Iteration\n")
        lines.append("**Body**:")
        lines.extend(f"- {action}" for action in behavior.body)
        lines.append(f"\n**Terminates when**: {behavior.termination_condition}")
        if behavior.max_iterations:
            lines.append(f"**Max iterations**: {behavior.max_iterations}")
        lines.append("")
    else:
        assert_never(behavior)
    return lines


def build_body(skill: Skill) -> str:
    """Render the Markdown body of SKILL.md in its fixed section order."""
    lines: list[str] = [f"# {skill.name}\n", f"{skill.description}\n"]

    if skill.triggers:
        lines.append("## Triggers\n")
        for trigger in skill.triggers:
            lines.append(f"- **{trigger.type.value}**: {trigger.description}")
            if trigger.conditions:
                lines.append(f"  - Conditions: {', '.join(trigger.conditions)}")
            if trigger.examples:
                lines.append(f"  - Examples: {', '.join(trigger.examples)}")
        lines.append("")

    if skill.inputs or skill.outputs:
        lines.append("## Interface\n")
        if skill.inputs:
            lines.append("### Inputs\n")
            lines.append("| Name | Type | Required | Description |")
            lines.append("|------|------|----------|-------------|")
            for inp in skill.inputs:
                required = "Yes" if inp.required else "No"
                lines.append(
                    f"| {escape_table_cell(inp.name)} | {escape_table_cell(inp.type)} "
                    f"| {required} | {escape_table_cell(inp.description)} |"
                )
            lines.append("")
        if skill.outputs:
            lines.append("### Outputs\n")
            lines.append("| Name | Type | Description |")
            lines.append("|------|------|-------------|")
            for out in skill.outputs:
                lines.append(
                    f"| {escape_table_cell(out.name)} | {escape_table_cell(out.type)} "
                    f"| {escape_table_cell(out.description)} |"
                )
            lines.append("")

    if skill.behavior:
        lines.append("## Behavior\n")
        lines.append(f"**Model**: {skill.behavior.model}\n")
        lines.extend(render_behavior(skill.behavior))

    if skill.tools:
        lines.append("## Tools\n")
        lines.append("| Tool | Purpose | Permissions |")
        lines.append("|------|---------|-------------|")
        for tool in skill.tools:
            permissions = ", ".join(p.value for p in tool.permissions)
            lines.append(
                f"| {escape_table_cell(tool.name)} | {escape_table_cell(tool.purpose)} "
                f"| {permissions} |"
            )
        lines.append("")

    if skill.reasoning:
        reasoning = skill.reasoning
        lines.append("## Reasoning\n")
        lines.append(f"**Strategy**: {reasoning.strategy.value}\n")
        if reasoning.decision_points:
            lines.append("### Decision Points\n")
            for dp in reasoning.decision_points:
                lines.append(f"#### {dp.name}\n")
                lines.append(f"- **Inputs**: {', '.join(dp.inputs)}")
                lines.append(f"- **Approach**: {dp.approach}")
                if dp.outcomes:
                    lines.append(f"- **Outcomes**: {', '.join(dp.outcomes)}")
                lines.append("")
        if reasoning.retry:
            lines.append("### Retry Configuration\n")
            lines.append(f"- Max attempts: {reasoning.retry.max_attempts}")
            lines.append(f"- Backoff: {reasoning.retry.backoff_strategy}")
            if reasoning.retry.retry_on:
                lines.append(f"- Retry on: {', '.join(reasoning.retry.retry_on)}")
            lines.append("")

    acceptance = skill.acceptance
    lines.append("## Success Criteria\n")
    lines.append("### Conditions\n")
    lines.extend(f"- {condition}" for condition in acceptance.success_conditions)
    lines.append("")
    if acceptance.quality_metrics:
        lines.append("### Quality Metrics\n")
        lines.append("| Metric | Target |")
        lines.append("|--------|--------|")
        for metric in acceptance.quality_metrics:
            lines.append(
                f"| {escape_table_cell(metric.name)} | {escape_table_cell(metric.target)} |"
            )
        lines.append("")
    if acceptance.timeout:
        lines.append(f"**Timeout**: {acceptance.timeout}\n")

    if skill.failure_handling:
        handling = skill.failure_handling
        lines.append("## Error Handling\n")
        if handling.modes:
            lines.append("### Failure Modes\n")
            for mode in handling.modes:
                note = " *(escalate)*" if mode.escalate else ""
                lines.append(f"- **{mode.condition}**: {mode.recovery}{note}")
            lines.append("")
        if handling.default_fallback:
            lines.append(f"**Default fallback**: {handling.default_fallback}\n")

    if skill.guardrails:
        lines.append("## Guardrails\n")
        for guardrail in skill.guardrails:
            lines.append(f"### {guardrail.name}\n")
            lines.append(f"- **Constraint**: {guardrail.constraint}")
            lines.append(f"- **Enforcement**: {guardrail.enforcement.value}")
            if guardrail.on_violation:
                lines.append(f"- **On violation**: {guardrail.on_violation}")
            lines.append("")

    return "\n".join(lines)
