"""
Filesystem exporter.

Assembles the complete multi-file export of one agent specification::

    <root>/
    ├── agent.md
    ├── config.yaml
    ├── README.md
    ├── skills/<slug>/SKILL.md, config.yaml, scripts/, references/,
    │                 prompts/, tools/, examples/, templates/
    ├── memory/config.yaml, short_term/, long_term/
    ├── shared/tools/, shared/prompts/
    └── logs/

A failure while packaging one skill never aborts the export: the skill gets
a minimal fallback SKILL.md and the failure is recorded as a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, assert_never

import yaml

from agentstories.config import FilesystemExportOptions, RuntimeDefaults
from agentstories.export.files import ExportedFile
from agentstories.export.skill_packager import pack_skill
from agentstories.logging import get_logger
from agentstories.models import (
    AdaptiveBehavior,
    AgentSpecification,
    Behavior,
    HumanInteractionMode,
    IterativeBehavior,
    MemoryConfiguration,
    Portability,
    SequentialBehavior,
    Skill,
    SkillPrompt,
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

logger = get_logger("export.filesystem")

HUMAN_INTERACTION_LABELS = {
    HumanInteractionMode.IN_THE_LOOP: "In the loop (human approval for every decision)",
    HumanInteractionMode.ON_THE_LOOP: "On the loop (human monitors, intervenes on exceptions)",
    HumanInteractionMode.OUT_OF_LOOP: "Out of loop (fully autonomous within boundaries)",
}

README_TREE_SKILLS = 3  # Skill directories listed in the README tree preview


@dataclass
class FilesystemExportResult:
    """
    Files produced for one specification.

    ``estimated_size_bytes`` sums the length of every file's content. For
    binary files that is the length of the base64 text, so it is an
    approximation suitable for previews only.
    """

    files: list[ExportedFile]
    root_directory_name: str
    warnings: list[str] = field(default_factory=list)
    skill_count: int = 0

    @property
    def total_files(self) -> int:
        return len(self.files)

    @property
    def estimated_size_bytes(self) -> int:
        return sum(len(f.content) for f in self.files)

    def get(self, path: str) -> ExportedFile | None:
        """Look up a file by its path relative to the root."""
        for f in self.files:
            if f.path == path:
                return f
        return None


def root_directory_name(spec: AgentSpecification) -> str:
    """``identifier`` (slugified when invalid), else a slug of ``name``, else ``"agent"``."""
    if is_valid_slug(spec.identifier):
        return spec.identifier  # type: ignore[return-value]
    return generate_slug(spec.identifier or "") or generate_slug(spec.name) or "agent"


def export_specification(
    spec: AgentSpecification,
    options: FilesystemExportOptions | None = None,
    runtime: RuntimeDefaults | None = None,
) -> FilesystemExportResult:
    """
    Export ``spec`` as a complete agent directory.

    Args:
        spec: The specification to export (never mutated)
        options: Which optional parts to emit
        runtime: Defaults written into the generated config.yaml

    Returns:
        FilesystemExportResult with files relative to the root directory
    """
    options = options or FilesystemExportOptions()
    runtime = runtime or RuntimeDefaults()
    warnings: list[str] = []
    root = root_directory_name(spec)

    slugs = assign_skill_slugs(spec.skills, options, warnings)

    files: list[ExportedFile] = [
        ExportedFile("agent.md", generate_agent_md(spec, slugs)),
        ExportedFile("config.yaml", generate_agent_config(spec, runtime)),
    ]
    if options.generate_readme:
        files.append(ExportedFile("README.md", generate_readme(spec, slugs)))

    skill_count = 0
    if options.include_skills:
        for skill, slug in zip(spec.skills, slugs):
            files.extend(export_skill_directory(skill, slug, options, warnings))
            skill_count += 1

    if options.include_memory_structure:
        files.append(
            ExportedFile("memory/config.yaml", generate_memory_config(spec.memory))
        )
        if options.include_gitkeep:
            files.append(ExportedFile("memory/short_term/.gitkeep", ""))
            files.append(ExportedFile("memory/long_term/.gitkeep", ""))

    if options.include_shared_tools:
        files.append(ExportedFile("shared/tools/__init__.py", '"""Shared tools module."""\n'))
        files.append(ExportedFile("shared/tools/base_tool.py", BASE_TOOL_PY))
        if spec.purpose:
            files.append(
                ExportedFile("shared/prompts/system_prompt.md", generate_system_prompt(spec))
            )

    if options.include_logs and options.include_gitkeep:
        files.append(ExportedFile("logs/.gitkeep", ""))

    result = FilesystemExportResult(
        files=files,
        root_directory_name=root,
        warnings=warnings,
        skill_count=skill_count,
    )
    logger.debug(
        "Exported %s: %d skills, %d files, ~%d bytes",
        root,
        skill_count,
        result.total_files,
        result.estimated_size_bytes,
    )
    return result


# ---------------------------------------------------------------------------
# Skills
# ---------------------------------------------------------------------------


def assign_skill_slugs(
    skills: list[Skill],
    options: FilesystemExportOptions,
    warnings: list[str],
) -> list[str]:
    """
    Pick one unique directory slug per skill, in skill order.

    A slug already taken by an earlier skill gets a numeric suffix.
    """
    taken: set[str] = set()
    slugs: list[str] = []
    for index, skill in enumerate(skills, start=1):
        explicit = skill.explicit_slug
        if explicit and not is_valid_slug(explicit) and options.validate_agentskills_compat:
            warnings.append(f'Skill "{skill.name}" has invalid slug "{explicit}"')

        if explicit and is_valid_slug(explicit):
            base = explicit
        else:
            base = (
                generate_slug(explicit or skill.name)
                or generate_slug(skill.name)
                or f"skill-{index}"
            )

        slug = base
        suffix = 2
        while slug in taken:
            slug = f"{base}-{suffix}"
            suffix += 1
        if slug != base:
            warnings.append(
                f'Skill "{skill.name}" shares slug "{base}"; exported to skills/{slug}/'
            )
        taken.add(slug)
        slugs.append(slug)
    return slugs


def export_skill_directory(
    skill: Skill,
    slug: str,
    options: FilesystemExportOptions,
    warnings: list[str],
) -> list[ExportedFile]:
    """Generate every file under ``skills/<slug>/`` for one skill."""
    skill_dir = f"skills/{slug}"
    files: list[ExportedFile] = []

    # Renamed duplicates are packaged under their assigned slug
    resolved = skill.explicit_slug or generate_slug(skill.name)
    if slug != resolved and is_valid_slug(resolved):
        portability = replace(skill.portability or Portability(), slug=slug)
        skill = replace(skill, portability=portability)

    try:
        package = pack_skill(skill, options.skill_pack_options())
    except Exception as e:
        logger.warning("Failed to package skill %r: %s", skill.name, e)
        warnings.append(f'Failed to export SKILL.md for "{skill.name}": {e}')
        files.append(ExportedFile(f"{skill_dir}/SKILL.md", generate_basic_skill_md(skill, slug)))
    else:
        files.extend(f.under(skill_dir) for f in package.files)
        warnings.extend(f"[{skill.name}] {w}" for w in package.warnings)

    files.append(ExportedFile(f"{skill_dir}/config.yaml", generate_skill_config(skill)))

    gitkeep = options.include_gitkeep
    if options.include_prompts:
        if skill.prompts:
            paths = attachment_paths(
                skill, f"{skill_dir}/prompts", [f"{p.name}.md" for p in skill.prompts], warnings
            )
            files.extend(
                ExportedFile(path, generate_prompt_file(p)) for path, p in zip(paths, skill.prompts)
            )
        elif gitkeep:
            files.append(ExportedFile(f"{skill_dir}/prompts/.gitkeep", ""))

    if options.include_tool_implementations:
        if skill.tool_implementations:
            paths = attachment_paths(
                skill,
                f"{skill_dir}/tools",
                [t.filename for t in skill.tool_implementations],
                warnings,
            )
            files.extend(
                ExportedFile(path, t.content)
                for path, t in zip(paths, skill.tool_implementations)
            )
        elif gitkeep:
            files.append(ExportedFile(f"{skill_dir}/tools/.gitkeep", ""))

    if options.include_examples:
        if skill.examples:
            paths = attachment_paths(
                skill, f"{skill_dir}/examples", [f"{e.name}.md" for e in skill.examples], warnings
            )
            files.extend(ExportedFile(path, e.content) for path, e in zip(paths, skill.examples))
        elif gitkeep:
            files.append(ExportedFile(f"{skill_dir}/examples/.gitkeep", ""))

    if options.include_templates:
        if skill.templates:
            paths = attachment_paths(
                skill, f"{skill_dir}/templates", [t.filename for t in skill.templates], warnings
            )
            files.extend(ExportedFile(path, t.content) for path, t in zip(paths, skill.templates))
        elif gitkeep:
            files.append(ExportedFile(f"{skill_dir}/templates/.gitkeep", ""))

    return files


def attachment_paths(
    skill: Skill,
    directory: str,
    names: list[str],
    warnings: list[str],
) -> list[str]:
    """
    One path per attachment under ``directory``, in order.

    Names are reduced to a single file name and repeated names get a numeric
    suffix, so no two attachments share a path and none leaves ``directory``.
    """
    taken: set[str] = set()
    paths: list[str] = []
    for name in names:
        filename = unique_filename(safe_filename(name), taken)
        if filename != name:
            warnings.append(f'[{skill.name}] "{name}" exported as {directory}/{filename}')
        paths.append(f"{directory}/{filename}")
    return paths


def generate_basic_skill_md(skill: Skill, slug: str) -> str:
    """Minimal SKILL.md used when full packaging fails."""
    return "\n".join(
        [
            "---",
            f"name: {slug}",
            f"description: {escape_yaml(skill.description)}",
            "---",
            "",
            f"# {skill.name}",
            "",
            skill.description,
        ]
    )


def behavior_to_config(behavior: Behavior) -> dict[str, Any]:
    """Structured form of a behavior for YAML configuration documents."""
    data: dict[str, Any] = {"model": behavior.model}
    if isinstance(behavior, SequentialBehavior):
        data["steps"] = list(behavior.steps)
    elif isinstance(behavior, WorkflowBehavior):
        if behavior.entry_stage:
            data["entry_stage"] = behavior.entry_stage
        data["stages"] = [
            {
                "name": stage.name,
                "purpose": stage.purpose,
                "actions": list(stage.actions),
                "transitions": [{"to": t.to, "when": t.when} for t in stage.transitions],
            }
            for stage in behavior.stages
        ]
    elif isinstance(behavior, AdaptiveBehavior):
        data["capabilities"] = list(behavior.capabilities)
        if behavior.selection_strategy:
            data["selection_strategy"] = behavior.selection_strategy
    elif isinstance(behavior, IterativeBehavior):
        data["body"] = list(behavior.body)
        data["termination_condition"] = behavior.termination_condition
        if behavior.max_iterations is not None:
            data["max_iterations"] = behavior.max_iterations
    else:
        assert_never(behavior)
    return data


def generate_skill_config(skill: Skill) -> str:
    """Generate ``skills/<slug>/config.yaml``."""
    data: dict[str, Any] = {"version": "1.0"}

    if skill.triggers:
        triggers = []
        for trigger in skill.triggers:
            entry: dict[str, Any] = {
                "type": trigger.type.value,
                "description": trigger.description,
            }
            if trigger.conditions:
                entry["conditions"] = list(trigger.conditions)
            if trigger.examples:
                entry["examples"] = list(trigger.examples)
            triggers.append(entry)
        data["triggers"] = triggers

    if skill.behavior:
        data["behavior"] = behavior_to_config(skill.behavior)

    if skill.reasoning:
        reasoning: dict[str, Any] = {"strategy": skill.reasoning.strategy.value}
        confidence = skill.reasoning.confidence
        if confidence:
            reasoning["confidence_threshold"] = confidence.threshold
            reasoning["fallback"] = confidence.fallback_action
        if skill.reasoning.decision_points:
            reasoning["decision_points"] = [
                {"name": dp.name, "approach": dp.approach, "outcomes": list(dp.outcomes)}
                for dp in skill.reasoning.decision_points
            ]
        retry = skill.reasoning.retry
        if retry:
            reasoning["retry"] = {
                "max_attempts": retry.max_attempts,
                "backoff": retry.backoff_strategy,
                "retry_on": list(retry.retry_on),
            }
        data["reasoning"] = reasoning

    if skill.tools:
        data["tools"] = [
            {
                "name": tool.name,
                "required": tool.required,
                "permissions": [p.value for p in tool.permissions],
            }
            for tool in skill.tools
        ]

    acceptance: dict[str, Any] = {
        "success_conditions": list(skill.acceptance.success_conditions)
    }
    if skill.acceptance.quality_metrics:
        acceptance["quality_metrics"] = {
            m.name: m.target for m in skill.acceptance.quality_metrics
        }
    if skill.acceptance.timeout:
        acceptance["timeout"] = skill.acceptance.timeout
    data["acceptance"] = acceptance

    if skill.guardrails:
        data["guardrails"] = [
            {"name": g.name, "constraint": g.constraint, "enforcement": g.enforcement.value}
            for g in skill.guardrails
        ]

    return "# Skill Configuration\n" + _dump_yaml(data)


def generate_prompt_file(prompt: SkillPrompt) -> str:
    lines = ["---", f"name: {escape_yaml(prompt.name)}"]
    if prompt.inputs:
        lines.append("inputs:")
        for inp in prompt.inputs:
            lines.append(f"  - name: {escape_yaml(inp.name)}")
            lines.append(f"    type: {escape_yaml(inp.type)}")
            lines.append(f"    required: {'true' if inp.required else 'false'}")
            if inp.description:
                lines.append(f"    description: {escape_yaml(inp.description)}")
    if prompt.outputs:
        lines.append("outputs:")
        for out in prompt.outputs:
            lines.append(f"  - name: {escape_yaml(out.name)}")
            lines.append(f"    type: {escape_yaml(out.type)}")
            if out.description:
                lines.append(f"    description: {escape_yaml(out.description)}")
    lines.append("---")
    lines.append("")
    lines.append(f"# {prompt.name.replace('_', ' ').title()}")
    lines.append("")
    lines.append(prompt.description)
    lines.append("")
    lines.append(prompt.content)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Agent-level documents
# ---------------------------------------------------------------------------


def generate_agent_md(spec: AgentSpecification, slugs: list[str]) -> str:
    """Generate the primary ``agent.md`` descriptor."""
    lines = [
        "---",
        f"name: {escape_yaml(root_directory_name(spec))}",
        f"version: {escape_yaml(spec.version)}",
        f"description: {escape_yaml(spec.purpose or spec.name)}",
    ]
    if spec.autonomy_level:
        lines.append(f"autonomy: {spec.autonomy_level.value}")
    if spec.created_at:
        lines.append(f"created: {escape_yaml(spec.created_at)}")
    if spec.updated_at and spec.updated_at != spec.created_at:
        lines.append(f"updated: {escape_yaml(spec.updated_at)}")
    lines.extend(["---", "", f"# {spec.name}", ""])

    if spec.purpose:
        lines.extend(["## Purpose", "", spec.purpose, ""])
    if spec.role:
        lines.extend(["## Role", "", spec.role, ""])

    if spec.skills:
        lines.extend(["## Capabilities", "", "This agent has the following skills:"])
        for skill, slug in zip(spec.skills, slugs):
            lines.append(f"- [{skill.name}](skills/{slug}/SKILL.md) - {skill.description[:100]}")
        lines.append("")

    policy = spec.human_interaction
    if policy:
        lines.extend(["## Human Interaction", ""])
        lines.append(f"**Mode**: {HUMAN_INTERACTION_LABELS[policy.mode]}")
        if policy.escalation:
            lines.append(f"- Escalation: {policy.escalation.conditions}")
            lines.append(f"- Channel: {policy.escalation.channel}")
        if policy.checkpoints:
            lines.extend(["", "**Checkpoints**:"])
            for cp in policy.checkpoints:
                lines.append(f"- {cp.name}: {cp.trigger} ({cp.type.value})")
        lines.append("")

    if spec.guardrails:
        lines.extend(["## Guardrails", ""])
        lines.extend(f"- **{g.name}**: {g.constraint}" for g in spec.guardrails)
        lines.append("")

    if spec.notes:
        lines.extend(["## Notes", "", spec.notes, ""])

    return "\n".join(lines)


def generate_agent_config(spec: AgentSpecification, runtime: RuntimeDefaults) -> str:
    """Generate the root ``config.yaml``."""
    data: dict[str, Any] = {
        "version": spec.version,
        "runtime": {
            "framework": runtime.framework,
            "model": runtime.model,
            "max_tokens": runtime.max_tokens,
        },
    }

    if spec.autonomy_level:
        data["autonomy"] = {
            "level": spec.autonomy_level.value,
            "escalation_threshold": runtime.escalation_threshold,
        }

    policy = spec.human_interaction
    if policy:
        human: dict[str, Any] = {"mode": policy.mode.value}
        if policy.escalation:
            human["escalation"] = {
                "conditions": policy.escalation.conditions,
                "channel": policy.escalation.channel,
            }
        if policy.checkpoints:
            checkpoints = []
            for cp in policy.checkpoints:
                entry = {"name": cp.name, "trigger": cp.trigger, "type": cp.type.value}
                if cp.timeout:
                    entry["timeout"] = cp.timeout
                checkpoints.append(entry)
            human["checkpoints"] = checkpoints
        data["human_interaction"] = human

    collaboration = spec.collaboration
    if collaboration:
        collab: dict[str, Any] = {"role": collaboration.role.value}
        if collaboration.reports_to:
            collab["reports_to"] = collaboration.reports_to
        if collaboration.coordinates:
            collab["coordinates"] = [
                {"agent": c.agent, "via": c.via, "for": c.for_}
                for c in collaboration.coordinates
            ]
        if collaboration.peers:
            collab["peers"] = [
                {"agent": p.agent, "interaction": p.interaction.value}
                for p in collaboration.peers
            ]
        data["collaboration"] = collab

    memory = spec.memory
    if memory:
        mem: dict[str, Any] = {}
        if memory.working:
            mem["working"] = list(memory.working)
        if memory.persistent:
            mem["persistent"] = [
                {
                    "name": s.name,
                    "type": s.type.value,
                    "purpose": s.purpose,
                    "updates": s.updates.value,
                }
                for s in memory.persistent
            ]
        if memory.learning:
            mem["learning"] = [
                {"type": lc.type.value, "signal": lc.signal} for lc in memory.learning
            ]
        data["memory"] = mem

    if spec.guardrails:
        data["guardrails"] = [
            {"name": g.name, "constraint": g.constraint, "enforcement": g.enforcement.value}
            for g in spec.guardrails
        ]

    if spec.tags:
        data["tags"] = list(spec.tags)

    return "# Agent Configuration\n" + _dump_yaml(data)


def generate_memory_config(memory: MemoryConfiguration | None) -> str:
    """Generate ``memory/config.yaml``."""
    memory = memory or MemoryConfiguration()
    data: dict[str, Any] = {
        "short_term": {"type": "session", "max_items": 100, "ttl": "1h"},
        "long_term": {
            "stores": [
                {
                    "name": s.name,
                    "type": s.type.value,
                    "purpose": s.purpose,
                    "update_mode": s.updates.value,
                }
                for s in memory.persistent
            ]
        },
    }
    if memory.working:
        data["short_term"]["working"] = list(memory.working)
    if memory.learning:
        data["learning"] = [
            {"type": lc.type.value, "signal": lc.signal} for lc in memory.learning
        ]
    return "# Memory Configuration\n" + _dump_yaml(data)


def generate_readme(spec: AgentSpecification, slugs: list[str]) -> str:
    lines = [f"# {spec.name}", ""]
    if spec.purpose:
        lines.extend([spec.purpose, ""])

    lines.extend(
        [
            "## Quick Start",
            "",
            "```bash",
            "# Install dependencies",
            "pip install -r requirements.txt  # or npm install",
            "",
            "# Run the agent",
            "python -m agent.main  # or npm start",
            "```",
            "",
            "## Structure",
            "",
            "```",
            f"{root_directory_name(spec)}/",
            "├── agent.md          # Agent definition",
            "├── config.yaml       # Configuration",
        ]
    )
    if slugs:
        lines.append("├── skills/           # Agent capabilities")
        lines.extend(f"│   └── {slug}/" for slug in slugs[:README_TREE_SKILLS])
        if len(slugs) > README_TREE_SKILLS:
            lines.append(f"│   └── ... ({len(slugs) - README_TREE_SKILLS} more)")
    lines.extend(
        [
            "├── memory/           # Memory configuration",
            "└── README.md         # This file",
            "```",
            "",
        ]
    )

    if spec.skills:
        lines.extend(["## Skills", "", "| Skill | Description |", "|-------|-------------|"])
        for skill, slug in zip(spec.skills, slugs):
            summary = skill.description[:60]
            if len(skill.description) > 60:
                summary += "..."
            lines.append(
                f"| [{escape_table_cell(skill.name)}](skills/{slug}/SKILL.md) "
                f"| {escape_table_cell(summary)} |"
            )
        lines.append("")

    lines.extend(
        [
            "## Configuration",
            "",
            "See `config.yaml` for runtime settings including:",
            "- Model selection",
            "- Autonomy level",
            "- Human interaction mode",
            "- Memory configuration",
            "",
            "---",
            "",
        ]
    )
    stamp = spec.updated_at or spec.created_at
    if stamp:
        lines.append(f"*Generated by Agent Stories on {stamp[:10]}*")
    else:
        lines.append("*Generated by Agent Stories*")
    return "\n".join(lines)


def generate_system_prompt(spec: AgentSpecification) -> str:
    lines = [
        f"# {spec.name} System Prompt",
        "",
        "You are an AI agent with the following characteristics:",
        "",
    ]
    if spec.purpose:
        lines.extend(["## Purpose", spec.purpose, ""])
    if spec.role:
        lines.extend(["## Role", spec.role, ""])
    if spec.guardrails:
        lines.append("## Constraints")
        lines.extend(f"- {g.name}: {g.constraint}" for g in spec.guardrails)
        lines.append("")
    return "\n".join(lines)


BASE_TOOL_PY = '''"""Base class for agent tools."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ToolResult:
    """Result from a tool execution."""

    success: bool
    data: Any
    error: Optional[str] = None


class BaseTool(ABC):
    """Abstract base class for all tools."""

    name: str
    description: str

    @abstractmethod
    async def execute(self, **kwargs) -> ToolResult:
        """Execute the tool with given arguments."""

    def validate_inputs(self, **kwargs) -> Optional[str]:
        """Validate inputs before execution. Return error message if invalid."""
        return None
'''


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


def filesystem_preview(result: FilesystemExportResult) -> str:
    """
    Render the result's files as an indented directory tree.

    Example:
        joke-agent/
        ├── agent.md
        └── skills/
            └── tell-jokes/
                └── SKILL.md
    """
    tree: dict[str, Any] = {}
    for f in result.files:
        *dirs, name = f.path.split("/")
        node = tree
        for d in dirs:
            node = node.setdefault(f"{d}/", {})
        node[name] = None

    lines = [f"{result.root_directory_name}/"]
    _render_tree(tree, "", lines)
    return "\n".join(lines)


def _render_tree(node: dict[str, Any], prefix: str, lines: list[str]) -> None:
    entries = list(node.items())
    for i, (name, child) in enumerate(entries):
        last = i == len(entries) - 1
        lines.append(f"{prefix}{'└── ' if last else '├── '}{name}")
        if child is not None:
            _render_tree(child, prefix + ("    " if last else "│   "), lines)


def _dump_yaml(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
