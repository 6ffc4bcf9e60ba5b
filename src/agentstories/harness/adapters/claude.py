"""
Claude Code adapter.

Generates ``CLAUDE.md``, one ``.claude/commands/<slug>.md`` slash command per
skill, and a placeholder ``mcp.json`` when any skill declares tools.
"""

from __future__ import annotations

import json

from agentstories.export.files import ExportedFile
from agentstories.export.skill_packager import render_behavior
from agentstories.harness import common
from agentstories.harness.base import (
    HarnessAdapter,
    HarnessCompatibility,
    HarnessOutput,
    TryItCliConfig,
    TryItConfig,
)
from agentstories.models import AgentSpecification, Skill, TriggerType
from agentstories.utils.text import generate_slug

INSTRUCTIONS = """\
## Using with Claude Code

1. Copy `CLAUDE.md` to your project root
2. Copy the `.claude/commands/` directory to your project
3. If using MCP tools, replace the placeholder commands in `mcp.json` with real servers

Each skill is available as a slash command, e.g. `/{example}`."""


class ClaudeAdapter(HarnessAdapter):
    """Export to Claude Code project instructions and slash commands."""

    id = "claude"
    name = "Claude Code"
    description = "Generate CLAUDE.md and slash commands for Claude Code"
    icon = "Terminal"
    url = "https://claude.ai"

    def can_export(self, spec: AgentSpecification) -> HarnessCompatibility:
        compat = HarnessCompatibility()
        common.check_required_fields(compat, spec)

        if spec.memory and spec.memory.persistent:
            compat.unsupported(
                "persistent memory",
                "Persistent memory stores are not directly supported in Claude",
            )
        common.check_schedule_triggers(compat, spec)
        if common.has_trigger_type(spec, TriggerType.RESOURCE_CHANGE):
            compat.unsupported(
                "resource change triggers",
                "Resource change triggers require external file watching",
            )
        if spec.memory and spec.memory.learning:
            compat.unsupported(
                "persistent learning",
                "Learning/feedback loops are not persisted between sessions",
            )
        return compat

    def generate(self, spec: AgentSpecification) -> HarnessOutput:
        files = [ExportedFile("claude/CLAUDE.md", generate_claude_md(spec))]
        warnings: list[str] = []

        seen: set[str] = set()
        for skill in spec.skills:
            if not skill.name:
                continue
            slug = common.skill_slug(skill)
            if slug in seen:
                warnings.append(f'Skipped duplicate slash command "/{slug}" for "{skill.name}"')
                continue
            seen.add(slug)
            files.append(
                ExportedFile(f"claude/.claude/commands/{slug}.md", generate_slash_command(skill))
            )

        mcp_config = generate_mcp_config(spec)
        if mcp_config:
            files.append(ExportedFile("claude/mcp.json", mcp_config))
            warnings.append(
                "MCP configuration generated with placeholder server commands; "
                "verify each server before use"
            )

        example = common.skill_slug(spec.skills[0]) if spec.skills else "skill"
        return HarnessOutput(
            files=files,
            warnings=warnings,
            instructions=INSTRUCTIONS.format(example=example),
        )

    def get_try_it_config(self, spec: AgentSpecification) -> TryItConfig | None:
        return TryItCliConfig(
            command="claude --project . --resume",
            description="Launch Claude Code with this agent configuration",
            setup_instructions=(
                "1. Ensure Claude Code CLI is installed\n"
                "2. Copy generated files to your project\n"
                "3. Run the command to start a Claude Code session with your agent configuration"
            ),
        )


def generate_claude_md(spec: AgentSpecification) -> str:
    return "## Persona\n\n" + common.agent_description(spec, heading="##")


def generate_slash_command(skill: Skill) -> str:
    lines: list[str] = [skill.description, ""]

    if skill.inputs:
        lines.append("## Inputs\n")
        for inp in skill.inputs:
            required = "(required)" if inp.required else "(optional)"
            lines.append(f"- **{inp.name}** {required}: {inp.description}")
        lines.append("")

    if skill.behavior:
        lines.append(f"**Model**: {skill.behavior.model}\n")
        lines.extend(render_behavior(skill.behavior, heading="##"))

    if skill.acceptance.success_conditions:
        lines.append("## Success Criteria\n")
        lines.extend(f"- [ ] {c}" for c in skill.acceptance.success_conditions)
        lines.append("")

    if skill.guardrails:
        lines.append("## Constraints\n")
        lines.extend(f"- **{g.name}**: {g.constraint}" for g in skill.guardrails)
        lines.append("")

    return "\n".join(lines)


def generate_mcp_config(spec: AgentSpecification) -> str | None:
    """Best-effort MCP server mapping, one server per tool slug."""
    tools = common.collect_tools(spec)
    if not tools:
        return None

    servers: dict[str, dict[str, object]] = {}
    for tool in tools:
        slug = generate_slug(tool.name)
        if not slug or slug in servers:
            continue
        servers[slug] = {"command": "npx", "args": [f"@{slug}/mcp-server"]}

    return json.dumps({"mcpServers": servers}, indent=2) + "\n"
