"""
Helpers shared by the concrete harness adapters.

Every adapter describes an agent in the same fixed section order: identity,
operating mode, human interaction, capabilities (one per skill, rendered by
behavior variant), tools, guardrails, and memory/context hints. The section
builders below produce that text once so the adapters only decide where it
goes.
"""

from __future__ import annotations

from agentstories.export.skill_packager import render_behavior
from agentstories.harness.base import HarnessCompatibility
from agentstories.models import (
    AgentSpecification,
    AutonomyLevel,
    EnforcementLevel,
    HumanInteractionMode,
    Skill,
    Tool,
    TriggerType,
)
from agentstories.utils.text import generate_slug, is_valid_slug, python_identifier

AUTONOMY_GUIDANCE: dict[AutonomyLevel, str] = {
    AutonomyLevel.FULL: (
        "This agent operates with full autonomy. Make decisions independently and "
        "execute actions without requiring approval. Use your judgment to complete "
        "tasks efficiently."
    ),
    AutonomyLevel.SUPERVISED: (
        "This agent operates under supervision. Handle routine tasks independently "
        "but escalate edge cases, unusual situations, or high-risk decisions to a "
        "human for review."
    ),
    AutonomyLevel.COLLABORATIVE: (
        "This agent works collaboratively with humans. Propose actions and wait for "
        "feedback before proceeding on significant decisions. Maintain an ongoing "
        "dialogue about approach and progress."
    ),
    AutonomyLevel.DIRECTED: (
        "This agent follows explicit direction. Wait for specific instructions before "
        "taking action. Request approval for each significant step in a process."
    ),
}

INTERACTION_MODE_LABELS: dict[HumanInteractionMode, str] = {
    HumanInteractionMode.IN_THE_LOOP: "Human-in-the-loop (approval required for actions)",
    HumanInteractionMode.ON_THE_LOOP: "Human-on-the-loop (oversight with ability to intervene)",
    HumanInteractionMode.OUT_OF_LOOP: "Human-out-of-loop (autonomous operation)",
}

# JSON schema type -> Python annotation
PYTHON_TYPES = {
    "string": "str",
    "number": "float",
    "boolean": "bool",
    "array": "list",
    "object": "dict",
}


def autonomy_guidance(level: AutonomyLevel | None) -> str:
    """Guidance text for ``level``; absent or unknown levels get the collaborative text."""
    if level is None:
        return AUTONOMY_GUIDANCE[AutonomyLevel.COLLABORATIVE]
    return AUTONOMY_GUIDANCE.get(level, AUTONOMY_GUIDANCE[AutonomyLevel.COLLABORATIVE])


def format_interaction_mode(mode: HumanInteractionMode) -> str:
    return INTERACTION_MODE_LABELS.get(mode, mode.value)


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------


def skill_slug(skill: Skill) -> str:
    """The skill's configured slug when valid, else one derived from its name."""
    if is_valid_slug(skill.explicit_slug):
        return skill.explicit_slug  # type: ignore[return-value]
    return generate_slug(skill.name) or "skill"


def skill_identifier(skill: Skill) -> str:
    """Python identifier for code generated per skill."""
    return python_identifier(skill_slug(skill), fallback="skill")


def collect_tools(spec: AgentSpecification) -> list[Tool]:
    """All tools declared by the agent's skills, first declaration wins per slug."""
    seen: set[str] = set()
    tools: list[Tool] = []
    for skill in spec.skills:
        for tool in skill.tools:
            key = generate_slug(tool.name) or tool.name
            if key in seen:
                continue
            seen.add(key)
            tools.append(tool)
    return tools


def json_schema_type(type_name: str) -> str:
    """Map a free-form input type name to a JSON schema type."""
    lowered = type_name.lower()
    if "string" in lowered or "text" in lowered:
        return "string"
    if "number" in lowered or "int" in lowered or "float" in lowered:
        return "number"
    if "bool" in lowered:
        return "boolean"
    if "array" in lowered or "list" in lowered:
        return "array"
    if "object" in lowered or "dict" in lowered:
        return "object"
    return "string"


def python_type(type_name: str) -> str:
    """Python annotation for a free-form input type name in generated stubs."""
    return PYTHON_TYPES[json_schema_type(type_name)]


def has_trigger_type(spec: AgentSpecification, trigger_type: TriggerType) -> bool:
    return any(t.type == trigger_type for skill in spec.skills for t in skill.triggers)


def has_behavior_model(spec: AgentSpecification, model: str) -> bool:
    return any(skill.behavior and skill.behavior.model == model for skill in spec.skills)


# ---------------------------------------------------------------------------
# Compatibility checks
# ---------------------------------------------------------------------------


def check_required_fields(compat: HarnessCompatibility, spec: AgentSpecification) -> None:
    if not spec.name.strip():
        compat.missing("agent name")


def check_schedule_triggers(
    compat: HarnessCompatibility,
    spec: AgentSpecification,
    hint: str | None = None,
) -> None:
    """Report schedule triggers, which no harness runs natively."""
    if has_trigger_type(spec, TriggerType.SCHEDULE):
        message = "Schedule triggers require external orchestration"
        if hint:
            message += f" ({hint})"
        compat.unsupported("scheduled triggers", message)


# ---------------------------------------------------------------------------
# Agent description sections
# ---------------------------------------------------------------------------


def identity_lines(spec: AgentSpecification) -> list[str]:
    lines = [f"You are **{spec.name}**."]
    if spec.role:
        lines.append(f"\n{spec.role}")
    if spec.purpose:
        lines.append(f"\n**Purpose**: {spec.purpose}")
    lines.append("")
    return lines


def operating_mode_lines(spec: AgentSpecification, heading: str = "##") -> list[str]:
    return [f"{heading} Operating Mode\n", autonomy_guidance(spec.autonomy_level), ""]


def human_interaction_lines(spec: AgentSpecification, heading: str = "##") -> list[str]:
    policy = spec.human_interaction
    if policy is None:
        return []
    lines = [f"{heading} Human Interaction\n", f"**Mode**: {format_interaction_mode(policy.mode)}\n"]
    if policy.checkpoints:
        lines.append(f"{heading}# Checkpoints\n")
        for cp in policy.checkpoints:
            lines.append(f'- **{cp.type.value}** "{cp.name}": {cp.trigger}')
            if cp.timeout:
                lines.append(f"  - Timeout: {cp.timeout}")
        lines.append("")
    if policy.escalation:
        lines.append(f"{heading}# Escalation\n")
        lines.append(f"- **When**: {policy.escalation.conditions}")
        lines.append(f"- **How**: {policy.escalation.channel}")
        lines.append("")
    return lines


def skill_capability_lines(skill: Skill, heading: str = "###") -> list[str]:
    """Describe one skill: triggers, behavior, success criteria."""
    lines = [f"{heading} {skill.name}\n"]
    if skill.description:
        lines.extend([skill.description, ""])
    if skill.triggers:
        lines.append("**When to activate**:")
        for trigger in skill.triggers:
            lines.append(f"- {trigger.description}")
            if trigger.examples:
                lines.append(f"  - Examples: {', '.join(trigger.examples)}")
        lines.append("")
    if skill.behavior:
        lines.append(f"**Execution** ({skill.behavior.model}):\n")
        lines.extend(render_behavior(skill.behavior, heading=f"{heading}#"))
    if skill.acceptance.success_conditions:
        lines.append("**Success criteria**:")
        lines.extend(f"- {c}" for c in skill.acceptance.success_conditions)
        lines.append("")
    return lines


def capability_lines(spec: AgentSpecification, heading: str = "##") -> list[str]:
    if not spec.skills:
        return []
    lines = [f"{heading} Capabilities\n"]
    for skill in spec.skills:
        lines.extend(skill_capability_lines(skill, heading=f"{heading}#"))
    return lines


def tool_lines(spec: AgentSpecification, heading: str = "##") -> list[str]:
    tools = collect_tools(spec)
    if not tools:
        return []
    lines = [f"{heading} Tools\n", "The following tools are available:\n"]
    for tool in tools:
        lines.append(f"- **{tool.name}**: {tool.purpose}")
        if tool.conditions:
            lines.append(f"  - Use when: {tool.conditions}")
    lines.append("")
    return lines


def guardrail_lines(spec: AgentSpecification, heading: str = "##") -> list[str]:
    if not spec.guardrails:
        return []
    lines = [f"{heading} Constraints\n"]
    for guardrail in spec.guardrails:
        marker = "⚠️ " if guardrail.enforcement == EnforcementLevel.HARD else ""
        lines.append(f"- {marker}**{guardrail.name}**: {guardrail.constraint}")
        if guardrail.rationale:
            lines.append(f"  - Rationale: {guardrail.rationale}")
    lines.append("")
    return lines


def memory_lines(spec: AgentSpecification, heading: str = "##") -> list[str]:
    if not spec.memory or not spec.memory.working:
        return []
    lines = [f"{heading} Context Management\n", "Maintain awareness of:"]
    lines.extend(f"- {item}" for item in spec.memory.working)
    lines.append("")
    return lines


def agent_description(spec: AgentSpecification, heading: str = "##") -> str:
    """The full agent description in the shared section order."""
    lines: list[str] = []
    lines.extend(identity_lines(spec))
    lines.extend(operating_mode_lines(spec, heading))
    lines.extend(human_interaction_lines(spec, heading))
    lines.extend(capability_lines(spec, heading))
    lines.extend(tool_lines(spec, heading))
    lines.extend(guardrail_lines(spec, heading))
    lines.extend(memory_lines(spec, heading))
    return "\n".join(lines).rstrip() + "\n"
