"""
Letta adapter.

Generates ``letta/agent.json`` (system prompt, persona and memory blocks,
tool schemas) and ``letta/tools.py`` stubs for the tools it declares.
Skills become callable tools; their inputs become the tool parameters.
"""

from __future__ import annotations

import json
from typing import Any

from agentstories.export.files import ExportedFile
from agentstories.harness import common
from agentstories.harness.base import (
    HarnessAdapter,
    HarnessCompatibility,
    HarnessOutput,
    TryItCliConfig,
    TryItConfig,
)
from agentstories.models import AgentSpecification, AutonomyLevel
from agentstories.utils.text import (
    docstring_text,
    generate_slug,
    python_identifier,
    single_line,
)

PERSISTENT_BLOCK_LIMIT = 2000
CONTEXT_BLOCK_LIMIT = 5000

PERSONA_AUTONOMY: dict[AutonomyLevel, str] = {
    AutonomyLevel.FULL: "I operate autonomously and make decisions independently.",
    AutonomyLevel.SUPERVISED: "I handle routine tasks independently but escalate edge cases.",
    AutonomyLevel.COLLABORATIVE: "I work collaboratively, proposing actions and seeking feedback.",
    AutonomyLevel.DIRECTED: "I follow explicit direction and request approval for actions.",
}

INSTRUCTIONS = """\
## Using with Letta

1. Install Letta: `pip install letta`
2. Register the tools from `tools.py` with your Letta client
3. Create the agent from `agent.json`:

```python
import json
from letta import create_client

client = create_client()
with open("agent.json") as f:
    config = json.load(f)

agent = client.create_agent(
    name=config["name"],
    system=config["system"],
    memory=config["memory"],
    tools=[t["name"] for t in config["tools"]],
)
```"""


class LettaAdapter(HarnessAdapter):
    """Export to a Letta agent definition."""

    id = "letta"
    name = "Letta"
    description = "Generate agent.json for Letta agent framework"
    icon = "Brain"
    url = "https://letta.com"

    def can_export(self, spec: AgentSpecification) -> HarnessCompatibility:
        compat = HarnessCompatibility()
        common.check_required_fields(compat, spec)

        if common.has_behavior_model(spec, "workflow"):
            compat.warn("Complex workflows may need manual adjustment in Letta")
        common.check_schedule_triggers(compat, spec, "Letta cron job configuration")
        if spec.memory and spec.memory.persistent:
            compat.warn("Persistent stores will be mapped to Letta memory blocks")
        return compat

    def generate(self, spec: AgentSpecification) -> HarnessOutput:
        tools = extract_tools(spec)
        agent = build_agent(spec, tools)
        files = [
            ExportedFile("letta/agent.json", json.dumps(agent, indent=2, ensure_ascii=False) + "\n")
        ]
        if tools:
            files.append(ExportedFile("letta/tools.py", generate_tools_py(spec, tools)))
        return HarnessOutput(files=files, instructions=INSTRUCTIONS)

    def get_try_it_config(self, spec: AgentSpecification) -> TryItConfig | None:
        return TryItCliConfig(
            command="letta run --agent-config letta/agent.json",
            description="Launch a Letta agent with this configuration",
            setup_instructions=(
                "1. Install Letta CLI: pip install letta\n"
                "2. Start Letta server: letta server\n"
                "3. Run the command to create and interact with your agent"
            ),
        )


def build_agent(spec: AgentSpecification, tools: list[dict[str, Any]]) -> dict[str, Any]:
    """Build the agent.json document."""
    persona = [f"I am {spec.name}."]
    if spec.role:
        persona.append(spec.role)
    if spec.autonomy_level:
        persona.append(PERSONA_AUTONOMY[spec.autonomy_level])

    blocks: list[dict[str, Any]] = []
    if spec.memory:
        for store in spec.memory.persistent:
            blocks.append(
                {"label": store.name, "value": store.purpose, "limit": PERSISTENT_BLOCK_LIMIT}
            )
        if spec.memory.working:
            blocks.append(
                {
                    "label": "context",
                    "value": "\n".join(spec.memory.working),
                    "limit": CONTEXT_BLOCK_LIMIT,
                }
            )

    memory: dict[str, Any] = {
        "human": "The user interacting with this agent.",
        "persona": " ".join(persona),
    }
    if blocks:
        memory["blocks"] = blocks

    return {
        "name": generate_slug(spec.name),
        "description": spec.purpose or f"{spec.name} agent",
        "system": common.agent_description(spec),
        "memory": memory,
        "tools": tools,
        "metadata": {
            "source": "agentstories",
            "version": spec.version,
            "autonomy_level": spec.autonomy_level.value if spec.autonomy_level else None,
        },
    }


def extract_tools(spec: AgentSpecification) -> list[dict[str, Any]]:
    """One tool per skill, then one per declared tool not already covered."""
    tools: list[dict[str, Any]] = []
    seen: set[str] = set()

    for skill in spec.skills:
        name = python_identifier(common.skill_slug(skill), fallback="skill")
        if name in seen:
            continue
        seen.add(name)
        tool: dict[str, Any] = {"name": name, "description": skill.description}
        if skill.inputs:
            properties: dict[str, Any] = {}
            required: list[str] = []
            for inp in skill.inputs:
                param = python_identifier(inp.name, fallback="value")
                if param in properties:
                    continue
                properties[param] = {
                    "type": common.json_schema_type(inp.type),
                    "description": inp.description,
                }
                if inp.required:
                    required.append(param)
            parameters: dict[str, Any] = {"type": "object", "properties": properties}
            if required:
                parameters["required"] = required
            tool["parameters"] = parameters
        tools.append(tool)

    for declared in common.collect_tools(spec):
        name = python_identifier(declared.name, fallback="tool")
        if name in seen:
            continue
        seen.add(name)
        tools.append({"name": name, "description": declared.purpose})

    return tools


def generate_tools_py(spec: AgentSpecification, tools: list[dict[str, Any]]) -> str:
    lines = [
        '"""',
        f"Tool definitions for {docstring_text(single_line(spec.name))}.",
        "",
        "Register these tools with your Letta client before creating the agent.",
        '"""',
        "",
        "from letta import tool",
        "",
    ]
    for t in tools:
        properties = t.get("parameters", {}).get("properties", {})
        params = ", ".join(
            f"{name}: {common.PYTHON_TYPES[prop['type']]}"
            for name, prop in properties.items()
        )
        description = docstring_text(single_line(t["description"])) or t["name"]
        lines.extend(
            [
                "",
                "@tool",
                f"def {t['name']}({params}) -> str:",
                f'    """{description}"""',
                f'    raise NotImplementedError("{t["name"]} is not implemented yet")',
                "",
            ]
        )
    return "\n".join(lines)
