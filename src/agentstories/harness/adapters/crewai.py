"""
CrewAI adapter.

Generates a CrewAI project: ``config/agents.yaml`` for the agent,
``config/tasks.yaml`` with one task per skill, ``crew.py`` wiring them
together, a ``BaseTool`` stub per skill under ``tools/``, and
``requirements.txt``.
"""

from __future__ import annotations

from typing import Any

import yaml

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
from agentstories.models import (
    AgentSpecification,
    CollaborationRole,
    HumanInteractionMode,
    Skill,
)
from agentstories.utils.text import docstring_text, python_identifier, python_string, single_line

REQUIREMENTS = "crewai>=0.80.0\n"

INSTRUCTIONS = """\
## Using with CrewAI

1. Install dependencies: `pip install -r requirements.txt`
2. Implement the tool stubs in `tools/`
3. Run the crew from the `crewai/` directory: `python crew.py`

Agent and task definitions live in `config/agents.yaml` and `config/tasks.yaml`."""


def class_name(identifier: str, suffix: str = "") -> str:
    """CamelCase class name from a snake_case identifier."""
    name = "".join(part.capitalize() for part in identifier.split("_") if part)
    if not name or not name[0].isalpha():
        name = f"Skill{name}"
    return name + suffix


class CrewAIAdapter(HarnessAdapter):
    """Export to a CrewAI crew project."""

    id = "crewai"
    name = "CrewAI"
    description = "Generate agents.yaml, tasks.yaml and a crew for CrewAI"
    icon = "Users"
    url = "https://www.crewai.com"

    def can_export(self, spec: AgentSpecification) -> HarnessCompatibility:
        compat = HarnessCompatibility()
        common.check_required_fields(compat, spec)

        common.check_schedule_triggers(compat, spec, "run crew.kickoff() from a scheduler")
        if spec.memory and spec.memory.learning:
            compat.unsupported(
                "persistent learning",
                "Learning signals are not carried into CrewAI memory",
            )
        if common.has_behavior_model(spec, "adaptive"):
            compat.warn("Adaptive behaviors are flattened into task descriptions")
        if spec.collaboration and spec.collaboration.coordinates:
            compat.warn("Coordinated agents are not generated; add them to the crew manually")
        return compat

    def generate(self, spec: AgentSpecification) -> HarnessOutput:
        agent_key = agent_key_for(spec)
        task_keys = task_keys_for(spec)
        warnings: list[str] = []
        if not spec.skills:
            warnings.append("Agent has no skills; generated crew has no tasks")

        files = [
            ExportedFile("crewai/config/agents.yaml", generate_agents_yaml(spec, agent_key)),
            ExportedFile(
                "crewai/config/tasks.yaml", generate_tasks_yaml(spec, agent_key, task_keys)
            ),
            ExportedFile("crewai/crew.py", generate_crew_py(spec, agent_key, task_keys)),
            ExportedFile("crewai/tools/__init__.py", '"""Tools for the crew."""\n'),
        ]
        for skill, key in zip(spec.skills, task_keys):
            files.append(ExportedFile(f"crewai/tools/{tool_module(key)}.py", generate_tool_py(skill, key)))
        files.append(ExportedFile("crewai/requirements.txt", REQUIREMENTS))
        return HarnessOutput(files=files, warnings=warnings, instructions=INSTRUCTIONS)

    def get_try_it_config(self, spec: AgentSpecification) -> TryItConfig | None:
        return TryItCliConfig(
            command="cd crewai && python crew.py",
            description="Run the CrewAI crew locally",
            setup_instructions=(
                "1. Install CrewAI: pip install -r crewai/requirements.txt\n"
                "2. Set the API key for your model provider\n"
                "3. Run the command to kick off the crew"
            ),
        )


def agent_key_for(spec: AgentSpecification) -> str:
    key = python_identifier(spec.name, fallback="agent")
    return key if key.endswith("_agent") else f"{key}_agent"


def task_keys_for(spec: AgentSpecification) -> list[str]:
    """Unique task key per skill, in skill order."""
    keys: list[str] = []
    for skill in spec.skills:
        base = f"{common.skill_identifier(skill)}_task"
        key = base
        suffix = 2
        while key in keys:
            key = f"{base}_{suffix}"
            suffix += 1
        keys.append(key)
    return keys


def tool_module(task_key: str) -> str:
    return task_key.removesuffix("_task")


def _dump(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True, width=100)


# ---------------------------------------------------------------------------
# config/*.yaml
# ---------------------------------------------------------------------------


def generate_agents_yaml(spec: AgentSpecification, agent_key: str) -> str:
    backstory = [spec.role] if spec.role else []
    backstory.append(common.autonomy_guidance(spec.autonomy_level))
    if spec.guardrails:
        backstory.append(
            "Constraints: " + "; ".join(f"{g.name}: {g.constraint}" for g in spec.guardrails)
        )
    if spec.memory and spec.memory.working:
        backstory.append("Keep track of: " + ", ".join(spec.memory.working))

    agent: dict[str, Any] = {
        "role": spec.name,
        "goal": spec.purpose or f"Act as {spec.name}",
        "backstory": "\n\n".join(backstory),
        "allow_delegation": bool(
            spec.collaboration and spec.collaboration.role == CollaborationRole.SUPERVISOR
        ),
        "verbose": True,
    }
    return _dump({agent_key: agent})


def task_description(skill: Skill) -> str:
    parts = [skill.description] if skill.description else [skill.name]
    if skill.behavior:
        parts.append("\n".join(render_behavior(skill.behavior)).strip())
    if skill.guardrails:
        parts.append("\n".join(f"- {g.name}: {g.constraint}" for g in skill.guardrails))
    return "\n\n".join(parts)


def generate_tasks_yaml(
    spec: AgentSpecification, agent_key: str, task_keys: list[str]
) -> str:
    human_input = bool(
        spec.human_interaction
        and spec.human_interaction.mode == HumanInteractionMode.IN_THE_LOOP
    )
    tasks: dict[str, Any] = {}
    for skill, key in zip(spec.skills, task_keys):
        conditions = skill.acceptance.success_conditions
        task: dict[str, Any] = {
            "description": task_description(skill),
            "expected_output": "\n".join(conditions) if conditions else f"{skill.name} completed",
            "agent": agent_key,
        }
        if human_input:
            task["human_input"] = True
        tasks[key] = task
    return _dump(tasks)


# ---------------------------------------------------------------------------
# crew.py / tools
# ---------------------------------------------------------------------------


def generate_crew_py(
    spec: AgentSpecification, agent_key: str, task_keys: list[str]
) -> str:
    crew_class = class_name(python_identifier(spec.name, fallback="agent"), "Crew")
    lines = [
        '"""',
        f"CrewAI crew for {docstring_text(single_line(spec.name))}.",
        '"""',
        "",
        "from crewai import Agent, Crew, Process, Task",
        "from crewai.project import CrewBase, agent, crew, task",
        "",
    ]
    for key in task_keys:
        lines.append(f"from tools.{tool_module(key)} import {class_name(tool_module(key), 'Tool')}")
    tool_list = ", ".join(f"{class_name(tool_module(k), 'Tool')}()" for k in task_keys)
    lines.extend(
        [
            "",
            "",
            "@CrewBase",
            f"class {crew_class}:",
            f'    """{docstring_text(single_line(spec.purpose or spec.name))}"""',
            "",
            '    agents_config = "config/agents.yaml"',
            '    tasks_config = "config/tasks.yaml"',
            "",
            "    @agent",
            f"    def {agent_key}(self) -> Agent:",
            f"        return Agent(config=self.agents_config[{python_string(agent_key)}], tools=[{tool_list}])",
        ]
    )
    for key in task_keys:
        lines.extend(
            [
                "",
                "    @task",
                f"    def {key}(self) -> Task:",
                f"        return Task(config=self.tasks_config[{python_string(key)}])",
            ]
        )
    lines.extend(
        [
            "",
            "    @crew",
            "    def crew(self) -> Crew:",
            "        return Crew(",
            "            agents=self.agents,",
            "            tasks=self.tasks,",
            "            process=Process.sequential,",
            "            verbose=True,",
            "        )",
            "",
            "",
            'if __name__ == "__main__":',
            f"    result = {crew_class}().crew().kickoff()",
            "    print(result)",
        ]
    )
    return "\n".join(lines) + "\n"


def generate_tool_py(skill: Skill, task_key: str) -> str:
    module = tool_module(task_key)
    tool_class = class_name(module, "Tool")
    input_class = class_name(module, "Input")
    description = single_line(skill.description or skill.name)

    fields: list[tuple[str, str, str, bool]] = []
    seen: set[str] = set()
    for inp in skill.inputs:
        name = python_identifier(inp.name, fallback="value")
        if name in seen:
            continue
        seen.add(name)
        fields.append((name, common.python_type(inp.type), single_line(inp.description), inp.required))

    lines = [
        '"""',
        f"Tool for the {docstring_text(single_line(skill.name))} skill.",
        '"""',
        "",
        "from crewai.tools import BaseTool",
    ]
    if fields:
        lines.append("from pydantic import BaseModel, Field")
        lines.extend(
            [
                "",
                "",
                f"class {input_class}(BaseModel):",
                f'    """Input schema for {tool_class}."""',
                "",
            ]
        )
        for name, type_name, desc, required in fields:
            if required:
                lines.append(f"    {name}: {type_name} = Field(..., description={python_string(desc)})")
            else:
                lines.append(
                    f"    {name}: {type_name} | None = Field(None, description={python_string(desc)})"
                )

    lines.extend(
        [
            "",
            "",
            f"class {tool_class}(BaseTool):",
            f"    name: str = {python_string(module)}",
            f"    description: str = {python_string(description)}",
        ]
    )
    if fields:
        lines.append(f"    args_schema: type[BaseModel] = {input_class}")
    params = "".join(f", {name}: {type_name}" for name, type_name, _, _ in fields)
    lines.extend(
        [
            "",
            f"    def _run(self{params}) -> str:",
            f'        raise NotImplementedError("{module} is not implemented yet")',
        ]
    )
    return "\n".join(lines) + "\n"
