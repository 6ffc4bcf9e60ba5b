"""
LangGraph adapter.

Generates a runnable LangGraph project: ``agent.py`` with one node per skill
(shaped by the skill's behavior variant), a keyword router and a graph
factory; ``state.py`` with the graph state; ``tools.py`` stubs for declared
tools; and ``requirements.txt``.
"""

from __future__ import annotations

import json
from typing import assert_never

from agentstories.export.files import ExportedFile
from agentstories.harness import common
from agentstories.harness.base import (
    HarnessAdapter,
    HarnessCompatibility,
    HarnessOutput,
    TryItCliConfig,
    TryItConfig,
)
from agentstories.models import (
    AdaptiveBehavior,
    AgentSpecification,
    IterativeBehavior,
    SequentialBehavior,
    Skill,
    WorkflowBehavior,
)
from agentstories.utils.text import docstring_text, python_identifier, python_string, single_line

DEFAULT_MAX_ITERATIONS = 10

REQUIREMENTS = """\
langgraph>=0.2.0
langchain-anthropic>=0.2.0
langchain-core>=0.3.0
"""

INSTRUCTIONS = """\
## Using with LangGraph

1. Install dependencies: `pip install -r requirements.txt`
2. Set your API key: `export ANTHROPIC_API_KEY=your-key`
3. Run the agent:

```python
from agent import create_graph

graph = create_graph()
result = graph.invoke({"messages": [("user", "Hello!")]})
```

For streaming, iterate over `graph.stream(...)` instead of calling `invoke`."""

# Fields every generated AgentState has
BASE_STATE_FIELDS = ("messages", "current_skill", "stage", "iteration")


class LangGraphAdapter(HarnessAdapter):
    """Export to a LangGraph Python project."""

    id = "langgraph"
    name = "LangGraph"
    description = "Generate Python graph definitions for LangGraph"
    icon = "GitBranch"
    url = "https://langchain-ai.github.io/langgraph/"

    def can_export(self, spec: AgentSpecification) -> HarnessCompatibility:
        compat = HarnessCompatibility()
        common.check_required_fields(compat, spec)

        if not spec.skills:
            compat.warn("Agent has no skills - graph will have minimal nodes")
        elif not common.has_behavior_model(spec, "workflow"):
            compat.warn(
                "No workflow behaviors found - consider using workflow model "
                "for better graph structure"
            )
        common.check_schedule_triggers(compat, spec, "invoke the graph from a scheduler")
        if spec.memory and spec.memory.persistent:
            compat.warn("Persistent stores will be mapped to graph state checkpointing")
        return compat

    def generate(self, spec: AgentSpecification) -> HarnessOutput:
        nodes = node_names(spec)
        files = [
            ExportedFile("langgraph/agent.py", generate_agent_py(spec, nodes)),
            ExportedFile("langgraph/state.py", generate_state_py(spec)),
        ]
        tools_py = generate_tools_py(spec)
        if tools_py:
            files.append(ExportedFile("langgraph/tools.py", tools_py))
        files.append(ExportedFile("langgraph/requirements.txt", REQUIREMENTS))
        return HarnessOutput(files=files, instructions=INSTRUCTIONS)

    def get_try_it_config(self, spec: AgentSpecification) -> TryItConfig | None:
        return TryItCliConfig(
            command="cd langgraph && python agent.py",
            description="Run LangGraph agent locally",
            setup_instructions=(
                "1. Install LangGraph: pip install -r langgraph/requirements.txt\n"
                "2. Set ANTHROPIC_API_KEY environment variable\n"
                "3. Run the command to start the agent"
            ),
        )


def node_names(spec: AgentSpecification) -> list[str]:
    """Unique node identifier per skill, in skill order."""
    reserved = {"agent", "tools", "end", "run_skill", "route_agent", "create_graph"}
    names: list[str] = []
    for skill in spec.skills:
        base = common.skill_identifier(skill)
        name = base
        suffix = 2
        while name in reserved or name in names:
            name = f"{base}_{suffix}"
            suffix += 1
        names.append(name)
    return names


def _string_list(items: list[str], indent: str) -> list[str]:
    lines = [f"{indent}["]
    lines.extend(f"{indent}    {python_string(item)}," for item in items)
    lines.append(f"{indent}]")
    return lines


# ---------------------------------------------------------------------------
# agent.py
# ---------------------------------------------------------------------------


def generate_node(skill: Skill, node: str) -> list[str]:
    """Generate the node function for one skill."""
    summary = docstring_text(single_line(f"{skill.name}: {skill.description}"))
    lines = [f"def {node}_node(state: AgentState) -> dict:", f'    """{summary}']
    if skill.triggers:
        lines.append("")
        lines.append("    Triggers:")
        for t in skill.triggers:
            lines.append(f"    - {t.type.value}: {docstring_text(single_line(t.description))}")
    lines.append('    """')

    skill_name = python_string(skill.name)
    behavior = skill.behavior
    if behavior is None:
        lines.append(f"    return run_skill(state, {skill_name}, {python_string(skill.description)})")
    elif isinstance(behavior, SequentialBehavior):
        lines.append("    steps = " + _string_list(behavior.steps, "    ")[0].strip())
        lines.extend(_string_list(behavior.steps, "    ")[1:])
        lines.append(
            '    instructions = "Follow these steps in order:\\n" + "\\n".join('
            'f"{i}. {step}" for i, step in enumerate(steps, start=1))'
        )
        lines.append(f"    return run_skill(state, {skill_name}, instructions)")
    elif isinstance(behavior, WorkflowBehavior):
        entry = behavior.entry_stage or (behavior.stages[0].name if behavior.stages else "start")
        lines.append("    stages = {")
        for stage in behavior.stages:
            lines.append(f"        {python_string(stage.name)}: {{")
            lines.append(f'            "purpose": {python_string(stage.purpose)},')
            lines.append(f'            "actions": {json.dumps(stage.actions, ensure_ascii=False)},')
            transitions = [{"to": t.to, "when": t.when} for t in stage.transitions]
            lines.append(f'            "transitions": {json.dumps(transitions, ensure_ascii=False)},')
            lines.append("        },")
        lines.append("    }")
        lines.append(f'    current = state.get("stage") or {python_string(entry)}')
        lines.append("    stage = stages.get(current, {})")
        lines.append(
            '    instructions = f"Current stage: {current}\\nPurpose: {stage.get(\'purpose\', \'\')}\\n"'
        )
        lines.append(
            '    instructions += "\\n".join(f"- {action}" for action in stage.get("actions", []))'
        )
        lines.append(f"    update = run_skill(state, {skill_name}, instructions)")
        lines.append('    transitions = stage.get("transitions", [])')
        lines.append('    update["stage"] = transitions[0]["to"] if transitions else None')
        lines.append("    return update")
    elif isinstance(behavior, AdaptiveBehavior):
        lines.append("    capabilities = " + _string_list(behavior.capabilities, "    ")[0].strip())
        lines.extend(_string_list(behavior.capabilities, "    ")[1:])
        lines.append(
            '    instructions = "Select the capability that best fits the request:\\n" + "\\n".join('
            'f"- {c}" for c in capabilities)'
        )
        if behavior.selection_strategy:
            lines.append(
                f'    instructions += "\\n\\nSelection strategy: " + '
                f"{python_string(behavior.selection_strategy)}"
            )
        lines.append(f"    return run_skill(state, {skill_name}, instructions)")
    elif isinstance(behavior, IterativeBehavior):
        max_iterations = behavior.max_iterations or DEFAULT_MAX_ITERATIONS
        lines.append("    body = " + _string_list(behavior.body, "    ")[0].strip())
        lines.extend(_string_list(behavior.body, "    ")[1:])
        lines.append(f"    termination = {python_string(behavior.termination_condition)}")
        lines.append(f"    max_iterations = {max_iterations}")
        lines.append('    iteration = state.get("iteration") or 0')
        lines.append("    if iteration >= max_iterations:")
        lines.append('        return {"iteration": 0, "current_skill": None}')
        lines.append(
            '    instructions = "Repeat:\\n" + "\\n".join(f"- {action}" for action in body)'
        )
        lines.append('    instructions += f"\\n\\nStop when: {termination}"')
        lines.append(f"    update = run_skill(state, {skill_name}, instructions)")
        lines.append('    update["iteration"] = iteration + 1')
        lines.append("    return update")
    else:
        assert_never(behavior)
    return lines


def generate_router(spec: AgentSpecification, nodes: list[str], has_tools: bool) -> list[str]:
    targets = (["tools"] if has_tools else []) + ["end"] + nodes
    literal = ", ".join(python_string(t) for t in targets)
    lines = [
        f"def route_agent(state: AgentState) -> Literal[{literal}]:",
        '    """Route agent output to the next node."""',
        '    last_message = state["messages"][-1]',
    ]
    if has_tools:
        lines.extend(
            [
                '    if getattr(last_message, "tool_calls", None):',
                '        return "tools"',
            ]
        )
    if nodes:
        lines.append('    content = str(getattr(last_message, "content", "")).lower()')
        for skill, node in zip(spec.skills, nodes):
            name = skill.name.strip().lower()
            keywords = [w for w in name.split() if len(w) > 2] or ([name] if name else [])
            if not keywords:
                continue
            lines.append(f"    if any(kw in content for kw in {json.dumps(keywords, ensure_ascii=False)}):")
            lines.append(f'        return "{node}"')
    lines.append('    return "end"')
    return lines


def generate_agent_py(spec: AgentSpecification, nodes: list[str]) -> str:
    has_tools = bool(common.collect_tools(spec))
    lines = [
        '"""',
        f"LangGraph agent: {docstring_text(single_line(spec.name))}",
    ]
    if spec.purpose:
        lines.extend(["", docstring_text(single_line(spec.purpose))])
    lines.extend(
        [
            '"""',
            "",
            "from typing import Literal",
            "",
            "from langchain_anthropic import ChatAnthropic",
            "from langchain_core.messages import HumanMessage, SystemMessage",
            "from langgraph.graph import END, StateGraph",
        ]
    )
    if has_tools:
        lines.append("from langgraph.prebuilt import ToolNode")
    lines.extend(["", "from state import AgentState"])
    if has_tools:
        lines.append("from tools import get_tools")
    lines.extend(
        [
            "",
            f'SYSTEM_PROMPT = """{docstring_text(common.agent_description(spec))}"""',
            "",
            'model = ChatAnthropic(model="claude-sonnet-4-20250514", temperature=0)',
        ]
    )
    if has_tools:
        lines.extend(["tools = get_tools()", "model = model.bind_tools(tools)"])

    lines.extend(
        [
            "",
            "",
            "def run_skill(state: AgentState, skill: str, instructions: str) -> dict:",
            '    """Invoke the model with skill-specific instructions."""',
            '    prompt = f"{SYSTEM_PROMPT}\\n\\n## Active skill: {skill}\\n\\n{instructions}"',
            '    messages = [SystemMessage(content=prompt)] + list(state["messages"])',
            "    response = model.invoke(messages)",
            '    return {"messages": [response], "current_skill": skill}',
        ]
    )

    for skill, node in zip(spec.skills, nodes):
        lines.extend(["", ""])
        lines.extend(generate_node(skill, node))

    lines.extend(["", ""])
    lines.extend(generate_router(spec, nodes, has_tools))

    lines.extend(
        [
            "",
            "",
            "def agent_node(state: AgentState) -> dict:",
            '    """Main agent node that processes messages."""',
            '    messages = [SystemMessage(content=SYSTEM_PROMPT)] + list(state["messages"])',
            '    return {"messages": [model.invoke(messages)]}',
            "",
            "",
            "def create_graph():",
            f'    """Create the {docstring_text(single_line(spec.name))} agent graph."""',
            "    graph = StateGraph(AgentState)",
            '    graph.add_node("agent", agent_node)',
        ]
    )
    if has_tools:
        lines.append('    graph.add_node("tools", ToolNode(tools))')
    for node in nodes:
        lines.append(f'    graph.add_node("{node}", {node}_node)')

    routes = (['"tools": "tools"'] if has_tools else []) + ['"end": END']
    routes.extend(f'"{node}": "{node}"' for node in nodes)
    lines.extend(
        [
            '    graph.set_entry_point("agent")',
            f'    graph.add_conditional_edges("agent", route_agent, {{{", ".join(routes)}}})',
        ]
    )
    if has_tools:
        lines.append('    graph.add_edge("tools", "agent")')
    for node in nodes:
        lines.append(f'    graph.add_edge("{node}", END)')
    lines.extend(
        [
            "    return graph.compile()",
            "",
            "",
            'if __name__ == "__main__":',
            "    graph = create_graph()",
            f"    print({python_string(f'Chat with {spec.name}. Type quit to exit.')})",
            '    state = {"messages": [], "current_skill": None, "stage": None, "iteration": 0}',
            "    while True:",
            '        user_input = input("You: ")',
            '        if user_input.strip().lower() == "quit":',
            "            break",
            '        state["messages"].append(HumanMessage(content=user_input))',
            "        state = graph.invoke(state)",
            """        print(f"Agent: {state['messages'][-1].content}")""",
        ]
    )
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# state.py / tools.py
# ---------------------------------------------------------------------------


def generate_state_py(spec: AgentSpecification) -> str:
    lines = [
        '"""',
        f"State definitions for {docstring_text(single_line(spec.name))} LangGraph agent.",
        '"""',
        "",
        "from collections.abc import Sequence",
        "from typing import Annotated, TypedDict",
        "",
        "from langgraph.graph.message import add_messages",
        "",
        "",
        "class AgentState(TypedDict, total=False):",
        '    """State passed between nodes in the graph."""',
        "",
        "    messages: Annotated[Sequence, add_messages]",
        "    current_skill: str | None",
        "    stage: str | None  # Workflow stage",
        "    iteration: int  # Iterative behavior counter",
    ]
    taken = set(BASE_STATE_FIELDS)

    def add_field(name: str, comment: str) -> None:
        if name in taken:
            return
        taken.add(name)
        lines.append("")
        lines.append(f"    # {single_line(comment)}")
        lines.append(f"    {name}: dict | None")

    if spec.memory:
        for store in spec.memory.persistent:
            add_field(python_identifier(store.name, fallback="store"), store.purpose or store.name)
    for skill in spec.skills:
        if skill.outputs:
            add_field(f"{common.skill_identifier(skill)}_output", f"Output from {skill.name}")
    return "\n".join(lines) + "\n"


def generate_tools_py(spec: AgentSpecification) -> str | None:
    tools = common.collect_tools(spec)
    if not tools:
        return None

    lines = [
        '"""',
        f"Tool definitions for {docstring_text(single_line(spec.name))} LangGraph agent.",
        '"""',
        "",
        "from langchain_core.tools import tool",
    ]
    names: list[str] = []
    for t in tools:
        name = python_identifier(t.name, fallback="tool")
        if name in names:
            continue
        names.append(name)
        description = docstring_text(single_line(t.purpose or t.name))
        lines.extend(
            [
                "",
                "",
                "@tool",
                f"def {name}(query: str) -> str:",
                f'    """{description}"""',
                f'    raise NotImplementedError("{name} is not implemented yet")',
            ]
        )
    lines.extend(["", "", "def get_tools():", '    """Return all available tools."""'])
    lines.append(f"    return [{', '.join(names)}]")
    return "\n".join(lines) + "\n"
