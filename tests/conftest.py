"""Shared pytest fixtures for agentstories tests."""

from pathlib import Path
from textwrap import dedent

import pytest

from agentstories.harness import HarnessRegistry, create_default_registry
from agentstories.models import (
    Acceptance,
    AdaptiveBehavior,
    AgentSpecification,
    AttachedFile,
    AutonomyLevel,
    Checkpoint,
    CheckpointType,
    CollaborationProfile,
    CollaborationRole,
    Coordination,
    EnforcementLevel,
    Escalation,
    Guardrail,
    HumanInteractionMode,
    HumanInteractionPolicy,
    IterativeBehavior,
    LearningConfig,
    LearningType,
    MemoryConfiguration,
    PersistentStore,
    PersistentStoreType,
    Portability,
    QualityMetric,
    SequentialBehavior,
    Skill,
    SkillExample,
    SkillInput,
    SkillOutput,
    SkillPrompt,
    StageTransition,
    Tool,
    ToolPermission,
    Trigger,
    TriggerType,
    WorkflowBehavior,
    WorkflowStage,
)


@pytest.fixture
def joke_skill() -> Skill:
    """The "Tell Jokes" skill: manual trigger, three sequential steps."""
    return Skill(
        name="Tell Jokes",
        description="Tells a joke on request",
        domain="Entertainment",
        triggers=[Trigger(type=TriggerType.MANUAL, description="User asks for a joke")],
        behavior=SequentialBehavior(steps=["Pick a topic", "Generate a joke", "Deliver it"]),
        acceptance=Acceptance(success_conditions=["User is amused"]),
    )


@pytest.fixture
def joke_agent(joke_skill: Skill) -> AgentSpecification:
    """A minimal specification with one skill and no identifier."""
    return AgentSpecification(name="Joke Agent", skills=[joke_skill])


@pytest.fixture
def workflow_skill() -> Skill:
    """A skill with a workflow behavior, inputs, outputs and tools."""
    return Skill(
        name="Triage Ticket",
        description="Classify and route a support ticket",
        domain="Support",
        triggers=[
            Trigger(
                type=TriggerType.MESSAGE,
                description="New ticket arrives",
                examples=["My order is late", "Refund please"],
            )
        ],
        inputs=[
            SkillInput(name="ticket", type="string", description="Ticket body"),
            SkillInput(name="priority", type="number", description="0-5", required=False),
        ],
        outputs=[SkillOutput(name="queue", type="string", description="Target queue")],
        tools=[
            Tool(
                name="Ticket DB",
                purpose="Read tickets | history",
                permissions=[ToolPermission.READ, ToolPermission.WRITE],
            )
        ],
        behavior=WorkflowBehavior(
            entry_stage="classify",
            stages=[
                WorkflowStage(
                    name="classify",
                    purpose="Work out what the ticket is about",
                    actions=["Read the ticket", "Pick a category"],
                    transitions=[StageTransition(to="route", when="category is known")],
                ),
                WorkflowStage(name="route", actions=["Assign the queue"]),
            ],
        ),
        acceptance=Acceptance(
            success_conditions=["Ticket has a queue"],
            quality_metrics=[QualityMetric(name="accuracy", target="95%")],
        ),
        guardrails=[Guardrail(name="No PII", constraint="Never echo personal data")],
        portability=Portability(
            slug="triage-ticket",
            license="MIT",
            scripts=[AttachedFile(filename="classify.py", content="print('hi')\n")],
            references=[AttachedFile(filename="queues.md", content="# Queues\n")],
        ),
    )


@pytest.fixture
def adaptive_skill() -> Skill:
    return Skill(
        name="Answer Questions",
        description="Answer product questions",
        triggers=[Trigger(type=TriggerType.SCHEDULE, description="Every morning at 9")],
        tools=[Tool(name="Knowledge Base", purpose="Search product docs")],
        behavior=AdaptiveBehavior(
            capabilities=["search docs", "ask a clarifying question"],
            selection_strategy="Pick whichever resolves the question fastest",
        ),
        acceptance=Acceptance(success_conditions=["Question answered"]),
    )


@pytest.fixture
def iterative_skill() -> Skill:
    return Skill(
        name="Refine Draft",
        description="Improve a draft until it reads well",
        behavior=IterativeBehavior(
            body=["Critique the draft", "Rewrite weak passages"],
            termination_condition="No critique remains",
            max_iterations=5,
        ),
        acceptance=Acceptance(success_conditions=["Draft approved"]),
    )


@pytest.fixture
def support_agent(
    workflow_skill: Skill,
    adaptive_skill: Skill,
    iterative_skill: Skill,
    joke_skill: Skill,
) -> AgentSpecification:
    """A specification exercising every behavior variant and agent-level policy."""
    return AgentSpecification(
        name="Support Agent",
        identifier="support-agent",
        role="Front-line customer support",
        purpose="Resolve customer tickets quickly",
        autonomy_level=AutonomyLevel.SUPERVISED,
        tags=["support", "tickets"],
        created_at="2024-05-01T10:00:00Z",
        updated_at="2024-06-02T12:30:00Z",
        skills=[workflow_skill, adaptive_skill, iterative_skill, joke_skill],
        human_interaction=HumanInteractionPolicy(
            mode=HumanInteractionMode.IN_THE_LOOP,
            checkpoints=[
                Checkpoint(
                    name="Refund approval",
                    trigger="Refund over $100",
                    type=CheckpointType.APPROVAL,
                    timeout="Deny after 1h",
                )
            ],
            escalation=Escalation(conditions="Customer is angry", channel="#support-leads"),
        ),
        collaboration=CollaborationProfile(
            role=CollaborationRole.SUPERVISOR,
            coordinates=[Coordination(agent="Billing Agent", via="queue", for_="refunds")],
        ),
        memory=MemoryConfiguration(
            working=["Current ticket", "Customer tier"],
            persistent=[
                PersistentStore(
                    name="Customer History",
                    type=PersistentStoreType.RELATIONAL,
                    purpose="Past tickets per customer",
                )
            ],
            learning=[LearningConfig(type=LearningType.FEEDBACK_LOOP, signal="CSAT score")],
        ),
        guardrails=[
            Guardrail(name="Be polite", constraint="Never insult the customer"),
            Guardrail(
                name="Brevity",
                constraint="Keep replies short",
                enforcement=EnforcementLevel.SOFT,
                rationale="Customers skim",
            ),
        ],
    )


@pytest.fixture
def registry() -> HarnessRegistry:
    """A registry holding the built-in adapters."""
    return create_default_registry()


@pytest.fixture
def spec_file(tmp_path: Path) -> Path:
    """A YAML specification document using the editing layer's camelCase keys."""
    path = tmp_path / "joke-agent.yaml"
    path.write_text(
        dedent("""
        name: Joke Agent
        purpose: "Make people laugh: on demand"
        autonomyLevel: collaborative
        skills:
          - name: Tell Jokes
            description: Tells a joke on request
            triggers:
              - type: manual
                description: User asks for a joke
            behavior:
              model: sequential
              steps:
                - Pick a topic
                - Generate a joke
                - Deliver it
            acceptance:
              successConditions:
                - User is amused
        """).strip()
    )
    return path


@pytest.fixture
def messy_attachments_agent(joke_skill: Skill) -> AgentSpecification:
    """Repeated attachment names and a tool file name that climbs out of its directory."""
    joke_skill.prompts = [
        SkillPrompt(name="main", content="First prompt"),
        SkillPrompt(name="main", content="Second prompt"),
    ]
    joke_skill.examples = [
        SkillExample(name="e", content="First example"),
        SkillExample(name="e", content="Second example"),
    ]
    joke_skill.templates = [
        AttachedFile(filename="t.txt", content="first"),
        AttachedFile(filename="t.txt", content="second"),
    ]
    joke_skill.tool_implementations = [
        AttachedFile(filename="../../agent.md", content="overwritten?"),
    ]
    return AgentSpecification(name="Messy Agent", skills=[joke_skill])
