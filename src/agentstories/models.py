"""
Core data models for agent specifications.

An ``AgentSpecification`` is the canonical, runtime-agnostic description of
one agent: identity, skills, guardrails, and human-interaction,
collaboration and memory policy. The export pipeline only reads these
objects; they are produced by the editing layer or loaded from a JSON/YAML
document with ``AgentSpecification.from_file``.

``from_dict`` accepts both the editing layer's camelCase keys and snake_case
keys, so documents written by ``to_dict`` load back unchanged.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, TypeVar

import yaml

from agentstories.errors import SpecificationLoadError
from agentstories.utils.text import is_valid_slug

NAME_MAX_LENGTH = 100

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class AutonomyLevel(str, Enum):
    """How much decision authority the agent has."""

    FULL = "full"
    SUPERVISED = "supervised"
    COLLABORATIVE = "collaborative"
    DIRECTED = "directed"


class SkillAcquisition(str, Enum):
    """How the agent came to have a skill."""

    BUILT_IN = "built_in"
    PRE_TRAINED = "pre_trained"
    LEARNED = "learned"
    DELEGATED = "delegated"


class TriggerType(str, Enum):
    """What activates a skill."""

    MESSAGE = "message"
    RESOURCE_CHANGE = "resource_change"
    SCHEDULE = "schedule"
    CASCADE = "cascade"
    MANUAL = "manual"
    CONDITION = "condition"


class ToolPermission(str, Enum):
    READ = "read"
    WRITE = "write"
    EXECUTE = "execute"
    ADMIN = "admin"


class EnforcementLevel(str, Enum):
    HARD = "hard"  # Must never be violated
    SOFT = "soft"  # Preferred but can be overridden


class ReasoningStrategy(str, Enum):
    RULE_BASED = "rule_based"
    LLM_GUIDED = "llm_guided"
    HYBRID = "hybrid"


class HumanInteractionMode(str, Enum):
    IN_THE_LOOP = "in_the_loop"  # Human approval for every decision
    ON_THE_LOOP = "on_the_loop"  # Human monitors, intervenes on exceptions
    OUT_OF_LOOP = "out_of_loop"  # Fully autonomous within boundaries


class CheckpointType(str, Enum):
    APPROVAL = "approval"
    INPUT = "input"
    REVIEW = "review"
    ESCALATION = "escalation"


class CollaborationRole(str, Enum):
    SUPERVISOR = "supervisor"
    WORKER = "worker"
    PEER = "peer"


class PeerInteraction(str, Enum):
    REQUEST_RESPONSE = "request_response"
    PUB_SUB = "pub_sub"
    SHARED_STATE = "shared_state"


class PersistentStoreType(str, Enum):
    KB = "kb"
    VECTOR = "vector"
    RELATIONAL = "relational"
    KV = "kv"


class StoreUpdateMode(str, Enum):
    READ_ONLY = "read_only"
    APPEND = "append"
    FULL_CRUD = "full_crud"


class LearningType(str, Enum):
    FEEDBACK_LOOP = "feedback_loop"
    REINFORCEMENT = "reinforcement"
    FINE_TUNING = "fine_tuning"


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------

E = TypeVar("E", bound=Enum)


def _get(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first non-None value among ``keys``."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _timestamp(value: Any) -> str | None:
    """ISO string for a timestamp; YAML loads unquoted ones as date/datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _parse_enum(enum_cls: type[E], value: Any, default: E) -> E:
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return default


def _ensure_list(value: Any) -> list[str]:
    """Ensure value is a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, list):
        return [str(v) for v in value]
    return []


def _dicts(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        data: dict[str, Any] = {}
        tag = getattr(type(value), "model", None)
        if isinstance(tag, str):
            data["model"] = tag
        for f in fields(value):
            item = getattr(value, f.name)
            if item is None:
                continue
            data[f.name.rstrip("_")] = _serialize(item)
        return data
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    return value


# ---------------------------------------------------------------------------
# Skill interface
# ---------------------------------------------------------------------------


@dataclass
class Trigger:
    """An event that activates a skill."""

    type: TriggerType
    description: str
    conditions: list[str] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Trigger:
        return cls(
            type=_parse_enum(TriggerType, data.get("type"), TriggerType.MANUAL),
            description=_get(data, "description", "source", default=""),
            conditions=_ensure_list(data.get("conditions")),
            examples=_ensure_list(data.get("examples")),
        )


@dataclass
class SkillInput:
    name: str
    type: str = "string"
    description: str = ""
    required: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillInput:
        return cls(
            name=data.get("name", ""),
            type=_get(data, "type", default="string"),
            description=_get(data, "description", default=""),
            required=data.get("required") is not False,
        )


@dataclass
class SkillOutput:
    name: str
    type: str = "string"
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillOutput:
        return cls(
            name=data.get("name", ""),
            type=_get(data, "type", default="string"),
            description=_get(data, "description", default=""),
        )


@dataclass
class Tool:
    """A tool or MCP server a skill relies on."""

    name: str
    purpose: str = ""
    permissions: list[ToolPermission] = field(default_factory=list)
    required: bool = True
    conditions: str | None = None  # When the tool is available/used

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tool:
        permissions = [
            _parse_enum(ToolPermission, p, ToolPermission.READ)
            for p in _ensure_list(data.get("permissions"))
        ]
        return cls(
            name=data.get("name", ""),
            purpose=_get(data, "purpose", "description", default=""),
            permissions=permissions,
            required=data.get("required") is not False,
            conditions=data.get("conditions"),
        )


# ---------------------------------------------------------------------------
# Behavior (tagged union on ``model``)
# ---------------------------------------------------------------------------


@dataclass
class SequentialBehavior:
    """Linear step-by-step execution."""

    model: ClassVar[str] = "sequential"

    steps: list[str] = field(default_factory=list)


@dataclass
class StageTransition:
    to: str
    when: str


@dataclass
class WorkflowStage:
    name: str
    purpose: str = ""
    actions: list[str] = field(default_factory=list)
    transitions: list[StageTransition] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorkflowStage:
        return cls(
            name=data.get("name", ""),
            purpose=_get(data, "purpose", default=""),
            actions=_ensure_list(data.get("actions")),
            transitions=[
                StageTransition(to=t.get("to", ""), when=t.get("when", ""))
                for t in _dicts(data.get("transitions"))
            ],
        )


@dataclass
class WorkflowBehavior:
    """Named stages with conditional transitions."""

    model: ClassVar[str] = "workflow"

    stages: list[WorkflowStage] = field(default_factory=list)
    entry_stage: str | None = None


@dataclass
class AdaptiveBehavior:
    """Picks among capabilities based on context."""

    model: ClassVar[str] = "adaptive"

    capabilities: list[str] = field(default_factory=list)
    selection_strategy: str | None = None


@dataclass
class IterativeBehavior:
    """Loops over a body until a termination condition holds."""

    model: ClassVar[str] = "iterative"

    body: list[str] = field(default_factory=list)
    termination_condition: str = ""
    max_iterations: int | None = None


Behavior = SequentialBehavior | WorkflowBehavior | AdaptiveBehavior | IterativeBehavior


def behavior_from_dict(data: dict[str, Any] | None) -> Behavior | None:
    """Parse a behavior dict discriminated by its ``model`` key."""
    if not data:
        return None
    model = str(data.get("model", "")).lower()
    if model == "sequential":
        return SequentialBehavior(steps=_ensure_list(data.get("steps")))
    if model == "workflow":
        return WorkflowBehavior(
            stages=[WorkflowStage.from_dict(s) for s in _dicts(data.get("stages"))],
            entry_stage=_get(data, "entry_stage", "entryStage"),
        )
    if model == "adaptive":
        return AdaptiveBehavior(
            capabilities=_ensure_list(data.get("capabilities")),
            selection_strategy=_get(data, "selection_strategy", "selectionStrategy"),
        )
    if model == "iterative":
        max_iterations = _get(data, "max_iterations", "maxIterations")
        return IterativeBehavior(
            body=_ensure_list(data.get("body")),
            termination_condition=_get(
                data, "termination_condition", "terminationCondition", default=""
            ),
            max_iterations=int(max_iterations) if max_iterations is not None else None,
        )
    raise SpecificationLoadError(f"Unknown behavior model: {data.get('model')!r}")


# ---------------------------------------------------------------------------
# Reasoning, acceptance, failure handling, guardrails
# ---------------------------------------------------------------------------


@dataclass
class DecisionPoint:
    name: str
    inputs: list[str] = field(default_factory=list)
    approach: str = ""
    outcomes: list[str] = field(default_factory=list)


@dataclass
class RetryConfig:
    max_attempts: int = 3
    backoff_strategy: str = "exponential"  # none, linear, exponential
    retry_on: list[str] = field(default_factory=list)


@dataclass
class ConfidenceConfig:
    threshold: float | None = None
    fallback_action: str | None = None


@dataclass
class Reasoning:
    strategy: ReasoningStrategy = ReasoningStrategy.LLM_GUIDED
    decision_points: list[DecisionPoint] = field(default_factory=list)
    retry: RetryConfig | None = None
    confidence: ConfidenceConfig | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reasoning:
        retry_raw = data.get("retry")
        confidence_raw = data.get("confidence")
        return cls(
            strategy=_parse_enum(
                ReasoningStrategy, data.get("strategy"), ReasoningStrategy.LLM_GUIDED
            ),
            decision_points=[
                DecisionPoint(
                    name=dp.get("name", ""),
                    inputs=_ensure_list(dp.get("inputs")),
                    approach=dp.get("approach", ""),
                    outcomes=_ensure_list(dp.get("outcomes")),
                )
                for dp in _dicts(_get(data, "decision_points", "decisionPoints"))
            ],
            retry=RetryConfig(
                max_attempts=int(_get(retry_raw, "max_attempts", "maxAttempts", default=3)),
                backoff_strategy=_get(
                    retry_raw, "backoff_strategy", "backoffStrategy", default="exponential"
                ),
                retry_on=_ensure_list(_get(retry_raw, "retry_on", "retryOn")),
            )
            if isinstance(retry_raw, dict)
            else None,
            confidence=ConfidenceConfig(
                threshold=confidence_raw.get("threshold"),
                fallback_action=_get(confidence_raw, "fallback_action", "fallbackAction"),
            )
            if isinstance(confidence_raw, dict)
            else None,
        )


@dataclass
class QualityMetric:
    name: str
    target: str
    measurement: str | None = None


@dataclass
class Acceptance:
    """What "done" looks like for a skill."""

    success_conditions: list[str] = field(default_factory=list)
    quality_metrics: list[QualityMetric] = field(default_factory=list)
    timeout: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Acceptance:
        return cls(
            success_conditions=_ensure_list(
                _get(data, "success_conditions", "successConditions")
            ),
            quality_metrics=[
                QualityMetric(
                    name=m.get("name", ""),
                    target=str(m.get("target", "")),
                    measurement=m.get("measurement"),
                )
                for m in _dicts(_get(data, "quality_metrics", "qualityMetrics"))
            ],
            timeout=data.get("timeout"),
        )


@dataclass
class FailureMode:
    condition: str
    recovery: str
    escalate: bool = False


@dataclass
class FailureHandling:
    modes: list[FailureMode] = field(default_factory=list)
    default_fallback: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FailureHandling:
        return cls(
            modes=[
                FailureMode(
                    condition=m.get("condition", ""),
                    recovery=m.get("recovery", ""),
                    escalate=bool(m.get("escalate", False)),
                )
                for m in _dicts(data.get("modes"))
            ],
            default_fallback=_get(data, "default_fallback", "defaultFallback"),
        )


@dataclass
class Guardrail:
    """A constraint the agent or skill must respect."""

    name: str
    constraint: str
    rationale: str | None = None
    enforcement: EnforcementLevel = EnforcementLevel.HARD
    on_violation: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Guardrail:
        return cls(
            name=data.get("name", ""),
            constraint=data.get("constraint", ""),
            rationale=data.get("rationale"),
            enforcement=_parse_enum(
                EnforcementLevel, data.get("enforcement"), EnforcementLevel.HARD
            ),
            on_violation=_get(data, "on_violation", "onViolation"),
        )


# ---------------------------------------------------------------------------
# Portability and attached content
# ---------------------------------------------------------------------------


@dataclass
class AttachedFile:
    """A file blob attached to a skill (script, reference, template, ...)."""

    filename: str
    content: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttachedFile:
        return cls(
            filename=_get(data, "filename", "name", default=""),
            content=data.get("content") or "",
        )


@dataclass
class Portability:
    """Per-skill packaging hints used only during export."""

    slug: str | None = None
    license: str | None = None
    compatibility: str | None = None
    scripts: list[AttachedFile] = field(default_factory=list)
    references: list[AttachedFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Portability:
        return cls(
            slug=data.get("slug") or None,
            license=data.get("license"),
            compatibility=data.get("compatibility"),
            scripts=[AttachedFile.from_dict(s) for s in _dicts(data.get("scripts"))],
            references=[AttachedFile.from_dict(r) for r in _dicts(data.get("references"))],
        )


@dataclass
class SkillPrompt:
    name: str
    description: str = ""
    content: str = ""
    inputs: list[SkillInput] = field(default_factory=list)
    outputs: list[SkillOutput] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillPrompt:
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            content=data.get("content", ""),
            inputs=[SkillInput.from_dict(i) for i in _dicts(data.get("inputs"))],
            outputs=[SkillOutput.from_dict(o) for o in _dicts(data.get("outputs"))],
        )


@dataclass
class SkillExample:
    name: str
    content: str = ""


# ---------------------------------------------------------------------------
# Skill
# ---------------------------------------------------------------------------


@dataclass
class Skill:
    """
    One discrete capability of an agent.

    A skill is exclusively owned by one specification. ``acceptance`` must
    carry at least one success condition for the skill to validate.
    """

    name: str
    description: str = ""
    domain: str = ""
    acquisition_mode: SkillAcquisition = SkillAcquisition.BUILT_IN
    id: str | None = None

    # Interface
    triggers: list[Trigger] = field(default_factory=list)
    inputs: list[SkillInput] = field(default_factory=list)
    outputs: list[SkillOutput] = field(default_factory=list)

    # Resources
    tools: list[Tool] = field(default_factory=list)

    # Execution
    behavior: Behavior | None = None
    reasoning: Reasoning | None = None

    # Success / failure
    acceptance: Acceptance = field(default_factory=Acceptance)
    failure_handling: FailureHandling | None = None

    # Constraints
    guardrails: list[Guardrail] = field(default_factory=list)

    # Export-only content
    portability: Portability | None = None
    prompts: list[SkillPrompt] = field(default_factory=list)
    tool_implementations: list[AttachedFile] = field(default_factory=list)
    examples: list[SkillExample] = field(default_factory=list)
    templates: list[AttachedFile] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Skill:
        acceptance_raw = data.get("acceptance")
        failure_raw = _get(data, "failure_handling", "failureHandling")
        reasoning_raw = data.get("reasoning")
        portability_raw = data.get("portability")
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            domain=data.get("domain", ""),
            acquisition_mode=_parse_enum(
                SkillAcquisition,
                _get(data, "acquisition_mode", "acquisitionMode", "acquired"),
                SkillAcquisition.BUILT_IN,
            ),
            id=data.get("id"),
            triggers=[Trigger.from_dict(t) for t in _dicts(data.get("triggers"))],
            inputs=[SkillInput.from_dict(i) for i in _dicts(data.get("inputs"))],
            outputs=[SkillOutput.from_dict(o) for o in _dicts(data.get("outputs"))],
            tools=[Tool.from_dict(t) for t in _dicts(data.get("tools"))],
            behavior=behavior_from_dict(data.get("behavior")),
            reasoning=Reasoning.from_dict(reasoning_raw)
            if isinstance(reasoning_raw, dict)
            else None,
            acceptance=Acceptance.from_dict(acceptance_raw)
            if isinstance(acceptance_raw, dict)
            else Acceptance(),
            failure_handling=FailureHandling.from_dict(failure_raw)
            if isinstance(failure_raw, dict)
            else None,
            guardrails=[Guardrail.from_dict(g) for g in _dicts(data.get("guardrails"))],
            portability=Portability.from_dict(portability_raw)
            if isinstance(portability_raw, dict)
            else None,
            prompts=[SkillPrompt.from_dict(p) for p in _dicts(data.get("prompts"))],
            tool_implementations=[
                AttachedFile.from_dict(t)
                for t in _dicts(_get(data, "tool_implementations", "toolImplementations"))
            ],
            examples=[
                SkillExample(name=e.get("name", ""), content=e.get("content", ""))
                for e in _dicts(data.get("examples"))
            ],
            templates=[AttachedFile.from_dict(t) for t in _dicts(data.get("templates"))],
        )

    @property
    def explicit_slug(self) -> str | None:
        """The slug configured in portability metadata, if any."""
        return self.portability.slug if self.portability else None


# ---------------------------------------------------------------------------
# Agent-level policy
# ---------------------------------------------------------------------------


@dataclass
class Checkpoint:
    name: str
    trigger: str
    type: CheckpointType = CheckpointType.APPROVAL
    timeout: str | None = None  # What happens if the human does not respond


@dataclass
class Escalation:
    conditions: str
    channel: str


@dataclass
class HumanInteractionPolicy:
    mode: HumanInteractionMode = HumanInteractionMode.ON_THE_LOOP
    checkpoints: list[Checkpoint] = field(default_factory=list)
    escalation: Escalation | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HumanInteractionPolicy:
        escalation_raw = data.get("escalation")
        return cls(
            mode=_parse_enum(
                HumanInteractionMode, data.get("mode"), HumanInteractionMode.ON_THE_LOOP
            ),
            checkpoints=[
                Checkpoint(
                    name=cp.get("name", ""),
                    trigger=cp.get("trigger", ""),
                    type=_parse_enum(CheckpointType, cp.get("type"), CheckpointType.APPROVAL),
                    timeout=cp.get("timeout"),
                )
                for cp in _dicts(data.get("checkpoints"))
            ],
            escalation=Escalation(
                conditions=escalation_raw.get("conditions", ""),
                channel=escalation_raw.get("channel", ""),
            )
            if isinstance(escalation_raw, dict)
            else None,
        )


@dataclass
class Coordination:
    agent: str
    via: str
    for_: str


@dataclass
class Peer:
    agent: str
    interaction: PeerInteraction = PeerInteraction.REQUEST_RESPONSE


@dataclass
class CollaborationProfile:
    role: CollaborationRole = CollaborationRole.PEER
    reports_to: str | None = None
    coordinates: list[Coordination] = field(default_factory=list)
    peers: list[Peer] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CollaborationProfile:
        return cls(
            role=_parse_enum(CollaborationRole, data.get("role"), CollaborationRole.PEER),
            reports_to=_get(data, "reports_to", "reportsTo"),
            coordinates=[
                Coordination(
                    agent=c.get("agent", ""),
                    via=c.get("via", ""),
                    for_=_get(c, "for", "for_", default=""),
                )
                for c in _dicts(data.get("coordinates"))
            ],
            peers=[
                Peer(
                    agent=p.get("agent", ""),
                    interaction=_parse_enum(
                        PeerInteraction, p.get("interaction"), PeerInteraction.REQUEST_RESPONSE
                    ),
                )
                for p in _dicts(data.get("peers"))
            ],
        )


@dataclass
class PersistentStore:
    name: str
    type: PersistentStoreType = PersistentStoreType.KB
    purpose: str = ""
    updates: StoreUpdateMode = StoreUpdateMode.READ_ONLY


@dataclass
class LearningConfig:
    type: LearningType
    signal: str


@dataclass
class MemoryConfiguration:
    working: list[str] = field(default_factory=list)  # Ephemeral in-session context
    persistent: list[PersistentStore] = field(default_factory=list)
    learning: list[LearningConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryConfiguration:
        return cls(
            working=_ensure_list(data.get("working")),
            persistent=[
                PersistentStore(
                    name=s.get("name", ""),
                    type=_parse_enum(PersistentStoreType, s.get("type"), PersistentStoreType.KB),
                    purpose=s.get("purpose", ""),
                    updates=_parse_enum(
                        StoreUpdateMode, s.get("updates"), StoreUpdateMode.READ_ONLY
                    ),
                )
                for s in _dicts(data.get("persistent"))
            ],
            learning=[
                LearningConfig(
                    type=_parse_enum(LearningType, lc.get("type"), LearningType.FEEDBACK_LOOP),
                    signal=lc.get("signal", ""),
                )
                for lc in _dicts(data.get("learning"))
            ],
        )


# ---------------------------------------------------------------------------
# Agent specification
# ---------------------------------------------------------------------------


@dataclass
class AgentSpecification:
    """
    The canonical description of one agent.

    Example:
        spec = AgentSpecification(
            name="Joke Agent",
            skills=[Skill(name="Tell Jokes", ...)],
        )
    """

    name: str
    identifier: str | None = None
    role: str = ""
    purpose: str = ""
    autonomy_level: AutonomyLevel | None = None
    version: str = "1.0"
    tags: list[str] = field(default_factory=list)
    notes: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    id: str | None = None

    skills: list[Skill] = field(default_factory=list)
    human_interaction: HumanInteractionPolicy | None = None
    collaboration: CollaborationProfile | None = None
    memory: MemoryConfiguration | None = None
    guardrails: list[Guardrail] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AgentSpecification:
        """Create a specification from a dictionary."""
        human_raw = _get(data, "human_interaction", "humanInteraction")
        collaboration_raw = data.get("collaboration")
        memory_raw = data.get("memory")
        autonomy_raw = _get(data, "autonomy_level", "autonomyLevel")
        return cls(
            name=str(data.get("name") or ""),
            identifier=data.get("identifier") or None,
            role=data.get("role") or "",
            purpose=data.get("purpose") or "",
            autonomy_level=_parse_enum(AutonomyLevel, autonomy_raw, None)  # type: ignore[arg-type]
            if autonomy_raw
            else None,
            version=str(data.get("version") or "1.0"),
            tags=_ensure_list(data.get("tags")),
            notes=data.get("notes"),
            created_at=_timestamp(_get(data, "created_at", "createdAt")),
            updated_at=_timestamp(_get(data, "updated_at", "updatedAt")),
            id=data.get("id"),
            skills=[Skill.from_dict(s) for s in _dicts(data.get("skills"))],
            human_interaction=HumanInteractionPolicy.from_dict(human_raw)
            if isinstance(human_raw, dict)
            else None,
            collaboration=CollaborationProfile.from_dict(collaboration_raw)
            if isinstance(collaboration_raw, dict)
            else None,
            memory=MemoryConfiguration.from_dict(memory_raw)
            if isinstance(memory_raw, dict)
            else None,
            guardrails=[Guardrail.from_dict(g) for g in _dicts(data.get("guardrails"))],
        )

    @classmethod
    def from_yaml_string(cls, content: str) -> AgentSpecification:
        """Load a specification from a YAML (or JSON) string."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise SpecificationLoadError(f"Invalid specification document: {e}") from e
        if not isinstance(data, dict):
            raise SpecificationLoadError("Specification document must be a mapping")
        return cls.from_dict(data)

    @classmethod
    def from_json(cls, content: str) -> AgentSpecification:
        """Load a specification from a JSON string."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise SpecificationLoadError(f"Invalid JSON specification: {e}") from e
        if not isinstance(data, dict):
            raise SpecificationLoadError("Specification document must be a JSON object")
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: Path) -> AgentSpecification:
        """Load a specification from a ``.json``, ``.yaml`` or ``.yml`` file."""
        try:
            content = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise SpecificationLoadError(f"Cannot read {path}: {e}") from e
        if Path(path).suffix.lower() == ".json":
            return cls.from_json(content)
        return cls.from_yaml_string(content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (None values omitted)."""
        return _serialize(self)

    def validate(self) -> list[str]:
        """
        Check the specification for authoring problems.

        Returns:
            Human-readable problems; an empty list means the specification
            is valid. Export does not require a valid specification.
        """
        problems: list[str] = []
        if not self.name:
            problems.append("Agent name is required")
        elif len(self.name) > NAME_MAX_LENGTH:
            problems.append(f"Agent name exceeds {NAME_MAX_LENGTH} characters")
        if self.identifier and not is_valid_slug(self.identifier):
            problems.append(f'Identifier "{self.identifier}" is not a valid slug')

        for index, skill in enumerate(self.skills, start=1):
            label = skill.name or f"#{index}"
            if not skill.name:
                problems.append(f"Skill {label} has no name")
            if not skill.acceptance.success_conditions:
                problems.append(f'Skill "{label}" has no success conditions')
            if skill.explicit_slug and not is_valid_slug(skill.explicit_slug):
                problems.append(f'Skill "{label}" has invalid slug "{skill.explicit_slug}"')
        return problems
