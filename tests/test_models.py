"""Tests for specification models and loading."""

import json
from pathlib import Path
from textwrap import dedent

import pytest

from agentstories.errors import SpecificationLoadError
from agentstories.models import (
    AdaptiveBehavior,
    AgentSpecification,
    AutonomyLevel,
    CollaborationRole,
    HumanInteractionMode,
    IterativeBehavior,
    Portability,
    SequentialBehavior,
    Skill,
    SkillAcquisition,
    TriggerType,
    WorkflowBehavior,
    behavior_from_dict,
)


class TestBehaviorFromDict:
    """Tests for parsing the behavior tagged union."""

    def test_sequential(self) -> None:
        behavior = behavior_from_dict({"model": "sequential", "steps": ["a", "b"]})

        assert isinstance(behavior, SequentialBehavior)
        assert behavior.steps == ["a", "b"]

    def test_workflow_camel_case(self) -> None:
        behavior = behavior_from_dict(
            {
                "model": "workflow",
                "entryStage": "start",
                "stages": [
                    {
                        "name": "start",
                        "actions": ["go"],
                        "transitions": [{"to": "done", "when": "finished"}],
                    },
                    {"name": "done"},
                ],
            }
        )

        assert isinstance(behavior, WorkflowBehavior)
        assert behavior.entry_stage == "start"
        assert [s.name for s in behavior.stages] == ["start", "done"]
        assert behavior.stages[0].transitions[0].to == "done"

    def test_adaptive(self) -> None:
        behavior = behavior_from_dict(
            {"model": "adaptive", "capabilities": ["x"], "selectionStrategy": "best"}
        )

        assert isinstance(behavior, AdaptiveBehavior)
        assert behavior.selection_strategy == "best"

    def test_iterative(self) -> None:
        behavior = behavior_from_dict(
            {
                "model": "iterative",
                "body": ["try"],
                "terminationCondition": "works",
                "maxIterations": "4",
            }
        )

        assert isinstance(behavior, IterativeBehavior)
        assert behavior.termination_condition == "works"
        assert behavior.max_iterations == 4

    def test_empty_is_none(self) -> None:
        assert behavior_from_dict(None) is None
        assert behavior_from_dict({}) is None

    def test_unknown_model_raises(self) -> None:
        with pytest.raises(SpecificationLoadError, match="Unknown behavior model"):
            behavior_from_dict({"model": "freestyle"})


class TestSkill:
    """Tests for Skill parsing."""

    def test_from_dict_defaults(self) -> None:
        skill = Skill.from_dict({"name": "Minimal"})

        assert skill.name == "Minimal"
        assert skill.acquisition_mode == SkillAcquisition.BUILT_IN
        assert skill.behavior is None
        assert skill.acceptance.success_conditions == []
        assert skill.explicit_slug is None

    def test_from_dict_full(self) -> None:
        skill = Skill.from_dict(
            {
                "name": "Fetch Data",
                "acquired": "learned",
                "triggers": [{"type": "schedule", "description": "hourly"}],
                "inputs": [{"name": "url", "required": False}],
                "tools": [{"name": "HTTP", "permissions": ["read", "bogus"]}],
                "acceptance": {"successConditions": ["Data fetched"]},
                "failureHandling": {
                    "modes": [{"condition": "timeout", "recovery": "retry", "escalate": True}],
                    "defaultFallback": "give up",
                },
                "portability": {"slug": "fetch-data", "license": "MIT"},
            }
        )

        assert skill.acquisition_mode == SkillAcquisition.LEARNED
        assert skill.triggers[0].type == TriggerType.SCHEDULE
        assert skill.inputs[0].required is False
        assert [p.value for p in skill.tools[0].permissions] == ["read", "read"]
        assert skill.acceptance.success_conditions == ["Data fetched"]
        assert skill.failure_handling.modes[0].escalate is True
        assert skill.explicit_slug == "fetch-data"

    def test_explicit_slug_from_portability(self) -> None:
        skill = Skill(name="X", portability=Portability(slug="custom"))

        assert skill.explicit_slug == "custom"


class TestAgentSpecification:
    """Tests for AgentSpecification loading and serialization."""

    def test_from_dict_camel_case(self) -> None:
        spec = AgentSpecification.from_dict(
            {
                "name": "Ops Agent",
                "autonomyLevel": "supervised",
                "humanInteraction": {"mode": "in_the_loop"},
                "collaboration": {
                    "role": "supervisor",
                    "coordinates": [{"agent": "b", "via": "queue", "for": "billing"}],
                },
                "memory": {"working": "current task"},
                "createdAt": "2024-01-01",
            }
        )

        assert spec.autonomy_level == AutonomyLevel.SUPERVISED
        assert spec.human_interaction.mode == HumanInteractionMode.IN_THE_LOOP
        assert spec.collaboration.role == CollaborationRole.SUPERVISOR
        assert spec.collaboration.coordinates[0].for_ == "billing"
        assert spec.memory.working == ["current task"]
        assert spec.created_at == "2024-01-01"

    def test_unknown_autonomy_level_is_none(self) -> None:
        spec = AgentSpecification.from_dict({"name": "A", "autonomyLevel": "godlike"})

        assert spec.autonomy_level is None

    def test_to_dict_round_trip(self, support_agent: AgentSpecification) -> None:
        """to_dict output should load back into an equal specification."""
        data = support_agent.to_dict()

        assert AgentSpecification.from_dict(data) == support_agent

    def test_to_dict_shape(self, support_agent: AgentSpecification) -> None:
        data = support_agent.to_dict()

        assert data["autonomy_level"] == "supervised"
        assert data["skills"][0]["behavior"]["model"] == "workflow"
        assert data["collaboration"]["coordinates"][0]["for"] == "refunds"
        assert "notes" not in data
        json.dumps(data)

    def test_from_yaml_string(self) -> None:
        spec = AgentSpecification.from_yaml_string(
            dedent("""
            name: YAML Agent
            tags: [a, b]
            """)
        )

        assert spec.name == "YAML Agent"
        assert spec.tags == ["a", "b"]

    def test_from_yaml_string_rejects_non_mapping(self) -> None:
        with pytest.raises(SpecificationLoadError):
            AgentSpecification.from_yaml_string("- just\n- a list\n")

    def test_from_yaml_string_invalid(self) -> None:
        with pytest.raises(SpecificationLoadError):
            AgentSpecification.from_yaml_string("name: [unclosed\n")

    def test_unquoted_timestamps_become_strings(self) -> None:
        """YAML reads unquoted timestamps as date/datetime; they are kept as ISO text."""
        spec = AgentSpecification.from_yaml_string(
            dedent("""
            name: Joke Agent
            createdAt: 2024-05-01
            updatedAt: 2024-06-02T12:30:00Z
            """)
        )

        assert spec.created_at == "2024-05-01"
        assert isinstance(spec.updated_at, str)
        assert spec.updated_at.startswith("2024-06-02T12:30:00")
        json.dumps(spec.to_dict())

    def test_from_json_invalid(self) -> None:
        with pytest.raises(SpecificationLoadError):
            AgentSpecification.from_json("{not json")

    def test_from_file_yaml(self, spec_file: Path) -> None:
        spec = AgentSpecification.from_file(spec_file)

        assert spec.name == "Joke Agent"
        assert spec.autonomy_level == AutonomyLevel.COLLABORATIVE
        assert spec.skills[0].behavior.steps == ["Pick a topic", "Generate a joke", "Deliver it"]

    def test_from_file_json(self, tmp_path: Path, support_agent: AgentSpecification) -> None:
        path = tmp_path / "agent.json"
        path.write_text(json.dumps(support_agent.to_dict()))

        assert AgentSpecification.from_file(path) == support_agent

    def test_from_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(SpecificationLoadError, match="Cannot read"):
            AgentSpecification.from_file(tmp_path / "missing.yaml")


class TestValidate:
    """Tests for AgentSpecification.validate."""

    def test_valid(self, joke_agent: AgentSpecification) -> None:
        assert joke_agent.validate() == []

    def test_problems(self) -> None:
        spec = AgentSpecification(
            name="",
            identifier="Not A Slug",
            skills=[Skill(name="No Criteria", portability=Portability(slug="Bad Slug"))],
        )

        problems = spec.validate()

        assert "Agent name is required" in problems
        assert any("Identifier" in p for p in problems)
        assert any("no success conditions" in p for p in problems)
        assert any('invalid slug "Bad Slug"' in p for p in problems)
