"""Tests for the harness adapter contract and registry."""

from __future__ import annotations

import json
import logging

import pytest

from agentstories.export.files import ExportedFile
from agentstories.harness import (
    HarnessAdapter,
    HarnessCompatibility,
    HarnessOutput,
    HarnessRegistry,
    create_default_registry,
)
from agentstories.models import AgentSpecification


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeAdapter(HarnessAdapter):
    """A configurable adapter for testing."""

    def __init__(
        self,
        adapter_id: str = "fake",
        name: str = "Fake",
        warnings: list[str] | None = None,
        missing: list[str] | None = None,
    ) -> None:
        self.id = adapter_id
        self.name = name
        self.description = f"{name} runtime"
        self._warnings = warnings or []
        self._missing = missing or []
        self.generate_calls = 0

    def can_export(self, spec: AgentSpecification) -> HarnessCompatibility:
        compat = HarnessCompatibility()
        for warning in self._warnings:
            compat.warn(warning)
        for feature in self._missing:
            compat.missing(feature)
        return compat

    def generate(self, spec: AgentSpecification) -> HarnessOutput:
        self.generate_calls += 1
        return HarnessOutput(
            files=[ExportedFile(f"{self.id}/agent.txt", spec.name)],
            warnings=["output warning"],
        )


# ---------------------------------------------------------------------------
# HarnessCompatibility
# ---------------------------------------------------------------------------


class TestHarnessCompatibility:
    """Tests for the structural compatibility rule."""

    def test_empty_is_compatible(self) -> None:
        assert HarnessCompatibility().compatible is True

    def test_unsupported_also_warns(self) -> None:
        compat = HarnessCompatibility()

        compat.unsupported("scheduled triggers", "Needs a scheduler")

        assert compat.unsupported_features == ["scheduled triggers"]
        assert compat.warnings == ["Needs a scheduler"]
        assert compat.compatible is True

    def test_missing_blocks(self) -> None:
        compat = HarnessCompatibility()

        compat.missing("agent name")

        assert compat.compatible is False

    def test_to_dict(self) -> None:
        compat = HarnessCompatibility()
        compat.warn("w")

        assert compat.to_dict() == {
            "compatible": True,
            "warnings": ["w"],
            "missing_features": [],
            "unsupported_features": [],
        }


# ---------------------------------------------------------------------------
# Registry basics
# ---------------------------------------------------------------------------


class TestRegistration:
    """Tests for register/unregister/lookup."""

    def test_empty_registry(self) -> None:
        registry = HarnessRegistry()

        assert len(registry) == 0
        assert registry.list_adapters() == []

    def test_register_and_get(self) -> None:
        registry = HarnessRegistry()
        adapter = FakeAdapter()

        registry.register(adapter)

        assert registry.get("fake") is adapter
        assert registry.has("fake")
        assert "fake" in registry
        assert registry.get("missing") is None

    def test_register_overwrites_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        registry = HarnessRegistry([FakeAdapter(name="First")])
        second = FakeAdapter(name="Second")

        with caplog.at_level(logging.WARNING, logger="agentstories"):
            registry.register(second)

        assert registry.get("fake") is second
        assert len(registry) == 1
        assert "already registered" in caplog.text

    def test_register_empty_id(self) -> None:
        with pytest.raises(ValueError):
            HarnessRegistry().register(FakeAdapter(adapter_id=""))

    def test_unregister(self) -> None:
        registry = HarnessRegistry([FakeAdapter()])

        assert registry.unregister("fake") is True
        assert registry.unregister("fake") is False
        assert not registry.has("fake")

    def test_info_list(self) -> None:
        registry = HarnessRegistry([FakeAdapter("a", "Alpha"), FakeAdapter("b", "Beta")])

        infos = registry.info_list()

        assert [i.id for i in infos] == ["a", "b"]
        assert infos[0].name == "Alpha"
        assert infos[0].description == "Alpha runtime"


class TestCompatibility:
    """Tests for compatibility queries."""

    def test_check_all(self, joke_agent: AgentSpecification) -> None:
        registry = HarnessRegistry([FakeAdapter("a"), FakeAdapter("b", missing=["name"])])

        results = registry.check_all_compatibility(joke_agent)

        assert results["a"].compatible is True
        assert results["b"].compatible is False

    def test_compatible_adapters_sorted(self, joke_agent: AgentSpecification) -> None:
        registry = HarnessRegistry(
            [
                FakeAdapter("noisy", "Noisy", warnings=["1", "2"]),
                FakeAdapter("zeta", "Zeta"),
                FakeAdapter("alpha", "Alpha"),
                FakeAdapter("broken", "Broken", missing=["name"]),
            ]
        )

        compatible = registry.get_compatible_adapters(joke_agent)

        assert [a.id for a in compatible] == ["alpha", "zeta", "noisy"]

    def test_never_returns_incompatible(
        self, registry: HarnessRegistry, joke_agent: AgentSpecification
    ) -> None:
        nameless = AgentSpecification(name="", skills=joke_agent.skills)

        assert registry.get_compatible_adapters(nameless) == []
        for adapter in registry.get_compatible_adapters(joke_agent):
            assert adapter.can_export(joke_agent).compatible


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExportToHarnesses:
    """Tests for batch export."""

    def test_selected_adapters(self, joke_agent: AgentSpecification) -> None:
        registry = HarnessRegistry([FakeAdapter("a", "Alpha", warnings=["careful"]), FakeAdapter("b")])

        result = registry.export_to_harnesses(joke_agent, ["a"])

        assert list(result.outputs) == ["a"]
        assert result.warnings == ["Alpha: careful", "Alpha: output warning"]
        assert result.source is None

    def test_unknown_and_duplicate_ids(self, joke_agent: AgentSpecification) -> None:
        adapter = FakeAdapter("a", "Alpha")
        registry = HarnessRegistry([adapter])

        result = registry.export_to_harnesses(joke_agent, ["a", "nope", "a"])

        assert list(result.outputs) == ["a"]
        assert adapter.generate_calls == 1
        assert 'Unknown harness adapter "nope"' in result.warnings

    def test_empty_selection(self, joke_agent: AgentSpecification) -> None:
        result = HarnessRegistry([FakeAdapter()]).export_to_harnesses(joke_agent, [])

        assert result.outputs == {}
        assert result.warnings == ["No harness adapters selected"]

    def test_empty_registry_default(self, joke_agent: AgentSpecification) -> None:
        result = HarnessRegistry().export_to_harnesses(joke_agent)

        assert result.outputs == {}
        assert result.warnings

    def test_all_incompatible(self, joke_agent: AgentSpecification) -> None:
        """One skip warning per adapter, no outputs, no exception."""
        adapters = [
            FakeAdapter("a", "Alpha", missing=["agent name"]),
            FakeAdapter("b", "Beta", missing=["agent name", "skills"]),
        ]
        registry = HarnessRegistry(adapters)

        result = registry.export_to_harnesses(joke_agent)

        assert result.outputs == {}
        assert result.warnings == [
            "Skipping Alpha: not compatible (missing agent name)",
            "Skipping Beta: not compatible (missing agent name, skills)",
        ]
        assert all(a.generate_calls == 0 for a in adapters)

    def test_default_exports_compatible(self, joke_agent: AgentSpecification) -> None:
        registry = HarnessRegistry(
            [FakeAdapter("a", "Alpha"), FakeAdapter("b", "Beta", missing=["x"])]
        )

        result = registry.export_to_harnesses(joke_agent)

        assert list(result.outputs) == ["a"]
        assert "Skipping Beta: not compatible (missing x)" in result.warnings

    def test_include_source(self, support_agent: AgentSpecification) -> None:
        registry = HarnessRegistry([FakeAdapter()])

        result = registry.export_to_harnesses(support_agent, ["fake"], include_source=True)

        assert json.loads(result.source) == support_agent.to_dict()

    def test_include_source_with_yaml_dates(self) -> None:
        spec = AgentSpecification.from_yaml_string(
            "name: Dated Agent\ncreatedAt: 2024-05-01\nupdatedAt: 2024-06-02\n"
        )

        result = create_default_registry().export_to_harnesses(
            spec, ["claude"], include_source=True
        )

        assert list(result.outputs) == ["claude"]
        source = json.loads(result.source)
        assert source["created_at"] == "2024-05-01"
        assert source["updated_at"] == "2024-06-02"


class TestExportToHarness:
    """Tests for single-adapter export."""

    def test_known(self, joke_agent: AgentSpecification) -> None:
        output = HarnessRegistry([FakeAdapter()]).export_to_harness(joke_agent, "fake")

        assert output is not None
        assert output.files[0].content == "Joke Agent"

    def test_unknown(self, joke_agent: AgentSpecification) -> None:
        assert HarnessRegistry().export_to_harness(joke_agent, "nope") is None

    def test_incompatible(self, joke_agent: AgentSpecification) -> None:
        registry = HarnessRegistry([FakeAdapter(missing=["x"])])

        assert registry.export_to_harness(joke_agent, "fake") is None


class TestDefaultRegistry:
    """Tests for create_default_registry."""

    def test_builtin_adapters(self) -> None:
        registry = create_default_registry()

        assert [a.id for a in registry.list_adapters()] == ["claude", "letta", "langgraph", "crewai"]

    def test_independent_instances(self) -> None:
        first = create_default_registry()
        second = create_default_registry()
        first.unregister("claude")

        assert second.has("claude")
