"""
Harness adapter registry.

An explicit catalog of harness adapters keyed by id, built by the
application entry point and passed to whatever needs it. Nothing registers
itself at import time; ``create_default_registry`` assembles the built-in
set.

Example:
    from agentstories.harness import HarnessRegistry, create_default_registry

    registry = create_default_registry()
    result = registry.export_to_harnesses(spec, ["claude", "langgraph"])

    # Tests can build an empty registry
    registry = HarnessRegistry()
    registry.register(MyAdapter())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from agentstories.harness.base import (
    HarnessAdapter,
    HarnessAdapterInfo,
    HarnessCompatibility,
    HarnessOutput,
)
from agentstories.logging import get_logger
from agentstories.models import AgentSpecification

logger = get_logger("harness.registry")


@dataclass
class HarnessExportResult:
    """Result of exporting one specification to several harnesses."""

    outputs: dict[str, HarnessOutput] = field(default_factory=dict)  # adapter id -> output
    warnings: list[str] = field(default_factory=list)
    source: str | None = None  # JSON copy of the specification, when requested


class HarnessRegistry:
    """
    A registry of harness adapters.

    Registering an id that already exists replaces the previous adapter
    and logs a warning.

    Thread Safety:
        Registration is expected to happen once at startup; lookups and
        exports afterwards only read the registry.
    """

    def __init__(self, adapters: list[HarnessAdapter] | None = None) -> None:
        self._adapters: dict[str, HarnessAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: HarnessAdapter) -> None:
        """
        Register an adapter under its ``id``.

        Raises:
            ValueError: If the adapter has an empty id
        """
        if not adapter.id:
            raise ValueError("Harness adapter id must not be empty")

        if adapter.id in self._adapters:
            logger.warning('Harness adapter "%s" is already registered. Overwriting.', adapter.id)

        self._adapters[adapter.id] = adapter
        logger.debug("Registered harness adapter: %s", adapter.id)

    def unregister(self, adapter_id: str) -> bool:
        """
        Remove a registered adapter.

        Returns:
            True if removed, False if not found
        """
        if adapter_id not in self._adapters:
            return False
        del self._adapters[adapter_id]
        logger.debug("Unregistered harness adapter: %s", adapter_id)
        return True

    def get(self, adapter_id: str) -> HarnessAdapter | None:
        """Get an adapter by id, or None when unknown."""
        return self._adapters.get(adapter_id)

    def has(self, adapter_id: str) -> bool:
        """Check if an adapter is registered."""
        return adapter_id in self._adapters

    def list_adapters(self) -> list[HarnessAdapter]:
        """All adapters in registration order."""
        return list(self._adapters.values())

    def info_list(self) -> list[HarnessAdapterInfo]:
        """Display metadata for every adapter."""
        return [adapter.info() for adapter in self._adapters.values()]

    def __len__(self) -> int:
        return len(self._adapters)

    def __contains__(self, adapter_id: object) -> bool:
        return adapter_id in self._adapters

    # ------------------------------------------------------------------
    # Compatibility
    # ------------------------------------------------------------------

    def check_all_compatibility(
        self, spec: AgentSpecification
    ) -> dict[str, HarnessCompatibility]:
        """Run every adapter's compatibility check."""
        return {
            adapter_id: adapter.can_export(spec)
            for adapter_id, adapter in self._adapters.items()
        }

    def get_compatible_adapters(self, spec: AgentSpecification) -> list[HarnessAdapter]:
        """
        Adapters that can export ``spec``.

        Cleanly compatible adapters come first: sorted by warning count,
        then display name.
        """
        checked = [(adapter, adapter.can_export(spec)) for adapter in self._adapters.values()]
        compatible = [(adapter, compat) for adapter, compat in checked if compat.compatible]
        compatible.sort(key=lambda pair: (len(pair[1].warnings), pair[0].name))
        return [adapter for adapter, _ in compatible]

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_to_harnesses(
        self,
        spec: AgentSpecification,
        adapter_ids: list[str] | None = None,
        include_source: bool = False,
    ) -> HarnessExportResult:
        """
        Export ``spec`` to several harnesses.

        Args:
            spec: The specification to export
            adapter_ids: Adapters to use; None exports every compatible adapter
            include_source: Attach a JSON copy of ``spec`` to the result

        Returns:
            HarnessExportResult; never raises for unknown or incompatible adapters
        """
        result = HarnessExportResult()

        if adapter_ids is None:
            # Compatible adapters first; the rest are reported as skipped below
            compatible = self.get_compatible_adapters(spec)
            selected = compatible + [a for a in self._adapters.values() if a not in compatible]
        else:
            selected = []
            seen: set[str] = set()
            for adapter_id in adapter_ids:
                if adapter_id in seen:
                    continue
                seen.add(adapter_id)
                adapter = self.get(adapter_id)
                if adapter is None:
                    result.warnings.append(f'Unknown harness adapter "{adapter_id}"')
                    continue
                selected.append(adapter)

        if not selected:
            result.warnings.append("No harness adapters selected")

        for adapter in selected:
            compat = adapter.can_export(spec)
            if not compat.compatible:
                missing = ", ".join(compat.missing_features)
                result.warnings.append(f"Skipping {adapter.name}: not compatible (missing {missing})")
                continue

            result.warnings.extend(f"{adapter.name}: {w}" for w in compat.warnings)
            output = adapter.generate(spec)
            result.outputs[adapter.id] = output
            result.warnings.extend(f"{adapter.name}: {w}" for w in output.warnings)
            logger.debug("Exported %s: %d files", adapter.id, len(output.files))

        if include_source:
            result.source = json.dumps(spec.to_dict(), indent=2, ensure_ascii=False)

        return result

    def export_to_harness(
        self, spec: AgentSpecification, adapter_id: str
    ) -> HarnessOutput | None:
        """Export to one harness; None when the id is unknown or ``spec`` is incompatible."""
        adapter = self.get(adapter_id)
        if adapter is None:
            return None
        if not adapter.can_export(spec).compatible:
            return None
        return adapter.generate(spec)


def create_default_registry() -> HarnessRegistry:
    """Build a registry holding the built-in adapters."""
    from agentstories.harness.adapters import (
        ClaudeAdapter,
        CrewAIAdapter,
        LangGraphAdapter,
        LettaAdapter,
    )

    return HarnessRegistry(
        [ClaudeAdapter(), LettaAdapter(), LangGraphAdapter(), CrewAIAdapter()]
    )
