"""
Base harness adapter interface.

A harness adapter translates an ``AgentSpecification`` into the files one
target agent runtime expects. Every adapter answers two questions: can this
specification be exported (``can_export``), and what files does it produce
(``generate``).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from agentstories.export.files import ExportedFile
from agentstories.models import AgentSpecification


@dataclass
class HarnessCompatibility:
    """
    Result of checking a specification against one adapter.

    ``missing_features`` are hard blockers; ``unsupported_features`` and
    ``warnings`` are soft, export proceeds with reduced fidelity. Every
    unsupported feature is also reported as a warning.
    """

    warnings: list[str] = field(default_factory=list)
    missing_features: list[str] = field(default_factory=list)
    unsupported_features: list[str] = field(default_factory=list)

    @property
    def compatible(self) -> bool:
        return not self.missing_features

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def unsupported(self, feature: str, message: str) -> None:
        """Record a feature the target cannot represent, with its warning."""
        self.unsupported_features.append(feature)
        self.warnings.append(message)

    def missing(self, feature: str) -> None:
        """Record a required feature the specification lacks."""
        self.missing_features.append(feature)

    def to_dict(self) -> dict[str, Any]:
        return {
            "compatible": self.compatible,
            "warnings": list(self.warnings),
            "missing_features": list(self.missing_features),
            "unsupported_features": list(self.unsupported_features),
        }


@dataclass
class HarnessOutput:
    """Files generated for one harness."""

    files: list[ExportedFile] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    instructions: str = ""


@dataclass
class TryItCliConfig:
    """Launch the agent with a shell command."""

    command: str
    description: str = ""
    setup_instructions: str = ""


@dataclass
class TryItUrlConfig:
    """Open the agent in a browser."""

    url: str
    description: str = ""
    setup_instructions: str = ""


@dataclass
class TryItApiConfig:
    """Call an HTTP endpoint to start the agent."""

    endpoint: str
    method: str = "POST"
    body: dict[str, Any] = field(default_factory=dict)
    description: str = ""
    setup_instructions: str = ""


TryItConfig = TryItCliConfig | TryItUrlConfig | TryItApiConfig


@dataclass
class HarnessAdapterInfo:
    """Display metadata for an adapter."""

    id: str
    name: str
    description: str
    icon: str | None = None
    url: str | None = None


class HarnessAdapter(ABC):
    """
    Abstract base class for harness adapters.

    Subclasses set the display attributes and implement ``can_export`` and
    ``generate``. ``generate`` may assume ``can_export(spec).compatible``;
    callers check first.

    Example implementation:

        class MyRuntimeAdapter(HarnessAdapter):
            id = "my-runtime"
            name = "My Runtime"
            description = "Generate config for My Runtime"

            def can_export(self, spec):
                compat = HarnessCompatibility()
                if not spec.name:
                    compat.missing("agent name")
                return compat

            def generate(self, spec):
                return HarnessOutput(files=[ExportedFile("my-runtime/agent.txt", spec.name)])
    """

    id: str = ""
    name: str = ""
    description: str = ""
    icon: str | None = None
    url: str | None = None

    @abstractmethod
    def can_export(self, spec: AgentSpecification) -> HarnessCompatibility:
        """Check whether ``spec`` can be exported to this harness."""
        pass

    @abstractmethod
    def generate(self, spec: AgentSpecification) -> HarnessOutput:
        """Generate the harness files for ``spec``."""
        pass

    def get_try_it_config(self, spec: AgentSpecification) -> TryItConfig | None:
        """Return a launch recipe for the generated files, if the harness has one."""
        return None

    def info(self) -> HarnessAdapterInfo:
        return HarnessAdapterInfo(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            url=self.url,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
