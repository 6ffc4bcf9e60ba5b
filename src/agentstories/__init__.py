"""
Agent Stories - export agent specifications to skills, filesystems and runtimes.

An ``AgentSpecification`` describes one AI agent: identity, skills,
guardrails, human-interaction policy, collaboration role and memory. This
package compiles it into artifacts for downstream agent runtimes.

Example:
    from agentstories import AgentSpecification, create_default_registry
    from agentstories.export import export_specification, pack_skill

    spec = AgentSpecification.from_file("joke-agent.yaml")

    # Portable SKILL.md for one skill
    package = pack_skill(spec.skills[0])

    # Complete agent directory
    result = export_specification(spec)

    # Runtime-specific files
    registry = create_default_registry()
    harness = registry.export_to_harnesses(spec, ["claude", "langgraph"])
"""

from agentstories.config import (
    ExportConfig,
    FilesystemExportOptions,
    RuntimeDefaults,
    SkillPackOptions,
)
from agentstories.errors import (
    AgentStoriesError,
    InvalidSlugError,
    MissingSlugError,
    SkillExportError,
    SpecificationLoadError,
)
from agentstories.export import (
    ExportedFile,
    FilesystemExportResult,
    SkillPackage,
    build_archive,
    export_specification,
    pack_skill,
)
from agentstories.harness import (
    HarnessAdapter,
    HarnessCompatibility,
    HarnessExportResult,
    HarnessOutput,
    HarnessRegistry,
    create_default_registry,
)
from agentstories.logging import get_logger, setup_logging
from agentstories.models import AgentSpecification, Skill

__version__ = "0.1.0"

__all__ = [
    # Models
    "AgentSpecification",
    "Skill",
    # Config
    "ExportConfig",
    "FilesystemExportOptions",
    "RuntimeDefaults",
    "SkillPackOptions",
    # Errors
    "AgentStoriesError",
    "InvalidSlugError",
    "MissingSlugError",
    "SkillExportError",
    "SpecificationLoadError",
    # Export
    "ExportedFile",
    "FilesystemExportResult",
    "SkillPackage",
    "build_archive",
    "export_specification",
    "pack_skill",
    # Harness
    "HarnessAdapter",
    "HarnessCompatibility",
    "HarnessExportResult",
    "HarnessOutput",
    "HarnessRegistry",
    "create_default_registry",
    # Logging
    "get_logger",
    "setup_logging",
]
