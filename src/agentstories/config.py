"""
Configuration models for the export pipeline.

Export options can be loaded from YAML files or constructed
programmatically. Every option has a default, so an empty config file
reproduces the built-in behavior.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_FILENAME = "agentstories.yaml"


# ---------------------------------------------------------------------------
# Runtime defaults
# ---------------------------------------------------------------------------


@dataclass
class RuntimeDefaults:
    """Values written into generated runtime configuration."""

    framework: str = "claude-agent-sdk"
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096
    escalation_threshold: float = 0.8  # Confidence below which to escalate

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuntimeDefaults:
        return cls(
            framework=os.environ.get("AGENTSTORIES_RUNTIME_FRAMEWORK")
            or data.get("framework", "claude-agent-sdk"),
            model=os.environ.get("AGENTSTORIES_RUNTIME_MODEL")
            or data.get("model", "claude-sonnet-4-20250514"),
            max_tokens=int(data.get("max_tokens", 4096)),
            escalation_threshold=float(data.get("escalation_threshold", 0.8)),
        )


# ---------------------------------------------------------------------------
# Skill packaging
# ---------------------------------------------------------------------------


@dataclass
class SkillPackOptions:
    """Options for packaging one skill in the portable skill format."""

    include_scripts: bool = True  # Emit scripts/ auxiliary files
    include_references: bool = True  # Emit references/ auxiliary files
    generate_missing_slug: bool = True  # Derive a slug from the name when absent

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SkillPackOptions:
        return cls(
            include_scripts=data.get("include_scripts", True),
            include_references=data.get("include_references", True),
            generate_missing_slug=data.get("generate_missing_slug", True),
        )


# ---------------------------------------------------------------------------
# Filesystem export
# ---------------------------------------------------------------------------


@dataclass
class FilesystemExportOptions:
    """
    Options for the full agent directory export.

    Example YAML:
        filesystem:
          include_memory_structure: true
          include_shared_tools: false
          include_logs: false
          include_gitkeep: true
    """

    include_skills: bool = True
    include_memory_structure: bool = True
    include_shared_tools: bool = False  # tools/ with base_tool.py
    include_logs: bool = False  # logs/ directory placeholder
    include_examples: bool = True
    include_prompts: bool = True
    include_tool_implementations: bool = True
    include_templates: bool = True
    include_scripts: bool = True
    include_references: bool = True
    generate_readme: bool = True
    include_gitkeep: bool = True  # Placeholders for empty directories
    validate_agentskills_compat: bool = True  # Slug validation via the skill packager

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilesystemExportOptions:
        defaults = cls()
        return cls(
            **{
                name: bool(data.get(name, getattr(defaults, name)))
                for name in defaults.__dataclass_fields__
            }
        )

    def skill_pack_options(self) -> SkillPackOptions:
        """Derive packager options for skills exported as part of a tree."""
        return SkillPackOptions(
            include_scripts=self.include_scripts,
            include_references=self.include_references,
        )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass
class ExportConfig:
    """
    Main configuration for the ``agentstories`` CLI.

    Example YAML:
        log_level: INFO
        runtime:
          model: claude-sonnet-4-20250514
          max_tokens: 4096
        skills:
          include_scripts: true
        harness_targets:
          - claude
          - langgraph
    """

    runtime: RuntimeDefaults = field(default_factory=RuntimeDefaults)
    filesystem: FilesystemExportOptions = field(default_factory=FilesystemExportOptions)
    skills: SkillPackOptions = field(default_factory=SkillPackOptions)
    harness_targets: list[str] | None = None  # None = every compatible adapter
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExportConfig:
        """Create config from a dictionary."""
        targets = data.get("harness_targets")
        return cls(
            runtime=RuntimeDefaults.from_dict(data.get("runtime") or {}),
            filesystem=FilesystemExportOptions.from_dict(data.get("filesystem") or {}),
            skills=SkillPackOptions.from_dict(data.get("skills") or {}),
            harness_targets=[str(t) for t in targets] if targets else None,
            log_level=str(data.get("log_level", "INFO")),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> ExportConfig:
        """Load config from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> ExportConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    @classmethod
    def load(cls, path: Path | None = None) -> ExportConfig:
        """Load from ``path``, or ``./agentstories.yaml`` when present, else defaults."""
        if path is not None:
            return cls.from_yaml(path)
        default = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if default.is_file():
            return cls.from_yaml(default)
        return cls.from_dict({})

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "log_level": self.log_level,
            "runtime": {
                "framework": self.runtime.framework,
                "model": self.runtime.model,
                "max_tokens": self.runtime.max_tokens,
                "escalation_threshold": self.runtime.escalation_threshold,
            },
            "filesystem": {
                name: getattr(self.filesystem, name)
                for name in self.filesystem.__dataclass_fields__
            },
            "skills": {
                "include_scripts": self.skills.include_scripts,
                "include_references": self.skills.include_references,
                "generate_missing_slug": self.skills.generate_missing_slug,
            },
            "harness_targets": self.harness_targets,
        }
