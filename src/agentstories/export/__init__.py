"""
Export pipeline: skill packaging, full agent filesystem export, and archives.
"""

from agentstories.export.archive import (
    build_archive,
    build_skill_archive,
    write_archive,
    write_tree,
)
from agentstories.export.files import ExportedFile
from agentstories.export.filesystem import (
    FilesystemExportResult,
    export_specification,
    filesystem_preview,
)
from agentstories.export.skill_packager import SkillPackage, pack_skill, render_behavior

__all__ = [
    "ExportedFile",
    "FilesystemExportResult",
    "SkillPackage",
    "build_archive",
    "build_skill_archive",
    "export_specification",
    "filesystem_preview",
    "pack_skill",
    "render_behavior",
    "write_archive",
    "write_tree",
]
