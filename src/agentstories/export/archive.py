"""
Archive packaging for export results.

Builds a ZIP archive with a single top-level directory from a list of
``ExportedFile`` objects, or writes the same tree to disk. The blocking
ZIP work runs in the event loop's default executor, one build per call.

Entries carry a fixed timestamp, so archiving the same files twice yields
identical bytes.
"""

from __future__ import annotations

import asyncio
import io
import zipfile
from collections.abc import Callable
from functools import partial
from pathlib import Path

from agentstories.errors import AgentStoriesError
from agentstories.export.files import ExportedFile
from agentstories.export.skill_packager import SkillPackage
from agentstories.logging import get_logger

logger = get_logger("export.archive")

# Earliest timestamp the ZIP format can represent
ARCHIVE_TIMESTAMP = (1980, 1, 1, 0, 0, 0)

# (entries_written, total_entries); called from the worker thread
ProgressCallback = Callable[[int, int], None]


def _build_zip(
    files: list[ExportedFile],
    root_directory_name: str,
    progress: ProgressCallback | None,
) -> bytes:
    buffer = io.BytesIO()
    total = len(files)
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        for done, f in enumerate(files, start=1):
            info = zipfile.ZipInfo(f"{root_directory_name}/{f.path}", ARCHIVE_TIMESTAMP)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = 0o644 << 16
            zf.writestr(info, f.data())
            if progress is not None:
                progress(done, total)
    return buffer.getvalue()


async def build_archive(
    files: list[ExportedFile],
    root_directory_name: str,
    progress: ProgressCallback | None = None,
) -> bytes:
    """
    Build a ZIP archive in memory.

    Args:
        files: Files to archive, in entry order
        root_directory_name: Top-level directory inside the archive
        progress: Optional callback invoked after every entry

    Returns:
        The archive bytes
    """
    loop = asyncio.get_running_loop()
    data = await loop.run_in_executor(
        None, partial(_build_zip, list(files), root_directory_name, progress)
    )
    logger.debug(
        "Built archive %s.zip: %d entries, %d bytes", root_directory_name, len(files), len(data)
    )
    return data


async def write_archive(
    files: list[ExportedFile],
    root_directory_name: str,
    destination: Path,
) -> Path:
    """
    Build an archive and write it to ``destination``.

    A directory destination receives ``<root_directory_name>.zip``.
    """
    data = await build_archive(files, root_directory_name)
    destination = Path(destination)
    if destination.is_dir():
        destination = destination / f"{root_directory_name}.zip"
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, _write_bytes, destination, data)
    return destination


async def build_skill_archive(package: SkillPackage) -> bytes:
    """Archive one packaged skill as ``<slug>/SKILL.md`` plus its auxiliary files."""
    return await build_archive(package.files, package.slug)


def _write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def write_tree(files: list[ExportedFile], destination: Path) -> list[Path]:
    """
    Write ``files`` below ``destination``.

    Raises:
        AgentStoriesError: A file path would land outside ``destination``.
    """
    base = Path(destination).resolve()
    written: list[Path] = []
    for f in files:
        target = (base / f.path).resolve()
        if not target.is_relative_to(base):
            raise AgentStoriesError(f"Refusing to write outside export directory: {f.path}")
        _write_bytes(target, f.data())
        written.append(target)
    return written
