"""Tests for archive packaging and writing exports to disk."""

import io
import zipfile
from pathlib import Path

import pytest

from agentstories.errors import AgentStoriesError
from agentstories.export.archive import (
    ARCHIVE_TIMESTAMP,
    build_archive,
    build_skill_archive,
    write_archive,
    write_tree,
)
from agentstories.export.files import ExportedFile
from agentstories.export.filesystem import export_specification
from agentstories.export.skill_packager import pack_skill
from agentstories.models import AgentSpecification, Skill


def read_zip(data: bytes) -> dict[str, bytes]:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


class TestBuildArchive:
    """Tests for build_archive."""

    @pytest.mark.asyncio
    async def test_round_trip(self, support_agent: AgentSpecification) -> None:
        """Extracting the archive yields the exported paths and bytes."""
        result = export_specification(support_agent)

        data = await build_archive(result.files, result.root_directory_name)
        entries = read_zip(data)

        expected = {f"support-agent/{f.path}": f.data() for f in result.files}
        assert entries == expected

    @pytest.mark.asyncio
    async def test_repeated_attachment_names_all_extracted(
        self, messy_attachments_agent: AgentSpecification
    ) -> None:
        """Every exported file becomes its own entry, none shadowed by a later one."""
        result = export_specification(messy_attachments_agent)

        data = await build_archive(result.files, result.root_directory_name)

        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            names = zf.namelist()
        assert len(names) == len(set(names)) == len(result.files)
        assert read_zip(data)["messy-agent/agent.md"] == result.get("agent.md").data()

    @pytest.mark.asyncio
    async def test_entry_order_and_timestamps(self) -> None:
        files = [ExportedFile("b.txt", "b"), ExportedFile("a/a.txt", "a")]

        data = await build_archive(files, "root")

        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            infos = zf.infolist()
        assert [i.filename for i in infos] == ["root/b.txt", "root/a/a.txt"]
        assert all(i.date_time == ARCHIVE_TIMESTAMP for i in infos)

    @pytest.mark.asyncio
    async def test_reproducible(self, joke_agent: AgentSpecification) -> None:
        result = export_specification(joke_agent)

        first = await build_archive(result.files, result.root_directory_name)
        second = await build_archive(result.files, result.root_directory_name)

        assert first == second

    @pytest.mark.asyncio
    async def test_binary_entries_decoded(self) -> None:
        files = [ExportedFile.from_bytes("logo.png", b"\x89PNG\r\n\x1a\n\x00")]

        entries = read_zip(await build_archive(files, "root"))

        assert entries["root/logo.png"] == b"\x89PNG\r\n\x1a\n\x00"

    @pytest.mark.asyncio
    async def test_progress_callback(self) -> None:
        calls: list[tuple[int, int]] = []
        files = [ExportedFile(f"{i}.txt", str(i)) for i in range(3)]

        await build_archive(files, "root", progress=lambda done, total: calls.append((done, total)))

        assert calls == [(1, 3), (2, 3), (3, 3)]

    @pytest.mark.asyncio
    async def test_empty(self) -> None:
        assert read_zip(await build_archive([], "root")) == {}


class TestSkillArchive:
    """Tests for build_skill_archive."""

    @pytest.mark.asyncio
    async def test_skill_archive(self, workflow_skill: Skill) -> None:
        package = pack_skill(workflow_skill)

        entries = read_zip(await build_skill_archive(package))

        assert set(entries) == {
            "triage-ticket/SKILL.md",
            "triage-ticket/scripts/classify.py",
            "triage-ticket/references/queues.md",
        }
        assert entries["triage-ticket/SKILL.md"].decode("utf-8") == package.artifact


class TestWriteArchive:
    """Tests for write_archive."""

    @pytest.mark.asyncio
    async def test_directory_destination(self, tmp_path: Path, joke_agent: AgentSpecification) -> None:
        result = export_specification(joke_agent)

        path = await write_archive(result.files, result.root_directory_name, tmp_path)

        assert path == tmp_path / "joke-agent.zip"
        assert "joke-agent/agent.md" in read_zip(path.read_bytes())

    @pytest.mark.asyncio
    async def test_file_destination(self, tmp_path: Path) -> None:
        destination = tmp_path / "out" / "custom.zip"

        path = await write_archive([ExportedFile("a.txt", "a")], "root", destination)

        assert path == destination
        assert read_zip(path.read_bytes()) == {"root/a.txt": b"a"}


class TestWriteTree:
    """Tests for write_tree."""

    def test_writes_files(self, tmp_path: Path, joke_agent: AgentSpecification) -> None:
        result = export_specification(joke_agent)

        written = write_tree(result.files, tmp_path / "joke-agent")

        assert len(written) == len(result.files)
        skill_md = tmp_path / "joke-agent" / "skills" / "tell-jokes" / "SKILL.md"
        assert "Pick a topic" in skill_md.read_text()

    def test_refuses_escape(self, tmp_path: Path) -> None:
        with pytest.raises(AgentStoriesError, match="outside export directory"):
            write_tree([ExportedFile("../evil.txt", "x")], tmp_path / "out")

        assert not (tmp_path / "evil.txt").exists()
