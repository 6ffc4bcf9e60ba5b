"""Tests for the skill packager."""

import pytest
import yaml

from agentstories.config import SkillPackOptions
from agentstories.errors import InvalidSlugError, MissingSlugError, SkillExportError
from agentstories.export.skill_packager import (
    build_body,
    pack_skill,
    render_behavior,
    resolve_slug,
)
from agentstories.models import (
    Acceptance,
    AdaptiveBehavior,
    AttachedFile,
    IterativeBehavior,
    Portability,
    SequentialBehavior,
    Skill,
    SkillInput,
)


def parse_frontmatter(artifact: str) -> tuple[dict, str]:
    """Split a SKILL.md artifact into parsed frontmatter and body."""
    assert artifact.startswith("---\n")
    _, frontmatter, body = artifact.split("---\n", 2)
    return yaml.safe_load(frontmatter), body


class TestResolveSlug:
    """Tests for slug resolution."""

    def test_explicit_valid_slug(self) -> None:
        """An explicit valid slug is used as-is with no warning."""
        skill = Skill(name="Tell Jokes", portability=Portability(slug="jokes"))

        slug, warnings = resolve_slug(skill, SkillPackOptions())

        assert slug == "jokes"
        assert warnings == []

    def test_generated_slug_warns_once(self, joke_skill: Skill) -> None:
        slug, warnings = resolve_slug(joke_skill, SkillPackOptions())

        assert slug == "tell-jokes"
        assert warnings == ['Generated slug "tell-jokes" from skill name']

    def test_missing_slug_without_generation(self, joke_skill: Skill) -> None:
        with pytest.raises(MissingSlugError) as exc_info:
            resolve_slug(joke_skill, SkillPackOptions(generate_missing_slug=False))

        assert exc_info.value.skill_name == "Tell Jokes"

    def test_unsluggable_name(self) -> None:
        with pytest.raises(MissingSlugError):
            resolve_slug(Skill(name="!!!"), SkillPackOptions())

    def test_invalid_explicit_slug(self) -> None:
        skill = Skill(name="Tell Jokes", portability=Portability(slug="Tell Jokes"))

        with pytest.raises(InvalidSlugError) as exc_info:
            resolve_slug(skill, SkillPackOptions())

        assert exc_info.value.slug == "Tell Jokes"
        assert isinstance(exc_info.value, SkillExportError)


class TestPackSkill:
    """Tests for pack_skill."""

    def test_joke_skill(self, joke_skill: Skill) -> None:
        package = pack_skill(joke_skill)
        frontmatter, body = parse_frontmatter(package.artifact)

        assert package.slug == "tell-jokes"
        assert len(package.warnings) == 1
        assert frontmatter["name"] == "tell-jokes"
        assert frontmatter["description"] == "Tells a joke on request"
        assert frontmatter["metadata"] == {"domain": "Entertainment", "acquired": "built_in"}

        steps = ["1. Pick a topic", "2. Generate a joke", "3. Deliver it"]
        positions = [body.index(step) for step in steps]
        assert positions == sorted(positions)

    def test_frontmatter_with_portability(self, workflow_skill: Skill) -> None:
        package = pack_skill(workflow_skill)
        frontmatter, _ = parse_frontmatter(package.artifact)

        assert package.warnings == []
        assert frontmatter["name"] == "triage-ticket"
        assert frontmatter["license"] == "MIT"
        assert frontmatter["allowed-tools"] == "ticket-db"

    def test_frontmatter_escapes_special_characters(self) -> None:
        skill = Skill(
            name="Tricky",
            description='Handles "quotes": colons, #hashes\nand newlines',
            domain="yes",
            acceptance=Acceptance(success_conditions=["done"]),
        )

        frontmatter, _ = parse_frontmatter(pack_skill(skill).artifact)

        assert frontmatter["description"] == 'Handles "quotes": colons, #hashes\nand newlines'
        assert frontmatter["metadata"]["domain"] == "yes"

    def test_description_truncated(self) -> None:
        skill = Skill(name="Long", description="x" * 2000)

        frontmatter, _ = parse_frontmatter(pack_skill(skill).artifact)

        assert len(frontmatter["description"]) == 1024

    def test_auxiliary_files(self, workflow_skill: Skill) -> None:
        package = pack_skill(workflow_skill)

        assert [f.path for f in package.files] == [
            "SKILL.md",
            "scripts/classify.py",
            "references/queues.md",
        ]

    def test_auxiliary_files_disabled(self, workflow_skill: Skill) -> None:
        package = pack_skill(
            workflow_skill,
            SkillPackOptions(include_scripts=False, include_references=False),
        )

        assert [f.path for f in package.files] == ["SKILL.md"]

    def test_auxiliary_file_names_sanitized(self, joke_skill: Skill) -> None:
        """Repeated or path-like script names map to distinct files inside scripts/."""
        joke_skill.portability = Portability(
            scripts=[
                AttachedFile(filename="run.sh", content="echo 1"),
                AttachedFile(filename="run.sh", content="echo 2"),
            ],
            references=[AttachedFile(filename="../SKILL.md", content="not the skill")],
        )

        package = pack_skill(joke_skill)
        contents = {f.path: f.content for f in package.files}

        assert list(contents) == [
            "SKILL.md",
            "scripts/run.sh",
            "scripts/run-2.sh",
            "references/SKILL.md",
        ]
        assert contents["scripts/run-2.sh"] == "echo 2"
        assert contents["SKILL.md"].startswith("---\n")
        assert '"run.sh" exported as scripts/run-2.sh' in package.warnings

    def test_invalid_slug_raises(self) -> None:
        skill = Skill(name="Bad", portability=Portability(slug="bad slug"))

        with pytest.raises(InvalidSlugError):
            pack_skill(skill)


class TestBody:
    """Tests for the SKILL.md body."""

    def test_section_order(self, workflow_skill: Skill) -> None:
        body = build_body(workflow_skill)
        headings = [
            "# Triage Ticket",
            "## Triggers",
            "## Interface",
            "## Behavior",
            "## Tools",
            "## Success Criteria",
            "## Guardrails",
        ]

        positions = [body.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_table_cells_escaped(self, workflow_skill: Skill) -> None:
        body = build_body(workflow_skill)

        assert "| Ticket DB | Read tickets \\| history | read, write |" in body

    def test_inputs_table(self) -> None:
        skill = Skill(
            name="S",
            inputs=[SkillInput(name="q", description="multi\nline", required=False)],
        )

        body = build_body(skill)

        assert "| q | string | No | multi line |" in body

    def test_always_has_success_criteria(self) -> None:
        body = build_body(Skill(name="Bare"))

        assert "## Success Criteria" in body


class TestRenderBehavior:
    """Tests for per-variant behavior rendering."""

    def test_sequential(self) -> None:
        lines = render_behavior(SequentialBehavior(steps=["a", "b"]))

        assert "1. a" in lines
        assert "2. b" in lines

    def test_workflow(self, workflow_skill: Skill) -> None:
        text = "\n".join(render_behavior(workflow_skill.behavior))

        assert "#### classify" in text
        assert "- → route when category is known" in text

    def test_adaptive(self) -> None:
        text = "\n".join(
            render_behavior(AdaptiveBehavior(capabilities=["x"], selection_strategy="fastest"))
        )

        assert "- x" in text
        assert "**Selection Strategy**: fastest" in text

    def test_iterative(self) -> None:
        text = "\n".join(
            render_behavior(
                IterativeBehavior(body=["loop"], termination_condition="stop", max_iterations=3)
            )
        )

        assert "**Terminates when**: stop" in text
        assert "**Max iterations**: 3" in text

    def test_heading_level(self) -> None:
        lines = render_behavior(SequentialBehavior(steps=["a"]), heading="##")

        assert lines[0].startswith("## Steps")
