#!/usr/bin/env python3
"""
Agent Stories Export Demo

Loads ``support-agent.yaml`` and runs it through every export path:
single-skill packaging, the full agent filesystem, a ZIP archive, and the
built-in harness adapters.

Usage:
    python examples/export_demo.py
    python examples/export_demo.py --output /tmp/support-agent
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from agentstories import AgentSpecification, create_default_registry
from agentstories.export import (
    build_archive,
    export_specification,
    filesystem_preview,
    pack_skill,
    write_tree,
)

SPEC_PATH = Path(__file__).parent / "support-agent.yaml"


def demo_skill(spec: AgentSpecification) -> None:
    """Package the first skill as a portable SKILL.md."""
    print("=" * 60)
    print("Skill Packaging")
    print("=" * 60)

    package = pack_skill(spec.skills[0])
    print(f"\nSlug: {package.slug}")
    print(f"Files: {', '.join(f.path for f in package.files)}")
    print("\n" + package.artifact[:400])


async def demo_filesystem(spec: AgentSpecification, output: Path | None) -> None:
    """Export the full agent directory and zip it."""
    print("\n" + "=" * 60)
    print("Filesystem Export")
    print("=" * 60)

    result = export_specification(spec)
    print("\n" + filesystem_preview(result))
    print(f"\n{result.total_files} files, ~{result.estimated_size_bytes} bytes")
    for warning in result.warnings:
        print(f"  ! {warning}")

    data = await build_archive(result.files, result.root_directory_name)
    print(f"ZIP archive: {len(data)} bytes")

    if output:
        write_tree(result.files, output / result.root_directory_name)
        print(f"Written to {output / result.root_directory_name}")


def demo_harnesses(spec: AgentSpecification, output: Path | None) -> None:
    """Check compatibility and export to every compatible runtime."""
    print("\n" + "=" * 60)
    print("Harness Export")
    print("=" * 60)

    registry = create_default_registry()
    for adapter_id, compat in registry.check_all_compatibility(spec).items():
        status = "ok" if compat.compatible else "incompatible"
        print(f"\n{adapter_id}: {status}")
        for feature in compat.unsupported_features:
            print(f"  unsupported: {feature}")

    result = registry.export_to_harnesses(spec)
    for adapter_id, harness_output in result.outputs.items():
        print(f"\n[{adapter_id}]")
        for f in harness_output.files:
            print(f"  {f.path}")
        if output:
            write_tree(harness_output.files, output / "harnesses")

    print("\nWarnings:")
    for warning in result.warnings:
        print(f"  - {warning}")


async def main() -> None:
    parser = argparse.ArgumentParser(description="Agent Stories export demo")
    parser.add_argument("--output", type=Path, help="Also write the exports here")
    args = parser.parse_args()

    spec = AgentSpecification.from_file(SPEC_PATH)
    print(f"Loaded {spec.name} with {len(spec.skills)} skills\n")

    demo_skill(spec)
    await demo_filesystem(spec, args.output)
    demo_harnesses(spec, args.output)


if __name__ == "__main__":
    asyncio.run(main())
