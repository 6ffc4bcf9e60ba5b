"""
Command-line interface for the export pipeline.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import yaml
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agentstories.config import DEFAULT_CONFIG_FILENAME, ExportConfig
from agentstories.errors import AgentStoriesError
from agentstories.export import (
    ExportedFile,
    build_skill_archive,
    export_specification,
    filesystem_preview,
    pack_skill,
    write_archive,
    write_tree,
)
from agentstories.harness import create_default_registry
from agentstories.logging import set_level, setup_logging
from agentstories.models import AgentSpecification

console = Console()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Export Agent Stories specifications to skills, filesystems and harnesses",
        prog="agentstories",
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help=f"Config file (defaults to ./{DEFAULT_CONFIG_FILENAME} when present)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Adapters command
    subparsers.add_parser("adapters", help="List harness adapters")

    # Check command
    check_parser = subparsers.add_parser(
        "check", help="Validate a specification and check harness compatibility"
    )
    check_parser.add_argument("spec", type=Path, help="Specification file (.json/.yaml)")

    # Export command
    export_parser = subparsers.add_parser("export", help="Export the agent filesystem")
    export_parser.add_argument("spec", type=Path, help="Specification file (.json/.yaml)")
    export_parser.add_argument("-o", "--output", type=Path, required=True, help="Output directory")
    export_parser.add_argument("--zip", action="store_true", help="Write a ZIP archive instead")

    # Harness command
    harness_parser = subparsers.add_parser("harness", help="Export to agent runtimes")
    harness_parser.add_argument("spec", type=Path, help="Specification file (.json/.yaml)")
    harness_parser.add_argument(
        "-t",
        "--target",
        action="append",
        dest="targets",
        help="Adapter id (repeatable; defaults to every compatible adapter)",
    )
    harness_parser.add_argument("-o", "--output", type=Path, required=True, help="Output directory")
    harness_parser.add_argument(
        "--include-source",
        action="store_true",
        help="Also write the specification as agent-spec.json",
    )

    # Pack-skill command
    pack_parser = subparsers.add_parser("pack-skill", help="Package one skill as SKILL.md")
    pack_parser.add_argument("spec", type=Path, help="Specification file (.json/.yaml)")
    pack_parser.add_argument("-s", "--skill", required=True, help="Skill name or slug")
    pack_parser.add_argument("-o", "--output", type=Path, required=True, help="Output directory")
    pack_parser.add_argument("--zip", action="store_true", help="Write a ZIP archive instead")

    # Preview command
    preview_parser = subparsers.add_parser("preview", help="Show the exported file tree")
    preview_parser.add_argument("spec", type=Path, help="Specification file (.json/.yaml)")

    # Config command with subcommands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_subparsers.add_parser("show", help="Show current configuration")
    config_init_parser = config_subparsers.add_parser("init", help="Initialize a new config file")
    config_init_parser.add_argument(
        "-o",
        "--output",
        default=DEFAULT_CONFIG_FILENAME,
        help="Output file path",
    )

    args = parser.parse_args(argv)

    # Setup logging based on verbosity
    if args.verbose:
        setup_logging("DEBUG", rich=True)
    else:
        setup_logging("WARNING", rich=True)

    try:
        if args.command == "adapters":
            cmd_adapters(args)
        elif args.command == "check":
            cmd_check(args)
        elif args.command == "export":
            asyncio.run(cmd_export(args))
        elif args.command == "harness":
            cmd_harness(args)
        elif args.command == "pack-skill":
            asyncio.run(cmd_pack_skill(args))
        elif args.command == "preview":
            cmd_preview(args)
        elif args.command == "config":
            cmd_config(args)
        else:
            parser.print_help()
    except AgentStoriesError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


def _load_config(args: argparse.Namespace) -> ExportConfig:
    try:
        config = ExportConfig.load(args.config)
    except (OSError, yaml.YAMLError) as e:
        raise AgentStoriesError(f"Failed to load config: {e}") from e
    if not args.verbose:
        set_level(config.log_level)
    return config


def _load_spec(path: Path) -> AgentSpecification:
    return AgentSpecification.from_file(path)


def _print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        console.print(f"  [yellow]⚠[/yellow] {escape(warning)}")


def cmd_adapters(args: argparse.Namespace) -> None:
    """List harness adapters."""
    registry = create_default_registry()

    table = Table(title="Harness Adapters")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Description")
    table.add_column("URL", style="dim")

    for info in registry.info_list():
        table.add_row(info.id, info.name, info.description, info.url or "")

    console.print(table)


def cmd_check(args: argparse.Namespace) -> None:
    """Validate a specification and report compatibility per adapter."""
    spec = _load_spec(args.spec)
    registry = create_default_registry()

    console.print(f"\n[bold]{spec.name or '(unnamed agent)'}[/bold]")
    problems = spec.validate()
    if problems:
        console.print("\n[bold]Specification:[/bold]")
        for problem in problems:
            console.print(f"  [red]✗[/red] {escape(problem)}")
    else:
        console.print("[green]✓ Specification is valid[/green]")

    console.print("\n[bold]Harness compatibility:[/bold]")
    for adapter_id, compat in registry.check_all_compatibility(spec).items():
        adapter = registry.get(adapter_id)
        name = adapter.name if adapter else adapter_id
        if not compat.compatible:
            console.print(
                f"  [red]✗[/red] {name}: missing {', '.join(compat.missing_features)}"
            )
            continue
        marker = "[yellow]⚠[/yellow]" if compat.warnings else "[green]✓[/green]"
        console.print(f"  {marker} {name}")
        for warning in compat.warnings:
            console.print(f"      [dim]{escape(warning)}[/dim]")

    if problems:
        sys.exit(1)


async def cmd_export(args: argparse.Namespace) -> None:
    """Export the agent filesystem to a directory or ZIP archive."""
    config = _load_config(args)
    spec = _load_spec(args.spec)
    result = export_specification(spec, config.filesystem, config.runtime)

    if args.zip:
        args.output.mkdir(parents=True, exist_ok=True)
        path = await write_archive(result.files, result.root_directory_name, args.output)
        console.print(f"[green]Wrote archive: {path}[/green]")
    else:
        root = args.output / result.root_directory_name
        write_tree(result.files, root)
        console.print(f"[green]Exported to: {root}[/green]")

    console.print(
        f"[dim]{result.skill_count} skills, {result.total_files} files, "
        f"~{result.estimated_size_bytes} bytes[/dim]"
    )
    _print_warnings(result.warnings)


def cmd_harness(args: argparse.Namespace) -> None:
    """Export to one or more harnesses."""
    config = _load_config(args)
    spec = _load_spec(args.spec)
    registry = create_default_registry()

    targets = args.targets or config.harness_targets
    result = registry.export_to_harnesses(spec, targets, include_source=args.include_source)

    for adapter_id, output in result.outputs.items():
        written = write_tree(output.files, args.output)
        console.print(f"[green]✓[/green] {adapter_id}: {len(written)} files")

    if result.source is not None:
        write_tree([ExportedFile("agent-spec.json", result.source + "\n")], args.output)
        console.print("[dim]Wrote agent-spec.json[/dim]")

    _print_warnings(result.warnings)
    if not result.outputs:
        raise AgentStoriesError("No harness output generated")


async def cmd_pack_skill(args: argparse.Namespace) -> None:
    """Package a single skill."""
    config = _load_config(args)
    spec = _load_spec(args.spec)

    skill = next(
        (s for s in spec.skills if args.skill in (s.name, s.explicit_slug)),
        None,
    )
    if skill is None:
        raise AgentStoriesError(f"Skill not found: {args.skill}")

    package = pack_skill(skill, config.skills)
    if args.zip:
        data = await build_skill_archive(package)
        args.output.mkdir(parents=True, exist_ok=True)
        path = args.output / f"{package.slug}.zip"
        path.write_bytes(data)
        console.print(f"[green]Wrote archive: {path}[/green]")
    else:
        root = args.output / package.slug
        write_tree(package.files, root)
        console.print(f"[green]Packaged skill to: {root}[/green]")
    _print_warnings(package.warnings)


def cmd_preview(args: argparse.Namespace) -> None:
    """Show the file tree an export would produce."""
    config = _load_config(args)
    spec = _load_spec(args.spec)
    result = export_specification(spec, config.filesystem, config.runtime)

    console.print(filesystem_preview(result), markup=False, highlight=False)
    console.print(
        f"\n[dim]Total: {result.total_files} files, ~{result.estimated_size_bytes} bytes[/dim]"
    )
    _print_warnings(result.warnings)


def cmd_config(args: argparse.Namespace) -> None:
    """Configuration management commands."""
    if args.config_command == "show":
        _config_show(args)
    elif args.config_command == "init":
        _config_init(args.output)
    else:
        console.print("[yellow]Usage: agentstories config <show|init>[/yellow]")


def _config_show(args: argparse.Namespace) -> None:
    """Show current configuration."""
    path = args.config or Path.cwd() / DEFAULT_CONFIG_FILENAME
    if args.config is None and not path.exists():
        console.print("[dim]No config file found. Using defaults.[/dim]\n")
    else:
        console.print(f"[dim]Loaded from: {path}[/dim]\n")

    config = _load_config(args)
    console.print("[bold]Current Configuration:[/bold]\n")
    console.print(
        yaml.safe_dump(config.to_dict(), default_flow_style=False, sort_keys=False),
        markup=False,
        highlight=False,
    )


def _config_init(output: str) -> None:
    """Initialize a new config file."""
    output_path = Path(output)

    if output_path.exists():
        console.print(f"[red]File already exists: {output_path}[/red]")
        sys.exit(1)

    with open(output_path, "w") as f:
        yaml.safe_dump(ExportConfig().to_dict(), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Created config file: {output_path}[/green]")


if __name__ == "__main__":
    main()
