"""Command-line interface for schemabind code generation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from schemabind.generator import golang
from schemabind.generator.errors import ConfigurationError, EmitError, ValidationError
from schemabind.generator.loader import DEFAULT_MODULE, load, resolve_target
from schemabind.generator.ordering import ordered
from schemabind.generator.registry import TypeRegistry

if TYPE_CHECKING:
    from schemabind.generator.loader import TargetConfig
    from schemabind.generator.types import Schema

FATAL_ERRORS = (ConfigurationError, ValidationError, EmitError)

schema_dir_option = click.option(
    "--schema-dir",
    "-s",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    show_default=True,
    help="Directory holding <target>.schema",
)
overlay_dir_option = click.option(
    "--overlay-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the optional <target>.yaml overlay [default: <schema-dir>/sdk]",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """schemabind Go binding generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(
    target: str, schema_dir: Path, overlay_dir: Path | None, module: str = DEFAULT_MODULE
) -> tuple[TargetConfig, Schema, TypeRegistry]:
    config = resolve_target(target, module)
    schema = load(config, schema_dir, overlay_dir)
    return config, schema, TypeRegistry(schema.types)


@cli.command()
@click.argument("output_dir", type=click.Path(path_type=Path))
@click.argument("target")
@schema_dir_option
@overlay_dir_option
@click.option(
    "--module",
    "-m",
    envvar="SCHEMABIND_MODULE",
    default=DEFAULT_MODULE,
    show_default=True,
    help="Go module path used in generated imports",
)
def gen(
    output_dir: Path, target: str, schema_dir: Path, overlay_dir: Path | None, module: str
) -> None:
    """Generate Go bindings for TARGET into OUTPUT_DIR."""
    console = Console()

    try:
        if not output_dir.is_dir():
            raise ConfigurationError(f"{output_dir} is not a directory")

        config, schema, registry = _load(target, schema_dir, overlay_dir, module)
        console.print(f"{len(registry)} classes, {len(registry.interface_names())} interfaces")

        artifacts = golang.render(schema, registry, config)
        golang.write(artifacts, output_dir)
    except FATAL_ERRORS as exc:
        raise click.ClickException(str(exc)) from exc


@cli.command()
@click.argument("target")
@schema_dir_option
@overlay_dir_option
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(target: str, schema_dir: Path, overlay_dir: Path | None, output_json: bool) -> None:
    """Display the type classification for TARGET."""
    try:
        config, schema, registry = _load(target, schema_dir, overlay_dir)
    except FATAL_ERRORS as exc:
        raise click.ClickException(str(exc)) from exc

    if output_json:
        _output_json(config, schema, registry)
    else:
        _output_plain(config, schema, registry)


def _kind(registry: TypeRegistry, name: str) -> str:
    if registry.is_enum(name):
        return "enum"
    if registry.is_abstract(name):
        return "abstract"
    return "composite"


def _output_json(config: TargetConfig, schema: Schema, registry: TypeRegistry) -> None:
    """Output classification as JSON."""
    data: dict = {
        "target": {"name": config.name, "root": config.is_root, "package": config.package},
        "summary": registry.summary(),
        "types": [],
        "interfaces": {},
        "operations": [op.to_dict() for op in ordered(schema.operations)],
    }

    for t in ordered(registry.types):
        data["types"].append(
            {
                "name": t.name,
                "kind": _kind(registry, t.name),
                "base": t.base,
                "interfaces": registry.implements(t.name),
            }
        )

    for name in registry.interface_names():
        data["interfaces"][name] = list(registry.interface(name).implementers)

    print(json.dumps(data, indent=2))


def _output_plain(config: TargetConfig, schema: Schema, registry: TypeRegistry) -> None:
    """Output classification using rich text formatting."""
    console = Console()

    summary = registry.summary()
    console.print(f"[bold cyan]Target[/bold cyan] {config.name} ({config.types_import})")
    console.print(
        f"{summary['types']} classes, {summary['interfaces']} interfaces, "
        f"{len(ordered(schema.operations))} operations"
    )
    console.print()

    type_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    type_table.add_column("Name", style="white")
    type_table.add_column("Kind", style="yellow")
    type_table.add_column("Base", style="dim")
    type_table.add_column("Interfaces", style="green")

    for t in ordered(registry.types):
        type_table.add_row(
            t.name,
            _kind(registry, t.name),
            t.base or "",
            ", ".join(registry.implements(t.name)),
        )

    console.print(type_table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
