"""Command-line interface for microgen code generation."""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING

import click
from lark.exceptions import LarkError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from microgen.generator import driver, load
from microgen.generator.config import (
    DEFAULT_RUNTIME_ALIAS,
    DEFAULT_RUNTIME_IMPORT,
    GeneratorConfig,
    StreamingPolicy,
)
from microgen.generator.descriptors import ServiceAdapter, TypeResolver
from microgen.generator.parser import ValidationError
from microgen.generator.signatures import build_service
from microgen.generator.types import GenerationError

if TYPE_CHECKING:
    from microgen.generator.signatures import ServiceBinding
    from microgen.generator.types import ProtoFile


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log what the generator does")
def cli(verbose: bool) -> None:
    """Message-bus RPC binding generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load(input_file: str, include: tuple[str, ...]) -> tuple[list[ProtoFile], ProtoFile]:
    try:
        files = load(input_file, include)
    except (ValidationError, LarkError) as e:
        raise click.ClickException(str(e)) from e
    return files, files[-1]


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option("--include", "-I", multiple=True, help="Directory to search for imports")
@click.option("--prefix", default=None, help="Subject prefix (default: schema package)")
@click.option(
    "--runtime-import",
    default=DEFAULT_RUNTIME_IMPORT,
    show_default=True,
    help="Import path of the runtime package",
)
@click.option(
    "--runtime-alias",
    default=DEFAULT_RUNTIME_ALIAS,
    show_default=True,
    help="Package alias of the runtime in generated code",
)
@click.option(
    "--streaming",
    type=click.Choice([p.value for p in StreamingPolicy]),
    default=StreamingPolicy.SHELL.value,
    show_default=True,
    help="Streaming methods: emit empty shells, or fail",
)
def gen(
    input_file: str,
    output_file: str,
    include: tuple[str, ...],
    prefix: str | None,
    runtime_import: str,
    runtime_alias: str,
    streaming: str,
) -> None:
    """Generate bindings from a schema file."""
    files, proto = _load(input_file, include)

    if not proto.services:
        print(f"No services in {input_file}")
        sys.exit(1)

    config = GeneratorConfig(
        runtime_import=runtime_import,
        runtime_alias=runtime_alias,
        prefix=prefix,
        streaming=StreamingPolicy(streaming),
    )
    try:
        generated = driver.Generator(files, config).generate(proto)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated.content)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file")
@click.option("--include", "-I", multiple=True, help="Directory to search for imports")
@click.option("--prefix", default=None, help="Subject prefix (default: schema package)")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, include: tuple[str, ...], prefix: str | None, output_json: bool) -> None:
    """Display the services of a schema and the subjects they use."""
    files, proto = _load(input_file, include)
    config = GeneratorConfig(prefix=prefix)

    resolver = TypeResolver(files, proto, config.import_prefix)
    try:
        bindings = [
            build_service(
                ServiceAdapter(service, resolver, config.reserved),
                config.naming_context(proto, service),
            )
            for service in proto.services
        ]
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    if output_json:
        _output_json(proto, bindings)
    else:
        _output_plain(proto, bindings)


def _output_json(proto: ProtoFile, bindings: list[ServiceBinding]) -> None:
    """Output service info as JSON."""
    data = {
        "file": proto.name,
        "package": proto.package,
        "services": [binding.to_dict() for binding in bindings],
    }
    print(json.dumps(data, indent=2))


def _output_plain(proto: ProtoFile, bindings: list[ServiceBinding]) -> None:
    """Output service info using rich text formatting."""
    console = Console()

    if not bindings:
        console.print(f"[dim]No services in {proto.name}[/dim]")
        return

    for binding in bindings:
        console.print(f"[bold cyan]{binding.name}[/bold cyan]")

        service_table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
        service_table.add_column("Label", style="dim")
        service_table.add_column("Value", style="white")
        service_table.add_row("Prefix", binding.subject_prefix)
        service_table.add_row("Client", binding.client_interface)
        service_table.add_row(
            "Wiring", ", ".join(wiring.type_name for wiring in binding.wirings)
        )
        console.print(service_table)

        method_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        method_table.add_column("Method", style="white")
        method_table.add_column("Flavor", style="dim")
        method_table.add_column("Subject", style="yellow")
        method_table.add_column("Queue group", style="yellow")
        method_table.add_column("Handler", style="green")

        for method in binding.methods:
            method_table.add_row(
                method.name,
                method.flavor.value,
                method.subject,
                method.queue_group,
                method.handler.name,
            )

        console.print(method_table)
        console.print()


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
