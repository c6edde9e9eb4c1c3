"""Command-line interface for adcl code generation."""

from __future__ import annotations

import json
import logging
import sys

import click
from lark import UnexpectedInput
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from adcl.generator import python
from adcl.generator.accessor import AccessorPlan, Regime, plan_accessor
from adcl.generator.layout import resolve_layout
from adcl.generator.mappers import MapperResolutionError
from adcl.generator.parser import ValidationError, load_schema
from adcl.generator.types import Schema
from adcl.generator.typespecs import TypeResolutionError

SCHEMA_ERRORS = (ValidationError, UnexpectedInput)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log resolution details")
def cli(verbose: bool) -> None:
    """adcl parameter accessor generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _load(input_file: str) -> Schema:
    try:
        return load_schema(input_file)
    except SCHEMA_ERRORS as err:
        print(f"Invalid schema: {err}")
        sys.exit(1)


def _plan_all(schema: Schema) -> list[AccessorPlan]:
    try:
        return [plan_accessor(resolve_layout(message)) for message in schema.messages]
    except (TypeResolutionError, MapperResolutionError) as err:
        print(f"Resolution failed: {err}")
        sys.exit(1)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    default="adcl.proto",
    help="Import path of the runtime support module",
)
def gen(input_file: str, output_file: str, runtime_import: str) -> None:
    """Generate accessor code from a schema file."""
    schema = _load(input_file)

    try:
        generated_file = python.render(schema, runtime_import=runtime_import)
    except (TypeResolutionError, MapperResolutionError) as err:
        print(f"Resolution failed: {err}")
        sys.exit(1)

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@click.option("--input", "-i", "input_file", required=True, help="Input schema file")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display how each message's accessors are synthesized."""
    plans = _plan_all(_load(input_file))

    if output_json:
        _output_json(plans)
    else:
        _output_plain(plans)


def _pos_len_expr(plan: AccessorPlan) -> str:
    return python.render_offset(plan.positional.length, var="")


def _output_json(plans: list[AccessorPlan]) -> None:
    """Output accessor info as JSON."""
    data: dict = {}

    for plan in plans:
        layout = plan.layout
        data[layout.message.command] = {
            "type": layout.type_name,
            "regime": plan.positional.regime.value,
            "pos_len": _pos_len_expr(plan),
            "positional": [p.field_info.str_field_name for p in layout.positional],
            "flags": list(layout.flag_names),
        }

    print(json.dumps(data, indent=2))


def _output_plain(plans: list[AccessorPlan]) -> None:
    """Output accessor info using rich text formatting."""
    console = Console()

    console.print("[bold cyan]Messages[/bold cyan]")
    table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
    table.add_column("Command", style="white")
    table.add_column("Regime", style="dim")
    table.add_column("Positional count", style="yellow")
    table.add_column("Flags", style="green")

    for plan in plans:
        layout = plan.layout
        regime = plan.positional.regime
        regime_style = "magenta" if regime == Regime.MIXED else "white"
        table.add_row(
            layout.message.command,
            f"[{regime_style}]{regime.value}[/{regime_style}]",
            _pos_len_expr(plan),
            ", ".join(layout.flag_names),
        )

    console.print(table)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
