"""mplug compile: show the query a predicate sequence compiles to."""

from __future__ import annotations

import typer

from mongoplug.cli import _exitcodes as ec
from mongoplug.cli._output import print_error, print_object
from mongoplug.cli._predicates import parse_cli_predicates
from mongoplug.compiler import compile_predicates
from mongoplug.errors import MalformedPredicateError


def compile_cmd(
    predicates: str = typer.Argument(..., help="JSON array of predicates"),
    pipeline: bool = typer.Option(False, "--pipeline", help="Print as an aggregation pipeline"),
) -> None:
    """Compile predicates without connecting to the database."""
    from mongoplug.cli import state

    try:
        spec = compile_predicates(parse_cli_predicates(predicates))
    except MalformedPredicateError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)

    if pipeline:
        print_object(spec.to_pipeline(), json_mode=True)
    else:
        print_object(spec.to_dict(), json_mode=state.json_output)
