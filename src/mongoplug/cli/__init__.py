"""mplug CLI: operator console for compiling and running predicate queries."""

from __future__ import annotations

from typing import Optional

import typer

from mongoplug.cli import compile_cmd, query

app = typer.Typer(
    name="mplug",
    help="mplug CLI: compile predicate sequences and run them against MongoDB.",
    no_args_is_help=True,
)


class _State:
    """Global CLI state shared across subcommands."""

    url: str | None = None
    db: str | None = None
    json_output: bool = False


state = _State()


def _version_callback(value: bool) -> None:
    if value:
        from mongoplug import __version__

        print(f"mplug {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    url: Optional[str] = typer.Option(
        None,
        "--url",
        envvar="MONGOPLUG_URL",
        help="MongoDB connection URL (default: mongodb://localhost:27017)",
    ),
    db: Optional[str] = typer.Option(
        None,
        "--db",
        envvar="MONGOPLUG_DB",
        help="Database name (default: mongoplug)",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output when supported"),
    version: bool = typer.Option(
        False, "--version", help="Show version", is_eager=True, callback=_version_callback
    ),
) -> None:
    """Global options for all mplug commands."""
    state.url = url
    state.db = db
    state.json_output = json_output
    if ctx.invoked_subcommand is None and not version:
        print(ctx.get_help())
        raise typer.Exit()


app.command(name="compile")(compile_cmd.compile_cmd)
app.command(name="find")(query.find_cmd)
app.command(name="count")(query.count_cmd)
app.command(name="get")(query.get_cmd)


def main() -> None:
    """Entry point for the mplug CLI."""
    app()
