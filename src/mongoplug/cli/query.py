"""mplug find / count / get: run reads against the configured database."""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from mongoplug.cli import _exitcodes as ec
from mongoplug.cli._output import print_error, print_object, print_table
from mongoplug.cli._predicates import parse_cli_predicates
from mongoplug.cli._storage import open_store
from mongoplug.errors import (
    ConnectionFailureError,
    InvalidIdentifierError,
    MalformedPredicateError,
)
from mongoplug.normalize import Record
from mongoplug.predicates import Predicate


def _parse_or_exit(text: str | None) -> list[Predicate]:
    try:
        return parse_cli_predicates(text)
    except MalformedPredicateError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)


def _run(op: Any) -> Any:
    """Run one store coroutine function, mapping failures to exit codes."""

    async def _main() -> Any:
        async with open_store() as store:
            return await op(store)

    try:
        return asyncio.run(_main())
    except ConnectionFailureError as e:
        print_error(str(e))
        raise typer.Exit(ec.DATABASE_ERROR)
    except InvalidIdentifierError as e:
        print_error(str(e))
        raise typer.Exit(ec.USAGE_ERROR)
    except Exception as e:
        print_error(str(e))
        raise typer.Exit(ec.EXECUTION_FAILURE)


def _print_records(records: list[Record], json_mode: bool) -> None:
    if json_mode:
        print_object([r.to_dict() for r in records], json_mode=True)
        return
    if not records:
        print("No records found.")
        return
    print_table(["id", "object"], [[r.id, r.object] for r in records])


def find_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    predicates: Optional[str] = typer.Argument(None, help="JSON array of predicates"),
    one: bool = typer.Option(False, "--one", help="Return at most one record"),
) -> None:
    """Find records matching a predicate sequence."""
    from mongoplug.cli import state

    pts = _parse_or_exit(predicates)
    if one:
        record = _run(lambda store: store.find_one(collection, pts))
        _print_records([record] if record is not None else [], state.json_output)
    else:
        _print_records(_run(lambda store: store.find(collection, pts)), state.json_output)


def count_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    predicates: Optional[str] = typer.Argument(None, help="JSON array of predicates"),
) -> None:
    """Count records matching a predicate sequence."""
    from mongoplug.cli import state

    pts = _parse_or_exit(predicates)
    total = _run(lambda store: store.count(collection, pts))
    if state.json_output:
        print_object({"count": total}, json_mode=True)
    else:
        print(total)


def get_cmd(
    collection: str = typer.Argument(..., help="Collection name"),
    ids: list[str] = typer.Argument(..., help="Record ids"),
) -> None:
    """Fetch records by id."""
    from mongoplug.cli import state

    records = _run(lambda store: store.find_by_ids(collection, ids))
    _print_records(records, state.json_output)
