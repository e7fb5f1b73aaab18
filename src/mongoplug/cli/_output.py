"""Output formatting helpers for the CLI.

Documents are rendered as relaxed Extended JSON so ObjectIds, dates and
regexes print the same way ``--json`` and the predicate arguments spell them.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any

from bson import json_util


def _dumps(data: Any, indent: int | None = 2) -> str:
    return json_util.dumps(data, indent=indent, json_options=json_util.RELAXED_JSON_OPTIONS)


def format_cell(value: Any) -> str:
    """Render one value on a single line; plain strings are left unquoted."""
    if isinstance(value, str):
        return value
    return _dumps(value, indent=None)


def print_table(headers: list[str], rows: list[list[Any]], *, json_mode: bool = False) -> None:
    """Print rows under aligned headers, or as a JSON array of objects."""
    if json_mode:
        print(_dumps([dict(zip(headers, row)) for row in rows]))
        return
    if not rows:
        return

    cells = [[format_cell(v) for v in row] for row in rows]
    # the last column is never padded so long documents don't drag trailing spaces
    widths = [max(len(h), *(len(row[i]) for row in cells)) for i, h in enumerate(headers[:-1])]

    def line(values: list[str]) -> str:
        padded = [v.ljust(w) for v, w in zip(values, widths)]
        return "  ".join(padded + values[len(widths):])

    print(line(headers))
    print(line(["-" * w for w in widths] + ["-" * len(headers[-1])]))
    for row in cells:
        print(line(row))


def print_object(data: Mapping[str, Any] | list[Any], *, json_mode: bool = False) -> None:
    """Print a document or list of documents as JSON or ``key: value`` lines."""
    if json_mode:
        print(_dumps(data))
        return
    items = data if isinstance(data, list) else [data]
    for n, item in enumerate(items):
        if n:
            print()
        if isinstance(item, Mapping):
            for k, v in item.items():
                print(f"{k}: {format_cell(v)}")
        else:
            print(format_cell(item))


def print_error(msg: str) -> None:
    print(f"Error: {msg}", file=sys.stderr)
