from __future__ import annotations

import json
from pathlib import Path

import typer

from docreview.json_types import JSONValue
from docreview.runtime.path_policy import is_stdout_target


def dump_json_pretty(payload: JSONValue) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_json_to_target(target: str | Path | None, payload: JSONValue) -> None:
    """Write payload as pretty JSON to a file, or to stdout for None / `-`."""
    text = dump_json_pretty(payload)
    if target is None or is_stdout_target(target):
        typer.echo(text)
        return
    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text + "\n", encoding="utf-8")
