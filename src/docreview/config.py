from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from docreview.exceptions import UsageError

DEFAULT_CONFIG_NAME = "docreview.toml"

DEFAULT_MAX_DEPTH = 3
DEFAULT_MAX_COUNT = 30
DEFAULT_FORMAT = "summary"
DEFAULT_MATCH_FILE_NAME = "AGENTS.md"
DEFAULT_MAX_DOCUMENTS = 200

OUTPUT_FORMATS = ("summary", "full")

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def traversal_defaults(config_path: Path | None = None) -> TomlTable:
    data = load_config(config_path)
    section = data.get("traversal", {})
    return section if isinstance(section, dict) else {}


def tree_defaults(config_path: Path | None = None) -> TomlTable:
    data = load_config(config_path)
    section = data.get("tree", {})
    return section if isinstance(section, dict) else {}


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def _as_int(value: TomlValue, *, key: str, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise UsageError(f"{key} must be an integer, got {value!r}")
    try:
        parsed = int(value)
    except ValueError as exc:
        raise UsageError(f"{key} must be an integer, got {value!r}") from exc
    if parsed < minimum:
        raise UsageError(f"{key} must be >= {minimum}, got {parsed}")
    return parsed


def _as_format(value: TomlValue) -> str:
    text = str(value).strip().lower()
    if text not in OUTPUT_FORMATS:
        raise UsageError(
            f"format must be one of {', '.join(OUTPUT_FORMATS)}, got {value!r}"
        )
    return text


@dataclass(frozen=True)
class TraversalSettings:
    max_depth: int = DEFAULT_MAX_DEPTH
    max_count: int = DEFAULT_MAX_COUNT
    no_symlinks: bool = False
    format: str = DEFAULT_FORMAT

    @classmethod
    def from_table(cls, table: TomlTable) -> "TraversalSettings":
        return cls(
            max_depth=_as_int(
                table.get("max_depth", DEFAULT_MAX_DEPTH), key="max_depth", minimum=0
            ),
            max_count=_as_int(
                table.get("max_count", DEFAULT_MAX_COUNT), key="max_count", minimum=1
            ),
            no_symlinks=_as_bool(table.get("no_symlinks", False)),
            format=_as_format(table.get("format", DEFAULT_FORMAT)),
        )


@dataclass(frozen=True)
class TreeSettings:
    match: str = DEFAULT_MATCH_FILE_NAME
    max_documents: int = DEFAULT_MAX_DOCUMENTS
    format: str = DEFAULT_FORMAT

    @classmethod
    def from_table(cls, table: TomlTable) -> "TreeSettings":
        match = str(table.get("match", DEFAULT_MATCH_FILE_NAME)).strip()
        if not match:
            raise UsageError("match must be a non-empty file name")
        return cls(
            match=match,
            max_documents=_as_int(
                table.get("max_documents", DEFAULT_MAX_DOCUMENTS),
                key="max_documents",
                minimum=1,
            ),
            format=_as_format(table.get("format", DEFAULT_FORMAT)),
        )
