from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

STDOUT_ALIAS = "-"
STDOUT_PATH = "/dev/stdout"

# Raised by the OS or pathlib for loops, over-long names and NUL bytes.
_PATH_ERRORS = (OSError, RuntimeError, ValueError)


def normalize_output_target(target: str | Path) -> str:
    target_str = str(target)
    if target_str == STDOUT_ALIAS:
        return STDOUT_PATH
    return target_str


def is_stdout_target(target: object) -> bool:
    if target is None:
        return False
    return normalize_output_target(str(target)) == STDOUT_PATH


def lexical_path(path: str | Path) -> Path:
    """Absolute path with `.`/`..` segments folded, symlinks untouched."""
    return Path(os.path.normpath(os.path.abspath(path)))


def canonical_path(path: str | Path) -> Path:
    """Absolute path with every symlink and relative segment resolved."""
    return Path(path).resolve(strict=False)


def safe_canonical(path: str | Path) -> Optional[Path]:
    """Like :func:`canonical_path`, but None when the path cannot be resolved."""
    try:
        return canonical_path(path)
    except _PATH_ERRORS:
        return None


def safe_exists(path: str | Path) -> bool:
    try:
        return Path(path).exists()
    except _PATH_ERRORS:
        return False


def safe_is_file(path: str | Path) -> bool:
    try:
        return Path(path).is_file()
    except _PATH_ERRORS:
        return False


def is_within(path: Path, root: Path) -> bool:
    # Equal counts as within.
    return path == root or path.is_relative_to(root)
