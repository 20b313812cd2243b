"""Invariant markers."""

from __future__ import annotations

from typing import NoReturn

from docreview.exceptions import NeverThrown


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The env payload is attached to the raised exception for diagnostics; it
    is not evaluated.
    """
    details = ", ".join(f"{key}={value!r}" for key, value in sorted(env.items()))
    message = reason or "never() marker reached"
    if details:
        message = f"{message} ({details})"
    raise NeverThrown(message, env=env)
