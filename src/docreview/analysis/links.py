"""Inline reference extraction.

Only the `[label](target)` form is recognized. References inside fenced code
blocks are extracted like any other text.
"""

from __future__ import annotations

import re
from typing import Iterator, List

from docreview.analysis.model import Reference, ReferenceKind

INLINE_REFERENCE_RE = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")


def classify_target(raw_target: str) -> Reference:
    target = raw_target.strip()
    if target.startswith("<"):
        closing = target.find(">")
        if closing != -1:
            target = target[1:closing].strip()
    if target.startswith("#"):
        return Reference(raw_target, None, ReferenceKind.ANCHOR)
    if (
        target.startswith("http://")
        or target.startswith("https://")
        or _SCHEME_RE.match(target)
    ):
        return Reference(raw_target, None, ReferenceKind.EXTERNAL)
    target = target.split("#", 1)[0].split("?", 1)[0]
    tokens = target.split()
    normalized = tokens[0] if tokens else ""
    if not normalized:
        # Same document with a different query: local, but nothing to open.
        return Reference(raw_target, None, ReferenceKind.LOCAL)
    return Reference(raw_target, normalized, ReferenceKind.LOCAL)


def iter_references(text: str) -> Iterator[Reference]:
    """Yield every reference match in text order, without deduplication."""
    for match in INLINE_REFERENCE_RE.finditer(text):
        yield classify_target(match.group(2))


def extract_references(text: str) -> List[Reference]:
    """Return references in text order, deduplicated within the document.

    Local references are keyed by their normalized target, the others by the
    raw target text.
    """
    seen: set[tuple[ReferenceKind, str]] = set()
    references: List[Reference] = []
    for reference in iter_references(text):
        key = (
            reference.kind,
            reference.normalized_target
            if reference.normalized_target is not None
            else reference.raw_target.strip(),
        )
        if key in seen:
            continue
        seen.add(key)
        references.append(reference)
    return references


def local_references(text: str) -> List[Reference]:
    return [reference for reference in extract_references(text) if reference.traversable]
