"""Structural measurements for a single document."""

from __future__ import annotations

from collections import Counter
import re
from typing import List

from docreview.analysis.links import INLINE_REFERENCE_RE, classify_target
from docreview.analysis.model import (
    DocumentMetrics,
    Heading,
    ReferenceKind,
    RepeatedPhrase,
)

HEADING_RE = re.compile(r"^(#+)\s+(.+)$")
PHRASE_RE = re.compile(r"\b\w+\s+\w+\s+\w+\b")

# Front-loaded content is measured over the first fifth of the lines.
FRONT_SECTION_DIVISOR = 5
REDUNDANCY_MIN_OCCURRENCES = 3
REDUNDANCY_MAX_PHRASES = 5


def _repeated_phrases(content: str) -> tuple[RepeatedPhrase, ...]:
    # Windows are consecutive, non-overlapping regex matches.
    counts = Counter(phrase.lower() for phrase in PHRASE_RE.findall(content))
    repeated = [
        (phrase, count)
        for phrase, count in counts.items()
        if count >= REDUNDANCY_MIN_OCCURRENCES
    ]
    # Stable sort keeps first-occurrence order among equal counts.
    repeated.sort(key=lambda item: item[1], reverse=True)
    return tuple(
        RepeatedPhrase(phrase=phrase, count=count)
        for phrase, count in repeated[:REDUNDANCY_MAX_PHRASES]
    )


def extract_metrics(content: str) -> DocumentMetrics:
    lines = content.split("\n")
    total_lines = len(lines)
    non_empty_lines = 0
    headings: List[Heading] = []
    reference_counts: Counter[ReferenceKind] = Counter()

    for index, line in enumerate(lines):
        trimmed = line.strip()
        if trimmed:
            non_empty_lines += 1
        heading_match = HEADING_RE.match(trimmed)
        if heading_match:
            headings.append(
                Heading(
                    depth=len(heading_match.group(1)),
                    title=heading_match.group(2),
                    line_number=index + 1,
                )
            )
        for reference_match in INLINE_REFERENCE_RE.finditer(trimmed):
            reference_counts[classify_target(reference_match.group(2)).kind] += 1

    front_section = total_lines // FRONT_SECTION_DIVISOR
    front_loaded = sum(1 for line in lines[:front_section] if line.strip())

    heading_count = len(headings)
    avg_section_length = total_lines // heading_count if heading_count else 0

    return DocumentMetrics(
        total_lines=total_lines,
        non_empty_lines=non_empty_lines,
        word_count=len(content.split()),
        headings=tuple(headings),
        max_heading_depth=max((heading.depth for heading in headings), default=0),
        heading_count=heading_count,
        internal_links=reference_counts[ReferenceKind.LOCAL],
        external_links=reference_counts[ReferenceKind.EXTERNAL],
        anchor_links=reference_counts[ReferenceKind.ANCHOR],
        total_links=sum(reference_counts.values()),
        front_loaded_content=front_loaded,
        avg_section_length=avg_section_length,
        redundancy_indicators=_repeated_phrases(content),
    )
