"""Heuristic quality scores for document metrics.

All thresholds are fixed policy; changing them changes report output.
"""

from __future__ import annotations

import math
from typing import List

from docreview.analysis.model import DocumentMetrics, ScoreResult, Scores

MAX_SCORE = 10

SHORT_DOCUMENT_LINES = 200
MEDIUM_DOCUMENT_LINES = 500
LONG_DOCUMENT_LINES = 800

LINE_COUNT_SCORES = {"short": 10, "medium": 7, "long": 4, "too_long": 2}

DEEP_NESTING_DEPTH = 4
GOOD_NESTING_DEPTH = 3
DEEP_NESTING_PENALTY = 3
MANY_SECTIONS = 30
MANY_SECTIONS_PENALTY = 3
HIGH_SECTIONS = 20
HIGH_SECTIONS_PENALTY = 1
SHORT_SECTION_LINES = 15
SHORT_SECTION_PENALTY = 2

MIN_LOCAL_REFERENCES = 3
MIN_LOCAL_REFERENCE_RATIO = 0.5
# (threshold met, some local references, none) per line-count tier.
MEDIUM_DISCLOSURE_SCORES = (10, 7, 6)
LONG_DISCLOSURE_SCORES = (10, 6, 3)
ANCHOR_PENALTY = 2

LINE_COUNT_WEIGHT = 0.4
STRUCTURE_WEIGHT = 0.3
DISCLOSURE_WEIGHT = 0.3


def round_half_up(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def _line_count_score(metrics: DocumentMetrics, feedback: List[str]) -> int:
    if metrics.total_lines <= SHORT_DOCUMENT_LINES:
        feedback.append("✅ Document length is excellent (≤200 lines)")
        return LINE_COUNT_SCORES["short"]
    if metrics.total_lines <= MEDIUM_DOCUMENT_LINES:
        feedback.append(
            "⚠️  Document length is acceptable but could be shorter (200-500 lines)"
        )
        return LINE_COUNT_SCORES["medium"]
    if metrics.total_lines <= LONG_DOCUMENT_LINES:
        feedback.append(
            "⚠️  Document is getting long (500-800 lines) - consider splitting content"
        )
        return LINE_COUNT_SCORES["long"]
    feedback.append(
        "❌ Document is too long (>800 lines) - high risk of AI agent missing instructions"
    )
    return LINE_COUNT_SCORES["too_long"]


def _structure_score(metrics: DocumentMetrics, feedback: List[str]) -> int:
    score = MAX_SCORE
    if metrics.max_heading_depth > DEEP_NESTING_DEPTH:
        score -= DEEP_NESTING_PENALTY
        feedback.append(
            f"⚠️  Deep nesting detected (depth: {metrics.max_heading_depth}) - consider flattening"
        )
    elif metrics.max_heading_depth <= GOOD_NESTING_DEPTH:
        feedback.append("✅ Good heading depth (≤3)")

    if metrics.heading_count > MANY_SECTIONS:
        score -= MANY_SECTIONS_PENALTY
        feedback.append(
            f"⚠️  Many sections ({metrics.heading_count}) - consider consolidating"
        )
    elif metrics.heading_count > HIGH_SECTIONS:
        score -= HIGH_SECTIONS_PENALTY
        feedback.append(f"⚠️  High section count ({metrics.heading_count})")

    if 0 < metrics.avg_section_length < SHORT_SECTION_LINES:
        score -= SHORT_SECTION_PENALTY
        feedback.append(
            "⚠️  Sections are very short on average - might indicate over-fragmentation"
        )
    return max(0, score)


def _disclosure_score(metrics: DocumentMetrics, feedback: List[str]) -> int:
    local = metrics.internal_links
    ratio = local / metrics.total_links if metrics.total_links > 0 else 0.0

    if metrics.total_lines <= SHORT_DOCUMENT_LINES:
        score = MAX_SCORE
        if local > 0:
            feedback.append("✅ Good use of internal links for progressive disclosure")
        else:
            feedback.append(
                "✅ Document is short enough that progressive disclosure is optional"
            )
    else:
        medium = metrics.total_lines <= MEDIUM_DOCUMENT_LINES
        met, partial, none = MEDIUM_DISCLOSURE_SCORES if medium else LONG_DISCLOSURE_SCORES
        if local >= MIN_LOCAL_REFERENCES and ratio >= MIN_LOCAL_REFERENCE_RATIO:
            score = met
            feedback.append("✅ Good use of internal links for progressive disclosure")
        elif local > 0:
            score = partial
            feedback.append("⚠️  Some internal links present, but could be improved")
        elif medium:
            score = none
            feedback.append(
                "⚠️  No internal links detected - acceptable for small scope, otherwise "
                "consider links or tool-supported scoping (e.g., nested AGENTS.md)"
            )
        else:
            score = none
            feedback.append(
                "❌ No internal links detected - consider splitting content via links "
                "or tool-supported scoping (e.g., nested AGENTS.md)"
            )

    if metrics.anchor_links > 0:
        score = max(0, score - ANCHOR_PENALTY)
        feedback.append(
            f"⚠️  {metrics.anchor_links} same-document anchor link(s) - anchors do not "
            "reduce how much must be loaded at once"
        )
    return score


def evaluate_metrics(metrics: DocumentMetrics) -> ScoreResult:
    feedback: List[str] = []
    line_count = _line_count_score(metrics, feedback)
    structure = _structure_score(metrics, feedback)
    disclosure = _disclosure_score(metrics, feedback)

    if metrics.redundancy_indicators:
        feedback.append("⚠️  Potential redundancy detected - review repeated phrases")

    overall = int(
        round_half_up(
            line_count * LINE_COUNT_WEIGHT
            + structure * STRUCTURE_WEIGHT
            + disclosure * DISCLOSURE_WEIGHT
        )
    )
    return ScoreResult(
        scores=Scores(
            line_count=line_count,
            structure=structure,
            progressive_disclosure=disclosure,
            overall=overall,
        ),
        feedback=tuple(feedback),
    )
