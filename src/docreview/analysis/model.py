from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ReferenceKind(str, Enum):
    LOCAL = "local"
    ANCHOR = "anchor"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Reference:
    raw_target: str
    normalized_target: Optional[str]
    kind: ReferenceKind

    @property
    def is_local(self) -> bool:
        return self.kind is ReferenceKind.LOCAL

    @property
    def traversable(self) -> bool:
        # A bare `?query` is local but names no file.
        return self.is_local and self.normalized_target is not None


@dataclass(frozen=True)
class ResolvedCandidate:
    reference: Reference
    path: str
    # Referencing document; None for caller-supplied entry points.
    source: Optional[str] = None

    @property
    def target(self) -> str:
        return self.reference.raw_target


class SandboxDecision(str, Enum):
    ADMITTED = "admitted"
    REJECTED_OUTSIDE_ROOT = "rejected-outside-root"
    REJECTED_SYMLINK = "rejected-symlink"


@dataclass(frozen=True)
class SandboxVerdict:
    decision: SandboxDecision
    real_path: str

    @property
    def admitted(self) -> bool:
        return self.decision is SandboxDecision.ADMITTED


@dataclass(frozen=True)
class Heading:
    depth: int
    title: str
    line_number: int


@dataclass(frozen=True)
class RepeatedPhrase:
    phrase: str
    count: int


@dataclass(frozen=True)
class DocumentMetrics:
    total_lines: int
    non_empty_lines: int
    word_count: int
    headings: Tuple[Heading, ...]
    max_heading_depth: int
    heading_count: int
    internal_links: int
    external_links: int
    anchor_links: int
    total_links: int
    front_loaded_content: int
    avg_section_length: int
    redundancy_indicators: Tuple[RepeatedPhrase, ...]


@dataclass(frozen=True)
class Scores:
    line_count: int
    structure: int
    progressive_disclosure: int
    overall: int


@dataclass(frozen=True)
class ScoreResult:
    scores: Scores
    feedback: Tuple[str, ...]


@dataclass(frozen=True)
class AnalyzedDocument:
    path: str
    depth: int
    metrics: DocumentMetrics
    score: ScoreResult


@dataclass(frozen=True)
class SkippedCandidate:
    target: str
    path: str
    source: Optional[str]
    depth: int
    real_path: Optional[str] = None


@dataclass
class SkippedBuckets:
    max_depth: List[SkippedCandidate] = field(default_factory=list)
    max_count: List[SkippedCandidate] = field(default_factory=list)
    outside_root: List[SkippedCandidate] = field(default_factory=list)
    symlinks: List[SkippedCandidate] = field(default_factory=list)


@dataclass(frozen=True)
class TraversalSummary:
    total_analyzed: int
    average_score: float
    worst_score: Optional[int]
    worst_file: Optional[str]


@dataclass
class TraversalResult:
    analyzed: List[AnalyzedDocument] = field(default_factory=list)
    not_found: List[SkippedCandidate] = field(default_factory=list)
    skipped: SkippedBuckets = field(default_factory=SkippedBuckets)
    summary: Optional[TraversalSummary] = None
