"""Bounded, sandboxed traversal of a document reference graph.

Traversal is depth-first over an explicit worklist. Every candidate is checked
in a fixed order when it is taken off the worklist:

1. canonical path already visited: dropped silently (duplicate or cycle);
2. analyzed-file budget exhausted: recorded under ``skipped.maxCount``;
3. missing on disk: ``notFound`` (or ``skipped.outsideRoot`` when the
   spelling alone already escapes the root);
4. sandbox rejection: ``skipped.outsideRoot`` / ``skipped.symlinks``;
5. otherwise analyzed, and its local references are either queued one level
   deeper or, at the depth limit, recorded under ``skipped.maxDepth``.

All mutable state lives on :class:`TraversalContext`, one per invocation and
shared by every entry point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from docreview.analysis.aggregate import finalize
from docreview.analysis.links import local_references
from docreview.analysis.metrics import extract_metrics
from docreview.analysis.model import (
    AnalyzedDocument,
    Reference,
    ReferenceKind,
    ResolvedCandidate,
    SandboxDecision,
    SkippedCandidate,
    TraversalResult,
)
from docreview.analysis.sandbox import Sandbox, resolve_reference
from docreview.analysis.scoring import evaluate_metrics
from docreview.config import DEFAULT_MAX_COUNT, DEFAULT_MAX_DEPTH
from docreview.exceptions import DocumentReadError, SandboxViolation, UsageError
from docreview.invariants import never
from docreview.runtime.path_policy import lexical_path, safe_exists, safe_is_file

WarningSink = Callable[[str], None]


@dataclass(frozen=True)
class TraversalLimits:
    max_depth: int = DEFAULT_MAX_DEPTH
    max_count: int = DEFAULT_MAX_COUNT
    follow_links: bool = True


@dataclass
class TraversalContext:
    sandbox: Sandbox
    limits: TraversalLimits = field(default_factory=TraversalLimits)
    warn: Optional[WarningSink] = None
    visited: set[str] = field(default_factory=set)
    result: TraversalResult = field(default_factory=TraversalResult)
    warnings: List[str] = field(default_factory=list)
    _count_warned: bool = False
    _depth_warned: bool = False

    def emit_warning(self, message: str) -> None:
        self.warnings.append(message)
        if self.warn is not None:
            self.warn(message)

    def budget_exhausted(self) -> bool:
        return len(self.visited) >= self.limits.max_count


@dataclass(frozen=True)
class _WorkItem:
    candidate: ResolvedCandidate
    depth: int


def entry_candidate(path: str | Path) -> ResolvedCandidate:
    text = str(path)
    return ResolvedCandidate(
        reference=Reference(text, text, ReferenceKind.LOCAL),
        path=str(lexical_path(path)),
        source=None,
    )


def validate_entry_points(entry_points: Sequence[str | Path], sandbox: Sandbox) -> None:
    """Reject entry points that are missing or lie outside the sandbox root."""
    if not entry_points:
        raise UsageError("at least one document path is required")
    for entry in entry_points:
        path = Path(entry)
        if not safe_exists(path):
            raise UsageError(f"File not found: {entry}")
        if not safe_is_file(path):
            raise UsageError(f"Not a file: {entry}")
        if not sandbox.enabled:
            continue
        verdict = sandbox.decide(path)
        if verdict.decision is SandboxDecision.REJECTED_OUTSIDE_ROOT:
            raise SandboxViolation(
                f"Entry point {entry} resolves outside root {sandbox.root_real}",
                target=str(entry),
                path=verdict.real_path,
            )


def _skip(item: _WorkItem, *, real_path: Optional[str] = None) -> SkippedCandidate:
    return SkippedCandidate(
        target=item.candidate.target,
        path=item.candidate.path,
        source=item.candidate.source,
        depth=item.depth,
        real_path=real_path,
    )


def _reject_outside_root(
    context: TraversalContext, item: _WorkItem, real_path: Optional[str]
) -> None:
    context.result.skipped.outside_root.append(_skip(item, real_path=real_path))
    origin = item.candidate.source or "entry points"
    context.emit_warning(
        f"Refusing reference {item.candidate.target!r} in {origin}: "
        f"{item.candidate.path} resolves outside sandbox root {context.sandbox.root_real}"
    )


def _admit(context: TraversalContext, item: _WorkItem) -> Optional[tuple[str, str]]:
    """Apply the per-candidate checks; return (canonical path, content) if analyzed."""
    sandbox = context.sandbox
    resolved = sandbox.canonical(item.candidate.path)
    if resolved is None:
        # Symlink loops, over-long names and NUL bytes cannot be opened.
        context.result.not_found.append(_skip(item))
        return None
    canonical = str(resolved)
    if canonical in context.visited:
        return None
    if context.budget_exhausted():
        context.result.skipped.max_count.append(_skip(item, real_path=canonical))
        if not context._count_warned:
            context._count_warned = True
            context.emit_warning(
                f"Analyzed-file limit ({context.limits.max_count}) reached; "
                "further references are skipped"
            )
        return None

    path = Path(item.candidate.path)
    if not safe_exists(path):
        if sandbox.escapes_lexically(path):
            _reject_outside_root(context, item, None)
        else:
            context.result.not_found.append(_skip(item))
        return None

    verdict = sandbox.decide(path)
    if verdict.decision is SandboxDecision.REJECTED_OUTSIDE_ROOT:
        _reject_outside_root(context, item, verdict.real_path)
        return None
    if verdict.decision is SandboxDecision.REJECTED_SYMLINK:
        context.result.skipped.symlinks.append(_skip(item, real_path=verdict.real_path))
        if item.candidate.source is None:
            context.emit_warning(
                f"Entry point {item.candidate.target} is a symlink and symlinks are not followed"
            )
        return None
    if verdict.decision is not SandboxDecision.ADMITTED:
        never("unknown sandbox decision", decision=verdict.decision)
    if not safe_is_file(path):
        context.result.not_found.append(_skip(item, real_path=verdict.real_path))
        return None

    context.visited.add(canonical)
    try:
        content = Path(canonical).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise DocumentReadError(
            f"Error reading {canonical}: {exc}", path=canonical
        ) from exc
    metrics = extract_metrics(content)
    context.result.analyzed.append(
        AnalyzedDocument(
            path=canonical,
            depth=item.depth,
            metrics=metrics,
            score=evaluate_metrics(metrics),
        )
    )
    return canonical, content


def _expand(
    context: TraversalContext, item: _WorkItem, canonical: str, content: str
) -> List[_WorkItem]:
    if not context.limits.follow_links:
        return []
    base_dir = Path(canonical).parent
    candidates: List[ResolvedCandidate] = []
    seen_paths: set[str] = set()
    for reference in local_references(content):
        candidate = resolve_reference(reference, base_dir=base_dir, source=canonical)
        # `x.md` and `./x.md` name the same file; keep the first spelling.
        if candidate.path in seen_paths:
            continue
        seen_paths.add(candidate.path)
        candidates.append(candidate)
    if item.depth < context.limits.max_depth:
        return [_WorkItem(candidate, item.depth + 1) for candidate in candidates]

    deferred = False
    for candidate in candidates:
        resolved = context.sandbox.canonical(candidate.path)
        real_path = str(resolved) if resolved is not None else None
        # Already analyzed elsewhere: more depth would not have revealed it.
        if real_path is not None and real_path in context.visited:
            continue
        context.result.skipped.max_depth.append(
            _skip(_WorkItem(candidate, item.depth + 1), real_path=real_path)
        )
        deferred = True
    if deferred and not context._depth_warned:
        context._depth_warned = True
        context.emit_warning(
            f"Depth limit ({context.limits.max_depth}) reached; deeper references are skipped"
        )
    return []


def traverse(
    entry_points: Sequence[str | Path], context: TraversalContext
) -> TraversalResult:
    """Analyze entry points and everything reachable from them within limits."""
    stack = [_WorkItem(entry_candidate(entry), 0) for entry in reversed(entry_points)]
    while stack:
        item = stack.pop()
        admitted = _admit(context, item)
        if admitted is None:
            continue
        canonical, content = admitted
        # Reversed so the first reference in the text is explored first.
        stack.extend(reversed(_expand(context, item, canonical, content)))
    return finalize(context.result)


def analyze_documents(
    entry_points: Sequence[str | Path],
    *,
    root: str | Path | None,
    max_depth: int = DEFAULT_MAX_DEPTH,
    max_count: int = DEFAULT_MAX_COUNT,
    no_symlinks: bool = False,
    warn: Optional[WarningSink] = None,
) -> TraversalResult:
    """Validate inputs and run one traversal with fresh state.

    Without a root, link following is disabled and only the entry points
    themselves are analyzed.
    """
    if root is not None and not Path(root).is_dir():
        raise UsageError(f"Root directory not found: {root}")
    sandbox = Sandbox(root, no_symlinks=no_symlinks)
    validate_entry_points(entry_points, sandbox)
    context = TraversalContext(
        sandbox=sandbox,
        limits=TraversalLimits(
            max_depth=max_depth,
            max_count=max_count,
            follow_links=sandbox.enabled,
        ),
        warn=warn,
    )
    return traverse(entry_points, context)
