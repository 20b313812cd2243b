"""Run summary and report shaping."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from docreview.analysis.model import (
    AnalyzedDocument,
    DocumentMetrics,
    ScoreResult,
    SkippedCandidate,
    TraversalResult,
    TraversalSummary,
)
from docreview.analysis.scoring import round_half_up
from docreview.runtime.path_policy import safe_canonical
from docreview.schema import (
    AnalyzedDocumentDTO,
    HeadingDTO,
    LinkedAnalysisDTO,
    MetricsDetailDTO,
    MetricsSummaryDTO,
    MultiEntryReportDTO,
    RepeatedPhraseDTO,
    ScoreResultDTO,
    ScoresDTO,
    SingleEntryReportDTO,
    SkippedBucketsDTO,
    SkippedCandidateDTO,
    SummaryDTO,
)


def summarize(analyzed: Sequence[AnalyzedDocument]) -> TraversalSummary:
    if not analyzed:
        return TraversalSummary(
            total_analyzed=0, average_score=0.0, worst_score=None, worst_file=None
        )
    total = sum(entry.score.scores.overall for entry in analyzed)
    worst = analyzed[0]
    for entry in analyzed[1:]:
        # Strict comparison keeps the earliest discovery on ties.
        if entry.score.scores.overall < worst.score.scores.overall:
            worst = entry
    return TraversalSummary(
        total_analyzed=len(analyzed),
        average_score=round_half_up(total / len(analyzed), 1),
        worst_score=worst.score.scores.overall,
        worst_file=worst.path,
    )


def _real_path(entry: SkippedCandidate) -> Optional[str]:
    if entry.real_path is not None:
        return entry.real_path
    resolved = safe_canonical(entry.path)
    return str(resolved) if resolved is not None else None


def _prune_analyzed(
    entries: List[SkippedCandidate], analyzed_paths: set[str]
) -> List[SkippedCandidate]:
    return [entry for entry in entries if _real_path(entry) not in analyzed_paths]


def finalize(result: TraversalResult) -> TraversalResult:
    """Drop limit skips that were analyzed after all, then summarize."""
    analyzed_paths = {entry.path for entry in result.analyzed}
    result.skipped.max_depth = _prune_analyzed(result.skipped.max_depth, analyzed_paths)
    result.skipped.max_count = _prune_analyzed(result.skipped.max_count, analyzed_paths)
    result.summary = summarize(result.analyzed)
    return result


def metrics_dto(
    metrics: DocumentMetrics, *, format: str = "summary"
) -> MetricsSummaryDTO | MetricsDetailDTO:
    common = dict(
        total_lines=metrics.total_lines,
        non_empty_lines=metrics.non_empty_lines,
        word_count=metrics.word_count,
        section_count=metrics.heading_count,
        max_depth=metrics.max_heading_depth,
        internal_links=metrics.internal_links,
        external_links=metrics.external_links,
        anchor_links=metrics.anchor_links,
        total_links=metrics.total_links,
        front_loaded_content=metrics.front_loaded_content,
        avg_section_length=metrics.avg_section_length,
    )
    if format == "full":
        return MetricsDetailDTO(
            **common,
            sections=[
                HeadingDTO(
                    depth=heading.depth,
                    title=heading.title,
                    line_number=heading.line_number,
                )
                for heading in metrics.headings
            ],
            redundancy_indicators=[
                RepeatedPhraseDTO(phrase=item.phrase, count=item.count)
                for item in metrics.redundancy_indicators
            ],
        )
    return MetricsSummaryDTO(
        **common, redundancy_count=len(metrics.redundancy_indicators)
    )


def score_dto(score: ScoreResult) -> ScoreResultDTO:
    return ScoreResultDTO(
        scores=ScoresDTO(
            line_count=score.scores.line_count,
            structure=score.scores.structure,
            progressive_disclosure=score.scores.progressive_disclosure,
            overall=score.scores.overall,
        ),
        feedback=list(score.feedback),
    )


def _skipped_dtos(entries: Sequence[SkippedCandidate]) -> List[SkippedCandidateDTO]:
    return [
        SkippedCandidateDTO(
            target=entry.target,
            path=entry.path,
            source=entry.source,
            depth=entry.depth,
            real_path=entry.real_path,
        )
        for entry in entries
    ]


def linked_analysis_dto(
    result: TraversalResult, *, format: str = "summary"
) -> LinkedAnalysisDTO:
    summary = result.summary if result.summary is not None else summarize(result.analyzed)
    return LinkedAnalysisDTO(
        analyzed=[
            AnalyzedDocumentDTO(
                file=Path(entry.path).name,
                path=entry.path,
                depth=entry.depth,
                metrics=metrics_dto(entry.metrics, format=format),
                score=score_dto(entry.score),
            )
            for entry in result.analyzed
        ],
        not_found=_skipped_dtos(result.not_found),
        skipped=SkippedBucketsDTO(
            max_depth=_skipped_dtos(result.skipped.max_depth),
            max_count=_skipped_dtos(result.skipped.max_count),
            outside_root=_skipped_dtos(result.skipped.outside_root),
            symlinks=_skipped_dtos(result.skipped.symlinks),
        ),
        summary=SummaryDTO(
            total_analyzed=summary.total_analyzed,
            average_score=summary.average_score,
            worst_score=summary.worst_score,
            worst_file=summary.worst_file,
        ),
    )


def build_report(
    entry_points: Sequence[str | Path],
    result: TraversalResult,
    *,
    format: str = "summary",
) -> SingleEntryReportDTO | MultiEntryReportDTO:
    linked = linked_analysis_dto(result, format=format)
    if len(entry_points) == 1:
        return SingleEntryReportDTO(file=Path(entry_points[0]).name, linked_analysis=linked)
    return MultiEntryReportDTO(
        entry_points=[str(entry) for entry in entry_points], linked_analysis=linked
    )
