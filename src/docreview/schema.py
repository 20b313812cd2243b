from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    """Report DTOs use snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HeadingDTO(ReportModel):
    depth: int
    title: str
    line_number: int


class RepeatedPhraseDTO(ReportModel):
    phrase: str
    count: int


class _MetricsFields(ReportModel):
    total_lines: int
    non_empty_lines: int
    word_count: int
    section_count: int
    max_depth: int
    internal_links: int
    external_links: int
    anchor_links: int
    total_links: int
    front_loaded_content: int
    avg_section_length: int


class MetricsSummaryDTO(_MetricsFields):
    redundancy_count: int


class MetricsDetailDTO(_MetricsFields):
    sections: List[HeadingDTO]
    redundancy_indicators: List[RepeatedPhraseDTO]


class ScoresDTO(ReportModel):
    line_count: int
    structure: int
    progressive_disclosure: int
    overall: int


class ScoreResultDTO(ReportModel):
    scores: ScoresDTO
    feedback: List[str]


class AnalyzedDocumentDTO(ReportModel):
    file: str
    path: str
    depth: int
    metrics: Union[MetricsDetailDTO, MetricsSummaryDTO]
    score: ScoreResultDTO


class SkippedCandidateDTO(ReportModel):
    target: str
    path: str
    source: Optional[str] = None
    depth: int
    real_path: Optional[str] = None


class SkippedBucketsDTO(ReportModel):
    max_depth: List[SkippedCandidateDTO] = []
    max_count: List[SkippedCandidateDTO] = []
    outside_root: List[SkippedCandidateDTO] = []
    symlinks: List[SkippedCandidateDTO] = []


class SummaryDTO(ReportModel):
    total_analyzed: int
    average_score: float
    worst_score: Optional[int] = None
    worst_file: Optional[str] = None


class LinkedAnalysisDTO(ReportModel):
    analyzed: List[AnalyzedDocumentDTO]
    not_found: List[SkippedCandidateDTO]
    skipped: SkippedBucketsDTO
    summary: SummaryDTO


class SingleEntryReportDTO(ReportModel):
    file: str
    linked_analysis: LinkedAnalysisDTO


class MultiEntryReportDTO(ReportModel):
    entry_points: List[str]
    linked_analysis: LinkedAnalysisDTO


class TreeScopeDTO(ReportModel):
    mode: str = "tree"
    root_dir: str
    match_file_name: str
    max_documents: int
    truncated: bool


class TreeDocumentDTO(ReportModel):
    file: str
    relative_path: str
    parent_relative_path: Optional[str] = None
    metrics: Union[MetricsDetailDTO, MetricsSummaryDTO]
    score: ScoreResultDTO


class TreeReportDTO(ReportModel):
    target: str
    scope: TreeScopeDTO
    documents: List[TreeDocumentDTO]
