"""Discovery of convention files (e.g. nested AGENTS.md) below a directory."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import List, Optional

from docreview.analysis.aggregate import metrics_dto, score_dto
from docreview.analysis.metrics import extract_metrics
from docreview.analysis.scoring import evaluate_metrics
from docreview.config import DEFAULT_MATCH_FILE_NAME, DEFAULT_MAX_DOCUMENTS
from docreview.exceptions import DocumentReadError, UsageError
from docreview.runtime.path_policy import is_within, lexical_path
from docreview.schema import TreeDocumentDTO, TreeReportDTO, TreeScopeDTO

SKIP_DIR_NAMES = frozenset({".git", "node_modules"})


@dataclass(frozen=True)
class Discovery:
    files: List[Path]
    truncated: bool


def discover_convention_files(
    root_dir: Path,
    match_file_name: str = DEFAULT_MATCH_FILE_NAME,
    max_documents: int = DEFAULT_MAX_DOCUMENTS,
) -> Discovery:
    root = lexical_path(root_dir)
    discovered: List[Path] = []
    visited_dirs: set[Path] = set()
    stack = [root]
    truncated = False
    while stack and not truncated:
        current = stack.pop()
        if current in visited_dirs:
            continue
        visited_dirs.add(current)
        try:
            with os.scandir(current) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError:
            # Unreadable directories are not part of the tree.
            continue
        for entry in entries:
            if entry.name in SKIP_DIR_NAMES:
                continue
            entry_path = current / entry.name
            if entry.is_dir(follow_symlinks=False):
                stack.append(entry_path)
                continue
            if entry.is_file() and entry.name == match_file_name:
                discovered.append(entry_path)
                if len(discovered) >= max_documents:
                    truncated = True
                    break
    discovered.sort()
    return Discovery(files=discovered, truncated=truncated)


def nearest_parent_convention_file(
    path: Path, known: set[Path], root_dir: Path, match_file_name: str
) -> Optional[Path]:
    root = lexical_path(root_dir)
    current = path.parent
    while current != root:
        parent = current.parent
        if parent == current or not is_within(parent, root):
            return None
        candidate = parent / match_file_name
        if candidate in known:
            return candidate
        current = parent
    return None


def analyze_tree(
    target: Path,
    *,
    match_file_name: str = DEFAULT_MATCH_FILE_NAME,
    max_documents: int = DEFAULT_MAX_DOCUMENTS,
    format: str = "summary",
) -> TreeReportDTO:
    if not target.exists():
        raise UsageError(f"File not found: {target}")
    root_dir = lexical_path(target if target.is_dir() else target.parent)
    discovery = discover_convention_files(root_dir, match_file_name, max_documents)
    known = set(discovery.files)
    documents: List[TreeDocumentDTO] = []
    for path in discovery.files:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            raise DocumentReadError(f"Error reading {path}: {exc}", path=str(path)) from exc
        metrics = extract_metrics(content)
        parent = nearest_parent_convention_file(path, known, root_dir, match_file_name)
        documents.append(
            TreeDocumentDTO(
                file=path.name,
                relative_path=str(path.relative_to(root_dir)),
                parent_relative_path=(
                    str(parent.relative_to(root_dir)) if parent is not None else None
                ),
                metrics=metrics_dto(metrics, format=format),
                score=score_dto(evaluate_metrics(metrics)),
            )
        )
    return TreeReportDTO(
        target=str(target),
        scope=TreeScopeDTO(
            root_dir=str(root_dir),
            match_file_name=match_file_name,
            max_documents=max_documents,
            truncated=discovery.truncated,
        ),
        documents=documents,
    )
