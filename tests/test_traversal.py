from __future__ import annotations

from pathlib import Path

import pytest

from docreview.analysis.sandbox import Sandbox
from docreview.analysis.traversal import (
    TraversalContext,
    TraversalLimits,
    analyze_documents,
    traverse,
)
from docreview.exceptions import SandboxViolation, UsageError


def _names(paths: list[str]) -> list[str]:
    return [Path(path).name for path in paths]


def _analyzed(result) -> list[tuple[str, int]]:
    return [(Path(entry.path).name, entry.depth) for entry in result.analyzed]


def test_mutual_references_terminate(doc_root: Path, write_doc) -> None:
    a = write_doc(doc_root / "A.md", "# A\nSee [B](B.md).\n")
    write_doc(doc_root / "B.md", "# B\nBack to [A](A.md).\n")
    result = analyze_documents([a], root=doc_root, max_depth=2)
    assert _analyzed(result) == [("A.md", 0), ("B.md", 1)]
    assert result.skipped.max_depth == []
    assert result.not_found == []
    assert result.summary.total_analyzed == 2


def test_reference_escaping_root_is_refused(doc_root: Path, write_doc, warnings_sink) -> None:
    entry = write_doc(doc_root / "index.md", "Do not read [passwd](../../etc/passwd).\n")
    result = analyze_documents([entry], root=doc_root, warn=warnings_sink.append)
    assert [item.target for item in result.skipped.outside_root] == ["../../etc/passwd"]
    assert result.not_found == []
    assert _analyzed(result) == [("index.md", 0)]
    assert len(warnings_sink) == 1
    assert "../../etc/passwd" in warnings_sink[0]


def test_symlink_escaping_root_is_refused(tmp_path: Path, doc_root: Path, write_doc, warnings_sink) -> None:
    secret = write_doc(tmp_path / "private" / "secret.md", "# Secret\n")
    (doc_root / "notes.md").symlink_to(secret)
    entry = write_doc(doc_root / "index.md", "[notes](notes.md)\n")
    result = analyze_documents([entry], root=doc_root, warn=warnings_sink.append)
    assert len(result.skipped.outside_root) == 1
    rejected = result.skipped.outside_root[0]
    assert rejected.path == str(doc_root.resolve() / "notes.md")
    assert rejected.real_path == str(secret.resolve())
    assert all(Path(entry.path).is_relative_to(doc_root.resolve()) for entry in result.analyzed)
    assert warnings_sink


def test_count_limit_skips_remaining_references(doc_root: Path, write_doc, warnings_sink) -> None:
    entry = write_doc(doc_root / "index.md", "[one](one.md) [two](two.md)\n")
    write_doc(doc_root / "one.md", "# One\n")
    write_doc(doc_root / "two.md", "# Two\n")
    result = analyze_documents([entry], root=doc_root, max_count=1, warn=warnings_sink.append)
    assert _analyzed(result) == [("index.md", 0)]
    assert [item.target for item in result.skipped.max_count] == ["one.md", "two.md"]
    assert sum("limit (1)" in message for message in warnings_sink) == 1


def test_depth_limit_records_unvisited_references(doc_root: Path, write_doc) -> None:
    entry = write_doc(doc_root / "a.md", "[b](b.md)\n")
    write_doc(doc_root / "b.md", "[c](c.md) [a](a.md)\n")
    write_doc(doc_root / "c.md", "# C\n")
    result = analyze_documents([entry], root=doc_root, max_depth=1)
    assert _analyzed(result) == [("a.md", 0), ("b.md", 1)]
    # a.md is already analyzed, so only c.md is deferred by the limit.
    assert [item.target for item in result.skipped.max_depth] == ["c.md"]
    assert result.skipped.max_depth[0].depth == 2
    assert result.skipped.max_depth[0].source == str((doc_root / "b.md").resolve())


def test_depth_zero_analyzes_only_entry_points(doc_root: Path, write_doc) -> None:
    entry = write_doc(doc_root / "a.md", "[b](b.md)\n")
    write_doc(doc_root / "b.md", "# B\n")
    result = analyze_documents([entry], root=doc_root, max_depth=0)
    assert _analyzed(result) == [("a.md", 0)]
    assert [item.target for item in result.skipped.max_depth] == ["b.md"]


def test_analyzed_document_wins_over_depth_skip(doc_root: Path, write_doc) -> None:
    entry = write_doc(doc_root / "a.md", "[b](b.md) [c](c.md)\n")
    write_doc(doc_root / "b.md", "[c](c.md)\n")
    write_doc(doc_root / "c.md", "# C\n")
    result = analyze_documents([entry], root=doc_root, max_depth=1)
    assert _analyzed(result) == [("a.md", 0), ("b.md", 1), ("c.md", 1)]
    assert result.skipped.max_depth == []


def test_missing_reference_is_not_found(doc_root: Path, write_doc) -> None:
    entry = write_doc(doc_root / "index.md", "[gone](docs/missing.md#intro) [dir](docs)\n")
    (doc_root / "docs").mkdir()
    result = analyze_documents([entry], root=doc_root)
    assert [item.target for item in result.not_found] == ["docs/missing.md#intro", "docs"]
    assert result.not_found[0].path == str(doc_root.resolve() / "docs" / "missing.md")
    assert result.skipped.outside_root == []


def test_entry_points_share_visited_set_and_budget(doc_root: Path, write_doc) -> None:
    first = write_doc(doc_root / "first.md", "[shared](shared.md)\n")
    second = write_doc(doc_root / "second.md", "[shared](./shared.md)\n")
    write_doc(doc_root / "shared.md", "[first](first.md)\n")
    result = analyze_documents([first, second, first], root=doc_root)
    assert _analyzed(result) == [("first.md", 0), ("shared.md", 1), ("second.md", 0)]
    assert result.summary.total_analyzed == 3

    limited = analyze_documents([first, second], root=doc_root, max_count=2)
    assert _analyzed(limited) == [("first.md", 0), ("shared.md", 1)]
    assert _names([item.path for item in limited.skipped.max_count]) == ["second.md"]


def test_symlink_policy_routes_links_to_symlink_bucket(doc_root: Path, write_doc) -> None:
    real = write_doc(doc_root / "real.md", "# Real\n")
    (doc_root / "alias.md").symlink_to(real)
    entry = write_doc(doc_root / "index.md", "[alias](alias.md)\n")

    strict = analyze_documents([entry], root=doc_root, no_symlinks=True)
    assert [item.target for item in strict.skipped.symlinks] == ["alias.md"]
    assert _analyzed(strict) == [("index.md", 0)]

    relaxed = analyze_documents([entry], root=doc_root)
    assert _analyzed(relaxed) == [("index.md", 0), ("real.md", 1)]


def test_without_root_links_are_not_followed(tmp_path: Path, write_doc) -> None:
    entry = write_doc(tmp_path / "a.md", "[b](b.md) [up](../../etc/passwd)\n")
    write_doc(tmp_path / "b.md", "# B\n")
    result = analyze_documents([entry], root=None)
    assert _analyzed(result) == [("a.md", 0)]
    assert result.skipped.max_depth == []
    assert result.skipped.outside_root == []


def test_depth_and_count_bounds_hold_on_a_large_graph(doc_root: Path, write_doc) -> None:
    for index in range(40):
        links = " ".join(f"[n{j}](n{j}.md)" for j in (index + 1, index + 2) if j < 40)
        write_doc(doc_root / f"n{index}.md", f"# Node {index}\n{links}\n")
    result = analyze_documents([doc_root / "n0.md"], root=doc_root, max_depth=3, max_count=5)
    assert len(result.analyzed) <= 5
    assert all(entry.depth <= 3 for entry in result.analyzed)
    paths = [entry.path for entry in result.analyzed]
    assert len(paths) == len(set(paths))


def test_traverse_reports_entry_outside_root(tmp_path: Path, doc_root: Path, write_doc) -> None:
    outside = write_doc(tmp_path / "elsewhere.md", "# Elsewhere\n")
    context = TraversalContext(sandbox=Sandbox(doc_root), limits=TraversalLimits())
    result = traverse([outside], context)
    assert result.analyzed == []
    assert [item.source for item in result.skipped.outside_root] == [None]
    assert context.warnings


def test_usage_errors(tmp_path: Path, doc_root: Path, write_doc) -> None:
    entry = write_doc(doc_root / "a.md", "# A\n")
    outside = write_doc(tmp_path / "outside.md", "# Out\n")
    with pytest.raises(UsageError, match="Root directory not found"):
        analyze_documents([entry], root=tmp_path / "nope")
    with pytest.raises(UsageError, match="File not found"):
        analyze_documents([doc_root / "missing.md"], root=doc_root)
    with pytest.raises(UsageError):
        analyze_documents([], root=doc_root)
    with pytest.raises(SandboxViolation) as excinfo:
        analyze_documents([outside], root=doc_root)
    assert excinfo.value.path == str(outside.resolve())


def test_symlink_loop_is_not_found(doc_root: Path, write_doc) -> None:
    (doc_root / "loop.md").symlink_to("loop.md")
    entry = write_doc(doc_root / "index.md", "[loop](loop.md)\n")
    result = analyze_documents([entry], root=doc_root)
    assert _analyzed(result) == [("index.md", 0)]
    assert [item.target for item in result.not_found] == ["loop.md"]


def test_over_long_file_name_is_not_found(doc_root: Path, write_doc) -> None:
    name = "a" * 300 + ".md"
    entry = write_doc(doc_root / "index.md", f"[long]({name})\n")
    result = analyze_documents([entry], root=doc_root)
    assert _analyzed(result) == [("index.md", 0)]
    assert [item.target for item in result.not_found] == [name]


def test_unresolvable_reference_at_depth_limit_is_deferred(doc_root: Path, write_doc) -> None:
    (doc_root / "loop.md").symlink_to("loop.md")
    name = "b" * 300 + ".md"
    entry = write_doc(doc_root / "index.md", f"[loop](loop.md) [long]({name})\n")
    result = analyze_documents([entry], root=doc_root, max_depth=0)
    assert _analyzed(result) == [("index.md", 0)]
    assert [item.target for item in result.skipped.max_depth] == ["loop.md", name]
    assert result.not_found == []


def test_missing_reference_escaping_root_is_refused(
    doc_root: Path, write_doc, warnings_sink
) -> None:
    entry = write_doc(doc_root / "index.md", "[gone](../../nowhere/missing.md)\n")
    result = analyze_documents([entry], root=doc_root, warn=warnings_sink.append)
    assert [item.target for item in result.skipped.outside_root] == ["../../nowhere/missing.md"]
    assert result.skipped.outside_root[0].real_path is None
    assert result.not_found == []
    assert len(warnings_sink) == 1
    assert "../../nowhere/missing.md" in warnings_sink[0]


def test_symlinked_entry_point_is_skipped_with_warning(
    doc_root: Path, write_doc, warnings_sink
) -> None:
    real = write_doc(doc_root / "real.md", "# Real\n")
    alias = doc_root / "alias.md"
    alias.symlink_to(real)
    result = analyze_documents(
        [alias], root=doc_root, no_symlinks=True, warn=warnings_sink.append
    )
    assert result.analyzed == []
    assert [item.target for item in result.skipped.symlinks] == [str(alias)]
    assert result.skipped.symlinks[0].source is None
    assert result.skipped.symlinks[0].real_path == str(real.resolve())
    assert len(warnings_sink) == 1
    assert "symlink" in warnings_sink[0]


def test_spellings_of_one_file_produce_one_skip_record(doc_root: Path, write_doc) -> None:
    entry = write_doc(doc_root / "index.md", "[a](x.md) [b](./x.md) [c](sub/../x.md)\n")
    write_doc(doc_root / "x.md", "# X\n")

    deep = analyze_documents([entry], root=doc_root, max_depth=0)
    assert [item.target for item in deep.skipped.max_depth] == ["x.md"]

    counted = analyze_documents([entry], root=doc_root, max_count=1)
    assert [item.target for item in counted.skipped.max_count] == ["x.md"]
