from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer

from docreview.analysis.aggregate import build_report
from docreview.analysis.discovery import analyze_tree
from docreview.analysis.traversal import analyze_documents
from docreview.config import (
    TraversalSettings,
    TreeSettings,
    merge_payload,
    traversal_defaults,
    tree_defaults,
)
from docreview.exceptions import DocumentReadError, UsageError
from docreview.runtime.json_io import write_json_to_target

app = typer.Typer(
    add_completion=False,
    help="Score documents for agent consumption and follow their local links.",
)

_USAGE_EXIT_CODE = 2
_FAILURE_EXIT_CODE = 1


def _echo_warning(message: str) -> None:
    typer.secho(f"Warning: {message}", err=True, fg=typer.colors.YELLOW)


def _fail(message: str, *, code: int) -> typer.Exit:
    typer.secho(f"Error: {message}", err=True, fg=typer.colors.RED)
    return typer.Exit(code=code)


def _traversal_settings(
    *,
    config: Optional[Path],
    max_depth: Optional[int],
    max_count: Optional[int],
    no_symlinks: Optional[bool],
    format: Optional[str],
) -> TraversalSettings:
    defaults = traversal_defaults(config_path=config)
    merged = merge_payload(
        {
            "max_depth": max_depth,
            "max_count": max_count,
            "no_symlinks": no_symlinks,
            "format": format,
        },
        defaults,
    )
    return TraversalSettings.from_table(merged)


@app.command("analyze")
def analyze(
    paths: List[Path] = typer.Argument(..., help="Entry-point documents to analyze."),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        help="Sandbox root. Required for link following; no reference may escape it.",
    ),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", help="Maximum link depth from the entry points (default: 3)."
    ),
    max_count: Optional[int] = typer.Option(
        None, "--max-count", help="Maximum number of documents to analyze (default: 30)."
    ),
    no_symlinks: bool = typer.Option(
        False,
        "--no-symlinks",
        help="Refuse documents that are, or pass through, a symlink.",
    ),
    format: Optional[str] = typer.Option(
        None, "--format", help="Metrics detail in the report (summary|full)."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default: ./docreview.toml)."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", help="Write the JSON report here instead of stdout ('-' for stdout)."
    ),
) -> None:
    """Analyze documents and, with --root, the documents they link to."""
    try:
        settings = _traversal_settings(
            config=config,
            max_depth=max_depth,
            max_count=max_count,
            # The flag can only switch the policy on; config may also enable it.
            no_symlinks=True if no_symlinks else None,
            format=format,
        )
        result = analyze_documents(
            paths,
            root=root,
            max_depth=settings.max_depth,
            max_count=settings.max_count,
            no_symlinks=settings.no_symlinks,
            warn=_echo_warning,
        )
    except UsageError as exc:
        raise _fail(str(exc), code=_USAGE_EXIT_CODE) from exc
    except DocumentReadError as exc:
        raise _fail(str(exc), code=_FAILURE_EXIT_CODE) from exc
    report = build_report(paths, result, format=settings.format)
    write_json_to_target(output, report.model_dump(mode="json", by_alias=True))


@app.command("tree")
def tree(
    target: Path = typer.Argument(..., help="Directory (or a file inside it) to scan."),
    match: Optional[str] = typer.Option(
        None, "--match", help="File name to discover (default: AGENTS.md)."
    ),
    max_documents: Optional[int] = typer.Option(
        None, "--max-documents", help="Stop after this many matches (default: 200)."
    ),
    format: Optional[str] = typer.Option(
        None, "--format", help="Metrics detail in the report (summary|full)."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Config file (default: ./docreview.toml)."
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", help="Write the JSON report here instead of stdout ('-' for stdout)."
    ),
) -> None:
    """Analyze every convention file (e.g. nested AGENTS.md) below a directory."""
    try:
        merged = merge_payload(
            {"match": match, "max_documents": max_documents, "format": format},
            tree_defaults(config_path=config),
        )
        settings = TreeSettings.from_table(merged)
        report = analyze_tree(
            target,
            match_file_name=settings.match,
            max_documents=settings.max_documents,
            format=settings.format,
        )
    except UsageError as exc:
        raise _fail(str(exc), code=_USAGE_EXIT_CODE) from exc
    except DocumentReadError as exc:
        raise _fail(str(exc), code=_FAILURE_EXIT_CODE) from exc
    if report.scope.truncated:
        _echo_warning(
            f"Stopped after {settings.max_documents} {settings.match} files; "
            "raise --max-documents to see the rest"
        )
    write_json_to_target(output, report.model_dump(mode="json", by_alias=True))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
