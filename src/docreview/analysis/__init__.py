"""Document graph analysis subpackage for docreview."""

from .aggregate import build_report, finalize, summarize
from .links import extract_references, local_references
from .metrics import extract_metrics
from .sandbox import Sandbox, resolve_reference
from .scoring import evaluate_metrics
from .traversal import TraversalContext, TraversalLimits, analyze_documents, traverse

__all__ = [
    "Sandbox",
    "TraversalContext",
    "TraversalLimits",
    "analyze_documents",
    "build_report",
    "evaluate_metrics",
    "extract_metrics",
    "extract_references",
    "finalize",
    "local_references",
    "resolve_reference",
    "summarize",
    "traverse",
]
