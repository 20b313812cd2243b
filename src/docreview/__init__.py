"""docreview package root."""

from docreview.exceptions import DocReviewError, NeverThrown, UsageError
from docreview.invariants import never

__all__ = ["__version__", "DocReviewError", "NeverThrown", "UsageError", "never"]

__version__ = "0.1.0"
