"""Error taxonomy for docreview runs."""

from __future__ import annotations


class DocReviewError(RuntimeError):
    """Base class for every error raised by docreview."""


class UsageError(DocReviewError):
    """Invalid invocation: bad arguments, missing root or entry files."""


class SandboxViolation(UsageError):
    """An entry point supplied by the caller resolves outside the sandbox root."""

    def __init__(self, message: str, *, target: str, path: str):
        super().__init__(message)
        self.target = target
        self.path = path


class DocumentReadError(DocReviewError):
    """A document passed existence and sandbox checks but could not be read.

    At that point the environment has broken the precondition the traversal
    relied on, so the whole run is aborted instead of recording an exclusion.
    """

    def __init__(self, message: str, *, path: str):
        super().__init__(message)
        self.path = path


class NeverThrown(RuntimeError):
    """Raised by never() when a branch assumed unreachable is taken."""

    def __init__(self, message: str, *, env: dict[str, object] | None = None):
        super().__init__(message)
        self.env = dict(env or {})
