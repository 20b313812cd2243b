"""Reference resolution and sandbox containment.

Containment is decided on canonical (real) paths so `..` segments and
symlinked directories that lead outside the root are rejected regardless of
how the reference was spelled.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from docreview.analysis.model import (
    Reference,
    ResolvedCandidate,
    SandboxDecision,
    SandboxVerdict,
)
from docreview.invariants import never
from docreview.runtime.path_policy import (
    canonical_path,
    is_within,
    lexical_path,
    safe_canonical,
)


def resolve_reference(
    reference: Reference, *, base_dir: str | Path, source: Optional[str] = None
) -> ResolvedCandidate:
    if reference.normalized_target is None:
        never("non-local reference cannot be resolved", target=reference.raw_target)
    path = lexical_path(Path(base_dir) / reference.normalized_target)
    return ResolvedCandidate(reference=reference, path=str(path), source=source)


class Sandbox:
    """Admission policy for one invocation.

    The root's canonical path is computed once at construction. Without a
    root every existing path is admitted, subject only to the symlink policy.
    """

    def __init__(self, root: str | Path | None, *, no_symlinks: bool = False) -> None:
        self.no_symlinks = no_symlinks
        if root is None:
            self.root: Optional[Path] = None
            self.root_real: Optional[Path] = None
        else:
            self.root = lexical_path(root)
            self.root_real = canonical_path(root)

    @property
    def enabled(self) -> bool:
        return self.root_real is not None

    def canonical(self, path: str | Path) -> Optional[Path]:
        """Real path of a candidate, or None when it cannot be resolved."""
        return safe_canonical(path)

    def escapes_lexically(self, path: str | Path) -> bool:
        """Cheap pre-check for candidates whose real path cannot be computed yet."""
        if self.root is None or self.root_real is None:
            return False
        lexical = lexical_path(path)
        return not (is_within(lexical, self.root) or is_within(lexical, self.root_real))

    def _unlinked_spelling(self, path: Path) -> Path:
        # The real path a candidate would have if nothing below the root were a
        # symlink. Symlinks above the root (e.g. a linked temp dir) are allowed.
        if self.root is not None and self.root_real is not None and is_within(path, self.root):
            return self.root_real / path.relative_to(self.root)
        return path

    def decide(self, path: str | Path) -> SandboxVerdict:
        """Classify an existing path."""
        lexical = lexical_path(path)
        real = canonical_path(lexical)
        if self.root_real is not None and not is_within(real, self.root_real):
            return SandboxVerdict(SandboxDecision.REJECTED_OUTSIDE_ROOT, str(real))
        if self.no_symlinks and real != self._unlinked_spelling(lexical):
            return SandboxVerdict(SandboxDecision.REJECTED_SYMLINK, str(real))
        return SandboxVerdict(SandboxDecision.ADMITTED, str(real))
