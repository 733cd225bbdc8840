"""Data models for git object traversal."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

GITLINK_MODE = "160000"


@dataclass(frozen=True, slots=True)
class CommitRef:
    """A commit and its parents, as listed by ``git rev-list --parents``."""

    sha: str
    parents: Tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def first_parent(self) -> Optional[str]:
        return self.parents[0] if self.parents else None


@dataclass(frozen=True, slots=True)
class BlobRef:
    """A blob as it appears in one commit's tree."""

    path: str
    sha: str
    mode: str = "100644"
