"""Finding data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


@dataclass(frozen=True)
class Location:
    """Where a finding was seen.

    A plain file location has only ``path`` and ``line``. A git object
    reference also names the repository root and the commit, and ``path`` is
    then the blob path inside that commit's tree.
    """

    path: str
    line: int
    repository: Optional[str] = None
    commit: Optional[str] = None

    @property
    def is_git(self) -> bool:
        return self.commit is not None

    @property
    def identifier(self) -> str:
        if self.commit is None:
            return self.path
        return f"{self.repository}@{self.commit}:{self.path}"

    @property
    def sort_key(self) -> Tuple[str, int]:
        return (self.identifier, self.line)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"path": self.path, "line": self.line}
        if self.commit is not None:
            data["repository"] = self.repository
            data["commit"] = self.commit
        return data


@dataclass(frozen=True)
class Finding:
    """One candidate secret on one line. Filtered, never edited."""

    location: Location
    snippet: str
    matched_rules: Tuple[str, ...]
    combined_confidence: float
    entropy: float
    tags: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        if not self.matched_rules:
            raise ValueError("a Finding needs at least one matched rule")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "location": self.location.to_dict(),
            "identifier": self.location.identifier,
            "snippet": self.snippet,
            "matched_rules": list(self.matched_rules),
            "confidence": self.combined_confidence,
            "entropy": self.entropy,
            "tags": sorted(self.tags),
        }


@dataclass(frozen=True)
class UnitOutcome:
    """Result of one unit of work: a file, a commit, or a repository.

    Exactly one of three shapes: scanned (``findings``, possibly empty),
    deliberately skipped (``skipped`` reason) or failed (``error`` reason).
    """

    kind: str  # 'file' | 'commit' | 'repository'
    unit: str
    findings: Tuple[Finding, ...] = ()
    error: Optional[str] = None
    skipped: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def scanned(self) -> bool:
        return self.error is None and self.skipped is None


@dataclass(frozen=True)
class ScanWarning:
    """A soft failure: the unit was not scanned, the scan went on."""

    kind: str
    unit: str
    reason: str


@dataclass
class ScanResult:
    """Complete result of a scan run."""

    findings: Tuple[Finding, ...] = ()
    warnings: List[ScanWarning] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    scanned_files: int = 0
    scanned_commits: int = 0
    repositories: int = 0
    scan_duration_ms: float = 0.0

    @property
    def total_findings(self) -> int:
        return len(self.findings)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
