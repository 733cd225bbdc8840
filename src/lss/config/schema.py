"""Configuration schema — file-level settings and the resolved scan config."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, FrozenSet, List, Optional

if TYPE_CHECKING:
    from lss.rules.registry import RuleSet
    from lss.scanner.ignore import IgnoreResolver

DEFAULT_ENTROPY_THRESHOLD = 3.5
DEFAULT_MIN_CONFIDENCE = 0.0


@dataclass
class LssConfig:
    """Settings read from ``config.toml`` (and environment overrides)."""

    ignore: List[str] = field(default_factory=list)
    entropy_threshold: float = DEFAULT_ENTROPY_THRESHOLD
    min_confidence: float = DEFAULT_MIN_CONFIDENCE  # 0.0 = no filter
    include_tags: List[str] = field(default_factory=list)
    exclude_tags: List[str] = field(default_factory=list)
    rules_files: List[str] = field(default_factory=list)
    workers: Optional[int] = None  # None = executor default
    history: bool = True  # scan git history of nested repositories
    max_file_size_kb: Optional[int] = None  # None = no limit


@dataclass(frozen=True)
class ScanConfig:
    """Resolved configuration for one invocation.

    Built once before any worker starts and shared read-only by all of them.
    """

    rules: "RuleSet"
    ignore: "IgnoreResolver"
    entropy_threshold: float = DEFAULT_ENTROPY_THRESHOLD
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    include_tags: FrozenSet[str] = frozenset()
    exclude_tags: FrozenSet[str] = frozenset()
    workers: Optional[int] = None
    history: bool = True
    max_file_size: Optional[int] = None  # bytes
