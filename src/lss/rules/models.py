"""Rule data model — an immutable, pre-compiled detection rule."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet

DEFAULT_CONFIDENCE = 0.5


@dataclass(frozen=True)
class Rule:
    """A single detection rule.

    Rules are built once at startup and shared read-only by every scanning
    thread, so the pattern is compiled up front rather than lazily.
    """

    name: str
    pattern: re.Pattern[str]
    tags: FrozenSet[str] = field(default_factory=frozenset)
    confidence: float = DEFAULT_CONFIDENCE

    @property
    def source(self) -> str:
        """The regular expression text this rule was compiled from."""
        return self.pattern.pattern

    def matches(self, line: str) -> bool:
        return self.pattern.search(line) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "pattern": self.source,
            "tags": sorted(self.tags),
            "confidence": self.confidence,
        }
