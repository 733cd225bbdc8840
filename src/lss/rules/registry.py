"""Rule set — the flat, ordered collection of rules used by a scan."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple

from lss.rules.models import Rule
from lss.rules.parser import load_default_rules, load_rules_file

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 20


@dataclass(frozen=True)
class RulePage:
    """One page of a rule listing."""

    total: int
    page: int
    per_page: int
    rules: Tuple[Rule, ...]

    @property
    def start(self) -> int:
        """1-based index of the first rule on this page (0 when empty)."""
        return (self.page - 1) * self.per_page + 1 if self.rules else 0

    @property
    def end(self) -> int:
        return self.start + len(self.rules) - 1 if self.rules else 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "page": self.page,
            "per_page": self.per_page,
            "rules": [r.to_dict() for r in self.rules],
        }


class RuleSet:
    """Immutable ordered rule collection.

    Duplicate names are allowed: two rules with the same name are still two
    independent rules.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: Tuple[Rule, ...] = tuple(rules)

    @classmethod
    def load(cls, rules_files: Sequence[Path] = (), *, include_defaults: bool = True) -> "RuleSet":
        """Bundled rules followed by each rules file, in order."""
        rules: List[Rule] = load_default_rules() if include_defaults else []
        for path in rules_files:
            rules.extend(load_rules_file(Path(path)))
        logger.debug("Rule set ready: %d rule(s)", len(rules))
        return cls(rules)

    # ---- queries ----

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def names(self) -> List[str]:
        return [r.name for r in self._rules]

    def filter(self, query: str | None) -> "RuleSet":
        """Rules whose name contains *query* (case-sensitive)."""
        if not query:
            return self
        return RuleSet(r for r in self._rules if query in r.name)

    def page(self, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> RulePage:
        """Return the 1-based *page* of *per_page* rules."""
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if per_page < 1:
            raise ValueError(f"per_page must be >= 1, got {per_page}")
        start = (page - 1) * per_page
        return RulePage(
            total=len(self._rules),
            page=page,
            per_page=per_page,
            rules=self._rules[start:start + per_page],
        )
