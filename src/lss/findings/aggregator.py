"""Outcome collection, post-filters, and deterministic ordering."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List

from lss.findings.models import Finding, ScanResult, ScanWarning, UnitOutcome

if TYPE_CHECKING:
    from lss.config.schema import ScanConfig


def filter_by_tags(
    findings: Iterable[Finding],
    include_tags: frozenset[str],
    exclude_tags: frozenset[str],
) -> List[Finding]:
    """Include-tags first (only when non-empty), then exclude-tags."""
    kept: List[Finding] = []
    for f in findings:
        if include_tags and not (f.tags & include_tags):
            continue
        if f.tags & exclude_tags:
            continue
        kept.append(f)
    return kept


def filter_by_entropy(findings: Iterable[Finding], threshold: float) -> List[Finding]:
    return [f for f in findings if f.entropy >= threshold]


def filter_by_confidence(findings: Iterable[Finding], minimum: float) -> List[Finding]:
    return [f for f in findings if f.combined_confidence >= minimum]


def apply_filters(findings: Iterable[Finding], config: "ScanConfig") -> List[Finding]:
    """Tag filter, then entropy filter, then minimum-confidence filter."""
    kept = filter_by_tags(findings, config.include_tags, config.exclude_tags)
    kept = filter_by_entropy(kept, config.entropy_threshold)
    return filter_by_confidence(kept, config.min_confidence)


def sort_findings(findings: Iterable[Finding]) -> List[Finding]:
    """Total order on (location identifier, line number)."""
    return sorted(findings, key=lambda f: f.location.sort_key)


def collect(outcomes: Iterable[UnitOutcome], config: "ScanConfig") -> ScanResult:
    """Fold per-unit outcomes into a filtered, ordered ScanResult."""
    raw: List[Finding] = []
    result = ScanResult()
    repositories = set()

    for outcome in outcomes:
        if outcome.error is not None:
            result.warnings.append(ScanWarning(outcome.kind, outcome.unit, outcome.error))
            continue
        if outcome.skipped is not None:
            result.skipped.append(f"{outcome.unit} ({outcome.skipped})")
            continue
        if outcome.kind == "file":
            result.scanned_files += 1
        elif outcome.kind == "commit":
            result.scanned_commits += 1
        elif outcome.kind == "repository":
            repositories.add(outcome.unit)
        raw.extend(outcome.findings)

    result.findings = tuple(sort_findings(apply_filters(raw, config)))
    result.warnings.sort(key=lambda w: (w.kind, w.unit))
    result.skipped.sort()
    result.repositories = len(repositories)
    return result
