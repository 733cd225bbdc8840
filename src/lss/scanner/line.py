"""Line scanner — apply every rule to one line of text."""

from __future__ import annotations

from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from lss.findings.models import Finding, Location
from lss.rules.models import Rule
from lss.scanner.confidence import combine_confidences
from lss.scanner.entropy import shannon_entropy


def matching_rules(line: str, rules: Sequence[Rule]) -> List[Rule]:
    """Every rule whose pattern matches *line*. No short-circuiting."""
    return [rule for rule in rules if rule.matches(line)]


def scan_line(line: str, rules: Sequence[Rule], location: Location) -> Optional[Finding]:
    """Return one Finding if any rule matches *line*, else None.

    All rules are evaluated so that independent matches on the same line are
    aggregated into a single combined confidence. The snippet is the line
    with surrounding whitespace removed; entropy is measured over it.
    """
    matched = matching_rules(line, rules)
    if not matched:
        return None
    snippet = line.strip()
    return Finding(
        location=location,
        snippet=snippet,
        matched_rules=tuple(rule.name for rule in matched),
        combined_confidence=combine_confidences(rule.confidence for rule in matched),
        entropy=shannon_entropy(snippet),
        tags=frozenset().union(*(rule.tags for rule in matched)),
    )


def iter_lines(text: str) -> Iterator[Tuple[int, str]]:
    """Yield ``(line_no, line)`` pairs, 1-based, split on ``\\n`` only."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for line_no, line in enumerate(lines, 1):
        yield line_no, line.removesuffix("\r")


def scan_text(
    text: str,
    rules: Sequence[Rule],
    locate: Callable[[int], Location],
) -> List[Finding]:
    """Scan every line of *text* in order; *locate* maps a line number to a Location."""
    findings: List[Finding] = []
    for line_no, line in iter_lines(text):
        finding = scan_line(line, rules, locate(line_no))
        if finding is not None:
            findings.append(finding)
    return findings
