"""Finding models and aggregation."""

from lss.findings.aggregator import apply_filters, collect, sort_findings
from lss.findings.models import Finding, Location, ScanResult, ScanWarning, UnitOutcome

__all__ = [
    "Finding",
    "Location",
    "ScanResult",
    "ScanWarning",
    "UnitOutcome",
    "apply_filters",
    "collect",
    "sort_findings",
]
