"""JSON reporter."""

from __future__ import annotations

import json
from typing import Any, Dict

from lss import __version__
from lss.findings.models import ScanResult
from lss.rules.registry import RulePage


def to_dict(result: ScanResult) -> Dict[str, Any]:
    """Convert ScanResult to a JSON-serialisable dict."""
    return {
        "version": __version__,
        "total_findings": result.total_findings,
        "scanned_files": result.scanned_files,
        "scanned_commits": result.scanned_commits,
        "repositories": result.repositories,
        "findings": [f.to_dict() for f in result.findings],
        "warnings": [
            {"kind": w.kind, "unit": w.unit, "reason": w.reason}
            for w in result.warnings
        ],
        "skipped": result.skipped,
        "scan_duration_ms": result.scan_duration_ms,
    }


def render(result: ScanResult) -> str:
    """Return formatted JSON string."""
    return json.dumps(to_dict(result), indent=2)


def render_rules(page: RulePage) -> str:
    return json.dumps(page.to_dict(), indent=2)
