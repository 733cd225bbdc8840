"""Tests for output reporters."""

import io
import json
import re

from rich.console import Console

from lss import __version__
from lss.findings.models import Finding, Location, ScanResult, ScanWarning
from lss.output import json_report, terminal
from lss.rules.models import Rule
from lss.rules.registry import RuleSet


def _make_result(findings=None) -> ScanResult:
    """Build a ScanResult with sample data."""
    if findings is None:
        findings = (
            Finding(
                location=Location("config/deploy.py", 42),
                snippet='AWS_KEY = "AKIA1234567890ABCDEF"',
                matched_rules=("AWS Access Key ID",),
                combined_confidence=0.9,
                entropy=4.21,
                tags=frozenset({"credential", "aws"}),
            ),
            Finding(
                location=Location("old.env", 3, repository="/src/repo", commit="a" * 40),
                snippet="token=ghp_x",
                matched_rules=("GitHub Token", "Generic API Key"),
                combined_confidence=0.95,
                entropy=3.8,
                tags=frozenset({"github"}),
            ),
        )
    return ScanResult(
        findings=tuple(findings),
        warnings=[ScanWarning("file", "/src/locked.txt", "Permission denied")],
        skipped=["/src/logo.png (binary)"],
        scanned_files=5,
        scanned_commits=2,
        repositories=1,
        scan_duration_ms=15.3,
    )


class TestJsonReport:
    def test_valid_json(self):
        data = json.loads(json_report.render(_make_result()))
        assert data["version"] == __version__
        assert data["total_findings"] == 2
        assert data["scanned_files"] == 5
        assert data["scanned_commits"] == 2
        assert data["repositories"] == 1
        assert data["skipped"] == ["/src/logo.png (binary)"]
        assert data["warnings"] == [
            {"kind": "file", "unit": "/src/locked.txt", "reason": "Permission denied"}
        ]

    def test_file_finding_shape(self):
        finding = json.loads(json_report.render(_make_result()))["findings"][0]
        assert finding == {
            "location": {"path": "config/deploy.py", "line": 42},
            "identifier": "config/deploy.py",
            "snippet": 'AWS_KEY = "AKIA1234567890ABCDEF"',
            "matched_rules": ["AWS Access Key ID"],
            "confidence": 0.9,
            "entropy": 4.21,
            "tags": ["aws", "credential"],
        }

    def test_git_finding_location(self):
        finding = json.loads(json_report.render(_make_result()))["findings"][1]
        assert finding["location"] == {
            "path": "old.env",
            "line": 3,
            "repository": "/src/repo",
            "commit": "a" * 40,
        }
        assert finding["identifier"] == f"/src/repo@{'a' * 40}:old.env"
        assert finding["matched_rules"] == ["GitHub Token", "Generic API Key"]

    def test_empty_result(self):
        data = json.loads(json_report.render(ScanResult()))
        assert data["total_findings"] == 0
        assert data["findings"] == []
        assert data["warnings"] == []

    def test_rules_listing(self):
        rules = RuleSet(
            Rule(name=f"R{i}", pattern=re.compile(f"r{i}"), tags=frozenset({"b", "a"}), confidence=0.7)
            for i in range(3)
        )
        data = json.loads(json_report.render_rules(rules.page(2, 2)))
        assert data == {
            "total": 3,
            "page": 2,
            "per_page": 2,
            "rules": [{"name": "R2", "pattern": "r2", "tags": ["a", "b"], "confidence": 0.7}],
        }


class TestTerminalReport:
    def _console(self) -> tuple[Console, io.StringIO]:
        buf = io.StringIO()
        return Console(file=buf, width=200, color_system=None), buf

    def test_table_lists_findings(self):
        console, buf = self._console()
        terminal.render(_make_result(), console=console, show_summary=False)
        out = buf.getvalue()
        assert "config/deploy.py" in out
        assert "AWS Access Key ID" in out
        assert "0.90" in out
        assert "aaaaaaaaaaaa" in out  # short commit id

    def test_clean_result_prints_no_table(self):
        console, buf = self._console()
        terminal.render(ScanResult(), console=console, show_summary=False)
        assert buf.getvalue() == ""

    def test_snippet_is_not_markup(self):
        finding = Finding(
            location=Location("a.txt", 1),
            snippet="[bold]password=hunter22[/bold]",
            matched_rules=("R",),
            combined_confidence=0.5,
            entropy=3.0,
        )
        console, buf = self._console()
        terminal.render(_make_result([finding]), console=console, show_summary=False)
        assert "[bold]password=hunter22[/bold]" in buf.getvalue()

    def test_rules_page_footer(self):
        rules = RuleSet(Rule(name=f"R{i}", pattern=re.compile("x")) for i in range(5))
        console, buf = self._console()
        terminal.render_rules(rules.page(2, 2), console=console)
        out = buf.getvalue()
        assert "R3" in out and "R4" in out
        assert "Showing 3-4 of 5" in out
