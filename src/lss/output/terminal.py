"""Rich terminal reporter."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from lss.findings.models import Finding, ScanResult
from lss.rules.registry import RulePage


def _confidence_text(confidence: float) -> Text:
    if confidence >= 0.8:
        style = "bold red"
    elif confidence >= 0.5:
        style = "yellow"
    else:
        style = "cyan"
    return Text(f"{confidence:.2f}", style=style)


def _location_text(finding: Finding) -> Text:
    loc = finding.location
    if loc.commit is None:
        return Text(loc.path, style="magenta")
    text = Text(loc.path, style="magenta")
    text.append(f"\n{loc.repository} @ {loc.commit[:12]}", style="dim")
    return text


def render(result: ScanResult, *, console: Console | None = None, show_summary: bool = True) -> None:
    """Print findings to stdout and the summary to stderr."""
    out = console or Console()
    err = Console(stderr=True)

    if not result.findings:
        err.print()
        err.print("[bold green]✅ No secrets detected.[/bold green]")
    else:
        table = Table(
            title="lss findings",
            show_lines=True,
            title_style="bold",
            border_style="dim",
        )
        table.add_column("Location", min_width=20)
        table.add_column("Line", justify="right", style="green")
        table.add_column("Rules", style="cyan")
        table.add_column("Tags", style="dim")
        table.add_column("Conf.", justify="right")
        table.add_column("Entropy", justify="right")
        table.add_column("Snippet", overflow="fold")

        for finding in result.findings:
            table.add_row(
                _location_text(finding),
                str(finding.location.line),
                escape(", ".join(finding.matched_rules)),
                escape(", ".join(sorted(finding.tags))),
                _confidence_text(finding.combined_confidence),
                f"{finding.entropy:.2f}",
                Text(finding.snippet),
            )
        out.print(table)

    if show_summary:
        _print_summary(err, result)


def _print_summary(console: Console, result: ScanResult) -> None:
    console.print()
    console.print(f"[dim]Files scanned:[/dim]   {result.scanned_files}")
    console.print(f"[dim]Commits scanned:[/dim] {result.scanned_commits}")
    console.print(f"[dim]Repositories:[/dim]    {result.repositories}")
    console.print(f"[dim]Findings:[/dim]        {result.total_findings}")
    console.print(f"[dim]Skipped:[/dim]         {len(result.skipped)}")
    console.print(f"[dim]Duration:[/dim]        {result.scan_duration_ms:.0f}ms")
    if result.warnings:
        console.print(
            f"[bold yellow]⚠️  {len(result.warnings)} item(s) could not be scanned:[/bold yellow]"
        )
        for w in result.warnings:
            console.print(f"  [yellow]{w.kind}[/yellow] {escape(w.unit)}: {escape(w.reason)}")


def render_rules(page: RulePage, *, console: Console | None = None) -> None:
    """Print one page of the rule listing."""
    out = console or Console()
    table = Table(border_style="dim", title_style="bold", title="lss rules")
    table.add_column("Name", style="cyan")
    table.add_column("Pattern", overflow="fold")
    table.add_column("Tags", style="dim")
    table.add_column("Conf.", justify="right")
    for rule in page.rules:
        table.add_row(
            escape(rule.name),
            Text(rule.source),
            escape(", ".join(sorted(rule.tags))),
            f"{rule.confidence:.2f}",
        )
    out.print(table)
    out.print(f"Showing {page.start}-{page.end} of {page.total}")
