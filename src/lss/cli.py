"""lss CLI — Typer application with scan, rules list, and init commands."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from lss import __version__

app = typer.Typer(
    name="lss",
    help="Find secrets in a file tree and in the git history beneath it. Fully offline.",
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
)
rules_app = typer.Typer(help="Inspect detection rules.", no_args_is_help=True)
app.add_typer(rules_app, name="rules")

console = Console(stderr=True)

EXIT_CLEAN = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def _log_level(verbose: bool, debug: bool) -> int:
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    return logging.WARNING


# ── scan ──────────────────────────────────────────────────────────────────────


@app.command()
def scan(
    path: Path = typer.Argument(Path("."), help="Directory to scan"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human | json"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Write report to file"),
    entropy_threshold: Optional[float] = typer.Option(
        None, "--entropy-threshold", min=0.0, help="Drop findings below this entropy (default 3.5)"
    ),
    ignore_file: Optional[Path] = typer.Option(
        None, "--ignore-file", help="Extra ignore file (one substring per line)"
    ),
    rules_file: Optional[List[Path]] = typer.Option(
        None, "--rules-file", help="Extra rules file; may be repeated"
    ),
    include_tags: Optional[str] = typer.Option(
        None, "--include-tags", help="Keep only findings with any of these comma-separated tags"
    ),
    exclude_tags: Optional[str] = typer.Option(
        None, "--exclude-tags", help="Drop findings with any of these comma-separated tags"
    ),
    min_confidence: Optional[float] = typer.Option(
        None, "--min-confidence", min=0.0, max=1.0, help="Minimum combined confidence (0.0-1.0)"
    ),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to config.toml"),
    workers: Optional[int] = typer.Option(None, "--workers", min=1, help="Worker threads"),
    no_history: bool = typer.Option(False, "--no-history", help="Do not scan git history"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    debug: bool = typer.Option(False, "--debug", help="Debug output"),
) -> None:
    """Scan PATH (default: current directory) for secrets."""
    _run_scan(
        path,
        format=format,
        output=output,
        entropy_threshold=entropy_threshold,
        ignore_file=ignore_file,
        rules_file=rules_file,
        include_tags=include_tags,
        exclude_tags=exclude_tags,
        min_confidence=min_confidence,
        config=config,
        workers=workers,
        no_history=no_history,
        verbose=verbose,
        debug=debug,
    )


def _run_scan(
    path: Path,
    *,
    format: str = "human",
    output: Optional[str] = None,
    entropy_threshold: Optional[float] = None,
    ignore_file: Optional[Path] = None,
    rules_file: Optional[List[Path]] = None,
    include_tags: Optional[str] = None,
    exclude_tags: Optional[str] = None,
    min_confidence: Optional[float] = None,
    config: Optional[str] = None,
    workers: Optional[int] = None,
    no_history: bool = False,
    verbose: bool = False,
    debug: bool = False,
) -> None:
    from lss.config.loader import ConfigError, load_config, parse_tag_list, resolve_scan_config
    from lss.errors import IoError
    from lss.logging_setup import setup_logging
    from lss.output import json_report, terminal
    from lss.rules.parser import RuleParseError
    from lss.scanner.engine import ScanError, scan as run_scan

    setup_logging(_log_level(verbose, debug), console)

    if format not in ("human", "json"):
        console.print(f"[bold red]Invalid format:[/bold red] {escape(format)}")
        raise typer.Exit(code=EXIT_ERROR)

    # --- Load config ---
    try:
        cfg = load_config(config)
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_ERROR) from exc

    # --- Resolve (CLI wins) ---
    try:
        scan_config = resolve_scan_config(
            path,
            cfg,
            entropy_threshold=entropy_threshold,
            min_confidence=min_confidence,
            include_tags=parse_tag_list(include_tags) if include_tags is not None else None,
            exclude_tags=parse_tag_list(exclude_tags) if exclude_tags is not None else None,
            ignore_file=ignore_file,
            rules_files=rules_file or [],
            workers=workers,
            history=False if no_history else None,
        )
    except RuleParseError as exc:
        console.print(f"[bold red]Rule error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_ERROR) from exc
    except ConfigError as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_ERROR) from exc
    except IoError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_ERROR) from exc

    if verbose or debug:
        console.print(f"[dim]Rules loaded: {len(scan_config.rules)}[/dim]")
        console.print(f"[dim]Ignore patterns: {len(scan_config.ignore)}[/dim]")
        console.print(f"[dim]Entropy threshold: {scan_config.entropy_threshold}[/dim]")

    # --- Run scan ---
    try:
        result = run_scan(path, scan_config)
    except (ScanError, IoError) as exc:
        console.print(f"[bold red]Scanner error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_ERROR) from exc

    # --- Output ---
    if format == "json":
        report_text = json_report.render(result)
        if output:
            Path(output).write_text(report_text + "\n", encoding="utf-8")
        else:
            print(report_text)
    else:
        terminal.render(result)
        if output:
            # Human format on screen, JSON on disk
            Path(output).write_text(json_report.render(result) + "\n", encoding="utf-8")
    if output and (verbose or debug):
        console.print(f"[dim]Report written to {escape(output)}[/dim]")

    # --- Exit code ---
    raise typer.Exit(code=EXIT_FINDINGS if result.findings else EXIT_CLEAN)


# ── rules list ────────────────────────────────────────────────────────────────


@rules_app.command("list")
def rules_list(
    query: Optional[str] = typer.Argument(None, help="Only rules whose name contains this"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
    page: int = typer.Option(1, "--page", min=1, help="Page number (1-based)"),
    per_page: int = typer.Option(20, "--per-page", min=1, help="Rules per page"),
    rules_file: Optional[List[Path]] = typer.Option(
        None, "--rules-file", help="Also list rules from this file; may be repeated"
    ),
) -> None:
    """List detection rules, optionally filtered by name."""
    from lss.errors import IoError
    from lss.output import json_report, terminal
    from lss.rules.parser import RuleParseError
    from lss.rules.registry import RuleSet

    try:
        rules = RuleSet.load(rules_file or [])
    except (RuleParseError, IoError) as exc:
        console.print(f"[bold red]Rule error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_ERROR) from exc

    listing = rules.filter(query).page(page, per_page)
    if json_output:
        print(json_report.render_rules(listing))
    else:
        terminal.render_rules(listing)


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
) -> None:
    """Write a starter config.toml to the platform config directory."""
    from lss.config.defaults import DEFAULT_TOML
    from lss.config.loader import default_config_path

    config_path = default_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]⚠[/yellow]  Config already exists at {escape(str(config_path))}")
        raise typer.Exit(code=1)

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {escape(str(config_path))}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"lss {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
    scan_flag: bool = typer.Option(
        False, "--scan", help="Run a scan without the subcommand: lss --scan --path ."
    ),
    path: Path = typer.Option(Path("."), "--path", help="Directory to scan (with --scan)"),
    format: str = typer.Option("human", "--format", "-f", help="Output format (with --scan)"),
    entropy_threshold: Optional[float] = typer.Option(
        None, "--entropy-threshold", min=0.0, help="Entropy threshold (with --scan)"
    ),
    ignore_file: Optional[Path] = typer.Option(
        None, "--ignore-file", help="Extra ignore file (with --scan)"
    ),
    rules_file: Optional[List[Path]] = typer.Option(
        None, "--rules-file", help="Extra rules file (with --scan)"
    ),
    include_tags: Optional[str] = typer.Option(
        None, "--include-tags", help="Comma-separated tags to keep (with --scan)"
    ),
    exclude_tags: Optional[str] = typer.Option(
        None, "--exclude-tags", help="Comma-separated tags to drop (with --scan)"
    ),
    min_confidence: Optional[float] = typer.Option(
        None, "--min-confidence", min=0.0, max=1.0, help="Minimum confidence (with --scan)"
    ),
) -> None:
    """lss — local secret scanner."""
    if ctx.invoked_subcommand is not None:
        return
    if not scan_flag:
        typer.echo(ctx.get_help())
        raise typer.Exit()
    _run_scan(
        path,
        format=format,
        entropy_threshold=entropy_threshold,
        ignore_file=ignore_file,
        rules_file=rules_file,
        include_tags=include_tags,
        exclude_tags=exclude_tags,
        min_confidence=min_confidence,
    )
