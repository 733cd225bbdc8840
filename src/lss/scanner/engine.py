"""Scan orchestrator — runs the file walker and the history scanner together.

Both producers share one bounded worker pool. Each unit of work (a file, a
commit) reports an outcome value instead of raising, so one unreadable file
or broken repository never aborts the scan. Ordering is imposed only at the
end, which keeps output reproducible whatever order workers finish in.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List

from lss.config.schema import ScanConfig
from lss.errors import IoError, LssError
from lss.findings.aggregator import collect
from lss.findings.models import ScanResult, UnitOutcome
from lss.git.history import scan_history
from lss.scanner.walker import scan_tree

logger = logging.getLogger(__name__)


class ScanError(LssError):
    """Raised on an unexpected internal scanner error."""


def scan(root: Path, config: ScanConfig) -> ScanResult:
    """Scan *root* (files and git history) and return the filtered result."""
    start = time.perf_counter()

    if not root.is_dir():
        raise IoError(f"Scan path is not a directory: {root}")

    outcomes: List[UnitOutcome] = []
    try:
        with ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="lss-worker") as pool:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="lss-producer") as producers:
                files_job = producers.submit(scan_tree, root, config, pool)
                history_job = (
                    producers.submit(scan_history, root, config, pool) if config.history else None
                )
                outcomes.extend(files_job.result())
                if history_job is not None:
                    outcomes.extend(history_job.result())
    except LssError:
        raise
    except Exception as exc:
        raise ScanError(f"Internal scanner error: {exc.__class__.__name__}: {exc}") from exc

    result = collect(outcomes, config)
    result.scan_duration_ms = round((time.perf_counter() - start) * 1000, 2)

    logger.info(
        "Scanned %d file(s), %d commit(s) in %d repositor%s: %d finding(s), %d warning(s)",
        result.scanned_files,
        result.scanned_commits,
        result.repositories,
        "y" if result.repositories == 1 else "ies",
        result.total_findings,
        len(result.warnings),
    )
    return result
