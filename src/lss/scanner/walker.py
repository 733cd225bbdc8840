"""File walker — enumerate files under the scan root and scan them in parallel."""

from __future__ import annotations

import logging
import os
from concurrent.futures import Executor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, List, Optional, Tuple

from lss.findings.models import Location, UnitOutcome
from lss.scanner.ignore import GIT_DIRNAME, IgnoreResolver
from lss.scanner.line import scan_text

if TYPE_CHECKING:
    from lss.config.schema import ScanConfig

logger = logging.getLogger(__name__)


def decode_text(data: bytes) -> Optional[str]:
    """Decode *data* as UTF-8 text, or return None if it looks binary."""
    if b"\x00" in data:
        return None
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def walk_tree(root: Path, ignore: IgnoreResolver) -> Iterator[Tuple[Path, List[str], List[str]]]:
    """Yield ``(directory, subdirs, files)`` top-down in sorted order.

    ``.git`` directories and ignored directories are pruned; the caller
    sees ``.git`` only through *subdirs* of the directory that holds it.
    Symlinked directories are not followed.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        directory = Path(dirpath)
        subdirs = sorted(dirnames)
        dirnames[:] = [
            d for d in subdirs
            if d != GIT_DIRNAME and not ignore.is_ignored(directory / d)
        ]
        yield directory, subdirs, sorted(filenames)


def iter_files(root: Path, ignore: IgnoreResolver) -> Iterator[Path]:
    """Yield every regular, non-ignored file under *root*."""
    for directory, _subdirs, filenames in walk_tree(root, ignore):
        for name in filenames:
            path = directory / name
            if path.is_symlink() or not path.is_file():
                continue
            if ignore.is_ignored(path):
                logger.debug("Ignored %s (%s)", path, ignore.match(path).describe())
                continue
            yield path


def read_text(path: Path, max_size: Optional[int] = None) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(text, skip_reason)``. Raises OSError if the file can't be read."""
    if max_size is not None and path.stat().st_size > max_size:
        return None, "oversized"
    text = decode_text(path.read_bytes())
    if text is None:
        return None, "binary"
    return text, None


def scan_file(path: Path, config: "ScanConfig") -> UnitOutcome:
    """Scan one file. I/O failures become a soft-failure outcome."""
    unit = str(path)
    try:
        text, skip_reason = read_text(path, config.max_file_size)
    except OSError as exc:
        logger.warning("Cannot read %s: %s", path, exc.strerror or exc)
        return UnitOutcome(kind="file", unit=unit, error=exc.strerror or str(exc))

    if text is None:
        logger.debug("Skipped %s (%s)", path, skip_reason)
        return UnitOutcome(kind="file", unit=unit, skipped=skip_reason)

    findings = scan_text(text, config.rules.rules, lambda line_no: Location(unit, line_no))
    return UnitOutcome(kind="file", unit=unit, findings=tuple(findings))


def scan_tree(root: Path, config: "ScanConfig", executor: Executor) -> List[UnitOutcome]:
    """Scan every file under *root*, one unit of work per file."""
    futures = [executor.submit(scan_file, path, config) for path in iter_files(root, config.ignore)]
    logger.info("Scanning %d file(s) under %s", len(futures), root)
    return [future.result() for future in as_completed(futures)]
