"""Ignore-pattern resolution.

Patterns come from four sources and are merged into one flat set:

  - the ``ignore`` array of the config file,
  - ``.lssignore`` at the scan root,
  - every ``.lssignore`` found in a directory below the scan root,
  - the file passed with ``--ignore-file``.

A path is ignored when any pattern is a literal, case-sensitive substring of
the path string. No globs, no anchoring: ``dist`` also matches
``redistribute/``. Provenance is kept for diagnostics only.

.lssignore file format:
  - One substring pattern per line, surrounding whitespace stripped.
  - Blank lines and lines starting with ``#`` are skipped.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from lss.errors import IoError

logger = logging.getLogger(__name__)

IGNORE_FILENAME = ".lssignore"
GIT_DIRNAME = ".git"

PathLike = Union[str, os.PathLike]


class IgnoreSource(str, Enum):
    CONFIG = "config"
    ROOT_FILE = "root-ignore-file"
    DIRECTORY_FILE = "directory-ignore-file"
    CLI_FILE = "cli-ignore-file"


@dataclass(frozen=True)
class IgnorePattern:
    """A substring pattern and where it came from."""

    pattern: str
    source: IgnoreSource
    origin: Optional[str] = None  # file the pattern was read from

    def describe(self) -> str:
        where = f" ({self.origin})" if self.origin else ""
        return f"{self.pattern!r} from {self.source.value}{where}"


def parse_ignore_text(text: str) -> List[str]:
    patterns: List[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(line)
    return patterns


def read_ignore_file(path: Path) -> List[str]:
    """Read an ignore file. Raises OSError / UnicodeDecodeError."""
    return parse_ignore_text(path.read_text(encoding="utf-8"))


def _read_optional(path: Path) -> List[str]:
    """Read a discovered ignore file; an unreadable one contributes nothing."""
    try:
        return read_ignore_file(path)
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read ignore file %s: %s", path, exc)
        return []


class IgnoreResolver:
    """Immutable merged ignore-pattern set."""

    def __init__(self, patterns: Iterable[IgnorePattern] = ()) -> None:
        first_seen: Dict[str, IgnorePattern] = {}
        for p in patterns:
            if p.pattern and p.pattern not in first_seen:
                first_seen[p.pattern] = p
        self._entries: Tuple[IgnorePattern, ...] = tuple(first_seen.values())
        self._patterns: Tuple[str, ...] = tuple(first_seen)

    @classmethod
    def from_strings(cls, patterns: Iterable[str], source: IgnoreSource = IgnoreSource.CONFIG) -> "IgnoreResolver":
        return cls(IgnorePattern(p, source) for p in patterns)

    @classmethod
    def build(
        cls,
        root: Path,
        config_patterns: Iterable[str] = (),
        cli_ignore_file: Optional[Path] = None,
    ) -> "IgnoreResolver":
        """Merge all four pattern sources for a scan of *root*."""
        entries: List[IgnorePattern] = [
            IgnorePattern(p.strip(), IgnoreSource.CONFIG)
            for p in config_patterns
            if p and p.strip()
        ]

        if cli_ignore_file is not None:
            try:
                cli_patterns = read_ignore_file(cli_ignore_file)
            except FileNotFoundError as exc:
                raise IoError(f"Ignore file not found: {cli_ignore_file}") from exc
            except (OSError, UnicodeDecodeError) as exc:
                raise IoError(f"Cannot read ignore file {cli_ignore_file}: {exc}") from exc
            entries.extend(
                IgnorePattern(p, IgnoreSource.CLI_FILE, str(cli_ignore_file))
                for p in cli_patterns
            )

        root_file = root / IGNORE_FILENAME
        entries.extend(
            IgnorePattern(p, IgnoreSource.ROOT_FILE, str(root_file))
            for p in _read_optional(root_file)
        )

        # Nested files are discovered with only the non-nested patterns in
        # force, so the merged set does not depend on discovery order.
        base = cls(entries)
        for ignore_file in base._discover_nested(root):
            entries.extend(
                IgnorePattern(p, IgnoreSource.DIRECTORY_FILE, str(ignore_file))
                for p in _read_optional(ignore_file)
            )

        resolver = cls(entries)
        logger.debug("Ignore set: %d pattern(s)", len(resolver))
        return resolver

    def _discover_nested(self, root: Path) -> List[Path]:
        found: List[Path] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(
                d for d in dirnames
                if d != GIT_DIRNAME and not self.is_ignored(os.path.join(dirpath, d))
            )
            if IGNORE_FILENAME in filenames and Path(dirpath) != root:
                found.append(Path(dirpath) / IGNORE_FILENAME)
        return found

    # ---- queries ----

    @property
    def patterns(self) -> Tuple[IgnorePattern, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._patterns)

    def match(self, path: PathLike) -> Optional[IgnorePattern]:
        """Return the first pattern that matches *path*, if any."""
        s = os.fspath(path)
        for entry in self._entries:
            if entry.pattern in s:
                return entry
        return None

    def is_ignored(self, path: PathLike) -> bool:
        s = os.fspath(path)
        return any(p in s for p in self._patterns)
