"""Git history scanner — scan every blob a commit adds or modifies.

Policy: only commits reachable from the repository's current HEAD are
walked. The same secret carried into several commits is reported once per
commit that touched the blob; nothing is deduplicated here.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING, List

from lss.findings.models import Finding, Location, UnitOutcome
from lss.git.adapter import GitError, changed_blobs, list_commits, open_repository, read_blobs
from lss.git.models import CommitRef
from lss.scanner.ignore import GIT_DIRNAME, IgnoreResolver
from lss.scanner.line import scan_text
from lss.scanner.walker import decode_text, walk_tree

if TYPE_CHECKING:
    from lss.config.schema import ScanConfig

logger = logging.getLogger(__name__)


def find_repositories(root: Path, ignore: IgnoreResolver) -> List[Path]:
    """Directories under *root* (root included) holding a ``.git`` directory."""
    repos: List[Path] = []
    for directory, subdirs, _files in walk_tree(root, ignore):
        if GIT_DIRNAME in subdirs and (directory / GIT_DIRNAME).is_dir():
            repos.append(directory)
    return repos


def scan_commit(repo: Path, commit: CommitRef, config: "ScanConfig") -> UnitOutcome:
    """Scan the blobs *commit* introduced. Git failures are soft."""
    unit = f"{repo}@{commit.sha}"
    try:
        blobs = [
            b for b in changed_blobs(repo, commit)
            if not config.ignore.is_ignored(repo / b.path)
        ]
        contents = read_blobs(repo, (b.sha for b in blobs))
    except GitError as exc:
        logger.warning("Cannot read commit %s: %s", unit, exc)
        return UnitOutcome(kind="commit", unit=unit, error=str(exc))

    findings: List[Finding] = []
    repository = str(repo)
    for blob in blobs:
        data = contents[blob.sha]
        if config.max_file_size is not None and len(data) > config.max_file_size:
            continue
        text = decode_text(data)
        if text is None:
            continue

        def locate(line_no: int, path: str = blob.path) -> Location:
            return Location(path=path, line=line_no, repository=repository, commit=commit.sha)

        findings.extend(scan_text(text, config.rules.rules, locate))
    return UnitOutcome(kind="commit", unit=unit, findings=tuple(findings))


def scan_repository(repo: Path, config: "ScanConfig", executor: Executor) -> List[UnitOutcome]:
    """Scan one repository's history, one unit of work per commit."""
    try:
        open_repository(repo)
        commits = list_commits(repo)
    except GitError as exc:
        logger.warning("Skipping repository %s: %s", repo, exc)
        return [UnitOutcome(kind="repository", unit=str(repo), error=str(exc))]

    logger.info("Scanning %d commit(s) in %s", len(commits), repo)
    futures = [executor.submit(scan_commit, repo, commit, config) for commit in commits]
    outcomes = [UnitOutcome(kind="repository", unit=str(repo))]
    outcomes.extend(future.result() for future in as_completed(futures))
    return outcomes


def scan_history(root: Path, config: "ScanConfig", executor: Executor) -> List[UnitOutcome]:
    """Scan the history of every repository found under *root*."""
    outcomes: List[UnitOutcome] = []
    for repo in find_repositories(root, config.ignore):
        outcomes.extend(scan_repository(repo, config, executor))
    return outcomes
