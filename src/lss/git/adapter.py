"""Git subprocess wrapper — read-only plumbing over the object store.

Every command here only reads: nothing is checked out, no refs are touched,
and ``GIT_OPTIONAL_LOCKS=0`` keeps git from refreshing the index.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from lss.errors import LssError
from lss.git.models import GITLINK_MODE, BlobRef, CommitRef
from lss.scanner.ignore import GIT_DIRNAME

DEFAULT_TIMEOUT = 120


class GitError(LssError):
    """Raised when git is unavailable or returns an unexpected error."""


class RepositoryOpenError(GitError):
    """Raised when a directory cannot be opened as a git repository."""


def _git_env() -> Dict[str, str]:
    env = dict(os.environ)
    env["GIT_OPTIONAL_LOCKS"] = "0"
    env["GIT_TERMINAL_PROMPT"] = "0"
    env["LC_ALL"] = "C"
    return env


def _run_git(
    args: List[str],
    cwd: Path,
    *,
    input: Optional[bytes] = None,
    timeout: int = DEFAULT_TIMEOUT,
) -> bytes:
    """Run a git command and return raw stdout. Raises GitError on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            input=input,
            capture_output=True,
            timeout=timeout,
            env=_git_env(),
        )
    except FileNotFoundError:
        raise GitError("git is not installed or not on PATH")
    except subprocess.TimeoutExpired:
        raise GitError(f"git command timed out after {timeout}s: git {' '.join(args)}")
    except OSError as exc:
        raise GitError(f"cannot run git in {cwd}: {exc}") from exc

    if result.returncode != 0:
        stderr = result.stderr.decode("utf-8", errors="replace").strip()
        raise GitError(f"git {args[0]} failed: {stderr or f'exit status {result.returncode}'}")
    return result.stdout


def open_repository(path: Path) -> Path:
    """Check that *path* is a readable repository; return its git dir.

    Git falls back to an enclosing repository when ``path/.git`` is broken,
    so the git dir it resolves must be *path*'s own.
    """
    try:
        out = _run_git(["rev-parse", "--git-dir"], cwd=path)
    except GitError as exc:
        raise RepositoryOpenError(f"cannot open repository {path}: {exc}") from exc
    git_dir = Path(out.decode("utf-8", errors="replace").strip())
    if not git_dir.is_absolute():
        git_dir = path / git_dir
    expected = path / GIT_DIRNAME
    if git_dir.resolve() != expected.resolve():
        raise RepositoryOpenError(
            f"cannot open repository {path}: {expected} is not a valid git directory"
        )
    return git_dir


def has_head(repo: Path) -> bool:
    """False for a freshly initialised repository with no commits."""
    try:
        _run_git(["rev-parse", "--verify", "--quiet", "HEAD^{commit}"], cwd=repo)
    except GitError:
        return False
    return True


def list_commits(repo: Path) -> List[CommitRef]:
    """Commits reachable from HEAD, newest first."""
    if not has_head(repo):
        return []
    out = _run_git(["rev-list", "--parents", "HEAD"], cwd=repo).decode("ascii")
    commits: List[CommitRef] = []
    for line in out.splitlines():
        fields = line.split()
        if fields:
            commits.append(CommitRef(sha=fields[0], parents=tuple(fields[1:])))
    return commits


def _split_z(data: bytes) -> List[str]:
    return [item.decode("utf-8", errors="surrogateescape") for item in data.split(b"\0") if item]


def tree_blobs(repo: Path, commit: str) -> List[BlobRef]:
    """Every blob in *commit*'s tree (used for root commits)."""
    out = _run_git(["ls-tree", "-r", "-z", "--full-tree", commit], cwd=repo)
    blobs: List[BlobRef] = []
    for record in _split_z(out):
        # <mode> SP <type> SP <sha> TAB <path>
        meta, _, path = record.partition("\t")
        mode, obj_type, sha = meta.split(" ")
        if obj_type == "blob":
            blobs.append(BlobRef(path=path, sha=sha, mode=mode))
    return blobs


def changed_blobs(repo: Path, commit: CommitRef) -> List[BlobRef]:
    """Blobs added or modified by *commit* relative to its first parent."""
    if commit.is_root:
        return tree_blobs(repo, commit.sha)

    out = _run_git(
        [
            "diff-tree", "-r", "-z", "--no-renames", "--diff-filter=AMT",
            commit.first_parent, commit.sha,
        ],
        cwd=repo,
    )
    items = _split_z(out)
    blobs: List[BlobRef] = []
    # Records come in pairs: ":<old mode> <new mode> <old sha> <new sha> <status>", <path>
    for meta, path in zip(items[0::2], items[1::2]):
        _old_mode, new_mode, _old_sha, new_sha, _status = meta.lstrip(":").split(" ")
        if new_mode == GITLINK_MODE:
            continue
        blobs.append(BlobRef(path=path, sha=new_sha, mode=new_mode))
    return blobs


def read_blobs(repo: Path, shas: Iterable[str]) -> Dict[str, bytes]:
    """Read blob contents straight from the object store (``cat-file --batch``)."""
    wanted = list(dict.fromkeys(shas))
    if not wanted:
        return {}
    out = _run_git(["cat-file", "--batch"], cwd=repo, input="\n".join(wanted).encode("ascii") + b"\n")

    contents: Dict[str, bytes] = {}
    pos = 0
    for sha in wanted:
        newline = out.index(b"\n", pos)
        header = out[pos:newline].decode("ascii", errors="replace").split()
        pos = newline + 1
        if len(header) == 2 and header[1] == "missing":
            raise GitError(f"object {sha} is missing from {repo}")
        size = int(header[2])
        contents[sha] = out[pos:pos + size]
        pos += size + 1  # content is followed by a newline
    return contents
