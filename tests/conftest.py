"""Shared test fixtures — rule sets, scan configs, temp trees, temp git repos."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from lss.config.schema import ScanConfig
from lss.rules.parser import parse_rules
from lss.rules.registry import RuleSet
from lss.scanner.ignore import IgnoreResolver

AWS_RULE = "AWS Key::AKIA[0-9A-Z]{16}::aws,credential::0.9"
AWS_LINE = "AKIA1234567890ABCDEF"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep the user's real config and LSS_* variables out of every test."""
    home = tmp_path_factory.mktemp("config-home")
    for var in ("LSS_ENTROPY_THRESHOLD", "LSS_MIN_CONFIDENCE", "LSS_WORKERS", "LSS_IGNORE"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    monkeypatch.setenv("LSS_CONFIG", str(home / "lss" / "config.toml"))
    return home


@pytest.fixture
def make_config():
    """Factory for a ScanConfig built from rule text instead of the bundled rules."""

    def _make(
        rules_text: str = AWS_RULE,
        *,
        ignore: Iterable[str] = (),
        entropy_threshold: float = 0.0,
        min_confidence: float = 0.0,
        include_tags: Iterable[str] = (),
        exclude_tags: Iterable[str] = (),
        history: bool = True,
        max_file_size: Optional[int] = None,
    ) -> ScanConfig:
        return ScanConfig(
            rules=RuleSet(parse_rules(rules_text)),
            ignore=IgnoreResolver.from_strings(ignore),
            entropy_threshold=entropy_threshold,
            min_confidence=min_confidence,
            include_tags=frozenset(include_tags),
            exclude_tags=frozenset(exclude_tags),
            workers=4,
            history=history,
            max_file_size=max_file_size,
        )

    return _make


@pytest.fixture
def write_tree(tmp_path: Path):
    """Write ``{relative_path: content}`` under a fresh directory and return it."""

    def _write(files: Dict[str, str | bytes], root: Optional[Path] = None) -> Path:
        base = root or (tmp_path / "tree")
        base.mkdir(parents=True, exist_ok=True)
        for rel, content in files.items():
            target = base / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")
        return base

    return _write


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, capture_output=True, text=True, check=True,
    )
    return result.stdout


def git_commit(repo: Path, files: Dict[str, str | bytes], message: str = "change") -> str:
    """Write *files*, commit them, and return the new commit sha."""
    for rel, content in files.items():
        target = repo / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding="utf-8")
    _git(repo, "add", "-A")
    _git(repo, "commit", "-q", "-m", message)
    return _git(repo, "rev-parse", "HEAD").strip()


def git_remove(repo: Path, rel: str, message: str = "remove") -> str:
    _git(repo, "rm", "-q", rel)
    _git(repo, "commit", "-q", "-m", message)
    return _git(repo, "rev-parse", "HEAD").strip()


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create an empty temporary git repository (no commits yet)."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    _git(repo, "config", "user.email", "test@test.com")
    _git(repo, "config", "user.name", "Test")
    _git(repo, "config", "commit.gpgsign", "false")
    return repo
