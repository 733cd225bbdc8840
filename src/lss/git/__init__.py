"""Git interface layer — read-only adapter, models, history scanner."""

from lss.git.adapter import (
    GitError,
    RepositoryOpenError,
    changed_blobs,
    list_commits,
    open_repository,
    read_blobs,
)
from lss.git.history import find_repositories, scan_commit, scan_history, scan_repository
from lss.git.models import BlobRef, CommitRef

__all__ = [
    "BlobRef",
    "CommitRef",
    "GitError",
    "RepositoryOpenError",
    "changed_blobs",
    "find_repositories",
    "list_commits",
    "open_repository",
    "read_blobs",
    "scan_commit",
    "scan_history",
    "scan_repository",
]
