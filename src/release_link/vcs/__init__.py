"""Version control access for release-link."""

from __future__ import annotations

from release_link.vcs.git import CommitRecord, GitInfo, GitRepository, RepoInfo

__all__ = [
    "CommitRecord",
    "GitInfo",
    "GitRepository",
    "RepoInfo",
]
