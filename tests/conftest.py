"""Shared pytest fixtures."""

from __future__ import annotations

import shutil
import subprocess
from typing import TYPE_CHECKING

import pytest

from release_link.vcs.git import CommitRecord

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def add_commit() -> CommitRecord:
    """A merge commit whose branch adds BAC-39."""
    return CommitRecord(
        sha="a2",
        branch_name="romain/bac-39",
        message="Merge pull request #571 from org/romain/bac-39\n\nAdd TEST variable",
    )


@pytest.fixture
def revert_commit() -> CommitRecord:
    """A merge commit of GitHub's revert branch for BAC-39."""
    return CommitRecord(
        sha="r2",
        branch_name="revert-571-romain/bac-39",
        message='Merge pull request #572 from org/revert-571-romain/bac-39\n\nRevert "Add TEST variable"',
    )


@pytest.fixture
def reapply_commit() -> CommitRecord:
    """A merge commit reverting the revert of BAC-39."""
    return CommitRecord(
        sha="ra2",
        branch_name="revert-572-revert-571-romain/bac-39",
        message="Merge pull request #573 from org/revert-572-revert-571-romain/bac-39\n\nCustom name",
    )


def _git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=repo,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def temp_git_repo(tmp_path: Path) -> Path:
    """Create a git repository with an initial commit."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q", "-b", "main")
    _git(repo, "config", "user.email", "test@test.com")
    _git(repo, "config", "user.name", "Test")
    _git(repo, "config", "commit.gpgsign", "false")

    (repo / "README.md").write_text("# test\n")
    _git(repo, "add", ".")
    _git(repo, "commit", "-q", "-m", "Initial commit")
    return repo


@pytest.fixture
def git():
    """Run git commands in a repository and return stdout."""
    return _git
