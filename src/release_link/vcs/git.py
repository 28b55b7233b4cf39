"""Git access for collecting the commits of a release.

Commits are read with ``git log`` in the format
``%H%x1f%B%x1f%D%x1e`` (sha, raw body and decorations separated by unit
separators, one record per record separator) and returned oldest first,
which is the order the scanner requires.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from release_link.exceptions import CommitNotFoundError, GitError

logger = logging.getLogger(__name__)

SHA_PATTERN = re.compile(r"^[0-9a-f]{7,40}$", re.IGNORECASE)
LOG_FORMAT = "--format=%H%x1f%B%x1f%D%x1e"
FIELD_SEPARATOR = "\x1f"
RECORD_SEPARATOR = "\x1e"

COMMON_BRANCHES = frozenset({"main", "master", "develop", "dev", "staging", "production", "prod"})

MERGE_MESSAGE_BRANCH_PATTERN = re.compile(
    r"Merge pull request #[0-9]+ from [^/]+/(\S+)", re.IGNORECASE
)
HTTPS_REMOTE_PATTERN = re.compile(
    r"^https?://(?:[^@]+@)?(?:github\.com|gitlab\.com|bitbucket\.org)[/:]([^/]+)/([^/]+?)(?:\.git)?$"
)
SSH_REMOTE_PATTERN = re.compile(
    r"^git@(?:github\.com|gitlab\.com|bitbucket\.org):([^/]+)/([^/]+?)(?:\.git)?$"
)


@dataclass(frozen=True)
class CommitRecord:
    """A commit as seen by the scanner.

    Attributes:
        sha: Full commit SHA
        branch_name: Branch derived from the merge message or decorations
        message: Raw commit message
    """

    sha: str
    branch_name: str | None = None
    message: str | None = None


@dataclass(frozen=True)
class GitInfo:
    """State of HEAD in the working copy."""

    branch: str | None
    commit: str | None
    message: str | None


@dataclass(frozen=True)
class RepoInfo:
    """Owner and name parsed from a hosted remote URL."""

    owner: str
    name: str


def normalize_pathspec(pattern: str) -> str:
    """Strip leading ``./`` or ``/`` so patterns are relative to the repo root."""
    return re.sub(r"^(?:\./|/)+", "", pattern.strip()).strip()


def build_pathspec_args(include_paths: list[str] | None) -> list[str]:
    """Build ``git log`` pathspec arguments from include globs.

    ``:(top,glob)`` makes patterns relative to the repository root and
    enables ``**`` for recursive matching.

    Args:
        include_paths: Glob patterns, or None

    Returns:
        ``["--", ":(top,glob)<pattern>", ...]``, or an empty list
    """
    if not include_paths:
        return []

    patterns = [normalize_pathspec(p) for p in include_paths]
    patterns = [p for p in patterns if p]
    if not patterns:
        return []

    return ["--", *(f":(top,glob){p}" for p in patterns)]


def extract_branch_name(raw_decorations: str | None) -> str | None:
    """Pick the most relevant branch name from ``%D`` decorations.

    Feature branches win over common branches (main, develop, ...); among
    several candidates the longest name wins.
    """
    if not raw_decorations or not raw_decorations.strip():
        return None

    refs = [ref.strip() for ref in raw_decorations.split(",")]
    branches = [re.sub(r"^HEAD ->\s*", "", ref) for ref in refs]
    branches = [
        ref
        for ref in branches
        if ref and not ref.lower().startswith("tag:") and not ref.startswith("origin/HEAD")
    ]
    if not branches:
        return None

    normalized = [re.sub(r"^remotes/[^/]+/", "", branch) for branch in branches]
    candidates = [branch for branch in normalized if branch.lower() not in COMMON_BRANCHES]
    preferred = candidates or normalized

    return max(preferred, key=len)


def extract_branch_name_from_merge_message(message: str | None) -> str | None:
    """Extract the head branch from ``Merge pull request #N from owner/branch``."""
    if not message:
        return None
    match = MERGE_MESSAGE_BRANCH_PATTERN.search(message)
    return match.group(1) if match else None


def parse_commit_chunk(chunk: str) -> CommitRecord:
    """Parse one ``git log`` record into a CommitRecord.

    The branch named in a merge message is preferred over decorations.
    """
    sha, _, rest = chunk.partition(FIELD_SEPARATOR)
    raw_message, _, raw_decorations = rest.partition(FIELD_SEPARATOR)

    message = raw_message.strip()
    branch_name = extract_branch_name_from_merge_message(message) or extract_branch_name(
        raw_decorations
    )

    return CommitRecord(sha=sha.strip(), branch_name=branch_name, message=message)


def parse_log_output(output: str) -> list[CommitRecord]:
    """Parse ``git log`` output into records, in the order git printed them."""
    return [parse_commit_chunk(chunk) for chunk in output.split(RECORD_SEPARATOR) if chunk.strip()]


class GitRepository:
    """Thin wrapper around the git command line for one repository."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else Path.cwd()

        try:
            self._run("rev-parse", "--git-dir")
        except GitError as e:
            raise GitError(f"Not a git repository: {self.path}", stderr=e.stderr) from e

    def _run(self, *args: str) -> str:
        """Run a git command and return its stdout.

        Raises:
            GitError: If git is missing or the command fails
        """
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                check=True,
                cwd=self.path,
            )
        except FileNotFoundError as e:
            raise GitError("git executable not found") from e
        except subprocess.CalledProcessError as e:
            raise GitError(f"git {args[0]} failed with exit code {e.returncode}", stderr=e.stderr) from e
        return result.stdout

    def current_info(self) -> GitInfo:
        """Return branch, sha and message of HEAD (all None on failure)."""
        try:
            branch = self._run("rev-parse", "--abbrev-ref", "HEAD").strip()
            commit = self._run("rev-parse", "HEAD").strip()
            message = self._run("log", "-1", "--pretty=%B").strip()
        except GitError as e:
            logger.warning("Could not read HEAD: %s", e)
            return GitInfo(branch=None, commit=None, message=None)

        return GitInfo(
            branch="detached" if branch == "HEAD" else branch,
            commit=commit,
            message=message,
        )

    def commit_exists(self, sha: str) -> bool:
        """Check whether a commit object is present locally."""
        try:
            self._run("cat-file", "-e", f"{sha}^{{commit}}")
        except GitError as e:
            if e.stderr and "Not a valid object" not in e.stderr:
                logger.debug("Unexpected error checking %s: %s", sha, e)
            return False
        return True

    def is_merge_commit(self, sha: str) -> bool:
        """Check whether a commit has more than one parent."""
        if not SHA_PATTERN.match(sha):
            logger.warning("Invalid SHA format %r", sha)
            return False

        try:
            parents = self._run("log", "-1", "--format=%P", sha).strip()
        except GitError as e:
            logger.warning("Could not read parents of %s: %s", sha, e)
            return False
        return " " in parents

    def get_commit(self, sha: str) -> CommitRecord | None:
        """Return a single commit without path filtering."""
        if not SHA_PATTERN.match(sha):
            logger.warning("Invalid SHA format %r", sha)
            return None

        try:
            output = self._run("log", "-1", LOG_FORMAT, sha)
        except GitError as e:
            logger.warning("Could not read commit %s: %s", sha, e)
            return None

        records = parse_log_output(output)
        return records[0] if records else None

    def resolve_commit(self, ref: str) -> str:
        """Resolve a branch, tag or abbreviated SHA to a full commit SHA.

        A hex SHA that is not in the local history is returned unchanged, so
        a shallow clone can still be deepened to reach it.

        Raises:
            GitError: If ref is neither a known revision nor a SHA
        """
        try:
            return self._run("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}").strip()
        except GitError as e:
            if SHA_PATTERN.match(ref):
                logger.debug("Commit %s not in local history, keeping it as given", ref)
                return ref
            raise GitError(f"Unknown revision: {ref}", stderr=e.stderr) from e

    def ensure_commit_available(
        self,
        sha: str,
        deepen_steps: list[int] | None = None,
        *,
        remote: str = "origin",
        unshallow: bool = True,
    ) -> None:
        """Make sure a commit is present, deepening a shallow clone if needed.

        Args:
            sha: Commit that must be reachable
            deepen_steps: Successive ``--deepen`` amounts to try
            remote: Remote to fetch from
            unshallow: Fetch the full history as a last resort

        Raises:
            CommitNotFoundError: If the commit is still missing afterwards
        """
        if self.commit_exists(sha):
            return

        logger.info("Commit %s not in local history (likely shallow clone)", sha)

        strategies = [
            (["fetch", f"--deepen={step}", remote], f"Deepening by {step} commits")
            for step in (deepen_steps if deepen_steps is not None else [200, 500])
        ]
        if unshallow:
            strategies.append((["fetch", "--unshallow", remote], "Fetching full history"))

        for args, label in strategies:
            logger.info(label)
            try:
                self._run(*args)
            except GitError as e:
                logger.debug("%s failed: %s", label, e)
                continue
            if self.commit_exists(sha):
                logger.info("Found commit %s", sha)
                return

        branch = self.current_info().branch or "unknown"
        raise CommitNotFoundError(
            f'Commit {sha} not reachable from branch "{branch}" even after fetching full '
            f'history. Ensure the commit exists on branch "{branch}".'
        )

    def get_commits_between(
        self,
        from_sha: str,
        to_sha: str,
        include_paths: list[str] | None = None,
    ) -> list[CommitRecord]:
        """Return commits in ``from_sha..to_sha``, oldest first.

        When both SHAs are equal only that commit is returned. A merge
        commit at ``to_sha`` has no file changes of its own, so a path filter
        drops it; it is put back because its message carries the PR number
        and branch name.

        Args:
            from_sha: Base commit (exclusive); must already be available
            to_sha: Target commit (inclusive)
            include_paths: Glob patterns restricting the commits

        Returns:
            Commit records, oldest first
        """
        if not SHA_PATTERN.match(from_sha):
            logger.warning("Invalid from SHA format %r", from_sha)
            return []
        if not SHA_PATTERN.match(to_sha):
            logger.warning("Invalid to SHA format %r", to_sha)
            return []

        pathspec = build_pathspec_args(include_paths)
        if from_sha == to_sha:
            output = self._run("log", "-1", LOG_FORMAT, to_sha, *pathspec)
        else:
            output = self._run("log", LOG_FORMAT, f"{from_sha}..{to_sha}", *pathspec)

        # git log prints newest first
        commits = parse_log_output(output)

        if include_paths and not any(c.sha == to_sha for c in commits) and self.is_merge_commit(to_sha):
            merge_commit = self.get_commit(to_sha)
            if merge_commit is not None:
                logger.info("Including merge commit %s excluded by the path filter", to_sha)
                commits.insert(0, merge_commit)

        if not commits:
            suffix = f" with paths: {', '.join(include_paths)}" if include_paths else ""
            logger.info("No commits found between %s..%s%s", from_sha, to_sha, suffix)

        commits.reverse()
        return commits

    def get_repo_info(self, remote: str = "origin") -> RepoInfo | None:
        """Parse owner and repository name from a remote URL."""
        try:
            url = self._run("remote", "get-url", remote).strip()
        except GitError as e:
            logger.warning("Could not read remote %s: %s", remote, e)
            return None

        match = HTTPS_REMOTE_PATTERN.match(url) or SSH_REMOTE_PATTERN.match(url)
        if match is None:
            return None
        return RepoInfo(owner=match.group(1), name=match.group(2))
