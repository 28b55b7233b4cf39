"""Exception hierarchy for release-link.

The commit classification core never raises for malformed input; these
exceptions belong to the collaborators around it (git, configuration, CLI).
"""

from __future__ import annotations


class ReleaseLinkError(Exception):
    """Base class for all release-link errors."""


class GitError(ReleaseLinkError):
    """A git command failed."""

    def __init__(self, message: str, stderr: str | None = None) -> None:
        super().__init__(message)
        self.stderr = stderr

    def __str__(self) -> str:
        base = super().__str__()
        if self.stderr:
            return f"{base}: {self.stderr.strip()}"
        return base


class CommitNotFoundError(GitError):
    """A commit is not reachable, even after deepening the history."""


class ConfigError(ReleaseLinkError):
    """Configuration could not be read."""


class ConfigNotFoundError(ConfigError):
    """No pyproject.toml was found."""


class ConfigValidationError(ConfigError):
    """Configuration values are invalid."""
