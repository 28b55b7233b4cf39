"""Commit scanning: fold an ordered commit sequence into release links.

The scanner walks commits oldest first. For every commit it records which
issues were reverted, then which were added, then which pull requests were
referenced. An issue seen several times ends up in the list of its most
recent action (last write wins), while the audit trail keeps every
observation for diagnostics.

Commits must be supplied oldest first; reversed input silently inverts
every last-write-wins outcome.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from release_link.core.identifiers import (
    IssueField,
    SourcedIdentifier,
    find_added_identifiers,
    find_reverted_identifiers,
)
from release_link.core.pull_requests import extract_pull_request_numbers

if TYPE_CHECKING:
    from collections.abc import Iterable

    from release_link.vcs.git import CommitRecord

logger = logging.getLogger(__name__)


class IssueAction(str, Enum):
    """Final state of an issue within a scan."""

    ADDED = "added"
    REVERTED = "reverted"


@dataclass(frozen=True)
class IssueReference:
    """The winning classification of an issue and the commit behind it."""

    identifier: str
    commit_sha: str

    def to_dict(self) -> dict[str, str]:
        return {"identifier": self.identifier, "commitSha": self.commit_sha}


@dataclass(frozen=True)
class PullRequestReference:
    """A pull request number and the commit it was found in."""

    number: int
    commit_sha: str
    raw_message: str

    def to_dict(self) -> dict[str, Any]:
        return {"sha": self.commit_sha, "number": self.number, "value": self.raw_message}


@dataclass(frozen=True)
class IssueSource:
    """One audit observation of an issue identifier.

    Attributes:
        sha: Commit the identifier was seen in
        field: Commit field it was extracted from
        value: Raw branch name or message
    """

    sha: str
    field: IssueField
    value: str

    def to_dict(self) -> dict[str, str]:
        return {"sha": self.sha, "source": self.field.value, "value": self.value}


@dataclass
class AuditTrail:
    """Append-only record of everything a scan observed.

    Used for diagnostics only; classification never reads it back.
    """

    inspected_shas: list[str] = field(default_factory=list)
    issues: dict[str, list[IssueSource]] = field(default_factory=dict)
    reverted_issues: dict[str, list[IssueSource]] = field(default_factory=dict)
    pull_requests: list[PullRequestReference] = field(default_factory=list)
    include_paths: list[str] | None = None

    def record_issue(self, identifier: str, source: IssueSource) -> None:
        self.issues.setdefault(identifier, []).append(source)

    def record_reverted_issue(self, identifier: str, source: IssueSource) -> None:
        self.reverted_issues.setdefault(identifier, []).append(source)

    def copy(self) -> AuditTrail:
        return AuditTrail(
            inspected_shas=list(self.inspected_shas),
            issues={key: list(sources) for key, sources in self.issues.items()},
            reverted_issues={key: list(sources) for key, sources in self.reverted_issues.items()},
            pull_requests=list(self.pull_requests),
            include_paths=None if self.include_paths is None else list(self.include_paths),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "inspectedShas": list(self.inspected_shas),
            "issues": {
                key: [source.to_dict() for source in sources] for key, sources in self.issues.items()
            },
            "revertedIssues": {
                key: [source.to_dict() for source in sources]
                for key, sources in self.reverted_issues.items()
            },
            "pullRequests": [pr.to_dict() for pr in self.pull_requests],
            "includePaths": self.include_paths,
        }


@dataclass(frozen=True)
class ScanResult:
    """Outcome of scanning a commit sequence.

    ``added_issues`` and ``reverted_issues`` are disjoint by identifier.
    """

    added_issues: list[IssueReference]
    reverted_issues: list[IssueReference]
    pull_request_numbers: list[int]
    audit_trail: AuditTrail

    @property
    def added_identifiers(self) -> list[str]:
        return [ref.identifier for ref in self.added_issues]

    @property
    def reverted_identifiers(self) -> list[str]:
        return [ref.identifier for ref in self.reverted_issues]

    def to_dict(self) -> dict[str, Any]:
        return {
            "addedIssues": [ref.to_dict() for ref in self.added_issues],
            "revertedIssues": [ref.to_dict() for ref in self.reverted_issues],
            "pullRequestNumbers": list(self.pull_request_numbers),
            "auditTrail": self.audit_trail.to_dict(),
        }


@dataclass(frozen=True)
class _LastAction:
    action: IssueAction
    reference: IssueReference
    sequence: int


@dataclass
class ScanState:
    """Accumulator threaded through the commit fold."""

    last_action: dict[str, _LastAction] = field(default_factory=dict)
    pull_request_numbers: list[int] = field(default_factory=list)
    audit_trail: AuditTrail = field(default_factory=AuditTrail)
    sequence: int = 0

    def mark(self, identifier: str, action: IssueAction, commit_sha: str) -> None:
        self.sequence += 1
        self.last_action[identifier] = _LastAction(
            action=action,
            reference=IssueReference(identifier=identifier, commit_sha=commit_sha),
            sequence=self.sequence,
        )


def _field_value(commit: CommitRecord, issue_field: IssueField) -> str:
    if issue_field is IssueField.BRANCH_NAME:
        return commit.branch_name or ""
    return commit.message or ""


def _source(commit: CommitRecord, found: SourcedIdentifier) -> IssueSource:
    return IssueSource(sha=commit.sha, field=found.field, value=_field_value(commit, found.field))


def fold_commit(state: ScanState, commit: CommitRecord) -> ScanState:
    """Fold a single commit into the scan state.

    Reverts are applied before additions so that a commit which both
    reverts and re-adds the same issue leaves it added.
    """
    audit = state.audit_trail
    audit.inspected_shas.append(commit.sha)

    for found in find_reverted_identifiers(commit):
        audit.record_reverted_issue(found.identifier, _source(commit, found))
        state.mark(found.identifier, IssueAction.REVERTED, commit.sha)
        logger.debug(
            "Detected reverted issue %s from %s of commit %s", found.identifier, found.field, commit.sha
        )

    for found in find_added_identifiers(commit):
        audit.record_issue(found.identifier, _source(commit, found))
        state.mark(found.identifier, IssueAction.ADDED, commit.sha)
        logger.debug("Detected issue %s from %s of commit %s", found.identifier, found.field, commit.sha)

    for number in extract_pull_request_numbers(commit):
        if number in state.pull_request_numbers:
            continue
        state.pull_request_numbers.append(number)
        audit.pull_requests.append(
            PullRequestReference(number=number, commit_sha=commit.sha, raw_message=commit.message or "")
        )
        logger.debug("Found pull request #%d in commit %s", number, commit.sha)

    return state


class CommitScanner:
    """Incremental commit scanner.

    Feeding a prefix of a commit sequence and then the remainder gives the
    same result as feeding the whole sequence at once.

    Example:
        >>> from release_link.vcs.git import CommitRecord
        >>> scanner = CommitScanner()
        >>> scanner.feed([CommitRecord("a1", "user/eng-1", None)]).result().added_identifiers
        ['ENG-1']
    """

    def __init__(self, include_paths: list[str] | None = None) -> None:
        self._state = ScanState(audit_trail=AuditTrail(include_paths=include_paths))

    def process(self, commit: CommitRecord) -> CommitScanner:
        """Fold one commit into the running state."""
        self._state = fold_commit(self._state, commit)
        return self

    def feed(self, commits: Iterable[CommitRecord]) -> CommitScanner:
        """Fold commits, oldest first."""
        for commit in commits:
            self.process(commit)
        return self

    def result(self) -> ScanResult:
        """Partition the current state into a new ScanResult.

        Issues are ordered by the commit order of their winning action.
        """
        winners = sorted(self._state.last_action.values(), key=lambda last: last.sequence)
        return ScanResult(
            added_issues=[last.reference for last in winners if last.action is IssueAction.ADDED],
            reverted_issues=[
                last.reference for last in winners if last.action is IssueAction.REVERTED
            ],
            pull_request_numbers=list(self._state.pull_request_numbers),
            audit_trail=self._state.audit_trail.copy(),
        )


def scan_commits(
    commits: Iterable[CommitRecord],
    include_paths: list[str] | None = None,
) -> ScanResult:
    """Scan commits, oldest first, into added/reverted issues and PR numbers.

    Args:
        commits: Commits ordered oldest to newest
        include_paths: Path filters used to select the commits, recorded in
            the audit trail only

    Returns:
        Final classification and the audit trail
    """
    result = CommitScanner(include_paths).feed(commits).result()

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Audit trail: %s", json.dumps(result.audit_trail.to_dict(), indent=2))

    return result
