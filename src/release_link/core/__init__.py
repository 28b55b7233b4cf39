"""Core commit classification logic for release-link.

This module contains the fundamental building blocks:
- Revert wrapper resolution for branch names and messages
- Issue identifier extraction (branch names and magic words)
- Pull request number extraction
- Commit scanning with last-write-wins aggregation

Nothing in here performs I/O.
"""

from __future__ import annotations

from release_link.core.identifiers import (
    IdentifierMatch,
    IssueField,
    SourcedIdentifier,
    extract_added_identifiers,
    extract_reverted_identifiers,
    find_added_identifiers,
    find_all_identifiers,
    find_magic_word_identifiers,
    find_reverted_identifiers,
)
from release_link.core.pull_requests import extract_pull_request_numbers
from release_link.core.reverts import RevertInfo, resolve_branch_revert, resolve_message_revert
from release_link.core.scan import (
    AuditTrail,
    CommitScanner,
    IssueReference,
    IssueSource,
    PullRequestReference,
    ScanResult,
    scan_commits,
)

__all__ = [
    # Scanning
    "AuditTrail",
    "CommitScanner",
    # Identifiers
    "IdentifierMatch",
    "IssueField",
    "IssueReference",
    "IssueSource",
    "PullRequestReference",
    # Reverts
    "RevertInfo",
    "ScanResult",
    "SourcedIdentifier",
    "extract_added_identifiers",
    # Pull requests
    "extract_pull_request_numbers",
    "extract_reverted_identifiers",
    "find_added_identifiers",
    "find_all_identifiers",
    "find_magic_word_identifiers",
    "find_reverted_identifiers",
    "resolve_branch_revert",
    "resolve_message_revert",
    "scan_commits",
]
