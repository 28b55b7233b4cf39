"""Pull request number extraction from commit messages.

GitHub leaves the PR number in the commit message in two well-known
shapes, tried first:

- squash merge: ``Title (#123)`` at the end of the first line
- merge commit: ``Merge pull request #123 from owner/branch``

Only when neither shape is present is every ``#<digits>`` in the message
taken as a PR number.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from release_link.core.reverts import is_revert_message, resolve_branch_revert

if TYPE_CHECKING:
    from release_link.vcs.git import CommitRecord

logger = logging.getLogger(__name__)

SQUASH_PATTERN = re.compile(r"\(#([0-9]+)\)$")
MERGE_PATTERN = re.compile(r"^Merge pull request #([0-9]+)", re.IGNORECASE)
FALLBACK_PATTERN = re.compile(r"#([0-9]+)")


def extract_pull_request_numbers(commit: CommitRecord) -> list[int]:
    """Extract PR numbers referenced by a commit.

    Reverts reference the PR they undo rather than a new one, so a
    ``Revert "..."`` message or an odd revert depth in the branch name
    yields nothing. A revert of a revert is extracted normally.

    Args:
        commit: Commit to inspect

    Returns:
        Deduplicated PR numbers in discovery order
    """
    message = commit.message or ""

    if is_revert_message(message):
        logger.debug("Skipping revert commit %s with message %r", commit.sha, message)
        return []

    if resolve_branch_revert(commit.branch_name).is_revert:
        logger.debug("Skipping revert branch %r of commit %s", commit.branch_name, commit.sha)
        return []

    numbers: list[int] = []

    title = re.split(r"\r?\n", message, maxsplit=1)[0]
    squash = SQUASH_PATTERN.search(title)
    if squash:
        logger.debug("Found PR #%s in commit %s using squash format", squash.group(1), commit.sha)
        numbers.append(int(squash.group(1)))

    merge = MERGE_PATTERN.match(message)
    if merge:
        logger.debug("Found PR #%s in commit %s using merge format", merge.group(1), commit.sha)
        numbers.append(int(merge.group(1)))

    if not numbers:
        for match in FALLBACK_PATTERN.finditer(message):
            logger.debug("Found PR #%s in commit %s in message text", match.group(1), commit.sha)
            numbers.append(int(match.group(1)))

    return list(dict.fromkeys(numbers))
