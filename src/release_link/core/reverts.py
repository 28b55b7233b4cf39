"""Revert wrapper resolution for branch names and commit messages.

GitHub names the branch of a revert PR ``revert-<pr>-<original branch>`` and
``git revert`` titles the commit ``Revert "<original title>"``. Both forms
nest: reverting a revert yields ``revert-572-revert-571-<branch>`` and
``Revert "Revert "<title>""``.

The nesting depth decides the net effect of a commit:

- depth 0: an ordinary change
- odd depth: the change is, net, undone
- even depth >= 2: a revert of a revert, i.e. the change is re-applied
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# Upper bound on unwrapping iterations for pathological input
MAX_REVERT_DEPTH = 64

BRANCH_REVERT_SEGMENT_PATTERN = re.compile(r"(?:^|/)(?=revert-[0-9]+-)", re.IGNORECASE)
BRANCH_REVERT_PREFIX_PATTERN = re.compile(r"revert-[0-9]+-", re.IGNORECASE)
# Inner quote is matched greedily up to the last quote of the first line
MESSAGE_REVERT_PATTERN = re.compile(r'^Revert "(?P<inner>.*)"', re.IGNORECASE)
MESSAGE_REVERT_PREFIX_PATTERN = re.compile(r'^Revert "', re.IGNORECASE)


@dataclass(frozen=True)
class RevertInfo:
    """Result of unwrapping nested revert wrappers.

    Attributes:
        depth: Number of wrappers stripped
        inner: Fully unwrapped text
    """

    depth: int
    inner: str

    @property
    def is_revert(self) -> bool:
        """True when the text is, net, an undo (odd depth)."""
        return self.depth % 2 == 1


def resolve_branch_revert(branch_name: str | None) -> RevertInfo:
    """Unwrap ``revert-<digits>-`` prefixes from a branch name.

    Any ``owner/`` style prefix in front of the first revert segment is
    dropped, so ``org/revert-571-romain/bac-39`` resolves to depth 1 with
    inner text ``romain/bac-39``.

    Args:
        branch_name: Branch name, or None

    Returns:
        Depth and the branch name with all revert prefixes removed
    """
    text = branch_name or ""

    segment = BRANCH_REVERT_SEGMENT_PATTERN.search(text)
    if segment is None:
        return RevertInfo(depth=0, inner=text)

    inner = text[segment.end() :]
    depth = 0
    while depth < MAX_REVERT_DEPTH:
        match = BRANCH_REVERT_PREFIX_PATTERN.match(inner)
        if match is None:
            break
        inner = inner[match.end() :]
        depth += 1

    return RevertInfo(depth=depth, inner=inner)


def resolve_message_revert(message: str | None) -> RevertInfo:
    """Unwrap ``Revert "..."`` wrappers from a commit message.

    Each iteration keeps only the quoted content and discards anything after
    the closing quote (including the commit body). A wrapper whose closing
    quote is missing ends the unwrapping at the last good depth.

    Args:
        message: Commit message, or None

    Returns:
        Depth and the innermost quoted text
    """
    inner = message or ""
    depth = 0

    while depth < MAX_REVERT_DEPTH:
        match = MESSAGE_REVERT_PATTERN.match(inner)
        if match is None:
            break
        inner = match.group("inner")
        depth += 1

    return RevertInfo(depth=depth, inner=inner)


def is_revert_message(message: str | None) -> bool:
    """Check whether a message starts with a ``Revert "`` wrapper."""
    return bool(message) and MESSAGE_REVERT_PREFIX_PATTERN.match(message) is not None
