"""Issue identifier extraction from branch names and commit messages.

An issue identifier is a team key of 1-7 word characters, a hyphen and an
issue number of 1-9 digits (``ENG-123``). Branch names are treated as
intentional signals, so every identifier in a branch name counts. Commit
messages are noisier; an identifier there only counts when it follows a
magic word such as ``Fixes`` or ``Part of``.

The added and reverted contracts are revert aware: a commit whose branch or
message is, net, a revert adds nothing, and its unwrapped identifiers are
reported as reverted instead.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from release_link.core.reverts import resolve_branch_revert, resolve_message_revert

if TYPE_CHECKING:
    from release_link.vcs.git import CommitRecord

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 7
MAX_NUMBER_LENGTH = 9

# Underscores count as boundaries (``LIN-1_LIN-2``); a trailing ``.digit``
# marks a version string such as ``ios-1.57.0`` and is never an identifier.
ISSUE_IDENTIFIER_PATTERN = re.compile(
    rf"(?:^|\b|(?<=_))((\w{{1,{MAX_KEY_LENGTH}}})-([0-9]{{1,{MAX_NUMBER_LENGTH}}}))"
    r"(?:$|\b|(?=_))(?!\.\d)",
    re.IGNORECASE | re.ASCII,
)

_LOOSE_IDENTIFIER = rf"\b\w{{1,{MAX_KEY_LENGTH}}}-[0-9]{{1,{MAX_NUMBER_LENGTH}}}(?:\b|(?=_))"

LINEAR_ISSUE_URL_PATTERN = re.compile(
    rf"https?://linear\.app/[^/\s]+/issue/({_LOOSE_IDENTIFIER})(?:/[^/\s]+)*/?",
    re.IGNORECASE | re.ASCII,
)

CLOSING_MAGIC_WORDS = (
    "close",
    "closes",
    "closed",
    "closing",
    "fix",
    "fixes",
    "fixed",
    "fixing",
    "resolve",
    "resolves",
    "resolved",
    "resolving",
    "complete",
    "completes",
    "completed",
    "completing",
)

CONTRIBUTING_MAGIC_PHRASES = (
    "ref",
    "refs",
    "references",
    "part of",
    "related to",
    "relates to",
    "contributes to",
    "towards",
    "toward",
)


def _magic_word_alternation() -> str:
    words = sorted(CLOSING_MAGIC_WORDS + CONTRIBUTING_MAGIC_PHRASES, key=len, reverse=True)
    return "|".join(r"\s+".join(re.escape(part) for part in word.split()) for word in words)


MAGIC_WORD_PATTERN = re.compile(
    rf"\b(?:{_magic_word_alternation()})(?::\s+|\s+)"
    rf"(?P<span>{_LOOSE_IDENTIFIER}(?:(?:\s*,\s*|\s*&\s*|\s+and\s+|\s+){_LOOSE_IDENTIFIER})*)",
    re.IGNORECASE | re.ASCII,
)


class IssueField(str, Enum):
    """Commit field an identifier was extracted from."""

    BRANCH_NAME = "branch_name"
    COMMIT_MESSAGE = "commit_message"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IdentifierMatch:
    """A single identifier match.

    Attributes:
        identifier: Canonical ``TEAMKEY-NUMBER`` form
        raw_text: Exact matched substring
    """

    identifier: str
    raw_text: str


@dataclass(frozen=True)
class SourcedIdentifier:
    """A canonical identifier together with the field it was found in."""

    identifier: str
    field: IssueField


def _parse_match(match: re.Match[str]) -> IdentifierMatch | None:
    raw_text, team_key, number = match.group(1), match.group(2), match.group(3)
    # LIN-0004 would not survive a round trip through int()
    if str(int(number)) != number:
        return None
    return IdentifierMatch(identifier=f"{team_key.upper()}-{int(number)}", raw_text=raw_text)


def find_all_identifiers(text: str | None) -> list[IdentifierMatch]:
    """Find every boundary-respecting identifier in text.

    Args:
        text: Text to search (branch name, captured message span, ...)

    Returns:
        Matches in order of appearance, duplicates included
    """
    if not text:
        return []

    matches = []
    for match in ISSUE_IDENTIFIER_PATTERN.finditer(text):
        parsed = _parse_match(match)
        if parsed is not None:
            matches.append(parsed)
    return matches


def rewrite_linear_urls(line: str) -> str:
    """Replace Linear issue URLs with the bare identifier they point to."""
    return LINEAR_ISSUE_URL_PATTERN.sub(r"\1", line)


def find_magic_word_identifiers(text: str | None) -> list[IdentifierMatch]:
    """Find identifiers that follow a magic word on the same line.

    ``Fixes ENG-1, ENG-2 and ENG-3`` yields all three identifiers, while a
    bare ``See ENG-4`` yields nothing.

    Args:
        text: Commit message text

    Returns:
        Matches in order of appearance, duplicates included
    """
    if not text:
        return []

    matches = []
    for line in re.split(r"\r?\n", text):
        for magic in MAGIC_WORD_PATTERN.finditer(rewrite_linear_urls(line)):
            matches.extend(find_all_identifiers(magic.group("span")))
    return matches


def _dedupe(found: list[SourcedIdentifier]) -> list[SourcedIdentifier]:
    seen: dict[str, SourcedIdentifier] = {}
    for item in found:
        seen.setdefault(item.identifier, item)
    return list(seen.values())


def find_added_identifiers(commit: CommitRecord) -> list[SourcedIdentifier]:
    """Identifiers a commit adds, with the field each one came from.

    A commit whose branch name or message is, net, a revert adds nothing.

    Args:
        commit: Commit to inspect

    Returns:
        Deduplicated identifiers, branch name first, then message
    """
    branch = resolve_branch_revert(commit.branch_name)
    message = resolve_message_revert(commit.message)

    if branch.is_revert or message.is_revert:
        logger.debug("Commit %s is a revert, it adds no issues", commit.sha)
        return []

    found = [
        SourcedIdentifier(match.identifier, IssueField.BRANCH_NAME)
        for match in find_all_identifiers(branch.inner)
    ]
    found.extend(
        SourcedIdentifier(match.identifier, IssueField.COMMIT_MESSAGE)
        for match in find_magic_word_identifiers(commit.message)
    )
    return _dedupe(found)


def find_reverted_identifiers(commit: CommitRecord) -> list[SourcedIdentifier]:
    """Identifiers a commit reverts, with the field each one came from.

    Only odd revert depths contribute; a revert of a revert is a re-applied
    change and is picked up by :func:`find_added_identifiers` instead.

    Args:
        commit: Commit to inspect

    Returns:
        Deduplicated identifiers, branch name first, then message
    """
    branch = resolve_branch_revert(commit.branch_name)
    message = resolve_message_revert(commit.message)

    if branch.depth == 0 and message.depth == 0:
        return []

    found: list[SourcedIdentifier] = []
    if branch.is_revert:
        found.extend(
            SourcedIdentifier(match.identifier, IssueField.BRANCH_NAME)
            for match in find_all_identifiers(branch.inner)
        )
    if message.is_revert:
        found.extend(
            SourcedIdentifier(match.identifier, IssueField.COMMIT_MESSAGE)
            for match in find_magic_word_identifiers(message.inner)
        )
    return _dedupe(found)


def extract_added_identifiers(commit: CommitRecord) -> list[str]:
    """Canonical identifiers a commit adds to the release."""
    return [item.identifier for item in find_added_identifiers(commit)]


def extract_reverted_identifiers(commit: CommitRecord) -> list[str]:
    """Canonical identifiers a commit reverts."""
    return [item.identifier for item in find_reverted_identifiers(commit)]
