"""Tests for issue identifier extraction."""

from __future__ import annotations

import re

import pytest

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
    rewrite_linear_urls,
)
from release_link.vcs.git import CommitRecord

CANONICAL_PATTERN = re.compile(r"^[A-Z0-9_]{1,7}-[1-9][0-9]{0,8}$|^[A-Z0-9_]{1,7}-0$")


def _ids(matches: list[IdentifierMatch]) -> list[str]:
    return [m.identifier for m in matches]


class TestFindAllIdentifiers:
    """Tests for find_all_identifiers()."""

    def test_branch_identifier(self):
        """Identifier embedded in a branch name."""
        matches = find_all_identifiers("feature/ENG-123-add-feature")

        assert matches == [IdentifierMatch(identifier="ENG-123", raw_text="ENG-123")]

    def test_lowercase_normalized(self):
        """Team key is upper-cased, raw text preserved."""
        matches = find_all_identifiers("jane/lin-47025-fix-branch-name-matching")

        assert matches == [IdentifierMatch(identifier="LIN-47025", raw_text="lin-47025")]

    def test_empty_and_none(self):
        """Empty input yields nothing."""
        assert find_all_identifiers("") == []
        assert find_all_identifiers(None) == []

    def test_no_identifier(self):
        """Branches without identifiers yield nothing."""
        assert find_all_identifiers("chore/update-deps") == []

    def test_team_key_lengths(self):
        """Team keys of 1 to 7 characters match."""
        assert _ids(find_all_identifiers("A-1 ABCDEFG-999 X1Y2Z3A-100")) == [
            "A-1",
            "ABCDEFG-999",
            "X1Y2Z3A-100",
        ]

    def test_team_key_too_long(self):
        """Team keys longer than 7 characters do not match."""
        assert find_all_identifiers("feature/ABCDEFGH-123-too-long") == []

    def test_number_too_long(self):
        """Issue numbers longer than 9 digits do not match."""
        assert find_all_identifiers("ENG-1234567890") == []

    def test_leading_zero_rejected(self):
        """LIN-0004 style identifiers are rejected."""
        assert find_all_identifiers("feature/LIN-0004-test") == []

    @pytest.mark.parametrize(
        "branch",
        [
            "release/ios-1.57.1",
            "release/ios-1.57.0",
            "ruby/setup-ruby-1.269.0",
            "dependabot/swift/dd-sdk-ios-2.9.0",
            "bump-terraform-1.13",
            "release/ver-1.57.01",
        ],
    )
    def test_version_suffix_excluded(self, branch: str):
        """Version strings are not identifiers."""
        assert find_all_identifiers(branch) == []

    @pytest.mark.parametrize(
        ("branch", "expected"),
        [
            ("john/ios-1641-introduce-a-proper-blockview", ["IOS-1641"]),
            ("john/fix-lin-56696", ["LIN-56696"]),
            ("jane/asks/all/LIN-56081", ["LIN-56081"]),
            ("jane/INF-530", ["INF-530"]),
        ],
    )
    def test_legitimate_branches(self, branch: str, expected: list[str]):
        """Real-world branch names yield their identifier."""
        assert _ids(find_all_identifiers(branch)) == expected

    @pytest.mark.parametrize(
        ("branch", "expected"),
        [
            ("story/LIN-123_LIN-321_hello_world", ["LIN-123", "LIN-321"]),
            ("username/lin-123_branch_name", ["LIN-123"]),
        ],
    )
    def test_underscore_boundaries(self, branch: str, expected: list[str]):
        """Underscores act as word boundaries."""
        assert _ids(find_all_identifiers(branch)) == expected

    def test_duplicates_kept(self):
        """Every occurrence is reported."""
        assert _ids(find_all_identifiers("ENG-1 eng-1")) == ["ENG-1", "ENG-1"]

    @pytest.mark.parametrize(
        "text",
        [
            "feature/eng-42-x",
            "A-1",
            "story/LIN-123_LIN-321",
            "Fixes abc1234-7 and Z-99",
            "x_y-12",
        ],
    )
    def test_canonical_form(self, text: str):
        """Every produced identifier is upper-case with no leading zero."""
        for match in find_all_identifiers(text):
            assert CANONICAL_PATTERN.match(match.identifier), match.identifier


class TestRewriteLinearUrls:
    """Tests for rewrite_linear_urls()."""

    def test_url_with_slug(self):
        """Issue URLs collapse to the identifier."""
        line = "Fixes https://linear.app/acme/issue/ENG-123/crash-on-start"

        assert rewrite_linear_urls(line) == "Fixes ENG-123"

    def test_url_without_slug(self):
        """URLs without slug are rewritten too."""
        assert rewrite_linear_urls("Refs http://linear.app/acme/issue/eng-7") == "Refs eng-7"

    def test_other_urls_untouched(self):
        """Non-Linear URLs are left alone."""
        line = "See https://github.com/acme/app/issues/12"

        assert rewrite_linear_urls(line) == line


class TestFindMagicWordIdentifiers:
    """Tests for find_magic_word_identifiers()."""

    def test_fixes_multiple(self):
        """Magic word followed by identifiers joined with 'and'."""
        assert _ids(find_magic_word_identifiers("Fixes PLAT-42 and ENG-7 in one go")) == [
            "PLAT-42",
            "ENG-7",
        ]

    def test_no_magic_word(self):
        """Bare identifiers in a message are ignored."""
        assert find_magic_word_identifiers("See LIN-123 for details") == []

    def test_bare_identifiers_ignored(self):
        """Identifiers without a magic word, even several, are ignored."""
        assert find_magic_word_identifiers("LIN-123 LIN-321") == []

    @pytest.mark.parametrize(
        "word",
        [
            "close",
            "Closes",
            "closed",
            "closing",
            "fix",
            "FIXES",
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
            "ref",
            "Refs",
            "references",
            "Part of",
            "related to",
            "relates to",
            "contributes to",
            "towards",
            "toward",
        ],
    )
    def test_magic_words(self, word: str):
        """Every closing word and contributing phrase licenses extraction."""
        assert _ids(find_magic_word_identifiers(f"{word} ENG-12")) == ["ENG-12"]

    def test_colon_separator(self):
        """Magic word followed by a colon and whitespace."""
        assert _ids(find_magic_word_identifiers("Fixes: ENG-1")) == ["ENG-1"]

    def test_colon_without_space(self):
        """A colon must be followed by whitespace."""
        assert find_magic_word_identifiers("Fixes:ENG-1") == []

    def test_separators(self):
        """Commas, ampersands, 'and' and whitespace separate identifiers."""
        message = "Resolves ENG-1, ENG-2 & ENG-3 and ENG-4 ENG-5"

        assert _ids(find_magic_word_identifiers(message)) == [
            "ENG-1",
            "ENG-2",
            "ENG-3",
            "ENG-4",
            "ENG-5",
        ]

    def test_identifier_after_text_not_captured(self):
        """Only the identifier run right after the magic word counts."""
        assert _ids(find_magic_word_identifiers("Fixes ENG-1 crash, see ENG-2")) == ["ENG-1"]

    def test_magic_word_inside_word(self):
        """A magic word must start at a word boundary."""
        assert find_magic_word_identifiers("prefix ENG-1") == []

    def test_magic_word_per_line(self):
        """A magic word does not reach identifiers on the next line."""
        assert find_magic_word_identifiers("Fixes\nENG-1") == []

    def test_multiline_message(self):
        """Each line is scanned."""
        message = "Improve caching\n\nFixes ENG-1\nPart of ENG-2\nSee ENG-3"

        assert _ids(find_magic_word_identifiers(message)) == ["ENG-1", "ENG-2"]

    def test_underscore_ends_identifier(self):
        """An underscore after the identifier is a boundary."""
        assert _ids(find_magic_word_identifiers("Fixes ENG-1_foo")) == ["ENG-1"]

    def test_windows_line_endings(self):
        """CRLF separated lines are scanned individually."""
        message = "Fixes ENG-1\r\nRefs ENG-2\r\nSee ENG-3"

        assert _ids(find_magic_word_identifiers(message)) == ["ENG-1", "ENG-2"]

    def test_only_newlines_split_lines(self):
        """Form feeds and vertical tabs are whitespace, not line breaks."""
        assert _ids(find_magic_word_identifiers("Fixes\x0cENG-1")) == ["ENG-1"]
        assert _ids(find_magic_word_identifiers("Part of\x0bENG-2")) == ["ENG-2"]

    def test_linear_url(self):
        """Linear issue URLs after a magic word are extracted."""
        message = "Closes https://linear.app/acme/issue/ENG-99/flaky-test"

        assert _ids(find_magic_word_identifiers(message)) == ["ENG-99"]

    def test_leading_zero_rejected(self):
        """Leading zeros are rejected after magic words as well."""
        assert find_magic_word_identifiers("Fixes LIN-0004") == []

    def test_empty(self):
        """Empty input yields nothing."""
        assert find_magic_word_identifiers("") == []
        assert find_magic_word_identifiers(None) == []


class TestExtractAddedIdentifiers:
    """Tests for extract_added_identifiers() and find_added_identifiers()."""

    def test_branch_only(self):
        """Branch identifiers are always added."""
        commit = CommitRecord(sha="a", branch_name="feature/ENG-123-add-feature")

        assert extract_added_identifiers(commit) == ["ENG-123"]

    def test_message_magic_words(self):
        """Message identifiers need a magic word."""
        commit = CommitRecord(sha="a", message="Fixes PLAT-42 and ENG-7 in one go")

        assert set(extract_added_identifiers(commit)) == {"PLAT-42", "ENG-7"}

    def test_message_without_magic_word(self):
        """Message identifiers without magic word are ignored."""
        commit = CommitRecord(sha="a", message="See LIN-123 for details")

        assert extract_added_identifiers(commit) == []

    def test_dedupe_across_fields(self):
        """Branch and message duplicates collapse, branch source wins."""
        commit = CommitRecord(
            sha="a",
            branch_name="feature/eng-123-awesome-change",
            message="Fixes ENG-123, refs ENG-123 and ENG-9",
        )

        assert find_added_identifiers(commit) == [
            SourcedIdentifier("ENG-123", IssueField.BRANCH_NAME),
            SourcedIdentifier("ENG-9", IssueField.COMMIT_MESSAGE),
        ]

    def test_branch_revert_adds_nothing(self):
        """An odd branch revert depth adds nothing."""
        commit = CommitRecord(
            sha="r",
            branch_name="revert-571-romain/bac-39",
            message="Merge pull request #572 from org/revert-571-romain/bac-39",
        )

        assert extract_added_identifiers(commit) == []

    def test_message_revert_adds_nothing(self):
        """An odd message revert depth adds nothing, even from the branch."""
        commit = CommitRecord(
            sha="r",
            branch_name="user/eng-5",
            message='Revert "Fixes DRIVE-320: memory leak"',
        )

        assert extract_added_identifiers(commit) == []

    def test_branch_reapply_adds(self):
        """A revert of a revert re-adds the branch identifier."""
        commit = CommitRecord(sha="ra", branch_name="revert-572-revert-571-romain/bac-39")

        assert extract_added_identifiers(commit) == ["BAC-39"]

    def test_message_reapply_adds(self):
        """A nested Revert "Revert "..."" message re-adds magic-word identifiers."""
        commit = CommitRecord(sha="ra", message='Revert "Revert "Fixes ENG-4: crash""')

        assert extract_added_identifiers(commit) == ["ENG-4"]

    def test_empty_commit(self):
        """A commit without branch and message adds nothing."""
        assert extract_added_identifiers(CommitRecord(sha="x")) == []


class TestExtractRevertedIdentifiers:
    """Tests for extract_reverted_identifiers() and find_reverted_identifiers()."""

    def test_branch_revert(self):
        """Revert branches report their unwrapped identifiers."""
        commit = CommitRecord(
            sha="r",
            branch_name="revert-571-romain/bac-39",
            message="Merge pull request #572 from org/revert-571-romain/bac-39",
        )

        assert find_reverted_identifiers(commit) == [
            SourcedIdentifier("BAC-39", IssueField.BRANCH_NAME)
        ]

    def test_message_revert(self):
        """Revert messages report magic-word identifiers of the inner text."""
        commit = CommitRecord(sha="r", message='Revert "Fixes DRIVE-320: memory leak"')

        assert find_reverted_identifiers(commit) == [
            SourcedIdentifier("DRIVE-320", IssueField.COMMIT_MESSAGE)
        ]

    def test_message_revert_without_magic_word(self):
        """Bare identifiers inside a revert message are ignored."""
        commit = CommitRecord(sha="r", message='Revert "Bump v1-2 to v1-3"')

        assert extract_reverted_identifiers(commit) == []

    def test_ordinary_commit(self):
        """Commits that are no revert report nothing."""
        commit = CommitRecord(sha="a", branch_name="user/eng-1", message="Fixes ENG-2")

        assert extract_reverted_identifiers(commit) == []

    def test_reapply_reports_nothing(self):
        """Even revert depths are re-applications, not reverts."""
        commit = CommitRecord(
            sha="ra",
            branch_name="revert-572-revert-571-romain/bac-39",
            message='Revert "Revert "Fixes BAC-39""',
        )

        assert extract_reverted_identifiers(commit) == []

    def test_branch_and_message_union(self):
        """Both fields contribute and duplicates collapse."""
        commit = CommitRecord(
            sha="r",
            branch_name="revert-1-user/eng-100",
            message='Revert "Fixes ENG-100 and ENG-200"',
        )

        assert extract_reverted_identifiers(commit) == ["ENG-100", "ENG-200"]

    def test_message_revert_with_plain_branch(self):
        """A plain branch next to a reverting message contributes nothing."""
        commit = CommitRecord(
            sha="r",
            branch_name="user/eng-7",
            message='Revert "Part of ENG-8"',
        )

        assert extract_reverted_identifiers(commit) == ["ENG-8"]
