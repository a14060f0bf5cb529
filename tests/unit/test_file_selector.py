"""
Unit tests for FileSelector.

Tests cover:
- Each criterion in isolation
- AND / OR / NONE combination truth tables
- Default-allow when no criterion is active
- Mode matching with and without file type bits
- Per-criterion diagnostics from evaluate()
"""

import re
import stat
from datetime import datetime, timedelta

import pytest

from dirtree.matching import FileSelector
from dirtree.models import FileClass, SelectCriterionMode, SelectionCriteria


MODIFIED = datetime(2024, 6, 15, 12, 0, 0)


@pytest.mark.unit
class TestSingleCriterion:
    """Each criterion evaluated on its own."""

    def test_no_criteria_selects_everything(self, selector, make_file_handle):
        assert selector.matches(make_file_handle("anything.bin"), SelectionCriteria())

    def test_no_criteria_selects_everything_in_or_mode(self, selector, make_file_handle):
        criteria = SelectionCriteria(select_mode=SelectCriterionMode.OR_SELECT)

        assert selector.matches(make_file_handle("anything.bin"), criteria)

    def test_pattern_any_match(self, selector, make_file_handle):
        criteria = SelectionCriteria(file_name_patterns=["*.log", "*.txt"])

        assert selector.matches(make_file_handle("notes.txt"), criteria)
        assert selector.matches(make_file_handle("app.log"), criteria)
        assert not selector.matches(make_file_handle("image.png"), criteria)

    def test_pattern_is_case_sensitive(self, selector, make_file_handle):
        criteria = SelectionCriteria(file_name_patterns=["*.txt"])

        assert not selector.matches(make_file_handle("NOTES.TXT"), criteria)

    def test_pattern_character_class(self, selector, make_file_handle):
        criteria = SelectionCriteria(file_name_patterns=["file[0-9].dat"])

        assert selector.matches(make_file_handle("file7.dat"), criteria)
        assert not selector.matches(make_file_handle("fileX.dat"), criteria)

    def test_regex_searches_file_name(self, selector, make_file_handle):
        criteria = SelectionCriteria(regex=r"\d{4}-\d{2}")

        assert selector.matches(make_file_handle("backup_2024-06.tar"), criteria)
        assert not selector.matches(make_file_handle("backup.tar"), criteria)

    def test_precompiled_regex(self, selector, make_file_handle):
        criteria = SelectionCriteria(regex=re.compile(r"^tmp"))

        assert selector.matches(make_file_handle("tmp_file"), criteria)
        assert not selector.matches(make_file_handle("file_tmp"), criteria)

    def test_older_than_is_strict(self, selector, make_file_handle):
        handle = make_file_handle(modified=MODIFIED)

        assert selector.matches(handle, SelectionCriteria(files_older_than=MODIFIED + timedelta(seconds=1)))
        assert not selector.matches(handle, SelectionCriteria(files_older_than=MODIFIED))

    def test_newer_than_is_strict(self, selector, make_file_handle):
        handle = make_file_handle(modified=MODIFIED)

        assert selector.matches(handle, SelectionCriteria(files_newer_than=MODIFIED - timedelta(seconds=1)))
        assert not selector.matches(handle, SelectionCriteria(files_newer_than=MODIFIED))

    def test_date_window(self, selector, make_file_handle):
        criteria = SelectionCriteria(
            files_newer_than=datetime(2024, 1, 1),
            files_older_than=datetime(2025, 1, 1),
        )

        assert selector.matches(make_file_handle(modified=MODIFIED), criteria)
        assert not selector.matches(make_file_handle(modified=datetime(2023, 6, 1)), criteria)

    def test_mode_permission_bits(self, selector, make_file_handle):
        criteria = SelectionCriteria(select_by_file_mode=0o644)

        assert selector.matches(make_file_handle(mode=stat.S_IFREG | 0o644), criteria)
        assert not selector.matches(make_file_handle(mode=stat.S_IFREG | 0o600), criteria)

    def test_mode_with_type_bits_compares_full_mode(self, selector, make_file_handle):
        criteria = SelectionCriteria(select_by_file_mode=stat.S_IFLNK | 0o777)
        link = make_file_handle(mode=stat.S_IFLNK | 0o777, file_class=FileClass.SYMLINK)
        regular = make_file_handle(mode=stat.S_IFREG | 0o777)

        assert selector.matches(link, criteria)
        assert not selector.matches(regular, criteria)


@pytest.mark.unit
class TestCombinationModes:
    """Truth tables for two active criteria: pattern '*.txt' and regex '^a'."""

    @pytest.mark.parametrize("name,expected_and,expected_or", [
        ("abc.txt", True, True),     # both match
        ("xyz.txt", False, True),    # pattern only
        ("abc.log", False, True),    # regex only
        ("xyz.log", False, False),   # neither
    ])
    def test_truth_table(self, selector, make_file_handle, name, expected_and, expected_or):
        handle = make_file_handle(name)
        and_criteria = SelectionCriteria(file_name_patterns=["*.txt"], regex="^a")
        or_criteria = SelectionCriteria(
            file_name_patterns=["*.txt"], regex="^a", select_mode=SelectCriterionMode.OR_SELECT
        )
        none_criteria = SelectionCriteria(
            file_name_patterns=["*.txt"], regex="^a", select_mode=SelectCriterionMode.NONE
        )

        assert selector.matches(handle, and_criteria) is expected_and
        assert selector.matches(handle, or_criteria) is expected_or
        assert selector.matches(handle, none_criteria) is expected_and

    def test_inactive_criteria_do_not_veto_and(self, selector, make_file_handle):
        """Unset criteria are ignored rather than treated as failures."""
        criteria = SelectionCriteria(file_name_patterns=["*.txt"], regex="")

        assert selector.matches(make_file_handle("a.txt"), criteria)

    def test_inactive_criteria_do_not_satisfy_or(self, selector, make_file_handle):
        criteria = SelectionCriteria(
            file_name_patterns=["*.txt"], select_mode=SelectCriterionMode.OR_SELECT
        )

        assert not selector.matches(make_file_handle("a.log"), criteria)

    def test_all_five_criteria_and(self, selector, make_file_handle):
        criteria = SelectionCriteria(
            file_name_patterns=["*.txt"],
            regex="^re",
            files_older_than=MODIFIED + timedelta(days=1),
            files_newer_than=MODIFIED - timedelta(days=1),
            select_by_file_mode=0o644,
        )

        assert selector.matches(make_file_handle("report.txt"), criteria)
        assert not selector.matches(make_file_handle("report.txt", mode=stat.S_IFREG | 0o600), criteria)


@pytest.mark.unit
class TestEvaluate:
    """Tests for per-criterion diagnostics."""

    def test_outcome_lists_active_and_matched(self, selector, make_file_handle):
        criteria = SelectionCriteria(file_name_patterns=["*.txt"], select_by_file_mode=0o600)

        outcome = selector.evaluate(make_file_handle("a.txt"), criteria)

        assert outcome.active == {
            "patterns": True,
            "regex": False,
            "older_than": False,
            "newer_than": False,
            "mode": True,
        }
        assert outcome.matched["patterns"] is True
        assert outcome.matched["mode"] is False
        assert outcome.selected is False

    def test_outcome_without_criteria(self, selector, make_file_handle):
        outcome = selector.evaluate(make_file_handle(), SelectionCriteria())

        assert not outcome.any_active
        assert outcome.selected
