"""
Unit tests for search result data models.
"""

import pytest
from datetime import datetime
from pydantic import ValidationError

from searchintext.models.search_results import (
    MatchKind,
    MatchResult,
    SearchCounters,
    SearchSummary,
)


class TestMatchResult:
    """Test cases for MatchResult."""

    def test_name_result(self):
        result = MatchResult(path="/data/needle", name="needle", is_directory=True, matched=True)

        assert result.kind == MatchKind.NAME
        assert result.entry_type == "folder"
        assert result.size is None
        assert result.modified_time is None

    def test_content_result_with_metadata(self):
        modified = datetime(2024, 1, 2, 3, 4, 5)
        result = MatchResult(
            path="/data/a.txt",
            name="a.txt",
            is_directory=False,
            matched=False,
            kind=MatchKind.CONTENT,
            size=11,
            modified_time=modified,
        )

        assert result.entry_type == "file"
        assert result.size == 11

        data = result.to_dict()
        assert data['kind'] == "content"
        assert data['modified_time'] == modified.isoformat()

    def test_directory_cannot_have_content_result(self):
        with pytest.raises(ValidationError, match="Content results cannot describe a directory"):
            MatchResult(path="/d", name="d", is_directory=True, matched=False, kind=MatchKind.CONTENT)

    def test_empty_path_rejected(self):
        with pytest.raises(ValidationError):
            MatchResult(path="", name="", is_directory=False, matched=False)

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            MatchResult(path="/f", name="f", is_directory=False, matched=False, size=-1)

    def test_result_is_immutable(self):
        result = MatchResult(path="/f", name="f", is_directory=False, matched=False)

        with pytest.raises(ValidationError):
            result.matched = True


class TestSearchCounters:
    """Test cases for SearchCounters."""

    def test_defaults(self):
        counters = SearchCounters()

        assert counters.to_dict() == {
            'files_visited': 0,
            'folders_visited': 0,
            'files_matched': 0,
            'folders_matched': 0,
        }
        assert counters.entries_visited == 0

    def test_entries_visited(self):
        counters = SearchCounters(files_visited=2, folders_visited=1)
        assert counters.entries_visited == 3

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            SearchCounters(files_visited=-1)


class TestSearchSummary:
    """Test cases for SearchSummary."""

    def test_to_dict(self):
        summary = SearchSummary(
            root_path="/data",
            keyword="needle",
            counters=SearchCounters(files_visited=2, folders_visited=1, folders_matched=1),
            elapsed_seconds=0.5,
        )

        data = summary.to_dict()

        assert data['root_path'] == "/data"
        assert data['keyword'] == "needle"
        assert data['counters']['folders_matched'] == 1
        assert data['elapsed_seconds'] == 0.5

    def test_negative_elapsed_rejected(self):
        with pytest.raises(ValidationError):
            SearchSummary(root_path="/data", keyword="x", elapsed_seconds=-1.0)
