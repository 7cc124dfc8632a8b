"""
Unit tests for thread-safe search counters.
"""

import threading

from searchintext.models.search_results import SearchCounters
from searchintext.tools.counters import SearchStats


class TestSearchStats:
    """Test cases for SearchStats."""

    def test_initial_snapshot(self):
        assert SearchStats().snapshot() == SearchCounters()

    def test_visits_and_matches(self):
        stats = SearchStats()
        stats.record_file_visit()
        stats.record_file_visit()
        stats.record_folder_visit()
        stats.record_folder_match()
        stats.record_file_match("/data/a.txt")

        counters = stats.snapshot()

        assert counters.files_visited == 2
        assert counters.folders_visited == 1
        assert counters.files_matched == 1
        assert counters.folders_matched == 1

    def test_file_matched_by_name_and_content_counts_once(self):
        stats = SearchStats()

        assert stats.record_file_match("/data/needle.txt") is True
        assert stats.record_file_match("/data/needle.txt") is False

        assert stats.snapshot().files_matched == 1

    def test_snapshot_is_independent(self):
        stats = SearchStats()
        before = stats.snapshot()
        stats.record_file_visit()

        assert before.files_visited == 0
        assert stats.snapshot().files_visited == 1

    def test_concurrent_increments(self):
        """Test that no increments are lost under contention."""
        stats = SearchStats()
        threads_count = 8
        per_thread = 500

        def worker(index: int):
            for i in range(per_thread):
                stats.record_file_visit()
                stats.record_folder_visit()
                stats.record_file_match(f"/f/{index}/{i}")

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(threads_count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        counters = stats.snapshot()
        assert counters.files_visited == threads_count * per_thread
        assert counters.folders_visited == threads_count * per_thread
        assert counters.files_matched == threads_count * per_thread
