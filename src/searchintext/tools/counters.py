"""
Thread-safe search statistics.
"""

import threading
from typing import Set

from ..models.search_results import SearchCounters


class SearchStats:
    """
    The four search counters, mutated under a single lock.

    A file can match both by name and by content; it is counted once in
    ``files_matched`` so that matches never exceed visits.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._files_visited = 0
        self._folders_visited = 0
        self._folders_matched = 0
        self._matched_files: Set[str] = set()

    def record_file_visit(self) -> None:
        with self._lock:
            self._files_visited += 1

    def record_folder_visit(self) -> None:
        with self._lock:
            self._folders_visited += 1

    def record_file_match(self, path: str) -> bool:
        """
        Record that a file matched.

        Returns:
            True if this is the first match recorded for the file
        """
        with self._lock:
            if path in self._matched_files:
                return False
            self._matched_files.add(path)
            return True

    def record_folder_match(self) -> None:
        with self._lock:
            self._folders_matched += 1

    def snapshot(self) -> SearchCounters:
        """Return the current values as an immutable snapshot."""
        with self._lock:
            return SearchCounters(
                files_visited=self._files_visited,
                folders_visited=self._folders_visited,
                files_matched=len(self._matched_files),
                folders_matched=self._folders_matched,
            )
