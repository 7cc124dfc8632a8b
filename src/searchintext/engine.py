"""
Search engine for searchintext.

A SearchEngine runs exactly one search: it checks the root, starts the
walker and the finalizer, drains the result bus through the reporter on
the calling thread, rendezvouses with the finalizer on the completion
signal, and returns the final summary.
"""

import time
import threading
import logging
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Optional

from .models.search_query import SearchConfig
from .models.search_results import SearchCounters, SearchSummary
from .reporting import SearchReporter
from .tools.counters import SearchStats
from .tools.fs_walker import FSWalker, TraversalError
from .tools.path_probe import probe_root
from .tools.result_bus import ResultBus, TaskTracker, start_finalizer


logger = logging.getLogger(__name__)


class SearchState(Enum):
    """Lifecycle of a single search."""
    IDLE = "idle"
    WALKING = "walking"
    DRAINING = "draining"
    FINALIZED = "finalized"
    REPORTED = "reported"
    FAILED = "failed"


_TRANSITIONS = {
    SearchState.IDLE: {SearchState.WALKING, SearchState.FAILED},
    SearchState.WALKING: {SearchState.DRAINING, SearchState.FAILED},
    SearchState.DRAINING: {SearchState.FINALIZED, SearchState.FAILED},
    SearchState.FINALIZED: {SearchState.REPORTED},
    SearchState.REPORTED: set(),
    SearchState.FAILED: set(),
}


class SearchEngine:
    """
    Runs one concurrent keyword search over a directory tree.

    Example:
        engine = SearchEngine(SearchConfig(root_path="docs", keyword="TODO"))
        summary = engine.run()
    """

    def __init__(self, config: SearchConfig, reporter: Optional[SearchReporter] = None):
        """
        Initialize the engine.

        Args:
            config: Immutable search configuration
            reporter: Sink receiving every result and notice (silent if None)
        """
        self.config = config
        self.reporter = reporter or SearchReporter()
        self.stats = SearchStats()
        self._state = SearchState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> SearchState:
        with self._state_lock:
            return self._state

    @property
    def counters(self) -> SearchCounters:
        return self.stats.snapshot()

    def _transition(self, new_state: SearchState) -> None:
        with self._state_lock:
            if new_state not in _TRANSITIONS[self._state]:
                raise RuntimeError(f"Invalid search state transition: {self._state.value} -> {new_state.value}")
            logger.debug(f"Search state {self._state.value} -> {new_state.value}")
            self._state = new_state

    def _on_traversal_complete(self, error: Optional[TraversalError]) -> None:
        if error is None:
            self._transition(SearchState.DRAINING)

    def run(self) -> SearchSummary:
        """
        Execute the search and block until every result has been reported.

        Returns:
            SearchSummary with final counters and elapsed time

        Raises:
            ConfigurationError: If the root path does not exist
            TraversalError: If an entry could not be enumerated during the walk
            RuntimeError: If this engine has already run
        """
        if self.state != SearchState.IDLE:
            raise RuntimeError("A SearchEngine runs a single search; create a new engine")

        start = time.perf_counter()

        try:
            probe_root(self.config.root_path)
        except Exception:
            self._transition(SearchState.FAILED)
            raise

        try:
            walker = self._execute()
        except BaseException:
            self._transition(SearchState.FAILED)
            raise

        if walker.error is not None:
            self._transition(SearchState.FAILED)
            raise walker.error

        self._transition(SearchState.FINALIZED)

        summary = SearchSummary(
            root_path=self.config.root_path,
            keyword=self.config.keyword,
            counters=self.stats.snapshot(),
            elapsed_seconds=time.perf_counter() - start,
        )
        self._transition(SearchState.REPORTED)
        return summary

    def _execute(self) -> FSWalker:
        """Walk, match and drain; returns once the completion rendezvous is done."""
        bus = ResultBus(maxsize=self.config.result_buffer)
        tracker = TaskTracker()

        with ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix="searchintext-worker",
        ) as executor:
            walker = FSWalker(
                self.config,
                self.stats,
                bus,
                tracker,
                executor,
                reporter=self.reporter,
                on_traversal_complete=self._on_traversal_complete,
            )
            self._transition(SearchState.WALKING)
            walker.start()
            finalizer = start_finalizer(tracker, bus)

            try:
                self._consume(bus)
            finally:
                bus.wait_for_completion()
                bus.acknowledge()
                finalizer.join()

        return walker

    def _consume(self, bus: ResultBus) -> None:
        results = iter(bus)
        try:
            for result in results:
                self.reporter.report_match(result, self.config.verbose)
        except BaseException:
            # Workers block on a full bus; keep draining so they can finish.
            for _ in results:
                pass
            raise


def run_search(config: SearchConfig, reporter: Optional[SearchReporter] = None) -> SearchSummary:
    """Convenience function running a single search."""
    return SearchEngine(config, reporter).run()
