"""
Filesystem walker for searchintext.

This module traverses the tree under the search root on a background
thread. Every entry it finds is counted and handed to a worker pool as
independent match tasks: a name check for every entry, and a read plus
content check for files below the size ceiling. Each task publishes its
result onto the shared ResultBus; the walker itself never waits for them.
"""

import os
import stat
import threading
import logging
from concurrent.futures import Executor
from datetime import datetime
from typing import Callable, List, Optional

from ..models.search_query import SearchConfig
from ..models.search_results import MatchKind, MatchResult
from ..reporting import SearchReporter
from .counters import SearchStats
from .matchers import content_contains, name_contains, read_file
from .result_bus import ResultBus, TaskTracker


logger = logging.getLogger(__name__)

# Pending (submitted but unfinished) tasks allowed per worker before the
# walker blocks.
PENDING_TASKS_PER_WORKER = 4


class TraversalError(Exception):
    """
    Raised when traversal stops early; aborts the whole search.

    ``cause`` is the OSError of an entry that could not be enumerated, or
    whatever unexpected exception ended the walker thread.
    """

    def __init__(self, path: str, cause: Exception):
        super().__init__(f"Cannot traverse {path}: {cause}")
        self.path = path
        self.cause = cause


class FSWalker:
    """
    Recursive directory walker that fans out match tasks.

    The walker and each task it dispatches are tracked by the TaskTracker,
    so the tracker only reaches zero once traversal has ended and every
    result has been published.
    """

    def __init__(
        self,
        config: SearchConfig,
        stats: SearchStats,
        bus: ResultBus,
        tracker: TaskTracker,
        executor: Executor,
        reporter: Optional[SearchReporter] = None,
        on_traversal_complete: Optional[Callable[[Optional[TraversalError]], None]] = None,
    ):
        """
        Initialize the filesystem walker.

        Args:
            config: Search configuration
            stats: Shared counters
            bus: Channel that match tasks publish onto
            tracker: Outstanding-task counter shared with the finalizer
            executor: Pool that runs match tasks
            reporter: Sink for size-skip and unreadable-file notices
            on_traversal_complete: Called on the walker thread once traversal stops
        """
        self.config = config
        self.stats = stats
        self.bus = bus
        self.tracker = tracker
        self.executor = executor
        self.reporter = reporter or SearchReporter()
        self.on_traversal_complete = on_traversal_complete
        self.error: Optional[TraversalError] = None
        self._slots = threading.BoundedSemaphore(config.max_workers * PENDING_TASKS_PER_WORKER)
        self._keyword_bytes = config.keyword_bytes
        self._thread: Optional[threading.Thread] = None
        self._current_path = config.root_path

    def start(self) -> threading.Thread:
        """
        Start traversal on a background thread.

        The traversal is registered with the tracker before the thread
        starts, so a finalizer started afterwards cannot see a zero count
        while entries are still being discovered.
        """
        if self._thread is not None:
            raise RuntimeError("Walker already started")

        self.tracker.add()
        self._thread = threading.Thread(target=self._run, name="searchintext-walker", daemon=True)
        try:
            self._thread.start()
        except RuntimeError:
            self.tracker.done()
            raise
        return self._thread

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        try:
            self.walk()
        except TraversalError as e:
            logger.debug(f"Traversal aborted: {e}")
            self.error = e
        except Exception as e:
            logger.debug(f"Walker failed at {self._current_path}", exc_info=True)
            self.error = TraversalError(self._current_path, e)
            self.error.__cause__ = e
        finally:
            try:
                if self.on_traversal_complete:
                    self.on_traversal_complete(self.error)
            finally:
                self.tracker.done()

    def walk(self) -> None:
        """
        Visit every entry under the root.

        The root itself is not counted. If the root is a file rather than a
        directory, that file is the only entry visited.

        Raises:
            TraversalError: On the first entry that cannot be enumerated or stat'ed
        """
        root = self.config.root_path
        try:
            root_stat = os.stat(root)
        except OSError as e:
            raise TraversalError(root, e) from e

        if not stat.S_ISDIR(root_stat.st_mode):
            self._visit(root, os.path.basename(root), root_stat)
            return

        logger.debug(f"Walking directory tree: {root}")
        pending: List[str] = [root]
        while pending:
            directory = pending.pop()
            self._current_path = directory
            try:
                with os.scandir(directory) as entries:
                    for entry in entries:
                        try:
                            entry_stat = entry.stat(follow_symlinks=False)
                        except OSError as e:
                            raise TraversalError(entry.path, e) from e

                        self._visit(entry.path, entry.name, entry_stat)
                        if stat.S_ISDIR(entry_stat.st_mode):
                            pending.append(entry.path)
            except OSError as e:
                raise TraversalError(directory, e) from e

    def _visit(self, path: str, name: str, entry_stat: os.stat_result) -> None:
        self._current_path = path
        is_directory = stat.S_ISDIR(entry_stat.st_mode)
        size = entry_stat.st_size
        modified_time = datetime.fromtimestamp(entry_stat.st_mtime)

        if is_directory:
            self.stats.record_folder_visit()
        else:
            self.stats.record_file_visit()

        self._dispatch(self._match_name, path, name, is_directory, size, modified_time)

        if is_directory:
            return

        content_stat = self._content_stat(path, entry_stat)
        if content_stat is None:
            return

        content_size = content_stat.st_size
        if content_size < self.config.size_ceiling_bytes:
            content_mtime = datetime.fromtimestamp(content_stat.st_mtime)
            self._dispatch(self._match_content, path, name, content_size, content_mtime)
        elif self.config.verbose:
            self.reporter.report_skipped_too_large(path, content_size)

    def _content_stat(self, path: str, entry_stat: os.stat_result) -> Optional[os.stat_result]:
        """
        Stat of the bytes a content read would see, or None if the entry is not read.

        Only regular files are read. A symlink is judged by its target, so
        links to FIFOs or devices are not read and the ceiling applies to the
        target size. A dangling link is a soft error like any other
        unreadable file.
        """
        if stat.S_ISLNK(entry_stat.st_mode):
            try:
                entry_stat = os.stat(path)
            except OSError as e:
                if self.config.verbose:
                    self.reporter.report_unreadable(path, e)
                return None

        if not stat.S_ISREG(entry_stat.st_mode):
            return None
        return entry_stat

    def _dispatch(self, task: Callable[..., None], *args) -> None:
        self._slots.acquire()
        self.tracker.add()
        try:
            self.executor.submit(self._run_task, task, args)
        except BaseException:
            self.tracker.done()
            self._slots.release()
            raise

    def _run_task(self, task: Callable[..., None], args: tuple) -> None:
        try:
            task(*args)
        except Exception:
            logger.exception(f"Unexpected error in {task.__name__} for {args[0]}")
        finally:
            self._slots.release()
            self.tracker.done()

    def _match_name(self, path: str, name: str, is_directory: bool, size: int, modified_time: datetime) -> None:
        matched = name_contains(name, self.config.keyword)
        if matched:
            if is_directory:
                self.stats.record_folder_match()
            else:
                self.stats.record_file_match(path)

        self.bus.publish(MatchResult(
            path=path,
            name=name,
            is_directory=is_directory,
            matched=matched,
            kind=MatchKind.NAME,
            size=size,
            modified_time=modified_time,
        ))

    def _match_content(self, path: str, name: str, size: int, modified_time: datetime) -> None:
        try:
            content = read_file(path)
        except OSError as e:
            # Soft failure: this file just contributes no content result
            if self.config.verbose:
                self.reporter.report_unreadable(path, e)
            return

        matched = content_contains(content, self._keyword_bytes)
        if matched:
            self.stats.record_file_match(path)

        self.bus.publish(MatchResult(
            path=path,
            name=name,
            is_directory=False,
            matched=matched,
            kind=MatchKind.CONTENT,
            size=size,
            modified_time=modified_time,
        ))
