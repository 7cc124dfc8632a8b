"""
Result delivery and completion protocol.

Producers (match tasks running on worker threads) publish MatchResult
objects onto a single ResultBus. A TaskTracker counts work in flight,
including the traversal itself; once it drops to zero a finalizer thread
closes the bus and raises the one-shot completion signal, then waits for
the consumer to acknowledge it.
"""

import queue
import threading
import logging
from typing import Iterator, Optional

from ..models.search_results import MatchResult


logger = logging.getLogger(__name__)

_CLOSED = object()


class ResultBusClosedError(Exception):
    """Raised when publishing to, or closing, a bus that is already closed."""
    pass


class TaskTracker:
    """
    Counter of outstanding tasks that can be waited on until it reaches zero.

    ``add`` must be called before the task it accounts for is dispatched,
    and ``done`` exactly once when that task finishes.
    """

    def __init__(self):
        self._condition = threading.Condition()
        self._pending = 0

    @property
    def pending(self) -> int:
        with self._condition:
            return self._pending

    def add(self, count: int = 1) -> None:
        with self._condition:
            if self._pending + count < 0:
                raise ValueError("TaskTracker counter went negative")
            self._pending += count
            if self._pending == 0:
                self._condition.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no tasks are outstanding.

        Returns:
            True if the counter reached zero, False on timeout
        """
        with self._condition:
            return self._condition.wait_for(lambda: self._pending == 0, timeout)


class ResultBus:
    """
    Single-use channel of MatchResult plus a one-shot completion signal.

    The bus is bounded: ``publish`` blocks while the consumer is behind.
    It is closed exactly once, by the finalizer, and consumed by exactly
    one reader.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=maxsize)
        self._lock = threading.Lock()
        self._closed = False
        self._drained = False
        self._completed = threading.Event()
        self._acknowledged = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def completed(self) -> bool:
        return self._completed.is_set()

    def publish(self, result: MatchResult) -> None:
        if self._closed:
            raise ResultBusClosedError(f"Cannot publish {result.path}: result bus is closed")
        self._queue.put(result)

    def close(self) -> None:
        """
        Close the bus; readers stop after the results already queued.

        Raises:
            ResultBusClosedError: If the bus was already closed
        """
        with self._lock:
            if self._closed:
                raise ResultBusClosedError("Result bus already closed")
            self._closed = True
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[MatchResult]:
        if self._drained:
            return
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                self._drained = True
                return
            yield item

    def signal_completion(self, timeout: Optional[float] = None) -> bool:
        """
        Raise the completion signal and wait for the consumer's acknowledgement.

        Returns:
            True if the consumer acknowledged, False on timeout
        """
        if not self._closed:
            raise RuntimeError("Completion signalled before the result bus was closed")
        if self._completed.is_set():
            raise RuntimeError("Completion already signalled")
        self._completed.set()
        return self._acknowledged.wait(timeout)

    def wait_for_completion(self, timeout: Optional[float] = None) -> bool:
        return self._completed.wait(timeout)

    def acknowledge(self) -> None:
        """Acknowledge the completion signal; allowed exactly once."""
        if not self._completed.is_set():
            raise RuntimeError("Cannot acknowledge before completion is signalled")
        if self._acknowledged.is_set():
            raise RuntimeError("Completion already acknowledged")
        self._acknowledged.set()


def finalize(tracker: TaskTracker, bus: ResultBus) -> None:
    """Wait for all tracked work, then close the bus and signal completion."""
    tracker.wait()
    bus.close()
    logger.debug("All search tasks finished, result bus closed")
    bus.signal_completion()


def start_finalizer(tracker: TaskTracker, bus: ResultBus) -> threading.Thread:
    """Run ``finalize`` on a dedicated background thread."""
    thread = threading.Thread(
        target=finalize,
        args=(tracker, bus),
        name="searchintext-finalizer",
        daemon=True,
    )
    thread.start()
    return thread
