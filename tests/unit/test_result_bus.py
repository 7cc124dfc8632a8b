"""
Unit tests for the result bus and completion protocol.
"""

import threading
import time
import pytest

from searchintext.models.search_results import MatchResult
from searchintext.tools.result_bus import (
    ResultBus,
    ResultBusClosedError,
    TaskTracker,
    finalize,
    start_finalizer,
)


def _result(path: str) -> MatchResult:
    return MatchResult(path=path, name=path.rsplit("/", 1)[-1], is_directory=False, matched=False)


class TestTaskTracker:
    """Test cases for TaskTracker."""

    def test_wait_returns_immediately_when_idle(self):
        assert TaskTracker().wait(timeout=0.1) is True

    def test_wait_times_out_with_pending_tasks(self):
        tracker = TaskTracker()
        tracker.add()

        assert tracker.pending == 1
        assert tracker.wait(timeout=0.05) is False

    def test_done_releases_waiters(self):
        tracker = TaskTracker()
        tracker.add(2)
        released = threading.Event()

        def waiter():
            tracker.wait()
            released.set()

        thread = threading.Thread(target=waiter)
        thread.start()

        tracker.done()
        assert not released.wait(timeout=0.05)

        tracker.done()
        assert released.wait(timeout=2)
        thread.join(timeout=2)
        assert tracker.pending == 0

    def test_negative_counter_rejected(self):
        with pytest.raises(ValueError, match="negative"):
            TaskTracker().done()


class TestResultBus:
    """Test cases for ResultBus."""

    def test_results_delivered_until_close(self):
        bus = ResultBus()
        bus.publish(_result("/a"))
        bus.publish(_result("/b"))
        bus.close()

        assert [r.path for r in bus] == ["/a", "/b"]

    def test_iterating_twice_after_close_yields_nothing(self):
        bus = ResultBus()
        bus.publish(_result("/a"))
        bus.close()

        assert len(list(bus)) == 1
        assert list(bus) == []

    def test_publish_after_close_rejected(self):
        bus = ResultBus()
        bus.close()

        with pytest.raises(ResultBusClosedError):
            bus.publish(_result("/a"))

    def test_close_only_once(self):
        bus = ResultBus()
        bus.close()

        assert bus.closed
        with pytest.raises(ResultBusClosedError, match="already closed"):
            bus.close()

    def test_bounded_publish_blocks_until_consumed(self):
        bus = ResultBus(maxsize=1)
        bus.publish(_result("/a"))
        published = threading.Event()

        def producer():
            bus.publish(_result("/b"))
            published.set()

        thread = threading.Thread(target=producer)
        thread.start()

        assert not published.wait(timeout=0.05)

        results = iter(bus)
        assert next(results).path == "/a"
        assert published.wait(timeout=2)
        assert next(results).path == "/b"
        thread.join(timeout=2)

    def test_completion_requires_close(self):
        with pytest.raises(RuntimeError, match="before the result bus was closed"):
            ResultBus().signal_completion(timeout=0)

    def test_acknowledge_requires_completion(self):
        with pytest.raises(RuntimeError, match="before completion"):
            ResultBus().acknowledge()

    def test_completion_rendezvous(self):
        """Test that signal_completion blocks until acknowledged, exactly once."""
        bus = ResultBus()
        bus.close()
        acknowledged = []

        thread = threading.Thread(target=lambda: acknowledged.append(bus.signal_completion(timeout=2)))
        thread.start()

        assert bus.wait_for_completion(timeout=2)
        assert bus.completed
        bus.acknowledge()
        thread.join(timeout=2)

        assert acknowledged == [True]
        with pytest.raises(RuntimeError, match="already acknowledged"):
            bus.acknowledge()
        with pytest.raises(RuntimeError, match="already signalled"):
            bus.signal_completion(timeout=0)


class TestFinalizer:
    """Test cases for the finalizer."""

    def test_finalizer_waits_for_all_tasks(self):
        bus = ResultBus()
        tracker = TaskTracker()
        tracker.add(3)

        def task(index: int):
            time.sleep(0.01 * index)
            bus.publish(_result(f"/t{index}"))
            tracker.done()

        workers = [threading.Thread(target=task, args=(n,)) for n in range(3)]
        finalizer = start_finalizer(tracker, bus)
        for worker in workers:
            worker.start()

        paths = sorted(r.path for r in bus)

        assert paths == ["/t0", "/t1", "/t2"]
        assert bus.wait_for_completion(timeout=2)
        bus.acknowledge()
        finalizer.join(timeout=2)
        assert not finalizer.is_alive()

    def test_finalize_with_no_tasks(self):
        bus = ResultBus()
        tracker = TaskTracker()

        thread = threading.Thread(target=finalize, args=(tracker, bus))
        thread.start()

        assert list(bus) == []
        assert bus.wait_for_completion(timeout=2)
        bus.acknowledge()
        thread.join(timeout=2)
        assert not thread.is_alive()
