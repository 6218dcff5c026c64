"""Tests for the PollScheduler class."""

import threading
from queue import Empty, Queue

import pytest

from conftest import MEMORY, make_cpu
from tabtop.models import CpuSnapshot, Domain, FetchFailure, MemorySnapshot, Message
from tabtop.monitor import POLL_PERIOD, PollScheduler


def _drain(queue: Queue[Message]) -> list[Message]:
    messages = []
    while True:
        try:
            messages.append(queue.get_nowait())
        except Empty:
            return messages


class TestPollScheduler:
    """Tests for PollScheduler class."""

    def test_scheduler_creation(self, fake_collectors):
        """Test PollScheduler starts with every loop dormant."""
        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, fake_collectors)

        assert scheduler.period == POLL_PERIOD == 1.0
        assert scheduler.started == frozenset()
        assert not scheduler.is_running(Domain.CPU)

    def test_ensure_started_is_idempotent(self, fake_collectors):
        """Test starting an already running loop does not spawn a new thread."""
        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, fake_collectors, period=0.1)

        try:
            assert scheduler.ensure_started(Domain.CPU) is True
            thread1 = scheduler._threads[Domain.CPU]
            assert scheduler.ensure_started(Domain.CPU) is False
            thread2 = scheduler._threads[Domain.CPU]

            assert thread1 is thread2
            assert scheduler.started == {Domain.CPU}
        finally:
            scheduler.stop()

    def test_loop_delivers_snapshots(self, fake_collectors):
        """Test a loop fetches immediately and keeps fetching every period."""
        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, fake_collectors, period=0.1)

        scheduler.ensure_started(Domain.CPU)
        try:
            first = queue.get(timeout=2.0)
            second = queue.get(timeout=2.0)
            assert isinstance(first, CpuSnapshot)
            assert isinstance(second, CpuSnapshot)
        finally:
            scheduler.stop()

    def test_failure_becomes_message_and_loop_continues(self):
        """Test a raising collector yields FetchFailure and is called again."""
        calls = []

        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise OSError("sensor unavailable")
            return MEMORY

        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, {Domain.MEMORY: flaky}, period=0.05)

        scheduler.ensure_started(Domain.MEMORY)
        try:
            failure = queue.get(timeout=2.0)
            recovered = queue.get(timeout=2.0)
        finally:
            scheduler.stop()

        assert failure == FetchFailure(Domain.MEMORY, "sensor unavailable")
        assert isinstance(recovered, MemorySnapshot)

    def test_failure_without_message_uses_exception_name(self):
        """Test an exception with no text is still described."""

        def broken():
            raise RuntimeError()

        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, {Domain.DISK: broken}, period=0.05)
        scheduler.ensure_started(Domain.DISK)
        try:
            failure = queue.get(timeout=2.0)
        finally:
            scheduler.stop()

        assert failure == FetchFailure(Domain.DISK, "RuntimeError")

    def test_always_failing_loop_never_stops(self):
        """Test there is no backoff or termination on repeated errors."""

        def broken():
            raise ValueError("bad read")

        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, {Domain.NETWORK: broken}, period=0.02)
        scheduler.ensure_started(Domain.NETWORK)
        try:
            failures = [queue.get(timeout=2.0) for _ in range(5)]
            assert scheduler.is_running(Domain.NETWORK)
        finally:
            scheduler.stop()

        assert all(isinstance(f, FetchFailure) for f in failures)

    def test_loops_run_independently(self, fake_collectors):
        """Test several domain loops deliver concurrently."""
        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, fake_collectors, period=0.05)

        scheduler.ensure_started(Domain.CPU)
        scheduler.ensure_started(Domain.MEMORY)
        try:
            seen = set()
            for _ in range(10):
                seen.add(type(queue.get(timeout=2.0)))
        finally:
            scheduler.stop()

        assert {CpuSnapshot, MemorySnapshot} <= seen

    def test_slow_collector_does_not_block_other_loops(self):
        """Test a blocked collector only stalls its own loop."""
        release = threading.Event()

        def stuck():
            release.wait(timeout=5.0)
            return MEMORY

        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(
            queue, {Domain.MEMORY: stuck, Domain.CPU: make_cpu}, period=0.05
        )
        scheduler.ensure_started(Domain.MEMORY)
        scheduler.ensure_started(Domain.CPU)
        try:
            assert isinstance(queue.get(timeout=2.0), CpuSnapshot)
        finally:
            release.set()
            scheduler.stop()

    def test_stop_tears_down_all_loops(self, fake_collectors):
        """Test stop() ends every loop and prevents new ones."""
        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, fake_collectors, period=0.05)

        scheduler.ensure_started(Domain.CPU)
        scheduler.ensure_started(Domain.DISK)
        scheduler.stop()

        assert not scheduler.is_running(Domain.CPU)
        assert not scheduler.is_running(Domain.DISK)
        assert scheduler.ensure_started(Domain.MEMORY) is False
        _drain(queue)

    def test_unknown_domain_is_not_started(self):
        """Test a domain without a collector is refused."""
        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, {}, period=0.05)

        assert scheduler.ensure_started(Domain.SYSTEM) is False
        assert scheduler.started == frozenset()

    @pytest.mark.parametrize("domain", list(Domain))
    def test_daemon_threads(self, fake_collectors, domain):
        """Test each loop runs in a named daemon thread."""
        queue: Queue[Message] = Queue()
        scheduler = PollScheduler(queue, fake_collectors, period=0.05)

        scheduler.ensure_started(domain)
        try:
            thread = scheduler._threads[domain]
            assert thread.daemon is True
            assert thread.name == f"PollScheduler-{domain.value}"
        finally:
            scheduler.stop()
