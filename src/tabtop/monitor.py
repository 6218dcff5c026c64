"""Polling engine for tabtop."""

import logging
import threading
from queue import Queue

from tabtop.collectors import DEFAULT_COLLECTORS, Collector
from tabtop.models import Domain, FetchFailure, Message

logger = logging.getLogger(__name__)

POLL_PERIOD = 1.0


class PollScheduler:
    """
    Owns one self-perpetuating refresh loop per metric domain.

    Each loop runs in its own daemon thread, calls the domain's collector
    once per period and pushes the result (a snapshot or a FetchFailure)
    into a thread-safe Queue. Loops never touch dashboard state directly.
    Once started, a loop keeps running until stop() tears down all of them.
    """

    def __init__(
        self,
        message_queue: Queue[Message],
        collectors: dict[Domain, Collector] | None = None,
        period: float = POLL_PERIOD,
    ) -> None:
        """
        Initialize the PollScheduler.

        Args:
            message_queue: Thread-safe queue that receives every result.
            collectors: Collector per domain. Defaults to the psutil collectors.
            period: Seconds between two iterations of a loop.
        """
        self._queue = message_queue
        self._collectors = dict(DEFAULT_COLLECTORS if collectors is None else collectors)
        self._period = period
        self._stop_event = threading.Event()
        self._threads: dict[Domain, threading.Thread] = {}
        self._lock = threading.Lock()

    @property
    def period(self) -> float:
        """Get the refresh period."""
        return self._period

    @property
    def started(self) -> frozenset[Domain]:
        """Domains whose loop has been started."""
        with self._lock:
            return frozenset(self._threads)

    def is_running(self, domain: Domain) -> bool:
        """Check if the loop for ``domain`` is alive."""
        thread = self._threads.get(domain)
        return thread is not None and thread.is_alive()

    def ensure_started(self, domain: Domain) -> bool:
        """
        Start the loop for ``domain`` unless it was already started.

        Returns:
            True if a new loop was spawned.
        """
        with self._lock:
            if domain in self._threads or self._stop_event.is_set():
                return False
            collector = self._collectors.get(domain)
            if collector is None:
                logger.warning("No collector registered for %s", domain.value)
                return False

            thread = threading.Thread(
                target=self._poll_loop,
                args=(domain, collector),
                daemon=True,
                name=f"PollScheduler-{domain.value}",
            )
            self._threads[domain] = thread
            thread.start()

        logger.info("Started %s refresh loop (period %.1fs)", domain.value, self._period)
        return True

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop every loop together.

        Args:
            timeout: How long to wait for each thread to stop (seconds).
        """
        self._stop_event.set()
        with self._lock:
            threads = list(self._threads.values())
        for thread in threads:
            thread.join(timeout=timeout)

    def _poll_loop(self, domain: Domain, collector: Collector) -> None:
        """Main polling loop running in a background thread."""
        while not self._stop_event.is_set():
            self._queue.put(self._fetch(domain, collector))
            # Reschedule unconditionally, even after a failure
            self._stop_event.wait(timeout=self._period)

    @staticmethod
    def _fetch(domain: Domain, collector: Collector) -> Message:
        """Run one collector call, turning any error into a FetchFailure."""
        try:
            return collector()
        except Exception as e:
            logger.warning("%s collector failed: %s", domain.value, e)
            return FetchFailure(domain=domain, message=str(e) or type(e).__name__)
