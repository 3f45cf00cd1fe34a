"""Background status fetching for fdbtop."""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from queue import Queue

from fdbtop.errors import FetchFailure
from fdbtop.loop import RefreshLoop

logger = logging.getLogger(__name__)

# How often a coalesced tick checks whether the previous cycle has finished.
BUSY_RETRY_SECONDS = 0.05

MIN_INTERVAL = 0.1


@dataclass(slots=True)
class FetchResult:
    """Outcome of one status fetch: the snapshot text or the failure."""

    snapshot: str | None
    error: FetchFailure | None


class StatusMonitor:
    """
    Status monitor that fetches cluster snapshots on a fixed interval.

    Runs in a separate daemon thread and pushes results to a thread-safe Queue.
    Fetches never overlap: a tick that arrives while the previous cycle is
    still being displayed waits for it. ``request_refresh`` cuts the wait
    short so a sort change is visible without waiting for the next tick.
    """

    def __init__(
        self,
        update_queue: Queue[FetchResult],
        refresh_loop: RefreshLoop,
        fetch: Callable[[], str],
        interval: float = 1.0,
    ) -> None:
        """
        Initialize the StatusMonitor.

        Args:
            update_queue: Thread-safe queue to push results to.
            refresh_loop: Cycle state shared with the display side.
            fetch: Returns snapshot text or raises FetchFailure.
            interval: Seconds between fetches. Default 1.0s, at least 0.1s.
        """
        self._queue = update_queue
        self._loop = refresh_loop
        self._fetch = fetch
        self._interval = max(MIN_INTERVAL, interval)
        self._stop_event = threading.Event()
        self._wake_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval(self) -> float:
        """Get the current refresh interval."""
        return self._interval

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="StatusMonitor",
        )
        self._thread.start()
        logger.debug("Status monitor started, interval %ss", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        self._wake_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
        logger.debug("Status monitor stopped")

    def request_refresh(self) -> None:
        """Ask for the next fetch to start now instead of at the next tick."""
        self._wake_event.set()

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        while not self._stop_event.is_set():
            if not self._loop.try_begin_fetch():
                # Previous result not displayed yet; coalesce this tick.
                self._stop_event.wait(timeout=BUSY_RETRY_SECONDS)
                continue

            self._wake_event.clear()
            self._queue.put(self._fetch_once())

            # Wait for the interval, a manual refresh, or a stop request
            self._wake_event.wait(timeout=self.interval)

    def _fetch_once(self) -> FetchResult:
        started = time.monotonic()
        try:
            snapshot = self._fetch()
        except FetchFailure as e:
            self._loop.fetch_failed()
            return FetchResult(snapshot=None, error=e)
        except Exception as e:
            # Every fetch must close its cycle, or the loop never leaves FETCHING
            logger.exception("Unexpected error fetching status")
            self._loop.fetch_failed()
            return FetchResult(snapshot=None, error=FetchFailure(f"Unexpected error fetching status: {e}"))
        self._loop.fetch_succeeded()
        logger.debug("Fetched status in %.3fs", time.monotonic() - started)
        return FetchResult(snapshot=snapshot, error=None)
