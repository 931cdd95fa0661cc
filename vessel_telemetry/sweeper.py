"""Background expiry of stale telemetry records.

The sweeper runs on its own daemon thread and removes vessels that have not
reported within the staleness threshold. It can be paused at runtime through
``enabled`` and stopped deterministically with ``stop()``.
"""

import threading
from collections.abc import Callable
from typing import Optional

from vessel_telemetry.event_log import event_log
from vessel_telemetry.store import TelemetryStore, now_millis


class ExpirySweeper:
    """Periodically sweeps a TelemetryStore.

    Args:
        store: Store to sweep
        interval_ms: Period between ticks in milliseconds
        threshold_ms: Records older than this are removed
        enabled: Initial value of the runtime toggle
        clock: Millisecond clock used when a tick is not given ``now``
    """

    def __init__(
        self,
        store: TelemetryStore,
        interval_ms: float = 2.5,
        threshold_ms: float = 5000.0,
        enabled: bool = True,
        clock: Callable[[], int] = now_millis,
    ) -> None:
        self.store = store
        self.interval_ms = interval_ms
        self.threshold_ms = threshold_ms
        # Read once per tick; a stale read only delays the change by one tick.
        self.enabled = enabled
        self.total_removed = 0
        self._clock = clock
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def tick(self, now: Optional[int] = None) -> int:
        """Run one sweep pass.

        Args:
            now: Current time in Unix milliseconds (default: the clock)

        Returns:
            Number of records removed (0 when disabled)
        """
        if not self.enabled:
            return 0

        if now is None:
            now = self._clock()
        removed = self.store.sweep(now, self.threshold_ms)
        if removed:
            self.total_removed += removed
            event_log.log_vessels_expired(
                removed=removed,
                remaining=len(self.store),
                threshold_ms=self.threshold_ms,
            )
        return removed

    def _run(self) -> None:
        interval = self.interval_ms / 1000.0
        while not self._stop_event.wait(interval):
            self.tick()

    def start(self) -> None:
        """Start the sweeper thread (no-op if already running)."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, daemon=True, name="expiry-sweeper")
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        """Signal the thread to exit and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None
