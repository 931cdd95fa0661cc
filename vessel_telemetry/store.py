"""In-memory telemetry store.

Holds the latest record per vessel. Shared between the request handlers and
the expiry sweeper, so every access to the mapping goes through one lock.
"""

import threading
import time
from collections.abc import Callable
from typing import Optional

from vessel_telemetry.schemas import VesselTelemetry


def now_millis() -> int:
    """Current wall-clock time in Unix milliseconds."""
    return time.time_ns() // 1_000_000


class TelemetryStore:
    """Thread-safe store of the latest telemetry record per vessel key.

    Records are immutable, so a snapshot is a list of the stored instances
    taken under the lock: it can never contain a partially written record.
    """

    def __init__(self, clock: Callable[[], int] = now_millis) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._vessels: dict[str, VesselTelemetry] = {}

    def upsert(self, key: str, record: VesselTelemetry) -> VesselTelemetry:
        """Insert or replace the record for ``key``, stamped with the current time."""
        with self._lock:
            stamped = record.model_copy(update={"timestamp": self._clock()})
            self._vessels[key] = stamped
        return stamped

    def snapshot(self) -> list[VesselTelemetry]:
        """Return a copy of all current records, in no particular order."""
        with self._lock:
            return list(self._vessels.values())

    def sweep(self, now: int, threshold_ms: float) -> int:
        """Remove records older than ``now - threshold_ms``.

        Returns:
            Number of records removed
        """
        cutoff = now - threshold_ms
        with self._lock:
            stale = [key for key, vessel in self._vessels.items() if vessel.timestamp < cutoff]
            for key in stale:
                del self._vessels[key]
        return len(stale)

    def get(self, key: str) -> Optional[VesselTelemetry]:
        with self._lock:
            return self._vessels.get(key)

    def __len__(self) -> int:
        with self._lock:
            return len(self._vessels)
