"""Tests for the in-memory telemetry store."""

import threading

import pytest
from pydantic import ValidationError

from vessel_telemetry.schemas import VesselTelemetry
from vessel_telemetry.store import TelemetryStore, now_millis

THRESHOLD_MS = 5000


def _vessel(vessel_id: int, **fields) -> VesselTelemetry:
    return VesselTelemetry(id=vessel_id, **fields)


class TestUpsert:
    """Insert and replace semantics."""

    def test_upsert_stamps_timestamp_from_clock(self, store, clock):
        """The store sets the timestamp, ignoring the caller's value."""
        saved = store.upsert("7", _vessel(7, timestamp=123))

        assert saved.timestamp == clock.now
        assert store.get("7").timestamp == clock.now

    def test_upsert_same_id_replaces_record(self, store, clock):
        """Second upsert for an id fully replaces the first."""
        store.upsert("42", _vessel(42, name="first", x=1.0, has_target=True))
        first_ts = store.get("42").timestamp

        clock.advance(10)
        store.upsert("42", _vessel(42, name="second", x=2.0))

        vessels = store.snapshot()
        assert len(vessels) == 1
        assert vessels[0].name == "second"
        assert vessels[0].x == 2.0
        assert vessels[0].has_target is False
        assert vessels[0].timestamp >= first_ts

    def test_distinct_ids_accumulate(self, store):
        """N distinct ids yield N records."""
        for i in range(25):
            store.upsert(str(i), _vessel(i))

        assert len(store) == 25
        assert {v.id for v in store.snapshot()} == set(range(25))

    def test_keys_are_raw_strings(self, store):
        """Records are keyed by the raw id string, not the parsed id."""
        store.upsert("abc", _vessel(-1))
        store.upsert("xyz", _vessel(-1))

        assert len(store) == 2
        assert store.get("abc").id == -1
        assert store.get("-1") is None

    def test_records_are_immutable(self, store):
        """Stored records cannot be modified in place."""
        saved = store.upsert("1", _vessel(1))

        with pytest.raises(ValidationError):
            saved.x = 99.0


class TestSnapshot:
    """Snapshot copies."""

    def test_empty_store_snapshot(self, store):
        assert store.snapshot() == []
        assert len(store) == 0

    def test_snapshot_is_independent_copy(self, store):
        """Mutating a snapshot list does not affect the store."""
        store.upsert("1", _vessel(1))
        snapshot = store.snapshot()
        snapshot.clear()

        assert len(store) == 1

    def test_snapshot_does_not_see_later_upserts(self, store):
        store.upsert("1", _vessel(1))
        snapshot = store.snapshot()
        store.upsert("2", _vessel(2))

        assert len(snapshot) == 1


class TestSweep:
    """Time-based eviction."""

    def test_sweep_threshold_boundary(self, store, clock):
        """now - T - 1 is removed, now - T + 1 survives."""
        now = clock.now
        clock.now = now - THRESHOLD_MS - 1
        store.upsert("old", _vessel(1))
        clock.now = now - THRESHOLD_MS + 1
        store.upsert("fresh", _vessel(2))

        removed = store.sweep(now, THRESHOLD_MS)

        assert removed == 1
        assert store.get("old") is None
        assert store.get("fresh") is not None

    def test_record_exactly_at_threshold_survives(self, store, clock):
        now = clock.now
        clock.now = now - THRESHOLD_MS
        store.upsert("edge", _vessel(1))

        assert store.sweep(now, THRESHOLD_MS) == 0
        assert len(store) == 1

    def test_sweep_returns_count_removed(self, store, clock):
        for i in range(5):
            store.upsert(str(i), _vessel(i))
        clock.advance(THRESHOLD_MS + 1)
        store.upsert("new", _vessel(99))

        assert store.sweep(clock.now, THRESHOLD_MS) == 5
        assert [v.id for v in store.snapshot()] == [99]

    def test_refreshed_record_survives_sweep(self, store, clock):
        """A later upsert resets the record's age."""
        store.upsert("1", _vessel(1))
        clock.advance(THRESHOLD_MS)
        store.upsert("1", _vessel(1))
        clock.advance(THRESHOLD_MS)

        assert store.sweep(clock.now, THRESHOLD_MS) == 0

    def test_sweep_empty_store(self, store, clock):
        assert store.sweep(clock.now, THRESHOLD_MS) == 0


class TestConcurrency:
    """Concurrent writers and readers."""

    def test_concurrent_upserts_and_snapshots_are_consistent(self):
        """Snapshots taken during concurrent upserts never hold torn records."""
        store = TelemetryStore()
        writers = 8
        per_writer = 200
        errors = []
        done = threading.Event()

        def write(worker: int) -> None:
            for i in range(per_writer):
                vessel_id = worker * per_writer + i
                store.upsert(
                    str(vessel_id),
                    VesselTelemetry(
                        id=vessel_id,
                        name=f"v{vessel_id}",
                        x=float(vessel_id),
                        y=float(vessel_id) * 2,
                    ),
                )

        def read() -> None:
            last_size = 0
            while not done.is_set():
                snapshot = store.snapshot()
                if len(snapshot) < last_size:
                    errors.append("snapshot shrank without a sweep")
                last_size = len(snapshot)
                for vessel in snapshot:
                    if vessel.name != f"v{vessel.id}" or vessel.y != vessel.x * 2:
                        errors.append(f"torn record {vessel!r}")

        reader = threading.Thread(target=read)
        reader.start()
        threads = [threading.Thread(target=write, args=(w,)) for w in range(writers)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        done.set()
        reader.join()

        assert errors == []
        assert len(store) == writers * per_writer

    def test_snapshot_during_last_upsert_sees_n_minus_one_or_n(self):
        """A snapshot racing the last of N upserts returns N-1 or N records."""
        store = TelemetryStore()
        n = 50
        for i in range(n - 1):
            store.upsert(str(i), VesselTelemetry(id=i))

        results = []
        last = threading.Thread(
            target=store.upsert, args=(str(n - 1), VesselTelemetry(id=n - 1))
        )
        reader = threading.Thread(target=lambda: results.append(store.snapshot()))
        last.start()
        reader.start()
        last.join()
        reader.join()

        assert n - 1 <= len(results[0]) <= n

    def test_sweep_concurrent_with_upserts(self):
        """Sweeping while writers run never loses fresh records."""
        store = TelemetryStore()
        stop = threading.Event()

        def sweep_loop() -> None:
            while not stop.is_set():
                store.sweep(now_millis(), THRESHOLD_MS)

        sweeper = threading.Thread(target=sweep_loop)
        sweeper.start()
        for i in range(500):
            store.upsert(str(i), VesselTelemetry(id=i))
        stop.set()
        sweeper.join()

        assert len(store) == 500


def test_now_millis_is_epoch_milliseconds():
    """now_millis returns a plausible millisecond epoch value."""
    value = now_millis()
    assert isinstance(value, int)
    assert value > 1_600_000_000_000
