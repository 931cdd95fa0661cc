"""Prometheus metrics for the Vessel Telemetry Service.

Each application gets its own CollectorRegistry so several apps (tests,
embedded use) can coexist in one process. Besides the HTTP metrics from
prometheus-fastapi-instrumentator, the registry carries the store size and
the number of vessels expired by the sweeper.
"""

from fastapi import FastAPI
from prometheus_client import CollectorRegistry
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_fastapi_instrumentator import Instrumentator


class TelemetryCollector:
    """Reads store and sweeper state from ``app.state`` at scrape time."""

    def __init__(self, app: FastAPI):
        self._app = app

    def collect(self):
        store = getattr(self._app.state, "store", None)
        sweeper = getattr(self._app.state, "sweeper", None)

        vessels = GaugeMetricFamily(
            "vessel_telemetry_vessels",
            "Number of vessels currently held in the telemetry store",
        )
        vessels.add_metric([], len(store) if store is not None else 0)
        yield vessels

        expired = CounterMetricFamily(
            "vessel_telemetry_expired",
            "Total number of vessels removed by the expiry sweeper",
        )
        expired.add_metric([], sweeper.total_removed if sweeper is not None else 0)
        yield expired


def setup_metrics(app: FastAPI) -> CollectorRegistry:
    """Instrument ``app`` and expose /metrics. Call after routes are added."""
    registry = CollectorRegistry()
    registry.register(TelemetryCollector(app))

    instrumentator = Instrumentator(
        should_group_status_codes=False,  # Keep individual status codes
        should_ignore_untemplated=True,  # Ignore requests without route template
        should_respect_env_var=False,  # Always enable metrics
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics"],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
        registry=registry,
    )
    instrumentator.instrument(app).expose(app, include_in_schema=False)

    app.state.metrics_registry = registry
    return registry
