"""Vessel Telemetry Service - Main application module.

In-memory telemetry ingestion and query service for simulated vessels.
It provides:
- Telemetry upsert and snapshot endpoints (/telemetry/*)
- Instance identification (/info) and health check (/health)
- Background expiry of vessels that stopped reporting
- Structured JSON logging and Prometheus metrics (/metrics)
"""

import signal
import socket
import sys
import threading
import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vessel_telemetry import __version__
from vessel_telemetry.api import router as telemetry_router
from vessel_telemetry.config import ConfigError, Settings, load_settings
from vessel_telemetry.errors import (
    ErrorCode,
    ErrorCodeResponse,
    error_code_for_status,
    error_response,
)
from vessel_telemetry.event_log import event_log
from vessel_telemetry.metrics import setup_metrics
from vessel_telemetry.middlewares import json_logging_middleware
from vessel_telemetry.schemas import HealthCheckResponse
from vessel_telemetry.store import TelemetryStore
from vessel_telemetry.sweeper import ExpirySweeper


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the expiry sweeper for the lifetime of the application."""
    sweeper: ExpirySweeper = app.state.sweeper
    sweeper.start()
    try:
        yield
    finally:
        sweeper.stop()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep the HTTP status of framework errors, with an errorcode body."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(error_code_for_status(exc.status_code)),
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with the ServerError code."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response(ErrorCode.SERVER_ERROR),
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TelemetryStore] = None,
) -> FastAPI:
    """Build the application with its own store and sweeper.

    Args:
        settings: Service settings (default: environment settings)
        store: Telemetry store to serve (default: a new empty store)

    Returns:
        FastAPI: the configured application
    """
    settings = settings or Settings()
    store = store if store is not None else TelemetryStore()

    event_log.set_level(settings.log_level)

    app = FastAPI(
        title="Vessel Telemetry Service",
        version=__version__,
        description="In-memory telemetry ingestion and query service for simulated vessels.",
        lifespan=lifespan,
        responses={
            404: {"model": ErrorCodeResponse},
            500: {"model": ErrorCodeResponse},
        },
    )

    app.state.settings = settings
    app.state.instance_id = uuid.uuid4()
    app.state.store = store
    app.state.sweeper = ExpirySweeper(
        store,
        interval_ms=settings.sweep_interval_ms,
        threshold_ms=settings.stale_threshold_ms,
        enabled=settings.sweep_enabled,
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.middleware("http")(json_logging_middleware)

    app.include_router(telemetry_router)

    @app.get("/health", response_model=HealthCheckResponse, tags=["health"])
    async def health_check() -> HealthCheckResponse:
        """Health check endpoint."""
        return HealthCheckResponse(status="healthy", service=settings.service_name)

    @app.get("/", tags=["health"])
    async def root() -> JSONResponse:
        """Basic service information."""
        return JSONResponse(
            {
                "service": settings.service_name,
                "version": __version__,
                "status": "running",
            }
        )

    # Expose /metrics endpoint (after all routes are registered)
    setup_metrics(app)

    return app


def wait_until_listening(
    server: uvicorn.Server,
    thread: threading.Thread,
    host: str,
    port: int,
    timeout: float,
) -> bool:
    """Wait for uvicorn to start, then confirm with a TCP self-connection.

    Returns:
        True if a connection to ``host:port`` succeeded within ``timeout``
    """
    deadline = time.monotonic() + timeout
    while not server.started:
        if not thread.is_alive() or time.monotonic() >= deadline:
            return False
        time.sleep(0.01)

    remaining = max(deadline - time.monotonic(), 0.1)
    try:
        with socket.create_connection((host, port), timeout=remaining):
            return True
    except OSError:
        return False


def serve(app: FastAPI, settings: Settings) -> int:
    """Serve ``app`` until SIGINT/SIGTERM.

    Returns:
        Process exit status (1 if the listener did not come up)
    """
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    # uvicorn only installs its signal handlers on the main thread
    thread = threading.Thread(target=server.run, name="uvicorn", daemon=True)
    thread.start()

    if not wait_until_listening(server, thread, settings.host, settings.port, settings.startup_timeout):
        event_log.log_startup_failed("listener did not accept connections", port=settings.port)
        server.should_exit = True
        thread.join(timeout=settings.startup_timeout)
        return 1

    event_log.log_service_started(settings.host, settings.port, version=__version__)

    stop = threading.Event()

    def _request_stop(signum, frame):
        stop.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    # Also return if the server thread dies on its own
    while not stop.wait(0.5):
        if not thread.is_alive():
            break

    server.should_exit = True
    thread.join(timeout=10.0)
    event_log.log_service_stopped("signal" if stop.is_set() else "server exited")
    return 0


def main() -> None:
    """Console entry point."""
    try:
        settings = load_settings()
    except ConfigError as e:
        event_log.log_startup_failed(str(e))
        sys.exit(1)

    sys.exit(serve(create_app(settings), settings))


def create_app_from_config() -> FastAPI:
    """Application factory honouring ``config.json``.

    For running under uvicorn directly:
    ``uvicorn --factory vessel_telemetry.main:create_app_from_config``.
    Port and host still come from the uvicorn command line in that case.
    """
    return create_app(load_settings())


if __name__ == "__main__":
    main()
