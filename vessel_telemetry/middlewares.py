"""Middlewares for the Vessel Telemetry Service.

This module provides:
- JSON structured access logging with trace_id (W3C Trace Context)
- Request/response correlation through the X-Trace-Id header
"""

import json
import time
import uuid
from datetime import datetime, timezone

from fastapi import Request, Response


async def json_logging_middleware(request: Request, call_next):
    """Log all requests and responses in structured JSON format.

    - Generates or propagates trace_id from X-Trace-Id header
    - Logs request method, path, status, duration
    - Outputs JSON logs to stdout for centralized logging

    Query strings are NOT logged; telemetry values go to the event log at
    debug level instead.

    Args:
        request: The incoming HTTP request
        call_next: The next middleware or route handler

    Returns:
        Response with X-Trace-Id header added
    """
    trace_id = request.headers.get("X-Trace-Id") or str(uuid.uuid4())

    start_time = time.perf_counter()
    response: Response = await call_next(request)
    duration_ms = (time.perf_counter() - start_time) * 1000

    log_entry = {
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "service": request.app.state.settings.service_name,
        "trace_id": trace_id,
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": round(duration_ms, 2),
    }

    # Output JSON log to stdout
    print(json.dumps(log_entry), flush=True)

    response.headers["X-Trace-Id"] = trace_id

    return response
