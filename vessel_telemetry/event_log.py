"""
Vessel Telemetry Event Logging

Structured JSON logging for operational events (startup, configuration,
ingestion, expiry). Separate from the per-request access log emitted by the
middleware.

Usage:
    from vessel_telemetry.event_log import event_log

    event_log.log_vessels_expired(removed=3, remaining=12, threshold_ms=5000)
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from vessel_telemetry.events import EVENT_SEVERITY, EventSeverity, EventType

LOGGER_NAME = "vessel_telemetry.events"

_LEVELS = {
    EventSeverity.DEBUG: logging.DEBUG,
    EventSeverity.INFO: logging.INFO,
    EventSeverity.WARNING: logging.WARNING,
    EventSeverity.ERROR: logging.ERROR,
}


class EventLogger:
    """
    Structured event logger.

    Outputs single-line JSON events to a dedicated logger. Each event includes:
    timestamp, event_id, event_type, severity, service and details.
    """

    def __init__(self, service_name: str = "vessel-telemetry"):
        """Initialize event logger with service name."""
        self.service = service_name
        self.logger = self._configure_logger()

    def _configure_logger(self) -> logging.Logger:
        """Configure dedicated event logger with JSON output."""
        logger = logging.getLogger(LOGGER_NAME)
        if logger.level == logging.NOTSET:
            logger.setLevel(logging.INFO)
        logger.propagate = False  # Don't propagate to root logger

        # Only add handler if not already configured
        if not logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)

        return logger

    def set_level(self, level: str) -> None:
        """Set the minimum level (name such as ``"DEBUG"``) of emitted events."""
        self.logger.setLevel(level.upper())

    def _generate_event_id(self) -> str:
        """Generate unique event ID."""
        return f"evt_{uuid.uuid4().hex[:12]}"

    def _get_timestamp(self) -> str:
        """Get current UTC timestamp in ISO format."""
        return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def log(
        self,
        event_type: EventType,
        details: Optional[dict[str, Any]] = None,
        severity_override: Optional[EventSeverity] = None,
    ) -> Optional[str]:
        """
        Log an event.

        Args:
            event_type: Type of event (from EventType enum)
            details: Additional context
            severity_override: Override default severity

        Returns:
            Generated event_id, or None when the severity is below the
            configured level and nothing was emitted
        """
        severity = severity_override or EVENT_SEVERITY.get(event_type, EventSeverity.INFO)
        level = _LEVELS[severity]
        if not self.logger.isEnabledFor(level):
            return None

        event_id = self._generate_event_id()

        event = {
            "timestamp": self._get_timestamp(),
            "event_id": event_id,
            "event_type": event_type.value,
            "severity": severity.value,
            "service": self.service,
            "details": details or {},
        }

        self.logger.log(level, f"EVENT: {json.dumps(event, separators=(',', ':'))}")

        return event_id

    # Convenience methods

    def log_service_started(self, host: str, port: int, version: Optional[str] = None):
        """Log a successful listener start."""
        details: dict[str, Any] = {"host": host, "port": port}
        if version:
            details["version"] = version
        return self.log(EventType.SERVICE_STARTED, details)

    def log_service_stopped(self, reason: str = "shutdown"):
        """Log service shutdown."""
        return self.log(EventType.SERVICE_STOPPED, {"reason": reason})

    def log_startup_failed(self, reason: str, port: Optional[int] = None):
        """Log a fatal startup failure."""
        return self.log(EventType.STARTUP_FAILED, {"reason": reason, "port": port})

    def log_config_created(self, path: str, port: int):
        """Log creation of a default configuration file."""
        return self.log(EventType.CONFIG_CREATED, {"path": path, "port": port})

    def log_config_invalid(self, path: str, reason: str):
        """Log an unreadable or invalid configuration file."""
        return self.log(EventType.CONFIG_INVALID, {"path": path, "reason": reason})

    def log_health_check(self, host: Optional[str]):
        """Log a /info request."""
        return self.log(EventType.HEALTH_CHECK, {"host": host})

    def log_telemetry_saved(self, key: str, x: float, y: float, z: float, direction: float):
        """Log a stored telemetry record."""
        return self.log(
            EventType.TELEMETRY_SAVED,
            {"vessel": key, "x": x, "y": y, "z": z, "direction": direction},
        )

    def log_vessel_id_coerced(self, raw_id: str, coerced_to: int):
        """Log a veh_id that could not be parsed as an integer."""
        return self.log(EventType.VESSEL_ID_COERCED, {"raw_id": raw_id, "coerced_to": coerced_to})

    def log_vessels_expired(self, removed: int, remaining: int, threshold_ms: float):
        """Log a sweep that removed stale vessels."""
        return self.log(
            EventType.VESSELS_EXPIRED,
            {"removed": removed, "remaining": remaining, "threshold_ms": threshold_ms},
        )


# Global event logger instance
event_log = EventLogger()
