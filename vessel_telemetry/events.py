"""
Vessel Telemetry Event Types

Defines the operational events emitted by the service and their severities.
"""

from enum import Enum


class EventType(str, Enum):
    """Operational event types."""

    # Lifecycle Events
    SERVICE_STARTED = "SERVICE_STARTED"
    SERVICE_STOPPED = "SERVICE_STOPPED"
    STARTUP_FAILED = "STARTUP_FAILED"

    # Configuration Events
    CONFIG_CREATED = "CONFIG_CREATED"
    CONFIG_INVALID = "CONFIG_INVALID"

    # Request Events
    HEALTH_CHECK = "HEALTH_CHECK"
    TELEMETRY_SAVED = "TELEMETRY_SAVED"
    VESSEL_ID_COERCED = "VESSEL_ID_COERCED"

    # Store Maintenance Events
    VESSELS_EXPIRED = "VESSELS_EXPIRED"


class EventSeverity(str, Enum):
    """Severity levels for events."""

    DEBUG = "debug"  # High-volume per-request detail
    INFO = "info"  # Normal operations
    WARNING = "warning"  # Client sent something we had to coerce
    ERROR = "error"  # Service cannot continue


# Event type to severity mapping
EVENT_SEVERITY = {
    EventType.SERVICE_STARTED: EventSeverity.INFO,
    EventType.SERVICE_STOPPED: EventSeverity.INFO,
    EventType.STARTUP_FAILED: EventSeverity.ERROR,
    EventType.CONFIG_CREATED: EventSeverity.INFO,
    EventType.CONFIG_INVALID: EventSeverity.ERROR,
    EventType.HEALTH_CHECK: EventSeverity.INFO,
    EventType.TELEMETRY_SAVED: EventSeverity.DEBUG,
    EventType.VESSEL_ID_COERCED: EventSeverity.WARNING,
    EventType.VESSELS_EXPIRED: EventSeverity.INFO,
}
