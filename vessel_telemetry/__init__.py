"""Vessel Telemetry Service - in-memory telemetry ingestion and query API."""

__version__ = "1.0.0"
