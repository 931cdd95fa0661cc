"""Allow running the service with ``python -m vessel_telemetry``."""

from vessel_telemetry.main import main

main()
