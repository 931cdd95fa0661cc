"""Vessel Telemetry Service configuration.

Settings come from environment variables (and an optional ``.env`` file),
overridden by a persisted JSON configuration file that lives next to the
launched script. The file is created with the default port on first start.
"""

import json
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from vessel_telemetry.event_log import event_log

CONFIG_FILENAME = "config.json"
DEFAULT_PORT = 8000


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be read or is invalid."""


class Settings(BaseSettings):
    """Vessel Telemetry Service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Service settings
    service_name: str = "vessel-telemetry"
    environment: str = "development"
    log_level: str = "INFO"

    # Server settings
    host: str = "localhost"
    port: int = DEFAULT_PORT
    startup_timeout: float = 3.0  # seconds allowed for the self-connect probe

    # Expiry sweeper
    sweep_interval_ms: float = 2.5
    stale_threshold_ms: float = 5000.0
    sweep_enabled: bool = True


def default_config_path() -> Path:
    """Return ``config.json`` next to the launched script.

    Falls back to the working directory when the interpreter was started
    without a script (interactive session, ``-c``).
    """
    script = sys.argv[0] if sys.argv else ""
    if not script or script == "-c":
        return Path.cwd() / CONFIG_FILENAME
    return Path(script).resolve().parent / CONFIG_FILENAME


def create_default_config(path: Path) -> dict:
    """Write the default configuration file and return its content."""
    data = {"port": DEFAULT_PORT}
    try:
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot create {path}: {e}") from e

    event_log.log_config_created(str(path), DEFAULT_PORT)
    return data


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """Load settings, creating the configuration file if it is missing.

    Args:
        config_file: Path of the JSON config file (default: next to the script)

    Returns:
        Settings: environment settings overridden by the file values

    Raises:
        ConfigError: If the file cannot be read, is not a JSON object or
            holds invalid values
    """
    path = Path(config_file) if config_file is not None else default_config_path()

    if not path.exists():
        data = create_default_config(path)
    else:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            event_log.log_config_invalid(str(path), str(e))
            raise ConfigError(f"cannot read {path}: {e}") from e

    if not isinstance(data, dict):
        event_log.log_config_invalid(str(path), "not a JSON object")
        raise ConfigError(f"{path} must contain a JSON object")

    try:
        return Settings(**data)
    except ValidationError as e:
        event_log.log_config_invalid(str(path), "invalid values")
        raise ConfigError(f"invalid configuration in {path}: {e}") from e
