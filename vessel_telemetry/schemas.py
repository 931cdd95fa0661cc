"""Pydantic schemas for the vessel telemetry service."""

from enum import IntEnum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# ---------- Vessel types ----------


class VesselType(IntEnum):
    """Known vessel type codes.

    The set is open: clients may report codes outside it and those are kept
    as raw integers.
    """

    INSTALLATION = 1
    VESSEL = 2
    MISSILE = 3
    AIR = 4

    @classmethod
    def from_code(cls, code: int) -> Union["VesselType", int]:
        """Return the member for ``code``, or ``code`` itself if unknown."""
        try:
            return cls(code)
        except ValueError:
            return code


# ---------- Main models ----------


class VesselTelemetry(BaseModel):
    """Latest known state of one vessel.

    Field aliases are the keys used on the wire.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    id: int = Field(..., description="Vessel identifier (-1 if malformed)")
    name: str = Field("", description="Vessel name")
    callsign: str = Field("", description="Radio callsign")
    x: float = Field(0.0, description="X coordinate")
    y: float = Field(0.0, description="Y coordinate")
    z: float = Field(0.0, description="Z coordinate")
    abs_speed: float = Field(0.0, alias="absspeed", description="Absolute speed")
    vessel_type: int = Field(0, alias="type", description="Vessel type code")
    direction: float = Field(0.0, description="Heading")
    timestamp: int = Field(0, description="Ingestion time (Unix milliseconds)")
    tgt_x: float = Field(0.0, alias="tgtx", description="Target X coordinate")
    tgt_y: float = Field(0.0, alias="tgty", description="Target Y coordinate")
    tgt_z: float = Field(0.0, alias="tgtz", description="Target Z coordinate")
    has_target: bool = Field(False, alias="hastgt", description="Target X and Y both non-zero")

    @property
    def kind(self) -> Union[VesselType, int]:
        """Vessel type as a VesselType member when the code is known."""
        return VesselType.from_code(self.vessel_type)


class VesselsResponse(BaseModel):
    """Snapshot of all known vessels."""

    errorcode: int = Field(..., description="Application error code (-1 on success)")
    vessels: list[VesselTelemetry] = Field(..., description="All current records")
    count: int = Field(..., description="Number of records")
    timestamp: int = Field(..., description="Response time (Unix milliseconds)")


class InfoResponse(BaseModel):
    """Response for /info."""

    UUID: str = Field(..., description="Process instance identifier")


class HealthCheckResponse(BaseModel):
    """Response for /health."""

    status: str = Field(..., description="Service status")
    service: str = Field(..., description="Service name")
