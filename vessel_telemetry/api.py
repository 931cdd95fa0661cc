"""Vessel telemetry API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from vessel_telemetry.errors import ErrorCode, error_response
from vessel_telemetry.event_log import event_log
from vessel_telemetry.parsing import telemetry_from_params
from vessel_telemetry.schemas import InfoResponse, VesselsResponse
from vessel_telemetry.store import TelemetryStore, now_millis

router = APIRouter()


def get_store(request: Request) -> TelemetryStore:
    """Telemetry store owned by the application."""
    return request.app.state.store


def _vessels_response(store: TelemetryStore) -> VesselsResponse:
    vessels = store.snapshot()
    return VesselsResponse(
        errorcode=ErrorCode.SUCCESS,
        vessels=vessels,
        count=len(vessels),
        timestamp=now_millis(),
    )


# ---------- Info ----------


@router.get("/info", response_model=InfoResponse, tags=["info"])
async def info(request: Request) -> InfoResponse:
    """Identify this service instance.

    The UUID is generated when the application is created and does not
    change until the process restarts.
    """
    event_log.log_health_check(request.headers.get("host"))
    return InfoResponse(UUID=str(request.app.state.instance_id))


# ---------- Telemetry ----------


TELEMETRY_PARAMS = (
    "veh_id",
    "veh_x",
    "veh_y",
    "veh_z",
    "veh_abs_spd",
    "veh_dir",
    "veh_name",
    "callsign",
    "type",
    "tgt_x",
    "tgt_y",
    "tgt_z",
)


def _first_values(request: Request) -> dict[str, Optional[str]]:
    """First value of each telemetry query parameter.

    Starlette's ``query_params.get`` returns the last of repeated values;
    clients rely on the first one winning.
    """
    values: dict[str, Optional[str]] = {}
    for name in TELEMETRY_PARAMS:
        repeated = request.query_params.getlist(name)
        values[name] = repeated[0] if repeated else None
    return values


@router.api_route(
    "/telemetry/setVesselTelemetry",
    methods=["GET", "POST"],
    response_model=VesselsResponse,
    tags=["telemetry"],
)
async def set_vessel_telemetry(
    request: Request,
    store: TelemetryStore = Depends(get_store),
):
    """Store one vessel's telemetry and return every known vessel.

    Parameters are read from the query string, also on POST: ``veh_id`` and
    ``type`` (required), ``veh_x``, ``veh_y``, ``veh_z``, ``veh_abs_spd``,
    ``veh_dir``, ``veh_name``, ``callsign``, ``tgt_x``, ``tgt_y``, ``tgt_z``.
    When a parameter is repeated the first value is used.

    Numeric parameters that cannot be parsed are stored as zero (-1 for
    ``veh_id``). Only a missing ``veh_id`` or ``type`` is reported as an error.
    """
    params = _first_values(request)
    veh_id = params["veh_id"]

    if not veh_id:
        return JSONResponse(error_response(ErrorCode.WRONG_ID))

    if not params["type"]:
        return JSONResponse(error_response(ErrorCode.WRONG_VESSEL_TYPE))

    telemetry = telemetry_from_params(params)
    saved = store.upsert(veh_id, telemetry)
    event_log.log_telemetry_saved(veh_id, saved.x, saved.y, saved.z, saved.direction)

    return _vessels_response(store)


@router.get("/telemetry/getVessels", response_model=VesselsResponse, tags=["telemetry"])
async def get_vessels(store: TelemetryStore = Depends(get_store)) -> VesselsResponse:
    """Return every known vessel."""
    return _vessels_response(store)
