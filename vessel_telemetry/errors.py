"""Error codes for the Vessel Telemetry Service.

Errors are reported in the response body through the ``errorcode`` field:

- SUCCESS (-1): request processed
- WRONG_ID (1201): required ``veh_id`` parameter missing
- WRONG_VESSEL_TYPE (1202): required ``type`` parameter missing
- UNAUTHORIZED (12401): access denied
- NOT_FOUND (12404): unknown route
- SERVER_ERROR (12500): unexpected server error
"""

from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorCode(IntEnum):
    """Application error codes."""

    SUCCESS = -1
    WRONG_ID = 1201
    WRONG_VESSEL_TYPE = 1202
    UNAUTHORIZED = 12401
    NOT_FOUND = 12404
    SERVER_ERROR = 12500


class ErrorCodeResponse(BaseModel):
    """Body of a request rejected with an application error code."""

    model_config = ConfigDict(json_schema_extra={"example": {"errorcode": 1201}})

    errorcode: int = Field(..., description="Application error code")


def error_response(code: ErrorCode) -> dict[str, Any]:
    """Create an error body conforming to ErrorCodeResponse.

    Args:
        code: Application error code

    Returns:
        dict: ``{"errorcode": <int>}``
    """
    return {"errorcode": int(code)}


def error_code_for_status(status_code: int) -> ErrorCode:
    """Map an HTTP status raised by the framework to an application code."""
    if status_code == 404:
        return ErrorCode.NOT_FOUND
    if status_code in (401, 403):
        return ErrorCode.UNAUTHORIZED
    return ErrorCode.SERVER_ERROR
