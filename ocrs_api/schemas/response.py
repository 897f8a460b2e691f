"""
Response schemas for OCRS API Server.

Every JSON response, success or error, uses the same envelope.
"""

from http import HTTPStatus
from typing import Any, Dict, Generic, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Uniform response envelope.

    ``data`` is only set on success.
    """

    status: int = Field(
        description="HTTP status code of the response"
    )
    message: str = Field(
        description="Human readable status message"
    )
    data: Optional[T] = Field(
        default=None,
        description="Response payload (null on error)"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": 200,
                "message": "OK",
                "data": ["Hello world", "Second line"]
            }
        }
    }


def envelope(status: int, message: str, data: Any = None) -> Dict[str, Any]:
    """Build the envelope body."""
    return ApiResponse[Any](status=status, message=message, data=data).model_dump()


def ok_response(data: Any) -> JSONResponse:
    """200 response wrapping ``data``."""
    return JSONResponse(status_code=200, content=envelope(200, "OK", data))


def error_response(status: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """
    Error response whose HTTP status matches the embedded ``status``.

    Status codes that are not valid HTTP statuses are sent as 500.
    """
    try:
        http_status = HTTPStatus(status).value
    except ValueError:
        http_status = HTTPStatus.INTERNAL_SERVER_ERROR.value
    return JSONResponse(
        status_code=http_status,
        content=envelope(status, message),
        headers=headers,
    )
