"""Response schemas."""

from .response import ApiResponse, envelope, error_response, ok_response

__all__ = [
    "ApiResponse",
    "envelope",
    "error_response",
    "ok_response",
]
