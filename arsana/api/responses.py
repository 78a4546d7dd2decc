"""Fixed client-facing error bodies.

Internal details are logged, never returned.
"""

from __future__ import annotations

from fastapi import status
from fastapi.responses import JSONResponse

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def internal_error() -> JSONResponse:
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)
