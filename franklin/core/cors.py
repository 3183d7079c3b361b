"""
CORS helpers for the /functions/v1 endpoints.
These are called from the mobile app and web builds, so any origin is allowed.
"""
from typing import Any, Optional
from fastapi import Response
from fastapi.responses import JSONResponse

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "*",
}


def cors_response(body: Optional[Any] = None, status_code: int = 200) -> Response:
    """Build a JSON response carrying the CORS headers. 204 responses have no body."""
    if status_code == 204:
        return Response(status_code=204, headers=CORS_HEADERS)
    return JSONResponse(content=body, status_code=status_code, headers=CORS_HEADERS)


def error_response(message: str, status_code: int) -> Response:
    return cors_response({"error": message}, status_code)
