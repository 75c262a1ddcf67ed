"""
MODULE_DESCRIPTION: Exception Handlers - Consistent JSON Error Responses

Global handlers registered on the FastAPI application:

    RequestValidationError   -> 422 {"detail": "Validation error", "errors": [...]}
    HTTPException            -> status {"detail": ...}, 401s traced in detail
    ValueError               -> 400 {"detail": str(exc)}
    Exception                -> 500 {"detail": "Internal server error"}
                                (traceback included when DEBUG_TRACEBACK=1)

Routes that answer `{"success": false, ...}` bodies return them directly and
do not pass through these handlers.
"""

import os
import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storypad_api.utils.debug import print__debug, print__token_debug

# ==============================================================================
# EXCEPTION HANDLERS
# ==============================================================================


async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with proper 422 status code.

    Uses jsonable_encoder to avoid JSON serialization errors and falls back
    to a minimal structure if encoding fails.
    """
    print__debug(f"Validation error: {exc.errors()}")
    try:
        payload = {"detail": "Validation error", "errors": exc.errors()}
        return JSONResponse(status_code=422, content=jsonable_encoder(payload))
    except Exception as encoding_error:  # pylint: disable=broad-except
        print__debug(
            f"🚨 Validation encoding failure: {type(encoding_error).__name__}: {encoding_error}"
        )
        simple_errors = [
            {"msg": e.get("msg"), "loc": e.get("loc"), "type": e.get("type")}
            for e in exc.errors()
        ]
        return JSONResponse(
            status_code=422,
            content={
                "detail": "Validation error",
                "errors": simple_errors,
                "note": "Simplified due to serialization issue",
            },
        )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions, tracing authentication failures in detail."""
    if exc.status_code in (401, 403):
        print__token_debug(f"🚨 HTTP {exc.status_code}: {exc.detail}")
        print__token_debug(f"🚨 HTTP {exc.status_code} TRACE: Request URL: {request.url}")
        print__token_debug(
            f"🚨 HTTP {exc.status_code} TRACE: Request method: {request.method}"
        )
        client_ip = request.client.host if request.client else "unknown"
        print__token_debug(f"🚨 HTTP {exc.status_code} CLIENT: IP address: {client_ip}")
    elif exc.status_code >= 400:
        print__debug(f"🚨 HTTP {exc.status_code} ERROR: {exc.detail} ({request.url})")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def value_error_handler(_request: Request, exc: ValueError):
    """Handle ValueError exceptions as 400 Bad Request."""
    print__debug(f"ValueError: {str(exc)}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def general_exception_handler(_request: Request, exc: Exception):
    """Handle unexpected exceptions (500 Internal Server Error).

    - DEBUG_TRACEBACK=1: include the full traceback in the response
    - otherwise: generic message, details only in the debug log
    """
    if os.getenv("DEBUG_TRACEBACK", "0") == "1":
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        print__debug(
            f"Unexpected error (with traceback): {type(exc).__name__}: {str(exc)}\n{tb}"
        )
        return JSONResponse(
            status_code=500, content={"detail": str(exc), "traceback": tb}
        )
    print__debug(f"Unexpected error: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
