"""
Party Sheets - Error Handler
Formats all exceptions into structured JSON responses:

    {"error": {"code", "message", "details", "recoverable",
               "recovery_hint", "error_id", "timestamp"}}
"""
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from party_sheets.core.errors import ErrorCode, SheetError

logger = logging.getLogger("party_sheets.errors")

HTTP_STATUS_ERROR_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.FILE_TOO_LARGE,
    500: ErrorCode.UNKNOWN,
    503: ErrorCode.STORAGE_UNAVAILABLE,
}


def _error_id() -> str:
    """Short unique id to correlate a response with its log line."""
    return uuid.uuid4().hex[:8]


def _error_response(
    status_code: int,
    payload: Dict[str, Any],
    error_id: Optional[str] = None,
) -> JSONResponse:
    payload["error_id"] = error_id or _error_id()
    payload["timestamp"] = datetime.now(timezone.utc).isoformat()
    return JSONResponse(status_code=status_code, content={"error": payload})


def setup_error_handlers(app: FastAPI, debug: bool = False):
    """
    Register exception handlers on the app.

    SheetError subclasses render their own payload; request validation,
    HTTP exceptions and anything unhandled are mapped onto the same shape.
    """

    @app.exception_handler(SheetError)
    async def sheet_error_handler(request: Request, exc: SheetError):
        error_id = _error_id()
        logger.warning(
            f"[{error_id}] {exc.code.value} on {request.method} {request.url.path}: {exc.message}",
            extra={"error_id": error_id, "error_code": exc.code.value, "details": exc.details},
        )
        return _error_response(exc.http_status, exc.to_dict()["error"], error_id)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "validation_error"),
            }
            for error in exc.errors()
        ]
        return _error_response(422, {
            "code": ErrorCode.VALIDATION_ERROR.value,
            "message": "Request validation failed",
            "details": {"errors": errors},
            "recoverable": True,
            "recovery_hint": "Check the request data and correct any invalid fields",
        })

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        code = HTTP_STATUS_ERROR_CODES.get(exc.status_code, ErrorCode.UNKNOWN)
        return _error_response(exc.status_code, {
            "code": code.value,
            "message": str(exc.detail) if exc.detail else "An error occurred",
            "details": {},
            "recoverable": exc.status_code < 500,
            "recovery_hint": None,
        })

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        error_id = _error_id()
        logger.error(
            f"[{error_id}] Unhandled {type(exc).__name__} on {request.method} {request.url.path}: {exc}",
            extra={"error_id": error_id},
            exc_info=True,
        )

        payload = {
            "code": ErrorCode.UNKNOWN.value,
            "message": "An unexpected error occurred",
            "details": {},
            "recoverable": False,
            "recovery_hint": "Please try again or contact support",
        }
        if debug:
            payload["debug"] = {
                "exception_type": type(exc).__name__,
                "exception_message": str(exc),
                "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
            }
        return _error_response(500, payload, error_id)

    return app
