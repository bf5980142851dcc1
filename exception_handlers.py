"""
Exception handlers for the FastAPI application.

Every failure leaves the API as the action envelope
``{"success": false, "data": null, "message": ...}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from exceptions import CoachingError

logger = logging.getLogger("coaching.api")

GENERIC_FAILURE = "Something went wrong. Please try again."


def failure_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "data": None, "message": message},
    )


def operation_tag(request: Request) -> str:
    """``CREATE_PHASE_ERROR`` for the ``create_phase`` endpoint."""
    endpoint = request.scope.get("endpoint")
    name = getattr(endpoint, "__name__", None) or "REQUEST"
    return f"{name.upper()}_ERROR"


async def coaching_error_handler(request: Request, exc: CoachingError) -> JSONResponse:
    return failure_response(exc.status_code, exc.message)


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if not errors:
        return failure_response(422, "Invalid input.")

    first = errors[0]
    path = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(path) or "request"
    return failure_response(422, f"Invalid value for '{field}': {first.get('msg', 'invalid')}.")


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("%s %s %s", operation_tag(request), request.method, request.url.path, exc_info=exc)
    return failure_response(500, GENERIC_FAILURE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CoachingError, coaching_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    # Catch-all, runs for anything the handlers above do not cover
    app.add_exception_handler(Exception, generic_exception_handler)
