"""Global exception handlers for FastAPI application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storage_api.core.exceptions import AppException, default_title
from storage_api.core.schemas import (
    ProblemDetails,
    ValidationErrorItem,
    ValidationProblemDetails,
)
from storage_api.features.storage.cancellation import (
    CLIENT_CLOSED_REQUEST,
    ClientDisconnectedError,
)

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


class ProblemResponse(JSONResponse):
    """JSON response served as ``application/problem+json``."""

    media_type = PROBLEM_MEDIA_TYPE


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state.

    Args:
        request: The FastAPI request object.

    Returns:
        Request ID if available, None otherwise.
    """
    return getattr(request.state, "request_id", None)


def _create_problem_details(
    status_code: int,
    detail: str,
    type_: str = "about:blank",
    title: str | None = None,
    instance: str | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Create RFC 7807 Problem Details response.

    Args:
        status_code: HTTP status code.
        detail: Human-readable error description.
        type_: Error type identifier.
        title: Short human-readable summary.
        instance: URI identifying this occurrence.
        extra: Additional members merged into the problem object.

    Returns:
        Dictionary representing the problem details.
    """
    problem = ProblemDetails(
        type=type_,
        title=title or default_title(status_code),
        status=status_code,
        detail=detail,
        instance=instance,
    )

    response_data = problem.model_dump(exclude_none=True)
    if extra:
        # Standard members win over extension members of the same name
        for key, value in extra.items():
            response_data.setdefault(key, value)

    return response_data


async def app_exception_handler(request: Request, exc: AppException) -> ProblemResponse:
    """Render an AppException (storage failures included) as a problem response.

    Args:
        request: The FastAPI request object.
        exc: The application exception that was raised.

    Returns:
        Problem response with the exception's status code.
    """
    request_id = _get_request_id(request)

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Application exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": exc.type,
            "status_code": exc.status_code,
            "detail": exc.detail,
        },
    )

    problem_data = _create_problem_details(
        status_code=exc.status_code,
        detail=exc.detail,
        type_=exc.type,
        title=exc.title,
        instance=exc.instance or request.url.path,
        extra=exc.extra,
    )

    if request_id:
        problem_data["request_id"] = request_id

    return ProblemResponse(status_code=exc.status_code, content=problem_data)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> ProblemResponse:
    """Handle FastAPI request validation errors.

    Args:
        request: The FastAPI request object.
        exc: The validation error that was raised.

    Returns:
        422 problem response with field-level error information.
    """
    request_id = _get_request_id(request)

    validation_errors = [
        ValidationErrorItem(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            type=error["type"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Request validation failed",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "error_count": len(validation_errors),
        },
    )

    problem = ValidationProblemDetails(
        type="validation-error",
        title="Validation Error",
        status=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=f"Request validation failed for {len(validation_errors)} field(s)",
        instance=request.url.path,
        errors=validation_errors,
    )

    response_data = problem.model_dump(mode="json", exclude_none=True)
    if request_id:
        response_data["request_id"] = request_id

    return ProblemResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=response_data,
    )


async def client_disconnected_handler(
    request: Request, exc: ClientDisconnectedError
) -> Response:
    """Finish a request whose client went away; nobody reads the response."""
    logger.info(
        "Request aborted by client",
        extra={
            "request_id": _get_request_id(request),
            "path": exc.path,
            "method": request.method,
            "status_code": CLIENT_CLOSED_REQUEST,
        },
    )
    return Response(status_code=CLIENT_CLOSED_REQUEST)


async def generic_exception_handler(request: Request, exc: Exception) -> ProblemResponse:
    """Handle unexpected exceptions.

    Catch-all for exceptions raised outside the storage handlers. Logs the
    full traceback and returns a generic 500 problem.

    Args:
        request: The FastAPI request object.
        exc: The exception that was raised.

    Returns:
        500 problem response.
    """
    request_id = _get_request_id(request)

    logger.error(
        "Unexpected exception occurred",
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
        },
        exc_info=True,
    )

    problem_data = _create_problem_details(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="An unexpected error occurred while processing your request",
        type_="internal-error",
        instance=request.url.path,
    )

    if request_id:
        problem_data["request_id"] = request_id

    return ProblemResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=problem_data,
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """Register the exception handlers that produce problem responses.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ClientDisconnectedError, client_disconnected_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers configured")
