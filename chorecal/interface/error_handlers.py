"""Exception handlers translating domain failures into JSON responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chorecal.core.db_client import DuplicateRecordError
from chorecal.core.errors import ChorecalError, ErrorSeverity, TeamMemberInUseError, classify_error_with_response


logger = logging.getLogger(__name__)


_SEVERITY_LEVELS = {
    ErrorSeverity.LOW: logging.INFO,
    ErrorSeverity.MEDIUM: logging.WARNING,
    ErrorSeverity.HIGH: logging.ERROR,
}


async def handle_chorecal_error(_request: Request, exc: Exception) -> JSONResponse:
    """Map a domain error to its status code and error code."""
    error_response = classify_error_with_response(exc)
    logger.log(
        _SEVERITY_LEVELS[error_response.severity],
        "Request failed: %s",
        exc,
        extra={"error_code": error_response.code, "severity": error_response.severity.value},
    )

    content: dict[str, object] = {"error": str(exc), "code": error_response.code}
    if isinstance(exc, TeamMemberInUseError):
        content["assigned_chore_count"] = exc.assigned_chore_count

    return JSONResponse(status_code=error_response.status_code, content=content)


async def handle_duplicate_record(_request: Request, exc: Exception) -> JSONResponse:
    """Report a unique constraint violation as a conflict."""
    logger.warning("Duplicate record rejected: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": "Record already exists", "code": "ERR_DUPLICATE_RECORD"},
    )


async def handle_validation_error(_request: Request, exc: Exception) -> JSONResponse:
    """Report request validation failures as 400 with field details."""
    details = exc.errors() if isinstance(exc, RequestValidationError) else []
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation error", "details": jsonable_encoder(details)},
    )


def register_error_handlers(app: FastAPI) -> None:
    """Attach the chorecal exception handlers to an application."""
    app.add_exception_handler(ChorecalError, handle_chorecal_error)
    app.add_exception_handler(DuplicateRecordError, handle_duplicate_record)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
