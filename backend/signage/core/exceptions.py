"""
Error taxonomy for the scheduling engine.

Write-path errors (ValidationError, NotFoundError, ContentNotApprovedError)
are raised before anything is committed. Read-path errors are
InvalidTimezoneError (a schedule saved with a zone that no longer loads)
and CollaboratorUnavailableError (campaign lookup failure or timeout).
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = 500
    code = "internal_error"
    default_message = "Internal error"

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = 422
    code = "validation_error"
    default_message = "Invalid input"


class NotFoundError(AppError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class UnauthorizedError(AppError):
    status_code = 401
    code = "unauthorized"
    default_message = "Missing or invalid actor"


class ContentNotApprovedError(AppError):
    status_code = 403
    code = "content_not_approved"
    default_message = "Content must be approved before it can be scheduled"


class InvalidTimezoneError(AppError):
    status_code = 500
    code = "invalid_timezone"
    default_message = "Schedule timezone cannot be loaded"


class CollaboratorUnavailableError(AppError):
    status_code = 503
    code = "collaborator_unavailable"
    default_message = "Upstream collaborator unavailable"


async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    body = {"detail": exc.message, "code": exc.code}
    if exc.context:
        body["context"] = exc.context
    return JSONResponse(body, status_code=exc.status_code)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
