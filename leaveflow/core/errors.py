"""
Central error handling for LeaveFlow Backend

Workflow errors are HTTPException subclasses so services can raise them directly
and the API layer renders them with a consistent JSON body.
"""
import logging
import traceback

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi import HTTPException

logger = logging.getLogger(__name__)


class WorkflowError(HTTPException):
    """Base class for errors raised by the leave workflow services"""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "workflow_error"

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationError(WorkflowError):
    """Invalid input (bad date range, missing nature, zero duration...)"""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation"


class ForbiddenError(WorkflowError):
    """Actor is neither the current approver nor its active delegate"""

    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"


class NotFoundError(WorkflowError):
    """Unknown user, leave request, delegation entry, holiday or notification"""

    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class PreconditionFailedError(WorkflowError):
    """Operation not allowed in the entity's current state"""

    status_code = status.HTTP_409_CONFLICT
    kind = "precondition_failed"


class ConflictError(WorkflowError):
    """Stale version stamp or duplicate entity"""

    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"


class RoutingConfigurationError(WorkflowError):
    """No approver could be resolved (no HR / executive configured)"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    kind = "routing_configuration"


def _error_response(
    request: Request,
    status_code: int,
    detail,
    kind: str,
    headers=None,
    **extra,
) -> JSONResponse:
    body = {
        "error": True,
        "status_code": status_code,
        "detail": detail,
        "kind": kind,
        "path": str(request.url.path),
    }
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body, headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Render HTTPException (including every WorkflowError) as the common error body

    WorkflowError subclasses contribute their `kind`; plain HTTPExceptions
    raised by dependencies report "http_error".
    """
    kind = getattr(exc, "kind", "http_error")
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", kind, request.url.path, exc.detail)
    return _error_response(
        request,
        exc.status_code,
        exc.detail,
        kind,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render request-body/query validation failures (422)

    Field-level errors are hidden in production.
    """
    from leaveflow.core.config import settings

    if settings.APP_ENV == "prod":
        return _error_response(
            request, status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Validation error: Invalid request data", "request_validation",
        )

    # ctx may hold the raw ValueError from a model validator
    errors = []
    for error in exc.errors():
        item = dict(error)
        ctx = item.get("ctx")
        if isinstance(ctx, dict):
            item["ctx"] = {
                key: val if isinstance(val, (str, int, float, bool, type(None))) else str(val)
                for key, val in ctx.items()
            }
        errors.append(item)
    return _error_response(
        request, status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error", "request_validation", errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last-resort handler for unexpected exceptions (500)

    Only local runs include the traceback; production hides the message.
    """
    from leaveflow.core.config import settings

    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)

    if settings.APP_ENV == "prod":
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal",
        )
    extra = {"traceback": traceback.format_exc()} if settings.APP_ENV == "local" else {}
    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc), "internal", **extra,
    )
