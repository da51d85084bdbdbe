"""
API error types and the handlers that turn them into JSON responses.

Route and service code raises ApiError subclasses; the handlers registered by
register_error_handlers() format every failure the same way:

    {"error": "<ErrorName>", "message": "...", ...details}
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from portal.core.config import get_settings

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Base error carrying an HTTP status and optional extra response fields."""

    name = "ApiError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}


class ValidationError(ApiError):
    name = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "Validation error", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, details=details)


class AuthenticationError(ApiError):
    name = "AuthenticationError"
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class ForbiddenError(ApiError):
    name = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str = "You don't have permission to access this resource",
        required_role: str | None = None,
    ) -> None:
        super().__init__(message, details={"requiredRole": required_role} if required_role else None)


class AccountStatusError(ApiError):
    """Credentials were correct but the account is not active."""

    name = "AccountInactive"
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, account_status: str, message: str = "Your account is not active") -> None:
        super().__init__(message, details={"accountStatus": account_status})
        self.account_status = account_status


class NotFoundError(ApiError):
    name = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str = "Resource", resource_id: int | str | None = None) -> None:
        message = f"{resource} not found"
        details: dict[str, Any] = {"resourceType": resource}
        if resource_id is not None:
            details["resourceId"] = resource_id
        super().__init__(message, details=details)


class ConflictError(ApiError):
    name = "Conflict"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "Resource already exists", field: str | None = None) -> None:
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


def format_error(error: str, message: str | None = None, details: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    if message is not None:
        body["message"] = message
    if details:
        body.update(details)
    return body


def format_validation_errors(errors: list[dict[str, Any]]) -> dict[str, Any]:
    """Group request validation errors by top-level body field."""
    fields: dict[str, list[dict[str, Any]]] = {}
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        # Drop the "body"/"path"/"query" prefix FastAPI adds.
        path = loc[1:] if len(loc) > 1 else loc
        field = path[0] if path else "unknown"
        fields.setdefault(field, []).append(
            {
                "code": err.get("type", "invalid"),
                "path": path,
                "message": err.get("msg", "Invalid value"),
            }
        )
    return {"error": "Validation Error", "details": fields}


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Error [%s %s]: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error(exc.name, exc.message, exc.details),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=format_validation_errors(list(exc.errors())),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        content = format_error("Not Found", f"Route {request.method} {request.url.path} not found")
    else:
        content = format_error(str(exc.detail), str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error [%s %s]", request.method, request.url.path)
    message = "An unexpected error occurred" if get_settings().is_production else str(exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=format_error("Internal Server Error", message),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
