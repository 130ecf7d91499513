"""Mapping of auth failures onto HTTP responses."""

from typing import Optional, TypeVar
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tubeauth.models.result import AuthError, AuthErrorKind, Result

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class AuthHTTPError(Exception):
    """Carries a failed Result's error out of a route handler."""

    def __init__(self, error: AuthError):
        super().__init__(error.message)
        self.error = error


def raise_for_result(result: Result[T]) -> T:
    """Return the value of a successful result or raise AuthHTTPError."""
    if not result.ok:
        raise AuthHTTPError(result.error)
    return result.value


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", None) or str(uuid4())


def error_response(
    status_code: int,
    error: str,
    detail: str,
    correlation_id: str,
    headers: Optional[dict] = None,
) -> JSONResponse:
    headers = dict(headers or {})
    headers["X-Correlation-Id"] = correlation_id
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "detail": detail,
            "correlation_id": correlation_id,
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers for auth failures and request validation errors."""

    @app.exception_handler(AuthHTTPError)
    async def handle_auth_error(request: Request, exc: AuthHTTPError) -> JSONResponse:
        correlation_id = _correlation_id(request)
        kind = exc.error.kind
        log_fn = logger.error if kind.status_code >= 500 else logger.warning
        log_fn(
            "auth_request_failed",
            path=request.url.path,
            method=request.method,
            status_code=kind.status_code,
            error_code=kind.value,
            correlation_id=correlation_id,
        )
        headers = {"WWW-Authenticate": "Bearer"} if kind.status_code == 401 else None
        return error_response(
            kind.status_code, kind.value, exc.error.message, correlation_id, headers
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Return 400 with the first offending field."""
        correlation_id = _correlation_id(request)

        errors = exc.errors()
        if errors:
            first_error = errors[0]
            field = ".".join(str(loc) for loc in first_error.get("loc", ["unknown"]))
            message = first_error.get("msg", "Validation failed")
            detail = f"Field '{field}': {message}"
        else:
            detail = "Request validation failed"

        logger.warning(
            "validation_error",
            path=request.url.path,
            correlation_id=correlation_id,
            detail=detail,
        )
        return error_response(
            AuthErrorKind.VALIDATION.status_code,
            AuthErrorKind.VALIDATION.value,
            detail,
            correlation_id,
        )
