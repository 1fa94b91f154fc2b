import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        self.errors = errors
        self.headers = headers
        self.extra = extra or {}
        super().__init__(message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"message": self.message, "code": self.code}
        if self.errors is not None:
            body["errors"] = self.errors
        body.update(self.extra)
        return body


class ValidationFailed(AppError):
    def __init__(self, errors: list[dict[str, Any]], message: str = "Validation error"):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, "validation_error", errors=errors)


class NotAuthenticated(AppError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, "not_authenticated")


class Forbidden(AppError):
    def __init__(self, message: str = "Not authorized", code: str = "forbidden"):
        super().__init__(message, status.HTTP_403_FORBIDDEN, code)


class NotFound(AppError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message, status.HTTP_404_NOT_FOUND, "not_found")


class StateConflict(AppError):
    """A well-formed request that the current state of the data does not allow."""

    def __init__(self, message: str, code: str):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, code)


class RateLimited(AppError):
    def __init__(self, retry_after_seconds: int):
        minutes = max(1, -(-retry_after_seconds // 60))
        super().__init__(
            f"Too many login attempts. Please try again in {minutes} minutes.",
            status.HTTP_429_TOO_MANY_REQUESTS,
            "rate_limited",
            headers={"Retry-After": str(retry_after_seconds)},
            extra={"retryAfterMinutes": minutes},
        )


class DeliveryFailed(AppError):
    def __init__(self, message: str):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, "delivery_failed")


def field_errors(errors: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Flatten pydantic error dicts into [{"field", "code", "message"}]."""
    out: list[dict[str, Any]] = []
    for e in errors:
        loc = [str(p) for p in e.get("loc", ()) if p not in ("body", "query", "path")]
        out.append({
            "field": ".".join(loc) or "body",
            "code": e.get("type", "invalid"),
            "message": e.get("msg", "Invalid value"),
        })
    return out


def validation_failed_from(exc: PydanticValidationError) -> ValidationFailed:
    return ValidationFailed(field_errors(exc.errors()))


async def _app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=exc.headers)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    if isinstance(detail, dict):
        content = {"message": detail.get("message", "Error"), **detail}
    else:
        content = {"message": str(detail)}
    return JSONResponse(status_code=exc.status_code, content=content, headers=getattr(exc, "headers", None))


async def _request_validation_handler(request: Request, exc: RequestValidationError):
    err = ValidationFailed(field_errors(list(exc.errors())))
    return JSONResponse(status_code=err.status_code, content=err.to_body())


async def _unhandled_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "code": "internal_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, _app_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(Exception, _unhandled_handler)
