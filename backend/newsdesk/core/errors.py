"""
Application error taxonomy.

Services raise these; the handler registered in main.py turns them into the
same `{"detail": {"code", "message"}}` body the routers produce with
HTTPException, so clients see a single error shape.
"""
import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("uvicorn.error")


class NewsdeskError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "Internal server error"

    def __init__(self, message: str | None = None, code: str | None = None, details: Any = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.code = code or self.code
        self.details = details

    def to_detail(self) -> dict:
        detail: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            detail["errors"] = self.details
        return detail


class ValidationFailure(NewsdeskError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Validation error"


class AuthFailure(NewsdeskError):
    """Bad credentials of any kind. The message never says which part was wrong."""
    status_code = 401
    code = "AUTH_INVALID_CREDENTIALS"
    message = "Invalid credentials"


class Unauthenticated(NewsdeskError):
    status_code = 401
    code = "AUTH_REQUIRED"
    message = "Not authenticated"


class PermissionDenied(NewsdeskError):
    status_code = 403
    code = "FORBIDDEN"
    message = "Insufficient permissions"


class NotFound(NewsdeskError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Not found"


class ConflictFailure(NewsdeskError):
    status_code = 409
    code = "CONFLICT"
    message = "Resource already exists"

    @classmethod
    def for_field(cls, field: str) -> "ConflictFailure":
        if field == "username":
            return cls("Username already exists", code="USERNAME_EXISTS")
        if field == "email":
            return cls("Email already registered", code="EMAIL_EXISTS")
        if field == "telegram_id":
            return cls("This Telegram ID is already linked to another account", code="TELEGRAM_ID_EXISTS")
        return cls()


class CollaboratorError(NewsdeskError):
    status_code = 502
    code = "UPSTREAM_ERROR"
    message = "Upstream service error"


class FeatureDisabled(NewsdeskError):
    status_code = 503
    code = "FEATURE_DISABLED"
    message = "Feature is not configured"


async def newsdesk_error_handler(request: Request, exc: NewsdeskError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("[error] %s %s -> %s %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_detail()})
