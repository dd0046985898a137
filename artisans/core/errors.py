"""Exception taxonomy and the FastAPI handler that renders it."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ArtisansError(Exception):
    """Base exception for the platform."""

    def __init__(self, code: str, message: str, status_code: int = 500):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"detail": self.message, "code": self.code}


class ValidationError(ArtisansError):
    """Malformed input, reported against the field that caused it."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__("VALIDATION_ERROR", message, status_code=400)
        self.field = field

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.field:
            body["field"] = self.field
        return body


class AuthFailure(ArtisansError):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__("AUTH_FAILURE", message, status_code=401)


class PermissionDenied(ArtisansError):
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__("PERMISSION_DENIED", message, status_code=403)


class NotFoundError(ArtisansError):
    def __init__(self, resource: str, resource_id):
        super().__init__(
            "NOT_FOUND", f"{resource} '{resource_id}' not found", status_code=404
        )


class ConflictError(ArtisansError):
    def __init__(self, message: str):
        super().__init__("CONFLICT", message, status_code=409)


class TokenError(ArtisansError):
    """Terminal token states. The user cannot fix these by retrying."""

    state: str = "invalid"

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["state"] = self.state
        return body


class InvalidToken(TokenError):
    state = "invalid"

    def __init__(self, message: str = "This link is not valid"):
        super().__init__("INVALID_TOKEN", message, status_code=404)


class AlreadyResolved(TokenError):
    def __init__(self, state: str, message: Optional[str] = None):
        super().__init__(
            "ALREADY_RESOLVED",
            message or f"This link has already been {state}",
            status_code=409,
        )
        self.state = state


class Expired(TokenError):
    state = "expired"

    def __init__(self, message: str = "This link has expired"):
        super().__init__("EXPIRED", message, status_code=410)


class TransientNetworkError(ArtisansError):
    """An upstream collaborator was unreachable; the caller may retry manually."""

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__("TRANSIENT_NETWORK_ERROR", message, status_code=503)

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["retryable"] = True
        return body


class MailDeliveryError(ArtisansError):
    def __init__(self, message: str):
        super().__init__("MAIL_DELIVERY_ERROR", message, status_code=502)


def register_exception_handlers(app: FastAPI) -> None:
    """Register the platform exception handler on the FastAPI app."""

    @app.exception_handler(ArtisansError)
    async def artisans_error_handler(request: Request, exc: ArtisansError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        elif isinstance(exc, AuthFailure):
            logger.warning("auth failure on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
