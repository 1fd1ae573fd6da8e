"""
Error taxonomy for the TripMate API.

Every error the service raises on purpose carries a machine-readable code and
renders as ``{"error": <message>, "code": <code>}`` with a matching HTTP status.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TripMateError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(TripMateError):
    """Bad input shape or range; raised before any external call."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class AuthenticationError(TripMateError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "AUTHENTICATION_REQUIRED"


class PermissionDenied(TripMateError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


class NotFoundError(TripMateError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class UpstreamUnavailable(TripMateError):
    """Geocoder, router or notifier failed or returned nothing usable."""
    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "UPSTREAM_UNAVAILABLE"


class GeocodingFailed(UpstreamUnavailable):
    # Usually a vague place name, so the caller gets a 400 to fix it
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "GEOCODING_FAILED"


class InternalError(TripMateError):
    default_code = "INTERNAL_ERROR"


def register_error_handlers(app: FastAPI):
    @app.exception_handler(TripMateError)
    async def tripmate_error_handler(request: Request, exc: TripMateError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = sorted({".".join(str(p) for p in e["loc"] if p != "body") for e in errors})
        message = f"Invalid request: {', '.join(f for f in fields if f) or 'body'}"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": message, "code": "VALIDATION_ERROR"},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error", "code": "INTERNAL_ERROR"},
        )
