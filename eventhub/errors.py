"""
Service exceptions and their HTTP mapping.
"""
from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service layer errors."""


class NotFoundError(ServiceError):
    """Raised when a user or event does not exist."""


class InvalidQueryError(ServiceError):
    """Raised when query parameters are missing or malformed."""


class RSVPError(ServiceError):
    """Raised when an RSVP or its cancellation is not allowed."""


_STATUS_CODES: dict[type[ServiceError], int] = {
    NotFoundError: 404,
    InvalidQueryError: 400,
    RSVPError: 400,
}


async def service_exception_handler(request: Request, exc: ServiceError) -> JSONResponse:
    status_code = _STATUS_CODES.get(type(exc), 500)
    if status_code >= 500:
        logger.error("Service error in %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "type": exc.__class__.__name__},
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unexpected error in %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "type": "InternalError"},
    )
