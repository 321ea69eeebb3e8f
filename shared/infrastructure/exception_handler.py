"""DRF exception handler translating domain errors into HTTP responses."""

from __future__ import annotations

import structlog
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import (
    Conflict,
    DomainError,
    Forbidden,
    InvalidInput,
    NotFound,
    Unavailable,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR: dict[type[DomainError], int] = {
    NotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    Forbidden: status.HTTP_403_FORBIDDEN,
    Unavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def domain_exception_handler(exc, context):  # type: ignore
    """Render ``DomainError`` as ``{"detail": ..., "code": ...}``; defer the rest to DRF."""
    if not isinstance(exc, DomainError):
        return drf_exception_handler(exc, context)

    status_code = status.HTTP_400_BAD_REQUEST
    for error_type, mapped_status in STATUS_BY_ERROR.items():
        if isinstance(exc, error_type):
            status_code = mapped_status
            break

    view = context.get("view")
    log = logger.error if status_code >= 500 else logger.info
    log(
        "domain_error",
        error=exc.__class__.__name__,
        code=exc.code,
        view=view.__class__.__name__ if view is not None else None,
    )
    return Response({"detail": exc.message, "code": exc.code}, status=status_code)
