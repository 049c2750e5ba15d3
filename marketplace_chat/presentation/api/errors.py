"""
Domain exception → HTTP status mapping shared by the routers.

    AccessDeniedError        → 403
    EntityNotFoundError      → 404
    AttachmentTooLargeError  → 413
    DomainValidationError    → 422
    StorageUnavailableError  → 503
"""

from typing import Type, TypeVar

from fastapi import HTTPException, status

from marketplace_chat.domain.exceptions import (
    AccessDeniedError,
    AttachmentTooLargeError,
    DomainValidationError,
    EntityNotFoundError,
    StorageUnavailableError,
)

DOMAIN_ERRORS = (
    AccessDeniedError,
    EntityNotFoundError,
    DomainValidationError,
    StorageUnavailableError,
)

_STATUS_BY_ERROR = [
    (AccessDeniedError, status.HTTP_403_FORBIDDEN),
    (EntityNotFoundError, status.HTTP_404_NOT_FOUND),
    (AttachmentTooLargeError, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE),
    (DomainValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (StorageUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]

T = TypeVar("T")


def status_for(error: Exception) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(error: Exception) -> HTTPException:
    return HTTPException(status_code=status_for(error), detail=str(error))


def parse_id(id_type: Type[T], raw: str, label: str) -> T:
    """Wrap a path/query id in its value object, 422 when it is not a valid id."""
    try:
        return id_type(raw)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid {label}",
        ) from e
