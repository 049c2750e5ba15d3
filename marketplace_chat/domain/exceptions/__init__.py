"""
DOMAIN EXCEPTIONS - Business rule violations

These exceptions are raised by domain and application logic and caught by
the presentation layer, which maps them to HTTP status codes.
"""

from marketplace_chat.domain.exceptions.entity_not_found import EntityNotFoundError
from marketplace_chat.domain.exceptions.access_denied import AccessDeniedError
from marketplace_chat.domain.exceptions.validation_error import (
    DomainValidationError,
    AttachmentTooLargeError,
)
from marketplace_chat.domain.exceptions.storage_unavailable import (
    StorageUnavailableError,
)

__all__ = [
    "EntityNotFoundError",
    "AccessDeniedError",
    "DomainValidationError",
    "AttachmentTooLargeError",
    "StorageUnavailableError",
]
