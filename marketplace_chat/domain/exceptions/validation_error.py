"""
DomainValidationError - Raised when a business rule is violated.
Maps to: HTTP 422 Unprocessable Entity (413 for AttachmentTooLargeError)
"""


class DomainValidationError(Exception):
    """Exception raised for domain validation errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AttachmentTooLargeError(DomainValidationError):
    """Attachment exceeds the upload size ceiling."""

    def __init__(self, max_mb: float):
        super().__init__(f"File size must be less than {max_mb:g}MB")
        self.max_mb = max_mb
