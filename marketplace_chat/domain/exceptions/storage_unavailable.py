"""
StorageUnavailableError - Raised on I/O failures against the relational store
or the object store.
Maps to: HTTP 503 Service Unavailable
"""


class StorageUnavailableError(Exception):
    """Transient failure talking to an external store."""

    def __init__(self, message: str = "Storage is temporarily unavailable"):
        super().__init__(message)
        self.message = message
