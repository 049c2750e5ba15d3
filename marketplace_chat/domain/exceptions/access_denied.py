"""
AccessDeniedError - Raised when the conversation access policy denies a call.
Maps to: HTTP 403 Forbidden

The message never says whether the listing or the other user exists.
"""

CONVERSATION_ACCESS_DENIED = "You are not authorized to access this conversation"


class AccessDeniedError(Exception):
    """Raised when user lacks permission to access a resource"""

    def __init__(self, message: str = CONVERSATION_ACCESS_DENIED):
        super().__init__(message)
