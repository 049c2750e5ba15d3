"""Attachment DTOs for API request/response."""

from datetime import datetime

from pydantic import BaseModel


class AttachmentUploadDTO(BaseModel):
    """What the client attaches to its next SendMessage call."""

    path: str
    name: str
    type: str
    size: int


class SignedUrlDTO(BaseModel):
    url: str
    expires_at: datetime
