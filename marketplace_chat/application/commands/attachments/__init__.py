"""Attachment commands."""

from .upload_attachment import UploadAttachmentCommand, UploadAttachmentHandler

__all__ = ["UploadAttachmentCommand", "UploadAttachmentHandler"]
