"""
UploadAttachment Command - store a file in the private attachment bucket.

The returned Attachment is what the client passes to SendMessage. Object
keys are `{user_id}/{epoch_millis}-{random}-{sanitized_name}`: the user
prefix and the random suffix keep concurrent uploads from colliding.

The size ceiling is enforced before any storage call.
"""

import logging
import re
import secrets
import time
from dataclasses import dataclass

from marketplace_chat.application.common.interfaces import Command, CommandHandler
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.entities.attachment import Attachment
from marketplace_chat.domain.exceptions import (
    AttachmentTooLargeError,
    DomainValidationError,
    StorageUnavailableError,
)
from marketplace_chat.domain.ports.object_storage import ObjectStorage
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.observability.metrics import MetricsErrorType, increment_error

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def sanitize_filename(filename: str) -> str:
    """Replace characters that are unsafe in an object key with underscores."""
    safe = re.sub(r"[^\w\-\.]", "_", filename.strip())
    safe = safe.strip("._")
    if not safe:
        safe = "unnamed_file"
    return safe


def build_object_key(user_id: UserId, filename: str) -> AttachmentPath:
    millis = time.time_ns() // 1_000_000
    suffix = secrets.token_hex(3)
    return AttachmentPath(f"{user_id.value}/{millis}-{suffix}-{sanitize_filename(filename)}")


@dataclass(frozen=True)
class UploadAttachmentCommand(Command[Attachment]):
    user_id: UserId
    filename: str
    content: bytes
    content_type: str = DEFAULT_CONTENT_TYPE


class UploadAttachmentHandler(CommandHandler[Attachment]):
    def __init__(
        self,
        storage: ObjectStorage,
        max_attachment_mb: float = Config.MAX_ATTACHMENT_MB,
    ):
        self.storage = storage
        self.max_attachment_mb = max_attachment_mb

    @property
    def max_bytes(self) -> int:
        return int(self.max_attachment_mb * 1024 * 1024)

    async def execute(self, command: UploadAttachmentCommand) -> Attachment:
        size = len(command.content)
        if size > self.max_bytes:
            increment_error(MetricsErrorType.VALIDATION_FAILED)
            raise AttachmentTooLargeError(self.max_attachment_mb)
        if size == 0:
            increment_error(MetricsErrorType.VALIDATION_FAILED)
            raise DomainValidationError("File is empty")

        display_name = command.filename.strip() or "unnamed_file"
        content_type = command.content_type or DEFAULT_CONTENT_TYPE
        path = build_object_key(command.user_id, display_name)

        try:
            await self.storage.upload(path, command.content, content_type)
        except StorageUnavailableError as e:
            logger.error(f"[Attachments] Upload of {path.value} failed: {e}")
            increment_error(MetricsErrorType.UPLOAD_FAILED)
            raise StorageUnavailableError("Failed to upload file") from e

        logger.info(f"[Attachments] Uploaded {path.value} ({size} bytes)")
        return Attachment(
            storage_path=path,
            display_name=display_name,
            mime_type=content_type,
            byte_size=size,
        )
