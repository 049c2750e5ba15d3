"""
Object Storage Port - private bucket for message attachments.
Implementation: marketplace_chat/infrastructure/storage/supabase_object_storage.py

Implementations must never make objects publicly readable and must raise
StorageUnavailableError on any store failure.
"""

from abc import ABC, abstractmethod

from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath


class ObjectStorage(ABC):
    @abstractmethod
    async def upload(
        self, path: AttachmentPath, content: bytes, content_type: str
    ) -> None: ...

    @abstractmethod
    async def create_signed_url(self, path: AttachmentPath, expires_in: int) -> str: ...
