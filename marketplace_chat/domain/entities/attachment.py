"""
Attachment - Metadata of a file sent with a message.
The bytes live in the private object store under `storage_path`.
"""

from dataclasses import dataclass

from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath


@dataclass(frozen=True)
class Attachment:
    storage_path: AttachmentPath
    display_name: str
    mime_type: str
    byte_size: int

    def __post_init__(self):
        if not self.display_name or not self.display_name.strip():
            raise ValueError("Attachment name cannot be empty")
        if self.byte_size < 0:
            raise ValueError("Attachment size cannot be negative")
