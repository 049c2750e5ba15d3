"""
AttachmentPath Value Object - bare object key inside the attachment bucket.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AttachmentPath:
    value: str  # "{sender_id}/{millis}-{suffix}-{name}"

    def __post_init__(self):
        if not self.value or not self.value.strip():
            raise ValueError("Attachment path cannot be empty")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def normalize(cls, raw: str, bucket: str) -> "AttachmentPath":
        """
        Accept either a bare key or a legacy fully-qualified URL/path.

        Older uploads stored the public URL, e.g.
        ``https://x.supabase.co/storage/v1/object/public/chat-attachments/u/1-a.pdf``.
        Everything up to and including the ``/{bucket}/`` segment is dropped.
        Compatibility shim only: new code stores bare keys.
        """
        raw = (raw or "").strip()
        marker = f"/{bucket}/"
        if marker in raw:
            raw = raw.split(marker)[-1] or raw
        return cls(raw)
