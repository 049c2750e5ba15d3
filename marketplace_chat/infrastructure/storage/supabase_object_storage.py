"""
SupabaseObjectStorage - attachment bytes in a private Supabase Storage bucket.

The bucket is never public: clients read objects only through signed URLs
minted per request. Uploads use upsert=false so a key collision fails
instead of overwriting someone else's file.

Every client failure surfaces as StorageUnavailableError; the application
layer decides what the caller gets to see.
"""

import logging

from supabase import AsyncClient, acreate_client

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.exceptions import StorageUnavailableError
from marketplace_chat.domain.ports.object_storage import ObjectStorage
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath
from marketplace_chat.infrastructure.retry import read_retry

logger = logging.getLogger(__name__)


async def create_supabase_client() -> AsyncClient:
    """Create the async Supabase client used for storage (service role)."""
    if not Config.SUPABASE_URL or not Config.SUPABASE_SERVICE_KEY:
        raise RuntimeError(
            "Supabase configuration missing. Set SUPABASE_URL and SUPABASE_SERVICE_KEY."
        )
    client = await acreate_client(Config.SUPABASE_URL, Config.SUPABASE_SERVICE_KEY)
    logger.info(f"[Storage] Supabase client ready for bucket {Config.ATTACHMENT_BUCKET}")
    return client


class SupabaseObjectStorage(ObjectStorage):
    def __init__(self, client: AsyncClient, bucket: str = Config.ATTACHMENT_BUCKET):
        self._client = client
        self._bucket = bucket

    def _bucket_api(self):
        return self._client.storage.from_(self._bucket)

    async def upload(
        self, path: AttachmentPath, content: bytes, content_type: str
    ) -> None:
        try:
            await self._bucket_api().upload(
                path.value,
                content,
                file_options={
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
        except Exception as e:
            raise StorageUnavailableError(str(e)) from e

    @read_retry
    async def create_signed_url(self, path: AttachmentPath, expires_in: int) -> str:
        try:
            response = await self._bucket_api().create_signed_url(path.value, expires_in)
        except Exception as e:
            raise StorageUnavailableError(str(e)) from e

        url = response.get("signedURL") or response.get("signedUrl")
        if not url:
            raise StorageUnavailableError("Storage returned no signed URL")
        return url
