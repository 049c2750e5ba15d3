"""
GetSignedUrl Query - time-limited read URL for a stored attachment.

Signed URLs are minted per request and never cached. Paths stored by older
clients as full public URLs are normalized to the bare object key first.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from marketplace_chat.application.common.interfaces import Query, QueryHandler
from marketplace_chat.config.settings import Config
from marketplace_chat.domain.exceptions import (
    DomainValidationError,
    StorageUnavailableError,
)
from marketplace_chat.domain.ports.object_storage import ObjectStorage
from marketplace_chat.domain.value_objects.attachment_path import AttachmentPath
from marketplace_chat.domain.value_objects.user_id import UserId
from marketplace_chat.observability.metrics import MetricsErrorType, increment_error

logger = logging.getLogger(__name__)

_SECRET_PATTERNS = [
    (re.compile(r"(token|apikey|api_key|signature)=[^&\s\"']+", re.IGNORECASE), r"\1=[REDACTED]"),
    (re.compile(r"Bearer\s+[^\s\"']+", re.IGNORECASE), "Bearer [REDACTED]"),
]


def redact_secrets(text: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


@dataclass
class SignedUrlResult:
    url: str
    expires_at: datetime


@dataclass(frozen=True)
class GetSignedUrlQuery(Query[SignedUrlResult]):
    user_id: UserId
    path: str
    ttl_seconds: int = Config.SIGNED_URL_TTL_SECONDS


class GetSignedUrlHandler(QueryHandler[SignedUrlResult]):
    def __init__(
        self,
        storage: ObjectStorage,
        bucket: str = Config.ATTACHMENT_BUCKET,
    ):
        self._storage = storage
        self._bucket = bucket

    async def execute(self, query: GetSignedUrlQuery) -> SignedUrlResult:
        if query.ttl_seconds <= 0:
            raise DomainValidationError("Signed URL lifetime must be positive")
        try:
            path = AttachmentPath.normalize(query.path, self._bucket)
        except ValueError as e:
            raise DomainValidationError("File path is required") from e

        issued_at = datetime.now(timezone.utc)
        try:
            url = await self._storage.create_signed_url(path, query.ttl_seconds)
        except StorageUnavailableError as e:
            reason = redact_secrets(str(e))
            logger.error(f"[Attachments] Signed URL for {path.value} failed: {reason}")
            increment_error(MetricsErrorType.SIGNED_URL_FAILED)
            raise StorageUnavailableError(f"Failed to generate file URL: {reason}") from e

        return SignedUrlResult(
            url=url, expires_at=issued_at + timedelta(seconds=query.ttl_seconds)
        )
