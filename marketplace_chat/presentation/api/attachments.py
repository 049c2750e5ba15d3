"""
Attachments API Router - private file upload and signed download URLs.

Endpoints:
- POST /attachments            multipart upload, returns the metadata to send
                               with the next message
- GET  /attachments/signed-url time-limited URL for a stored object key
"""

import logging

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from marketplace_chat.application.commands.attachments import (
    UploadAttachmentCommand,
    UploadAttachmentHandler,
)
from marketplace_chat.application.dto import AttachmentUploadDTO, SignedUrlDTO
from marketplace_chat.application.queries.attachments import (
    GetSignedUrlHandler,
    GetSignedUrlQuery,
)
from marketplace_chat.config.settings import Config
from marketplace_chat.presentation.api.errors import DOMAIN_ERRORS, to_http_exception
from marketplace_chat.presentation.dependencies.auth import AuthUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attachments", tags=["attachments"])


@router.post(
    "", response_model=AttachmentUploadDTO, status_code=status.HTTP_201_CREATED
)
@inject
async def upload_attachment(
    handler: FromDishka[UploadAttachmentHandler],
    current_user: AuthUser = Depends(get_current_user),
    file: UploadFile = File(...),
):
    """
    Upload a file to the private attachment bucket.

    Max file size: Config.MAX_ATTACHMENT_MB (413 above it, nothing is stored).
    """
    content = await file.read()
    command = UploadAttachmentCommand(
        user_id=current_user.user_id,
        filename=file.filename or "unnamed_file",
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )
    try:
        attachment = await handler.execute(command)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e

    return AttachmentUploadDTO(
        path=attachment.storage_path.value,
        name=attachment.display_name,
        type=attachment.mime_type,
        size=attachment.byte_size,
    )


@router.get("/signed-url", response_model=SignedUrlDTO)
@inject
async def get_signed_url(
    handler: FromDishka[GetSignedUrlHandler],
    path: str = Query(..., min_length=1),
    expires_in: int = Query(Config.SIGNED_URL_TTL_SECONDS, gt=0, le=7 * 24 * 3600),
    current_user: AuthUser = Depends(get_current_user),
):
    try:
        result = await handler.execute(
            GetSignedUrlQuery(
                user_id=current_user.user_id, path=path, ttl_seconds=expires_in
            )
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e) from e
    return SignedUrlDTO(url=result.url, expires_at=result.expires_at)
