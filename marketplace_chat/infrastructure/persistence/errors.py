"""Translate Prisma client failures into the domain's StorageUnavailableError."""

import functools
import logging

from prisma.errors import PrismaError

from marketplace_chat.domain.exceptions import StorageUnavailableError
from marketplace_chat.observability.metrics import MetricsErrorType, increment_error

logger = logging.getLogger(__name__)


def storage_errors(fn):
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        except PrismaError as e:
            logger.error(f"[Persistence] {fn.__qualname__} failed: {e}")
            increment_error(MetricsErrorType.STORAGE_UNAVAILABLE)
            raise StorageUnavailableError() from e

    return wrapper
