"""
Shared retry policy for idempotent reads.

Only StorageUnavailableError is retried. Writes (send, mark-read, upload)
are never decorated: a retried write could duplicate its effect.
"""

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from marketplace_chat.config.settings import Config
from marketplace_chat.domain.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

# 3 attempts by default, exponential backoff capped at READ_RETRY_MAX_WAIT
read_retry = retry(
    retry=retry_if_exception_type(StorageUnavailableError),
    stop=stop_after_attempt(Config.READ_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=0.25, min=0, max=Config.READ_RETRY_MAX_WAIT),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
