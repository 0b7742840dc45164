from __future__ import annotations

from ..domain.errors import FetchError, RetriesExhaustedError
from ..domain.value_types import ShardKey
from ..log import get_logger
from ..ports.fetch import RangeFetcher

logger = get_logger(__name__)


class RetryingFetcher(RangeFetcher):
    """Re-issue a failed range request immediately, up to `attempts` tries in total.

    The budget is fresh for every `fetch` call. Any returned body counts as
    success; only `FetchError` is retried. A shard key is a 5-char string, so
    resubmitting it costs nothing.
    """

    def __init__(self, inner: RangeFetcher, attempts: int = 10) -> None:
        if attempts < 1:
            raise ValueError(f"attempts must be >= 1 (got {attempts})")
        self.inner = inner
        self.attempts = attempts

    async def fetch(self, key: ShardKey) -> tuple[ShardKey, bytes]:
        remaining = self.attempts
        while True:
            remaining -= 1
            try:
                return await self.inner.fetch(key)
            except FetchError as e:
                if remaining > 0:
                    logger.debug("retrying range %s (%d attempts left): %s", key, remaining, e)
                    continue
                logger.error("range %s failed %d times, last error: %s", key, self.attempts, e)
                raise RetriesExhaustedError(key, self.attempts) from e
