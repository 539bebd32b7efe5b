from typing import Dict, Optional

import redis
from redis.exceptions import RedisError, ResponseError

from catalyst.domain.errors import StorageError, StorageErrorKind
from catalyst.utils.logging import get_logger
from catalyst.utils.retry import redis_retry
from catalyst.utils.settings import REDIS_URL

logger = get_logger(__name__)


def _is_oom(e: ResponseError) -> bool:
    # "OOM command not allowed when used memory > 'maxmemory'",
    # prefixed with the command number when raised from a pipeline
    return "OOM" in str(e)


class RedisKeyValueRepo:
    """
    Same contract as KeyValueRepo on top of redis.
    Reads are retried on connection errors, writes are attempted once.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None, namespace: str = "catalyst"):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    @redis_retry()
    def _get(self, key: str) -> Optional[str]:
        return self.redis.get(self._key(key))

    def get(self, key: str) -> Optional[str]:
        try:
            return self._get(key)
        except RedisError as e:
            raise StorageError(StorageErrorKind.UNAVAILABLE, key, str(e))

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def set_many(self, values: Dict[str, str]) -> None:
        """MULTI/EXEC over all keys; a rejected command discards the whole transaction."""
        keys = list(values)
        try:
            with self.redis.pipeline(transaction=True) as pipe:
                for key, value in values.items():
                    pipe.set(self._key(key), value)
                pipe.execute()
        except ResponseError as e:
            kind = StorageErrorKind.QUOTA_EXCEEDED if _is_oom(e) else StorageErrorKind.UNAVAILABLE
            raise StorageError(kind, keys, str(e))
        except RedisError as e:
            raise StorageError(StorageErrorKind.UNAVAILABLE, keys, str(e))
        logger.debug(f"Wrote {len(keys)} key(s) under {self.namespace!r}")
