"""
Key-value object store. Redis OR in-process dict. Controlled by FF_USE_REDIS flag.

Values are JSON documents. Keys are namespaced with STORE_KEY_PREFIX.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from .config import get_settings
from .flags import get_flags

logger = logging.getLogger(__name__)

# Fixed namespaces (suffixes of STORE_KEY_PREFIX)
PRODUCTS = "products"
ORDERS = "orders"
REQUESTS = "requests"
USER = "user"
COMMISSION_PREVIEW = "commission_preview"


def store_key(namespace: str, *parts: str) -> str:
    """Build a namespaced key, e.g. galt_threads_user:<shopper_id>."""
    key = f"{get_settings().store_key_prefix}_{namespace}"
    if parts:
        key += ":" + ":".join(parts)
    return key


class ObjectStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value, or None if absent."""
        ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        """Serialize and store a value."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...


class MemoryStore(ObjectStore):
    """Process-local store. Values are kept serialized so callers never share objects."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisStore(ObjectStore):
    async def get(self, key: str) -> Optional[Any]:
        from .redis import get_redis

        client = await get_redis()
        raw = await client.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        from .redis import get_redis

        client = await get_redis()
        await client.set(key, json.dumps(value))

    async def delete(self, key: str) -> None:
        from .redis import get_redis

        client = await get_redis()
        await client.delete(key)


_store: Optional[ObjectStore] = None


def get_store() -> ObjectStore:
    """Return the active store backend based on feature flags (cached per process)."""
    global _store
    if _store is None:
        if get_flags().use_redis:
            _store = RedisStore()
            logger.info("Object store: redis")
        else:
            _store = MemoryStore()
            logger.info("Object store: in-memory")
    return _store


def reset_store() -> None:
    """Drop the cached backend. The next get_store() builds a fresh one."""
    global _store
    _store = None
