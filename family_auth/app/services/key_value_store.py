from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class IKeyValueStore(ABC):
    """
    Key/value store interface - application layer.

    Holds small JSON-serializable dicts. The in-memory implementation is
    process-local; the Redis implementation is shared between instances.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Get value by key, None if absent"""
        pass

    @abstractmethod
    async def set(
        self, key: str, value: Dict[str, Any], ttl_ms: Optional[int] = None
    ) -> None:
        """Store value under key, optionally expiring after ttl_ms"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Delete key if present"""
        pass
