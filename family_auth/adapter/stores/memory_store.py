import copy
import time
from typing import Any, Callable, Dict, Optional, Tuple

from family_auth.app.services.key_value_store import IKeyValueStore


def _monotonic_ms() -> int:
    return int(time.monotonic() * 1000)


class InMemoryKeyValueStore(IKeyValueStore):
    """
    In-memory key/value store.

    Suitable for development and single-instance deployments. Entries are
    copied on the way in and out so callers never share mutable state with
    the store. Expired entries read as missing and are swept on every write.
    """

    def __init__(self, clock: Callable[[], int] = _monotonic_ms):
        self._clock = clock
        self._data: Dict[str, Tuple[Dict[str, Any], Optional[int]]] = {}

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return copy.deepcopy(value)

    async def set(
        self, key: str, value: Dict[str, Any], ttl_ms: Optional[int] = None
    ) -> None:
        now = self._clock()
        self._sweep(now)
        expires_at = now + ttl_ms if ttl_ms is not None else None
        self._data[key] = (copy.deepcopy(value), expires_at)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def _sweep(self, now: int) -> None:
        expired = [
            key
            for key, (_, expires_at) in self._data.items()
            if expires_at is not None and expires_at <= now
        ]
        for key in expired:
            del self._data[key]

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)
