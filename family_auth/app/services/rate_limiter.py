"""
Parent elevation rate limiting.

Throttles PIN guessing per (source IP, target family member) with a sliding
failure window and binary exponential backoff:

- The first ``free_failures`` failures inside the window cost nothing
- Each further failure blocks for base * 2^(n-1) ms, capped at max_backoff_ms
- A block never shrinks, even if failures are recorded out of order
- An entry is dropped once its window has elapsed and no block is active
"""

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from typing import Callable, Optional

from family_auth.app.services.key_value_store import IKeyValueStore
from family_auth.domain.entities import RateLimitEntry

logger = logging.getLogger(__name__)

KEY_PREFIX = "parent-elevation"

# Exponent cap for 2 ** n; max_backoff_ms is always reached first
MAX_BACKOFF_EXPONENT = 62


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RateLimitSettings:
    """Configuration for the parent elevation limiter."""

    window_ms: int = 10 * 60 * 1000
    base_backoff_ms: int = 1000
    max_backoff_ms: int = 5 * 60 * 1000
    free_failures: int = 3

    @classmethod
    def from_config(cls, config) -> "RateLimitSettings":
        return cls(
            window_ms=config.PARENT_ELEVATION_RATE_LIMIT_WINDOW_MS,
            base_backoff_ms=config.PARENT_ELEVATION_RATE_LIMIT_BASE_BACKOFF_MS,
            max_backoff_ms=config.PARENT_ELEVATION_RATE_LIMIT_MAX_BACKOFF_MS,
            free_failures=config.PARENT_ELEVATION_RATE_LIMIT_FREE_FAILURES,
        )


@dataclass
class RateLimitDecision:
    """Result of a rate limit check."""

    allowed: bool
    retry_after_ms: int = 0

    @property
    def retry_after_seconds(self) -> int:
        """Whole seconds for the Retry-After header (rounded up)"""
        return int(math.ceil(self.retry_after_ms / 1000))


class ParentElevationRateLimiter:
    """
    Sliding-window + exponential backoff guard for parent elevation.

    Entries live in an injectable key/value store. Read-modify-write cycles
    are serialized per process with an asyncio lock; the lock is never held
    while the caller talks to the identity system.
    """

    def __init__(
        self,
        store: IKeyValueStore,
        settings: Optional[RateLimitSettings] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self._store = store
        self._settings = settings or RateLimitSettings()
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def settings(self) -> RateLimitSettings:
        return self._settings

    @staticmethod
    def key(family_member_id: str, ip: Optional[str] = None) -> str:
        """
        Build the limiter key for an elevation attempt.

        Args:
            family_member_id: Target family member
            ip: Client address, possibly a proxy chain ("client, proxy1, ...")

        Returns:
            "{ip}::{family_member_id}", ip defaulting to "unknown"
        """
        first_hop = (ip or "").split(",")[0].strip()
        return f"{first_hop or 'unknown'}::{family_member_id}"

    def _store_key(self, key: str) -> str:
        return f"{KEY_PREFIX}:{key}"

    async def _load(self, key: str) -> Optional[RateLimitEntry]:
        raw = await self._store.get(self._store_key(key))
        if raw is None:
            return None
        return RateLimitEntry.model_validate(raw)

    async def check(self, key: str, now_ms: Optional[int] = None) -> RateLimitDecision:
        """
        Check whether an elevation attempt may proceed. Never mutates state.

        Args:
            key: Limiter key from key()
            now_ms: Current time in epoch milliseconds (defaults to the clock)

        Returns:
            RateLimitDecision; retry_after_ms is at least 1 when blocked
        """
        now_ms = self._clock() if now_ms is None else now_ms
        entry = await self._load(key)
        if entry is None or entry.is_stale(now_ms, self._settings.window_ms):
            return RateLimitDecision(allowed=True)

        if entry.blocked_until_ms > now_ms:
            return RateLimitDecision(
                allowed=False,
                retry_after_ms=max(1, entry.blocked_until_ms - now_ms),
            )

        return RateLimitDecision(allowed=True)

    async def record_failure(
        self, key: str, now_ms: Optional[int] = None
    ) -> RateLimitEntry:
        """
        Record a failed elevation attempt and extend the block if needed.

        Args:
            key: Limiter key from key()
            now_ms: Current time in epoch milliseconds (defaults to the clock)

        Returns:
            The updated entry
        """
        settings = self._settings
        now_ms = self._clock() if now_ms is None else now_ms

        async with self._lock:
            existing = await self._load(key)
            if existing is not None and existing.is_stale(now_ms, settings.window_ms):
                existing = None

            failure_count = (existing.failure_count if existing else 0) + 1
            penalty_failures = max(0, failure_count - settings.free_failures)
            if penalty_failures == 0:
                backoff_ms = 0
            else:
                exponent = min(penalty_failures - 1, MAX_BACKOFF_EXPONENT)
                backoff_ms = min(settings.max_backoff_ms, settings.base_backoff_ms * 2**exponent)

            entry = RateLimitEntry(
                first_failure_at_ms=existing.first_failure_at_ms if existing else now_ms,
                failure_count=failure_count,
                blocked_until_ms=max(
                    existing.blocked_until_ms if existing else 0, now_ms + backoff_ms
                ),
            )

            # Expire with the window or the block, whichever ends later
            ttl_ms = (
                max(entry.blocked_until_ms, entry.first_failure_at_ms + settings.window_ms)
                - now_ms
                + 1
            )
            await self._store.set(self._store_key(key), entry.model_dump(), ttl_ms=ttl_ms)

        if backoff_ms:
            logger.warning(
                f"Parent elevation blocked for {backoff_ms}ms after {failure_count} failures"
            )
        return entry

    async def clear(self, key: str) -> None:
        """Forget all failures for key (called after a successful elevation)"""
        async with self._lock:
            await self._store.delete(self._store_key(key))
