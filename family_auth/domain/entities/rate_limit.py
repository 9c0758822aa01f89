"""
Rate Limit Entry

Failure bookkeeping for one (ip, family member) pair.
"""

from sqlmodel import SQLModel


class RateLimitEntry(SQLModel):
    """
    Business Rules:
    - Created on the first recorded failure
    - blocked_until_ms only ever moves forward
    - Pruned once the window has elapsed and no block is active
    """

    first_failure_at_ms: int
    failure_count: int
    blocked_until_ms: int

    def is_stale(self, now_ms: int, window_ms: int) -> bool:
        return (
            now_ms - self.first_failure_at_ms > window_ms
            and self.blocked_until_ms <= now_ms
        )
