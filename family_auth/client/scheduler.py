import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional


class IScheduler(ABC):
    """One-shot timers. Handles returned by call_later must have cancel()."""

    @abstractmethod
    def call_later(self, delay_ms: int, callback: Callable[[], None]):
        pass


class AsyncioScheduler(IScheduler):
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(0, delay_ms) / 1000, callback)
