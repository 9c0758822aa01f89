"""
Shared-device idle watchdog.

While a parent is unlocked on a shared device, any period without user
activity longer than the idle timeout demotes the session back to kid.
"""

import asyncio
import inspect
import logging
import time
from typing import Callable, Optional

from .parent_session import ParentSessionState
from .scheduler import AsyncioScheduler, IScheduler

logger = logging.getLogger(__name__)

ACTIVITY_EVENTS = frozenset({"mousemove", "keydown", "click", "touchstart"})


def _now_ms() -> int:
    return int(time.time() * 1000)


class SharedDeviceIdleWatchdog:
    def __init__(
        self,
        state: ParentSessionState,
        idle_timeout_ms: int,
        on_expire: Callable[[], object],
        clock: Callable[[], int] = _now_ms,
        scheduler: Optional[IScheduler] = None,
    ):
        self.state = state
        self.on_expire = on_expire
        self.idle_timeout_ms = idle_timeout_ms
        self.clock = clock
        self.scheduler = scheduler or AsyncioScheduler()
        self._timer = None
        self._task: Optional[asyncio.Future] = None
        self._listening = False
        self._expired = False

    @property
    def is_active(self) -> bool:
        return self._listening

    def activate(self) -> bool:
        """
        Start watching if the session needs it.

        The first expiry is scheduled for whatever is left of the timeout
        since the last recorded activity.
        """
        if not self.state.is_idle_watch_required:
            return False

        self._listening = True
        self._expired = False
        now = self.clock()
        last_activity = self.state.last_activity_at_ms
        if last_activity is None:
            last_activity = now
        remaining = max(0, self.idle_timeout_ms - max(0, now - last_activity))
        self._schedule(remaining)
        return True

    def handle_event(self, name: str) -> None:
        if not self._listening or name not in ACTIVITY_EVENTS:
            return
        if not self.state.is_idle_watch_required:
            self._stop()
            return
        self.state.last_activity_at_ms = self.clock()
        self._schedule(self.idle_timeout_ms)

    def teardown(self) -> None:
        """Stop watching and cancel a demotion that is still running"""
        self._stop()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def sync(self) -> None:
        """Re-evaluate after the session state changed"""
        required = self.state.is_idle_watch_required
        if required and not self._listening:
            self.activate()
        elif not required and self._listening:
            self._stop()

    def _schedule(self, delay_ms: int) -> None:
        self._cancel()
        self._timer = self.scheduler.call_later(delay_ms, self._expire)

    def _stop(self) -> None:
        self._cancel()
        self._listening = False

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self) -> None:
        self._timer = None
        if self._expired:
            return
        if not self.state.is_idle_watch_required:
            self._stop()
            return
        self._expired = True
        logger.info("Parent session idle on shared device; demoting to kid")

        result = self.on_expire()
        if inspect.isawaitable(result):
            self._task = asyncio.ensure_future(result)
            self._task.add_done_callback(self._on_expire_done)

    def _on_expire_done(self, task: asyncio.Future) -> None:
        if task is self._task:
            self._task = None
        if task.cancelled():
            return
        try:
            task.result()
        except Exception:
            logger.exception("Idle demotion to kid failed")
