"""
Client-held principal session: which principal is signed in, whether parent
mode is unlocked, and the cached tokens behind it.
"""

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from family_auth.domain.entities import PrincipalType
from .principal_token_client import PrincipalTokenClient

logger = logging.getLogger(__name__)

DEFAULT_PARENT_SHARED_DEVICE = True
DEFAULT_PARENT_SHARED_DEVICE_IDLE_TIMEOUT_MS = 15 * 60 * 1000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class ParentSessionState:
    principal_type: PrincipalType = PrincipalType.kid
    unlocked: bool = False
    shared_device: bool = DEFAULT_PARENT_SHARED_DEVICE
    last_activity_at_ms: Optional[int] = None

    @property
    def is_idle_watch_required(self) -> bool:
        return self.principal_type == PrincipalType.parent and self.unlocked and self.shared_device


SignIn = Callable[[PrincipalType, str], Awaitable[None]]


class FamilyAuthSession:
    """
    Switches the client between the kid and parent principals.

    sign_in hands a freshly obtained token to the reactive database client.
    Each switch bumps a generation counter; a response that arrives after a
    newer switch started is dropped instead of overwriting the newer state.
    """

    def __init__(
        self,
        token_client: PrincipalTokenClient,
        sign_in: Optional[SignIn] = None,
        state: Optional[ParentSessionState] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.token_client = token_client
        self.sign_in = sign_in
        self.state = state or ParentSessionState()
        self.clock = clock
        self.tokens: Dict[PrincipalType, str] = {}
        self._generation = 0

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def _apply(self, principal: PrincipalType, token: str) -> None:
        if self.sign_in is not None:
            await self.sign_in(principal, token)
        self.tokens[principal] = token
        self.state.principal_type = principal
        if principal == PrincipalType.parent:
            self.state.unlocked = True
            self.state.last_activity_at_ms = self.clock()

    def _clear_parent_session(self) -> None:
        self.tokens.pop(PrincipalType.parent, None)
        self.state.unlocked = False
        self.state.last_activity_at_ms = None

    async def ensure_kid(self, clear_parent_session: bool = False, prefer_cached: bool = True) -> Optional[str]:
        """
        Make sure the kid principal is signed in.

        Returns the kid token, or None if a newer switch superseded this one.
        """
        if not clear_parent_session and self.state.principal_type == PrincipalType.kid:
            cached = self.tokens.get(PrincipalType.kid)
            if cached:
                return cached

        generation = self._next_generation()
        if clear_parent_session:
            self._clear_parent_session()
            self.state.shared_device = DEFAULT_PARENT_SHARED_DEVICE

        cached = self.tokens.get(PrincipalType.kid) if prefer_cached else None
        if cached:
            try:
                await self._apply(PrincipalType.kid, cached)
                return cached
            except Exception:
                logger.warning("Cached kid token failed; fetching a fresh token")
                self.tokens.pop(PrincipalType.kid, None)

        token = await self.token_client.fetch_kid_token()
        if not self._is_current(generation):
            return None
        await self._apply(PrincipalType.kid, token)
        return token

    async def elevate_parent(
        self,
        family_member_id: str,
        pin: Optional[str] = None,
        shared_device: Optional[bool] = None,
    ) -> Optional[str]:
        """
        Switch to the parent principal, verifying the PIN server side unless
        an unlocked parent token is already cached.

        Raises:
            PrincipalTokenError: the server refused the elevation
        """
        if shared_device is not None:
            self.state.shared_device = shared_device
        self.state.last_activity_at_ms = self.clock()

        cached = self.tokens.get(PrincipalType.parent)
        if self.state.principal_type == PrincipalType.parent and self.state.unlocked and cached:
            return cached

        generation = self._next_generation()
        if cached and self.state.unlocked:
            try:
                await self._apply(PrincipalType.parent, cached)
                return cached
            except Exception:
                logger.warning("Cached parent token failed; falling back to server verification")
                self._clear_parent_session()

        token = await self.token_client.fetch_parent_token(family_member_id, pin)
        if not self._is_current(generation):
            return None
        await self._apply(PrincipalType.parent, token)
        return token

    async def demote_to_kid(self) -> Optional[str]:
        """Drop parent mode (idle expiry or explicit lock) and fall back to kid"""
        return await self.ensure_kid(clear_parent_session=True)
