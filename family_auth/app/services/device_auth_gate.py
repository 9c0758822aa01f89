"""
Device Auth Gate

Decides whether a request comes from an activated household device, either
through the browser device cookie or a mobile device session bearer token.
"""

import hmac
from dataclasses import dataclass
from typing import Optional

from family_auth.app.services.credentials import extract_bearer_token
from family_auth.app.services.device_session_manager import DeviceSessionManager
from family_auth.app.services.device_session_token import DeviceSessionClaims
from family_auth.domain.entities import DeviceAuthSource

DEVICE_AUTH_COOKIE_NAME = "family_device_auth"
DEVICE_AUTH_COOKIE_VALUE = "true"
DEVICE_AUTH_COOKIE_MAX_AGE = 60 * 60 * 24 * 400  # 400 days


def has_valid_device_auth_cookie(value: Optional[str]) -> bool:
    """Only the exact sentinel value counts; case variants do not"""
    return value == DEVICE_AUTH_COOKIE_VALUE


@dataclass
class DeviceAccessSettings:
    """Configuration for device activation."""

    access_key: str = ""
    secure_cookie: bool = False

    @classmethod
    def from_config(cls, config) -> "DeviceAccessSettings":
        return cls(
            access_key=config.DEVICE_ACCESS_KEY or "",
            secure_cookie=config.ENVIRONMENT == "production",
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.access_key)

    def matches(self, provided_key: Optional[str]) -> bool:
        """Exact, constant-time comparison against the configured access key"""
        if not self.is_configured or not provided_key:
            return False
        return hmac.compare_digest(provided_key.encode("utf-8"), self.access_key.encode("utf-8"))

    def cookie_options(self) -> dict:
        """Keyword arguments for Response.set_cookie"""
        return {
            "key": DEVICE_AUTH_COOKIE_NAME,
            "value": DEVICE_AUTH_COOKIE_VALUE,
            "max_age": DEVICE_AUTH_COOKIE_MAX_AGE,
            "path": "/",
            "httponly": True,
            "secure": self.secure_cookie,
            "samesite": "lax",
        }


@dataclass
class DeviceAuthContext:
    """
    Per-request device authorization outcome. Never persisted.

    reason is only meant for server logs; clients always see the same
    "Unauthorized device" message.
    """

    authorized: bool
    source: Optional[DeviceAuthSource] = None
    claims: Optional[DeviceSessionClaims] = None
    reason: Optional[str] = None


class DeviceAuthGate:
    """
    Cookie-or-bearer device authorization.

    Business Rules:
    - A valid device cookie authorizes without touching the session store
    - Otherwise the Authorization header must carry a valid, unexpired,
      unrevoked device session token
    """

    def __init__(self, session_manager: DeviceSessionManager):
        self.session_manager = session_manager

    @staticmethod
    def authorize_cookie(cookie_value: Optional[str]) -> DeviceAuthContext:
        if has_valid_device_auth_cookie(cookie_value):
            return DeviceAuthContext(authorized=True, source=DeviceAuthSource.cookie)
        return DeviceAuthContext(authorized=False, reason="missing_cookie")

    async def authorize_bearer(self, authorization_header: Optional[str]) -> DeviceAuthContext:
        token = extract_bearer_token(authorization_header)
        verification = await self.session_manager.verify(token)
        if not verification.ok:
            return DeviceAuthContext(authorized=False, reason=verification.error)
        return DeviceAuthContext(
            authorized=True, source=DeviceAuthSource.bearer, claims=verification.claims
        )

    async def authorize(
        self, cookie_value: Optional[str], authorization_header: Optional[str]
    ) -> DeviceAuthContext:
        """
        Authorize a request by cookie first, then by bearer token.

        Args:
            cookie_value: Value of the device auth cookie (may be None)
            authorization_header: Raw Authorization header (may be None)

        Returns:
            DeviceAuthContext
        """
        cookie_context = self.authorize_cookie(cookie_value)
        if cookie_context.authorized:
            return cookie_context
        return await self.authorize_bearer(authorization_header)
