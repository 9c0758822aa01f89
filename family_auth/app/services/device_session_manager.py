"""
Device Session Manager

Issues, verifies, refreshes and revokes mobile device session tokens.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Callable, Optional

from family_auth.app.services.device_session_token import (
    DeviceSessionClaims,
    TokenDecodeError,
    decode_device_session_token,
    encode_device_session_token,
)
from family_auth.app.services.unit_of_work import UnitOfWork
from family_auth.domain.entities import DevicePlatform, DeviceSession
from family_auth.libs.result import Error, Result, Return

logger = logging.getLogger(__name__)

UNAUTHORIZED_DEVICE = Error("UNAUTHORIZED_DEVICE", "Unauthorized device")


class DeviceSessionNotConfigured(Exception):
    """No secret is configured for signing device session tokens"""


@dataclass
class DeviceSessionSettings:
    """Configuration for mobile device sessions."""

    secret: str
    ttl_seconds: int = 60 * 60 * 24 * 30

    @classmethod
    def from_config(cls, config) -> "DeviceSessionSettings":
        return cls(
            secret=config.MOBILE_DEVICE_SESSION_SECRET or config.DEVICE_ACCESS_KEY or "",
            ttl_seconds=config.MOBILE_DEVICE_SESSION_TTL_SECONDS,
        )


@dataclass
class IssuedDeviceSession:
    token: str
    session_id: str
    expires_at: str
    claims: DeviceSessionClaims
    previous_session_id: Optional[str] = None


@dataclass
class VerifyResult:
    ok: bool
    claims: Optional[DeviceSessionClaims] = None
    error: Optional[str] = None


def _to_db_time(epoch_seconds: float) -> datetime:
    return datetime.fromtimestamp(epoch_seconds, UTC).replace(tzinfo=None)


def _to_iso(epoch_seconds: int) -> str:
    return datetime.fromtimestamp(epoch_seconds, UTC).isoformat().replace("+00:00", "Z")


class DeviceSessionManager:
    """
    Mobile device session lifecycle.

    Business Rules:
    - Tokens are self-contained signed claims; verification checks signature,
      expiry and the session's revocation record
    - Refresh revokes the presented session and issues a new one, so a token
      stops working once it has been refreshed
    - Revoke only accepts a currently valid token
    - Every failure looks the same to callers (UNAUTHORIZED_DEVICE); the
      precise reason is only logged
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: DeviceSessionSettings,
        clock: Callable[[], float] = time.time,
    ):
        self.uow = uow
        self.settings = settings
        self.clock = clock

    async def issue(
        self,
        platform: DevicePlatform,
        device_name: Optional[str] = None,
        app_version: Optional[str] = None,
    ) -> IssuedDeviceSession:
        """
        Create a new device session.

        Platform validation is the caller's job.

        Raises:
            DeviceSessionNotConfigured: no signing secret is configured
        """
        async with self.uow:
            issued = await self._issue(platform, device_name, app_version)
            await self.uow.commit()
        logger.info(f"Issued device session {issued.session_id} ({issued.claims.platform.value})")
        return issued

    async def verify(self, token: Optional[str]) -> VerifyResult:
        """
        Verify a device session token and touch the session's last_seen_at.

        Args:
            token: Bearer token (may be None)

        Returns:
            VerifyResult with claims on success, a failure reason otherwise
        """
        async with self.uow:
            result = await self._verify(token)
            if result.ok:
                await self._touch(result.claims.sid)
                await self.uow.commit()
        return result

    async def refresh(self, token: Optional[str]) -> Result[IssuedDeviceSession]:
        """
        Rotate a device session token.

        Returns:
            Result with the new session, or UNAUTHORIZED_DEVICE
        """
        async with self.uow:
            verification = await self._verify(token)
            if not verification.ok:
                logger.info(f"Device session refresh rejected: {verification.error}")
                return Return.err(UNAUTHORIZED_DEVICE)

            claims = verification.claims
            rotated = await self.uow.device_sessions.revoke_by_id(
                claims.sid, _to_db_time(self.clock())
            )
            if not rotated:
                logger.warning(f"Device session {claims.sid} was already rotated or revoked")
                return Return.err(UNAUTHORIZED_DEVICE)

            issued = await self._issue(claims.platform, claims.device_name, claims.app_version)
            issued.previous_session_id = claims.sid
            await self.uow.commit()

        logger.info(f"Refreshed device session {claims.sid} -> {issued.session_id}")
        return Return.ok(issued)

    async def revoke(self, token: Optional[str]) -> Result[DeviceSessionClaims]:
        """
        Revoke the session behind a valid token.

        Returns:
            Result with the revoked session's claims, or UNAUTHORIZED_DEVICE
        """
        async with self.uow:
            verification = await self._verify(token)
            if not verification.ok:
                logger.info(f"Device session revoke rejected: {verification.error}")
                return Return.err(UNAUTHORIZED_DEVICE)

            revoked = await self.uow.device_sessions.revoke_by_id(
                verification.claims.sid, _to_db_time(self.clock())
            )
            if not revoked:
                logger.info(f"Device session {verification.claims.sid} already revoked")
                return Return.err(UNAUTHORIZED_DEVICE)
            await self.uow.commit()

        logger.info(f"Revoked device session {verification.claims.sid}")
        return Return.ok(verification.claims)

    async def _issue(
        self,
        platform: DevicePlatform,
        device_name: Optional[str],
        app_version: Optional[str],
    ) -> IssuedDeviceSession:
        if not self.settings.secret:
            raise DeviceSessionNotConfigured("Mobile device sessions are not configured")

        now = int(self.clock())
        claims = DeviceSessionClaims(
            sid=str(uuid.uuid4()),
            platform=platform,
            device_name=device_name or None,
            app_version=app_version or None,
            iat=now,
            exp=now + self.settings.ttl_seconds,
        )
        token = encode_device_session_token(claims, self.settings.secret)

        await self.uow.device_sessions.create(
            DeviceSession(
                id=claims.sid,
                platform=claims.platform.value,
                device_name=claims.device_name,
                app_version=claims.app_version,
                created_at=_to_db_time(claims.iat),
                last_seen_at=_to_db_time(claims.iat),
                expires_at=_to_db_time(claims.exp),
            )
        )

        return IssuedDeviceSession(
            token=token,
            session_id=claims.sid,
            expires_at=_to_iso(claims.exp),
            claims=claims,
        )

    async def _verify(self, token: Optional[str]) -> VerifyResult:
        if not token:
            return VerifyResult(ok=False, error="missing")
        if not self.settings.secret:
            return VerifyResult(ok=False, error="not_configured")

        try:
            claims = decode_device_session_token(token, self.settings.secret)
        except TokenDecodeError as e:
            return VerifyResult(ok=False, error=e.reason)

        if claims.exp <= int(self.clock()):
            return VerifyResult(ok=False, error="expired")

        record = await self.uow.device_sessions.get_by_id(claims.sid)
        if record is not None and record.revoked:
            return VerifyResult(ok=False, error="revoked")

        return VerifyResult(ok=True, claims=claims)

    async def _touch(self, session_id: str) -> None:
        record = await self.uow.device_sessions.get_by_id(session_id)
        if record is not None and not record.revoked:
            record.last_seen_at = _to_db_time(self.clock())
            await self.uow.device_sessions.update(record)
