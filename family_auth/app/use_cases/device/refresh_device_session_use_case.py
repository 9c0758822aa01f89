"""
Refresh Device Session Use Case

Rotates a mobile device session token.
"""

from typing import Optional

from family_auth.app.services.device_session_manager import DeviceSessionManager
from family_auth.libs.result import Result, Return
from .dtos import MobileDeviceSessionResponse


class RefreshDeviceSessionUseCase:
    """
    Use case for refreshing a mobile device session.

    Business Rules:
    - Refresh token rotation: old token invalidated, new token issued
    - Session must not be revoked or expired
    - All failures are reported as UNAUTHORIZED_DEVICE
    """

    def __init__(self, session_manager: DeviceSessionManager):
        self.session_manager = session_manager

    async def execute(self, token: Optional[str]) -> Result[MobileDeviceSessionResponse]:
        result = await self.session_manager.refresh(token)
        if result.is_err():
            return Return.err(result.error)

        issued = result.value
        return Return.ok(
            MobileDeviceSessionResponse(
                device_session_token=issued.token,
                expires_at=issued.expires_at,
                session_id=issued.session_id,
            )
        )
