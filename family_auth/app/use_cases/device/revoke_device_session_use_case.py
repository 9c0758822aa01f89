"""
Revoke Device Session Use Case

Signs a mobile device out.
"""

from typing import Optional

from family_auth.app.services.device_session_manager import DeviceSessionManager
from family_auth.libs.result import Result, Return
from .dtos import RevokeDeviceSessionResponse


class RevokeDeviceSessionUseCase:
    def __init__(self, session_manager: DeviceSessionManager):
        self.session_manager = session_manager

    async def execute(self, token: Optional[str]) -> Result[RevokeDeviceSessionResponse]:
        result = await self.session_manager.revoke(token)
        if result.is_err():
            return Return.err(result.error)
        return Return.ok(RevokeDeviceSessionResponse(ok=True))
