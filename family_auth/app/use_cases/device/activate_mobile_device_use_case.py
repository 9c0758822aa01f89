"""
Activate Mobile Device Use Case

Exchanges the household access key for a mobile device session token.
"""

from family_auth.app.services.device_auth_gate import DeviceAccessSettings
from family_auth.app.services.device_session_manager import (
    DeviceSessionManager,
    DeviceSessionNotConfigured,
)
from family_auth.domain.entities import DevicePlatform
from family_auth.libs.result import Error, Result, Return
from .activate_device_use_case import check_activation_key
from .dtos import MobileDeviceActivateCommand, MobileDeviceSessionResponse

MAX_DEVICE_NAME_LENGTH = 128
MAX_APP_VERSION_LENGTH = 64

# Only the iOS app ships today
SUPPORTED_PLATFORMS = {DevicePlatform.ios.value}


def _clean(value, max_length: int):
    if not isinstance(value, str):
        return None
    return value.strip()[:max_length] or None


class ActivateMobileDeviceUseCase:
    """
    Use case for activating a mobile device.

    Business Rules:
    - Same access key checks as browser activation
    - Platform must be "ios"
    - Device name and app version are trimmed and truncated
    """

    def __init__(self, settings: DeviceAccessSettings, session_manager: DeviceSessionManager):
        self.settings = settings
        self.session_manager = session_manager

    async def execute(
        self, command: MobileDeviceActivateCommand
    ) -> Result[MobileDeviceSessionResponse]:
        check = check_activation_key(self.settings, command.access_key)
        if check.is_err():
            return Return.err(check.error)

        if command.platform not in SUPPORTED_PLATFORMS:
            return Return.err(Error("UNSUPPORTED_PLATFORM", "Unsupported platform"))

        try:
            issued = await self.session_manager.issue(
                DevicePlatform(command.platform),
                device_name=_clean(command.device_name, MAX_DEVICE_NAME_LENGTH),
                app_version=_clean(command.app_version, MAX_APP_VERSION_LENGTH),
            )
        except DeviceSessionNotConfigured:
            return Return.err(
                Error("ACTIVATION_NOT_CONFIGURED", "Device activation is not configured")
            )

        return Return.ok(
            MobileDeviceSessionResponse(
                device_session_token=issued.token,
                expires_at=issued.expires_at,
                session_id=issued.session_id,
            )
        )
