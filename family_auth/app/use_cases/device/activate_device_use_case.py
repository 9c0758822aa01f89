"""
Activate Device Use Case

Exchanges the household access key for the browser device cookie.
"""

import logging
from typing import Optional

from family_auth.app.services.device_auth_gate import DeviceAccessSettings
from family_auth.libs.result import Error, Result, Return
from .dtos import ActivateDeviceResponse

logger = logging.getLogger(__name__)


def check_activation_key(settings: DeviceAccessSettings, provided_key: Optional[str]) -> Result[None]:
    """
    Shared activation key checks for browser and mobile activation.

    Order: not configured (503) -> missing key (400) -> wrong key (403).
    """
    if not settings.is_configured:
        return Return.err(Error("ACTIVATION_NOT_CONFIGURED", "Device activation is not configured"))

    key = provided_key.strip() if isinstance(provided_key, str) else ""
    if not key:
        return Return.err(Error("ACTIVATION_KEY_REQUIRED", "Activation key is required"))

    if not settings.matches(key):
        logger.warning("Device activation attempted with an invalid key")
        return Return.err(Error("INVALID_ACTIVATION_KEY", "Invalid activation key"))

    return Return.ok(None)


class ActivateDeviceUseCase:
    """
    Use case for activating a browser.

    Business Rules:
    - Activation only works when an access key is configured
    - The key is trimmed and compared exactly
    - The caller sets the long-lived device cookie on success
    """

    def __init__(self, settings: DeviceAccessSettings):
        self.settings = settings

    async def execute(self, key: Optional[str]) -> Result[ActivateDeviceResponse]:
        check = check_activation_key(self.settings, key)
        if check.is_err():
            return Return.err(check.error)

        logger.info("Browser device activated")
        return Return.ok(ActivateDeviceResponse(ok=True))
