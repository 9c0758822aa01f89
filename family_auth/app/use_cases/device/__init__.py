"""
Device Use Cases

Device activation and mobile device session lifecycle.
"""

from .activate_device_use_case import ActivateDeviceUseCase, check_activation_key
from .activate_mobile_device_use_case import ActivateMobileDeviceUseCase
from .refresh_device_session_use_case import RefreshDeviceSessionUseCase
from .revoke_device_session_use_case import RevokeDeviceSessionUseCase
from .dtos import (
    ActivateDeviceResponse,
    MobileDeviceActivateCommand,
    MobileDeviceSessionResponse,
    RevokeDeviceSessionResponse,
)

__all__ = [
    # Use Cases
    "ActivateDeviceUseCase",
    "ActivateMobileDeviceUseCase",
    "RefreshDeviceSessionUseCase",
    "RevokeDeviceSessionUseCase",
    "check_activation_key",
    # DTOs - Commands
    "MobileDeviceActivateCommand",
    # DTOs - Responses
    "ActivateDeviceResponse",
    "MobileDeviceSessionResponse",
    "RevokeDeviceSessionResponse",
]
