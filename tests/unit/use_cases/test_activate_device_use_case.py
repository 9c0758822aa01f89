"""
Unit tests for browser and mobile device activation
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from family_auth.app.services.device_auth_gate import DeviceAccessSettings
from family_auth.app.services.device_session_manager import (
    DeviceSessionNotConfigured,
    IssuedDeviceSession,
)
from family_auth.app.use_cases.device import (
    ActivateDeviceUseCase,
    ActivateMobileDeviceUseCase,
    MobileDeviceActivateCommand,
)
from family_auth.domain.entities import DevicePlatform

ACCESS_KEY = "household-key"


@pytest.fixture
def settings():
    return DeviceAccessSettings(access_key=ACCESS_KEY)


@pytest.fixture
def session_manager():
    manager = MagicMock()
    manager.issue = AsyncMock(
        return_value=IssuedDeviceSession(
            token="device-token",
            session_id="session-1",
            expires_at="2026-11-17T00:00:00Z",
            claims=MagicMock(),
        )
    )
    return manager


@pytest.mark.asyncio
async def test_activate_device_success(settings):
    result = await ActivateDeviceUseCase(settings).execute(f"  {ACCESS_KEY}  ")

    assert result.is_ok()
    assert result.value.ok is True


@pytest.mark.asyncio
async def test_activate_device_not_configured():
    result = await ActivateDeviceUseCase(DeviceAccessSettings()).execute(ACCESS_KEY)

    assert result.is_err()
    assert result.error.code == "ACTIVATION_NOT_CONFIGURED"


@pytest.mark.asyncio
@pytest.mark.parametrize("key", [None, "", "   "])
async def test_activate_device_missing_key(settings, key):
    result = await ActivateDeviceUseCase(settings).execute(key)

    assert result.is_err()
    assert result.error.code == "ACTIVATION_KEY_REQUIRED"


@pytest.mark.asyncio
async def test_activate_device_wrong_key(settings):
    result = await ActivateDeviceUseCase(settings).execute("household-KEY")

    assert result.is_err()
    assert result.error.code == "INVALID_ACTIVATION_KEY"


@pytest.mark.asyncio
async def test_activate_mobile_device_success(settings, session_manager):
    command = MobileDeviceActivateCommand(
        access_key=ACCESS_KEY,
        platform="ios",
        device_name="  " + "n" * 200,
        app_version=" 1.2.3 ",
    )

    result = await ActivateMobileDeviceUseCase(settings, session_manager).execute(command)

    assert result.is_ok()
    assert result.value.device_session_token == "device-token"
    assert result.value.model_dump(by_alias=True) == {
        "deviceSessionToken": "device-token",
        "expiresAt": "2026-11-17T00:00:00Z",
        "sessionId": "session-1",
    }
    session_manager.issue.assert_awaited_once_with(
        DevicePlatform.ios, device_name="n" * 128, app_version="1.2.3"
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("platform", [None, "android", "IOS", "web"])
async def test_activate_mobile_device_unsupported_platform(settings, session_manager, platform):
    command = MobileDeviceActivateCommand(access_key=ACCESS_KEY, platform=platform)

    result = await ActivateMobileDeviceUseCase(settings, session_manager).execute(command)

    assert result.is_err()
    assert result.error.code == "UNSUPPORTED_PLATFORM"
    session_manager.issue.assert_not_called()


@pytest.mark.asyncio
async def test_activate_mobile_device_checks_key_before_platform(settings, session_manager):
    command = MobileDeviceActivateCommand(access_key="wrong", platform="android")

    result = await ActivateMobileDeviceUseCase(settings, session_manager).execute(command)

    assert result.error.code == "INVALID_ACTIVATION_KEY"


@pytest.mark.asyncio
async def test_activate_mobile_device_without_session_secret(settings, session_manager):
    session_manager.issue = AsyncMock(side_effect=DeviceSessionNotConfigured("no secret"))
    command = MobileDeviceActivateCommand(access_key=ACCESS_KEY, platform="ios")

    result = await ActivateMobileDeviceUseCase(settings, session_manager).execute(command)

    assert result.is_err()
    assert result.error.code == "ACTIVATION_NOT_CONFIGURED"
