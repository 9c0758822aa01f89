"""
Unit tests for the Device Session Manager
"""

import pytest
from unittest.mock import AsyncMock

from family_auth.app.services.device_session_manager import (
    UNAUTHORIZED_DEVICE,
    DeviceSessionManager,
    DeviceSessionNotConfigured,
    DeviceSessionSettings,
)
from family_auth.domain.entities import DevicePlatform
from tests.utils.fakes import FakeClock, FakeDeviceSessionRepository

TTL_SECONDS = 3600


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repo():
    return FakeDeviceSessionRepository()


@pytest.fixture
def manager(mock_uow, repo, clock):
    mock_uow.device_sessions = repo
    settings = DeviceSessionSettings(secret="test-secret", ttl_seconds=TTL_SECONDS)
    return DeviceSessionManager(mock_uow, settings, clock=clock.seconds)


@pytest.mark.asyncio
async def test_issue_stores_session_record(manager, repo, mock_uow, clock):
    issued = await manager.issue(DevicePlatform.ios, device_name="Kitchen iPad", app_version="1.0.0")

    record = repo.sessions[issued.session_id]
    assert record.platform == "ios"
    assert record.device_name == "Kitchen iPad"
    assert record.revoked_at is None
    assert issued.claims.exp - issued.claims.iat == TTL_SECONDS
    assert issued.expires_at.endswith("Z")
    mock_uow.commit.assert_called_once()


@pytest.mark.asyncio
async def test_issue_without_secret_raises(mock_uow, repo, clock):
    mock_uow.device_sessions = repo
    manager = DeviceSessionManager(mock_uow, DeviceSessionSettings(secret=""), clock=clock.seconds)

    with pytest.raises(DeviceSessionNotConfigured):
        await manager.issue(DevicePlatform.ios)


@pytest.mark.asyncio
async def test_verify_valid_token_touches_last_seen(manager, repo, clock):
    issued = await manager.issue(DevicePlatform.ios)
    first_seen = repo.sessions[issued.session_id].last_seen_at

    clock.advance(60_000)
    result = await manager.verify(issued.token)

    assert result.ok
    assert result.claims.sid == issued.session_id
    assert repo.sessions[issued.session_id].last_seen_at > first_seen


@pytest.mark.asyncio
async def test_verify_failure_reasons(manager, clock):
    issued = await manager.issue(DevicePlatform.ios)

    assert (await manager.verify(None)).error == "missing"
    assert (await manager.verify("garbage")).error == "malformed"
    assert (await manager.verify(issued.token + "x")).error == "invalid_signature"

    clock.advance(TTL_SECONDS * 1000)
    result = await manager.verify(issued.token)
    assert not result.ok
    assert result.error == "expired"


@pytest.mark.asyncio
async def test_verify_without_record_still_succeeds(manager, repo):
    issued = await manager.issue(DevicePlatform.ios)
    repo.sessions.clear()

    assert (await manager.verify(issued.token)).ok


@pytest.mark.asyncio
async def test_verify_fails_closed_without_secret(manager, mock_uow, clock):
    issued = await manager.issue(DevicePlatform.ios)
    unconfigured = DeviceSessionManager(mock_uow, DeviceSessionSettings(secret=""), clock=clock.seconds)

    result = await unconfigured.verify(issued.token)

    assert not result.ok
    assert result.error == "not_configured"


@pytest.mark.asyncio
async def test_refresh_rotates_session(manager, repo):
    issued = await manager.issue(DevicePlatform.ios, device_name="Hall iPad", app_version="2.0")

    refreshed = await manager.refresh(issued.token)

    assert refreshed.is_ok()
    new_session = refreshed.value
    assert new_session.token != issued.token
    assert new_session.session_id != issued.session_id
    assert new_session.previous_session_id == issued.session_id
    assert new_session.claims.device_name == "Hall iPad"
    assert new_session.claims.app_version == "2.0"
    assert repo.sessions[issued.session_id].revoked

    # The pre-refresh token is dead, the new one works
    assert not (await manager.verify(issued.token)).ok
    assert (await manager.verify(new_session.token)).ok
    reused = await manager.refresh(issued.token)
    assert reused.is_err()
    assert reused.error == UNAUTHORIZED_DEVICE


@pytest.mark.asyncio
async def test_refresh_losing_rotation_issues_nothing(manager, repo, mock_uow):
    issued = await manager.issue(DevicePlatform.ios)
    mock_uow.commit.reset_mock()
    # Another refresh of the same token revoked the session first
    repo.revoke_by_id = AsyncMock(return_value=False)

    result = await manager.refresh(issued.token)

    assert result.is_err()
    assert result.error == UNAUTHORIZED_DEVICE
    assert list(repo.sessions) == [issued.session_id]
    mock_uow.commit.assert_not_called()


@pytest.mark.asyncio
async def test_revoke_once_then_unauthorized(manager):
    issued = await manager.issue(DevicePlatform.ios)

    first = await manager.revoke(issued.token)
    second = await manager.revoke(issued.token)

    assert first.is_ok()
    assert first.value.sid == issued.session_id
    assert second.is_err()
    assert second.error == UNAUTHORIZED_DEVICE
    assert (await manager.refresh(issued.token)).is_err()


@pytest.mark.asyncio
async def test_revoke_without_record_inserts_revoked_row(manager, repo):
    issued = await manager.issue(DevicePlatform.ios)
    repo.sessions.clear()

    result = await manager.revoke(issued.token)

    assert result.is_ok()
    assert repo.sessions[issued.session_id].revoked
    assert not (await manager.verify(issued.token)).ok


def test_settings_fall_back_to_device_access_key():
    class Config:
        MOBILE_DEVICE_SESSION_SECRET = ""
        DEVICE_ACCESS_KEY = "household-key"
        MOBILE_DEVICE_SESSION_TTL_SECONDS = 60

    settings = DeviceSessionSettings.from_config(Config)

    assert settings.secret == "household-key"
    assert settings.ttl_seconds == 60
