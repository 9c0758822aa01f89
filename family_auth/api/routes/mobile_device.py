from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from family_auth.api.error import ClientError
from family_auth.api.routes.device import raise_activation_error
from family_auth.api.utils.responses import no_store_json
from family_auth.app.services.credentials import extract_bearer_token
from family_auth.app.services.device_auth_gate import DeviceAccessSettings
from family_auth.app.services.device_session_manager import DeviceSessionManager
from family_auth.app.use_cases.device import (
    ActivateMobileDeviceUseCase,
    MobileDeviceActivateCommand,
    RefreshDeviceSessionUseCase,
    RevokeDeviceSessionUseCase,
)
from family_auth.depends import get_device_access_settings, get_device_session_manager

router = APIRouter(prefix="/mobile", tags=["Mobile Device"])


class MobileDeviceActivateRequest(BaseModel):
    """Mobile activation HTTP request payload (camelCase on the wire)"""

    access_key: Optional[str] = Field(default=None, alias="accessKey")
    platform: Optional[str] = None
    device_name: Optional[str] = Field(default=None, alias="deviceName")
    app_version: Optional[str] = Field(default=None, alias="appVersion")


def _raise_unauthorized(error):
    raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)


@router.post("/device-activate", status_code=status.HTTP_200_OK)
async def activate_mobile_device(
    request: MobileDeviceActivateRequest,
    settings: DeviceAccessSettings = Depends(get_device_access_settings),
    manager: DeviceSessionManager = Depends(get_device_session_manager),
):
    """
    Mobile Device Activation

    Exchanges the household access key for a device session bearer token.

    Raises:
        - 400 Bad Request: Missing key, invalid body or unsupported platform
        - 403 Forbidden: Wrong key
        - 503 Service Unavailable: No access key configured
    """
    command = MobileDeviceActivateCommand(
        access_key=request.access_key,
        platform=request.platform,
        device_name=request.device_name,
        app_version=request.app_version,
    )

    use_case = ActivateMobileDeviceUseCase(settings, manager)
    result = await use_case.execute(command)

    if result.is_err():
        raise_activation_error(result.error)

    return no_store_json(result.value)


@router.post("/device-session/refresh", status_code=status.HTTP_200_OK)
async def refresh_device_session(
    request: Request,
    manager: DeviceSessionManager = Depends(get_device_session_manager),
):
    """
    Rotate the presented device session token.

    The presented token stops working; the response carries its replacement.

    Raises:
        - 401 Unauthorized: Missing, invalid, expired or revoked token
    """
    token = extract_bearer_token(request.headers.get("authorization"))
    result = await RefreshDeviceSessionUseCase(manager).execute(token)

    if result.is_err():
        _raise_unauthorized(result.error)

    return no_store_json(result.value)


@router.post("/device-session/revoke", status_code=status.HTTP_200_OK)
async def revoke_device_session(
    request: Request,
    manager: DeviceSessionManager = Depends(get_device_session_manager),
):
    """
    Revoke the presented device session token (mobile sign out).

    Raises:
        - 401 Unauthorized: Missing, invalid, expired or revoked token
    """
    token = extract_bearer_token(request.headers.get("authorization"))
    result = await RevokeDeviceSessionUseCase(manager).execute(token)

    if result.is_err():
        _raise_unauthorized(result.error)

    return no_store_json(result.value)
