from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from family_auth.api.error import ClientError, ServerError
from family_auth.api.utils.responses import no_store_json
from family_auth.app.services.device_auth_gate import DeviceAccessSettings
from family_auth.app.use_cases.device import ActivateDeviceUseCase
from family_auth.depends import get_device_access_settings

router = APIRouter(tags=["Device"])

ACTIVATION_ERROR_STATUS = {
    "ACTIVATION_NOT_CONFIGURED": status.HTTP_503_SERVICE_UNAVAILABLE,
    "ACTIVATION_KEY_REQUIRED": status.HTTP_400_BAD_REQUEST,
    "INVALID_ACTIVATION_KEY": status.HTTP_403_FORBIDDEN,
    "UNSUPPORTED_PLATFORM": status.HTTP_400_BAD_REQUEST,
}


def raise_activation_error(error):
    status_code = ACTIVATION_ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


class DeviceActivateRequest(BaseModel):
    key: Optional[str] = None


@router.post("/device-activate", status_code=status.HTTP_200_OK)
async def activate_device(
    request: DeviceActivateRequest,
    settings: DeviceAccessSettings = Depends(get_device_access_settings),
):
    """
    Browser Device Activation

    Exchanges the household access key for the long-lived device cookie.

    Raises:
        - 400 Bad Request: Missing key or invalid body
        - 403 Forbidden: Wrong key
        - 503 Service Unavailable: No access key configured
    """
    use_case = ActivateDeviceUseCase(settings)
    result = await use_case.execute(request.key)

    if result.is_err():
        raise_activation_error(result.error)

    response = no_store_json(result.value)
    response.set_cookie(**settings.cookie_options())
    return response
