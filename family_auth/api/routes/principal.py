"""
Principal token routes.

Browsers mint tokens with the device cookie; the mobile app mints them with
its device session bearer token under /mobile. Both share one implementation.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from family_auth.api.error import ClientError, ServerError
from family_auth.api.utils.responses import client_ip, no_store_json
from family_auth.app.services.device_auth_gate import DeviceAuthContext
from family_auth.app.services.identity_provider import IIdentityProvider
from family_auth.app.services.rate_limiter import ParentElevationRateLimiter
from family_auth.app.use_cases.principal import (
    MintKidTokenUseCase,
    MintParentTokenUseCase,
    ParentElevationCommand,
)
from family_auth.depends import (
    get_identity_provider,
    get_rate_limiter,
    require_bearer_device,
    require_cookie_device,
    require_device,
)

router = APIRouter(tags=["Principal"])

PRINCIPAL_ERROR_STATUS = {
    "IDENTITY_NOT_CONFIGURED": status.HTTP_503_SERVICE_UNAVAILABLE,
    "FAMILY_MEMBER_ID_REQUIRED": status.HTTP_400_BAD_REQUEST,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    "FAMILY_MEMBER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "NOT_A_PARENT": status.HTTP_403_FORBIDDEN,
    "PIN_REQUIRED": status.HTTP_400_BAD_REQUEST,
    "INCORRECT_PIN": status.HTTP_403_FORBIDDEN,
}


class ParentTokenRequest(BaseModel):
    family_member_id: Optional[str] = Field(default=None, alias="familyMemberId")
    pin: Optional[str] = None


def _raise_principal_error(error):
    status_code = PRINCIPAL_ERROR_STATUS.get(error.code)
    if status_code is None:
        raise ServerError(error)

    headers = {}
    if error.code == "RATE_LIMITED":
        headers["Retry-After"] = str(error.details["retry_after_seconds"])
    raise ClientError(error, status_code=status_code, headers=headers)


async def _mint_kid(identity: IIdentityProvider):
    result = await MintKidTokenUseCase(identity).execute()
    if result.is_err():
        _raise_principal_error(result.error)
    return no_store_json(result.value)


async def _mint_parent(
    http_request: Request,
    request: ParentTokenRequest,
    identity: IIdentityProvider,
    rate_limiter: ParentElevationRateLimiter,
):
    command = ParentElevationCommand(
        family_member_id=request.family_member_id,
        pin=request.pin,
        ip=client_ip(http_request),
    )
    result = await MintParentTokenUseCase(identity, rate_limiter).execute(command)
    if result.is_err():
        _raise_principal_error(result.error)
    return no_store_json(result.value)


@router.get("/instant-auth-token", status_code=status.HTTP_200_OK)
async def mint_kid_token(
    device: DeviceAuthContext = Depends(require_device),
    identity: IIdentityProvider = Depends(get_identity_provider),
):
    """
    Mint Kid Token

    Any activated device (cookie or bearer) gets the default kid principal.

    Raises:
        - 401 Unauthorized: Device not activated
        - 503 Service Unavailable: Identity system not configured
        - 500 Internal Server Error: Token minting failed
    """
    return await _mint_kid(identity)


@router.post("/instant-auth-parent-token", status_code=status.HTTP_200_OK)
async def mint_parent_token(
    http_request: Request,
    request: ParentTokenRequest,
    device: DeviceAuthContext = Depends(require_cookie_device),
    identity: IIdentityProvider = Depends(get_identity_provider),
    rate_limiter: ParentElevationRateLimiter = Depends(get_rate_limiter),
):
    """
    Parent Elevation (browser)

    Verifies the selected parent's PIN and mints a parent principal token.

    Raises:
        - 400 Bad Request: familyMemberId or PIN missing
        - 401 Unauthorized: Device not activated
        - 403 Forbidden: Not a parent or incorrect PIN
        - 404 Not Found: Family member not found
        - 429 Too Many Requests: Rate limited (Retry-After header)
        - 503 Service Unavailable: Identity system not configured
        - 500 Internal Server Error: Upstream failure
    """
    return await _mint_parent(http_request, request, identity, rate_limiter)


@router.get("/mobile/instant-auth-token", status_code=status.HTTP_200_OK)
async def mint_mobile_kid_token(
    device: DeviceAuthContext = Depends(require_bearer_device),
    identity: IIdentityProvider = Depends(get_identity_provider),
):
    """Mint Kid Token (mobile bearer)"""
    return await _mint_kid(identity)


@router.post("/mobile/instant-auth-parent-token", status_code=status.HTTP_200_OK)
async def mint_mobile_parent_token(
    http_request: Request,
    request: ParentTokenRequest,
    device: DeviceAuthContext = Depends(require_bearer_device),
    identity: IIdentityProvider = Depends(get_identity_provider),
    rate_limiter: ParentElevationRateLimiter = Depends(get_rate_limiter),
):
    """Parent Elevation (mobile bearer). Same rules as the browser route."""
    return await _mint_parent(http_request, request, identity, rate_limiter)
