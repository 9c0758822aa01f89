import logging

from fastapi import Depends, Request, status

from family_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from family_auth.api.error import ClientError
from family_auth.app.services.device_auth_gate import (
    DEVICE_AUTH_COOKIE_NAME,
    DeviceAccessSettings,
    DeviceAuthContext,
    DeviceAuthGate,
)
from family_auth.app.services.device_session_manager import (
    UNAUTHORIZED_DEVICE,
    DeviceSessionManager,
    DeviceSessionSettings,
)
from family_auth.app.services.identity_provider import IIdentityProvider, IdentitySettings
from family_auth.app.services.object_storage import IObjectStorage
from family_auth.app.services.rate_limiter import ParentElevationRateLimiter
from family_auth.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


def get_config(request: Request):
    return request.app.state.config


async def get_unit_of_work(request: Request):
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_device_access_settings(config=Depends(get_config)) -> DeviceAccessSettings:
    return DeviceAccessSettings.from_config(config)


def get_device_session_manager(
    uow: UnitOfWork = Depends(get_unit_of_work),
    config=Depends(get_config),
) -> DeviceSessionManager:
    return DeviceSessionManager(uow, DeviceSessionSettings.from_config(config))


def get_identity_settings(config=Depends(get_config)) -> IdentitySettings:
    return IdentitySettings.from_config(config)


def get_identity_provider(request: Request) -> IIdentityProvider:
    return request.app.state.identity_provider


def get_rate_limiter(request: Request) -> ParentElevationRateLimiter:
    return request.app.state.rate_limiter


def get_object_storage(request: Request) -> IObjectStorage:
    return request.app.state.object_storage


def _unauthorized(context: DeviceAuthContext) -> ClientError:
    logger.info(f"Device authorization failed: {context.reason}")
    return ClientError(UNAUTHORIZED_DEVICE, status_code=status.HTTP_401_UNAUTHORIZED)


async def require_device(
    request: Request,
    manager: DeviceSessionManager = Depends(get_device_session_manager),
) -> DeviceAuthContext:
    """
    Dependency for routes open to any activated device (cookie or bearer).

    Raises:
        ClientError: 401 if the device is not authorized
    """
    gate = DeviceAuthGate(manager)
    context = await gate.authorize(
        request.cookies.get(DEVICE_AUTH_COOKIE_NAME), request.headers.get("authorization")
    )
    if not context.authorized:
        raise _unauthorized(context)
    return context


async def require_cookie_device(request: Request) -> DeviceAuthContext:
    """Dependency for browser-only routes"""
    context = DeviceAuthGate.authorize_cookie(request.cookies.get(DEVICE_AUTH_COOKIE_NAME))
    if not context.authorized:
        raise _unauthorized(context)
    return context


async def require_bearer_device(
    request: Request,
    manager: DeviceSessionManager = Depends(get_device_session_manager),
) -> DeviceAuthContext:
    """Dependency for mobile-only routes"""
    gate = DeviceAuthGate(manager)
    context = await gate.authorize_bearer(request.headers.get("authorization"))
    if not context.authorized:
        raise _unauthorized(context)
    return context
