"""
HTTP middleware: device auth edge filter and request logging.
"""

import logging
import time

from fastapi import Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware

from family_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from family_auth.app.services.device_auth_gate import (
    DEVICE_AUTH_COOKIE_NAME,
    DeviceAccessSettings,
    DeviceAuthGate,
    has_valid_device_auth_cookie,
)
from family_auth.app.services.device_session_manager import (
    DeviceSessionManager,
    DeviceSessionSettings,
)

logger = logging.getLogger(__name__)

PUBLIC_FILE_EXTENSIONS = (
    ".ico",
    ".png",
    ".jpg",
    ".jpeg",
    ".svg",
    ".css",
    ".js",
    ".ttf",
    ".woff",
    ".woff2",
    ".webmanifest",
)

PUBLIC_PAGE_PATHS = ("/manifest.json", "/offline.html", "/activate", "/health")
PUBLIC_API_PATHS = ("/device-activate", "/mobile/device-activate")


def public_paths(api_prefix: str = "/api") -> frozenset:
    return frozenset(PUBLIC_PAGE_PATHS) | {f"{api_prefix}{path}" for path in PUBLIC_API_PATHS}


def is_public_path(path: str, api_prefix: str = "/api") -> bool:
    """Paths reachable without device authorization"""
    if path in public_paths(api_prefix):
        return True
    return path.endswith(PUBLIC_FILE_EXTENSIONS)


def is_api_path(path: str, api_prefix: str = "/api") -> bool:
    return path == api_prefix or path.startswith(f"{api_prefix}/")


class DeviceAuthMiddleware(BaseHTTPMiddleware):
    """
    Rejects every request that is neither allow-listed nor from an activated
    device. Browsers can activate through a magic link (?activate=<key>).

    Unauthorized API calls get 401 JSON; anything else gets a bare 404 so the
    site does not reveal itself to unknown browsers.
    """

    def __init__(self, app, config):
        super().__init__(app)
        self.access_settings = DeviceAccessSettings.from_config(config)
        self.session_settings = DeviceSessionSettings.from_config(config)
        self.api_prefix = config.API_PREFIX

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if is_public_path(path, self.api_prefix):
            return await call_next(request)

        cookie_value = request.cookies.get(DEVICE_AUTH_COOKIE_NAME)
        if has_valid_device_auth_cookie(cookie_value):
            return await call_next(request)

        # Magic link activation
        activation_key = request.query_params.get("activate")
        if (
            request.method == "GET"
            and not is_api_path(path, self.api_prefix)
            and activation_key
            and self.access_settings.matches(activation_key)
        ):
            logger.info("Device activated via magic link")
            response = RedirectResponse(url="/", status_code=307)
            response.set_cookie(**self.access_settings.cookie_options())
            return response

        context = await self._authorize_bearer(request)
        if context.authorized:
            return await call_next(request)

        logger.info(f"Blocked unauthorized device request to {path} ({context.reason})")
        if is_api_path(path, self.api_prefix):
            return JSONResponse(status_code=401, content={"error": "Unauthorized Device"})
        return PlainTextResponse("Not Found", status_code=404)

    async def _authorize_bearer(self, request: Request):
        session_factory = request.app.state.session_factory
        async with session_factory() as session:
            manager = DeviceSessionManager(SqlAlchemyUnitOfWork(session), self.session_settings)
            gate = DeviceAuthGate(manager)
            return await gate.authorize_bearer(request.headers.get("authorization"))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, path, status code and duration of every request"""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f}ms)"
        )
        return response
