"""
HTTP client for the principal token endpoints.

Browsers authenticate with the device cookie; the mobile app sends its device
session token as a bearer token and uses the /mobile routes.
"""

from typing import Any, Dict, Optional

import httpx

from family_auth.app.services.device_auth_gate import (
    DEVICE_AUTH_COOKIE_NAME,
    DEVICE_AUTH_COOKIE_VALUE,
)

DEFAULT_TIMEOUT_SECONDS = 10.0


class PrincipalTokenError(Exception):
    """A principal token endpoint failed or answered without a token"""

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        self.message = message
        self.status = status
        self.code = code
        super().__init__(message)


class PrincipalTokenClient:
    def __init__(
        self,
        base_url: str,
        device_session_token: Optional[str] = None,
        api_prefix: str = "/api",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.device_session_token = device_session_token
        self.api_prefix = api_prefix.rstrip("/")

        headers = {"Cache-Control": "no-store"}
        cookies = None
        if device_session_token:
            headers["Authorization"] = f"Bearer {device_session_token}"
        else:
            cookies = {DEVICE_AUTH_COOKIE_NAME: DEVICE_AUTH_COOKIE_VALUE}

        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            cookies=cookies,
            transport=transport,
            timeout=timeout,
        )

    @property
    def uses_bearer(self) -> bool:
        return bool(self.device_session_token)

    def _path(self, name: str) -> str:
        if self.uses_bearer:
            return f"{self.api_prefix}/mobile/{name}"
        return f"{self.api_prefix}/{name}"

    async def fetch_kid_token(self) -> str:
        response = await self._client.get(self._path("instant-auth-token"))
        return self._parse_token(response)

    async def fetch_parent_token(self, family_member_id: str, pin: Optional[str] = None) -> str:
        body: Dict[str, Any] = {"familyMemberId": family_member_id}
        if pin is not None:
            body["pin"] = pin
        response = await self._client.post(self._path("instant-auth-parent-token"), json=body)
        return self._parse_token(response)

    @staticmethod
    def _parse_token(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            payload = {}

        if response.is_error:
            message = payload.get("error") or f"Token endpoint failed with {response.status_code}"
            raise PrincipalTokenError(message, status=response.status_code, code=payload.get("code"))

        token = payload.get("token")
        if not isinstance(token, str) or not token:
            raise PrincipalTokenError(
                "Token endpoint returned an invalid response", status=response.status_code
            )
        return token

    async def close(self) -> None:
        await self._client.aclose()
