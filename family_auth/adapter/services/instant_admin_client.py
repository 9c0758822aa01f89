"""
Instant admin API client.

Implements the external identity system interface over the Instant admin
HTTP API using httpx. Every request carries the admin token as a bearer
credential plus the App-Id header.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from family_auth.app.services.identity_provider import (
    IdentityProviderError,
    IdentitySettings,
    IdentityUser,
    IIdentityProvider,
)
from family_auth.domain.entities import FamilyMember

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


class InstantAdminClient(IIdentityProvider):
    """httpx-based client for the Instant admin API"""

    def __init__(
        self,
        settings: IdentitySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.api_uri.rstrip("/"),
            transport=transport,
            timeout=timeout,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.admin_token}",
            "App-Id": self.settings.app_id,
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        if not self.settings.is_configured:
            raise IdentityProviderError("Instant admin API is not configured")

        try:
            response = await self._client.request(method, path, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            raise IdentityProviderError(f"Instant admin request {method} {path} failed: {e}") from e

        if response.status_code >= 400:
            raise IdentityProviderError(
                f"Instant admin request {method} {path} returned {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise IdentityProviderError(f"Instant admin request {method} {path} returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise IdentityProviderError(f"Instant admin request {method} {path} returned unexpected payload")
        return payload

    async def create_token(self, email: str) -> str:
        payload = await self._request("POST", "/admin/refresh_tokens", json={"email": email})
        token = (payload.get("user") or {}).get("refresh_token")
        if not isinstance(token, str) or not token:
            raise IdentityProviderError("Instant admin API returned no refresh token")
        return token

    async def get_user(self, email: str) -> Optional[IdentityUser]:
        payload = await self._request("GET", "/admin/users", params={"email": email})
        user = payload.get("user")
        if not user:
            return None
        return IdentityUser(id=str(user["id"]), email=user.get("email"), type=user.get("type"))

    async def update_user_type(self, user_id: str, user_type: str) -> None:
        steps = [["update", "$users", user_id, {"type": user_type}]]
        await self._request("POST", "/admin/transact", json={"steps": steps})

    async def query(self, query: Dict[str, Any]) -> Dict[str, Any]:
        """Run an InstaQL query as admin"""
        return await self._request("POST", "/admin/query", json={"query": query})

    async def get_family_member(self, family_member_id: str) -> Optional[FamilyMember]:
        result = await self.query({"familyMembers": {"$": {"where": {"id": family_member_id}}}})
        records = result.get("familyMembers") or []
        if not records:
            return None
        return FamilyMember.from_record(records[0])

    async def close(self) -> None:
        await self._client.aclose()
