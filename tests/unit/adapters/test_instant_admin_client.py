"""
Unit tests for the Instant admin API client
"""

import json

import httpx
import pytest

from family_auth.adapter.services.instant_admin_client import InstantAdminClient
from family_auth.app.services.identity_provider import IdentityProviderError, IdentitySettings
from family_auth.app.services.principal_tokens import mint_principal_token
from family_auth.domain.entities import PrincipalType

SETTINGS = IdentitySettings(
    app_id="app-123",
    admin_token="admin-token",
    api_uri="https://instant.example.test",
)


class Recorder:
    def __init__(self, responses):
        self.responses = responses
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.responses[(request.method, request.url.path)]
        return handler(request) if callable(handler) else handler


def make_client(responses):
    recorder = Recorder(responses)
    client = InstantAdminClient(SETTINGS, transport=httpx.MockTransport(recorder))
    return client, recorder


@pytest.mark.asyncio
async def test_create_token_sends_admin_headers():
    client, recorder = make_client(
        {("POST", "/admin/refresh_tokens"): httpx.Response(200, json={"user": {"refresh_token": "tok"}})}
    )

    token = await client.create_token("kid@family-organizer.local")

    assert token == "tok"
    request = recorder.requests[0]
    assert request.headers["Authorization"] == "Bearer admin-token"
    assert request.headers["App-Id"] == "app-123"
    assert json.loads(request.content) == {"email": "kid@family-organizer.local"}
    await client.close()


@pytest.mark.asyncio
async def test_get_user_by_email():
    client, recorder = make_client(
        {("GET", "/admin/users"): httpx.Response(200, json={"user": {"id": "u1", "email": "e", "type": "kid"}})}
    )

    user = await client.get_user("e")

    assert user.id == "u1"
    assert user.type == "kid"
    assert recorder.requests[0].url.params["email"] == "e"


@pytest.mark.asyncio
async def test_get_user_missing_returns_none():
    client, _ = make_client({("GET", "/admin/users"): httpx.Response(200, json={"user": None})})

    assert await client.get_user("nobody") is None


@pytest.mark.asyncio
async def test_update_user_type_transacts():
    client, recorder = make_client({("POST", "/admin/transact"): httpx.Response(200, json={})})

    await client.update_user_type("u1", "parent")

    assert json.loads(recorder.requests[0].content) == {
        "steps": [["update", "$users", "u1", {"type": "parent"}]]
    }


@pytest.mark.asyncio
async def test_get_family_member_reads_pin_hash():
    client, recorder = make_client(
        {
            ("POST", "/admin/query"): httpx.Response(
                200,
                json={"familyMembers": [{"id": "m1", "name": "Sam", "role": "parent", "pinHash": "abc"}]},
            )
        }
    )

    member = await client.get_family_member("m1")

    assert member.is_parent
    assert member.pin_hash == "abc"
    assert json.loads(recorder.requests[0].content) == {
        "query": {"familyMembers": {"$": {"where": {"id": "m1"}}}}
    }


@pytest.mark.asyncio
async def test_get_family_member_missing():
    client, _ = make_client({("POST", "/admin/query"): httpx.Response(200, json={"familyMembers": []})})

    assert await client.get_family_member("ghost") is None


@pytest.mark.asyncio
async def test_http_errors_become_identity_provider_errors():
    client, _ = make_client({("POST", "/admin/refresh_tokens"): httpx.Response(500, json={"message": "boom"})})

    with pytest.raises(IdentityProviderError):
        await client.create_token("kid@family-organizer.local")


@pytest.mark.asyncio
async def test_transport_errors_become_identity_provider_errors():
    def fail(request):
        raise httpx.ConnectError("unreachable", request=request)

    client, _ = make_client({("POST", "/admin/refresh_tokens"): fail})

    with pytest.raises(IdentityProviderError):
        await client.create_token("kid@family-organizer.local")


@pytest.mark.asyncio
async def test_unconfigured_client_refuses_to_call():
    client = InstantAdminClient(IdentitySettings(), transport=httpx.MockTransport(lambda r: httpx.Response(200)))

    assert not client.is_configured
    with pytest.raises(IdentityProviderError):
        await client.create_token("kid@family-organizer.local")


@pytest.mark.asyncio
async def test_mint_principal_token_stamps_user_type():
    client, recorder = make_client(
        {
            ("POST", "/admin/refresh_tokens"): httpx.Response(200, json={"user": {"refresh_token": "tok"}}),
            ("GET", "/admin/users"): httpx.Response(200, json={"user": {"id": "u9", "type": "kid"}}),
            ("POST", "/admin/transact"): httpx.Response(200, json={}),
        }
    )

    token = await mint_principal_token(client, PrincipalType.parent)

    assert token == "tok"
    assert [r.url.path for r in recorder.requests] == [
        "/admin/refresh_tokens",
        "/admin/users",
        "/admin/transact",
    ]
    assert json.loads(recorder.requests[0].content) == {
        "email": "family-organizer-parent@family-organizer.local"
    }
    assert json.loads(recorder.requests[2].content)["steps"][0][3] == {"type": "parent"}


@pytest.mark.asyncio
async def test_mint_principal_token_requires_user_record():
    client, _ = make_client(
        {
            ("POST", "/admin/refresh_tokens"): httpx.Response(200, json={"user": {"refresh_token": "tok"}}),
            ("GET", "/admin/users"): httpx.Response(200, json={}),
        }
    )

    with pytest.raises(IdentityProviderError):
        await mint_principal_token(client, PrincipalType.kid)
