"""
Unit tests for principal email derivation
"""

from family_auth.app.services.identity_provider import IdentitySettings, sanitize_email_local_part
from family_auth.domain.entities import PrincipalType


def test_sanitize_email_local_part():
    assert sanitize_email_local_part("Family Organizer Kid!", "fallback") == "family-organizer-kid"
    assert sanitize_email_local_part("..__--", "fallback") == "fallback"
    assert sanitize_email_local_part("kid.one", "fallback") == "kid.one"


def test_principal_email_derived_from_auth_id():
    settings = IdentitySettings(kid_auth_id="Kids Tablet", parent_auth_id="parents")

    assert settings.principal_email(PrincipalType.kid) == "kids-tablet@family-organizer.local"
    assert settings.principal_email(PrincipalType.parent) == "parents@family-organizer.local"


def test_principal_email_prefers_explicit_email():
    settings = IdentitySettings(parent_auth_email="parent@example.com")

    assert settings.principal_email(PrincipalType.parent) == "parent@example.com"
    assert settings.principal_email(PrincipalType.kid) == "family-organizer-kid@family-organizer.local"


def test_is_configured_needs_app_id_and_admin_token():
    assert not IdentitySettings(app_id="app").is_configured
    assert not IdentitySettings(admin_token="tok").is_configured
    assert IdentitySettings(app_id="app", admin_token="tok").is_configured
