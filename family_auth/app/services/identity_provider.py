import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from family_auth.domain.entities import FamilyMember, PrincipalType

PRINCIPAL_EMAIL_DOMAIN = "family-organizer.local"


class IdentityProviderError(Exception):
    """An external identity system call failed"""


@dataclass
class IdentityUser:
    id: str
    email: Optional[str] = None
    type: Optional[str] = None


def sanitize_email_local_part(value: str, fallback: str) -> str:
    """
    Turn an arbitrary principal id into a safe email local part.

    Lowercases, replaces runs of unsupported characters with "-" and trims
    leading/trailing separators. Falls back when nothing usable remains.
    """
    cleaned = re.sub(r"[^a-z0-9._-]+", "-", value.lower())
    cleaned = re.sub(r"^[._-]+|[._-]+$", "", cleaned)
    return cleaned or fallback


@dataclass
class IdentitySettings:
    """Configuration for the external identity system."""

    app_id: str = ""
    admin_token: str = ""
    api_uri: str = "https://api.instantdb.com"
    websocket_uri: str = ""
    kid_auth_id: str = "family-organizer-kid"
    parent_auth_id: str = "family-organizer-parent"
    kid_auth_email: str = ""
    parent_auth_email: str = ""

    @classmethod
    def from_config(cls, config) -> "IdentitySettings":
        return cls(
            app_id=config.INSTANT_APP_ID or "",
            admin_token=config.INSTANT_APP_ADMIN_TOKEN or "",
            api_uri=config.INSTANT_API_URI or "https://api.instantdb.com",
            websocket_uri=config.INSTANT_WEBSOCKET_URI or "",
            kid_auth_id=config.INSTANT_KID_AUTH_ID or "family-organizer-kid",
            parent_auth_id=config.INSTANT_PARENT_AUTH_ID or "family-organizer-parent",
            kid_auth_email=config.INSTANT_KID_AUTH_EMAIL or "",
            parent_auth_email=config.INSTANT_PARENT_AUTH_EMAIL or "",
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.app_id and self.admin_token)

    def principal_email(self, principal_type: PrincipalType) -> str:
        """Email of the shared identity user backing a principal"""
        if principal_type == PrincipalType.parent:
            explicit, auth_id, fallback = (
                self.parent_auth_email,
                self.parent_auth_id,
                "family-organizer-parent",
            )
        else:
            explicit, auth_id, fallback = (
                self.kid_auth_email,
                self.kid_auth_id,
                "family-organizer-kid",
            )

        if explicit:
            return explicit
        return f"{sanitize_email_local_part(auth_id, fallback)}@{PRINCIPAL_EMAIL_DOMAIN}"


class IIdentityProvider(ABC):
    """
    External identity system interface - application layer.

    Implementations raise IdentityProviderError for any upstream failure.
    """

    settings: IdentitySettings

    @property
    def is_configured(self) -> bool:
        return self.settings.is_configured

    @abstractmethod
    async def create_token(self, email: str) -> str:
        """Mint an auth token for the user with this email (creating it if needed)"""
        pass

    @abstractmethod
    async def get_user(self, email: str) -> Optional[IdentityUser]:
        """Look up an identity user by email"""
        pass

    @abstractmethod
    async def update_user_type(self, user_id: str, user_type: str) -> None:
        """Stamp the type attribute on an identity user"""
        pass

    @abstractmethod
    async def get_family_member(self, family_member_id: str) -> Optional[FamilyMember]:
        """Look up a family member record by id"""
        pass
