"""
Device Use Case DTOs (Data Transfer Objects)

All Command and Response classes for device activation and mobile device
sessions. Responses serialize with camelCase keys for the web and mobile
clients.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Command DTOs
# ============================================================================


class MobileDeviceActivateCommand(BaseModel):
    """Validated intent to activate a mobile device"""

    access_key: Optional[str] = None
    platform: Optional[str] = None
    device_name: Optional[str] = None
    app_version: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class ActivateDeviceResponse(CamelModel):
    """Response for browser device activation"""

    ok: bool = True


class MobileDeviceSessionResponse(CamelModel):
    """Response for mobile device activation and session refresh"""

    device_session_token: str
    expires_at: str
    session_id: str


class RevokeDeviceSessionResponse(CamelModel):
    """Response for mobile device session revocation"""

    ok: bool = True
