"""
Get Mobile Config Use Case

Tells an activated mobile app which identity system app to connect to.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from family_auth.app.services.identity_provider import IdentitySettings
from family_auth.libs.result import Error, Result, Return


class MobileConfigResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    instant_app_id: str = Field(..., alias="instantAppId")
    instant_api_uri: Optional[str] = Field(default=None, alias="instantApiURI")
    instant_websocket_uri: Optional[str] = Field(default=None, alias="instantWebsocketURI")


class GetMobileConfigUseCase:
    def __init__(self, settings: IdentitySettings):
        self.settings = settings

    def execute(self) -> Result[MobileConfigResponse]:
        if not self.settings.app_id:
            return Return.err(Error("MOBILE_CONFIG_UNAVAILABLE", "Instant app is not configured"))

        return Return.ok(
            MobileConfigResponse(
                instant_app_id=self.settings.app_id,
                instant_api_uri=self.settings.api_uri or None,
                instant_websocket_uri=self.settings.websocket_uri or None,
            )
        )
