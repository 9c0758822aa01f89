"""
Principal Use Case DTOs (Data Transfer Objects)
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from family_auth.domain.entities import PrincipalType


class ParentElevationCommand(BaseModel):
    """Validated intent to elevate to the parent principal"""

    family_member_id: Optional[str] = None
    pin: Optional[str] = None
    ip: Optional[str] = None


class PrincipalTokenResponse(BaseModel):
    """Response for kid and parent token minting"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    token: str
    principal_type: PrincipalType
