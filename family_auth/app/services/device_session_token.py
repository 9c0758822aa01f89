"""
Mobile device session token codec.

Tokens are compact HS256 JWTs (python-jose) signed with the server-held
device session secret. Expiry is checked against an injectable clock rather
than by jose itself so that tests and the session manager agree on "now".
"""

from datetime import UTC, datetime
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from family_auth.domain.entities import DevicePlatform

TOKEN_VERSION = "v1"
ALGORITHM = "HS256"


class DeviceSessionClaims(BaseModel):
    """Claims embedded in a mobile device session token"""

    model_config = ConfigDict(populate_by_name=True)

    ver: str = TOKEN_VERSION
    sid: str = Field(..., min_length=1)
    platform: DevicePlatform
    device_name: Optional[str] = Field(default=None, alias="deviceName")
    app_version: Optional[str] = Field(default=None, alias="appVersion")
    iat: int
    exp: int

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, UTC)


class TokenDecodeError(Exception):
    """Raised when a token cannot be decoded; reason is for logs only"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def encode_device_session_token(claims: DeviceSessionClaims, secret: str) -> str:
    """
    Sign device session claims.

    Args:
        claims: Session claims
        secret: HMAC secret

    Returns:
        Compact JWT string
    """
    payload = claims.model_dump(mode="json", by_alias=True, exclude_none=True)
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_device_session_token(token: str, secret: str) -> DeviceSessionClaims:
    """
    Verify the signature and structure of a device session token.

    Expiry is NOT checked here.

    Raises:
        TokenDecodeError: malformed, invalid_signature, unsupported_version
            or invalid_payload
    """
    if token.count(".") != 2:
        raise TokenDecodeError("malformed")

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"verify_exp": False, "verify_iat": False, "verify_nbf": False},
        )
    except JWTError:
        raise TokenDecodeError("invalid_signature")

    if payload.get("ver") != TOKEN_VERSION:
        raise TokenDecodeError("unsupported_version")

    try:
        return DeviceSessionClaims.model_validate(payload)
    except ValidationError:
        raise TokenDecodeError("invalid_payload")
