"""
Mint Kid Token Use Case

Issues the default (kid) principal token to an authorized device.
"""

import logging

from family_auth.app.services.identity_provider import IdentityProviderError, IIdentityProvider
from family_auth.app.services.principal_tokens import mint_principal_token
from family_auth.domain.entities import PrincipalType
from family_auth.libs.result import Error, Result, Return
from .dtos import PrincipalTokenResponse

logger = logging.getLogger(__name__)

IDENTITY_NOT_CONFIGURED = Error(
    "IDENTITY_NOT_CONFIGURED", "Instant family auth is not configured"
)


class MintKidTokenUseCase:
    """
    Use case for minting a kid principal token.

    Business Rules:
    - Device authorization is checked by the caller
    - No further credential is required
    - Upstream failures are logged and reported generically
    """

    def __init__(self, identity: IIdentityProvider):
        self.identity = identity

    async def execute(self) -> Result[PrincipalTokenResponse]:
        if not self.identity.is_configured:
            return Return.err(IDENTITY_NOT_CONFIGURED)

        try:
            token = await mint_principal_token(self.identity, PrincipalType.kid)
        except IdentityProviderError:
            logger.exception("Failed to mint kid principal token")
            return Return.err(Error("TOKEN_MINT_FAILED", "Failed to create Instant auth token"))

        return Return.ok(PrincipalTokenResponse(token=token, principal_type=PrincipalType.kid))
