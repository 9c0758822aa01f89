"""
Mint Parent Token Use Case

Elevates an authorized device to the parent principal after verifying the
selected parent's PIN.
"""

import logging

from family_auth.app.services.credentials import pins_match
from family_auth.app.services.identity_provider import IdentityProviderError, IIdentityProvider
from family_auth.app.services.principal_tokens import mint_principal_token
from family_auth.app.services.rate_limiter import ParentElevationRateLimiter
from family_auth.domain.entities import PrincipalType
from family_auth.libs.result import Error, Result, Return
from .dtos import ParentElevationCommand, PrincipalTokenResponse
from .mint_kid_token_use_case import IDENTITY_NOT_CONFIGURED

logger = logging.getLogger(__name__)


class MintParentTokenUseCase:
    """
    Use case for parent elevation.

    Business Rules (each step short-circuits):
    0. familyMemberId is required - FAMILY_MEMBER_ID_REQUIRED (not recorded)
    1. Rate limit check for (ip, family member) - RATE_LIMITED
    2. Family member must exist - FAMILY_MEMBER_NOT_FOUND
    3. Family member must be a parent - NOT_A_PARENT
    4. If the member has a PIN hash, a PIN is required (PIN_REQUIRED) and
       must match (INCORRECT_PIN); members without a PIN hash skip this step
    5. Success clears the rate limit entry and mints a parent token

    Steps 2-4 record a failure under the same limiter key, whichever fails.
    """

    def __init__(self, identity: IIdentityProvider, rate_limiter: ParentElevationRateLimiter):
        self.identity = identity
        self.rate_limiter = rate_limiter

    async def _reject(self, key: str, error: Error) -> Result[PrincipalTokenResponse]:
        await self.rate_limiter.record_failure(key)
        logger.warning(f"Parent elevation rejected: {error.code}")
        return Return.err(error)

    async def execute(self, command: ParentElevationCommand) -> Result[PrincipalTokenResponse]:
        """
        Execute parent elevation.

        Args:
            command: Target family member, optional PIN and client address

        Returns:
            Result with PrincipalTokenResponse, or Error
        """
        if not self.identity.is_configured:
            return Return.err(IDENTITY_NOT_CONFIGURED)

        if not command.family_member_id:
            return Return.err(
                Error("FAMILY_MEMBER_ID_REQUIRED", "familyMemberId is required")
            )

        key = ParentElevationRateLimiter.key(command.family_member_id, command.ip)

        # 1. Rate limit
        decision = await self.rate_limiter.check(key)
        if not decision.allowed:
            return Return.err(
                Error(
                    "RATE_LIMITED",
                    "Too many parent elevation attempts. Try again later.",
                    details={"retry_after_seconds": decision.retry_after_seconds},
                )
            )

        # 2. Family member lookup
        try:
            member = await self.identity.get_family_member(command.family_member_id)
        except IdentityProviderError:
            logger.exception("Failed to look up family member for parent elevation")
            return Return.err(Error("IDENTITY_LOOKUP_FAILED", "Failed to verify family member"))

        if member is None:
            return await self._reject(key, Error("FAMILY_MEMBER_NOT_FOUND", "Family member not found"))

        # 3. Role
        if not member.is_parent:
            return await self._reject(key, Error("NOT_A_PARENT", "Selected member is not a parent"))

        # 4. PIN
        if member.pin_hash:
            if not command.pin:
                return await self._reject(key, Error("PIN_REQUIRED", "PIN is required"))
            if not pins_match(command.pin, member.pin_hash):
                return await self._reject(key, Error("INCORRECT_PIN", "Incorrect PIN"))

        # 5. Success
        await self.rate_limiter.clear(key)

        try:
            token = await mint_principal_token(self.identity, PrincipalType.parent)
        except IdentityProviderError:
            logger.exception("Failed to mint parent principal token")
            return Return.err(Error("TOKEN_MINT_FAILED", "Failed to create parent auth token"))

        return Return.ok(PrincipalTokenResponse(token=token, principal_type=PrincipalType.parent))
