"""
Principal token minting.

Kid and parent principals are two shared identity users in the external
identity system. Minting a token for one also stamps its ``type`` attribute
so that permission rules keyed on it stay correct even when the user record
already existed with another type.
"""

import logging

from family_auth.app.services.identity_provider import IdentityProviderError, IIdentityProvider
from family_auth.domain.entities import PrincipalType

logger = logging.getLogger(__name__)


async def mint_principal_token(
    identity: IIdentityProvider, principal_type: PrincipalType
) -> str:
    """
    Mint an external identity token for a principal.

    Args:
        identity: External identity system
        principal_type: kid or parent

    Returns:
        Opaque token string, handed to the client as-is

    Raises:
        IdentityProviderError: any upstream failure
    """
    email = identity.settings.principal_email(principal_type)

    token = await identity.create_token(email)

    user = await identity.get_user(email)
    if user is None:
        raise IdentityProviderError(f"Identity user missing after minting {principal_type.value} token")

    # Written on every mint, even when the type already matches
    await identity.update_user_type(user.id, principal_type.value)

    logger.info(f"Minted {principal_type.value} principal token")
    return token
