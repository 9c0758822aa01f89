"""
Principal Use Cases

Kid and parent principal token minting.
"""

from .mint_kid_token_use_case import MintKidTokenUseCase
from .mint_parent_token_use_case import MintParentTokenUseCase
from .dtos import ParentElevationCommand, PrincipalTokenResponse

__all__ = [
    # Use Cases
    "MintKidTokenUseCase",
    "MintParentTokenUseCase",
    # DTOs
    "ParentElevationCommand",
    "PrincipalTokenResponse",
]
