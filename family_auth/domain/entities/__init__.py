"""
Family Auth Domain Entities

All domain entities organized by model.
"""

# Export all enums
from .enums import (
    PrincipalType,
    FamilyMemberRole,
    DevicePlatform,
    DeviceAuthSource,
)

# Export all entities
from .device_session import DeviceSession
from .family_member import FamilyMember
from .rate_limit import RateLimitEntry

__all__ = [
    # Enums
    "PrincipalType",
    "FamilyMemberRole",
    "DevicePlatform",
    "DeviceAuthSource",
    # Entities
    "DeviceSession",
    "FamilyMember",
    "RateLimitEntry",
]
