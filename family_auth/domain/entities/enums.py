"""
Family Auth Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class PrincipalType(str, Enum):
    """Identity presented to the external sync database"""

    kid = "kid"
    parent = "parent"


class FamilyMemberRole(str, Enum):
    """Role stored on a family member record"""

    parent = "parent"
    child = "child"


class DevicePlatform(str, Enum):
    """Platforms a mobile device session can be issued for"""

    ios = "ios"
    android = "android"


class DeviceAuthSource(str, Enum):
    """How a request proved it comes from an activated device"""

    cookie = "cookie"
    bearer = "bearer"
