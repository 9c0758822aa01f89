"""
Mobile Use Cases
"""

from .get_mobile_config_use_case import GetMobileConfigUseCase, MobileConfigResponse

__all__ = [
    "GetMobileConfigUseCase",
    "MobileConfigResponse",
]
