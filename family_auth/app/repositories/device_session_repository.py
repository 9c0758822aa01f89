from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from family_auth.domain.entities import DeviceSession


class IDeviceSessionRepository(ABC):
    """Device session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: str) -> Optional[DeviceSession]:
        """Get device session by ID"""
        pass

    @abstractmethod
    async def create(self, device_session: DeviceSession) -> DeviceSession:
        """Create a new device session"""
        pass

    @abstractmethod
    async def update(self, device_session: DeviceSession) -> DeviceSession:
        """Update existing device session"""
        pass

    @abstractmethod
    async def revoke_by_id(self, session_id: str, revoked_at: datetime) -> bool:
        """
        Revoke a device session. Inserts a revoked placeholder row when the
        session is unknown.

        Returns:
            True only for the caller that moved the session to revoked;
            False if it was already revoked (or another caller got there first)
        """
        pass
