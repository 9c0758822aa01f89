from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from family_auth.app.repositories.device_session_repository import IDeviceSessionRepository
from family_auth.domain.entities import DeviceSession


class DeviceSessionRepository(IDeviceSessionRepository):
    """Device session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: str) -> Optional[DeviceSession]:
        """Get device session by ID"""
        stmt = select(DeviceSession).where(DeviceSession.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, device_session: DeviceSession) -> DeviceSession:
        """Create a new device session"""
        self.session.add(device_session)
        await self.session.flush()
        await self.session.refresh(device_session)
        return device_session

    async def update(self, device_session: DeviceSession) -> DeviceSession:
        """Update existing device session"""
        self.session.add(device_session)
        await self.session.flush()
        await self.session.refresh(device_session)
        return device_session

    async def revoke_by_id(self, session_id: str, revoked_at: datetime) -> bool:
        """
        Revoke a device session, recording unknown ids as revoked.

        Only one caller can win for a given id: the conditional update (or the
        placeholder insert for unknown ids) succeeds once.
        """
        stmt = (
            update(DeviceSession)
            .where(DeviceSession.id == session_id, DeviceSession.revoked_at == None)  # noqa: E711
            .values(revoked_at=revoked_at)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount > 0:
            return True

        existing = await self.get_by_id(session_id)
        if existing is None:
            # Unknown session: keep a revoked row so copies of the token stay dead
            placeholder = DeviceSession(
                id=session_id,
                platform="unknown",
                created_at=revoked_at,
                last_seen_at=revoked_at,
                expires_at=revoked_at,
                revoked_at=revoked_at,
            )
            try:
                await self.create(placeholder)
            except IntegrityError:
                await self.session.rollback()
                return False
            return True
        return False
