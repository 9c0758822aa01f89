"""
Device Session Entity

Server-side record of an activated mobile device.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Column, DateTime, Field, Index, SQLModel


class DeviceSession(SQLModel, table=True):
    """
    DeviceSession entity - one row per issued mobile device session id.

    Business Rules:
    - The bearer token is self-contained (signed claims); this row only
      tracks metadata and revocation
    - A session id with revoked_at set never authenticates again
    - Refresh revokes the old session and creates a new one
    - A token whose session row is missing still verifies (signature + expiry)
    """

    __tablename__ = "device_sessions"

    id: str = Field(primary_key=True, max_length=36)

    platform: str = Field(max_length=16)
    device_name: Optional[str] = Field(default=None, max_length=128)
    app_version: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    last_seen_at: datetime = Field(
        default_factory=lambda: datetime.utcnow(), sa_column=Column(DateTime)
    )
    expires_at: datetime = Field(sa_column=Column(DateTime))
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_device_session_expires_at", "expires_at"),
        Index("idx_device_session_revoked_at", "revoked_at"),
    )

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None
