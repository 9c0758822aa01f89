"""
Family Member Entity

Read-only view of a family member record owned by the external sync database.
"""

from typing import Any, Dict, Optional

from sqlmodel import SQLModel

from .enums import FamilyMemberRole


class FamilyMember(SQLModel):
    """
    Family member as seen by the parent elevation flow.

    Only the fields needed for elevation are kept; everything else on the
    record (allowance, photos, chores) stays in the sync database.
    """

    id: str
    name: Optional[str] = None
    role: Optional[str] = None
    pin_hash: Optional[str] = None

    @property
    def is_parent(self) -> bool:
        return self.role == FamilyMemberRole.parent.value

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "FamilyMember":
        pin_hash = record.get("pinHash")
        return cls(
            id=str(record["id"]),
            name=record.get("name"),
            role=record.get("role"),
            pin_hash=pin_hash if isinstance(pin_hash, str) and pin_hash else None,
        )
