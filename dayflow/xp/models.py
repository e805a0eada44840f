"""
DAYFLOW Planner API - XP Models

Running experience-point total per user.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


XP_PER_LEVEL = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserXP:
    """XP total entity, one document per user."""

    user_id: str
    total_xp: int = 0
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def level(self) -> int:
        return self.total_xp // XP_PER_LEVEL + 1

    def to_dict(self) -> dict:
        return {
            "_id": self.user_id,
            "total_xp": self.total_xp,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserXP":
        return cls(
            user_id=data["_id"],
            total_xp=data.get("total_xp", 0),
            updated_at=data.get("updated_at") or _utcnow(),
        )
