"""
DAYFLOW Planner API - Preference Models
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UserPreferences:
    """
    Scheduling preferences for one user.

    Every field is optional; unset fields fall back to the planner defaults.
    Windows are "HH:MM-HH:MM" strings.
    """

    user_id: str
    work_start: Optional[str] = None
    work_end: Optional[str] = None
    break_preferences: Dict[str, str] = field(default_factory=dict)
    blocked_times: List[str] = field(default_factory=list)
    preferred_work_times: List[str] = field(default_factory=list)
    updated_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict:
        return {
            "_id": self.user_id,
            "work_hours": {"start": self.work_start, "end": self.work_end},
            "break_preferences": dict(self.break_preferences),
            "blocked_times": list(self.blocked_times),
            "preferred_work_times": list(self.preferred_work_times),
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserPreferences":
        work_hours = data.get("work_hours") or {}
        return cls(
            user_id=data["_id"],
            work_start=work_hours.get("start"),
            work_end=work_hours.get("end"),
            break_preferences=data.get("break_preferences") or {},
            blocked_times=data.get("blocked_times") or [],
            preferred_work_times=data.get("preferred_work_times") or [],
            updated_at=data.get("updated_at") or _utcnow(),
        )
