"""
DAYFLOW Planner API - Task Models

Internal task model for database operations.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional
import uuid

from dayflow.tasks.enums import (
    TaskType,
    TaskPriority,
    TaskStatus,
    EnergyLevel,
)


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def _parse_date(value) -> Optional[date]:
    """Stored dates are ISO strings (BSON has no plain date type)."""
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(value)


@dataclass
class Task:
    """Task entity for database storage."""

    id: str
    owner_id: str
    title: str
    type: TaskType
    priority: TaskPriority
    status: TaskStatus
    scheduled_date: date
    description: str = ""
    estimated_duration: Optional[int] = None
    energy_level_required: Optional[EnergyLevel] = None
    difficulty_level: Optional[int] = None
    suggested_time_slot: Optional[str] = None
    context_requirements: Optional[str] = None
    success_criteria: Optional[str] = None
    related_goal_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        owner_id: str,
        title: str,
        scheduled_date: date,
        type: TaskType = TaskType.ONE_TIME,
        priority: TaskPriority = TaskPriority.MEDIUM,
        status: TaskStatus = TaskStatus.PENDING,
        description: str = "",
        estimated_duration: Optional[int] = None,
        energy_level_required: Optional[EnergyLevel] = None,
        difficulty_level: Optional[int] = None,
        suggested_time_slot: Optional[str] = None,
        context_requirements: Optional[str] = None,
        success_criteria: Optional[str] = None,
        related_goal_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "Task":
        """Create a new task with generated ID."""
        now = now or _utcnow()
        return cls(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            title=title,
            type=type,
            priority=priority,
            status=status,
            scheduled_date=scheduled_date,
            description=description,
            estimated_duration=estimated_duration,
            energy_level_required=energy_level_required,
            difficulty_level=difficulty_level,
            suggested_time_slot=suggested_time_slot,
            context_requirements=context_requirements,
            success_criteria=success_criteria,
            related_goal_id=related_goal_id,
            completed_at=now if status == TaskStatus.COMPLETED else None,
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict:
        """Convert task to dictionary for MongoDB storage."""
        return {
            "_id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "priority": self.priority.value,
            "status": self.status.value,
            "scheduled_date": self.scheduled_date.isoformat(),
            "estimated_duration": self.estimated_duration,
            "energy_level_required": self.energy_level_required.value if self.energy_level_required else None,
            "difficulty_level": self.difficulty_level,
            "suggested_time_slot": self.suggested_time_slot,
            "context_requirements": self.context_requirements,
            "success_criteria": self.success_criteria,
            "related_goal_id": self.related_goal_id,
            "completed_at": self.completed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create task from MongoDB document."""
        return cls(
            id=data["_id"],
            owner_id=data["owner_id"],
            title=data["title"],
            description=data.get("description") or "",
            type=TaskType(data["type"]),
            priority=TaskPriority(data["priority"]),
            status=TaskStatus(data["status"]),
            scheduled_date=_parse_date(data["scheduled_date"]),
            estimated_duration=data.get("estimated_duration"),
            energy_level_required=(
                EnergyLevel(data["energy_level_required"]) if data.get("energy_level_required") else None
            ),
            difficulty_level=data.get("difficulty_level"),
            suggested_time_slot=data.get("suggested_time_slot"),
            context_requirements=data.get("context_requirements"),
            success_criteria=data.get("success_criteria"),
            related_goal_id=data.get("related_goal_id"),
            completed_at=data.get("completed_at"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
        )
