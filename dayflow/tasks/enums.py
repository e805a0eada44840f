"""
DAYFLOW Planner API - Task Enums

Enums for task-related fields. Values are persisted as-is in the record store
and appear verbatim in reasoning-service payloads.
"""

from enum import Enum


class TaskType(str, Enum):
    """How a task recurs."""
    DAILY_HABIT = "daily_habit"
    WEEKLY_TASK = "weekly_task"
    ONE_TIME = "one_time"


class TaskPriority(str, Enum):
    """Task priority levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TaskStatus(str, Enum):
    """
    Task lifecycle status.

    pending -> in_progress -> completed, with rescheduled reachable from
    pending or in_progress. A rescheduled task behaves like a pending one.
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    RESCHEDULED = "rescheduled"


class EnergyLevel(str, Enum):
    """Energy a task requires (also used on time blocks)."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StatsTimeframe(str, Enum):
    """Lookback windows for task statistics."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
