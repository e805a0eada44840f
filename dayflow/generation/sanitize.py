"""
DAYFLOW Planner API - Generated Task Sanitization

Coerces reasoning-service task proposals into valid Task records. Nothing
here raises on bad input: out-of-range numbers are clamped, unknown enum
values fall back to defaults and missing text gets placeholders.
"""

import math
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from dayflow.tasks.enums import EnergyLevel, TaskPriority, TaskType
from dayflow.tasks.models import Task


E = TypeVar("E", bound=Enum)

MIN_DIFFICULTY, MAX_DIFFICULTY = 1, 10
MIN_DURATION, MAX_DURATION = 5, 480
DEFAULT_DURATION = 30
MAX_TITLE_LENGTH = 500
MAX_TEXT_LENGTH = 5000


def coerce_enum(value: Any, enum_cls: Type[E], default: E) -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            return default
    return default


def coerce_int(value: Any, minimum: int, maximum: int, default: int) -> int:
    """Round half up to an integer and clamp; unparseable input gives default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        return default
    return min(max(int(math.floor(value + 0.5)), minimum), maximum)


def coerce_text(value: Any, default: str, max_length: int = MAX_TEXT_LENGTH) -> str:
    if not isinstance(value, str) or not value.strip():
        return default
    return value.strip()[:max_length]


def sanitize_goal_task(
    raw: Any,
    owner_id: str,
    today: date,
    related_goal_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Goal-path proposal -> Task. Unknown types become one_time."""
    raw = raw if isinstance(raw, dict) else {}
    return Task.create(
        owner_id=owner_id,
        title=coerce_text(raw.get("title"), "Untitled Task", MAX_TITLE_LENGTH),
        description=coerce_text(raw.get("description"), ""),
        type=coerce_enum(raw.get("type"), TaskType, TaskType.ONE_TIME),
        priority=coerce_enum(raw.get("priority"), TaskPriority, TaskPriority.MEDIUM),
        estimated_duration=coerce_int(raw.get("estimated_duration"), MIN_DURATION, MAX_DURATION, DEFAULT_DURATION),
        suggested_time_slot=coerce_text(raw.get("suggested_time_slot"), "morning", 100),
        energy_level_required=coerce_enum(raw.get("energy_level_required"), EnergyLevel, EnergyLevel.MEDIUM),
        difficulty_level=coerce_int(raw.get("difficulty_level"), MIN_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY),
        context_requirements=coerce_text(raw.get("context_requirements"), ""),
        success_criteria=coerce_text(raw.get("success_criteria"), "Complete the task"),
        scheduled_date=today,
        related_goal_id=related_goal_id,
        now=now,
    )


def infer_task_type(text: str) -> TaskType:
    text = text.lower()
    if any(word in text for word in ("daily", "every day", "habit")):
        return TaskType.DAILY_HABIT
    if any(word in text for word in ("setup", "install", "configure", "create")):
        return TaskType.ONE_TIME
    return TaskType.WEEKLY_TASK


def infer_time_slot(text: str, category: str) -> str:
    text = text.lower()
    if any(word in text for word in ("morning", "wake", "breakfast")):
        return "morning"
    if any(word in text for word in ("evening", "night", "dinner")):
        return "evening"
    if category.lower() in ("work", "productivity"):
        return "morning"
    return "afternoon"


def infer_energy_level(priority: TaskPriority) -> EnergyLevel:
    return {
        TaskPriority.HIGH: EnergyLevel.HIGH,
        TaskPriority.MEDIUM: EnergyLevel.MEDIUM,
        TaskPriority.LOW: EnergyLevel.LOW,
    }[priority]


def infer_difficulty(duration: int) -> int:
    if duration <= 15:
        return 1
    if duration <= 30:
        return 2
    if duration <= 60:
        return 3
    if duration <= 90:
        return 4
    return 5


def onboarding_scheduled_date(task_type: TaskType, index: int, total: int, today: date, horizon_days: int) -> date:
    """
    Daily habits start today, one-time tasks alternate between today and
    tomorrow, weekly tasks are spread evenly across the horizon.
    """
    if task_type == TaskType.DAILY_HABIT:
        return today
    if task_type == TaskType.ONE_TIME:
        return today + timedelta(days=index % 2)
    return today + timedelta(days=index * horizon_days // max(total, 1))


def sanitize_onboarding_task(
    raw: Any,
    owner_id: str,
    index: int,
    total: int,
    today: date,
    horizon_days: int,
    now: Optional[datetime] = None,
) -> Task:
    """
    Onboarding-path proposal -> Task.

    Missing fields are inferred from the proposal itself; present but
    invalid ones fall back to defaults (weekly_task for the type).
    """
    raw = raw if isinstance(raw, dict) else {}
    title = coerce_text(raw.get("title"), "Untitled Task", MAX_TITLE_LENGTH)
    description = coerce_text(raw.get("description"), "")
    category = coerce_text(raw.get("category"), "personal", 100)
    text = f"{title} {description}"

    raw_type = raw.get("type")
    task_type = infer_task_type(text) if raw_type is None else coerce_enum(raw_type, TaskType, TaskType.WEEKLY_TASK)
    priority = coerce_enum(raw.get("priority"), TaskPriority, TaskPriority.MEDIUM)
    duration = coerce_int(raw.get("estimated_duration"), MIN_DURATION, MAX_DURATION, DEFAULT_DURATION)

    raw_energy = raw.get("energy_level_required")
    energy = (
        infer_energy_level(priority)
        if raw_energy is None
        else coerce_enum(raw_energy, EnergyLevel, EnergyLevel.MEDIUM)
    )
    raw_difficulty = raw.get("difficulty_level")
    difficulty = (
        infer_difficulty(duration)
        if raw_difficulty is None
        else coerce_int(raw_difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY, MIN_DIFFICULTY)
    )

    return Task.create(
        owner_id=owner_id,
        title=title,
        description=description,
        type=task_type,
        priority=priority,
        estimated_duration=duration,
        suggested_time_slot=infer_time_slot(text, category),
        energy_level_required=energy,
        difficulty_level=difficulty,
        context_requirements=f"Generated from onboarding - {category}",
        success_criteria=coerce_text(raw.get("success_criteria"), f"Complete: {title}"),
        scheduled_date=onboarding_scheduled_date(task_type, index, total, today, horizon_days),
        now=now,
    )
