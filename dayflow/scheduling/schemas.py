"""
DAYFLOW Planner API - Schedule Schemas

Value types for daily schedules. The same models validate the reasoning
service's proposal, the fallback output, stored documents and API responses.
"""

import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from dayflow.tasks.enums import EnergyLevel, TaskPriority
from dayflow.scheduling.timeutils import to_minutes, parse_window


class _Interval(BaseModel):
    """A same-day [start_time, end_time) interval."""

    start_time: str = Field(description="Start time, 24h HH:MM")
    end_time: str = Field(description="End time, 24h HH:MM, after start_time")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_clock_time(cls, value: str) -> str:
        to_minutes(value)
        return value.strip()

    @model_validator(mode="after")
    def validate_order(self):
        if to_minutes(self.start_time) >= to_minutes(self.end_time):
            raise ValueError(f"start_time {self.start_time} must be before end_time {self.end_time}")
        return self

    @property
    def start_minutes(self) -> int:
        return to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


class TimeBlock(_Interval):
    """A scheduled interval assigned to one task."""

    task_id: str = Field(description="ID of the task placed in this block")
    task_title: str = Field(default="", description="Task title, for display")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    energy_level: EnergyLevel = Field(default=EnergyLevel.MEDIUM, description="Energy the block demands")
    focus_type: str = Field(default="work", description="Kind of focus; adjacent blocks with different values count as a context switch")
    optimization_reason: str = Field(default="", description="Why the block was placed here")


class BufferBlock(_Interval):
    """A reserved, task-free interval."""

    purpose: str = Field(description="What the buffer is for, e.g. 'Lunch break'")


class EnergyOptimization(BaseModel):
    high_energy_tasks: List[str] = Field(default_factory=list, description="Task IDs placed in high-energy time")
    low_energy_tasks: List[str] = Field(default_factory=list, description="Task IDs placed in low-energy time")
    energy_breaks: List[str] = Field(default_factory=list, description="Suggested break start times (HH:MM)")


class WorkLifeBalance(BaseModel):
    work_time: float = Field(ge=0, description="Hours of scheduled work")
    personal_time: float = Field(ge=0, description="Hours left for personal time")
    break_time: float = Field(ge=0, description="Hours of breaks")
    balance_score: float = Field(ge=0, le=1, description="0-1 balance rating")


class ProposedSchedule(BaseModel):
    """The schedule shape a planner (reasoning service or fallback) produces."""

    time_blocks: List[TimeBlock] = Field(description="Task blocks in chronological order")
    buffer_blocks: List[BufferBlock] = Field(default_factory=list, description="Breaks and transition buffers")
    recommendations: List[str] = Field(default_factory=list, description="Short advice for the day")
    energy_optimization: EnergyOptimization = Field(default_factory=EnergyOptimization)
    work_life_balance: Optional[WorkLifeBalance] = None


class EnergyPattern(BaseModel):
    """Inferred daily energy windows, each "HH:MM-HH:MM"."""

    type: str = Field(description="'Analyzed' when derived from history, 'Standard' otherwise")
    peak: str
    low: str
    secondary_peak: str


class WorkHours(BaseModel):
    start: str = Field(default="09:00", description="HH:MM")
    end: str = Field(default="17:00", description="HH:MM")

    @field_validator("start", "end")
    @classmethod
    def validate_clock_time(cls, value: str) -> str:
        to_minutes(value)
        return value


def validate_windows(values: List[str]) -> List[str]:
    for window in values:
        parse_window(window)
    return values


class ScheduleConstraints(BaseModel):
    """Fixed boundary conditions for one day."""

    work_hours: WorkHours = Field(default_factory=WorkHours)
    breaks: Dict[str, str] = Field(default_factory=lambda: {"lunch": "12:00-13:00"})
    blocked_times: List[str] = Field(default_factory=list)
    preferred_work_times: List[str] = Field(default_factory=list)


class Schedule(ProposedSchedule):
    """A user's generated plan for one day."""

    user_id: str
    date: dt.date
    generated_at: dt.datetime
    is_ai_generated: bool = False
    energy_pattern: Optional[EnergyPattern] = None
    optimization_score: float = Field(default=0.0, ge=0, le=100)
    adaptability_score: float = Field(default=0.0, ge=0, le=1)
    last_modified: Optional[dt.datetime] = Field(default=None, description="Set when a block was moved or removed")

    @property
    def schedule_id(self) -> str:
        return schedule_key(self.user_id, self.date)


def schedule_key(user_id: str, day: dt.date) -> str:
    """Store key for a (user, date) schedule."""
    return f"{user_id}:{day.isoformat()}"


class ScheduleGenerateRequest(BaseModel):
    """Request model for generating a schedule."""

    date: Optional[dt.date] = Field(default=None, description="Day to plan (defaults to today)")


class BlockMoveRequest(_Interval):
    """New start and end for an existing block."""
