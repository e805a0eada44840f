"""
DAYFLOW Planner API - Task Schemas

Pydantic models for task API requests and responses.
"""

from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, Field, model_validator

from dayflow.tasks.enums import (
    TaskType,
    TaskPriority,
    TaskStatus,
    EnergyLevel,
)


class TaskCreateRequest(BaseModel):
    """Request model for creating a task directly."""

    title: str = Field(min_length=1, max_length=500, description="Task title")
    description: str = Field(default="", max_length=5000, description="Task description")
    type: TaskType = Field(default=TaskType.ONE_TIME, description="Recurrence type")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    scheduled_date: Optional[date] = Field(default=None, description="Day the task is planned for (defaults to today)")
    estimated_duration: Optional[int] = Field(default=None, ge=1, le=1440, description="Estimated minutes")
    energy_level_required: Optional[EnergyLevel] = Field(default=None, description="Energy the task needs")
    difficulty_level: Optional[int] = Field(default=None, ge=1, le=10, description="Difficulty from 1 to 10")
    suggested_time_slot: Optional[str] = Field(default=None, max_length=100, description="Free-text time hint")
    context_requirements: Optional[str] = Field(default=None, max_length=1000)
    success_criteria: Optional[str] = Field(default=None, max_length=1000)
    related_goal_id: Optional[str] = Field(default=None, description="Goal this task contributes to")


class TaskStatusUpdateRequest(BaseModel):
    """Request model for an explicit status transition."""

    status: TaskStatus = Field(description="Target status")
    scheduled_date: Optional[date] = Field(default=None, description="New date, required when rescheduling")
    suggested_time_slot: Optional[str] = Field(default=None, max_length=100)

    @model_validator(mode="after")
    def reschedule_needs_date(self) -> "TaskStatusUpdateRequest":
        if self.status == TaskStatus.RESCHEDULED and self.scheduled_date is None:
            raise ValueError("scheduled_date is required when rescheduling")
        return self


class TaskRescheduleRequest(BaseModel):
    """Request model for moving a task to another day."""

    scheduled_date: date = Field(description="New scheduled date")
    suggested_time_slot: Optional[str] = Field(default=None, max_length=100, description="New time slot hint")


class TaskResponse(BaseModel):
    """Response model for a single task."""

    id: str = Field(description="Task ID")
    owner_id: str = Field(description="Owner user ID")
    title: str
    description: str
    type: TaskType
    priority: TaskPriority
    status: TaskStatus
    scheduled_date: date
    estimated_duration: Optional[int] = None
    energy_level_required: Optional[EnergyLevel] = None
    difficulty_level: Optional[int] = None
    suggested_time_slot: Optional[str] = None
    context_requirements: Optional[str] = None
    success_criteria: Optional[str] = None
    related_goal_id: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """Response model for a list of tasks."""

    tasks: List[TaskResponse] = Field(description="List of tasks")
    total: int = Field(description="Total number of tasks in the list")


class TaskCompletionResponse(BaseModel):
    """Result of completing a task, including the XP side effect."""

    task: TaskResponse
    xp_awarded: int = Field(description="XP granted for this completion")
    total_xp: Optional[int] = Field(default=None, description="Running XP total, absent if the award could not be saved")
    level: Optional[int] = Field(default=None, description="Level derived from the running total")
    celebration: str = Field(description="Short message for the client to display")
