"""
DAYFLOW Planner API - Insights Schemas

Pydantic models for task statistics responses.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from dayflow.tasks.enums import StatsTimeframe


class TaskStats(BaseModel):
    """Counts of tasks created since the start of the timeframe, by status."""

    timeframe: StatsTimeframe
    period_start: datetime = Field(description="Start of the counted period (UTC midnight)")
    generated_at: datetime

    total: int = Field(description="Tasks created in the period")
    completed: int
    pending: int
    in_progress: int
    rescheduled: int
    completion_rate: float = Field(description="Completed share of total, as a percentage (0-100)")
