"""
DAYFLOW Planner API - Task Generation Schemas

Request/response models for generating tasks, plus the draft models whose
JSON schema is handed to the reasoning service. Drafts only describe the
expected shape: proposals are never trusted and go through sanitize.py.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from dayflow.tasks.enums import EnergyLevel, TaskPriority, TaskType
from dayflow.tasks.schemas import TaskResponse


class Timeframe(str, Enum):
    """Planning horizon for onboarding-generated tasks."""
    TWO_DAYS = "2_days"
    ONE_WEEK = "1_week"
    TWO_WEEKS = "2_weeks"


TIMEFRAME_DAYS = {
    Timeframe.TWO_DAYS: 2,
    Timeframe.ONE_WEEK: 7,
    Timeframe.TWO_WEEKS: 14,
}


class GoalBreakdown(BaseModel):
    """A goal already broken down into weekly tasks, habits and milestones."""

    goal_id: Optional[str] = Field(default=None, description="Goal the generated tasks relate to")
    title: str = Field(min_length=1, max_length=500)
    description: str = Field(default="", max_length=5000)
    category: str = Field(default="", max_length=100)
    weekly_tasks: List[str] = Field(default_factory=list)
    daily_habits: List[str] = Field(default_factory=list)
    milestones: List[str] = Field(default_factory=list)


class GoalTaskRequest(BaseModel):
    breakdown: GoalBreakdown
    create_habits: bool = Field(default=False, description="Also create recurring daily-habit tasks from the breakdown")


class GoalTaskResponse(BaseModel):
    tasks: List[TaskResponse]
    total: int


class BasicProfile(BaseModel):
    chronotype: Optional[str] = Field(default=None, description="e.g. 'early_bird', 'night_owl'")
    work_style: Optional[str] = None
    stress_response: Optional[str] = None


class AIInsights(BaseModel):
    """Insights extracted from the onboarding conversation."""

    energy_peaks: List[str] = Field(default_factory=list)
    motivation_factors: List[str] = Field(default_factory=list)
    stress_factors: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    personality_traits: List[str] = Field(default_factory=list)


class OnboardingTaskRequest(BaseModel):
    conversation_text: str = Field(default="", max_length=20000)
    basic_profile: BasicProfile = Field(default_factory=BasicProfile)
    ai_insights: AIInsights = Field(default_factory=AIInsights)
    timeframe: Timeframe = Field(default=Timeframe.ONE_WEEK)


class TaskGenerationResult(BaseModel):
    """Outcome of onboarding task generation. Never raised, always returned."""

    success: bool
    tasks_generated: int
    tasks: List[TaskResponse] = Field(default_factory=list)
    error: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)


class GoalTaskDraft(BaseModel):
    title: str
    description: str
    type: TaskType
    priority: TaskPriority
    estimated_duration: int = Field(description="Minutes")
    suggested_time_slot: str = Field(description="morning, afternoon or evening")
    energy_level_required: EnergyLevel
    difficulty_level: int = Field(description="1 (trivial) to 10 (very hard)")
    context_requirements: str
    success_criteria: str


class GoalTaskBatch(BaseModel):
    tasks: List[GoalTaskDraft]


class OnboardingTaskDraft(BaseModel):
    title: str
    description: str
    category: str = Field(description="e.g. health, work, productivity, learning, personal")
    type: TaskType
    priority: TaskPriority
    estimated_duration: int = Field(description="Minutes")
    energy_level_required: Optional[EnergyLevel] = None
    difficulty_level: Optional[int] = Field(default=None, description="1 to 10")
    success_criteria: Optional[str] = None


class OnboardingTaskBatch(BaseModel):
    tasks: List[OnboardingTaskDraft]
