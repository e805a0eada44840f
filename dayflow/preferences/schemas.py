"""
DAYFLOW Planner API - Preference Schemas
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from dayflow.scheduling.schemas import WorkHours, validate_windows


class PreferencesUpdateRequest(BaseModel):
    """Replace the user's scheduling preferences."""

    work_hours: Optional[WorkHours] = Field(default=None, description="Working day bounds")
    break_preferences: Dict[str, str] = Field(
        default_factory=dict,
        description="Named break windows, e.g. {\"lunch\": \"12:30-13:15\"}",
    )
    blocked_times: List[str] = Field(default_factory=list, description="Unavailable windows (HH:MM-HH:MM)")
    preferred_work_times: List[str] = Field(default_factory=list, description="Preferred focus windows (HH:MM-HH:MM)")

    @field_validator("blocked_times", "preferred_work_times")
    @classmethod
    def validate_window_list(cls, value: List[str]) -> List[str]:
        return validate_windows(value)

    @field_validator("break_preferences")
    @classmethod
    def validate_break_windows(cls, value: Dict[str, str]) -> Dict[str, str]:
        validate_windows(list(value.values()))
        return value


class PreferencesResponse(BaseModel):
    user_id: str
    work_hours: Optional[WorkHours] = None
    break_preferences: Dict[str, str]
    blocked_times: List[str]
    preferred_work_times: List[str]
    updated_at: Optional[datetime] = None
