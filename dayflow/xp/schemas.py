"""
DAYFLOW Planner API - XP Schemas
"""

from pydantic import BaseModel, Field


class XPResponse(BaseModel):
    """Current XP standing for a user."""

    user_id: str
    total_xp: int = Field(ge=0, description="Running XP total")
    level: int = Field(ge=1, description="Level derived from total XP (100 XP per level)")
    xp_to_next_level: int = Field(description="XP still needed to reach the next level")
