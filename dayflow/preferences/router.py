"""
DAYFLOW Planner API - Preferences Router

Read and replace the scheduling preferences the planner uses.
"""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.database import get_database
from dayflow.auth.dependencies import CurrentUser
from dayflow.preferences.models import UserPreferences
from dayflow.preferences.repository import (
    MongoPreferencesRepository,
    PreferencesRepositoryInterface,
)
from dayflow.preferences.schemas import PreferencesUpdateRequest, PreferencesResponse
from dayflow.scheduling.schemas import WorkHours


router = APIRouter(prefix="/preferences", tags=["Preferences"])


async def get_preferences_repository(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> PreferencesRepositoryInterface:
    """Dependency to get preferences repository instance."""
    return MongoPreferencesRepository(db)


def _to_response(preferences: UserPreferences) -> PreferencesResponse:
    work_hours = None
    if preferences.work_start and preferences.work_end:
        work_hours = WorkHours(start=preferences.work_start, end=preferences.work_end)
    return PreferencesResponse(
        user_id=preferences.user_id,
        work_hours=work_hours,
        break_preferences=preferences.break_preferences,
        blocked_times=preferences.blocked_times,
        preferred_work_times=preferences.preferred_work_times,
        updated_at=preferences.updated_at,
    )


@router.get("", response_model=PreferencesResponse, summary="Get scheduling preferences")
async def get_preferences(
    current_user: CurrentUser,
    repository: Annotated[PreferencesRepositoryInterface, Depends(get_preferences_repository)],
) -> PreferencesResponse:
    """Stored preferences, or an empty set when none were saved yet."""
    preferences = await repository.get(current_user.id)
    if preferences is None:
        return PreferencesResponse(
            user_id=current_user.id,
            break_preferences={},
            blocked_times=[],
            preferred_work_times=[],
        )
    return _to_response(preferences)


@router.put("", response_model=PreferencesResponse, summary="Replace scheduling preferences")
async def put_preferences(
    request: PreferencesUpdateRequest,
    current_user: CurrentUser,
    repository: Annotated[PreferencesRepositoryInterface, Depends(get_preferences_repository)],
) -> PreferencesResponse:
    preferences = UserPreferences(
        user_id=current_user.id,
        work_start=request.work_hours.start if request.work_hours else None,
        work_end=request.work_hours.end if request.work_hours else None,
        break_preferences=request.break_preferences,
        blocked_times=request.blocked_times,
        preferred_work_times=request.preferred_work_times,
        updated_at=datetime.now(timezone.utc),
    )
    saved = await repository.upsert(preferences)
    return _to_response(saved)
