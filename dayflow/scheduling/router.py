"""
DAYFLOW Planner API - Schedule Router

Daily schedule generation, retrieval and block edits, scoped to the
authenticated user.
"""

from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.database import get_database
from dayflow.auth.dependencies import CurrentUser
from dayflow.tasks.repository import TaskRepositoryInterface
from dayflow.tasks.router import get_task_repository
from dayflow.preferences.repository import PreferencesRepositoryInterface
from dayflow.preferences.router import get_preferences_repository
from dayflow.reasoning.client import ReasoningClientInterface, get_reasoning_client
from dayflow.scheduling.constraints import ConstraintGatherer
from dayflow.scheduling.repository import MongoScheduleRepository, ScheduleRepositoryInterface
from dayflow.scheduling.requester import ScheduleRequester
from dayflow.scheduling.schemas import BlockMoveRequest, Schedule, ScheduleGenerateRequest
from dayflow.scheduling.service import ScheduleEditError, ScheduleService


router = APIRouter(prefix="/schedules", tags=["Schedules"])


async def get_schedule_repository(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> ScheduleRepositoryInterface:
    """Dependency to get schedule repository instance."""
    return MongoScheduleRepository(db)


async def get_schedule_service(
    task_repository: Annotated[TaskRepositoryInterface, Depends(get_task_repository)],
    preferences_repository: Annotated[PreferencesRepositoryInterface, Depends(get_preferences_repository)],
    schedule_repository: Annotated[ScheduleRepositoryInterface, Depends(get_schedule_repository)],
    reasoning_client: Annotated[ReasoningClientInterface, Depends(get_reasoning_client)],
) -> ScheduleService:
    """Dependency to get schedule service instance."""
    return ScheduleService(
        gatherer=ConstraintGatherer(task_repository, preferences_repository),
        requester=ScheduleRequester(reasoning_client),
        repository=schedule_repository,
    )


@router.post(
    "/generate",
    response_model=Schedule,
    summary="Generate the schedule for a day",
)
async def generate_schedule(
    current_user: CurrentUser,
    service: Annotated[ScheduleService, Depends(get_schedule_service)],
    request: Optional[ScheduleGenerateRequest] = None,
) -> Schedule:
    """
    Generate (or regenerate) the user's schedule for a day.

    Defaults to today. Regenerating replaces the stored schedule for that day.
    """
    day = request.date if request else None
    return await service.generate_daily_schedule(current_user.id, day)


@router.get(
    "/today",
    response_model=Schedule,
    summary="Get today's schedule, generating it if needed",
)
async def get_todays_schedule(
    current_user: CurrentUser,
    service: Annotated[ScheduleService, Depends(get_schedule_service)],
) -> Schedule:
    return await service.get_or_generate_today(current_user.id)


@router.get(
    "/{day}",
    response_model=Schedule,
    summary="Get the stored schedule for a day",
)
async def get_schedule(
    day: date,
    current_user: CurrentUser,
    service: Annotated[ScheduleService, Depends(get_schedule_service)],
) -> Schedule:
    schedule = await service.get_schedule(current_user.id, day)
    if schedule is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Schedule not found",
        )
    return schedule


def _schedule_or_block_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Schedule or block not found",
    )


@router.patch(
    "/{day}/blocks/{task_id}",
    response_model=Schedule,
    summary="Move a task block to a new time",
)
async def move_block(
    day: date,
    task_id: str,
    request: BlockMoveRequest,
    current_user: CurrentUser,
    service: Annotated[ScheduleService, Depends(get_schedule_service)],
) -> Schedule:
    """Returns 409 when the new interval overlaps another block or buffer."""
    try:
        schedule = await service.move_block(
            current_user.id, day, task_id, request.start_time, request.end_time
        )
    except ScheduleEditError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    if schedule is None:
        raise _schedule_or_block_not_found()
    return schedule


@router.delete(
    "/{day}/blocks/{task_id}",
    response_model=Schedule,
    summary="Remove a task block from the schedule",
)
async def remove_block(
    day: date,
    task_id: str,
    current_user: CurrentUser,
    service: Annotated[ScheduleService, Depends(get_schedule_service)],
) -> Schedule:
    try:
        schedule = await service.remove_block(current_user.id, day, task_id)
    except ScheduleEditError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e),
        )
    if schedule is None:
        raise _schedule_or_block_not_found()
    return schedule
