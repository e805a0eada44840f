"""
DAYFLOW Planner API - Task Router

Task creation, queries and lifecycle transitions.
All endpoints are JWT-protected and user-scoped.
"""

from datetime import date
from typing import Optional, Annotated

from fastapi import APIRouter, HTTPException, status, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.database import get_database
from dayflow.auth.dependencies import CurrentUser
from dayflow.tasks.service import TaskService, InvalidStatusTransitionError
from dayflow.tasks.repository import TaskRepository, TaskRepositoryInterface
from dayflow.tasks.schemas import (
    TaskCreateRequest,
    TaskStatusUpdateRequest,
    TaskRescheduleRequest,
    TaskResponse,
    TaskListResponse,
    TaskCompletionResponse,
)
from dayflow.tasks.enums import TaskStatus
from dayflow.xp.repository import XPRepositoryInterface
from dayflow.xp.router import get_xp_repository
from dayflow.xp.service import XPService


router = APIRouter(prefix="/tasks", tags=["Tasks"])


async def get_task_repository(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> TaskRepositoryInterface:
    """Dependency to get task repository instance."""
    return TaskRepository(db)


async def get_task_service(
    repository: Annotated[TaskRepositoryInterface, Depends(get_task_repository)],
    xp_repository: Annotated[XPRepositoryInterface, Depends(get_xp_repository)],
) -> TaskService:
    """Dependency to get task service instance."""
    return TaskService(repository, XPService(xp_repository))


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Task not found",
    )


def _conflict(error: InvalidStatusTransitionError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=str(error),
    )


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    request: TaskCreateRequest,
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    """
    Create a pending task for the authenticated user.

    scheduled_date defaults to today.
    """
    return await service.create_task(
        owner_id=current_user.id,
        request=request,
    )


@router.get(
    "",
    response_model=TaskListResponse,
    summary="List tasks",
)
async def list_tasks(
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
    status_filter: Optional[TaskStatus] = Query(
        default=None,
        alias="status",
        description="Filter by task status",
    ),
    scheduled_date: Optional[date] = Query(
        default=None,
        description="Only tasks scheduled for this day",
    ),
) -> TaskListResponse:
    tasks = await service.list_tasks(
        owner_id=current_user.id,
        status=status_filter,
        scheduled_date=scheduled_date,
    )
    return TaskListResponse(tasks=tasks, total=len(tasks))


@router.get(
    "/today",
    response_model=TaskListResponse,
    summary="List today's tasks",
)
async def list_todays_tasks(
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskListResponse:
    """Tasks scheduled for today, highest priority first."""
    tasks = await service.get_todays_tasks(current_user.id)
    return TaskListResponse(tasks=tasks, total=len(tasks))


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get a task by ID",
)
async def get_task(
    task_id: str,
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    """
    Get a specific task by ID.

    Returns 404 if the task doesn't exist or belongs to another user.
    """
    task = await service.get_task(task_id, current_user.id)
    if task is None:
        raise _not_found()
    return task


@router.post(
    "/{task_id}/start",
    response_model=TaskResponse,
    summary="Start working on a task",
)
async def start_task(
    task_id: str,
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    try:
        task = await service.start_task(task_id, current_user.id)
    except InvalidStatusTransitionError as e:
        raise _conflict(e)
    if task is None:
        raise _not_found()
    return task


@router.post(
    "/{task_id}/complete",
    response_model=TaskCompletionResponse,
    summary="Complete a task and earn XP",
)
async def complete_task(
    task_id: str,
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskCompletionResponse:
    """
    Mark a task completed and award XP.

    Returns 409 if the task is already completed.
    """
    try:
        result = await service.complete_task(task_id, current_user.id)
    except InvalidStatusTransitionError as e:
        raise _conflict(e)
    if result is None:
        raise _not_found()
    return result


@router.post(
    "/{task_id}/reschedule",
    response_model=TaskResponse,
    summary="Move a task to another day",
)
async def reschedule_task(
    task_id: str,
    request: TaskRescheduleRequest,
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    try:
        task = await service.reschedule_task(
            task_id,
            current_user.id,
            request.scheduled_date,
            request.suggested_time_slot,
        )
    except InvalidStatusTransitionError as e:
        raise _conflict(e)
    if task is None:
        raise _not_found()
    return task


@router.patch(
    "/{task_id}/status",
    response_model=TaskResponse,
    summary="Change a task's status",
)
async def update_task_status(
    task_id: str,
    request: TaskStatusUpdateRequest,
    current_user: CurrentUser,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    try:
        task = await service.update_status(task_id, current_user.id, request)
    except InvalidStatusTransitionError as e:
        raise _conflict(e)
    if task is None:
        raise _not_found()
    return task
