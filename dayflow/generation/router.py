"""
DAYFLOW Planner API - Task Generation Router

Goal and onboarding task generation for the authenticated user.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from dayflow.auth.dependencies import CurrentUser
from dayflow.tasks.repository import TaskRepositoryInterface
from dayflow.tasks.router import get_task_repository
from dayflow.tasks.service import TaskService
from dayflow.preferences.repository import PreferencesRepositoryInterface
from dayflow.preferences.router import get_preferences_repository
from dayflow.reasoning.client import ReasoningClientInterface, get_reasoning_client
from dayflow.generation.schemas import (
    GoalTaskRequest,
    GoalTaskResponse,
    OnboardingTaskRequest,
    TaskGenerationResult,
)
from dayflow.generation.service import TaskGenerationError, TaskGenerationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/generation", tags=["Generation"])


async def get_generation_service(
    task_repository: Annotated[TaskRepositoryInterface, Depends(get_task_repository)],
    preferences_repository: Annotated[PreferencesRepositoryInterface, Depends(get_preferences_repository)],
    reasoning_client: Annotated[ReasoningClientInterface, Depends(get_reasoning_client)],
) -> TaskGenerationService:
    """Dependency to get task generation service instance."""
    return TaskGenerationService(task_repository, preferences_repository, reasoning_client)


@router.post(
    "/goal",
    response_model=GoalTaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate today's tasks for a goal",
)
async def generate_goal_tasks(
    request: GoalTaskRequest,
    current_user: CurrentUser,
    service: Annotated[TaskGenerationService, Depends(get_generation_service)],
) -> GoalTaskResponse:
    """
    Ask the reasoning service for tasks that move a goal forward.

    With create_habits set, each daily habit in the breakdown also becomes
    a daily-habit task. Returns 502 when no usable tasks come back or the
    batch cannot be saved.
    """
    try:
        tasks = await service.generate_from_goal(current_user.id, request.breakdown)
    except TaskGenerationError as e:
        logger.warning(f"Goal task generation failed for user {current_user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Task generation is unavailable, please try again later",
        )

    if request.create_habits:
        tasks.extend(await service.create_recurring_habits(current_user.id, request.breakdown))

    responses = [TaskService.task_to_response(task) for task in tasks]
    return GoalTaskResponse(tasks=responses, total=len(responses))


@router.post(
    "/onboarding",
    response_model=TaskGenerationResult,
    summary="Generate a new user's first tasks",
)
async def generate_onboarding_tasks(
    request: OnboardingTaskRequest,
    current_user: CurrentUser,
    service: Annotated[TaskGenerationService, Depends(get_generation_service)],
) -> TaskGenerationResult:
    """Failures are reported in the result body (success=false), not as errors."""
    return await service.generate_from_onboarding(current_user.id, request)
