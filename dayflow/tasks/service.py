"""
DAYFLOW Planner API - Task Service

Task lifecycle: creation, status transitions and the XP award on completion.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, List, Callable

from dayflow.tasks.models import Task
from dayflow.tasks.repository import TaskRepositoryInterface
from dayflow.tasks.enums import TaskStatus, TaskPriority
from dayflow.tasks.schemas import (
    TaskCreateRequest,
    TaskStatusUpdateRequest,
    TaskResponse,
    TaskCompletionResponse,
)
from dayflow.xp.service import XPService

logger = logging.getLogger(__name__)


# Allowed source statuses for each target status.
# Completed is terminal; rescheduled behaves like a re-entrant pending.
ALLOWED_TRANSITIONS = {
    TaskStatus.IN_PROGRESS: [TaskStatus.PENDING, TaskStatus.RESCHEDULED],
    TaskStatus.COMPLETED: [TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.RESCHEDULED],
    TaskStatus.RESCHEDULED: [TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.RESCHEDULED],
    TaskStatus.PENDING: [],
}

PRIORITY_RANK = {
    TaskPriority.HIGH: 0,
    TaskPriority.MEDIUM: 1,
    TaskPriority.LOW: 2,
}

CELEBRATIONS = {
    TaskPriority.HIGH: "Huge win! '{title}' is done.",
    TaskPriority.MEDIUM: "Nice work finishing '{title}'!",
    TaskPriority.LOW: "Done and dusted: '{title}'.",
}


class InvalidStatusTransitionError(Exception):
    """Raised when a status change is not allowed from the task's current status."""

    def __init__(self, current: TaskStatus, target: TaskStatus):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move task from '{current.value}' to '{target.value}'")


class TaskService:
    """Service layer for task business logic."""

    def __init__(
        self,
        repository: TaskRepositoryInterface,
        xp_service: XPService,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the task service.

        Args:
            repository: Task repository implementation
            xp_service: Awards XP when tasks are completed
            clock: Optional clock function for testing (returns current datetime)
        """
        self.repository = repository
        self.xp_service = xp_service
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self) -> datetime:
        """Get current time using the configured clock."""
        return self._clock()

    def _today(self) -> date:
        return self._now().date()

    @staticmethod
    def task_to_response(task: Task) -> TaskResponse:
        """Convert a Task model to TaskResponse."""
        return TaskResponse(
            id=task.id,
            owner_id=task.owner_id,
            title=task.title,
            description=task.description,
            type=task.type,
            priority=task.priority,
            status=task.status,
            scheduled_date=task.scheduled_date,
            estimated_duration=task.estimated_duration,
            energy_level_required=task.energy_level_required,
            difficulty_level=task.difficulty_level,
            suggested_time_slot=task.suggested_time_slot,
            context_requirements=task.context_requirements,
            success_criteria=task.success_criteria,
            related_goal_id=task.related_goal_id,
            completed_at=task.completed_at,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )

    async def create_task(
        self,
        owner_id: str,
        request: TaskCreateRequest,
    ) -> TaskResponse:
        """Create a new pending task for the owner."""
        task = Task.create(
            owner_id=owner_id,
            title=request.title,
            description=request.description,
            type=request.type,
            priority=request.priority,
            scheduled_date=request.scheduled_date or self._today(),
            estimated_duration=request.estimated_duration,
            energy_level_required=request.energy_level_required,
            difficulty_level=request.difficulty_level,
            suggested_time_slot=request.suggested_time_slot,
            context_requirements=request.context_requirements,
            success_criteria=request.success_criteria,
            related_goal_id=request.related_goal_id,
            now=self._now(),
        )
        await self.repository.create(task)
        return self.task_to_response(task)

    async def get_task(self, task_id: str, owner_id: str) -> Optional[TaskResponse]:
        """Get a task by ID, scoped to owner."""
        task = await self.repository.get_by_id(task_id, owner_id)
        if task is None:
            return None
        return self.task_to_response(task)

    async def list_tasks(
        self,
        owner_id: str,
        status: Optional[TaskStatus] = None,
        scheduled_date: Optional[date] = None,
    ) -> List[TaskResponse]:
        """List tasks for owner with optional filters."""
        tasks = await self.repository.list_by_owner(
            owner_id=owner_id,
            status=status,
            scheduled_date=scheduled_date,
        )
        return [self.task_to_response(task) for task in tasks]

    async def get_todays_tasks(self, owner_id: str) -> List[TaskResponse]:
        """Tasks scheduled for today, highest priority first."""
        tasks = await self.repository.list_by_owner(
            owner_id=owner_id,
            scheduled_date=self._today(),
        )
        tasks.sort(key=lambda t: (PRIORITY_RANK[t.priority], t.created_at))
        return [self.task_to_response(task) for task in tasks]

    async def _transition(
        self,
        task_id: str,
        owner_id: str,
        target: TaskStatus,
        extra_updates: Optional[dict] = None,
    ) -> Optional[Task]:
        """
        Move a task to target status.

        The store only applies the write while the task is still in an
        allowed source status, so two racing transitions cannot both win.
        """
        task = await self.repository.get_by_id(task_id, owner_id)
        if task is None:
            return None

        allowed = ALLOWED_TRANSITIONS[target]
        if task.status not in allowed:
            raise InvalidStatusTransitionError(task.status, target)

        updates = {"status": target}
        if extra_updates:
            updates.update(extra_updates)

        updated = await self.repository.update(task_id, owner_id, updates, expected_statuses=allowed)
        if updated is None:
            current = await self.repository.get_by_id(task_id, owner_id)
            if current is None:
                return None
            raise InvalidStatusTransitionError(current.status, target)
        return updated

    async def start_task(self, task_id: str, owner_id: str) -> Optional[TaskResponse]:
        task = await self._transition(task_id, owner_id, TaskStatus.IN_PROGRESS)
        if task is None:
            return None
        return self.task_to_response(task)

    async def reschedule_task(
        self,
        task_id: str,
        owner_id: str,
        new_date: date,
        time_slot: Optional[str] = None,
    ) -> Optional[TaskResponse]:
        """Move a task to another day and mark it rescheduled."""
        updates: dict = {"scheduled_date": new_date}
        if time_slot is not None:
            updates["suggested_time_slot"] = time_slot

        task = await self._transition(task_id, owner_id, TaskStatus.RESCHEDULED, updates)
        if task is None:
            return None
        logger.info(f"Task {task_id} rescheduled to {new_date.isoformat()}")
        return self.task_to_response(task)

    async def complete_task(self, task_id: str, owner_id: str) -> Optional[TaskCompletionResponse]:
        """
        Complete a task and award XP.

        The XP write is non-critical: if it fails the error is logged and
        the completion is still reported, with total_xp left empty.
        """
        task = await self._transition(
            task_id,
            owner_id,
            TaskStatus.COMPLETED,
            {"completed_at": self._now()},
        )
        if task is None:
            return None

        xp_awarded = self.xp_service.compute_task_xp(task)
        total_xp = None
        level = None
        try:
            record = await self.xp_service.award(owner_id, xp_awarded)
            total_xp = record.total_xp
            level = record.level
        except Exception as e:
            logger.error(f"Failed to award {xp_awarded} XP to user {owner_id}: {e}", exc_info=True)

        return TaskCompletionResponse(
            task=self.task_to_response(task),
            xp_awarded=xp_awarded,
            total_xp=total_xp,
            level=level,
            celebration=CELEBRATIONS[task.priority].format(title=task.title),
        )

    async def update_status(
        self,
        task_id: str,
        owner_id: str,
        request: TaskStatusUpdateRequest,
    ) -> Optional[TaskResponse]:
        """Dispatch an explicit status change to the matching transition."""
        if request.status == TaskStatus.COMPLETED:
            result = await self.complete_task(task_id, owner_id)
            return result.task if result else None

        if request.status == TaskStatus.RESCHEDULED:
            return await self.reschedule_task(
                task_id,
                owner_id,
                request.scheduled_date,
                request.suggested_time_slot,
            )

        if request.status == TaskStatus.IN_PROGRESS:
            return await self.start_task(task_id, owner_id)

        task = await self.repository.get_by_id(task_id, owner_id)
        if task is None:
            return None
        raise InvalidStatusTransitionError(task.status, request.status)
