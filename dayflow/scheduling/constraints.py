"""
DAYFLOW Planner API - Constraint Gatherer

Collects the candidate tasks and fixed boundaries for one user's day.
Read-only. A failed read never aborts generation: it is logged and replaced
by an empty list or the default constraints.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List

from dayflow.tasks.enums import TaskStatus, TaskType
from dayflow.tasks.models import Task
from dayflow.tasks.repository import TaskRepositoryInterface
from dayflow.preferences.repository import PreferencesRepositoryInterface
from dayflow.scheduling.energy import HISTORY_LIMIT
from dayflow.scheduling.schemas import ScheduleConstraints, WorkHours

logger = logging.getLogger(__name__)


OVERDUE_LIMIT = 3


@dataclass
class DayContext:
    """Everything the planner needs to know about a user's day."""

    candidates: List[Task] = field(default_factory=list)
    constraints: ScheduleConstraints = field(default_factory=ScheduleConstraints)


class ConstraintGatherer:
    """Reads tasks and preferences for schedule generation."""

    def __init__(
        self,
        task_repository: TaskRepositoryInterface,
        preferences_repository: PreferencesRepositoryInterface,
    ):
        self.task_repository = task_repository
        self.preferences_repository = preferences_repository

    async def gather(self, user_id: str, day: date) -> DayContext:
        return DayContext(
            candidates=await self.gather_tasks(user_id, day),
            constraints=await self.gather_constraints(user_id),
        )

    async def gather_tasks(self, user_id: str, day: date) -> List[Task]:
        """
        Candidate tasks for the day, in this order:
        tasks scheduled for the day, daily habits regardless of date, and up
        to three overdue tasks from earlier days. Completed tasks are
        skipped and a task appearing in more than one group is kept once.
        """
        open_only = [TaskStatus.COMPLETED]
        groups = [
            ("scheduled", dict(scheduled_date=day)),
            ("daily habit", dict(task_type=TaskType.DAILY_HABIT)),
            ("overdue", dict(scheduled_before=day, limit=OVERDUE_LIMIT)),
        ]

        candidates: List[Task] = []
        seen = set()
        for label, filters in groups:
            try:
                tasks = await self.task_repository.list_by_owner(
                    owner_id=user_id,
                    exclude_statuses=open_only,
                    **filters,
                )
            except Exception as e:
                logger.warning(f"Could not read {label} tasks for user {user_id}: {e}", exc_info=True)
                continue
            for task in tasks:
                if task.id not in seen:
                    seen.add(task.id)
                    candidates.append(task)
        return candidates

    async def gather_constraints(self, user_id: str) -> ScheduleConstraints:
        """Constraints from stored preferences, defaults for anything missing."""
        try:
            preferences = await self.preferences_repository.get(user_id)
            if preferences is None:
                return ScheduleConstraints()

            constraints = ScheduleConstraints(
                blocked_times=preferences.blocked_times,
                preferred_work_times=preferences.preferred_work_times,
            )
            if preferences.work_start and preferences.work_end:
                constraints.work_hours = WorkHours(start=preferences.work_start, end=preferences.work_end)
            if preferences.break_preferences:
                constraints.breaks = dict(preferences.break_preferences)
            return constraints
        except Exception as e:
            logger.warning(f"Could not read preferences for user {user_id}, using defaults: {e}", exc_info=True)
            return ScheduleConstraints()

    async def completion_history(self, user_id: str) -> List[Task]:
        """The most recent completed tasks, newest first."""
        try:
            return await self.task_repository.list_completed(user_id, HISTORY_LIMIT)
        except Exception as e:
            logger.warning(f"Could not read completion history for user {user_id}: {e}", exc_info=True)
            return []
