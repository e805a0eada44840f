"""
DAYFLOW Planner API - Insights Service

Task statistics per timeframe. The counting itself is a deterministic,
side-effect free computation over the tasks handed in.
"""

from datetime import datetime, timedelta, timezone
from typing import List

from dayflow.tasks.models import Task
from dayflow.tasks.enums import StatsTimeframe, TaskStatus
from dayflow.tasks.repository import TaskRepositoryInterface
from dayflow.insights.schemas import TaskStats


def period_start(timeframe: StatsTimeframe, now: datetime) -> datetime:
    """
    Start of the counted period, at UTC midnight.

    day: today. week: the most recent Sunday. month: the 1st.
    """
    midnight = datetime(now.year, now.month, now.day, tzinfo=timezone.utc)
    if timeframe == StatsTimeframe.DAY:
        return midnight
    if timeframe == StatsTimeframe.WEEK:
        # weekday(): Monday is 0, Sunday is 6
        return midnight - timedelta(days=(now.weekday() + 1) % 7)
    return midnight.replace(day=1)


class InsightsService:
    """
    Service for computing task statistics.

    Reads are user-scoped through the repository; "now" is injected so
    the same tasks and time always give the same numbers.
    """

    def __init__(self, repository: TaskRepositoryInterface):
        self.repository = repository

    @staticmethod
    def compute_stats(
        tasks: List[Task],
        timeframe: StatsTimeframe,
        start: datetime,
        now: datetime,
    ) -> TaskStats:
        counts = {status: 0 for status in TaskStatus}
        for task in tasks:
            counts[task.status] += 1

        total = len(tasks)
        completed = counts[TaskStatus.COMPLETED]
        return TaskStats(
            timeframe=timeframe,
            period_start=start,
            generated_at=now,
            total=total,
            completed=completed,
            pending=counts[TaskStatus.PENDING],
            in_progress=counts[TaskStatus.IN_PROGRESS],
            rescheduled=counts[TaskStatus.RESCHEDULED],
            completion_rate=round(completed / total * 100, 2) if total else 0.0,
        )

    async def get_task_stats(
        self,
        owner_id: str,
        timeframe: StatsTimeframe,
        now: datetime,
    ) -> TaskStats:
        """Stats over the owner's tasks created since the period start."""
        start = period_start(timeframe, now)
        tasks = await self.repository.list_by_owner(owner_id=owner_id, created_since=start)
        return self.compute_stats(tasks, timeframe, start, now)
