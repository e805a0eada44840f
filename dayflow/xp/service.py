"""
DAYFLOW Planner API - XP Service

XP award rules and running totals.
"""

from typing import Optional

from dayflow.tasks.enums import TaskPriority
from dayflow.tasks.models import Task
from dayflow.xp.models import UserXP, XP_PER_LEVEL
from dayflow.xp.repository import XPRepositoryInterface
from dayflow.xp.schemas import XPResponse


BASE_COMPLETION_XP = 10
DIFFICULTY_MULTIPLIER = 5
PRIORITY_BONUS = {
    TaskPriority.HIGH: 15,
    TaskPriority.MEDIUM: 10,
    TaskPriority.LOW: 5,
}


class XPService:
    """Service layer for XP awards."""

    def __init__(self, repository: XPRepositoryInterface):
        self.repository = repository

    @staticmethod
    def compute_task_xp(task: Task) -> int:
        """
        XP for completing a task.

        base 10 + priority bonus (15/10/5 for high/medium/low) + difficulty x 5.
        A task without a difficulty counts as difficulty 1.
        """
        difficulty = task.difficulty_level or 1
        bonus = PRIORITY_BONUS.get(task.priority, PRIORITY_BONUS[TaskPriority.MEDIUM])
        return BASE_COMPLETION_XP + bonus + difficulty * DIFFICULTY_MULTIPLIER

    async def award(self, user_id: str, amount: int) -> UserXP:
        """Add XP to the user's running total."""
        return await self.repository.increment(user_id, amount)

    async def get_progress(self, user_id: str) -> XPResponse:
        """Current total and level; users without awards start at zero."""
        record: Optional[UserXP] = await self.repository.get(user_id)
        if record is None:
            record = UserXP(user_id=user_id)
        return XPResponse(
            user_id=user_id,
            total_xp=record.total_xp,
            level=record.level,
            xp_to_next_level=XP_PER_LEVEL - record.total_xp % XP_PER_LEVEL,
        )
