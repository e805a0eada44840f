"""
DAYFLOW Planner API - Schedule Service

Generates a user's daily schedule:
gather -> analyze energy -> request (or fall back) -> score -> persist.
Steps run strictly in that order within one call.

Stored schedules can also be edited block by block; every edit is checked
for overlaps and re-scored before it is saved.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from dayflow.scheduling.constraints import ConstraintGatherer
from dayflow.scheduling.energy import DEFAULT_ENERGY_PATTERN, analyze_energy_pattern
from dayflow.scheduling.fallback import build_fallback_schedule
from dayflow.scheduling.repository import ScheduleRepositoryInterface
from dayflow.scheduling.requester import ScheduleRequester, ScheduleRequestError
from dayflow.scheduling.schemas import Schedule, TimeBlock
from dayflow.scheduling.scorer import adaptability_score, optimization_score
from dayflow.scheduling.timeutils import first_overlap, format_window

logger = logging.getLogger(__name__)


class ScheduleEditError(Exception):
    """A block edit would break the schedule's non-overlap rule."""


class ScheduleService:
    """Service layer for schedule generation and retrieval."""

    def __init__(
        self,
        gatherer: ConstraintGatherer,
        requester: ScheduleRequester,
        repository: ScheduleRepositoryInterface,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.gatherer = gatherer
        self.requester = requester
        self.repository = repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self) -> datetime:
        return self._clock()

    async def generate_daily_schedule(self, user_id: str, day: Optional[date] = None) -> Schedule:
        """
        Build, score and store the schedule for one day.

        A failed reasoning request switches to the fallback scheduler. A
        failed save is logged and the schedule is still returned.
        """
        day = day or self._now().date()

        context = await self.gatherer.gather(user_id, day)
        history = await self.gatherer.completion_history(user_id)
        pattern = analyze_energy_pattern(task.completed_at for task in history)

        is_ai_generated = bool(context.candidates)
        try:
            proposal = await self.requester.request(pattern, context.constraints, context.candidates, day)
        except ScheduleRequestError as e:
            logger.warning(f"Falling back to heuristic schedule for user {user_id} on {day.isoformat()}: {e}")
            proposal = build_fallback_schedule(context.candidates)
            is_ai_generated = False

        schedule = Schedule(
            **proposal.model_dump(),
            user_id=user_id,
            date=day,
            generated_at=self._now(),
            is_ai_generated=is_ai_generated,
            energy_pattern=pattern,
        )
        schedule.optimization_score = optimization_score(schedule, pattern)
        schedule.adaptability_score = adaptability_score(schedule)

        try:
            await self.repository.upsert(schedule)
        except Exception as e:
            logger.error(f"Failed to save schedule {schedule.schedule_id}: {e}", exc_info=True)

        logger.info(
            f"Generated schedule {schedule.schedule_id}: {len(schedule.time_blocks)} blocks, "
            f"optimization={schedule.optimization_score}, adaptability={schedule.adaptability_score}"
        )
        return schedule

    async def get_schedule(self, user_id: str, day: date) -> Optional[Schedule]:
        return await self.repository.get(user_id, day)

    async def get_or_generate_today(self, user_id: str) -> Schedule:
        """Today's stored schedule, generated first if none exists yet."""
        today = self._now().date()
        schedule = await self.repository.get(user_id, today)
        if schedule is None:
            logger.info(f"No schedule stored for user {user_id} on {today.isoformat()}, generating one")
            schedule = await self.generate_daily_schedule(user_id, today)
        return schedule

    async def move_block(
        self,
        user_id: str,
        day: date,
        task_id: str,
        start_time: str,
        end_time: str,
    ) -> Optional[Schedule]:
        """
        Move one task block to a new interval and re-score the schedule.

        Returns None when the schedule or the block does not exist.

        Raises:
            ScheduleEditError: the new interval overlaps another block or buffer
        """
        schedule = await self.repository.get(user_id, day)
        if schedule is None:
            return None
        index = next((i for i, b in enumerate(schedule.time_blocks) if b.task_id == task_id), None)
        if index is None:
            return None

        moved = TimeBlock.model_validate(
            {**schedule.time_blocks[index].model_dump(), "start_time": start_time, "end_time": end_time}
        )
        blocks = schedule.time_blocks[:index] + [moved] + schedule.time_blocks[index + 1:]
        intervals = [(b.start_minutes, b.end_minutes) for b in blocks + schedule.buffer_blocks]
        overlap = first_overlap(intervals)
        if overlap is not None:
            (a_start, a_end), (b_start, b_end) = overlap
            raise ScheduleEditError(
                f"{format_window(a_start, a_end)} overlaps {format_window(b_start, b_end)}"
            )

        schedule.time_blocks = sorted(blocks, key=lambda b: b.start_minutes)
        return await self._rescore_and_save(schedule)

    async def remove_block(self, user_id: str, day: date, task_id: str) -> Optional[Schedule]:
        """
        Drop one task block from the schedule and re-score it.

        Returns None when the schedule or the block does not exist.
        """
        schedule = await self.repository.get(user_id, day)
        if schedule is None:
            return None
        remaining = [b for b in schedule.time_blocks if b.task_id != task_id]
        if len(remaining) == len(schedule.time_blocks):
            return None

        schedule.time_blocks = remaining
        optimization = schedule.energy_optimization
        optimization.high_energy_tasks = [t for t in optimization.high_energy_tasks if t != task_id]
        optimization.low_energy_tasks = [t for t in optimization.low_energy_tasks if t != task_id]
        return await self._rescore_and_save(schedule)

    async def _rescore_and_save(self, schedule: Schedule) -> Schedule:
        # No two blocks or buffers may overlap after any edit
        intervals = [(b.start_minutes, b.end_minutes) for b in schedule.time_blocks + schedule.buffer_blocks]
        if first_overlap(intervals) is not None:
            raise ScheduleEditError("Edited schedule contains overlapping blocks")

        pattern = schedule.energy_pattern or DEFAULT_ENERGY_PATTERN
        schedule.optimization_score = optimization_score(schedule, pattern)
        schedule.adaptability_score = adaptability_score(schedule)
        schedule.last_modified = self._now()

        await self.repository.upsert(schedule)
        logger.info(
            f"Updated schedule {schedule.schedule_id}: {len(schedule.time_blocks)} blocks, "
            f"optimization={schedule.optimization_score}, adaptability={schedule.adaptability_score}"
        )
        return schedule
