"""
DAYFLOW Planner API - Fallback Scheduler

Deterministic placement used when the reasoning service is unavailable or
returns something invalid. Pure: the output depends only on the task list.
"""

from typing import List, Sequence

from dayflow.tasks.enums import EnergyLevel
from dayflow.tasks.models import Task
from dayflow.scheduling.schemas import (
    BufferBlock,
    EnergyOptimization,
    ProposedSchedule,
    TimeBlock,
    WorkLifeBalance,
)
from dayflow.scheduling.timeutils import MINUTES_PER_DAY, first_overlap, from_minutes, to_minutes


MAX_FALLBACK_TASKS = 6
DAY_START = "09:00"
DEFAULT_DURATION_MINUTES = 45
GAP_MINUTES = 15

FIXED_BUFFERS = (
    ("12:00", "13:00", "Lunch break"),
    ("15:30", "15:45", "Afternoon break"),
)

FALLBACK_RECOMMENDATION = (
    "Schedule generated using fallback algorithm. "
    "Consider providing more user preferences for better optimization."
)


def _place_tasks(tasks: Sequence[Task]) -> List[TimeBlock]:
    blocks: List[TimeBlock] = []
    cursor = to_minutes(DAY_START)
    for task in tasks[:MAX_FALLBACK_TASKS]:
        duration = task.estimated_duration
        if not duration or duration < 1:
            duration = DEFAULT_DURATION_MINUTES
        end = cursor + duration
        if end > MINUTES_PER_DAY:
            break
        blocks.append(
            TimeBlock(
                start_time=from_minutes(cursor),
                end_time=from_minutes(end),
                task_id=task.id,
                task_title=task.title,
                priority=task.priority,
                energy_level=task.energy_level_required or EnergyLevel.MEDIUM,
                focus_type="work",
                optimization_reason="Fallback scheduling",
            )
        )
        cursor = end + GAP_MINUTES
    return blocks


def _fixed_buffers(blocks: Sequence[TimeBlock]) -> List[BufferBlock]:
    """Fixed breaks, minus any that would collide with a placed task block."""
    occupied = [(b.start_minutes, b.end_minutes) for b in blocks]
    buffers: List[BufferBlock] = []
    for start, end, purpose in FIXED_BUFFERS:
        buffer = BufferBlock(start_time=start, end_time=end, purpose=purpose)
        if first_overlap(occupied + [(buffer.start_minutes, buffer.end_minutes)]) is None:
            buffers.append(buffer)
    return buffers


def build_fallback_schedule(tasks: Sequence[Task]) -> ProposedSchedule:
    """
    Place up to the first six tasks back to back from 09:00.

    Each block lasts the task's estimated duration (45 minutes if unset)
    with a 15 minute gap before the next one. Tasks past the sixth are
    dropped, and placement stops at the end of the day. The lunch and
    afternoon breaks are added wherever they do not overlap a task block.
    """
    blocks = _place_tasks(tasks)
    buffers = _fixed_buffers(blocks)

    work_minutes = sum(b.duration_minutes for b in blocks)
    break_minutes = sum(b.duration_minutes for b in buffers)

    return ProposedSchedule(
        time_blocks=blocks,
        buffer_blocks=buffers,
        recommendations=[FALLBACK_RECOMMENDATION],
        energy_optimization=EnergyOptimization(
            high_energy_tasks=[b.task_id for b in blocks[:2]],
            low_energy_tasks=[b.task_id for b in blocks[-2:]],
            energy_breaks=[b.start_time for b in buffers],
        ),
        work_life_balance=WorkLifeBalance(
            work_time=round(work_minutes / 60, 2),
            personal_time=2,
            break_time=round(break_minutes / 60, 2),
            balance_score=0.7,
        ),
    )
