"""
DAYFLOW Planner API - Schedule Scorer

Quality metrics for a finished schedule. Pure functions; the same scoring
applies whether the schedule came from the reasoning service or the
fallback scheduler.
"""

from typing import Sequence

from dayflow.tasks.enums import EnergyLevel, TaskPriority
from dayflow.scheduling.schemas import (
    BufferBlock,
    EnergyPattern,
    ProposedSchedule,
    TimeBlock,
)
from dayflow.scheduling.timeutils import in_window


ENERGY_WEIGHT = 30
CONTEXT_WEIGHT = 20
BALANCE_WEIGHT = 20
BUFFER_WEIGHT = 15
PRIORITY_WEIGHT = 15

DEFAULT_BALANCE_SCORE = 0.7


def _chronological(blocks: Sequence[TimeBlock]) -> list:
    return sorted(blocks, key=lambda b: b.start_minutes)


def buffer_ratio(time_blocks: Sequence[TimeBlock], buffer_blocks: Sequence[BufferBlock]) -> float:
    """Buffer minutes over scheduled task minutes; 0 when nothing is scheduled."""
    scheduled = sum(b.duration_minutes for b in time_blocks)
    if scheduled == 0:
        return 0.0
    return sum(b.duration_minutes for b in buffer_blocks) / scheduled


def energy_alignment(time_blocks: Sequence[TimeBlock], pattern: EnergyPattern) -> float:
    """Share of high-energy blocks that start inside the peak window."""
    high = [b for b in time_blocks if b.energy_level == EnergyLevel.HIGH]
    if not high:
        return 1.0
    aligned = sum(1 for b in high if in_window(b.start_time, pattern.peak))
    return aligned / len(high)


def context_switching(time_blocks: Sequence[TimeBlock]) -> float:
    """1 - switches/transitions over adjacent blocks in time order."""
    ordered = _chronological(time_blocks)
    transitions = len(ordered) - 1
    if transitions <= 0:
        return 1.0
    switches = sum(1 for a, b in zip(ordered, ordered[1:]) if a.focus_type != b.focus_type)
    return 1 - switches / transitions


def buffer_adequacy(ratio: float) -> float:
    if 0.15 <= ratio <= 0.20:
        return 1.0
    if 0.10 <= ratio <= 0.25:
        return 0.8
    return max(0.3, 1 - abs(ratio - 0.175) * 4)


def priority_alignment(time_blocks: Sequence[TimeBlock], pattern: EnergyPattern) -> float:
    """Share of high-priority blocks starting in the peak or secondary peak."""
    high = [b for b in time_blocks if b.priority == TaskPriority.HIGH]
    if not high:
        return 1.0
    aligned = sum(
        1
        for b in high
        if in_window(b.start_time, pattern.peak) or in_window(b.start_time, pattern.secondary_peak)
    )
    return aligned / len(high)


def optimization_score(schedule: ProposedSchedule, pattern: EnergyPattern) -> float:
    """Weighted 0-100 quality score."""
    balance = DEFAULT_BALANCE_SCORE
    if schedule.work_life_balance is not None:
        balance = schedule.work_life_balance.balance_score

    ratio = buffer_ratio(schedule.time_blocks, schedule.buffer_blocks)
    score = (
        energy_alignment(schedule.time_blocks, pattern) * ENERGY_WEIGHT
        + context_switching(schedule.time_blocks) * CONTEXT_WEIGHT
        + balance * BALANCE_WEIGHT
        + buffer_adequacy(ratio) * BUFFER_WEIGHT
        + priority_alignment(schedule.time_blocks, pattern) * PRIORITY_WEIGHT
    )
    return round(min(max(score, 0.0), 100.0), 2)


def adaptability_score(schedule: ProposedSchedule) -> float:
    """0-1 slack rating from the buffer ratio."""
    ratio = buffer_ratio(schedule.time_blocks, schedule.buffer_blocks)
    if 0.15 <= ratio <= 0.25:
        return 1.0
    if 0.10 <= ratio < 0.35:
        return 0.8
    if 0.05 <= ratio < 0.45:
        return 0.6
    return 0.4
