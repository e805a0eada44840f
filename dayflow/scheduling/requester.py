"""
DAYFLOW Planner API - Schedule Requester

Turns a day's context into one structured request to the reasoning service
and validates what comes back. Anything other than a well-formed,
self-consistent schedule raises ScheduleRequestError so the caller can fall
back. There are no internal retries.
"""

import logging
from datetime import date
from typing import List, Sequence

from pydantic import ValidationError

from dayflow.tasks.models import Task
from dayflow.reasoning.client import ReasoningClientInterface
from dayflow.scheduling.schemas import (
    EnergyPattern,
    ProposedSchedule,
    ScheduleConstraints,
    WorkLifeBalance,
)
from dayflow.scheduling.timeutils import first_overlap, from_minutes

logger = logging.getLogger(__name__)


SCHEDULE_FUNCTION_NAME = "generate_daily_schedule"

NO_TASKS_RECOMMENDATION = "No tasks scheduled for today. Great time for planning or self-care!"

SYSTEM_PROMPT = (
    "You are an expert scheduling assistant that builds realistic, energy-aware daily plans.\n\n"
    "CORE PRINCIPLES:\n"
    "- Place demanding, high-energy tasks inside the user's peak energy window\n"
    "- Put routine or low-energy work in the low-energy window\n"
    "- Group tasks with the same focus type to minimize context switching\n"
    "- Leave buffers between intense tasks and keep total buffer time near 15-20% of the day\n"
    "- Respect work hours, breaks and blocked times exactly\n\n"
    "HARD RULES:\n"
    "- Time blocks and buffer blocks must never overlap each other\n"
    "- Every block ends after it starts and stays within the same day (24h HH:MM)\n"
    "- Each task appears in at most one time block, referenced by its exact task_id\n"
    "- Only schedule the tasks you are given"
)


class ScheduleRequestError(Exception):
    """The reasoning service did not produce a usable schedule."""


def empty_schedule() -> ProposedSchedule:
    """The canonical schedule for a day with nothing to do."""
    return ProposedSchedule(
        time_blocks=[],
        buffer_blocks=[],
        recommendations=[NO_TASKS_RECOMMENDATION],
        work_life_balance=WorkLifeBalance(
            work_time=0,
            personal_time=8,
            break_time=1,
            balance_score=1.0,
        ),
    )


def schedule_output_schema() -> dict:
    return ProposedSchedule.model_json_schema()


def _describe_task(task: Task) -> str:
    energy = task.energy_level_required.value if task.energy_level_required else "unspecified"
    duration = f"{task.estimated_duration} min" if task.estimated_duration else "unspecified"
    difficulty = task.difficulty_level if task.difficulty_level is not None else "unspecified"
    return (
        f"- task_id={task.id} | \"{task.title}\" | type: {task.type.value} | "
        f"priority: {task.priority.value} | duration: {duration} | "
        f"energy: {energy} | difficulty: {difficulty}/10"
    )


def build_schedule_prompt(
    pattern: EnergyPattern,
    constraints: ScheduleConstraints,
    tasks: Sequence[Task],
    day: date,
) -> str:
    """Build the user prompt describing the day to plan."""
    breaks = ", ".join(f"{name}: {window}" for name, window in constraints.breaks.items()) or "none"
    lines = [
        f"Create an optimized schedule for {day.strftime('%A')}, {day.isoformat()}.",
        "",
        f"ENERGY PATTERN ({pattern.type}):",
        f"- Peak energy: {pattern.peak}",
        f"- Secondary peak: {pattern.secondary_peak}",
        f"- Low energy: {pattern.low}",
        "",
        "CONSTRAINTS:",
        f"- Work hours: {constraints.work_hours.start}-{constraints.work_hours.end}",
        f"- Breaks: {breaks}",
        f"- Blocked times: {', '.join(constraints.blocked_times) or 'none'}",
        f"- Preferred work times: {', '.join(constraints.preferred_work_times) or 'none'}",
        "",
        f"TASKS TO SCHEDULE ({len(tasks)}):",
    ]
    lines.extend(_describe_task(task) for task in tasks)
    lines.extend([
        "",
        "REQUIREMENTS:",
        "1. Use each task's estimated duration for its block length",
        "2. Add 15-minute buffers between demanding tasks",
        "3. Include at least 3 breaks across the day",
        "4. Set focus_type per block so similar work is grouped",
        "5. Explain each placement in optimization_reason",
        "6. Fill energy_optimization with task_ids and break start times",
        "7. Estimate work_life_balance in hours with a 0-1 balance_score",
        f"Return the result by calling {SCHEDULE_FUNCTION_NAME}.",
    ])
    return "\n".join(lines)


def validate_proposal(payload: dict, tasks: Sequence[Task]) -> ProposedSchedule:
    """
    Validate an untrusted schedule payload against the candidate tasks.

    Blocks come back sorted chronologically, with missing titles filled in.
    """
    try:
        proposal = ProposedSchedule.model_validate(payload)
    except ValidationError as e:
        raise ScheduleRequestError(f"Schedule payload failed validation: {e.error_count()} error(s)") from e

    titles = {task.id: task.title for task in tasks}
    placed = set()
    for block in proposal.time_blocks:
        if block.task_id not in titles:
            raise ScheduleRequestError(f"Block {block.start_time}-{block.end_time} references unknown task {block.task_id}")
        if block.task_id in placed:
            raise ScheduleRequestError(f"Task {block.task_id} appears in more than one block")
        placed.add(block.task_id)

    intervals = [(b.start_minutes, b.end_minutes) for b in proposal.time_blocks]
    intervals += [(b.start_minutes, b.end_minutes) for b in proposal.buffer_blocks]
    clash = first_overlap(intervals)
    if clash is not None:
        (a_start, a_end), (b_start, b_end) = clash
        raise ScheduleRequestError(
            f"Overlapping intervals {from_minutes(a_start)}-{from_minutes(a_end)} "
            f"and {from_minutes(b_start)}-{from_minutes(b_end)}"
        )

    time_blocks = sorted(
        (
            block if block.task_title else block.model_copy(update={"task_title": titles[block.task_id]})
            for block in proposal.time_blocks
        ),
        key=lambda b: b.start_minutes,
    )
    buffer_blocks = sorted(proposal.buffer_blocks, key=lambda b: b.start_minutes)
    return proposal.model_copy(update={"time_blocks": time_blocks, "buffer_blocks": buffer_blocks})


class ScheduleRequester:
    """Primary planning path through the reasoning service."""

    def __init__(self, reasoning_client: ReasoningClientInterface):
        self.reasoning_client = reasoning_client

    async def request(
        self,
        pattern: EnergyPattern,
        constraints: ScheduleConstraints,
        tasks: List[Task],
        day: date,
    ) -> ProposedSchedule:
        """
        Ask the reasoning service for a schedule.

        An empty task list returns the canonical empty schedule without a
        service call. Durations and difficulty are passed through as given.
        """
        if not tasks:
            return empty_schedule()

        prompt = build_schedule_prompt(pattern, constraints, tasks, day)
        try:
            payload = await self.reasoning_client.propose(
                SYSTEM_PROMPT,
                prompt,
                schedule_output_schema(),
                SCHEDULE_FUNCTION_NAME,
            )
        except Exception as e:
            raise ScheduleRequestError(f"Reasoning service call failed: {e}") from e

        if not isinstance(payload, dict):
            raise ScheduleRequestError("Reasoning service returned no structured schedule")

        proposal = validate_proposal(payload, tasks)
        logger.info(f"Reasoning service proposed {len(proposal.time_blocks)} blocks for {day.isoformat()}")
        return proposal
