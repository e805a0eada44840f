"""
DAYFLOW Planner API - Task Generation Service

Turns goal breakdowns and onboarding conversations into Task records via
the reasoning service. Every proposed field is sanitized before saving.

The two paths fail differently: goal generation raises TaskGenerationError
when nothing usable comes back, onboarding generation returns a
non-success TaskGenerationResult instead.
"""

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, List, Optional

from dayflow.tasks.enums import TaskPriority, TaskType
from dayflow.tasks.models import Task
from dayflow.tasks.repository import TaskRepositoryInterface
from dayflow.tasks.service import TaskService
from dayflow.preferences.repository import PreferencesRepositoryInterface
from dayflow.reasoning.client import ReasoningClientInterface
from dayflow.generation.schemas import (
    GoalBreakdown,
    GoalTaskBatch,
    OnboardingTaskBatch,
    OnboardingTaskRequest,
    TaskGenerationResult,
    TIMEFRAME_DAYS,
)
from dayflow.generation.sanitize import (
    DEFAULT_DURATION,
    sanitize_goal_task,
    sanitize_onboarding_task,
)

logger = logging.getLogger(__name__)


GOAL_FUNCTION_NAME = "generate_daily_tasks"
ONBOARDING_FUNCTION_NAME = "generate_initial_tasks"

GOAL_SYSTEM_PROMPT = (
    "You are a productivity coach who turns goals into concrete, achievable daily tasks.\n"
    "Tasks must be specific, binary (clearly done or not done) and sized for a single day.\n"
    "Balance difficulty across the day and respect the user's scheduling preferences."
)

ONBOARDING_SYSTEM_PROMPT = (
    "You are an onboarding coach creating a user's first set of tasks.\n"
    "Base every task on what the user said about their goals, energy and stress.\n"
    "Start small: early tasks should be easy wins that build momentum."
)

BASE_RECOMMENDATIONS = [
    "Start with easier tasks to build momentum",
    "Review and adjust task timing based on your energy levels",
]


class TaskGenerationError(Exception):
    """The reasoning service produced no usable tasks."""


def _proposed_tasks(payload: Any) -> Optional[List[Any]]:
    """The 'tasks' list from a payload, or None when the shape is wrong."""
    if not isinstance(payload, dict):
        return None
    tasks = payload.get("tasks")
    if not isinstance(tasks, list):
        return None
    return tasks


class TaskGenerationService:
    """Service layer for AI-assisted task generation."""

    def __init__(
        self,
        task_repository: TaskRepositoryInterface,
        preferences_repository: PreferencesRepositoryInterface,
        reasoning_client: ReasoningClientInterface,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.task_repository = task_repository
        self.preferences_repository = preferences_repository
        self.reasoning_client = reasoning_client
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self) -> datetime:
        return self._clock()

    def _today(self) -> date:
        return self._now().date()

    async def _preferences_summary(self, user_id: str) -> str:
        try:
            preferences = await self.preferences_repository.get(user_id)
        except Exception as e:
            logger.warning(f"Could not read preferences for user {user_id}: {e}", exc_info=True)
            preferences = None
        if preferences is None:
            return "No stored preferences (assume 09:00-17:00 work hours)."
        work_hours = (
            f"{preferences.work_start}-{preferences.work_end}"
            if preferences.work_start and preferences.work_end
            else "09:00-17:00"
        )
        return (
            f"Work hours: {work_hours}; "
            f"breaks: {json.dumps(preferences.break_preferences) if preferences.break_preferences else 'default'}; "
            f"blocked: {', '.join(preferences.blocked_times) or 'none'}; "
            f"preferred focus: {', '.join(preferences.preferred_work_times) or 'none'}"
        )

    def _goal_prompt(self, breakdown: GoalBreakdown, preferences: str) -> str:
        lines = [
            f"Goal: {breakdown.title}",
            f"Description: {breakdown.description or 'Not provided'}",
            f"Category: {breakdown.category or 'Unspecified'}",
            f"Weekly tasks: {'; '.join(breakdown.weekly_tasks) or 'none'}",
            f"Daily habits: {'; '.join(breakdown.daily_habits) or 'none'}",
            f"Milestones: {'; '.join(breakdown.milestones) or 'none'}",
            f"Date: {self._today().isoformat()}",
            f"Preferences: {preferences}",
            "",
            "Create 5-8 specific tasks for today that move this goal forward.",
            "For each task give a type (daily_habit, weekly_task, one_time), a priority (low, medium, high),",
            "an estimated duration in minutes, a time slot, the energy level required (low, medium, high),",
            "a difficulty from 1 to 10, context requirements and clear success criteria.",
            f"Return the result by calling {GOAL_FUNCTION_NAME}.",
        ]
        return "\n".join(lines)

    async def _save_all_or_nothing(self, user_id: str, tasks: List[Task]) -> None:
        """
        Save a generated batch. On a failed save the tasks already written
        are deleted again, so a retry never duplicates them.
        """
        saved: List[str] = []
        try:
            for task in tasks:
                await self.task_repository.create(task)
                saved.append(task.id)
        except Exception as e:
            logger.error(f"Failed to save generated tasks for user {user_id}: {e}", exc_info=True)
            if saved:
                try:
                    await self.task_repository.delete_many(saved, user_id)
                except Exception as cleanup_error:
                    logger.error(
                        f"Could not roll back {len(saved)} generated tasks for user {user_id}: {cleanup_error}",
                        exc_info=True,
                    )
            raise TaskGenerationError(f"Generated tasks could not be saved: {e}") from e

    async def generate_from_goal(self, user_id: str, breakdown: GoalBreakdown) -> List[Task]:
        """
        Generate today's tasks for a goal and save them.

        Either every task is saved or none is.

        Raises:
            TaskGenerationError: the reasoning service returned nothing usable,
                or the tasks could not be saved
        """
        preferences = await self._preferences_summary(user_id)
        try:
            payload = await self.reasoning_client.propose(
                GOAL_SYSTEM_PROMPT,
                self._goal_prompt(breakdown, preferences),
                GoalTaskBatch.model_json_schema(),
                GOAL_FUNCTION_NAME,
            )
        except Exception as e:
            raise TaskGenerationError(f"Reasoning service call failed: {e}") from e
        proposals = _proposed_tasks(payload)
        if not proposals:
            raise TaskGenerationError(f"No tasks generated for goal '{breakdown.title}'")

        today = self._today()
        tasks = [
            sanitize_goal_task(raw, user_id, today, breakdown.goal_id, now=self._now())
            for raw in proposals
        ]
        await self._save_all_or_nothing(user_id, tasks)

        logger.info(f"Generated {len(tasks)} tasks for user {user_id} from goal '{breakdown.title}'")
        return tasks

    async def create_recurring_habits(self, user_id: str, breakdown: GoalBreakdown) -> List[Task]:
        """One daily-habit task per habit in the breakdown; no reasoning call."""
        tasks = []
        for habit in breakdown.daily_habits:
            title = habit.strip()
            if not title:
                continue
            task = Task.create(
                owner_id=user_id,
                title=title[:500],
                description=f"Daily habit for goal: {breakdown.title}",
                type=TaskType.DAILY_HABIT,
                priority=TaskPriority.MEDIUM,
                estimated_duration=DEFAULT_DURATION,
                success_criteria=f"Complete: {title[:200]}",
                scheduled_date=self._today(),
                related_goal_id=breakdown.goal_id,
                now=self._now(),
            )
            await self.task_repository.create(task)
            tasks.append(task)
        return tasks

    def _onboarding_prompt(self, request: OnboardingTaskRequest, horizon_days: int) -> str:
        profile = request.basic_profile
        insights = request.ai_insights
        lines = [
            "ONBOARDING CONVERSATION:",
            request.conversation_text.strip() or "(empty)",
            "",
            "PROFILE:",
            f"- Chronotype: {profile.chronotype or 'unknown'}",
            f"- Work style: {profile.work_style or 'unknown'}",
            f"- Stress response: {profile.stress_response or 'unknown'}",
            "",
            "INSIGHTS:",
            f"- Energy peaks: {', '.join(insights.energy_peaks) or 'unknown'}",
            f"- Motivation factors: {', '.join(insights.motivation_factors) or 'unknown'}",
            f"- Stress factors: {', '.join(insights.stress_factors) or 'unknown'}",
            f"- Goals: {', '.join(insights.goals) or 'unknown'}",
            f"- Personality traits: {', '.join(insights.personality_traits) or 'unknown'}",
            "",
            f"Create the user's first tasks for the next {horizon_days} days.",
            "Mix daily habits, weekly tasks and one-time setup tasks, easiest first.",
            f"Return the result by calling {ONBOARDING_FUNCTION_NAME}.",
        ]
        return "\n".join(lines)

    @staticmethod
    def _recommendations(request: OnboardingTaskRequest) -> List[str]:
        insights = request.ai_insights
        recommendations = list(BASE_RECOMMENDATIONS)
        if insights.energy_peaks:
            recommendations.append(
                f"Schedule important tasks during your energy peaks: {', '.join(insights.energy_peaks)}"
            )
        if insights.stress_factors:
            recommendations.append(
                f"Watch out for these stress factors: {', '.join(insights.stress_factors)}"
            )
        if insights.motivation_factors:
            recommendations.append(
                f"Lean on what motivates you: {', '.join(insights.motivation_factors)}"
            )
        return recommendations

    async def generate_from_onboarding(
        self,
        user_id: str,
        request: OnboardingTaskRequest,
    ) -> TaskGenerationResult:
        """
        Generate and save a user's first tasks.

        "No usable response" is reported as success=False with zero tasks.
        A task that fails to save is logged and skipped.
        """
        horizon_days = TIMEFRAME_DAYS[request.timeframe]
        try:
            payload = await self.reasoning_client.propose(
                ONBOARDING_SYSTEM_PROMPT,
                self._onboarding_prompt(request, horizon_days),
                OnboardingTaskBatch.model_json_schema(),
                ONBOARDING_FUNCTION_NAME,
            )
        except Exception as e:
            logger.error(f"Onboarding task generation call failed for user {user_id}: {e}", exc_info=True)
            payload = None
        proposals = _proposed_tasks(payload)
        if not proposals:
            logger.warning(f"Onboarding task generation returned nothing usable for user {user_id}")
            return TaskGenerationResult(
                success=False,
                tasks_generated=0,
                error="No tasks could be generated, please try again",
            )

        today = self._today()
        saved: List[Task] = []
        for index, raw in enumerate(proposals):
            task = sanitize_onboarding_task(
                raw,
                owner_id=user_id,
                index=index,
                total=len(proposals),
                today=today,
                horizon_days=horizon_days,
                now=self._now(),
            )
            try:
                await self.task_repository.create(task)
            except Exception as e:
                logger.error(f"Failed to save onboarding task '{task.title}' for user {user_id}: {e}", exc_info=True)
                continue
            saved.append(task)

        logger.info(f"Generated {len(saved)} onboarding tasks for user {user_id}")
        return TaskGenerationResult(
            success=bool(saved),
            tasks_generated=len(saved),
            tasks=[TaskService.task_to_response(task) for task in saved],
            error=None if saved else "Generated tasks could not be saved",
            recommendations=self._recommendations(request),
        )
