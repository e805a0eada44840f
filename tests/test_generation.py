"""
DAYFLOW Planner API - Task Generation Tests
"""

import pytest
from datetime import datetime, timezone

from dayflow.tasks.enums import TaskPriority, TaskType
from dayflow.tasks.repository import InMemoryTaskRepository
from dayflow.preferences.models import UserPreferences
from dayflow.preferences.repository import InMemoryPreferencesRepository
from dayflow.generation.schemas import GoalBreakdown, OnboardingTaskRequest, AIInsights
from dayflow.generation.service import (
    GOAL_FUNCTION_NAME,
    ONBOARDING_FUNCTION_NAME,
    TaskGenerationError,
    TaskGenerationService,
)

from tests.conftest import FakeReasoningClient


USER = "user-1"

GOAL_PAYLOAD = {
    "tasks": [
        {
            "title": "Research beginner 10k plans",
            "description": "Pick one plan",
            "type": "one_time",
            "priority": "high",
            "estimated_duration": 40,
            "suggested_time_slot": "morning",
            "energy_level_required": "medium",
            "difficulty_level": 3,
            "context_requirements": "Browser",
            "success_criteria": "Plan chosen",
        },
        {
            "title": "Easy run",
            "type": "daily_habit",
            "priority": "medium",
            "estimated_duration": 3000,
            "difficulty_level": 99,
        },
    ]
}


class FailingTaskRepository(InMemoryTaskRepository):
    """Fails to save any task whose title contains 'fail'."""

    async def create(self, task):
        if "fail" in task.title.lower():
            raise ConnectionError("task store unavailable")
        return await super().create(task)


class FlakyTaskRepository(InMemoryTaskRepository):
    """Fails on the Nth create call."""

    def __init__(self, fail_on: int):
        super().__init__()
        self.fail_on = fail_on
        self.create_calls = 0

    async def create(self, task):
        self.create_calls += 1
        if self.create_calls == self.fail_on:
            raise RuntimeError("write rejected")
        return await super().create(task)


FIVE_TASK_PAYLOAD = {"tasks": [{"title": f"Step {i}"} for i in range(5)]}


@pytest.fixture
def tasks():
    return InMemoryTaskRepository()


@pytest.fixture
def preferences():
    return InMemoryPreferencesRepository()


@pytest.fixture
def fake_client():
    return FakeReasoningClient()


@pytest.fixture
def service(tasks, preferences, fake_client, frozen_clock):
    return TaskGenerationService(tasks, preferences, fake_client, clock=frozen_clock)


@pytest.fixture
def breakdown():
    return GoalBreakdown(
        goal_id="goal-1",
        title="Run a 10k",
        category="health",
        daily_habits=["Stretch for 10 minutes", "  "],
        milestones=["First 5k"],
    )


class TestGoalGeneration:

    async def test_tasks_saved_and_sanitized(self, service, tasks, fake_client, breakdown, today):
        fake_client.payloads[GOAL_FUNCTION_NAME] = GOAL_PAYLOAD
        generated = await service.generate_from_goal(USER, breakdown)

        assert len(generated) == 2
        assert await tasks.count_by_owner(USER) == 2
        easy_run = generated[1]
        assert easy_run.type == TaskType.DAILY_HABIT
        assert easy_run.estimated_duration == 480
        assert easy_run.difficulty_level == 10
        assert all(t.scheduled_date == today for t in generated)
        assert all(t.related_goal_id == "goal-1" for t in generated)

    async def test_prompt_includes_goal_and_preferences(self, service, preferences, fake_client, breakdown):
        await preferences.upsert(UserPreferences(user_id=USER, work_start="07:00", work_end="15:00"))
        fake_client.payloads[GOAL_FUNCTION_NAME] = GOAL_PAYLOAD
        await service.generate_from_goal(USER, breakdown)

        prompt = fake_client.calls[0]["user_prompt"]
        assert "Goal: Run a 10k" in prompt
        assert "Work hours: 07:00-15:00" in prompt
        assert fake_client.calls[0]["name"] == GOAL_FUNCTION_NAME

    @pytest.mark.parametrize("payload", [None, {"tasks": []}, {"tasks": "none"}, {"items": []}])
    async def test_nothing_usable_raises(self, service, tasks, fake_client, breakdown, payload):
        fake_client.payloads[GOAL_FUNCTION_NAME] = payload
        with pytest.raises(TaskGenerationError):
            await service.generate_from_goal(USER, breakdown)
        assert await tasks.count_by_owner(USER) == 0

    async def test_client_exception_raises(self, service, fake_client, breakdown):
        fake_client.error = TimeoutError("slow model")
        with pytest.raises(TaskGenerationError):
            await service.generate_from_goal(USER, breakdown)

    async def test_failed_save_leaves_no_tasks(self, preferences, fake_client, frozen_clock, breakdown):
        tasks = FlakyTaskRepository(fail_on=3)
        service = TaskGenerationService(tasks, preferences, fake_client, clock=frozen_clock)
        fake_client.payloads[GOAL_FUNCTION_NAME] = FIVE_TASK_PAYLOAD

        with pytest.raises(TaskGenerationError):
            await service.generate_from_goal(USER, breakdown)
        assert await tasks.list_by_owner(USER) == []

    async def test_retry_after_failed_save_has_no_duplicates(self, preferences, fake_client, frozen_clock, breakdown):
        tasks = FlakyTaskRepository(fail_on=3)
        service = TaskGenerationService(tasks, preferences, fake_client, clock=frozen_clock)
        fake_client.payloads[GOAL_FUNCTION_NAME] = FIVE_TASK_PAYLOAD

        with pytest.raises(TaskGenerationError):
            await service.generate_from_goal(USER, breakdown)
        generated = await service.generate_from_goal(USER, breakdown)

        assert len(generated) == 5
        assert await tasks.count_by_owner(USER) == 5

    async def test_recurring_habits(self, service, tasks, fake_client, breakdown, today):
        habits = await service.create_recurring_habits(USER, breakdown)
        assert [h.title for h in habits] == ["Stretch for 10 minutes"]
        assert habits[0].type == TaskType.DAILY_HABIT
        assert habits[0].scheduled_date == today
        assert fake_client.calls == []


class TestOnboardingGeneration:

    @pytest.fixture
    def request_model(self):
        return OnboardingTaskRequest(
            conversation_text="I want to sleep better and get fit.",
            ai_insights=AIInsights(energy_peaks=["morning"], stress_factors=["deadlines"]),
            timeframe="1_week",
        )

    async def test_tasks_generated(self, service, tasks, fake_client, request_model):
        fake_client.payloads[ONBOARDING_FUNCTION_NAME] = {
            "tasks": [
                {"title": "Daily evening wind-down", "priority": "medium", "estimated_duration": 20, "category": "health"},
                {"title": "Set up workout playlist", "type": "one_time", "priority": "low", "estimated_duration": 15},
                {"title": "Plan meals", "type": "weekly_task", "priority": "high", "estimated_duration": 45},
            ]
        }

        result = await service.generate_from_onboarding(USER, request_model)

        assert result.success is True
        assert result.tasks_generated == 3
        assert result.error is None
        assert await tasks.count_by_owner(USER) == 3
        assert result.tasks[0].type == TaskType.DAILY_HABIT
        assert result.tasks[2].priority == TaskPriority.HIGH
        assert any("energy peaks" in r for r in result.recommendations)
        assert any("deadlines" in r for r in result.recommendations)

    async def test_no_payload_is_reported_not_raised(self, service, tasks, request_model):
        result = await service.generate_from_onboarding(USER, request_model)
        assert result.success is False
        assert result.tasks_generated == 0
        assert result.error
        assert await tasks.count_by_owner(USER) == 0

    async def test_client_exception_is_reported(self, service, fake_client, request_model):
        fake_client.error = ConnectionError("network down")
        result = await service.generate_from_onboarding(USER, request_model)
        assert result.success is False

    async def test_failed_save_skips_task(self, preferences, fake_client, frozen_clock, request_model):
        tasks = FailingTaskRepository()
        service = TaskGenerationService(tasks, preferences, fake_client, clock=frozen_clock)
        fake_client.payloads[ONBOARDING_FUNCTION_NAME] = {
            "tasks": [{"title": "Will fail to save"}, {"title": "Saved fine"}]
        }

        result = await service.generate_from_onboarding(USER, request_model)
        assert result.success is True
        assert result.tasks_generated == 1
        assert [t.title for t in result.tasks] == ["Saved fine"]

    async def test_horizon_follows_timeframe(self, service, fake_client, today):
        fake_client.payloads[ONBOARDING_FUNCTION_NAME] = {
            "tasks": [{"title": f"Weekly review {i}", "type": "weekly_task"} for i in range(4)]
        }
        result = await service.generate_from_onboarding(USER, OnboardingTaskRequest(timeframe="2_days"))
        offsets = sorted((t.scheduled_date - today).days for t in result.tasks)
        assert offsets == [0, 0, 1, 1]
        assert "next 2 days" in fake_client.calls[0]["user_prompt"]


class TestGenerationEndpoints:

    def test_goal_endpoint(self, client, auth_headers, reasoning_client):
        reasoning_client.payloads[GOAL_FUNCTION_NAME] = GOAL_PAYLOAD
        response = client.post(
            "/generation/goal",
            json={"breakdown": {"title": "Run a 10k", "daily_habits": ["Stretch"]}, "create_habits": True},
            headers=auth_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["total"] == 3
        assert data["tasks"][-1]["title"] == "Stretch"

        listed = client.get("/tasks", headers=auth_headers).json()
        assert listed["total"] == 3

    def test_goal_endpoint_unavailable_is_502(self, client, auth_headers):
        response = client.post(
            "/generation/goal",
            json={"breakdown": {"title": "Run a 10k"}},
            headers=auth_headers,
        )
        assert response.status_code == 502

    def test_goal_endpoint_store_failure_is_502(self, client, auth_headers, reasoning_client, task_repository, monkeypatch):
        reasoning_client.payloads[GOAL_FUNCTION_NAME] = FIVE_TASK_PAYLOAD
        original_create = task_repository.create
        calls = []

        async def create_then_fail(task):
            calls.append(task.id)
            if len(calls) == 3:
                raise RuntimeError("write rejected")
            return await original_create(task)

        monkeypatch.setattr(task_repository, "create", create_then_fail)
        response = client.post(
            "/generation/goal",
            json={"breakdown": {"title": "Run a 10k"}},
            headers=auth_headers,
        )
        assert response.status_code == 502
        assert client.get("/tasks", headers=auth_headers).json()["total"] == 0

    def test_goal_endpoint_validates_request(self, client, auth_headers):
        response = client.post("/generation/goal", json={"breakdown": {"title": ""}}, headers=auth_headers)
        assert response.status_code == 422

    def test_onboarding_endpoint_reports_failure_in_body(self, client, auth_headers):
        response = client.post("/generation/onboarding", json={}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["success"] is False

    def test_onboarding_endpoint(self, client, auth_headers, reasoning_client):
        reasoning_client.payloads[ONBOARDING_FUNCTION_NAME] = {"tasks": [{"title": "Daily journal"}]}
        response = client.post(
            "/generation/onboarding",
            json={"conversation_text": "I like writing", "timeframe": "2_weeks"},
            headers=auth_headers,
        )
        data = response.json()
        assert data["success"] is True
        assert data["tasks"][0]["type"] == "daily_habit"
        assert data["tasks"][0]["scheduled_date"] == datetime.now(timezone.utc).date().isoformat()

    def test_onboarding_rejects_unknown_timeframe(self, client, auth_headers):
        response = client.post("/generation/onboarding", json={"timeframe": "1_year"}, headers=auth_headers)
        assert response.status_code == 422
