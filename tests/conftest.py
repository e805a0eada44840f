"""
DAYFLOW Planner API - Test Configuration

Shared fixtures for CI-safe testing without MongoDB or OpenAI.
"""

import pytest
from datetime import date, datetime, timezone, timedelta
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from dayflow.main import app
from dayflow.auth.service import AuthService
from dayflow.database import get_database
from dayflow.reasoning.client import ReasoningClientInterface, get_reasoning_client
from dayflow.tasks.enums import EnergyLevel, TaskPriority, TaskStatus, TaskType
from dayflow.tasks.models import Task
from dayflow.tasks.repository import InMemoryTaskRepository
from dayflow.tasks.router import get_task_repository
from dayflow.xp.repository import InMemoryXPRepository
from dayflow.xp.router import get_xp_repository
from dayflow.preferences.repository import InMemoryPreferencesRepository
from dayflow.preferences.router import get_preferences_repository
from dayflow.scheduling.repository import InMemoryScheduleRepository
from dayflow.scheduling.router import get_schedule_repository


class FakeReasoningClient(ReasoningClientInterface):
    """
    Canned reasoning service.

    payloads maps a function name to what propose() returns for it
    (missing names return None). Setting error makes every call raise.
    """

    def __init__(self):
        self.payloads: Dict[str, Any] = {}
        self.error: Optional[Exception] = None
        self.calls: List[dict] = []

    def reset(self) -> None:
        self.payloads = {}
        self.error = None
        self.calls = []

    async def propose(
        self,
        system_prompt: str,
        user_prompt: str,
        schema: Dict[str, Any],
        name: str,
    ) -> Optional[Dict[str, Any]]:
        self.calls.append({
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "schema": schema,
            "name": name,
        })
        if self.error is not None:
            raise self.error
        return self.payloads.get(name)


# Global in-memory stores for tests
_task_repository = InMemoryTaskRepository()
_xp_repository = InMemoryXPRepository()
_preferences_repository = InMemoryPreferencesRepository()
_schedule_repository = InMemoryScheduleRepository()
_reasoning_client = FakeReasoningClient()


async def override_get_task_repository():
    return _task_repository


async def override_get_xp_repository():
    return _xp_repository


async def override_get_preferences_repository():
    return _preferences_repository


async def override_get_schedule_repository():
    return _schedule_repository


def override_get_reasoning_client():
    return _reasoning_client


async def override_get_database():
    """Repositories are overridden, so the database handle is never used."""
    return MagicMock()


@pytest.fixture
def task_repository():
    """Provide a fresh in-memory task repository for each test."""
    _task_repository.clear()
    return _task_repository


@pytest.fixture
def xp_repository():
    _xp_repository.clear()
    return _xp_repository


@pytest.fixture
def preferences_repository():
    _preferences_repository.clear()
    return _preferences_repository


@pytest.fixture
def schedule_repository():
    _schedule_repository.clear()
    return _schedule_repository


@pytest.fixture
def reasoning_client():
    """The fake reasoning service, with no canned payloads."""
    _reasoning_client.reset()
    return _reasoning_client


@pytest.fixture
def client(task_repository, xp_repository, preferences_repository, schedule_repository, reasoning_client):
    """Create test client with every store in memory."""
    app.dependency_overrides[get_task_repository] = override_get_task_repository
    app.dependency_overrides[get_xp_repository] = override_get_xp_repository
    app.dependency_overrides[get_preferences_repository] = override_get_preferences_repository
    app.dependency_overrides[get_schedule_repository] = override_get_schedule_repository
    app.dependency_overrides[get_reasoning_client] = override_get_reasoning_client
    app.dependency_overrides[get_database] = override_get_database

    yield TestClient(app)
    app.dependency_overrides.clear()


def bearer_headers(user_id: str) -> dict:
    """Authorization headers with a token signed by the app's own secret."""
    token = AuthService().create_access_token(user_id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user_id() -> str:
    return "user-1"


@pytest.fixture
def auth_headers(user_id):
    """Create Authorization headers for authenticated requests."""
    return bearer_headers(user_id)


@pytest.fixture
def second_auth_headers():
    """Authorization headers for a second user."""
    return bearer_headers("user-2")


# Time control fixtures for deterministic testing
class FrozenClock:
    """A clock that returns a fixed time for deterministic testing."""

    def __init__(self, frozen_time: datetime):
        self._frozen_time = frozen_time

    def __call__(self) -> datetime:
        return self._frozen_time

    def set(self, new_time: datetime) -> None:
        self._frozen_time = new_time

    def advance(self, delta: timedelta) -> None:
        self._frozen_time += delta


@pytest.fixture
def frozen_now() -> datetime:
    """A fixed 'now' time for testing (a Wednesday)."""
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def frozen_clock(frozen_now) -> FrozenClock:
    return FrozenClock(frozen_now)


@pytest.fixture
def today(frozen_now) -> date:
    return frozen_now.date()


def make_task(
    title: str = "Task",
    owner_id: str = "user-1",
    scheduled_date: date = date(2025, 1, 15),
    priority: TaskPriority = TaskPriority.MEDIUM,
    status: TaskStatus = TaskStatus.PENDING,
    type: TaskType = TaskType.ONE_TIME,
    estimated_duration: Optional[int] = 30,
    energy_level_required: Optional[EnergyLevel] = None,
    difficulty_level: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Build a Task with sensible defaults for unit tests."""
    return Task.create(
        owner_id=owner_id,
        title=title,
        scheduled_date=scheduled_date,
        type=type,
        priority=priority,
        status=status,
        estimated_duration=estimated_duration,
        energy_level_required=energy_level_required,
        difficulty_level=difficulty_level,
        now=now,
    )
