"""
DAYFLOW Planner API - Constraint Gatherer Tests
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from dayflow.tasks.enums import TaskStatus, TaskType
from dayflow.tasks.repository import InMemoryTaskRepository
from dayflow.preferences.models import UserPreferences
from dayflow.preferences.repository import InMemoryPreferencesRepository
from dayflow.scheduling.constraints import ConstraintGatherer
from dayflow.scheduling.schemas import ScheduleConstraints

from tests.conftest import make_task


DAY = date(2025, 1, 15)
USER = "user-1"


class BrokenPreferencesRepository(InMemoryPreferencesRepository):
    async def get(self, user_id):
        raise ConnectionError("preferences store unavailable")


class BrokenTaskRepository(InMemoryTaskRepository):
    async def list_by_owner(self, *args, **kwargs):
        raise ConnectionError("task store unavailable")

    async def list_completed(self, owner_id, limit):
        raise ConnectionError("task store unavailable")


@pytest.fixture
def tasks():
    return InMemoryTaskRepository()


@pytest.fixture
def preferences():
    return InMemoryPreferencesRepository()


@pytest.fixture
def gatherer(tasks, preferences):
    return ConstraintGatherer(tasks, preferences)


class TestGatherTasks:

    async def test_collects_scheduled_habits_and_overdue(self, gatherer, tasks):
        scheduled = await tasks.create(make_task("Today", scheduled_date=DAY))
        habit = await tasks.create(
            make_task("Meditate", type=TaskType.DAILY_HABIT, scheduled_date=DAY - timedelta(days=10))
        )
        overdue = await tasks.create(make_task("Late", scheduled_date=DAY - timedelta(days=2)))
        await tasks.create(make_task("Tomorrow", scheduled_date=DAY + timedelta(days=1)))

        candidates = await gatherer.gather_tasks(USER, DAY)
        assert [t.id for t in candidates] == [scheduled.id, habit.id, overdue.id]

    async def test_task_in_two_groups_appears_once(self, gatherer, tasks):
        habit = await tasks.create(make_task("Stretch", type=TaskType.DAILY_HABIT, scheduled_date=DAY))
        candidates = await gatherer.gather_tasks(USER, DAY)
        assert [t.id for t in candidates] == [habit.id]

    async def test_completed_tasks_skipped(self, gatherer, tasks):
        await tasks.create(make_task("Done", status=TaskStatus.COMPLETED))
        await tasks.create(make_task("Done habit", type=TaskType.DAILY_HABIT, status=TaskStatus.COMPLETED))
        assert await gatherer.gather_tasks(USER, DAY) == []

    async def test_at_most_three_overdue(self, gatherer, tasks):
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        for i in range(5):
            await tasks.create(
                make_task(f"Late {i}", scheduled_date=DAY - timedelta(days=1), now=base + timedelta(hours=i))
            )
        candidates = await gatherer.gather_tasks(USER, DAY)
        assert len(candidates) == 3

    async def test_other_users_tasks_ignored(self, gatherer, tasks):
        await tasks.create(make_task("Not mine", owner_id="user-2"))
        assert await gatherer.gather_tasks(USER, DAY) == []

    async def test_failed_read_gives_empty_list(self, preferences):
        gatherer = ConstraintGatherer(BrokenTaskRepository(), preferences)
        assert await gatherer.gather_tasks(USER, DAY) == []
        assert await gatherer.completion_history(USER) == []


class TestGatherConstraints:

    async def test_no_preferences_gives_defaults(self, gatherer):
        assert await gatherer.gather_constraints(USER) == ScheduleConstraints()

    async def test_stored_preferences_applied(self, gatherer, preferences):
        await preferences.upsert(
            UserPreferences(
                user_id=USER,
                work_start="08:00",
                work_end="16:00",
                break_preferences={"lunch": "12:30-13:00"},
                blocked_times=["10:00-11:00"],
                preferred_work_times=["08:00-10:00"],
            )
        )
        constraints = await gatherer.gather_constraints(USER)
        assert constraints.work_hours.start == "08:00"
        assert constraints.work_hours.end == "16:00"
        assert constraints.breaks == {"lunch": "12:30-13:00"}
        assert constraints.blocked_times == ["10:00-11:00"]
        assert constraints.preferred_work_times == ["08:00-10:00"]

    async def test_partial_preferences_keep_defaults(self, gatherer, preferences):
        await preferences.upsert(UserPreferences(user_id=USER, blocked_times=["15:00-16:00"]))
        constraints = await gatherer.gather_constraints(USER)
        assert constraints.work_hours.start == "09:00"
        assert constraints.breaks == {"lunch": "12:00-13:00"}
        assert constraints.blocked_times == ["15:00-16:00"]

    async def test_failed_read_gives_defaults(self, tasks):
        gatherer = ConstraintGatherer(tasks, BrokenPreferencesRepository())
        assert await gatherer.gather_constraints(USER) == ScheduleConstraints()


class TestCompletionHistory:

    async def test_newest_completions_first(self, gatherer, tasks):
        older = make_task("Older", status=TaskStatus.COMPLETED, now=datetime(2025, 1, 10, 9, tzinfo=timezone.utc))
        newer = make_task("Newer", status=TaskStatus.COMPLETED, now=datetime(2025, 1, 12, 9, tzinfo=timezone.utc))
        await tasks.create(older)
        await tasks.create(newer)
        await tasks.create(make_task("Open"))

        history = await gatherer.completion_history(USER)
        assert [t.id for t in history] == [newer.id, older.id]
