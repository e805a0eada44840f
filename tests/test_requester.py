"""
DAYFLOW Planner API - Schedule Requester Tests

The reasoning service is replaced by FakeReasoningClient throughout.
"""

import pytest
from datetime import date

from dayflow.tasks.enums import TaskPriority
from dayflow.scheduling.energy import DEFAULT_ENERGY_PATTERN
from dayflow.scheduling.requester import (
    NO_TASKS_RECOMMENDATION,
    SCHEDULE_FUNCTION_NAME,
    ScheduleRequester,
    ScheduleRequestError,
    build_schedule_prompt,
    validate_proposal,
)
from dayflow.scheduling.schemas import ScheduleConstraints

from tests.conftest import FakeReasoningClient, make_task


DAY = date(2025, 1, 15)


@pytest.fixture
def fake_client():
    return FakeReasoningClient()


@pytest.fixture
def requester(fake_client):
    return ScheduleRequester(fake_client)


@pytest.fixture
def tasks():
    return [
        make_task("Write report", priority=TaskPriority.HIGH, estimated_duration=60),
        make_task("Answer email", priority=TaskPriority.LOW, estimated_duration=30),
    ]


def proposal_for(tasks, **overrides):
    payload = {
        "time_blocks": [
            {"start_time": "10:00", "end_time": "10:30", "task_id": tasks[1].id, "focus_type": "admin"},
            {"start_time": "09:00", "end_time": "10:00", "task_id": tasks[0].id, "priority": "high"},
        ],
        "buffer_blocks": [{"start_time": "10:30", "end_time": "10:45", "purpose": "Stretch"}],
        "recommendations": ["Start with the report while fresh"],
        "energy_optimization": {"high_energy_tasks": [tasks[0].id]},
    }
    payload.update(overrides)
    return payload


async def request(requester, tasks):
    return await requester.request(DEFAULT_ENERGY_PATTERN, ScheduleConstraints(), tasks, DAY)


class TestEmptyDay:

    async def test_no_tasks_skips_the_service(self, requester, fake_client):
        schedule = await request(requester, [])
        assert fake_client.calls == []
        assert schedule.time_blocks == []
        assert schedule.recommendations == [NO_TASKS_RECOMMENDATION]
        assert schedule.work_life_balance.work_time == 0
        assert schedule.work_life_balance.personal_time == 8
        assert schedule.work_life_balance.break_time == 1
        assert schedule.work_life_balance.balance_score == 1.0


class TestValidProposal:

    async def test_blocks_sorted_and_titled(self, requester, fake_client, tasks):
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = proposal_for(tasks)
        schedule = await request(requester, tasks)

        assert [b.task_id for b in schedule.time_blocks] == [tasks[0].id, tasks[1].id]
        assert schedule.time_blocks[0].task_title == "Write report"
        assert schedule.time_blocks[1].focus_type == "admin"
        assert schedule.buffer_blocks[0].purpose == "Stretch"
        assert schedule.recommendations == ["Start with the report while fresh"]

    async def test_single_structured_call(self, requester, fake_client, tasks):
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = proposal_for(tasks)
        await request(requester, tasks)

        assert len(fake_client.calls) == 1
        call = fake_client.calls[0]
        assert call["name"] == SCHEDULE_FUNCTION_NAME
        assert "time_blocks" in call["schema"]["properties"]
        assert tasks[0].id in call["user_prompt"]

    async def test_given_title_is_kept(self, requester, fake_client, tasks):
        payload = proposal_for(tasks)
        payload["time_blocks"][1]["task_title"] = "Report (draft)"
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = payload
        schedule = await request(requester, tasks)
        assert schedule.time_blocks[0].task_title == "Report (draft)"


class TestRejectedProposal:

    async def test_no_payload(self, requester, tasks):
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    async def test_client_exception(self, requester, fake_client, tasks):
        fake_client.error = TimeoutError("model timed out")
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    async def test_non_dict_payload(self, requester, fake_client, tasks):
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = ["not", "a", "schedule"]
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    async def test_missing_time_blocks(self, requester, fake_client, tasks):
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = {"recommendations": ["Relax"]}
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    async def test_end_before_start(self, requester, fake_client, tasks):
        payload = proposal_for(tasks)
        payload["time_blocks"][0]["end_time"] = "09:30"
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = payload
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    async def test_overlapping_task_blocks(self, requester, fake_client, tasks):
        payload = proposal_for(tasks)
        payload["time_blocks"][0]["start_time"] = "09:45"
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = payload
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    async def test_buffer_overlapping_task_block(self, requester, fake_client, tasks):
        payload = proposal_for(tasks)
        payload["buffer_blocks"] = [{"start_time": "09:50", "end_time": "10:05", "purpose": "Coffee"}]
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = payload
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    async def test_unknown_task_id(self, requester, fake_client, tasks):
        payload = proposal_for(tasks)
        payload["time_blocks"][0]["task_id"] = "made-up"
        fake_client.payloads[SCHEDULE_FUNCTION_NAME] = payload
        with pytest.raises(ScheduleRequestError):
            await request(requester, tasks)

    def test_task_placed_twice(self, tasks):
        payload = proposal_for(tasks)
        payload["time_blocks"][0]["task_id"] = tasks[0].id
        with pytest.raises(ScheduleRequestError):
            validate_proposal(payload, tasks)


class TestPrompt:

    def test_prompt_describes_day(self, tasks):
        constraints = ScheduleConstraints(blocked_times=["16:00-17:00"])
        prompt = build_schedule_prompt(DEFAULT_ENERGY_PATTERN, constraints, tasks, DAY)
        assert "Wednesday, 2025-01-15" in prompt
        assert "Peak energy: 09:00-11:00" in prompt
        assert "Blocked times: 16:00-17:00" in prompt
        assert "lunch: 12:00-13:00" in prompt
        assert "TASKS TO SCHEDULE (2)" in prompt
        assert "duration: 60 min" in prompt
