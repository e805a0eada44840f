"""
DAYFLOW Planner API - Schedule Repository

One schedule per (user, date), stored under the key "user:date".
Saving again for the same day overwrites the previous schedule.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.scheduling.schemas import Schedule, schedule_key


class ScheduleRepositoryInterface(ABC):
    """Abstract interface for schedule storage."""

    @abstractmethod
    async def upsert(self, schedule: Schedule) -> Schedule:
        pass

    @abstractmethod
    async def get(self, user_id: str, day: date) -> Optional[Schedule]:
        pass


class MongoScheduleRepository(ScheduleRepositoryInterface):
    """MongoDB implementation with last-write-wins upserts."""

    COLLECTION_NAME = "schedules"

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[self.COLLECTION_NAME]

    async def upsert(self, schedule: Schedule) -> Schedule:
        doc = schedule.model_dump(mode="json")
        doc["generated_at"] = schedule.generated_at
        doc["last_modified"] = schedule.last_modified
        await self.collection.update_one(
            {"_id": schedule.schedule_id},
            {"$set": doc},
            upsert=True,
        )
        return schedule

    async def get(self, user_id: str, day: date) -> Optional[Schedule]:
        doc = await self.collection.find_one({"_id": schedule_key(user_id, day)})
        if doc is None:
            return None
        doc.pop("_id", None)
        return Schedule.model_validate(doc)


class InMemoryScheduleRepository(ScheduleRepositoryInterface):
    """In-memory implementation for CI-safe testing."""

    def __init__(self):
        self._schedules: dict[str, Schedule] = {}

    def clear(self) -> None:
        self._schedules.clear()

    async def upsert(self, schedule: Schedule) -> Schedule:
        self._schedules[schedule.schedule_id] = schedule
        return schedule

    async def get(self, user_id: str, day: date) -> Optional[Schedule]:
        return self._schedules.get(schedule_key(user_id, day))
