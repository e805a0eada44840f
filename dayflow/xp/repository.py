"""
DAYFLOW Planner API - XP Repository

Stores the per-user XP total. Awards go through increment(), which is a
single atomic store operation so concurrent completions never lose credit.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.xp.models import UserXP


class XPRepositoryInterface(ABC):
    """Abstract interface for XP storage."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserXP]:
        pass

    @abstractmethod
    async def increment(self, user_id: str, amount: int) -> UserXP:
        """Atomically add amount to the user's total and return the new state."""
        pass


class MongoXPRepository(XPRepositoryInterface):
    """MongoDB implementation using $inc with upsert."""

    COLLECTION_NAME = "user_xp"

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[self.COLLECTION_NAME]

    async def get(self, user_id: str) -> Optional[UserXP]:
        doc = await self.collection.find_one({"_id": user_id})
        if doc is None:
            return None
        return UserXP.from_dict(doc)

    async def increment(self, user_id: str, amount: int) -> UserXP:
        result = await self.collection.find_one_and_update(
            {"_id": user_id},
            {
                "$inc": {"total_xp": amount},
                "$set": {"updated_at": datetime.now(timezone.utc)},
            },
            upsert=True,
            return_document=True,
        )
        return UserXP.from_dict(result)


class InMemoryXPRepository(XPRepositoryInterface):
    """
    In-memory implementation for CI-safe testing.

    increment() never awaits between read and write, so it is atomic with
    respect to other coroutines on the same event loop.
    """

    def __init__(self):
        self._totals: dict[str, UserXP] = {}

    def clear(self) -> None:
        self._totals.clear()

    async def get(self, user_id: str) -> Optional[UserXP]:
        return self._totals.get(user_id)

    async def increment(self, user_id: str, amount: int) -> UserXP:
        current = self._totals.get(user_id)
        if current is None:
            current = UserXP(user_id=user_id)
            self._totals[user_id] = current
        current.total_xp += amount
        current.updated_at = datetime.now(timezone.utc)
        return UserXP(user_id=user_id, total_xp=current.total_xp, updated_at=current.updated_at)
