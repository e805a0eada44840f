"""
DAYFLOW Planner API - Preferences Repository

One preferences document per user, written with upsert semantics.
"""

from abc import ABC, abstractmethod
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.preferences.models import UserPreferences


class PreferencesRepositoryInterface(ABC):
    """Abstract interface for user preference storage."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserPreferences]:
        pass

    @abstractmethod
    async def upsert(self, preferences: UserPreferences) -> UserPreferences:
        pass


class MongoPreferencesRepository(PreferencesRepositoryInterface):
    """MongoDB implementation keyed by user id."""

    COLLECTION_NAME = "user_preferences"

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[self.COLLECTION_NAME]

    async def get(self, user_id: str) -> Optional[UserPreferences]:
        doc = await self.collection.find_one({"_id": user_id})
        if doc is None:
            return None
        return UserPreferences.from_dict(doc)

    async def upsert(self, preferences: UserPreferences) -> UserPreferences:
        doc = preferences.to_dict()
        user_id = doc.pop("_id")
        await self.collection.update_one(
            {"_id": user_id},
            {"$set": doc},
            upsert=True,
        )
        return preferences


class InMemoryPreferencesRepository(PreferencesRepositoryInterface):
    """In-memory implementation for CI-safe testing."""

    def __init__(self):
        self._preferences: dict[str, UserPreferences] = {}

    def clear(self) -> None:
        self._preferences.clear()

    async def get(self, user_id: str) -> Optional[UserPreferences]:
        return self._preferences.get(user_id)

    async def upsert(self, preferences: UserPreferences) -> UserPreferences:
        self._preferences[preferences.user_id] = preferences
        return preferences
