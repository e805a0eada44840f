"""
DAYFLOW Planner API - Task Repository

Repository pattern for task data access.
Includes MongoDB implementation for runtime and interface for testing.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from dayflow.tasks.models import Task
from dayflow.tasks.enums import TaskStatus, TaskType


def _as_aware(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TaskRepositoryInterface(ABC):
    """
    Abstract interface for task repository.

    Enables swapping implementations (MongoDB for runtime, in-memory for tests).
    All operations are scoped by owner_id to enforce ownership isolation.
    Tasks are not deleted through the API; delete_many only undoes a
    partially saved batch.
    """

    @abstractmethod
    async def create(self, task: Task) -> Task:
        pass

    @abstractmethod
    async def get_by_id(self, task_id: str, owner_id: str) -> Optional[Task]:
        pass

    @abstractmethod
    async def list_by_owner(
        self,
        owner_id: str,
        status: Optional[TaskStatus] = None,
        task_type: Optional[TaskType] = None,
        scheduled_date: Optional[date] = None,
        scheduled_before: Optional[date] = None,
        exclude_statuses: Optional[List[TaskStatus]] = None,
        created_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        """List tasks for owner with optional filters, newest first."""
        pass

    @abstractmethod
    async def list_completed(self, owner_id: str, limit: int) -> List[Task]:
        """List completed tasks, most recently completed first."""
        pass

    @abstractmethod
    async def update(
        self,
        task_id: str,
        owner_id: str,
        updates: dict,
        expected_statuses: Optional[List[TaskStatus]] = None,
    ) -> Optional[Task]:
        """
        Apply updates and return the updated task.

        With expected_statuses the update only applies while the stored
        status is one of them; None is returned otherwise.
        """
        pass

    @abstractmethod
    async def count_by_owner(self, owner_id: str) -> int:
        pass

    @abstractmethod
    async def delete_many(self, task_ids: List[str], owner_id: str) -> int:
        """Delete the owner's tasks with these ids; returns how many were removed."""
        pass


class TaskRepository(TaskRepositoryInterface):
    """
    MongoDB implementation of the task repository.

    All queries are scoped by owner_id to enforce ownership isolation.
    """

    COLLECTION_NAME = "tasks"

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.COLLECTION_NAME]

    @staticmethod
    def _serialize(updates: dict) -> dict:
        """Convert typed update values to their stored representation."""
        serialized = {}
        for key, value in updates.items():
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, date) and not isinstance(value, datetime):
                value = value.isoformat()
            serialized[key] = value
        return serialized

    async def create(self, task: Task) -> Task:
        await self.collection.insert_one(task.to_dict())
        return task

    async def get_by_id(self, task_id: str, owner_id: str) -> Optional[Task]:
        doc = await self.collection.find_one({"_id": task_id, "owner_id": owner_id})
        if doc is None:
            return None
        return Task.from_dict(doc)

    async def list_by_owner(
        self,
        owner_id: str,
        status: Optional[TaskStatus] = None,
        task_type: Optional[TaskType] = None,
        scheduled_date: Optional[date] = None,
        scheduled_before: Optional[date] = None,
        exclude_statuses: Optional[List[TaskStatus]] = None,
        created_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        query: dict = {"owner_id": owner_id}

        # Explicit status filter wins
        if status is not None:
            query["status"] = status.value
        elif exclude_statuses:
            query["status"] = {"$nin": [s.value for s in exclude_statuses]}

        if task_type is not None:
            query["type"] = task_type.value

        # ISO date strings compare correctly as strings
        if scheduled_date is not None:
            query["scheduled_date"] = scheduled_date.isoformat()
        elif scheduled_before is not None:
            query["scheduled_date"] = {"$lt": scheduled_before.isoformat()}

        if created_since is not None:
            query["created_at"] = {"$gte": created_since}

        cursor = self.collection.find(query).sort("created_at", -1)
        if limit is not None:
            cursor = cursor.limit(limit)
        tasks: List[Task] = []
        async for doc in cursor:
            tasks.append(Task.from_dict(doc))
        return tasks

    async def list_completed(self, owner_id: str, limit: int) -> List[Task]:
        cursor = (
            self.collection.find({
                "owner_id": owner_id,
                "status": TaskStatus.COMPLETED.value,
                "completed_at": {"$ne": None},
            })
            .sort("completed_at", -1)
            .limit(limit)
        )
        tasks: List[Task] = []
        async for doc in cursor:
            tasks.append(Task.from_dict(doc))
        return tasks

    async def update(
        self,
        task_id: str,
        owner_id: str,
        updates: dict,
        expected_statuses: Optional[List[TaskStatus]] = None,
    ) -> Optional[Task]:
        updates = self._serialize(updates)
        updates["updated_at"] = datetime.now(timezone.utc)

        query: dict = {"_id": task_id, "owner_id": owner_id}
        if expected_statuses:
            query["status"] = {"$in": [s.value for s in expected_statuses]}

        result = await self.collection.find_one_and_update(
            query,
            {"$set": updates},
            return_document=True,
        )
        if result is None:
            return None
        return Task.from_dict(result)

    async def count_by_owner(self, owner_id: str) -> int:
        return await self.collection.count_documents({"owner_id": owner_id})

    async def delete_many(self, task_ids: List[str], owner_id: str) -> int:
        result = await self.collection.delete_many({"_id": {"$in": task_ids}, "owner_id": owner_id})
        return result.deleted_count


class InMemoryTaskRepository(TaskRepositoryInterface):
    """
    In-memory implementation for CI-safe testing.
    """

    def __init__(self):
        self._tasks: dict[str, Task] = {}

    def clear(self) -> None:
        self._tasks.clear()

    async def create(self, task: Task) -> Task:
        self._tasks[task.id] = task
        return task

    async def get_by_id(self, task_id: str, owner_id: str) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return None
        return task

    async def list_by_owner(
        self,
        owner_id: str,
        status: Optional[TaskStatus] = None,
        task_type: Optional[TaskType] = None,
        scheduled_date: Optional[date] = None,
        scheduled_before: Optional[date] = None,
        exclude_statuses: Optional[List[TaskStatus]] = None,
        created_since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[Task]:
        results: List[Task] = []

        for task in self._tasks.values():
            if task.owner_id != owner_id:
                continue

            if status is not None and task.status != status:
                continue

            if status is None and exclude_statuses and task.status in exclude_statuses:
                continue

            if task_type is not None and task.type != task_type:
                continue

            if scheduled_date is not None:
                if task.scheduled_date != scheduled_date:
                    continue
            elif scheduled_before is not None and task.scheduled_date >= scheduled_before:
                continue

            if created_since is not None and _as_aware(task.created_at) < created_since:
                continue

            results.append(task)

        results.sort(key=lambda t: t.created_at, reverse=True)
        if limit is not None:
            results = results[:limit]
        return results

    async def list_completed(self, owner_id: str, limit: int) -> List[Task]:
        completed = [
            task
            for task in self._tasks.values()
            if task.owner_id == owner_id
            and task.status == TaskStatus.COMPLETED
            and task.completed_at is not None
        ]
        completed.sort(key=lambda t: _as_aware(t.completed_at), reverse=True)
        return completed[:limit]

    async def update(
        self,
        task_id: str,
        owner_id: str,
        updates: dict,
        expected_statuses: Optional[List[TaskStatus]] = None,
    ) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            return None
        if expected_statuses and task.status not in expected_statuses:
            return None

        for key, value in updates.items():
            if hasattr(task, key):
                setattr(task, key, value)

        task.updated_at = datetime.now(timezone.utc)
        return task

    async def count_by_owner(self, owner_id: str) -> int:
        return sum(1 for t in self._tasks.values() if t.owner_id == owner_id)

    async def delete_many(self, task_ids: List[str], owner_id: str) -> int:
        removed = 0
        for task_id in task_ids:
            task = self._tasks.get(task_id)
            if task is not None and task.owner_id == owner_id:
                del self._tasks[task_id]
                removed += 1
        return removed
