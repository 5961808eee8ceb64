"""
Task persistence interface.

The core only needs a narrow, owner-partitioned view of the task table:
insert, two queries, update, and the delete variants. Every implementation
reports a missing or foreign task as NotFoundOrForbidden and any backend
failure as PersistenceFailed.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List

from pydantic import ValidationError

from taskgrove.errors import NotFoundOrForbidden, PersistenceFailed
from taskgrove.models import Task, TaskCreate

logger = logging.getLogger(__name__)

# columns a caller may change through update()
MUTABLE_FIELDS = frozenset({
    "title",
    "description",
    "priority",
    "estimated_hours",
    "due_date",
    "status",
    "completed_at",
    "updated_at",
})


class TaskStore(ABC):

    @abstractmethod
    async def insert(self, task: TaskCreate) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def query_by_owner_and_range(
        self, owner_id: str, start: datetime, end: datetime
    ) -> List[Task]:
        """Tasks with a due date in [start, end], earliest first."""
        raise NotImplementedError

    @abstractmethod
    async def query_by_owner(self, owner_id: str) -> List[Task]:
        """All tasks of the owner, newest first."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, task_id: int, owner_id: str, changes: dict) -> Task:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, task_id: int, owner_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete_many(self, task_ids: Iterable[int], owner_id: str) -> int:
        """Delete the listed tasks the owner actually owns; returns how many."""
        raise NotImplementedError

    @abstractmethod
    async def delete_all(self, owner_id: str) -> int:
        raise NotImplementedError


def check_changes(changes: dict) -> None:
    unknown = set(changes) - MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")


class InMemoryTaskStore(TaskStore):
    """Dict-backed store used by default and in tests."""

    def __init__(self):
        self._tasks: Dict[int, Task] = {}
        self._next_id = 1

    def _owned(self, task_id: int, owner_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None or task.owner_id != owner_id:
            raise NotFoundOrForbidden(task_id)
        return task

    async def insert(self, task: TaskCreate) -> Task:
        try:
            record = Task(id=self._next_id, updated_at=task.created_at, **task.model_dump())
        except ValidationError as e:
            raise PersistenceFailed("Task record rejected by the store") from e
        self._tasks[record.id] = record
        self._next_id += 1
        return record

    async def query_by_owner_and_range(
        self, owner_id: str, start: datetime, end: datetime
    ) -> List[Task]:
        found = [
            t for t in self._tasks.values()
            if t.owner_id == owner_id and t.due_date is not None and start <= t.due_date <= end
        ]
        return sorted(found, key=lambda t: t.due_date)

    async def query_by_owner(self, owner_id: str) -> List[Task]:
        found = [t for t in self._tasks.values() if t.owner_id == owner_id]
        return sorted(found, key=lambda t: (t.created_at, t.id), reverse=True)

    async def update(self, task_id: int, owner_id: str, changes: dict) -> Task:
        check_changes(changes)
        current = self._owned(task_id, owner_id)
        merged = {**current.model_dump(), **changes}
        if merged["completed_at"] is not None and merged["completed_at"] < current.created_at:
            # a skewed clock must not stamp a completion before creation
            merged["completed_at"] = current.created_at
        try:
            updated = Task.model_validate(merged)
        except ValidationError as e:
            raise PersistenceFailed("Task record rejected by the store") from e
        self._tasks[task_id] = updated
        return updated

    async def delete(self, task_id: int, owner_id: str) -> None:
        self._owned(task_id, owner_id)
        del self._tasks[task_id]

    async def delete_many(self, task_ids: Iterable[int], owner_id: str) -> int:
        deleted = 0
        for task_id in set(task_ids):
            task = self._tasks.get(task_id)
            if task is not None and task.owner_id == owner_id:
                del self._tasks[task_id]
                deleted += 1
        return deleted

    async def delete_all(self, owner_id: str) -> int:
        ids = [i for i, t in self._tasks.items() if t.owner_id == owner_id]
        for task_id in ids:
            del self._tasks[task_id]
        logger.info(f"Deleted all {len(ids)} tasks for owner {owner_id}")
        return len(ids)
