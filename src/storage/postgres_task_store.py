import logging
from datetime import datetime
from typing import Iterable, List

import asyncpg

from storage import db
from storage.task_store import TaskStore, check_changes
from taskgrove.errors import NotFoundOrForbidden, PersistenceFailed
from taskgrove.models import Task, TaskCreate

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, owner_id, title, description, priority, estimated_hours, due_date, "
    "status, created_at, completed_at, updated_at"
)


def _to_task(record) -> Task:
    return Task(**dict(record))


def _assignment(name: str, param: int) -> str:
    if name == "completed_at":
        # never earlier than created_at, even with a skewed clock
        return (
            f"completed_at = CASE WHEN ${param}::timestamptz IS NULL THEN NULL "
            f"ELSE GREATEST(${param}::timestamptz, created_at) END"
        )
    return f"{name} = ${param}"


class PostgresTaskStore(TaskStore):
    """asyncpg-backed task table (see storage/schema.sql)."""

    async def _run(self, call, *args):
        try:
            return await call(*args)
        except (asyncpg.PostgresError, OSError, RuntimeError) as e:
            logger.error(f"Task store query failed: {e}")
            raise PersistenceFailed("The task store is unavailable") from e

    async def insert(self, task: TaskCreate) -> Task:
        query = f"""
            INSERT INTO tasks (
                owner_id, title, description, priority, estimated_hours,
                due_date, status, created_at, completed_at, updated_at
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $8)
            RETURNING {_COLUMNS}
        """
        record = await self._run(
            db.fetchrow,
            query,
            task.owner_id,
            task.title,
            task.description,
            task.priority,
            task.estimated_hours,
            task.due_date,
            task.status,
            task.created_at,
            task.completed_at,
        )
        logger.info(f"Inserted task {record['id']} for owner {task.owner_id}")
        return _to_task(record)

    async def query_by_owner_and_range(
        self, owner_id: str, start: datetime, end: datetime
    ) -> List[Task]:
        query = f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE owner_id = $1 AND due_date >= $2 AND due_date <= $3
            ORDER BY due_date
        """
        rows = await self._run(db.fetch, query, owner_id, start, end)
        return [_to_task(r) for r in rows]

    async def query_by_owner(self, owner_id: str) -> List[Task]:
        query = f"""
            SELECT {_COLUMNS} FROM tasks
            WHERE owner_id = $1
            ORDER BY created_at DESC, id DESC
        """
        rows = await self._run(db.fetch, query, owner_id)
        return [_to_task(r) for r in rows]

    async def update(self, task_id: int, owner_id: str, changes: dict) -> Task:
        check_changes(changes)
        if not changes:
            record = await self._run(
                db.fetchrow,
                f"SELECT {_COLUMNS} FROM tasks WHERE id = $1 AND owner_id = $2",
                task_id,
                owner_id,
            )
        else:
            # column names come from MUTABLE_FIELDS only
            names = sorted(changes)
            assignments = ", ".join(_assignment(name, i + 3) for i, name in enumerate(names))
            query = f"""
                UPDATE tasks SET {assignments}
                WHERE id = $1 AND owner_id = $2
                RETURNING {_COLUMNS}
            """
            record = await self._run(
                db.fetchrow, query, task_id, owner_id, *[changes[n] for n in names]
            )

        if record is None:
            raise NotFoundOrForbidden(task_id)
        return _to_task(record)

    async def delete(self, task_id: int, owner_id: str) -> None:
        status = await self._run(
            db.execute,
            "DELETE FROM tasks WHERE id = $1 AND owner_id = $2",
            task_id,
            owner_id,
        )
        if db.affected_rows(status) == 0:
            raise NotFoundOrForbidden(task_id)

    async def delete_many(self, task_ids: Iterable[int], owner_id: str) -> int:
        ids = sorted(set(task_ids))
        if not ids:
            return 0
        status = await self._run(
            db.execute,
            "DELETE FROM tasks WHERE owner_id = $1 AND id = ANY($2::bigint[])",
            owner_id,
            ids,
        )
        return db.affected_rows(status)

    async def delete_all(self, owner_id: str) -> int:
        status = await self._run(
            db.execute, "DELETE FROM tasks WHERE owner_id = $1", owner_id
        )
        deleted = db.affected_rows(status)
        logger.info(f"Deleted all {deleted} tasks for owner {owner_id}")
        return deleted
