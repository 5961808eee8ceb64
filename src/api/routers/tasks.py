import logging
import time
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from api.backend import TaskService
from api.dependencies import get_owner_id, get_task_service
from api.metrics import BATCH_SKIPPED_TOTAL, REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL, TASKS_SAVED_TOTAL
from taskgrove.models import (
    BatchSaveResult,
    CandidateTask,
    Task,
    TaskPatch,
    WeekAnchor,
    WeekView,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class BatchIn(BaseModel):
    # left loose on purpose: each item is validated on its own during the save
    tasks: List[Dict[str, Any]] = Field(default_factory=list)


class BulkDeleteIn(BaseModel):
    task_ids: List[int]


@router.get("/tasks")
async def list_tasks(
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> List[Task]:
    return await service.list_tasks(owner_id)


@router.get("/tasks/week")
async def get_week(
    week: WeekAnchor = "current",
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> WeekView:
    return await service.get_week_view(owner_id, week)


@router.post("/tasks")
async def create_task(
    payload: CandidateTask,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> Task:
    task = await service.resolve_and_persist(payload, owner_id)
    TASKS_SAVED_TOTAL.inc()
    return task


@router.post("/tasks/batch")
async def save_batch(
    payload: BatchIn,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> BatchSaveResult:
    """Save all reviewed candidates; partial success is reported, not rolled back."""
    start = time.time()
    result = await service.save_candidates(payload.tasks, owner_id)

    status = "partial" if result.skipped else "processed"
    REQUESTS_TOTAL.labels(endpoint="/tasks/batch", status=status).inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint="/tasks/batch").observe(time.time() - start)
    TASKS_SAVED_TOTAL.inc(result.succeeded)
    BATCH_SKIPPED_TOTAL.inc(len(result.skipped))

    logger.info(
        f"Batch save for {owner_id}: {result.succeeded} saved, {len(result.skipped)} skipped"
    )
    return result


# /tasks/bulk and /tasks/all must be registered before /tasks/{task_id}
@router.delete("/tasks/bulk")
async def delete_bulk(
    payload: BulkDeleteIn,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> dict:
    deleted = await service.delete_tasks(payload.task_ids, owner_id)
    return {"deleted": deleted, "message": f"Successfully deleted {deleted} tasks"}


@router.delete("/tasks/all")
async def delete_all(
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> dict:
    deleted = await service.delete_all_tasks(owner_id)
    return {"deleted": deleted, "message": "All tasks deleted successfully"}


@router.patch("/tasks/{task_id}")
async def update_task(
    task_id: int,
    patch: TaskPatch,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> Task:
    return await service.update_task(task_id, owner_id, patch)


@router.post("/tasks/{task_id}/complete")
async def complete_task(
    task_id: int,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> dict:
    task = await service.complete_task(task_id, owner_id)
    return {"task": task.model_dump(mode="json"), "celebration": True}


@router.delete("/tasks/{task_id}")
async def delete_task(
    task_id: int,
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> dict:
    await service.delete_task(task_id, owner_id)
    return {"message": "Task deleted successfully"}
