from fastapi import APIRouter, Depends

from api.backend import TaskService
from api.dependencies import get_owner_id, get_task_service
from taskgrove.models import ProgressReport, UserStatsSnapshot

router = APIRouter()


@router.get("/stats")
async def get_stats(
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> UserStatsSnapshot:
    return await service.get_stats(owner_id)


@router.get("/stats/progress")
async def get_progress(
    owner_id: str = Depends(get_owner_id),
    service: TaskService = Depends(get_task_service),
) -> ProgressReport:
    """Stats plus tree stage and earned achievements."""
    return await service.get_progress(owner_id)
