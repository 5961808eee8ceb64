import asyncio
import logging
import os
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from api.backend import TaskService
from api.dependencies import get_task_service
from api.metrics import CANDIDATES_EXTRACTED_TOTAL, REQUEST_LATENCY_SECONDS, REQUESTS_TOTAL
from taskgrove.errors import TaskGroveError
from taskgrove.models import RawMedia

router = APIRouter()
logger = logging.getLogger(__name__)

# Config
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))


async def _read_media(request: Request, kind: str) -> RawMedia:
    mime_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if not mime_type.startswith(f"{kind}/"):
        raise HTTPException(status_code=400, detail=f"Only {kind} files are allowed")

    data = await request.body()
    if not data:
        raise HTTPException(status_code=400, detail=f"No {kind} file provided")
    if len(data) > MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail=f"The {kind} exceeds {MAX_UPLOAD_BYTES} bytes")
    return RawMedia(data=data, mime_type=mime_type)


async def _extract(request: Request, kind: str, service: TaskService) -> dict:
    endpoint = f"/extract/{kind}"
    start = time.time()
    media = await _read_media(request, kind)
    logger.info(f"Received {kind} upload ({len(media.data)} bytes, {media.mime_type})")

    try:
        candidates = await asyncio.to_thread(service.extract_candidates, media)
    except TaskGroveError:
        REQUESTS_TOTAL.labels(endpoint=endpoint, status="failed").inc()
        raise

    REQUESTS_TOTAL.labels(endpoint=endpoint, status="processed").inc()
    REQUEST_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    CANDIDATES_EXTRACTED_TOTAL.inc(len(candidates))

    # media is discarded here; only the candidates leave this request
    return {
        "tasks": [c.model_dump(mode="json") for c in candidates],
        "message": f"Extracted {len(candidates)} tasks from {kind}",
    }


@router.post("/extract/image")
async def extract_image(request: Request, service: TaskService = Depends(get_task_service)) -> dict:
    """Photo of notes / whiteboard -> candidate tasks (nothing is saved)."""
    return await _extract(request, "image", service)


@router.post("/extract/audio")
async def extract_audio(request: Request, service: TaskService = Depends(get_task_service)) -> dict:
    """Voice memo -> candidate tasks (nothing is saved)."""
    return await _extract(request, "audio", service)
