import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api import state
from api.dependencies import TASK_STORE, get_task_service
from api.metrics import ERRORS_TOTAL
from api.routers import extract, ops, stats, tasks
from storage import db
from taskgrove.errors import TaskGroveError

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TaskGrove")

app.include_router(extract.router)
app.include_router(tasks.router)
app.include_router(stats.router)
app.include_router(ops.router)


@app.exception_handler(TaskGroveError)
async def handle_taskgrove_error(request: Request, exc: TaskGroveError) -> JSONResponse:
    cause = exc.__cause__
    if cause is not None:
        logger.error(f"{request.method} {request.url.path} failed ({exc.kind}): {exc.message}; cause: {cause!r}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.kind}): {exc.message}")
    ERRORS_TOTAL.labels(kind=exc.kind).inc()
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("startup")
async def startup() -> None:
    if TASK_STORE == "postgres":
        await db.init_db_pool()
        await db.init_schema()
    get_task_service()
    logger.info(f"TaskGrove started (task store: {TASK_STORE})")


@app.on_event("shutdown")
async def shutdown() -> None:
    if TASK_STORE == "postgres":
        await db.close_db_pool()
    state.task_service = None
    state.task_store = None
