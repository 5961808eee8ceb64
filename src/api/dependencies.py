import os

from fastapi import Header

from api import state
from api.backend import TaskService
from storage.task_store import InMemoryTaskStore, TaskStore

# Configuration
TASK_STORE = os.getenv("TASK_STORE", "memory").strip().lower()
DEFAULT_OWNER_ID = os.getenv("DEFAULT_OWNER_ID", "default")


def build_task_store() -> TaskStore:
    if TASK_STORE == "postgres":
        from storage.postgres_task_store import PostgresTaskStore
        return PostgresTaskStore()
    if TASK_STORE == "memory":
        return InMemoryTaskStore()
    raise ValueError(f"Unknown TASK_STORE: {TASK_STORE}")


def get_task_service() -> TaskService:
    if state.task_service is None:
        state.task_store = state.task_store or build_task_store()
        state.task_service = TaskService(state.task_store)
    return state.task_service


def get_owner_id(x_owner_id: str = Header(default="")) -> str:
    # authentication lives in front of this service; it forwards the principal
    return x_owner_id.strip() or DEFAULT_OWNER_ID
