from typing import Optional

from api.backend import TaskService
from storage.task_store import TaskStore

# Global instances initialized at startup
task_store: Optional[TaskStore] = None
task_service: Optional[TaskService] = None
