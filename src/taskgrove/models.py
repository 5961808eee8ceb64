from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, List

from pydantic import BaseModel, Field, field_validator, model_validator

from taskgrove.clock import local_timezone


Priority = Literal["low", "medium", "high"]
TaskStatus = Literal["pending", "completed"]
MediaKind = Literal["image", "audio"]
WeekAnchor = Literal["last", "current", "next"]

TITLE_MAX_LEN = 50


def _strip(v):
    return v.strip() if isinstance(v, str) else v


def _aware(v: Optional[datetime]) -> Optional[datetime]:
    # naive timestamps are read as local wall-clock time
    if v is not None and v.tzinfo is None:
        return v.replace(tzinfo=local_timezone())
    return v


class RawMedia(BaseModel):
    """An uploaded image or audio blob. Lives only for one extraction call."""
    data: bytes
    mime_type: str

    @property
    def kind(self) -> Optional[MediaKind]:
        mime = self.mime_type.lower()
        if mime.startswith("image/"):
            return "image"
        if mime.startswith("audio/"):
            return "audio"
        return None


class CandidateTask(BaseModel):
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LEN)
    description: Optional[str] = None
    priority: Priority = "medium"
    estimated_hours: Optional[float] = Field(default=None, gt=0)
    deadline_phrase: Optional[str] = None

    # set by the user while reviewing; wins over deadline_phrase
    due_date: Optional[datetime] = None

    @field_validator("title", "description", "deadline_phrase", mode="before")
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("due_date")
    @classmethod
    def due_date_aware(cls, v):
        return _aware(v)


class TaskCreate(BaseModel):
    owner_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LEN)
    description: Optional[str] = None
    priority: Priority = "medium"
    estimated_hours: Optional[float] = Field(default=None, gt=0)
    due_date: Optional[datetime] = None
    status: TaskStatus = "pending"
    created_at: datetime
    completed_at: Optional[datetime] = None

    @field_validator("due_date", "created_at", "completed_at")
    @classmethod
    def timestamps_aware(cls, v):
        return _aware(v)


class Task(TaskCreate):
    id: int
    updated_at: datetime

    @field_validator("updated_at")
    @classmethod
    def updated_at_aware(cls, v):
        return _aware(v)

    @model_validator(mode="after")
    def check_completion(self) -> "Task":
        if self.status == "completed":
            if self.completed_at is None:
                raise ValueError("completed task must have completed_at")
            if self.completed_at < self.created_at:
                raise ValueError("completed_at must not precede created_at")
        elif self.completed_at is not None:
            raise ValueError("pending task must not have completed_at")
        return self


class TaskPatch(BaseModel):
    """Partial edit. Only fields the caller actually sent are applied."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=TITLE_MAX_LEN)
    description: Optional[str] = None
    priority: Optional[Priority] = None
    estimated_hours: Optional[float] = Field(default=None, gt=0)
    due_date: Optional[datetime] = None
    status: Optional[TaskStatus] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return _strip(v)

    @field_validator("due_date")
    @classmethod
    def due_date_aware(cls, v):
        return _aware(v)


class UserStatsSnapshot(BaseModel):
    total_completed: int = 0
    completed_this_week: int = 0
    overdue_tasks: int = 0
    current_streak: int = 0
    tree_level: int = 1


class TreeProgress(BaseModel):
    level: int
    stage: str
    tasks_into_level: int
    tasks_for_next_level: int
    progress_percent: float


class Achievement(BaseModel):
    key: str
    title: str
    description: str


class ProgressReport(BaseModel):
    stats: UserStatsSnapshot
    tree: TreeProgress
    achievements: List[Achievement] = Field(default_factory=list)


class WeekSummary(BaseModel):
    total: int = 0
    completed: int = 0
    pending: int = 0
    overdue: int = 0


class WeekView(BaseModel):
    anchor: WeekAnchor
    start: datetime
    end: datetime
    # Sunday first
    days: List[List[Task]] = Field(default_factory=list)
    summary: WeekSummary = Field(default_factory=WeekSummary)


class SkippedCandidate(BaseModel):
    index: int
    kind: str
    reason: str


class BatchSaveResult(BaseModel):
    succeeded: int = 0
    tasks: List[Task] = Field(default_factory=list)
    skipped: List[SkippedCandidate] = Field(default_factory=list)
