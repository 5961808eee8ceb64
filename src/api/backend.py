import logging
from datetime import datetime, tzinfo
from typing import Iterable, List, Optional, Union

from pydantic import ValidationError

from extraction.task_structurer import TaskStructurer
from extraction.text_extractor import TextExtractor
from progress.stats import compute_stats
from progress.tree import achievements, tree_progress
from scheduling.deadline_resolver import resolve_deadline
from scheduling.week_window import bucket_by_day, summarize_week, tasks_in_window, week_window
from storage.task_store import TaskStore
from taskgrove.clock import local_timezone, to_local, utcnow
from taskgrove.errors import InvalidCandidate, PersistenceFailed, StatsUnavailable
from taskgrove.models import (
    BatchSaveResult,
    CandidateTask,
    ProgressReport,
    RawMedia,
    SkippedCandidate,
    Task,
    TaskCreate,
    TaskPatch,
    UserStatsSnapshot,
    WeekView,
)

logger = logging.getLogger(__name__)

# fields a patch may not clear
_REQUIRED_ON_PATCH = ("title", "priority", "status")


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    where = ".".join(str(p) for p in first.get("loc", ())) or "candidate"
    return f"{where}: {first.get('msg', 'invalid value')}"


class TaskService:
    """Central orchestration component of TaskGrove.

    Extraction runs synchronously (it blocks on the LLM provider); everything
    touching the task store is async. ``now`` is injectable everywhere so the
    temporal rules can be exercised deterministically.
    """

    def __init__(
        self,
        store: TaskStore,
        extractor: Optional[TextExtractor] = None,
        structurer: Optional[TaskStructurer] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.store = store
        # built up front so a misconfigured provider fails at startup
        self.extractor = extractor or TextExtractor()
        self.structurer = structurer or TaskStructurer(self.extractor.llm_client)
        self.tz = tz or local_timezone()

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_local(now or utcnow(), self.tz)

    # -- extraction -------------------------------------------------------

    def extract_candidates(self, media: RawMedia) -> List[CandidateTask]:
        """Photo or voice memo -> candidate tasks awaiting review."""
        text = self.extractor.extract(media)
        return self.structurer.structure(text)

    # -- persistence ------------------------------------------------------

    async def resolve_and_persist(
        self,
        candidate: Union[CandidateTask, dict],
        owner_id: str,
        now: Optional[datetime] = None,
    ) -> Task:
        now = self._now(now)
        if not isinstance(candidate, CandidateTask):
            try:
                candidate = CandidateTask.model_validate(candidate)
            except ValidationError as e:
                raise InvalidCandidate(_describe(e)) from e

        due = candidate.due_date or resolve_deadline(candidate.deadline_phrase, now, self.tz)
        task = await self.store.insert(TaskCreate(
            owner_id=owner_id,
            title=candidate.title,
            description=candidate.description,
            priority=candidate.priority,
            estimated_hours=candidate.estimated_hours,
            due_date=due,
            created_at=now,
        ))
        logger.info(f"Saved task {task.id} for owner {owner_id} due {task.due_date.isoformat()}")
        return task

    async def save_candidates(
        self,
        candidates: Iterable[Union[CandidateTask, dict]],
        owner_id: str,
        now: Optional[datetime] = None,
    ) -> BatchSaveResult:
        """Save every reviewed candidate independently.

        A bad or unsaveable item is recorded and skipped; items before it stay
        saved and items after it are still attempted.
        """
        now = self._now(now)
        result = BatchSaveResult()
        for index, candidate in enumerate(candidates):
            try:
                task = await self.resolve_and_persist(candidate, owner_id, now)
            except (InvalidCandidate, PersistenceFailed) as e:
                logger.warning(f"Skipping candidate #{index} for owner {owner_id}: {e.message}")
                result.skipped.append(SkippedCandidate(index=index, kind=e.kind, reason=e.message))
                continue
            result.tasks.append(task)
            result.succeeded += 1
        return result

    async def list_tasks(self, owner_id: str) -> List[Task]:
        return await self.store.query_by_owner(owner_id)

    async def update_task(
        self,
        task_id: int,
        owner_id: str,
        patch: TaskPatch,
        now: Optional[datetime] = None,
    ) -> Task:
        now = self._now(now)
        changes = patch.model_dump(exclude_unset=True)
        for key in _REQUIRED_ON_PATCH:
            if key in changes and changes[key] is None:
                raise InvalidCandidate(f"{key} cannot be empty")

        if changes.get("status") == "completed":
            changes["completed_at"] = now
        elif changes.get("status") == "pending":
            # reopening is an ordinary edit
            changes["completed_at"] = None
        changes["updated_at"] = now
        return await self.store.update(task_id, owner_id, changes)

    async def complete_task(self, task_id: int, owner_id: str, now: Optional[datetime] = None) -> Task:
        task = await self.update_task(task_id, owner_id, TaskPatch(status="completed"), now)
        logger.info(f"Task {task_id} completed by owner {owner_id}")
        return task

    async def delete_task(self, task_id: int, owner_id: str) -> None:
        await self.store.delete(task_id, owner_id)

    async def delete_tasks(self, task_ids: Iterable[int], owner_id: str) -> int:
        return await self.store.delete_many(task_ids, owner_id)

    async def delete_all_tasks(self, owner_id: str) -> int:
        return await self.store.delete_all(owner_id)

    # -- derived views ----------------------------------------------------

    async def get_week_view(self, owner_id: str, anchor: str, now: Optional[datetime] = None) -> WeekView:
        now = self._now(now)
        window = week_window(anchor, now, self.tz)

        tasks = await self.store.query_by_owner_and_range(owner_id, window.start, window.end)
        if window.contains(now):
            everything = await self.store.query_by_owner(owner_id)
            tasks += [t for t in everything if t.due_date is None]

        visible = tasks_in_window(tasks, window, now)
        return WeekView(
            anchor=anchor,
            start=window.start,
            end=window.end,
            days=bucket_by_day(visible, window),
            summary=summarize_week(visible, now),
        )

    async def get_stats(self, owner_id: str, now: Optional[datetime] = None) -> UserStatsSnapshot:
        now = self._now(now)
        try:
            tasks = await self.store.query_by_owner(owner_id)
        except PersistenceFailed as e:
            raise StatsUnavailable("Progress statistics are temporarily unavailable") from e
        return compute_stats(tasks, now, self.tz)

    async def get_progress(self, owner_id: str, now: Optional[datetime] = None) -> ProgressReport:
        stats = await self.get_stats(owner_id, now)
        return ProgressReport(
            stats=stats,
            tree=tree_progress(stats.total_completed),
            achievements=achievements(stats),
        )
