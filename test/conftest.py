from datetime import datetime, timezone

import pytest

from taskgrove.models import Task


class FakeProvider:
    def __init__(self, response_text: str = "", recognized_text: str = "", error: Exception = None):
        self._response_text = response_text
        self._recognized_text = recognized_text
        self._error = error
        self.calls = []

    def generate(self, *, system: str, user: str) -> str:
        self.calls.append(("generate", user))
        if self._error is not None:
            raise self._error
        return self._response_text

    def recognize(self, *, instruction: str, data: bytes, mime_type: str) -> str:
        self.calls.append(("recognize", mime_type))
        if self._error is not None:
            raise self._error
        return self._recognized_text


@pytest.fixture(autouse=True)
def utc_local_timezone(monkeypatch):
    monkeypatch.setenv("TASKGROVE_TIMEZONE", "UTC")


@pytest.fixture
def fake_provider_factory():
    def _make(response_text: str = "", recognized_text: str = "", error: Exception = None):
        return FakeProvider(response_text, recognized_text, error)
    return _make


@pytest.fixture
def task_factory():
    counter = {"id": 0}

    def _make(
        title: str = "Task",
        due_date: datetime = None,
        status: str = "pending",
        completed_at: datetime = None,
        created_at: datetime = datetime(2026, 1, 1, tzinfo=timezone.utc),
        owner_id: str = "alice",
        priority: str = "medium",
    ) -> Task:
        counter["id"] += 1
        return Task(
            id=counter["id"],
            owner_id=owner_id,
            title=title,
            priority=priority,
            due_date=due_date,
            status=status,
            created_at=created_at,
            completed_at=completed_at,
            updated_at=completed_at or created_at,
        )
    return _make
