import json
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from api.backend import TaskService
from api.dependencies import get_task_service
from api.main import app
from extraction.task_structurer import TaskStructurer
from extraction.text_extractor import TextExtractor
from llm.llm_client import LLMClient
from storage.task_store import InMemoryTaskStore

NOTE_REPLY = json.dumps({"tasks": [
    {"title": "Buy milk", "priority": "medium"},
    {"title": "Call mom", "deadline": "tomorrow"},
    {"title": "Finish report", "priority": "high", "deadline": "next week"},
]})


@pytest.fixture
def make_client(fake_provider_factory):
    def _make(response_text: str = NOTE_REPLY, recognized_text: str = "Buy milk. Call mom tomorrow."):
        provider = fake_provider_factory(response_text, recognized_text)
        llm = LLMClient(provider=provider)
        service = TaskService(
            InMemoryTaskStore(),
            TextExtractor(llm),
            TaskStructurer(llm),
            tz=timezone.utc,
        )
        app.dependency_overrides[get_task_service] = lambda: service
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


def test_extract_image_returns_candidates(make_client):
    client = make_client()
    r = client.post("/extract/image", content=b"\x89PNG...", headers={"content-type": "image/png"})
    assert r.status_code == 200
    body = r.json()
    assert [t["title"] for t in body["tasks"]] == ["Buy milk", "Call mom", "Finish report"]
    assert body["tasks"][2]["deadline_phrase"] == "next week"
    assert body["message"] == "Extracted 3 tasks from image"
    # nothing is saved by extraction
    assert client.get("/tasks").json() == []


def test_extract_audio(make_client):
    client = make_client()
    r = client.post("/extract/audio", content=b"webm-bytes", headers={"content-type": "audio/webm;codecs=opus"})
    assert r.status_code == 200
    assert len(r.json()["tasks"]) == 3


def test_extract_rejects_wrong_media_type(make_client):
    client = make_client()
    r = client.post("/extract/image", content=b"hello", headers={"content-type": "text/plain"})
    assert r.status_code == 400
    r = client.post("/extract/audio", content=b"", headers={"content-type": "audio/webm"})
    assert r.status_code == 400


def test_extract_reports_empty_text_as_error_kind(make_client):
    client = make_client(recognized_text="   ")
    r = client.post("/extract/image", content=b"img", headers={"content-type": "image/jpeg"})
    assert r.status_code == 502
    assert r.json() == {"kind": "extraction_failed", "message": "No text could be extracted from the image"}


def test_batch_save_reports_partial_success(make_client):
    client = make_client()
    r = client.post("/tasks/batch", json={"tasks": [
        {"title": "Buy milk"},
        {"title": ""},
        {"title": "Finish report", "priority": "high", "deadline_phrase": "next week"},
    ]})
    assert r.status_code == 200
    body = r.json()
    assert body["succeeded"] == 2
    assert len(body["skipped"]) == 1
    assert body["skipped"][0]["index"] == 1
    assert len({t["id"] for t in body["tasks"]}) == 2
    assert len(client.get("/tasks").json()) == 2


def test_create_complete_and_delete_flow(make_client):
    client = make_client()
    r = client.post("/tasks", json={"title": "Call mom", "deadline_phrase": "tomorrow"})
    assert r.status_code == 200
    task = r.json()
    assert task["status"] == "pending"
    assert task["due_date"] is not None

    r = client.post(f"/tasks/{task['id']}/complete")
    assert r.status_code == 200
    assert r.json()["celebration"] is True
    assert r.json()["task"]["status"] == "completed"

    stats = client.get("/stats").json()
    assert stats["total_completed"] == 1
    assert stats["current_streak"] == 1
    assert stats["tree_level"] == 1

    r = client.delete(f"/tasks/{task['id']}")
    assert r.status_code == 200
    assert client.get("/tasks").json() == []


def test_create_rejects_invalid_task(make_client):
    client = make_client()
    assert client.post("/tasks", json={"title": "x" * 60}).status_code == 422
    assert client.post("/tasks", json={"title": "ok", "priority": "URGENT"}).status_code == 422


def test_patch_task(make_client):
    client = make_client()
    task = client.post("/tasks", json={"title": "Draft"}).json()
    due = (datetime.now(timezone.utc) + timedelta(days=3)).isoformat()
    r = client.patch(f"/tasks/{task['id']}", json={"title": "Final draft", "priority": "high", "due_date": due})
    assert r.status_code == 200
    assert r.json()["title"] == "Final draft"
    assert r.json()["priority"] == "high"


def test_tasks_are_scoped_to_the_owner(make_client):
    client = make_client()
    task = client.post("/tasks", json={"title": "Mine"}, headers={"X-Owner-Id": "alice"}).json()

    r = client.post(f"/tasks/{task['id']}/complete", headers={"X-Owner-Id": "bob"})
    assert r.status_code == 404
    assert r.json()["kind"] == "not_found"
    assert client.get("/tasks", headers={"X-Owner-Id": "bob"}).json() == []
    assert client.delete(f"/tasks/{task['id']}", headers={"X-Owner-Id": "bob"}).status_code == 404


def test_bulk_and_delete_all(make_client):
    client = make_client()
    ids = [client.post("/tasks", json={"title": f"t{i}"}).json()["id"] for i in range(3)]
    r = client.request("DELETE", "/tasks/bulk", json={"task_ids": ids[:2]})
    assert r.status_code == 200
    assert r.json()["deleted"] == 2

    r = client.delete("/tasks/all")
    assert r.status_code == 200
    assert r.json()["deleted"] == 1


def test_week_view(make_client):
    client = make_client()
    client.post("/tasks", json={"title": "Soon", "deadline_phrase": "tomorrow"})

    r = client.get("/tasks/week", params={"week": "current"})
    assert r.status_code == 200
    body = r.json()
    assert body["anchor"] == "current"
    assert len(body["days"]) == 7
    assert set(body["summary"]) == {"total", "completed", "pending", "overdue"}

    assert client.get("/tasks/week", params={"week": "someday"}).status_code == 422


def test_progress_report(make_client):
    client = make_client()
    r = client.get("/stats/progress")
    assert r.status_code == 200
    body = r.json()
    assert body["stats"]["tree_level"] == 1
    assert body["tree"]["stage"] == "Seedling"
    assert body["tree"]["tasks_for_next_level"] == 10
    assert body["achievements"] == []
