import json

import pytest

from extraction.task_structurer import (
    UNTITLED,
    TaskStructurer,
    normalize_hours,
    normalize_reply,
    normalize_title,
)
from llm.llm_client import LLMClient
from llm.providers.base import ProviderError
from llm.providers.mock_provider import MockProvider, SAMPLE_NOTE
from taskgrove.errors import StructuringFailed


def _structurer(provider):
    return TaskStructurer(llm_client=LLMClient(provider=provider))


def test_invalid_priority_and_empty_title_are_normalized(fake_provider_factory):
    provider = fake_provider_factory(json.dumps({"tasks": [
        {"title": "Pay rent", "priority": "URGENT"},
        {"title": "", "priority": "low"},
    ]}))
    tasks = _structurer(provider).structure("notes")
    assert tasks[0].priority == "medium"
    assert tasks[1].title == UNTITLED
    assert tasks[1].priority == "low"


def test_scenario_three_candidates(fake_provider_factory):
    text = "Buy milk. Call mom tomorrow. Finish report by next week, high priority."
    provider = fake_provider_factory(json.dumps({"tasks": [
        {"title": "Buy milk", "priority": "medium", "estimated_hours": 0.5},
        {"title": "Call mom", "priority": "medium", "deadline": "tomorrow"},
        {"title": "Finish report", "priority": "high", "estimated_hours": 3, "deadline": "next week"},
    ]}))
    tasks = _structurer(provider).structure(text)

    assert [t.title for t in tasks] == ["Buy milk", "Call mom", "Finish report"]
    assert tasks[0].priority == "medium"
    assert tasks[1].deadline_phrase == "tomorrow"
    assert tasks[2].priority == "high"
    assert tasks[2].deadline_phrase == "next week"


def test_mock_provider_handles_the_sample_note():
    tasks = _structurer(MockProvider()).structure(SAMPLE_NOTE)
    assert [(t.title, t.priority, t.deadline_phrase) for t in tasks] == [
        ("Buy milk", "medium", None),
        ("Call mom", "medium", "tomorrow"),
        ("Finish report", "high", "next week"),
    ]


def test_one_bad_item_does_not_spoil_the_batch():
    tasks = normalize_reply({"tasks": [
        "just a string",
        None,
        {"title": "Book dentist", "estimated_hours": "lots", "priority": 3},
        {"title": "   Water plants ", "estimatedHours": "2", "suggestedDeadline": "this week"},
    ]})
    assert len(tasks) == 2
    assert tasks[0].title == "Book dentist"
    assert tasks[0].estimated_hours is None
    assert tasks[0].priority == "medium"
    assert tasks[1].title == "Water plants"
    assert tasks[1].estimated_hours == 2.0
    assert tasks[1].deadline_phrase == "this week"


@pytest.mark.parametrize("payload", [None, "tasks", 42, {}, {"tasks": "nope"}, {"items": []}])
def test_non_list_reply_gives_empty_list(payload):
    assert normalize_reply(payload) == []


def test_bare_list_reply_is_accepted():
    assert normalize_reply([{"title": "A"}])[0].title == "A"


def test_priority_is_case_insensitive():
    assert normalize_reply([{"title": "A", "priority": " HIGH "}])[0].priority == "high"


@pytest.mark.parametrize("raw, expected", [
    (3, 3.0),
    (1.5, 1.5),
    ("4", 4.0),
    (0, None),
    (-2, None),
    (True, None),
    ("soon", None),
    (float("nan"), None),
    ([1], None),
])
def test_normalize_hours(raw, expected):
    assert normalize_hours(raw) == expected


def test_long_titles_are_cut_to_fifty_chars():
    long_title = "Prepare the quarterly budget presentation for the board meeting on Friday"
    title = normalize_title(long_title)
    assert 0 < len(title) <= 50
    assert long_title.startswith(title)
    assert not title.endswith(" ")


def test_blank_description_and_deadline_are_dropped():
    task = normalize_reply([{"title": "A", "description": "  ", "deadline": ""}])[0]
    assert task.description is None
    assert task.deadline_phrase is None


def test_garbage_reply_is_zero_tasks_not_an_error(fake_provider_factory):
    provider = fake_provider_factory("THIS IS NOT JSON AT ALL")
    assert _structurer(provider).structure("random text") == []


def test_provider_failure_is_structuring_failed(fake_provider_factory):
    provider = fake_provider_factory(error=ProviderError("boom"))
    with pytest.raises(StructuringFailed):
        _structurer(provider).structure("anything")


def test_title_of_only_separators_becomes_untitled():
    assert normalize_title("-" * 60) == UNTITLED
    tasks = normalize_reply([{"title": "Good"}, {"title": "-" * 60}])
    assert [t.title for t in tasks] == ["Good", UNTITLED]


def test_huge_integer_hours_are_omitted():
    assert normalize_hours(10 ** 400) is None
    tasks = normalize_reply([{"title": "Good"}, {"title": "B", "estimated_hours": 10 ** 400}])
    assert [t.title for t in tasks] == ["Good", "B"]
    assert tasks[1].estimated_hours is None


def test_huge_hours_in_a_real_reply(fake_provider_factory):
    reply = '{"tasks":[{"title":"A","estimated_hours":1' + "0" * 400 + '},{"title":"B"}]}'
    tasks = _structurer(fake_provider_factory(reply)).structure("notes")
    assert [t.title for t in tasks] == ["A", "B"]
    assert tasks[0].estimated_hours is None
