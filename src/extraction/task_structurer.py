"""
Conversion of free text into candidate tasks.

The provider is asked for JSON, but whatever comes back is treated as
untrusted input: each item and each field is defaulted or dropped on its own,
so a single malformed entry never costs the rest of the batch.
"""

import logging
import math
from typing import Any, List, Optional

from pydantic import ValidationError

from llm.llm_client import LLMClient
from llm.providers.base import ProviderError
from taskgrove.errors import StructuringFailed
from taskgrove.models import CandidateTask, TITLE_MAX_LEN

logger = logging.getLogger(__name__)

UNTITLED = "Untitled Task"
PRIORITIES = {"low", "medium", "high"}

_HOURS_KEYS = ("estimated_hours", "estimatedHours", "hours")
_DEADLINE_KEYS = ("deadline_phrase", "deadline", "suggestedDeadline", "suggested_deadline")


def _first(item: dict, keys) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def normalize_title(value: Any) -> str:
    title = _text(value)
    if title is None:
        return UNTITLED
    if len(title) <= TITLE_MAX_LEN:
        return title
    cut = title[:TITLE_MAX_LEN]
    # prefer a word boundary when one is reasonably close to the limit
    space = cut.rfind(" ")
    if space >= TITLE_MAX_LEN // 2:
        cut = cut[:space]
    return cut.rstrip(" ,;:-") or UNTITLED


def normalize_priority(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in PRIORITIES:
        return value.strip().lower()
    return "medium"


def normalize_hours(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def normalize_item(item: Any) -> Optional[CandidateTask]:
    if not isinstance(item, dict):
        return None
    try:
        return CandidateTask(
            title=normalize_title(item.get("title")),
            description=_text(item.get("description")),
            priority=normalize_priority(item.get("priority")),
            estimated_hours=normalize_hours(_first(item, _HOURS_KEYS)),
            deadline_phrase=_text(_first(item, _DEADLINE_KEYS)),
        )
    except ValidationError as e:
        logger.debug(f"Task item failed validation: {e.errors()[0].get('msg')}")
        return None


def normalize_reply(payload: Any) -> List[CandidateTask]:
    if isinstance(payload, dict):
        payload = payload.get("tasks")
    if not isinstance(payload, list):
        return []

    out = []
    for item in payload:
        candidate = normalize_item(item)
        if candidate is None:
            logger.warning(f"Dropping unusable task item: {item!r}")
            continue
        out.append(candidate)
    return out


class TaskStructurer:

    def __init__(self, llm_client: LLMClient = None):
        self.llm_client = llm_client or LLMClient()

    def structure(self, text: str) -> List[CandidateTask]:
        try:
            payload = self.llm_client.structure_tasks(text)
        except ProviderError as e:
            logger.error(f"Task structuring failed: {e}")
            raise StructuringFailed("Failed to structure tasks from text") from e

        candidates = normalize_reply(payload)
        logger.info(f"Structured {len(candidates)} candidate tasks")
        return candidates
