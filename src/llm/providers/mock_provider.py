from __future__ import annotations
import json
import re
from llm.prompts import STRUCTURE_USER_PREFIX
from llm.providers.base import LLMProvider

SAMPLE_NOTE = "Buy milk. Call mom tomorrow. Finish report by next week, high priority."

_DEADLINE_PATTERNS = [
    ("tomorrow", re.compile(r"\b(by\s+)?tomorrow\b", re.I)),
    ("this week", re.compile(r"\b(by\s+)?this week\b", re.I)),
    ("next week", re.compile(r"\b(by\s+)?next week\b", re.I)),
    ("next Monday", re.compile(r"\b(by\s+|on\s+)?(next\s+)?monday\b", re.I)),
]
_HIGH = re.compile(r",?\s*\b(high priority|urgent|asap)\b", re.I)
_LOW = re.compile(r",?\s*\b(low priority|someday|eventually)\b", re.I)


class MockProvider(LLMProvider):
    """Offline provider for demos and local runs.

    Recognition echoes UTF-8 payloads (anything else yields a sample note);
    structuring splits the text into sentences and spots a few keywords.
    """

    def generate(self, *, system: str, user: str) -> str:
        if not user.startswith(STRUCTURE_USER_PREFIX):
            return "{}"

        text = user[len(STRUCTURE_USER_PREFIX):]
        tasks = [self._sentence_to_task(s) for s in re.split(r"[.!?\n]+", text)]
        return json.dumps({"tasks": [t for t in tasks if t is not None]})

    def recognize(self, *, instruction: str, data: bytes, mime_type: str) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return SAMPLE_NOTE

    @staticmethod
    def _sentence_to_task(sentence: str):
        title = sentence.strip()
        if not title:
            return None

        priority = "medium"
        if _HIGH.search(title):
            priority = "high"
            title = _HIGH.sub("", title)
        elif _LOW.search(title):
            priority = "low"
            title = _LOW.sub("", title)

        deadline = None
        for phrase, pattern in _DEADLINE_PATTERNS:
            if pattern.search(title):
                deadline = phrase
                title = pattern.sub("", title)
                break

        title = title.strip(" ,;:-")
        if not title:
            return None

        return {
            "title": title[:50],
            "priority": priority,
            "estimated_hours": 1,
            "deadline": deadline,
        }
