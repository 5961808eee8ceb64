from __future__ import annotations

import json
import logging
import os
import re
from typing import Any, Optional

import httpx

from llm.prompts import (
    AUDIO_RECOGNITION_PROMPT,
    IMAGE_RECOGNITION_PROMPT,
    STRUCTURE_SYSTEM_PROMPT,
    structure_user_prompt,
)
from llm.providers.base import LLMProvider, ProviderError

logger = logging.getLogger(__name__)

_JSON_SPAN = re.compile(r"(\{.*\}|\[.*\])", re.S)


def get_provider(name: Optional[str] = None) -> LLMProvider:
    """Build the provider named by LLM_PROVIDER (openai | ollama | mock)."""
    name = (name or os.getenv("LLM_PROVIDER", "mock")).strip().lower()
    if name == "openai":
        from llm.providers.openai_provider import OpenAIProvider
        return OpenAIProvider()
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider
        return OllamaProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider
        return MockProvider()
    raise ValueError(f"Unknown LLM_PROVIDER: {name}")


def parse_json_reply(text: str) -> Any:
    """Best-effort JSON decoding of a model reply.

    Models like to wrap JSON in prose or code fences, so when the whole reply
    is not valid JSON we retry on the outermost {...} / [...] span.
    Returns None when nothing decodes.
    """
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    m = _JSON_SPAN.search(text)
    if not m:
        return None
    try:
        return json.loads(m.group(1))
    except json.JSONDecodeError:
        return None


class LLMClient:
    """Narrow capability over an intelligence provider.

    Exactly two operations: ``recognize_text`` (OCR / speech-to-text) and
    ``structure_tasks`` (raw, unvalidated task payload). Transport failures are
    surfaced as ProviderError; nothing is retried here.
    """

    def __init__(self, provider: Optional[LLMProvider] = None):
        self.provider = provider or get_provider()

    def recognize_text(self, data: bytes, mime_type: str) -> str:
        instruction = (
            AUDIO_RECOGNITION_PROMPT
            if mime_type.lower().startswith("audio/")
            else IMAGE_RECOGNITION_PROMPT
        )
        try:
            return self.provider.recognize(
                instruction=instruction, data=data, mime_type=mime_type
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"{type(e).__name__}: {e}") from e

    def structure_tasks(self, text: str) -> Any:
        try:
            raw = self.provider.generate(
                system=STRUCTURE_SYSTEM_PROMPT,
                user=structure_user_prompt(text),
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"{type(e).__name__}: {e}") from e

        payload = parse_json_reply(raw)
        if payload is None:
            logger.warning(f"Provider reply was not JSON: {raw[:80]!r}")
        return payload
