from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any


class ProviderError(Exception):
    """The provider could not be reached, timed out, or answered nonsense."""


class LLMProvider(ABC):
    @abstractmethod
    def generate(self, *, system: str, user: str) -> str:
        """
        Must return the model output as TEXT (we'll parse JSON in LLMClient).
        """
        raise NotImplementedError

    @abstractmethod
    def recognize(self, *, instruction: str, data: bytes, mime_type: str) -> str:
        """
        Return the text found in an image, or the transcript of an audio clip.
        """
        raise NotImplementedError


def json_body(response) -> Any:
    """Decode an HTTP response body, treating non-JSON as a provider failure."""
    try:
        return response.json()
    except ValueError as e:
        raise ProviderError(f"Provider returned a non-JSON body: {response.text[:80]!r}") from e
