from __future__ import annotations
import base64
import os
import httpx
from .base import LLMProvider, ProviderError, json_body


class OllamaProvider(LLMProvider):
    def __init__(self, transport: httpx.BaseTransport = None):
        self.model = os.getenv("OLLAMA_MODEL", "llama3.1").strip()
        self.vision_model = os.getenv("OLLAMA_VISION_MODEL", "llava").strip()
        self.base_url = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").strip()
        self.timeout = float(os.getenv("LLM_TIMEOUT_S", "60"))
        self.transport = transport

    def _chat(self, model: str, messages: list, **extra) -> str:
        url = f"{self.base_url}/api/chat"
        payload = {
            "model": model,
            "stream": False,
            "messages": messages,
            "options": {"temperature": 0.2},
            **extra,
        }

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            r = client.post(url, json=payload)
            r.raise_for_status()
            data = json_body(r)

        try:
            return data["message"]["content"] or ""
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected Ollama payload: {e}") from e

    def generate(self, *, system: str, user: str) -> str:
        return self._chat(
            self.model,
            [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            format="json",
        )

    def recognize(self, *, instruction: str, data: bytes, mime_type: str) -> str:
        if not mime_type.startswith("image/"):
            raise ProviderError(f"Ollama cannot transcribe {mime_type} input")

        return self._chat(
            self.vision_model,
            [
                {
                    "role": "user",
                    "content": instruction,
                    "images": [base64.b64encode(data).decode("ascii")],
                }
            ],
        )
