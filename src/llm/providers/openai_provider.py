from __future__ import annotations
import base64
import os
import httpx
from .base import LLMProvider, ProviderError, json_body


class OpenAIProvider(LLMProvider):
    def __init__(self, transport: httpx.BaseTransport = None):
        self.api_key = os.getenv("OPENAI_API_KEY", "").strip()
        self.model = os.getenv("OPENAI_MODEL", "gpt-4o-mini").strip()
        self.transcribe_model = os.getenv("OPENAI_TRANSCRIBE_MODEL", "whisper-1").strip()
        self.base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1").strip()
        self.timeout = float(os.getenv("LLM_TIMEOUT_S", "30"))
        self.transport = transport

        if not self.api_key:
            raise ProviderError("OPENAI_API_KEY is missing")

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _chat(self, messages: list, **extra) -> str:
        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": self.model,
            "messages": messages,
            "temperature": 0.2,
            **extra,
        }

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            r = client.post(url, headers=self._headers(), json=payload)
            r.raise_for_status()
            data = json_body(r)

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected chat completion payload: {e}") from e

    def generate(self, *, system: str, user: str) -> str:
        return self._chat(
            [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            response_format={"type": "json_object"},
        )

    def recognize(self, *, instruction: str, data: bytes, mime_type: str) -> str:
        if mime_type.startswith("audio/"):
            return self._transcribe(data, mime_type)

        encoded = base64.b64encode(data).decode("ascii")
        return self._chat(
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": instruction},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{mime_type};base64,{encoded}"},
                        },
                    ],
                }
            ],
            max_tokens=1000,
        )

    def _transcribe(self, data: bytes, mime_type: str) -> str:
        url = f"{self.base_url}/audio/transcriptions"
        ext = mime_type.split("/", 1)[1].split(";", 1)[0] or "webm"

        with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
            r = client.post(
                url,
                headers=self._headers(),
                data={"model": self.transcribe_model},
                files={"file": (f"memo.{ext}", data, mime_type)},
            )
            r.raise_for_status()
            body = json_body(r)

        try:
            return body["text"] or ""
        except (KeyError, TypeError) as e:
            raise ProviderError(f"Unexpected transcription payload: {e}") from e
