"""Client for OpenAI-compatible transcription and chat completion endpoints."""
from __future__ import annotations

from dataclasses import dataclass

import httpx

from ..errors import ProviderError


@dataclass(slots=True)
class TranscriptionResponse:
    text: str
    language: str | None = None


@dataclass(slots=True)
class OpenAICompatibleClient:
    """Thin async wrapper around ``/audio/transcriptions`` and ``/chat/completions``.

    When ``http_client`` is given it is used as-is and never closed here;
    otherwise a short-lived client is opened per request.
    """

    base_url: str
    api_key: str
    timeout_seconds: float = 60.0
    http_client: httpx.AsyncClient | None = None

    async def transcribe(
        self,
        audio: bytes,
        *,
        model: str,
        filename: str = "audio.wav",
        language: str | None = None,
    ) -> TranscriptionResponse:
        data = {"model": model, "response_format": "verbose_json"}
        if language:
            data["language"] = language
        files = {"file": (filename, audio, "audio/wav")}

        body = await self._post("/audio/transcriptions", data=data, files=files)
        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str):
            raise ProviderError("Unexpected response schema from transcription provider")
        detected = body.get("language")
        return TranscriptionResponse(text=text.strip(), language=detected if isinstance(detected, str) else language)

    async def complete(self, *, model: str, system_prompt: str, user_prompt: str, temperature: float = 0.0) -> str:
        payload = {
            "model": model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        body = await self._post("/chat/completions", json=payload)
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError("Unexpected response schema from chat completion provider") from exc
        if not isinstance(content, str):
            raise ProviderError("Chat completion provider returned no text content")
        return content.strip()

    async def _post(self, path: str, **kwargs) -> dict:
        url = self.base_url.rstrip("/") + path
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if self.http_client is not None:
                response = await self.http_client.post(url, headers=headers, timeout=self.timeout_seconds, **kwargs)
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.post(url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = exc.response.text
            raise ProviderError(f"Provider request failed ({exc.response.status_code}): {detail}") from exc
        except httpx.HTTPError as exc:  # pragma: no cover - network dependent
            raise ProviderError(str(exc) or type(exc).__name__) from exc

        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError("Provider did not return valid JSON") from exc
