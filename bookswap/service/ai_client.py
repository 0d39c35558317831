from __future__ import annotations

import logging

import httpx

from bookswap.errors import AIServiceError, MissingCredentialError

log = logging.getLogger(__name__)


class GeminiClient:
    """Single-shot text generation over the Gemini REST API.

    No retries and no timeout: a slow model only holds up the request that
    asked for it.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str, model: str, api_key: str | None = None):
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.api_key = api_key

    async def generate(self, prompt: str, api_key: str | None = None) -> str:
        key = api_key or self.api_key
        if not key:
            raise MissingCredentialError("API Key is required")

        try:
            r = await self.http.post(
                f"{self.base_url}/models/{self.model}:generateContent",
                params={"key": key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=None,
            )
            r.raise_for_status()
            data = r.json()
        except (httpx.HTTPError, ValueError) as exc:
            log.error("generateContent call failed: %s", exc)
            raise AIServiceError("Failed to perform matching") from exc

        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as exc:
            log.error("unexpected generateContent payload: %s", data)
            raise AIServiceError("Failed to perform matching") from exc
