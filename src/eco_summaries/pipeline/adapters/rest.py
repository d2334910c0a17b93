"""Adapter for the ``generateContent`` REST endpoint, using httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from eco_summaries.config.schema import DEFAULT_API_BASE_URL
from eco_summaries.core.exceptions import UpstreamHttpError, UpstreamMalformedResponse

log = logging.getLogger(__name__)


def extract_text(payload: Any) -> str:
    """Return ``candidates[0].content.parts[0].text``, or ``""`` when absent."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""
    return text if isinstance(text, str) else ""


class RestGenerationAdapter:
    """POSTs ``{"contents": [{"parts": [{"text": prompt}]}]}`` per call.

    The API key travels as the ``key`` query parameter, which is what the
    public endpoint expects. It is never logged.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_API_BASE_URL,
        temperature: float = 0.4,
        timeout_s: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._temperature = temperature
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s)

    def __repr__(self) -> str:
        return f"RestGenerationAdapter(base_url={self._base_url!r})"

    def url_for(self, model: str) -> str:
        return f"{self._base_url}/models/{model}:generateContent"

    async def generate(self, model: str, prompt: str) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "responseMimeType": "application/json",
            },
        }
        try:
            response = await self._client.post(
                self.url_for(model), params={"key": self._api_key}, json=body
            )
        except httpx.TimeoutException as e:
            raise UpstreamHttpError(None, "request timed out", model=model) from e
        except httpx.HTTPError as e:
            # str(e) of a request error can include the URL, and with it the key.
            raise UpstreamHttpError(None, type(e).__name__, model=model) from e

        if not response.is_success:
            raise UpstreamHttpError(response.status_code, response.text, model=model)

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamMalformedResponse(
                response.text, "response envelope is not JSON", model=model
            ) from e
        return extract_text(payload)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["RestGenerationAdapter", "extract_text"]
