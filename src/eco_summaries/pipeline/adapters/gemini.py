"""Adapter for the google-genai SDK (async client)."""

from __future__ import annotations

import logging

from google import genai
from google.genai import errors, types
import httpx

from eco_summaries.core.exceptions import UpstreamHttpError

log = logging.getLogger(__name__)


class GoogleGenAIAdapter:
    """Calls ``models.generate_content`` through ``genai.Client().aio``.

    The SDK client is created on first use so that constructing an executor
    never touches the network. A client passed in by the caller is not closed
    by :meth:`aclose`.
    """

    def __init__(
        self,
        api_key: str,
        *,
        temperature: float = 0.4,
        client: genai.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._temperature = temperature
        self._client = client
        self._owns_client = False

    def __repr__(self) -> str:
        return f"GoogleGenAIAdapter(temperature={self._temperature!r})"

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=self._api_key)
            self._owns_client = True
        return self._client

    async def generate(self, model: str, prompt: str) -> str:
        config = types.GenerateContentConfig(
            temperature=self._temperature,
            response_mime_type="application/json",
        )
        try:
            response = await self.client.aio.models.generate_content(
                model=model,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            raise UpstreamHttpError(e.code, e.message or str(e), model=model) from e
        except httpx.HTTPError as e:
            raise UpstreamHttpError(None, str(e) or type(e).__name__, model=model) from e
        except Exception as e:  # aiohttp, socket and other SDK transport errors
            raise UpstreamHttpError(None, type(e).__name__, model=model) from e

        text = response.text
        if text is None:
            log.debug("Model %s returned no text parts", model)
            return ""
        return text

    async def aclose(self) -> None:
        client, self._client = self._client, None
        if client is not None and self._owns_client:
            await client.aio.aclose()


__all__ = ["GoogleGenAIAdapter"]
