"""Adapter protocol between the generation client and a provider."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class GenerationAdapter(Protocol):
    """Sends one prompt to one model and returns the raw response text.

    Implementations raise ``UpstreamHttpError`` for transport or status
    failures and ``UpstreamMalformedResponse`` when the response envelope
    cannot be read. An empty string means the model returned no text.
    """

    async def generate(self, model: str, prompt: str) -> str:
        """Return the text produced by ``model`` for ``prompt``."""
        ...

    async def aclose(self) -> None:
        """Release network resources held by the adapter."""
        ...
