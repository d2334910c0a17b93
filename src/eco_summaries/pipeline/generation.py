"""Generation client: ordered candidate models, first success wins.

Every failure is returned as a ``Failure`` value so the executor can decide
on fallback explicitly. The client never reads or writes the cache.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
import dataclasses
import functools
import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel

from eco_summaries.core.exceptions import (
    EcoSummaryError,
    NoApiKeyConfigured,
    UpstreamError,
    UpstreamHttpError,
)
from eco_summaries.core.types import Failure, Result, Success
from eco_summaries.pipeline.decoding import decode_response
from eco_summaries.telemetry import TelemetryContext

if TYPE_CHECKING:
    from eco_summaries.pipeline.adapters.base import GenerationAdapter
    from eco_summaries.telemetry import TelemetryContextProtocol

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class GenerationOutcome[P]:
    """A decoded payload and the candidate model that produced it."""

    model: str
    value: P


async def first_success[T, E: Exception](
    attempts: Iterable[Callable[[], Awaitable[Result[T, E]]]],
) -> Result[T, E]:
    """Run ``attempts`` in order and return the first ``Success``.

    Later attempts are not started once one succeeds. When every attempt
    fails, the last failure is returned.

    Raises:
        ValueError: If ``attempts`` is empty.
    """
    last: Failure[E] | None = None
    for attempt in attempts:
        result = await attempt()
        if isinstance(result, Success):
            return result
        last = result
    if last is None:
        raise ValueError("first_success needs at least one attempt")
    return last


class GenerationClient:
    """Sends a prompt to each candidate model until one yields a valid payload.

    Args:
        adapter: Provider adapter, or ``None`` when no API key is configured.
        candidates: Model identifiers in the order they are tried.
        timeout_s: Upper bound for a single candidate call.
    """

    def __init__(
        self,
        adapter: GenerationAdapter | None,
        candidates: Sequence[str],
        *,
        timeout_s: float = 30.0,
        telemetry: TelemetryContextProtocol | None = None,
    ) -> None:
        if not candidates:
            raise ValueError("GenerationClient needs at least one candidate model")
        self.adapter = adapter
        self.candidates = tuple(candidates)
        self.timeout_s = timeout_s
        self._telemetry = telemetry or TelemetryContext()

    @property
    def has_credentials(self) -> bool:
        return self.adapter is not None

    async def generate[M: BaseModel](
        self, prompt: str, schema: type[M]
    ) -> Result[GenerationOutcome[M], EcoSummaryError]:
        """Generate and decode a payload for ``prompt``.

        Returns:
            ``Success(GenerationOutcome)`` from the first candidate whose
            response decodes against ``schema``; ``Failure(NoApiKeyConfigured)``
            without any network call when there is no adapter; otherwise the
            last candidate's failure.
        """
        if self.adapter is None:
            return Failure(NoApiKeyConfigured())

        attempts = (
            functools.partial(self._attempt, model, prompt, schema)
            for model in self.candidates
        )
        return await first_success(attempts)

    async def _attempt[M: BaseModel](
        self, model: str, prompt: str, schema: type[M]
    ) -> Result[GenerationOutcome[M], EcoSummaryError]:
        assert self.adapter is not None
        with self._telemetry("summaries.generate", model=model):
            try:
                async with asyncio.timeout(self.timeout_s):
                    text = await self.adapter.generate(model, prompt)
            except TimeoutError:
                error: UpstreamError = UpstreamHttpError(
                    None, f"timed out after {self.timeout_s}s", model=model
                )
                log.warning("Candidate %s failed: %s", model, error)
                return Failure(error)
            except UpstreamError as e:
                log.warning("Candidate %s failed: %s", model, e)
                return Failure(e)

        decoded = decode_response(text, schema, model=model)
        if isinstance(decoded, Failure):
            log.warning("Candidate %s failed: %s", model, decoded.error)
            return decoded
        log.debug("Candidate %s produced a valid %s", model, schema.__name__)
        return Success(GenerationOutcome(model=model, value=decoded.value))

    async def aclose(self) -> None:
        if self.adapter is not None:
            await self.adapter.aclose()


__all__ = ["GenerationClient", "GenerationOutcome", "first_success"]
