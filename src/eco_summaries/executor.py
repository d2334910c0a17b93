"""The primary user-facing entry point for the summary pipeline.

The executor runs one fixed sequence per request:

    read cache -> partition -> generate -> merge -> fallback -> write

There is no internal parallelism; a request suspends only on cache I/O and
on the network call. Every upstream or configuration failure is recovered by
the fallback synthesizer, so a batch always resolves every requested entity.
``CacheIOError`` is the one failure that propagates.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
import dataclasses
from datetime import UTC, datetime
import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any, Self

from eco_summaries.config import FrozenConfig, ResolvedConfig, resolve_config
from eco_summaries.config.types import PromptStyle, default_prompt_styles
from eco_summaries.core.categories import Category, get_category
from eco_summaries.core.exceptions import EcoSummaryError, NoApiKeyConfigured
from eco_summaries.core.types import (
    FALLBACK_GENERATOR_FAILED,
    FALLBACK_NO_KEY,
    PROVENANCE_CACHE,
    BatchResult,
    CacheEntry,
    Entity,
    Failure,
    Result,
    SingleResult,
)
from eco_summaries.pipeline.adapters import GoogleGenAIAdapter, RestGenerationAdapter
from eco_summaries.pipeline.decoding import BatchSummaries, SingleSummary
from eco_summaries.pipeline.fallback import synthesize_all
from eco_summaries.pipeline.generation import GenerationClient, GenerationOutcome
from eco_summaries.pipeline.merger import merge_generated
from eco_summaries.pipeline.partitioner import partition
from eco_summaries.pipeline.prompts import PromptMode, build_prompt
from eco_summaries.store import StoreRegistry
from eco_summaries.telemetry import TelemetryContext

if TYPE_CHECKING:
    from eco_summaries.pipeline.adapters.base import GenerationAdapter
    from eco_summaries.telemetry import TelemetryContextProtocol, TelemetryReporter

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class _Resolution:
    """Entries produced for the pending group, with provenance and diagnostic."""

    entries: dict[str, CacheEntry]
    provenance: str
    diagnostic: str | None = None


class SummaryExecutor:
    """Runs batch and single-entity summary operations.

    Args:
        config: Frozen configuration.
        stores: Cache stores per category; defaults to ``config.cache_dir``.
        client: Generation client; defaults to one built from ``config``.
        telemetry: Telemetry context shared by every stage.
        clock: Returns the time used for ``generatedAt``.
    """

    def __init__(
        self,
        config: FrozenConfig,
        stores: StoreRegistry | None = None,
        client: GenerationClient | None = None,
        *,
        telemetry: TelemetryContextProtocol | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self._telemetry = telemetry or TelemetryContext()
        self.stores = stores or StoreRegistry(config.cache_dir, telemetry=self._telemetry)
        self.client = client or build_generation_client(config, telemetry=self._telemetry)
        self._clock = clock or (lambda: datetime.now(UTC))

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    def style_for(self, category: Category) -> PromptStyle:
        style = self.config.prompt_styles.get(category.name)
        return style if style is not None else default_prompt_styles()[category.name]

    async def summarize_batch(
        self, category: str | Category, records: Iterable[Mapping[str, Any]]
    ) -> BatchResult:
        """Return one summary for every record.

        Args:
            category: ``"biome"``, ``"plant"`` or ``"pest"``.
            records: Request records; identity fields may be absent.

        Returns:
            BatchResult whose provenance is ``"cache"`` when nothing needed
            generating, the model id when generation succeeded, or a fallback
            tag when it did not.

        Raises:
            CacheIOError: The category's cache document could not be read or
                written.
            ValueError: ``category`` is unknown.
        """
        cat = get_category(category)
        entities = [cat.to_entity(record) for record in records]
        store = self.stores.get(cat)
        ctx = self._telemetry

        with ctx("summaries.batch", category=cat.name, requested=len(entities)):
            part = partition(entities, await store.read())
            ctx.count("cache_hits", len(part.results))
            if part.fully_cached:
                log.debug("All %d %s entities served from cache", len(part.keys), cat.name)
                return BatchResult(
                    summaries=part.results, keys=part.keys, provenance=PROVENANCE_CACHE
                )

            resolution = await self._resolve(cat, part.pending, mode="batch")
            written = await store.merge(resolution.entries)

        summaries = dict(part.results)
        for key in part.pending:
            summaries[key] = _stored_summary(written, resolution.entries, key)
        return BatchResult(
            summaries=summaries,
            keys=part.keys,
            provenance=resolution.provenance,
            diagnostic=resolution.diagnostic,
        )

    async def summarize_one(
        self, category: str | Category, record: Mapping[str, Any]
    ) -> SingleResult:
        """Return the summary for a single record.

        Raises:
            InvalidRequest: Required identity fields are missing. Raised
                before the cache is read.
            CacheIOError: The category's cache document could not be read or
                written.
        """
        cat = get_category(category)
        cat.validate_single(record)
        entity = cat.to_entity(record)
        store = self.stores.get(cat)
        ctx = self._telemetry

        with ctx("summaries.one", category=cat.name):
            entry = (await store.read()).get(entity.key)
            if entry is not None and entry.has_summary:
                ctx.count("cache_hits")
                return SingleResult(
                    key=entity.key,
                    summary=entry.summary,
                    cached=True,
                    provenance=PROVENANCE_CACHE,
                )

            resolution = await self._resolve(cat, {entity.key: entity}, mode="single")
            written = await store.merge(resolution.entries)

        return SingleResult(
            key=entity.key,
            summary=_stored_summary(written, resolution.entries, entity.key),
            cached=False,
            provenance=resolution.provenance,
            diagnostic=resolution.diagnostic,
        )

    async def _resolve(
        self, category: Category, pending: dict[str, Entity], *, mode: PromptMode
    ) -> _Resolution:
        """Generate for ``pending`` and fill whatever is left by fallback."""
        now = self._clock()
        schema = BatchSummaries if mode == "batch" else SingleSummary
        prompt = build_prompt(category, pending, self.style_for(category), mode=mode)
        result: Result[GenerationOutcome[Any], EcoSummaryError] = await self.client.generate(
            prompt, schema
        )

        if isinstance(result, Failure):
            error = result.error
            if isinstance(error, NoApiKeyConfigured):
                provenance, diagnostic = FALLBACK_NO_KEY, None
            else:
                provenance, diagnostic = FALLBACK_GENERATOR_FAILED, str(error)
                log.warning(
                    "Generation failed for %d %s entities: %s",
                    len(pending),
                    category.name,
                    error,
                )
            self._telemetry.count("fallback", len(pending), reason=provenance)
            entries = synthesize_all(pending.values(), provenance, category=category, now=now)
            return _Resolution(entries, provenance, diagnostic)

        merged = merge_generated(category, result.value, pending, now=now)
        self._telemetry.count("generated", len(merged.entries), model=result.value.model)
        entries = dict(merged.entries)
        provenance = result.value.model if merged.entries else FALLBACK_GENERATOR_FAILED
        diagnostic = None
        if merged.unresolved:
            diagnostic = (
                f"{len(merged.unresolved)} of {len(pending)} summaries missing from "
                f"{result.value.model} response; filled by fallback"
            )
            log.warning(diagnostic)
            self._telemetry.count(
                "fallback", len(merged.unresolved), reason=FALLBACK_GENERATOR_FAILED
            )
            entries.update(
                synthesize_all(
                    merged.unresolved.values(),
                    FALLBACK_GENERATOR_FAILED,
                    category=category,
                    now=now,
                )
            )
        return _Resolution(entries, provenance, diagnostic)


def _stored_summary(
    written: Mapping[str, CacheEntry], produced: Mapping[str, CacheEntry], key: str
) -> str:
    # A summary stored by a concurrent request takes precedence over ours.
    stored = written.get(key)
    if stored is not None and stored.has_summary:
        return stored.summary
    return produced[key].summary


def build_adapter(config: FrozenConfig) -> GenerationAdapter | None:
    """Adapter for ``config.transport``, or ``None`` without an API key."""
    if not config.has_api_key or config.api_key is None:
        return None
    if config.transport == "rest":
        return RestGenerationAdapter(
            config.api_key,
            base_url=config.api_base_url,
            temperature=config.temperature,
            timeout_s=config.request_timeout_s,
        )
    return GoogleGenAIAdapter(config.api_key, temperature=config.temperature)


def build_generation_client(
    config: FrozenConfig, *, telemetry: TelemetryContextProtocol | None = None
) -> GenerationClient:
    adapter = build_adapter(config)
    if adapter is None:
        log.info("No API key configured; summaries will use fallback templates")
    return GenerationClient(
        adapter,
        config.models,
        timeout_s=config.request_timeout_s,
        telemetry=telemetry,
    )


def create_executor(
    config: FrozenConfig | ResolvedConfig | None = None,
    *,
    reporters: Iterable[TelemetryReporter] = (),
) -> SummaryExecutor:
    """Create an executor, resolving configuration when none is given.

    This is the only place where ambient configuration is resolved.

    Args:
        config: Frozen or resolved configuration; resolved from the
            environment and project file when omitted.
        reporters: Telemetry reporters, active only when
            ``ECO_SUMMARIES_TELEMETRY=1``.
    """
    if config is None:
        config = resolve_config()
    if isinstance(config, ResolvedConfig):
        config = config.to_frozen()
    log.debug("Creating executor with %s", config)
    return SummaryExecutor(config, telemetry=TelemetryContext(*reporters))


__all__ = [
    "SummaryExecutor",
    "build_adapter",
    "build_generation_client",
    "create_executor",
]
