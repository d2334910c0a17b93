"""Fold a decoded generation payload into cache entries and results."""

from __future__ import annotations

from collections.abc import Mapping
import dataclasses
from datetime import datetime
import logging

from eco_summaries.core.categories import Category, get_category
from eco_summaries.core.types import CacheEntry, Entity, utc_timestamp
from eco_summaries.pipeline.decoding import BatchSummaries, SingleSummary, SummaryPayload
from eco_summaries.pipeline.generation import GenerationOutcome

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class MergeResult:
    """Entries created from a payload, plus the pending entities it missed."""

    entries: dict[str, CacheEntry]
    unresolved: dict[str, Entity]

    @property
    def summaries(self) -> dict[str, str]:
        return {key: entry.summary for key, entry in self.entries.items()}


def _generated_summaries(
    payload: SummaryPayload, pending: Mapping[str, Entity]
) -> dict[str, str]:
    if isinstance(payload, SingleSummary):
        if len(pending) != 1:
            raise ValueError("A single summary can only resolve exactly one entity")
        (key,) = pending
        return {key: payload.summary}
    if isinstance(payload, BatchSummaries):
        return payload.as_mapping()
    raise TypeError(f"Unsupported payload type {type(payload).__name__}")


def merge_generated(
    category: str | Category,
    outcome: GenerationOutcome[SummaryPayload],
    pending: Mapping[str, Entity],
    *,
    now: datetime | None = None,
) -> MergeResult:
    """Create cache entries for every pending key the payload answered.

    Keys the payload holds but ``pending`` does not are ignored. Pending keys
    with no summary, or only a blank one, are returned as unresolved.
    """
    cat = get_category(category)
    generated = _generated_summaries(outcome.value, pending)
    generated_at = utc_timestamp(now)

    unknown = [key for key in generated if key not in pending]
    if unknown:
        log.debug("Ignoring %d keys not requested: %s", len(unknown), unknown)

    entries: dict[str, CacheEntry] = {}
    unresolved: dict[str, Entity] = {}
    for key, entity in pending.items():
        summary = generated.get(key)
        if summary is None or not summary.strip():
            unresolved[key] = entity
            continue
        entries[key] = CacheEntry(
            summary=summary.strip(),
            model_used=outcome.model,
            generated_at=generated_at,
            source_fields=cat.echoed_fields(entity),
        )
    return MergeResult(entries=entries, unresolved=unresolved)


__all__ = ["MergeResult", "merge_generated"]
