"""Split requested entities into cache hits and a deduplicated fetch group."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import dataclasses
import logging

from eco_summaries.core.types import CacheEntry, Entity

log = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, slots=True)
class Partition:
    """Result of partitioning one request against the cache.

    Attributes:
        results: Summaries already known, by key.
        pending: Entities needing generation, by key, in first-seen order.
        keys: The key of every input entity, in input order.
    """

    results: dict[str, str]
    pending: dict[str, Entity]
    keys: tuple[str, ...]

    @property
    def fully_cached(self) -> bool:
        return not self.pending


def partition(entities: Iterable[Entity], cache: Mapping[str, CacheEntry]) -> Partition:
    """Partition ``entities`` against ``cache``.

    A key whose entry holds a non-empty summary is a hit. Every other key is
    pending; duplicate keys are kept once and the first occurrence's entity
    wins.
    """
    results: dict[str, str] = {}
    pending: dict[str, Entity] = {}
    keys: list[str] = []

    for entity in entities:
        key = entity.key
        keys.append(key)
        if key in results or key in pending:
            continue
        entry = cache.get(key)
        if entry is not None and entry.has_summary:
            results[key] = entry.summary
        else:
            pending[key] = entity

    log.debug(
        "Partitioned %d entities: %d cached, %d pending", len(keys), len(results), len(pending)
    )
    return Partition(results=results, pending=pending, keys=tuple(keys))


__all__ = ["Partition", "partition"]
