"""Deterministic template summaries for entities the model did not cover.

Templates use only the entity's own fields: no randomness and no network, so
the same entity always receives the same fallback text.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import datetime
import logging
from typing import Any

from eco_summaries.core.categories import Category, get_category
from eco_summaries.core.types import (
    FALLBACK_PROVENANCES,
    CacheEntry,
    Entity,
    utc_timestamp,
)

log = logging.getLogger(__name__)


def _names(items: Any, field: str, limit: int) -> list[str]:
    """First ``limit`` non-blank names from a list of records or strings."""
    if not isinstance(items, list | tuple):
        return []
    names: list[str] = []
    for item in items:
        value = item.get(field) if isinstance(item, Mapping) else item
        if isinstance(value, str) and value.strip():
            names.append(value.strip())
        if len(names) == limit:
            break
    return names


def biome_summary(entity: Entity) -> str:
    biome_name = entity.name or entity.context or "unknown"
    text = f"The {biome_name} biome is characterized by its distinct climate patterns."
    species = _names(entity.fields.get("species"), "common_name", 2)
    pests = _names(entity.fields.get("pests"), "common_name_pest", 1)
    if species and pests:
        text += (
            f" It supports a variety of plant species, including {', '.join(species)},"
            f" and is home to pests such as {pests[0]}."
        )
    elif species:
        text += f" It supports a variety of plant species, including {', '.join(species)}."
    elif pests:
        text += f" It is home to pests such as {pests[0]}."
    return text


def plant_summary(entity: Entity) -> str:
    name = entity.name or "This plant"
    where = f"the {entity.context} biome" if entity.context else "its native biome"
    return f"{name} is well-adapted to the conditions of {where}."


def pest_summary(entity: Entity) -> str:
    name = entity.name or "This pest"
    where = f"the {entity.context} biome" if entity.context else "its local biome"
    return (
        f"{name} is a known pest in {where}. "
        "Control methods should be considered based on local guidelines."
    )


_TEMPLATES: Mapping[str, Callable[[Entity], str]] = {
    "biome": biome_summary,
    "plant": plant_summary,
    "pest": pest_summary,
}


def synthesize(
    entity: Entity,
    provenance: str,
    *,
    category: str | Category | None = None,
    now: datetime | None = None,
) -> CacheEntry:
    """Build the fallback cache entry for ``entity``.

    Args:
        entity: The entity left without a generated summary.
        provenance: ``"fallback/no-key"`` or ``"fallback/generator-failed"``.
        category: Overrides ``entity.category`` when given.
        now: Timestamp for ``generatedAt``; defaults to the current time.

    Raises:
        ValueError: If ``provenance`` is not a fallback provenance tag.
    """
    if provenance not in FALLBACK_PROVENANCES:
        raise ValueError(f"Not a fallback provenance: {provenance!r}")
    cat = get_category(category or entity.category)
    return CacheEntry(
        summary=_TEMPLATES[cat.name](entity),
        model_used=provenance,
        generated_at=utc_timestamp(now),
        source_fields=cat.echoed_fields(entity),
    )


def synthesize_all(
    entities: Iterable[Entity],
    provenance: str,
    *,
    category: str | Category | None = None,
    now: datetime | None = None,
) -> dict[str, CacheEntry]:
    """Fallback entries for several entities, keyed by cache key."""
    entries = {
        entity.key: synthesize(entity, provenance, category=category, now=now)
        for entity in entities
    }
    if entries:
        log.warning("Using %s for %d entities", provenance, len(entries))
    return entries


__all__ = [
    "biome_summary",
    "pest_summary",
    "plant_summary",
    "synthesize",
    "synthesize_all",
]
