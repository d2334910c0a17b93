"""Summary categories and how their records map onto entity identity.

Each category names the record fields that form the primary name and the
region/context of an entity, the fields echoed into cache entries, and the
fields a single-entity request must carry.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Literal

from eco_summaries.core.exceptions import InvalidRequest
from eco_summaries.core.keys import normalize
from eco_summaries.core.types import Entity

CategoryName = Literal["biome", "plant", "pest"]


def _first_present(record: Mapping[str, Any], fields: tuple[str, ...]) -> str | None:
    for field in fields:
        value = record.get(field)
        if isinstance(value, str) and value.strip():
            return value
        if value is not None and not isinstance(value, str):
            return str(value)
    return None


@dataclasses.dataclass(frozen=True, slots=True)
class Category:
    """Field mapping for one kind of summarized entity."""

    name: CategoryName
    name_fields: tuple[str, ...]
    context_fields: tuple[str, ...]
    echo_fields: tuple[str, ...]
    # Each group needs at least one non-blank field on single-entity requests.
    required_groups: tuple[tuple[str, ...], ...]

    @property
    def document_name(self) -> str:
        return f"{self.name}-summaries.json"

    def to_entity(self, record: Mapping[str, Any]) -> Entity:
        """Build an :class:`Entity` from a raw request record."""
        name = _first_present(record, self.name_fields)
        context = _first_present(record, self.context_fields)
        return Entity(
            category=self.name,
            key=normalize(name, context),
            name=name.strip() if name else None,
            context=context.strip() if context else None,
            fields=dict(record),
        )

    def echoed_fields(self, entity: Entity) -> dict[str, Any]:
        """Source fields copied into the entity's cache entry."""
        return {f: entity.fields[f] for f in self.echo_fields if f in entity.fields}

    def missing_identity(self, record: Mapping[str, Any]) -> tuple[str, ...]:
        """Return labels of required identity groups the record lacks."""
        return tuple(
            "/".join(group)
            for group in self.required_groups
            if _first_present(record, group) is None
        )

    def validate_single(self, record: Mapping[str, Any]) -> None:
        """Raise :class:`InvalidRequest` when identity fields are missing."""
        missing = self.missing_identity(record)
        if missing:
            raise InvalidRequest(missing, self.name)


BIOME = Category(
    name="biome",
    name_fields=("biome_name",),
    context_fields=("biome",),
    echo_fields=("biome", "biome_name"),
    required_groups=(("biome",), ("biome_name",)),
)

PLANT = Category(
    name="plant",
    name_fields=("scientific_name", "common_name"),
    context_fields=("biome_name",),
    echo_fields=("scientific_name", "common_name", "biome_name"),
    required_groups=(("scientific_name", "common_name"), ("biome_name",)),
)

PEST = Category(
    name="pest",
    name_fields=("pest_name",),
    context_fields=("biome_name",),
    echo_fields=("pest_name", "biome_name"),
    required_groups=(("pest_name",), ("biome_name",)),
)

CATEGORIES: Mapping[str, Category] = {c.name: c for c in (BIOME, PLANT, PEST)}


def get_category(category: str | Category) -> Category:
    """Look up a category by name (instances pass through unchanged)."""
    if isinstance(category, Category):
        return category
    try:
        return CATEGORIES[category.strip().lower()]
    except KeyError:
        raise ValueError(
            f"Unknown summary category {category!r}; expected one of {sorted(CATEGORIES)}"
        ) from None


__all__ = [
    "BIOME",
    "CATEGORIES",
    "PEST",
    "PLANT",
    "Category",
    "CategoryName",
    "get_category",
]
