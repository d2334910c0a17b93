"""Template fallback summaries."""

from datetime import UTC, datetime

import pytest

from eco_summaries.core.categories import BIOME, PEST, PLANT
from eco_summaries.core.types import FALLBACK_GENERATOR_FAILED, FALLBACK_NO_KEY
from eco_summaries.pipeline.fallback import synthesize, synthesize_all

pytestmark = pytest.mark.unit

NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


def test_biome_template_names_two_species_and_one_pest():
    entity = BIOME.to_entity(
        {
            "biome": "Cfa",
            "biome_name": "Humid subtropical",
            "species": [
                {"common_name": "Live oak"},
                {"common_name": "Magnolia"},
                {"common_name": "Cypress"},
            ],
            "pests": [{"common_name_pest": "Fire ant"}, {"common_name_pest": "Aphid"}],
        }
    )
    entry = synthesize(entity, FALLBACK_NO_KEY, now=NOW)
    assert entry.summary == (
        "The Humid subtropical biome is characterized by its distinct climate patterns. "
        "It supports a variety of plant species, including Live oak, Magnolia, "
        "and is home to pests such as Fire ant."
    )
    assert entry.model_used == FALLBACK_NO_KEY
    assert entry.to_dict()["biome"] == "Cfa"


def test_biome_template_omits_empty_clauses():
    entity = BIOME.to_entity({"biome": "ET", "biome_name": "Tundra", "species": [], "pests": []})
    assert synthesize(entity, FALLBACK_NO_KEY).summary == (
        "The Tundra biome is characterized by its distinct climate patterns."
    )


@pytest.mark.parametrize(
    ("record", "expected"),
    [
        (
            {"scientific_name": "Rosa damascena", "common_name": "Rose", "biome_name": "Cfa"},
            "Rosa damascena is well-adapted to the conditions of the Cfa biome.",
        ),
        (
            {"common_name": "Rose", "biome_name": "Cfa"},
            "Rose is well-adapted to the conditions of the Cfa biome.",
        ),
        (
            {"biome_name": "Cfa"},
            "This plant is well-adapted to the conditions of the Cfa biome.",
        ),
    ],
)
def test_plant_template(record, expected):
    assert synthesize(PLANT.to_entity(record), FALLBACK_GENERATOR_FAILED).summary == expected


def test_pest_template():
    entity = PEST.to_entity({"pest_name": "Locust", "biome_name": "Steppe"})
    assert synthesize(entity, FALLBACK_GENERATOR_FAILED).summary == (
        "Locust is a known pest in the Steppe biome. "
        "Control methods should be considered based on local guidelines."
    )


def test_templates_are_deterministic():
    entity = PEST.to_entity({"pest_name": "Locust", "biome_name": "Steppe"})
    first = synthesize(entity, FALLBACK_NO_KEY, now=NOW)
    second = synthesize(entity, FALLBACK_NO_KEY, now=NOW)
    assert first == second


def test_rejects_non_fallback_provenance():
    entity = PEST.to_entity({"pest_name": "Locust", "biome_name": "Steppe"})
    with pytest.raises(ValueError):
        synthesize(entity, "model-a")


def test_synthesize_all_keys_by_cache_key():
    entities = [PEST.to_entity({"pest_name": n, "biome_name": "Steppe"}) for n in ("A", "B")]
    entries = synthesize_all(entities, FALLBACK_NO_KEY, now=NOW)
    assert list(entries) == ["a::steppe", "b::steppe"]
