"""Partitioning requests against the cache."""

import pytest

from eco_summaries.core.categories import PLANT
from eco_summaries.core.types import CacheEntry
from eco_summaries.pipeline.partitioner import partition

pytestmark = pytest.mark.unit


def _plants(*names: str):
    return [PLANT.to_entity({"common_name": n, "biome_name": "Steppe"}) for n in names]


def test_hits_and_pending_cover_every_key():
    cache = {"oak::steppe": CacheEntry(summary="An oak.", model_used="m")}
    part = partition(_plants("Oak", "Birch"), cache)

    assert part.results == {"oak::steppe": "An oak."}
    assert list(part.pending) == ["birch::steppe"]
    assert part.keys == ("oak::steppe", "birch::steppe")
    assert not part.fully_cached


def test_duplicates_are_pending_once_with_first_occurrence():
    entities = [
        PLANT.to_entity({"common_name": "Oak", "biome_name": "Steppe", "note": "first"}),
        PLANT.to_entity({"common_name": " OAK", "biome_name": "steppe", "note": "second"}),
    ]
    part = partition(entities, {})
    assert list(part.pending) == ["oak::steppe"]
    assert part.pending["oak::steppe"].fields["note"] == "first"
    assert part.keys == ("oak::steppe", "oak::steppe")


def test_blank_cached_summary_is_not_a_hit():
    cache = {"oak::steppe": CacheEntry(summary="  ", model_used="m")}
    part = partition(_plants("Oak"), cache)
    assert part.results == {}
    assert "oak::steppe" in part.pending


def test_all_cached_is_fully_cached():
    cache = {"oak::steppe": CacheEntry(summary="An oak.", model_used="m")}
    part = partition(_plants("Oak", "oak"), cache)
    assert part.fully_cached
    assert part.keys == ("oak::steppe", "oak::steppe")
