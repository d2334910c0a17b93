"""Core data types: cache entries and result shapes."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from eco_summaries.core.types import (
    FALLBACK_NO_KEY,
    BatchResult,
    CacheEntry,
    Entity,
    SingleResult,
    utc_timestamp,
)

pytestmark = pytest.mark.unit


def test_entity_requires_a_normalized_key():
    with pytest.raises(ValueError, match="key"):
        Entity(category="plant", key="not-a-key", name=None, context=None)


def test_cache_entry_serializes_with_document_field_names():
    entry = CacheEntry(
        summary="A shrub.",
        model_used="gemini-2.5-flash-lite",
        generated_at="2025-01-02T03:04:05.000Z",
        source_fields={"scientific_name": "Rosa", "biome_name": "Cfa"},
    )
    assert entry.to_dict() == {
        "summary": "A shrub.",
        "scientific_name": "Rosa",
        "biome_name": "Cfa",
        "modelUsed": "gemini-2.5-flash-lite",
        "generatedAt": "2025-01-02T03:04:05.000Z",
    }


def test_cache_entry_reads_legacy_entries_without_timestamp():
    entry = CacheEntry.from_dict({"summary": "Old text", "modelUsed": "fallback/no-key"})
    assert entry.summary == "Old text"
    assert entry.generated_at is None
    assert entry.is_fallback
    assert "generatedAt" not in entry.to_dict()


def test_cache_entry_without_string_summary_has_no_summary():
    entry = CacheEntry.from_dict({"summary": 42})
    assert not entry.has_summary
    assert entry.model_used == "unknown"


def test_batch_result_requires_every_key_resolved():
    with pytest.raises(ValueError, match="unresolved"):
        BatchResult(summaries={"a::b": "x"}, keys=("a::b", "c::d"), provenance="cache")


def test_batch_result_preserves_input_order_with_duplicates():
    result = BatchResult(
        summaries={"a::x": "A", "b::x": "B"},
        keys=("b::x", "a::x", "b::x"),
        provenance="model-a",
    )
    assert result.in_input_order() == ["B", "A", "B"]
    assert result.to_response() == {"summaries": {"a::x": "A", "b::x": "B"}, "model": "model-a"}


def test_single_result_response_shapes():
    cached = SingleResult(key="a::b", summary="S", cached=True, provenance="cache")
    fresh = SingleResult(
        key="a::b", summary="S", cached=False, provenance=FALLBACK_NO_KEY
    )
    assert cached.to_response() == {"summary": "S", "cached": True}
    assert fresh.to_response() == {"summary": "S", "model": FALLBACK_NO_KEY}


def test_utc_timestamp_normalizes_to_utc():
    moment = datetime(2025, 1, 2, 5, 4, 5, tzinfo=timezone(timedelta(hours=2)))
    assert utc_timestamp(moment) == "2025-01-02T03:04:05.000Z"
    assert utc_timestamp(datetime(2025, 1, 2, tzinfo=UTC)).endswith("Z")
