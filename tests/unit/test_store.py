"""JSON cache store: reads, atomic writes and merge-on-write."""

import asyncio
from datetime import date
import json

import pytest

from eco_summaries.core.exceptions import CacheIOError
from eco_summaries.core.types import CacheEntry
from eco_summaries.store import JsonCacheStore, StoreRegistry

pytestmark = pytest.mark.unit


def _entry(summary: str, model: str = "model-a") -> CacheEntry:
    return CacheEntry(summary=summary, model_used=model, generated_at="2025-01-01T00:00:00.000Z")


@pytest.mark.asyncio
async def test_missing_file_reads_as_empty(tmp_path):
    store = JsonCacheStore(tmp_path / "nope" / "plant-summaries.json")
    assert await store.read() == {}


@pytest.mark.asyncio
async def test_empty_file_reads_as_empty(tmp_path):
    path = tmp_path / "plant-summaries.json"
    path.write_text("", encoding="utf-8")
    assert await JsonCacheStore(path).read() == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '"text"'])
async def test_corrupt_document_raises_cache_io_error(tmp_path, content):
    path = tmp_path / "plant-summaries.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CacheIOError) as exc_info:
        await JsonCacheStore(path).read()
    assert exc_info.value.path == path


@pytest.mark.asyncio
async def test_unreadable_path_raises_cache_io_error(tmp_path):
    path = tmp_path / "plant-summaries.json"
    path.mkdir()
    with pytest.raises(CacheIOError):
        await JsonCacheStore(path).read()


@pytest.mark.asyncio
async def test_write_creates_directories_and_pretty_prints(tmp_path):
    path = tmp_path / "nested" / "dir" / "pest-summaries.json"
    store = JsonCacheStore(path)
    await store.write({"locust::steppe": _entry("Swarms.")})

    text = path.read_text(encoding="utf-8")
    assert text.startswith('{\n  "locust::steppe": {\n')
    assert json.loads(text)["locust::steppe"]["modelUsed"] == "model-a"
    assert list(path.parent.iterdir()) == [path]


@pytest.mark.asyncio
async def test_non_json_echoed_values_are_stored_as_text(tmp_path):
    path = tmp_path / "pest-summaries.json"
    entry = CacheEntry(
        summary="Swarms.",
        model_used="model-a",
        source_fields={"pest_name": "Locust", "biome_name": date(2025, 1, 2)},
    )

    await JsonCacheStore(path).write({"locust::2025-01-02": entry})

    assert json.loads(path.read_text(encoding="utf-8"))["locust::2025-01-02"][
        "biome_name"
    ] == "2025-01-02"
    assert list(tmp_path.iterdir()) == [path]


@pytest.mark.asyncio
async def test_unserializable_document_raises_without_leaving_temp_files(tmp_path):
    loop: list = []
    loop.append(loop)
    entry = CacheEntry(summary="x", model_used="model-a", source_fields={"species": loop})

    with pytest.raises(CacheIOError) as exc_info:
        await JsonCacheStore(tmp_path / "biome-summaries.json").write({"a::b": entry})

    assert "cannot serialize" in str(exc_info.value)
    assert list(tmp_path.iterdir()) == []


@pytest.mark.asyncio
async def test_legacy_entries_survive_a_rewrite(tmp_path):
    path = tmp_path / "biome-summaries.json"
    path.write_text(
        json.dumps({"Cfa": {"summary": "Old", "modelUsed": "gemini-2.5-flash-lite"}}),
        encoding="utf-8",
    )
    store = JsonCacheStore(path)
    await store.merge({"humid::cfa": _entry("New")})

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["Cfa"] == {"summary": "Old", "modelUsed": "gemini-2.5-flash-lite"}
    assert data["humid::cfa"]["summary"] == "New"


@pytest.mark.asyncio
async def test_merge_never_replaces_an_existing_summary(tmp_path):
    store = JsonCacheStore(tmp_path / "plant-summaries.json")
    await store.write({"a::b": _entry("first")})

    written = await store.merge({"a::b": _entry("second"), "c::d": _entry("other")})

    assert written["a::b"].summary == "first"
    assert (await store.read())["c::d"].summary == "other"


@pytest.mark.asyncio
async def test_merge_replaces_blank_summaries(tmp_path):
    store = JsonCacheStore(tmp_path / "plant-summaries.json")
    await store.write({"a::b": _entry("")})
    await store.merge({"a::b": _entry("filled")})
    assert (await store.read())["a::b"].summary == "filled"


@pytest.mark.asyncio
async def test_concurrent_merges_keep_every_entry(tmp_path):
    store = JsonCacheStore(tmp_path / "plant-summaries.json")
    await asyncio.gather(
        *(store.merge({f"k{i}::ctx": _entry(f"s{i}")}) for i in range(10))
    )
    assert sorted(await store.read()) == sorted(f"k{i}::ctx" for i in range(10))


def test_registry_hands_out_one_store_per_category(tmp_path):
    registry = StoreRegistry(tmp_path)
    assert registry.get("plant") is registry["plant"]
    assert registry.get("pest").path == tmp_path / "pest-summaries.json"
    assert registry.get("biome") is not registry.get("plant")
