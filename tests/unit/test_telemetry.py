"""Telemetry context: no-op by default, scoped metrics when enabled."""

import pytest

from eco_summaries.telemetry import (
    TELEMETRY_ENV_VAR,
    InMemoryReporter,
    TelemetryContext,
    TelemetryReporter,
)

pytestmark = pytest.mark.unit


def test_disabled_context_is_a_shared_no_op():
    reporter = InMemoryReporter()
    ctx = TelemetryContext(reporter)
    assert ctx is TelemetryContext()
    with ctx("summaries.batch"):
        ctx.count("cache_hits", 3)
    assert not reporter.timings
    assert not reporter.metrics


def test_enabled_context_records_nested_scopes(monkeypatch):
    monkeypatch.setenv(TELEMETRY_ENV_VAR, "1")
    reporter = InMemoryReporter()
    ctx = TelemetryContext(reporter)

    with ctx("summaries"):
        with ctx("batch", category="plant"):
            ctx.count("cache_hits", 2)
            ctx.count("cache_hits")

    assert set(reporter.timings) == {"summaries", "summaries.batch"}
    _, metadata = reporter.timings["summaries.batch"][0]
    assert metadata["category"] == "plant"
    assert metadata["parent_scope"] == "summaries"
    assert reporter.total("summaries.batch.cache_hits") == 3
    assert "summaries.batch.cache_hits" in reporter.get_report()


def test_failing_reporter_does_not_break_the_scope(monkeypatch, caplog):
    monkeypatch.setenv(TELEMETRY_ENV_VAR, "1")

    class Broken:
        def record_timing(self, scope, duration, **metadata):
            raise RuntimeError("boom")

        def record_metric(self, scope, value, **metadata):
            raise RuntimeError("boom")

    good = InMemoryReporter()
    ctx = TelemetryContext(Broken(), good)
    with ctx("work"):
        ctx.gauge("size", 4.0)

    assert "work" in good.timings
    assert "Telemetry reporter 'Broken' failed" in caplog.text


def test_in_memory_reporter_conforms_to_protocol():
    assert isinstance(InMemoryReporter(), TelemetryReporter)


@pytest.mark.asyncio
async def test_executor_reports_cache_and_fallback_counters(monkeypatch, tmp_path):
    from eco_summaries.config import FrozenConfig
    from eco_summaries.executor import create_executor

    monkeypatch.setenv(TELEMETRY_ENV_VAR, "1")
    reporter = InMemoryReporter()
    executor = create_executor(FrozenConfig(cache_dir=tmp_path), reporters=[reporter])

    await executor.summarize_batch("pest", [{"pest_name": "Aphid", "biome_name": "Cfa"}])
    await executor.summarize_batch("pest", [{"pest_name": "Aphid", "biome_name": "Cfa"}])

    assert reporter.total("summaries.batch.fallback") == 1
    assert reporter.total("summaries.batch.cache_hits") == 1
    assert "summaries.batch.summaries.store.write" in reporter.timings
