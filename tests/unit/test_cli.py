"""Command line interface."""

import json

import pytest

from eco_summaries.__main__ import main

pytestmark = pytest.mark.unit


def test_batch_prints_response_and_writes_cache(tmp_path, capsys):
    records = tmp_path / "pests.json"
    records.write_text(
        json.dumps([{"pest_name": "Locust", "biome_name": "Steppe"}]), encoding="utf-8"
    )
    cache_dir = tmp_path / "cache"

    code = main(["--cache-dir", str(cache_dir), "batch", "pest", str(records)])

    assert code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["model"] == "fallback/no-key"
    assert output["summaries"]["locust::steppe"].startswith("Locust is a known pest")
    assert (cache_dir / "pest-summaries.json").exists()


def test_one_reports_invalid_request(tmp_path, capsys):
    record = tmp_path / "pest.json"
    record.write_text(json.dumps({"pest_name": "Locust"}), encoding="utf-8")

    code = main(["--cache-dir", str(tmp_path), "one", "pest", str(record)])

    assert code == 2
    assert "biome_name" in capsys.readouterr().err


def test_one_returns_cached_summary(tmp_path, capsys):
    (tmp_path / "plant-summaries.json").write_text(
        json.dumps({"oak::steppe": {"summary": "An oak."}}), encoding="utf-8"
    )
    record = tmp_path / "plant.json"
    record.write_text(json.dumps({"common_name": "Oak", "biome_name": "Steppe"}), encoding="utf-8")

    assert main(["--cache-dir", str(tmp_path), "one", "plant", str(record)]) == 0
    assert json.loads(capsys.readouterr().out) == {"summary": "An oak.", "cached": True}


def test_config_json_redacts_key(monkeypatch, capsys):
    monkeypatch.setenv("GEMINI_API_KEY", "super-secret")

    assert main(["--model", "m1", "--model", "m2", "config", "--json"]) == 0

    out = capsys.readouterr().out
    assert "super-secret" not in out
    info = json.loads(out)
    assert info["config"]["has_api_key"] is True
    assert info["config"]["models"] == ["m1", "m2"]
    assert info["sources"]["models"] == "programmatic"
    assert info["sources"]["api_key"] == "env"


def test_batch_rejects_non_array_input(tmp_path, capsys):
    record = tmp_path / "pest.json"
    record.write_text("{}", encoding="utf-8")
    assert main(["--cache-dir", str(tmp_path), "batch", "pest", str(record)]) == 2
    assert "JSON array" in capsys.readouterr().err


@pytest.mark.parametrize("payload", [["x"], [{"pest_name": "Locust"}, 3], [None]])
def test_batch_rejects_non_object_items(tmp_path, capsys, payload):
    records = tmp_path / "pests.json"
    records.write_text(json.dumps(payload), encoding="utf-8")

    assert main(["--cache-dir", str(tmp_path), "batch", "pest", str(records)]) == 2
    assert "Cannot read input" in capsys.readouterr().err
    assert not (tmp_path / "pest-summaries.json").exists()
