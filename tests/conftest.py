"""
Global test configuration: environment isolation and fake generation adapters.
"""

from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
import os
from pathlib import Path
from typing import Any

import pytest

from eco_summaries.config import FrozenConfig
from eco_summaries.executor import SummaryExecutor
from eco_summaries.pipeline.generation import GenerationClient
from eco_summaries.store import StoreRegistry

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)

_ENV_PREFIXES = ("ECO_SUMMARIES_", "GEMINI_", "GOOGLE_GEMINI_")


# --- Environment Isolation (Autouse) ---
@pytest.fixture(autouse=True)
def isolate_summary_env(request, monkeypatch, tmp_path_factory):
    """Give each test a clean configuration environment.

    - Removes ECO_SUMMARIES_*, GEMINI_* and GOOGLE_GEMINI_* variables
    - Runs the test from an empty directory so no pyproject.toml is found

    Escape hatch: @pytest.mark.allow_env_pollution keeps the environment.
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)
    workdir = tmp_path_factory.mktemp("cwd")
    monkeypatch.chdir(workdir)


def pytest_configure(config):
    """Configure custom markers for test organization."""
    markers = [
        "unit: Fast, isolated unit tests",
        "allow_env_pollution: Keep the caller's environment for this test",
    ]
    for marker in markers:
        config.addinivalue_line("markers", marker)


# --- Fake generation adapter ---


class FakeAdapter:
    """Scripted stand-in for a provider adapter.

    ``responses`` maps a model id to the items returned by successive calls.
    An item is response text, an exception to raise, or an async callable
    taking the prompt.
    """

    def __init__(self, responses: Mapping[str, Iterable[Any]] | None = None):
        self.responses = {model: list(items) for model, items in (responses or {}).items()}
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    @property
    def models_called(self) -> list[str]:
        return [model for model, _ in self.calls]

    async def generate(self, model: str, prompt: str) -> str:
        self.calls.append((model, prompt))
        queue = self.responses.get(model)
        if not queue:
            raise AssertionError(f"Unexpected call to {model}")
        item = queue.pop(0)
        if isinstance(item, BaseException):
            raise item
        if callable(item):
            return await item(prompt)
        return item

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_adapter() -> Callable[..., FakeAdapter]:
    """Factory for :class:`FakeAdapter` instances."""
    return FakeAdapter


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def make_executor(cache_dir) -> Callable[..., SummaryExecutor]:
    """Build an executor over ``cache_dir`` with an optional fake adapter.

    ``adapter=None`` models a deployment without an API key.
    """

    def _make(
        adapter: FakeAdapter | None = None,
        *,
        models: tuple[str, ...] = ("model-a", "model-b"),
        timeout_s: float = 5.0,
    ) -> SummaryExecutor:
        config = FrozenConfig(
            api_key="test-key" if adapter is not None else None,
            models=models,
            cache_dir=cache_dir,
            request_timeout_s=timeout_s,
        )
        client = GenerationClient(adapter, models, timeout_s=timeout_s)
        return SummaryExecutor(
            config,
            stores=StoreRegistry(cache_dir),
            client=client,
            clock=lambda: FIXED_NOW,
        )

    return _make
