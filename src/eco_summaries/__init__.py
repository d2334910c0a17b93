"""Cached, deduplicated Gemini summaries for biomes, plants and pests."""

import importlib.metadata
import logging

from eco_summaries.config import FrozenConfig, ResolvedConfig, resolve_config
from eco_summaries.core.categories import BIOME, CATEGORIES, PEST, PLANT, Category
from eco_summaries.core.exceptions import (
    CacheIOError,
    ConfigurationError,
    EcoSummaryError,
    EmptyResponse,
    InvalidRequest,
    NoApiKeyConfigured,
    UpstreamError,
    UpstreamHttpError,
    UpstreamMalformedResponse,
)
from eco_summaries.core.keys import normalize
from eco_summaries.core.types import (
    BatchResult,
    CacheEntry,
    Entity,
    Failure,
    Result,
    SingleResult,
    Success,
)
from eco_summaries.executor import SummaryExecutor, create_executor
from eco_summaries.store import JsonCacheStore, StoreRegistry
from eco_summaries.telemetry import TelemetryContext, TelemetryReporter

try:
    __version__ = importlib.metadata.version("eco-summaries")
except importlib.metadata.PackageNotFoundError:
    __version__ = "development"

# Consuming applications decide where log records go.
logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [  # noqa: RUF022
    # Executor
    "SummaryExecutor",
    "create_executor",
    # Configuration
    "resolve_config",
    "ResolvedConfig",
    "FrozenConfig",
    # Categories and keys
    "Category",
    "CATEGORIES",
    "BIOME",
    "PLANT",
    "PEST",
    "normalize",
    # Storage
    "JsonCacheStore",
    "StoreRegistry",
    # Types
    "Entity",
    "CacheEntry",
    "BatchResult",
    "SingleResult",
    "Result",
    "Success",
    "Failure",
    # Exceptions
    "EcoSummaryError",
    "ConfigurationError",
    "NoApiKeyConfigured",
    "UpstreamError",
    "UpstreamHttpError",
    "UpstreamMalformedResponse",
    "EmptyResponse",
    "CacheIOError",
    "InvalidRequest",
    # Telemetry
    "TelemetryContext",
    "TelemetryReporter",
]
