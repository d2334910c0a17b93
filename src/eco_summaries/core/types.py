"""Core data types that flow through the summary pipeline.

Entities, cache entries and results are immutable dataclasses. Stages hand
``Success``/``Failure`` values to each other instead of raising, so the
executor can route every upstream failure to the fallback synthesizer.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from datetime import UTC, datetime
from types import MappingProxyType
import typing

T = typing.TypeVar("T")

# --- Provenance tags ---

PROVENANCE_CACHE = "cache"
FALLBACK_NO_KEY = "fallback/no-key"
FALLBACK_GENERATOR_FAILED = "fallback/generator-failed"
FALLBACK_PROVENANCES = frozenset({FALLBACK_NO_KEY, FALLBACK_GENERATOR_FAILED})


def _freeze_mapping(m: Mapping[str, T] | None) -> Mapping[str, T]:
    """Return an immutable mapping view (empty when ``m`` is None)."""
    if isinstance(m, MappingProxyType):
        return m
    return MappingProxyType(dict(m or {}))


def _require(
    *,
    condition: bool,
    message: str,
    exc: type[Exception] = ValueError,
    field_name: str | None = None,
) -> None:
    """Centralized validation with optional field context for clearer errors."""
    if not condition:
        if field_name:
            raise exc(f"{field_name}: {message}")
        raise exc(message)


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp used for ``generatedAt``."""
    moment = now or datetime.now(UTC)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# --- Result Monad ---
# Stages return Success | Failure so the executor decides recovery explicitly.

TSuccess = typing.TypeVar("TSuccess")
TFailure = typing.TypeVar("TFailure", bound=Exception)


@dataclasses.dataclass(frozen=True, slots=True)
class Success[TSuccess]:
    """A successful stage result."""

    value: TSuccess


@dataclasses.dataclass(frozen=True, slots=True)
class Failure[TFailure]:
    """A failed stage result, carrying the classified error."""

    error: TFailure


type Result[TSuccess, TFailure] = Success[TSuccess] | Failure[TFailure]


# --- Core Data Models ---


@dataclasses.dataclass(frozen=True, slots=True)
class Entity:
    """One record needing a summary.

    ``name`` and ``context`` are the identity fields; ``fields`` holds the
    original record (identity plus auxiliary context) and is only used for
    prompts and for echoing into cache entries.
    """

    category: str
    key: str
    name: str | None
    context: str | None
    fields: Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate invariants and freeze the record mapping."""
        _require(
            condition=isinstance(self.key, str) and "::" in self.key,
            message=f"must be a normalized cache key, got {self.key!r}",
            field_name="key",
        )
        object.__setattr__(self, "fields", _freeze_mapping(self.fields))


@dataclasses.dataclass(frozen=True, slots=True)
class CacheEntry:
    """A persisted summary plus its provenance.

    Serialized with the field names used by existing cache documents:
    ``summary``, the echoed source fields, ``modelUsed`` and ``generatedAt``.
    """

    summary: str
    model_used: str
    generated_at: str | None = None
    source_fields: Mapping[str, typing.Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate invariants and freeze the echoed fields."""
        _require(
            condition=isinstance(self.summary, str),
            message="must be str",
            field_name="summary",
            exc=TypeError,
        )
        object.__setattr__(self, "source_fields", _freeze_mapping(self.source_fields))

    @property
    def has_summary(self) -> bool:
        return bool(self.summary.strip())

    @property
    def is_fallback(self) -> bool:
        return self.model_used in FALLBACK_PROVENANCES

    def to_dict(self) -> dict[str, typing.Any]:
        data: dict[str, typing.Any] = {"summary": self.summary}
        for name, value in self.source_fields.items():
            if name not in _RESERVED_ENTRY_FIELDS:
                data[name] = value
        data["modelUsed"] = self.model_used
        if self.generated_at is not None:
            data["generatedAt"] = self.generated_at
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, typing.Any]) -> CacheEntry:
        """Build an entry from a stored JSON object, tolerating legacy shapes."""
        summary = data.get("summary")
        source_fields = {
            k: v for k, v in data.items() if k not in _RESERVED_ENTRY_FIELDS
        }
        generated_at = data.get("generatedAt")
        return cls(
            summary=summary if isinstance(summary, str) else "",
            model_used=str(data.get("modelUsed") or "unknown"),
            generated_at=str(generated_at) if generated_at is not None else None,
            source_fields=source_fields,
        )


_RESERVED_ENTRY_FIELDS = frozenset({"summary", "modelUsed", "generatedAt"})


@dataclasses.dataclass(frozen=True, slots=True)
class BatchResult:
    """Outcome of a batch operation.

    ``summaries`` maps every requested key to its summary; ``keys`` lists the
    key of each input record in input order, so repeated records resolve to
    the same entry.
    """

    summaries: Mapping[str, str]
    keys: tuple[str, ...]
    provenance: str
    diagnostic: str | None = None

    def __post_init__(self) -> None:
        """Enforce the total-coverage invariant."""
        missing = [k for k in self.keys if k not in self.summaries]
        _require(
            condition=not missing,
            message=f"unresolved keys {missing!r}",
            field_name="summaries",
        )
        object.__setattr__(self, "summaries", _freeze_mapping(self.summaries))

    def in_input_order(self) -> list[str]:
        """Return one summary per input record, in input order."""
        return [self.summaries[key] for key in self.keys]

    def to_response(self) -> dict[str, typing.Any]:
        """Shape used by the HTTP layer: ``{"summaries": ..., "model": ...}``."""
        response: dict[str, typing.Any] = {
            "summaries": dict(self.summaries),
            "model": self.provenance,
        }
        if self.diagnostic:
            response["diagnostic"] = self.diagnostic
        return response


@dataclasses.dataclass(frozen=True, slots=True)
class SingleResult:
    """Outcome of a single-entity operation."""

    key: str
    summary: str
    cached: bool
    provenance: str
    diagnostic: str | None = None

    def to_response(self) -> dict[str, typing.Any]:
        response: dict[str, typing.Any] = {"summary": self.summary}
        if self.cached:
            response["cached"] = True
        else:
            response["model"] = self.provenance
        if self.diagnostic:
            response["diagnostic"] = self.diagnostic
        return response


__all__ = [
    "FALLBACK_GENERATOR_FAILED",
    "FALLBACK_NO_KEY",
    "FALLBACK_PROVENANCES",
    "PROVENANCE_CACHE",
    "BatchResult",
    "CacheEntry",
    "Entity",
    "Failure",
    "Result",
    "SingleResult",
    "Success",
    "utc_timestamp",
]
