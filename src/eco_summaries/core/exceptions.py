"""Exception hierarchy for the summary cache pipeline.

Upstream and configuration errors are recovered inside a batch operation by
the fallback synthesizer. ``CacheIOError`` and ``InvalidRequest`` are the only
errors that escape to the caller.
"""

from __future__ import annotations

from pathlib import Path


class EcoSummaryError(Exception):
    """Base exception for summary pipeline errors."""


class ConfigurationError(EcoSummaryError):
    """Raised when the pipeline is misconfigured."""


class NoApiKeyConfigured(ConfigurationError):  # noqa: N818
    """No credential is available for the generation endpoint."""

    def __init__(self, message: str = "No API key configured for generation") -> None:
        super().__init__(message)


class UpstreamError(EcoSummaryError):
    """Base class for failures reported by the generation endpoint."""


class UpstreamHttpError(UpstreamError):
    """Non-success status (or timeout) from the generation endpoint.

    ``status`` is ``None`` when the request never produced a response, e.g.
    when it timed out or the connection failed.
    """

    def __init__(self, status: int | None, body: str, *, model: str | None = None):
        self.status = status
        self.body = body
        self.model = model
        label = f"HTTP {status}" if status is not None else "request failed"
        prefix = f"[{model}] " if model else ""
        super().__init__(f"{prefix}{label}: {_truncate(body)}")


class UpstreamMalformedResponse(UpstreamError):
    """Response text was present but did not decode to the requested shape."""

    def __init__(
        self, raw_text: str, reason: str = "malformed response", *, model: str | None = None
    ):
        self.raw_text = raw_text
        self.reason = reason
        self.model = model
        prefix = f"[{model}] " if model else ""
        super().__init__(f"{prefix}{reason}: {_truncate(raw_text)!r}")


class EmptyResponse(UpstreamMalformedResponse):
    """Response carried no text payload at all."""

    def __init__(self, *, model: str | None = None) -> None:
        super().__init__("", "empty response", model=model)


class CacheIOError(EcoSummaryError):
    """Reading or writing a cache document failed for a reason other than not-found."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"Cache document {self.path}: {message}")


class InvalidRequest(EcoSummaryError):  # noqa: N818
    """A single-entity request is missing required identity fields."""

    def __init__(self, missing_fields: tuple[str, ...], category: str) -> None:
        self.missing_fields = missing_fields
        self.category = category
        super().__init__(
            f"Missing {' or '.join(missing_fields)} for {category} summary request"
        )


def _truncate(text: str, limit: int = 300) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


__all__ = [
    "CacheIOError",
    "ConfigurationError",
    "EcoSummaryError",
    "EmptyResponse",
    "InvalidRequest",
    "NoApiKeyConfigured",
    "UpstreamError",
    "UpstreamHttpError",
    "UpstreamMalformedResponse",
]
