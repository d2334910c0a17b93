"""Decode model output text into validated summary payloads.

Models frequently wrap JSON in a Markdown code fence; the fence is removed
before parsing. Validation uses pydantic so malformed payloads surface as
``UpstreamMalformedResponse`` failures instead of exceptions.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, RootModel, ValidationError, model_validator

from eco_summaries.core.exceptions import EmptyResponse, UpstreamMalformedResponse
from eco_summaries.core.types import Failure, Result, Success

log = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```(?:json)?[ \t]*\n?|\n?[ \t]*```$", re.IGNORECASE)


class BatchSummaries(RootModel[dict[str, str]]):
    """Flat ``{key: summary}`` object returned for a batch prompt.

    Non-string values are dropped; an object left with no string values is
    rejected.
    """

    @model_validator(mode="before")
    @classmethod
    def keep_string_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        kept = {str(k): v for k, v in data.items() if isinstance(v, str)}
        if not kept:
            raise ValueError("object holds no string summaries")
        return kept

    def as_mapping(self) -> dict[str, str]:
        return dict(self.root)


class SingleSummary(BaseModel):
    """``{"summary": "..."}`` object returned for a single-entity prompt."""

    model_config = ConfigDict(extra="ignore", strict=True)

    summary: str


type SummaryPayload = BatchSummaries | SingleSummary


def strip_code_fence(text: str) -> str:
    """Remove surrounding whitespace and an optional ```json fence.

    >>> strip_code_fence('```json\\n{"a": "b"}\\n```')
    '{"a": "b"}'
    """
    return _FENCE_RE.sub("", text.strip()).strip()


def decode_response[M: BaseModel](
    raw_text: str | None, schema: type[M], *, model: str | None = None
) -> Result[M, UpstreamMalformedResponse]:
    """Parse and validate ``raw_text`` against ``schema``.

    Args:
        raw_text: Text returned by the model, possibly fenced.
        schema: ``BatchSummaries`` or ``SingleSummary``.
        model: Model identifier, recorded on the failure for diagnostics.

    Returns:
        ``Success`` with the validated payload, ``EmptyResponse`` when there
        was no text at all, otherwise ``UpstreamMalformedResponse``.
    """
    if raw_text is None or not raw_text.strip():
        return Failure(EmptyResponse(model=model))

    cleaned = strip_code_fence(raw_text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return Failure(
            UpstreamMalformedResponse(raw_text, f"invalid JSON ({e.msg})", model=model)
        )

    try:
        return Success(schema.model_validate(data))
    except ValidationError as e:
        log.debug("Response failed %s validation: %s", schema.__name__, e)
        return Failure(
            UpstreamMalformedResponse(
                raw_text, f"does not match {schema.__name__}", model=model
            )
        )


__all__ = [
    "BatchSummaries",
    "SingleSummary",
    "SummaryPayload",
    "decode_response",
    "strip_code_fence",
]
