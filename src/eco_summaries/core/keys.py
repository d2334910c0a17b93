"""Cache key derivation.

Two records that differ only in casing or surrounding whitespace of their
identity fields normalize to the same key, which is what makes generation
happen at most once per entity.
"""

from __future__ import annotations

KEY_SEPARATOR = "::"
UNKNOWN_TOKEN = "unknown"


def _normalize_part(value: object) -> str:
    if value is None:
        return UNKNOWN_TOKEN
    text = str(value).strip()
    return text.lower() if text else UNKNOWN_TOKEN


def normalize(primary_name: str | None = None, context_name: str | None = None) -> str:
    """Return ``"<name>::<context>"`` for the given identity fields.

    Absent or blank values are replaced by ``"unknown"``. Pure and total.

    >>> normalize("Rosa Damascena", "Cfa")
    'rosa damascena::cfa'
    >>> normalize(None, "  ")
    'unknown::unknown'
    """
    return f"{_normalize_part(primary_name)}{KEY_SEPARATOR}{_normalize_part(context_name)}"


__all__ = ["KEY_SEPARATOR", "UNKNOWN_TOKEN", "normalize"]
