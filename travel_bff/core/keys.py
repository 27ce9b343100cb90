"""Canonical cache-key construction.

Every call site builds its key through :func:`build_cache_key` so that the
same logical request always maps to the same string, whatever the caller's
formatting habits::

    >>> build_cache_key("flights", "TIA", "FCO", date(2025, 7, 1), None, 2)
    'flights:TIA:FCO:2025-07-01::2'

Parts are percent-encoded, so a ``:`` inside a parameter can never shift the
boundaries between parameters.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from urllib.parse import quote

from travel_bff.utils.exceptions import ValidationError

__all__ = ["KEY_SEPARATOR", "build_cache_key", "render_key_part"]

KEY_SEPARATOR = ":"

# characters left readable in key parts; everything else is %-escaped
_SAFE_CHARS = "-_.,@+"


def render_key_part(value: Any) -> str:
    """Render one typed parameter as its canonical text."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        return render_key_part(value.value)
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise ValidationError("non-finite number in cache key", context={"value": repr(value)})
        return repr(int(value)) if value.is_integer() else repr(value)
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str):
        return quote(value, safe=_SAFE_CHARS)
    raise ValidationError(
        "unsupported cache key parameter type",
        context={"type": type(value).__name__},
    )


def build_cache_key(namespace: str, *params: Any) -> str:
    """Join *namespace* and the ordered *params* into one cache key.

    Raises:
        ValidationError: empty namespace or a parameter of unsupported type.
    """
    if not isinstance(namespace, str) or not namespace.strip():
        raise ValidationError("cache key namespace must be a non-empty string")
    parts = [quote(namespace.strip(), safe=_SAFE_CHARS)]
    parts.extend(render_key_part(p) for p in params)
    return KEY_SEPARATOR.join(parts)
