"""Coercion helpers for raw result rows.

Drivers disagree on the Python types they hand back (``Decimal`` vs
``float``, ``int`` flags vs ``bool``, ``datetime`` vs ISO strings). Results
are normalized to JSON-safe values before leaving the adapters.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any


def to_int(value: Any, default: int | None = 0) -> int | None:
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    try:
        return int(value)
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def to_float(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, Decimal)):
        return value != 0
    if isinstance(value, (bytes, bytearray)):
        return any(value)
    text = str(value).strip().lower()
    if text in ("1", "true", "t", "yes", "y"):
        return True
    if text in ("0", "false", "f", "no", "n"):
        return False
    return None


def to_iso(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def to_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def compose_name(
    preferred: Any,
    given: Any,
    family: Any,
) -> str | None:
    """Preferred name, else "given family", else None."""
    if preferred and str(preferred).strip():
        return str(preferred).strip()
    parts = [str(p).strip() for p in (given, family) if p and str(p).strip()]
    return " ".join(parts) or None
