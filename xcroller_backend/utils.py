"""
Small coercion helpers shared across backend modules.
"""
from __future__ import annotations

import math
import os
from typing import Any

BOOL_TRUE_VALUES = frozenset({"1", "true", "yes", "on", "enabled"})
BOOL_FALSE_VALUES = frozenset({"0", "false", "no", "off", "disabled"})

# SQLite INTEGER range.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def parse_bool(value: Any, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in BOOL_TRUE_VALUES:
            return True
        if normalized in BOOL_FALSE_VALUES:
            return False
    return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name) if name else None
    if raw is None:
        return default
    return parse_bool(raw, default)


def parse_int(value: Any) -> int | None:
    """
    Loose int coercion; returns None for missing or unparseable values.

    Results are clamped to the signed 64-bit range so they always bind as
    SQLite integers.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        out = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None
    return max(INT64_MIN, min(out, INT64_MAX))


def parse_float(value: Any) -> float | None:
    """Loose float coercion; NaN and infinities count as missing."""
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
        out = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out
