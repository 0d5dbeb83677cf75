# src/water_potability/utils.py
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd


def normalize_text(value: object) -> str:
    """
    Normalize free text (headers, raw form values) for consistent comparison.
    Strips BOM / RTL-LTR markers and collapses whitespace.
    """
    s = "" if value is None else str(value)
    s = s.replace("\ufeff", "").replace("\u200f", "").replace("\u200e", "")
    s = s.replace("\u00A0", " ")
    s = re.sub(r"\s+", " ", s).strip()
    return s


def normalize_key(value: object) -> str:
    return normalize_text(value).lower()


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return normalize_text(value) == ""


def parse_finite(value: Any) -> Optional[float]:
    """
    Parse a raw value to a finite float.
    Returns None for blanks, text, NaN and +/-inf. Booleans are not numbers here.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    try:
        x = float(normalize_text(value)) if isinstance(value, str) else float(value)
    except (TypeError, ValueError, OverflowError):
        # huge ints from JSON do not fit a float
        return None
    if not math.isfinite(x):
        return None
    return x


def fmt_num(x, decimals=3):
    """Format numbers nicely (trim trailing zeros)."""
    try:
        v = float(x)
    except (TypeError, ValueError):
        return str(x)
    s = f"{v:.{decimals}f}"
    return s.rstrip("0").rstrip(".")


def timestamp_slug(now: Optional[datetime] = None) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision, ':' and '.' replaced by '-'.
    2024-05-01T12:30:45.123Z -> 2024-05-01T12-30-45-123Z
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    iso = now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
    return re.sub(r"[:.]", "-", iso)


def safe_label(label: Any, default: str = "export") -> str:
    """File-name safe label: letters, digits, '.', '_' and '-' only (quotes and slashes become '_')."""
    s = re.sub(r"[^A-Za-z0-9._-]+", "_", normalize_text(label)).strip("._")
    return s or default
