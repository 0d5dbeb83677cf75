# src/water_potability/validation.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import PotabilityConfig
from .models import SAMPLE_FIELDS, FieldViolation, Sample, ValidationError, ViolationKind
from .utils import fmt_num, is_blank, normalize_key, parse_finite


log = logging.getLogger(__name__)


ValidationOutcome = Union[Sample, ValidationError]


def _keyed(raw_fields: Mapping[Any, Any]) -> Dict[str, Any]:
    """Map normalized key -> raw value (first occurrence wins)."""
    out: Dict[str, Any] = {}
    for k, v in raw_fields.items():
        out.setdefault(normalize_key(k), v)
    return out


def _check_field(name: str, raw: Any, cfg: PotabilityConfig) -> tuple[Optional[float], Optional[FieldViolation]]:
    if is_blank(raw):
        return None, FieldViolation(name, "is required", ViolationKind.MISSING_FIELD)

    value = parse_finite(raw)
    if value is None:
        return None, FieldViolation(
            name, f"must be a finite number (got {raw!r})", ViolationKind.NOT_A_NUMBER
        )

    bounds = cfg.value_bounds.get(name)
    if bounds is not None:
        lo, hi = bounds
        if value < lo or value > hi:
            unit = cfg.bound_units.get(name, "")
            suffix = f" {unit}" if unit else ""
            return None, FieldViolation(
                name,
                f"must be between {fmt_num(lo)} and {fmt_num(hi)}{suffix} (got {fmt_num(value)})",
                ViolationKind.OUT_OF_RANGE,
            )

    return value, None


def validate(raw_fields: Mapping[Any, Any], cfg: Optional[PotabilityConfig] = None) -> ValidationOutcome:
    """
    Normalize raw per-field input into a Sample.

    Every required field is checked on its own, so the returned ValidationError
    lists every violation (in canonical field order), never just the first one.
    Keys are matched case-insensitively after trimming; unknown keys are ignored.
    """
    cfg = cfg or PotabilityConfig()
    keyed = _keyed(raw_fields or {})

    values: Dict[str, float] = {}
    violations: List[FieldViolation] = []

    for name in SAMPLE_FIELDS:
        value, violation = _check_field(name, keyed.get(name), cfg)
        if violation is not None:
            violations.append(violation)
        else:
            values[name] = value

    if violations:
        log.warning("Rejected sample: %s", "; ".join(v.message for v in violations))
        return ValidationError(violations=violations)

    return Sample(**values)
