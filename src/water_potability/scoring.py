# src/water_potability/scoring.py
"""
Rule-based potability scorer.

Each parameter earns points when its value falls in the optimal band, fewer
points in the acceptable band (pH only), nothing otherwise. The sum is a score
in [0, 100] that is mapped to Good / Moderate / Poor.

The heuristic is a placeholder: callers go through `get_scorer()` so a trained
model can be registered under another name without touching them.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .config import BandSpec, PotabilityConfig
from .models import (
    SAMPLE_FIELDS,
    Category,
    CriterionResult,
    CriterionStatus,
    Sample,
    ScoreResult,
)


log = logging.getLogger(__name__)


Scorer = Callable[[Sample], ScoreResult]


@dataclass(frozen=True)
class Band:
    low: Optional[float] = None
    high: Optional[float] = None
    low_inclusive: bool = True
    high_inclusive: bool = True

    @classmethod
    def from_spec(cls, spec: BandSpec) -> "Band":
        low, high, low_inc, high_inc = spec
        return cls(low, high, low_inc, high_inc)

    def contains(self, value: float) -> bool:
        if self.low is not None:
            if value < self.low or (value == self.low and not self.low_inclusive):
                return False
        if self.high is not None:
            if value > self.high or (value == self.high and not self.high_inclusive):
                return False
        return True

    def describe(self) -> str:
        if self.low is None and self.high is None:
            return "any"
        if self.low is None:
            return f"{'<=' if self.high_inclusive else '<'} {self.high:g}"
        if self.high is None:
            return f"{'>=' if self.low_inclusive else '>'} {self.low:g}"
        left = "[" if self.low_inclusive else "("
        right = "]" if self.high_inclusive else ")"
        return f"{left}{self.low:g}, {self.high:g}{right}"


def classify(score: float, cfg: Optional[PotabilityConfig] = None) -> Category:
    """score >= 80 -> Good; 50 <= score < 80 -> Moderate; score < 50 -> Poor."""
    cfg = cfg or PotabilityConfig()
    if score >= cfg.good_min_score:
        return Category.GOOD
    if score >= cfg.moderate_min_score:
        return Category.MODERATE
    return Category.POOR


def score_criterion(name: str, value: float, cfg: PotabilityConfig) -> CriterionResult:
    optimal = Band.from_spec(cfg.optimal_bands[name])
    optimal_pts = cfg.optimal_points[name]

    acceptable_spec = cfg.acceptable_bands.get(name)
    acceptable = Band.from_spec(acceptable_spec) if acceptable_spec else None

    if optimal.contains(value):
        status, points = CriterionStatus.OPTIMAL, optimal_pts
    elif acceptable is not None and acceptable.contains(value):
        status, points = CriterionStatus.ACCEPTABLE, cfg.acceptable_points.get(name, 0.0)
    else:
        status, points = CriterionStatus.OUTSIDE, 0.0

    return CriterionResult(
        field_name=name,
        value=value,
        status=status,
        points=points,
        max_points=optimal_pts,
    )


def heuristic_score(sample: Sample, cfg: Optional[PotabilityConfig] = None) -> ScoreResult:
    cfg = cfg or PotabilityConfig()

    criteria: List[CriterionResult] = []
    for name in SAMPLE_FIELDS:
        crit = score_criterion(name, getattr(sample, name), cfg)
        log.debug("%s=%s -> %s (+%s)", name, crit.value, crit.status.value, crit.points)
        criteria.append(crit)

    total = sum(c.points for c in criteria)
    # the band table tops out at 110; the score is capped at 100
    total = max(0.0, min(100.0, total))

    return ScoreResult(score=total, category=classify(total, cfg), criteria=criteria)


# =============================================================================
# Scorer registry
# =============================================================================

_SCORERS: Dict[str, Callable[[Sample, PotabilityConfig], ScoreResult]] = {
    "heuristic": heuristic_score,
}


def register_scorer(name: str, fn: Callable[[Sample, PotabilityConfig], ScoreResult]) -> None:
    key = (name or "").strip().lower()
    if not key:
        raise ValueError("Scorer name must not be empty")
    _SCORERS[key] = fn


def available_scorers() -> List[str]:
    return sorted(_SCORERS)


def get_scorer(name: Optional[str] = None, cfg: Optional[PotabilityConfig] = None) -> Scorer:
    """
    Return a Sample -> ScoreResult callable bound to `cfg`.
    Raises KeyError for unknown names.
    """
    cfg = cfg or PotabilityConfig()
    key = (name or cfg.scorer_name).strip().lower()
    if key not in _SCORERS:
        raise KeyError(f"Unknown scorer: {key!r} (available: {available_scorers()})")
    fn = _SCORERS[key]

    def _bound(sample: Sample) -> ScoreResult:
        return fn(sample, cfg)

    return _bound


def score(sample: Sample, cfg: Optional[PotabilityConfig] = None) -> ScoreResult:
    """Score a sample with the configured scorer."""
    return get_scorer(cfg=cfg)(sample)
