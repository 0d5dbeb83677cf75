# src/water_potability/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple



# (low, high, low_inclusive, high_inclusive); None = unbounded on that side
BandSpec = Tuple[Optional[float], Optional[float], bool, bool]


@dataclass
class PotabilityConfig:
    # Validator domain bounds (closed intervals)
    value_bounds: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        "ph": (0.0, 14.0),
        "hardness": (0.0, 1000.0),
    })
    bound_units: Dict[str, str] = field(default_factory=lambda: {
        "hardness": "mg/L",
    })

    # Scoring bands. One-sided limits are strict ("below"), except organic_carbon
    # which admits the limit: the reference sample (sulfate=250, organic_carbon=10)
    # then scores 100, and 70 with ph outside both bands.
    optimal_bands: Dict[str, BandSpec] = field(default_factory=lambda: {
        "ph": (6.5, 8.5, True, True),
        "hardness": (150.0, 300.0, True, True),
        "solids": (None, 600.0, True, False),
        "chloramines": (None, 4.0, True, False),
        "sulfate": (None, 250.0, True, False),
        "conductivity": (200.0, 800.0, True, True),
        "organic_carbon": (None, 10.0, True, True),
        "trihalomethanes": (None, 80.0, True, False),
        "turbidity": (None, 5.0, True, False),
    })
    optimal_points: Dict[str, float] = field(default_factory=lambda: {
        "ph": 30.0,
        "hardness": 10.0,
        "solids": 10.0,
        "chloramines": 10.0,
        "sulfate": 10.0,
        "conductivity": 10.0,
        "organic_carbon": 10.0,
        "trihalomethanes": 10.0,
        "turbidity": 10.0,
    })
    acceptable_bands: Dict[str, BandSpec] = field(default_factory=lambda: {
        "ph": (6.0, 9.0, True, True),
    })
    acceptable_points: Dict[str, float] = field(default_factory=lambda: {
        "ph": 15.0,
    })

    # Category thresholds: score >= good_min -> Good, >= moderate_min -> Moderate, else Poor
    good_min_score: float = 80.0
    moderate_min_score: float = 50.0

    scorer_name: str = "heuristic"

    # Session behaviour
    latency_seconds: float = 1.0

    # "simple" = header-positional split (no quoting), "strict" = delimited-text parser
    csv_parser: str = "simple"
    text_encoding: str = "utf-8-sig"

    export_dir: Path = field(default_factory=lambda: Path.cwd() / "outputs")
    export_label: str = "water_quality_data"

    def __post_init__(self) -> None:
        if self.csv_parser not in {"simple", "strict"}:
            raise ValueError(f"Unknown csv_parser: {self.csv_parser!r} (expected 'simple' or 'strict')")
        if not self.moderate_min_score <= self.good_min_score:
            raise ValueError("moderate_min_score must not exceed good_min_score")
        if self.latency_seconds < 0:
            raise ValueError("latency_seconds must be >= 0")


@dataclass(frozen=True)
class InputDiscoveryConfig:
    """
    File discovery defaults for 'all files in same folder'.
    """
    patterns: Tuple[str, ...] = ("*.csv", "*.json")


def config_from_env() -> PotabilityConfig:
    """Build PotabilityConfig from environment variables."""
    kwargs = {}

    latency = os.getenv("WATER_LATENCY_SECONDS", "").strip()
    if latency:
        kwargs["latency_seconds"] = float(latency)

    csv_parser = os.getenv("WATER_CSV_PARSER", "").strip().lower()
    if csv_parser:
        kwargs["csv_parser"] = csv_parser

    scorer = os.getenv("WATER_SCORER", "").strip()
    if scorer:
        kwargs["scorer_name"] = scorer

    export_dir = os.getenv("WATER_EXPORT_DIR", "").strip()
    if export_dir:
        kwargs["export_dir"] = Path(export_dir)

    return PotabilityConfig(**kwargs)
