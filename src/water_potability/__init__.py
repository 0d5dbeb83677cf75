# src/water_potability/__init__.py
"""
water_potability package.

Water sample potability classification:
- validate raw parameter input (every violation reported)
- score with a swappable rule-based scorer
- ingest / export CSV and JSON datasets
"""

from .models import Category, Sample, ScoreResult
from .scoring import score
from .tabular_io import accept_file, to_csv
from .validation import validate

__all__ = ["Category", "Sample", "ScoreResult", "accept_file", "score", "to_csv", "validate"]
__version__ = "0.1.0"
