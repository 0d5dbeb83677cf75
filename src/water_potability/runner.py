# src/water_potability/runner.py
from __future__ import annotations

import logging
from typing import Optional, Tuple, Union

from .config import PotabilityConfig
from .models import (
    DatasetUpload,
    EmptyDatasetError,
    InputMode,
    ManualEntry,
    ResultPayload,
    Sample,
    ScoreResult,
    ValidationError,
)
from .publisher import build_payload
from .scoring import Scorer, get_scorer
from .validation import validate


log = logging.getLogger(__name__)


RunOutcome = Union[ResultPayload, ValidationError, EmptyDatasetError]


def _sample_for(mode: InputMode, cfg: PotabilityConfig) -> Union[Sample, ValidationError, EmptyDatasetError]:
    if isinstance(mode, ManualEntry):
        return validate(mode.fields, cfg)

    if isinstance(mode, DatasetUpload):
        if not mode.records:
            return EmptyDatasetError()
        # Only the first row is classified; the full dataset travels with the payload.
        return validate(mode.records[0], cfg)

    raise TypeError(f"Unsupported input mode: {type(mode).__name__}")


def score_input(
    mode: InputMode,
    cfg: Optional[PotabilityConfig] = None,
    scorer: Optional[Scorer] = None,
) -> Union[Tuple[Sample, ScoreResult], ValidationError, EmptyDatasetError]:
    cfg = cfg or PotabilityConfig()
    scorer = scorer or get_scorer(cfg=cfg)

    sample = _sample_for(mode, cfg)
    if not isinstance(sample, Sample):
        return sample
    return sample, scorer(sample)


def run_validation(
    mode: InputMode,
    cfg: Optional[PotabilityConfig] = None,
    scorer: Optional[Scorer] = None,
) -> RunOutcome:
    """
    Validate and score one input.

    Returns a ResultPayload on success; a ValidationError or EmptyDatasetError
    value otherwise.
    """
    outcome = score_input(mode, cfg, scorer)
    if not isinstance(outcome, tuple):
        log.info("Validation failed (%s): %s", mode.mode_name, outcome.message)
        return outcome

    _sample, result = outcome
    log.info("Classified %s input: %s (score=%s)", mode.mode_name, result.category.value, result.score)
    return build_payload(mode, result)
