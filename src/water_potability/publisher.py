# src/water_potability/publisher.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict

from .models import DatasetUpload, InputMode, ManualEntry, ResultPayload, ScoreResult


log = logging.getLogger(__name__)


Sink = Callable[[Dict[str, Any]], Any]


def build_payload(mode: InputMode, result: ScoreResult) -> ResultPayload:
    """
    Pair the classification with the input it came from.

    Dataset uploads keep the whole dataset for display/export even though only
    the first row was classified.
    """
    if isinstance(mode, ManualEntry):
        return ResultPayload(
            category=result.category,
            score=result.score,
            mode=ManualEntry.mode_name,
            form_data=dict(mode.fields),
        )
    if isinstance(mode, DatasetUpload):
        return ResultPayload(
            category=result.category,
            score=result.score,
            mode=DatasetUpload.mode_name,
            table_data=[dict(r) for r in mode.records],
        )
    raise TypeError(f"Unsupported input mode: {type(mode).__name__}")


def publish_result(payload: ResultPayload, sink: Sink) -> Any:
    """Hand the payload to the presentation collaborator."""
    log.info("Publishing %s result (score=%s, mode=%s)", payload.category.value, payload.score, payload.mode)
    return sink(payload.to_dict())
