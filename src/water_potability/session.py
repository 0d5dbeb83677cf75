# src/water_potability/session.py
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import PotabilityConfig
from .models import (
    Dataset,
    DatasetUpload,
    EmptyDatasetError,
    InputMode,
    ManualEntry,
    ParseError,
    ResultPayload,
    ValidationError,
)
from .publisher import Sink, publish_result
from .runner import RunOutcome, run_validation
from .scoring import Scorer
from .tabular_io import accept_file, default_dataset


log = logging.getLogger(__name__)


class ValidationSession:
    """
    Holds the active input of one interactive session.

    - one file read in flight at a time (later reads wait for the lock)
    - submit() waits the configured latency before scoring; a newer submit()
      or cancel() aborts the pending one, which then never touches state
    - failed reads/validations keep the previous dataset, form values and payload
    """

    def __init__(
        self,
        cfg: Optional[PotabilityConfig] = None,
        scorer: Optional[Scorer] = None,
        sink: Optional[Sink] = None,
    ) -> None:
        self.cfg = cfg or PotabilityConfig()
        self._scorer = scorer
        self._sink = sink

        self.dataset: Optional[Dataset] = None
        self.dataset_source: str = ""
        self.form_data: Optional[Dict[str, Any]] = None
        self.last_payload: Optional[ResultPayload] = None
        self.last_error: Union[ValidationError, ParseError, EmptyDatasetError, None] = None

        self._read_lock = asyncio.Lock()
        self._pending: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------
    # Dataset ingestion
    # ------------------------------------------------------------------

    def use_default_dataset(self) -> Dataset:
        self.dataset = default_dataset()
        self.dataset_source = "default"
        return self.dataset

    async def accept_upload(self, content: Union[bytes, str], declared_extension: str) -> Union[Dataset, ParseError]:
        async with self._read_lock:
            parsed = await asyncio.to_thread(accept_file, content, declared_extension, self.cfg)
        return self._store_parsed(parsed, declared_extension)

    async def load_path(self, path: str | Path) -> Union[Dataset, ParseError]:
        path = Path(path)
        async with self._read_lock:
            content = await asyncio.to_thread(path.read_bytes)
            parsed = await asyncio.to_thread(accept_file, content, path.name, self.cfg)
        return self._store_parsed(parsed, path.name)

    def _store_parsed(self, parsed: Union[Dataset, ParseError], source: str) -> Union[Dataset, ParseError]:
        if isinstance(parsed, ParseError):
            self.last_error = parsed
            return parsed
        self.dataset = parsed
        self.dataset_source = source
        return parsed

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def cancel(self) -> bool:
        """Abort the pending submission, if any."""
        if self.pending:
            log.info("Cancelling pending validation")
            self._pending.cancel()
            return True
        return False

    async def submit(self, mode: InputMode) -> Optional[RunOutcome]:
        """
        Validate and score `mode` after the configured latency.
        Returns None when this submission was superseded or cancelled.
        """
        self.cancel()
        task = asyncio.create_task(self._run(mode))
        self._pending = task

        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task.cancelled():
            return None
        return task.result()

    async def submit_form(self, fields: Dict[str, Any]) -> Optional[RunOutcome]:
        return await self.submit(ManualEntry(dict(fields)))

    async def submit_dataset(self) -> Optional[RunOutcome]:
        return await self.submit(DatasetUpload(list(self.dataset or []), self.dataset_source))

    async def _run(self, mode: InputMode) -> RunOutcome:
        await asyncio.sleep(self.cfg.latency_seconds)

        outcome = run_validation(mode, self.cfg, self._scorer)

        if isinstance(outcome, ResultPayload):
            self.last_payload = outcome
            self.last_error = None
            if isinstance(mode, ManualEntry):
                self.form_data = dict(mode.fields)
            if self._sink is not None:
                publish_result(outcome, self._sink)
        else:
            self.last_error = outcome

        if self._pending is asyncio.current_task():
            self._pending = None
        return outcome
