"""
Tests for the async session: stale submissions, cancellation and state kept on errors.
"""
import asyncio

from water_potability.config import PotabilityConfig
from water_potability.models import (
    Category,
    EmptyDatasetError,
    ParseError,
    ResultPayload,
    ValidationError,
)
from water_potability.session import ValidationSession
from water_potability.tabular_io import default_dataset


def _session(latency=0.0, **kwargs):
    return ValidationSession(PotabilityConfig(latency_seconds=latency), **kwargs)


class TestSubmit:
    def test_form_submission_updates_state(self, reference_fields):
        received = []
        session = _session(sink=received.append)

        outcome = asyncio.run(session.submit_form(reference_fields))

        assert isinstance(outcome, ResultPayload)
        assert outcome.category == Category.GOOD
        assert session.last_payload is outcome
        assert session.form_data == reference_fields
        assert session.last_error is None
        assert received[0]["prediction"] == "Good"

    def test_newer_submission_supersedes_pending_one(self, reference_fields):
        poor_fields = {k: "9999" for k in reference_fields} | {"ph": "2", "hardness": "900"}
        session = _session(latency=0.05)

        async def scenario():
            first = asyncio.create_task(session.submit_form(poor_fields))
            await asyncio.sleep(0)
            second = await session.submit_form(reference_fields)
            return await first, second

        first, second = asyncio.run(scenario())

        assert first is None
        assert second.category == Category.GOOD
        assert session.last_payload is second
        assert session.form_data == reference_fields

    def test_cancel_pending(self, reference_fields):
        session = _session(latency=0.05)

        async def scenario():
            task = asyncio.create_task(session.submit_form(reference_fields))
            await asyncio.sleep(0)
            cancelled = session.cancel()
            return cancelled, await task

        cancelled, outcome = asyncio.run(scenario())

        assert cancelled is True
        assert outcome is None
        assert session.last_payload is None
        assert session.pending is False

    def test_cancel_without_pending(self):
        assert _session().cancel() is False

    def test_validation_error_keeps_previous_result(self, reference_fields):
        session = _session()

        async def scenario():
            good = await session.submit_form(reference_fields)
            bad = await session.submit_form({"ph": ""})
            return good, bad

        good, bad = asyncio.run(scenario())

        assert isinstance(bad, ValidationError)
        assert session.last_payload is good
        assert session.form_data == reference_fields
        assert session.last_error is bad


class TestDataset:
    def test_default_dataset_submission(self):
        session = _session()
        session.use_default_dataset()

        outcome = asyncio.run(session.submit_dataset())

        assert outcome.mode == "file"
        assert outcome.table_data == default_dataset()

    def test_no_dataset_is_empty_error(self):
        outcome = asyncio.run(_session().submit_dataset())
        assert isinstance(outcome, EmptyDatasetError)

    def test_parse_error_keeps_previous_dataset(self):
        session = _session()
        session.use_default_dataset()

        outcome = asyncio.run(session.accept_upload(b"[{broken", "json"))

        assert isinstance(outcome, ParseError)
        assert session.dataset == default_dataset()
        assert session.dataset_source == "default"
        assert session.last_error is outcome

    def test_upload_replaces_dataset(self):
        session = _session()
        records = asyncio.run(session.accept_upload(b"ph,hardness\n7,200\n", "upload.csv"))
        assert session.dataset == records == [{"ph": "7", "hardness": "200"}]
        assert session.dataset_source == "upload.csv"

    def test_load_path(self, tmp_path):
        p = tmp_path / "samples.json"
        p.write_text('[{"ph": "7.2"}]', encoding="utf-8")
        session = _session()
        asyncio.run(session.load_path(p))
        assert session.dataset == [{"ph": "7.2"}]

    def test_reads_are_serialized(self):
        session = _session()

        async def scenario():
            return await asyncio.gather(
                session.accept_upload(b"ph\n1\n", "a.csv"),
                session.accept_upload(b"ph\n2\n", "b.csv"),
            )

        first, second = asyncio.run(scenario())
        assert first == [{"ph": "1"}]
        assert second == [{"ph": "2"}]
        assert session.dataset == [{"ph": "2"}]
