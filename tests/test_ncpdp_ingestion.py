"""Tests for batch NCPDP ingestion."""
from unittest.mock import MagicMock

import pytest

from rxremit.models.enums import IngestionStatus
from rxremit.models.ingestion import IngestRequest
from rxremit.services.ncpdp.ingestion import NcpdpIngestionService

BAD_TRANSACTION = "STX*D0*\nAM01*BAD*\nSE*3*BAD*\n"


@pytest.fixture
def service(parser):
    return NcpdpIngestionService(parser=parser)


@pytest.mark.unit
class TestProcessTransactions:
    """Tests for process_transactions."""

    def test_all_succeed(self, service, approved_transaction_text, rejected_transaction_text):
        batch = service.process_transactions([approved_transaction_text, rejected_transaction_text])

        assert batch.result.status == IngestionStatus.SUCCESS
        assert batch.result.total_processed == 2
        assert batch.result.total_success == 2
        assert batch.result.total_failed == 0
        assert batch.result.errors == []
        assert len(batch.transactions) == 2

    def test_partial(self, service, approved_transaction_text):
        batch = service.process_transactions([approved_transaction_text, BAD_TRANSACTION])

        assert batch.result.status == IngestionStatus.PARTIAL
        assert batch.result.total_success == 1
        assert batch.result.total_failed == 1
        assert batch.result.errors == [
            "Transaction 2: Segment AM01 requires at least 6 fields, found 3 (Line: 2)"
        ]

    def test_all_fail(self, service):
        batch = service.process_transactions([BAD_TRANSACTION, "   "])

        assert batch.result.status == IngestionStatus.FAILED
        assert batch.result.total_failed == 2
        assert batch.result.errors[1] == "Transaction 2: Raw content is empty or null"
        assert batch.transactions == []

    def test_stop_on_error(self, service, approved_transaction_text):
        batch = service.process_transactions(
            [approved_transaction_text, BAD_TRANSACTION, approved_transaction_text],
            stop_on_error=True,
        )

        assert batch.result.total_processed == 2
        assert batch.result.total_success == 1
        assert batch.result.total_failed == 1
        assert batch.result.status == IngestionStatus.PARTIAL

    def test_continue_past_error(self, service, approved_transaction_text):
        batch = service.process_transactions(
            [BAD_TRANSACTION, approved_transaction_text, approved_transaction_text]
        )
        assert batch.result.total_processed == 3
        assert batch.result.total_success == 2

    def test_empty_batch_is_success(self, service):
        batch = service.process_transactions([])
        assert batch.result.status == IngestionStatus.SUCCESS
        assert batch.result.total_processed == 0


@pytest.mark.unit
class TestTransactionSink:
    """Tests for the on_transaction hand-off."""

    def test_sink_receives_transaction_and_metadata(self, parser, approved_transaction_text):
        sink = MagicMock()
        service = NcpdpIngestionService(parser=parser, on_transaction=sink)

        service.process_transactions([approved_transaction_text])

        sink.assert_called_once()
        transaction, metadata = sink.call_args.args
        assert transaction.header.pharmacy_id == "PHARMACY001"
        assert metadata.payer_id == "BCBSIL"

    def test_sink_failure_counts_as_failed(self, parser, approved_transaction_text):
        sink = MagicMock(side_effect=RuntimeError("disk full"))
        service = NcpdpIngestionService(parser=parser, on_transaction=sink)

        batch = service.process_transactions([approved_transaction_text])

        assert batch.result.status == IngestionStatus.FAILED
        assert batch.result.errors == ["Transaction 1: Failed to store transaction: disk full"]
        assert batch.transactions == []

    def test_sink_not_called_for_decode_failure(self, parser):
        sink = MagicMock()
        service = NcpdpIngestionService(parser=parser, on_transaction=sink)

        service.process_transactions([BAD_TRANSACTION])

        sink.assert_not_called()


@pytest.mark.integration
class TestIngestFromFile:
    """File-driven ingestion."""

    def test_ingest_file(self, service, claims_file):
        batch = service.ingest(IngestRequest(file_path=str(claims_file)))

        assert batch.result.total_processed == 3
        assert batch.result.total_success == 2
        assert batch.result.total_failed == 1
        assert batch.result.status == IngestionStatus.PARTIAL
        assert batch.result.errors[0].startswith("Transaction 3: Segment AM01")

    def test_ingest_file_stop_on_error(self, service, tmp_path, approved_transaction_text):
        path = tmp_path / "claims.txt"
        path.write_text(BAD_TRANSACTION + approved_transaction_text)

        batch = service.ingest(IngestRequest(file_path=str(path), stop_on_error=True))

        assert batch.result.total_processed == 1
        assert batch.result.status == IngestionStatus.FAILED

    def test_missing_file(self, service, tmp_path):
        batch = service.ingest_from_file(str(tmp_path / "nope.txt"))

        assert batch.result.status == IngestionStatus.FAILED
        assert batch.result.total_processed == 0
        assert batch.result.errors[0].startswith("File not found:")

    def test_ingest_default_file(self, service, claims_file, monkeypatch):
        monkeypatch.setenv("NCPDP_DEFAULT_FILE_PATH", str(claims_file))
        monkeypatch.setenv("NCPDP_STOP_ON_ERROR", "true")

        batch = service.ingest_default_file()

        assert batch.result.total_processed == 3
        assert batch.result.status == IngestionStatus.PARTIAL

    def test_ingest_text(self, service, approved_transaction_text, rejected_transaction_text):
        batch = service.ingest_text("# two claims\n" + approved_transaction_text + rejected_transaction_text)
        assert batch.result.total_success == 2
