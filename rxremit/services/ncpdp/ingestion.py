"""
Batch ingestion of NCPDP D.0 claim files.

Reads a file, splits it into STX..SE transactions, decodes each one and
tallies the outcome into an ``IngestionResult``. One transaction's decode
failure is recorded as an error string and, unless ``stop_on_error`` is set,
the remaining transactions are still processed.

Persistence is not handled here: pass ``on_transaction`` to hand each decoded
transaction (with its indexing metadata) to an external sink. A sink that
raises marks that transaction as failed.
"""
from typing import Callable, List, Optional

import structlog
from pydantic import BaseModel, Field

from rxremit.config.settings import get_settings
from rxremit.models.enums import IngestionStatus
from rxremit.models.ingestion import IngestionResult, IngestRequest, RawClaimMetadata
from rxremit.models.ncpdp import NcpdpTransaction
from rxremit.services.ncpdp.parser import NcpdpD0Parser
from rxremit.services.ncpdp.reader import (
    extract_metadata,
    read_transactions_from_file,
    split_transactions,
)
from rxremit.utils.errors import IngestionFailure
from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

TransactionSink = Callable[[NcpdpTransaction, RawClaimMetadata], None]


class IngestionBatch(BaseModel):
    """Ingestion result together with the transactions that decoded."""

    result: IngestionResult
    transactions: List[NcpdpTransaction] = Field(default_factory=list)


class NcpdpIngestionService:
    """Drives the decoder over every transaction in a claims file."""

    def __init__(
        self,
        parser: Optional[NcpdpD0Parser] = None,
        on_transaction: Optional[TransactionSink] = None,
    ):
        self.parser = parser or NcpdpD0Parser()
        self.on_transaction = on_transaction

    def ingest(self, request: IngestRequest) -> IngestionBatch:
        return self.ingest_from_file(request.file_path, request.stop_on_error)

    def ingest_from_file(self, file_path: str, stop_on_error: bool = False) -> IngestionBatch:
        # Every event logged during this file's ingestion carries file_path
        with structlog.contextvars.bound_contextvars(file_path=file_path):
            logger.info("Ingesting NCPDP claims from file", stop_on_error=stop_on_error)

            try:
                transactions = read_transactions_from_file(file_path)
            except IngestionFailure as e:
                return IngestionBatch(result=IngestionResult.failure(e.message))

            logger.info("Read transactions from file", transaction_count=len(transactions))
            return self.process_transactions(transactions, stop_on_error)

    def ingest_default_file(self) -> IngestionBatch:
        settings = get_settings()
        return self.ingest_from_file(settings.default_file_path, settings.stop_on_error)

    def ingest_text(self, content: str, stop_on_error: bool = False) -> IngestionBatch:
        return self.process_transactions(split_transactions(content), stop_on_error)

    def process_transactions(self, raw_transactions: List[str], stop_on_error: bool = False) -> IngestionBatch:
        """
        Decode each raw transaction in order.

        Every attempted transaction counts towards ``total_processed``,
        including the one that stops the batch under ``stop_on_error``.
        """
        result = IngestionResult()
        decoded: List[NcpdpTransaction] = []

        for index, raw_transaction in enumerate(raw_transactions, start=1):
            result.total_processed += 1
            with structlog.contextvars.bound_contextvars(transaction_index=index):
                error = self._process_one(raw_transaction, decoded)

            if error is None:
                result.total_success += 1
                continue

            result.total_failed += 1
            result.add_error(f"Transaction {index}: {error}")
            logger.error("Failed to ingest transaction", transaction_index=index, error=error)

            if stop_on_error:
                logger.info("Stopping ingestion on first error", transaction_index=index)
                break

        result.status = self._overall_status(result)
        logger.info(
            "Ingestion complete",
            processed=result.total_processed,
            success=result.total_success,
            failed=result.total_failed,
            status=result.status.value,
        )
        return IngestionBatch(result=result, transactions=decoded)

    def _process_one(self, raw_transaction: str, decoded: List[NcpdpTransaction]) -> Optional[str]:
        """Decode and hand off one transaction; return an error message on failure."""
        outcome = self.parser.parse_safe(raw_transaction)
        if not outcome.ok:
            return outcome.error.message

        transaction = outcome.transaction
        if self.on_transaction is not None:
            try:
                self.on_transaction(transaction, extract_metadata(raw_transaction))
            except Exception as e:
                logger.error("Transaction sink failed", error=str(e), exc_info=True)
                return f"Failed to store transaction: {e}"

        decoded.append(transaction)
        return None

    @staticmethod
    def _overall_status(result: IngestionResult) -> IngestionStatus:
        if result.total_failed == 0:
            return IngestionStatus.SUCCESS
        if result.total_success == 0:
            return IngestionStatus.FAILED
        return IngestionStatus.PARTIAL
