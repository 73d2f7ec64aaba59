"""Batch ingestion requests, results and status snapshots."""
from datetime import date, datetime
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field, computed_field

from rxremit.models.enums import ClaimProcessingStatus, IngestionStatus


class IngestRequest(BaseModel):
    """Request to ingest an NCPDP claims file."""

    file_path: str
    stop_on_error: bool = False


class IngestionResult(BaseModel):
    """Outcome of one ingestion run."""

    total_processed: int = 0
    total_success: int = 0
    total_failed: int = 0
    # Empty run has no failures; process_transactions recomputes it
    status: IngestionStatus = IngestionStatus.SUCCESS
    errors: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)

    @classmethod
    def success(cls, count: int) -> "IngestionResult":
        return cls(
            total_processed=count,
            total_success=count,
            total_failed=0,
            status=IngestionStatus.SUCCESS,
        )

    @classmethod
    def failure(cls, error_message: str) -> "IngestionResult":
        return cls(status=IngestionStatus.FAILED, errors=[error_message])

    def add_error(self, error: str) -> None:
        self.errors.append(error)


class NcpdpStatusResponse(BaseModel):
    """Point-in-time count of raw claims by lifecycle state."""

    pending: int = Field(0, ge=0)
    processing: int = Field(0, ge=0)
    processed: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)

    @classmethod
    def from_counts(cls, counts: Mapping[ClaimProcessingStatus, int]) -> "NcpdpStatusResponse":
        """Build a snapshot from a status -> count mapping; missing states count as 0."""
        return cls(
            pending=counts.get(ClaimProcessingStatus.PENDING, 0),
            processing=counts.get(ClaimProcessingStatus.PROCESSING, 0),
            processed=counts.get(ClaimProcessingStatus.PROCESSED, 0),
            failed=counts.get(ClaimProcessingStatus.FAILED, 0),
        )

    @computed_field
    @property
    def total(self) -> int:
        return self.pending + self.processing + self.processed + self.failed

    @computed_field
    @property
    def success_rate(self) -> float:
        """Processed share of all claims as a percentage; 0.0 when there are none."""
        total = self.total
        if total == 0:
            return 0.0
        return self.processed / total * 100.0


class RawClaimMetadata(BaseModel):
    """Indexing fields pulled from raw transaction text without a full decode."""

    payer_id: str = "UNKNOWN"
    pharmacy_id: Optional[str] = None
    patient_id: Optional[str] = None
    prescription_number: Optional[str] = None
    service_date: Optional[date] = None
