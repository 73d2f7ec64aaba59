"""
Status and type enumerations.

Enums are defined as string enums for clean JSON serialization.
"""
import enum


class SegmentId(str, enum.Enum):
    """NCPDP D.0 segment identifiers understood by the decoder."""

    STX = "STX"
    AM01 = "AM01"
    AM04 = "AM04"
    AM07 = "AM07"
    AM11 = "AM11"
    AM13 = "AM13"
    AM14 = "AM14"
    AM15 = "AM15"
    AM17 = "AM17"
    AM19 = "AM19"
    AM20 = "AM20"
    AM21 = "AM21"
    AMC1 = "AMC1"
    AN01 = "AN01"
    AN02 = "AN02"
    AN04 = "AN04"
    AN07 = "AN07"
    AN23 = "AN23"
    AN25 = "AN25"
    ANC1 = "ANC1"
    SE = "SE"

    @classmethod
    def lookup(cls, tag: str):
        """Return the member for ``tag``, or None for an unrecognized tag."""
        try:
            return cls(tag)
        except ValueError:
            return None


class IngestionStatus(str, enum.Enum):
    """Overall outcome of a batch ingestion."""

    SUCCESS = "SUCCESS"
    PARTIAL = "PARTIAL"
    FAILED = "FAILED"


class ClaimProcessingStatus(str, enum.Enum):
    """Lifecycle state of an ingested raw claim."""

    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    PROCESSED = "PROCESSED"
    FAILED = "FAILED"


class ClaimStatus(str, enum.Enum):
    """Adjudication status of a mapped claim."""

    PROCESSED = "PROCESSED"
    PAID = "PAID"
    DENIED = "DENIED"
    ADJUSTED = "ADJUSTED"
    PENDING = "PENDING"


class DecodeErrorKind(str, enum.Enum):
    """Fatal decode failure categories."""

    EMPTY_INPUT = "EMPTY_INPUT"
    PARSE_STRUCTURE = "PARSE_STRUCTURE"
