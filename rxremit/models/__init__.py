"""
Data models package.

**Imports:**
    from rxremit.models import NcpdpTransaction, RemittanceAdvice  # Preferred
    from rxremit.models.ncpdp import PricingSegment  # Domain-specific
"""

from rxremit.models.enums import (
    SegmentId,
    IngestionStatus,
    ClaimProcessingStatus,
    ClaimStatus,
    DecodeErrorKind,
)

from rxremit.models.ncpdp import (
    NcpdpTransaction,
    TransactionHeader,
    InsuranceSegment,
    PatientSegment,
    PrescriberSegment,
    ClaimSegment,
    CompoundSegment,
    CompoundIngredient,
    PricingSegment,
    PriorAuthorizationSegment,
    ClinicalSegment,
    AdditionalDocumentationSegment,
    ResponseStatusSegment,
    ResponsePaymentSegment,
    ResponseMessageSegment,
)

from rxremit.models.remittance import (
    RemittanceAdvice,
    PaymentInfo,
    PartyIdentification,
    Address,
    ClaimPayment,
    ServicePayment,
    ClaimLevelAdjustment,
    ServiceAdjustment,
)

from rxremit.models.claim import (
    Claim,
    ServiceLine,
    ClaimAdjustment,
    ServiceLineAdjustment,
)

from rxremit.models.ingestion import (
    IngestRequest,
    IngestionResult,
    NcpdpStatusResponse,
    RawClaimMetadata,
)

__all__ = [
    # Enums
    "SegmentId",
    "IngestionStatus",
    "ClaimProcessingStatus",
    "ClaimStatus",
    "DecodeErrorKind",
    # NCPDP transaction
    "NcpdpTransaction",
    "TransactionHeader",
    "InsuranceSegment",
    "PatientSegment",
    "PrescriberSegment",
    "ClaimSegment",
    "CompoundSegment",
    "CompoundIngredient",
    "PricingSegment",
    "PriorAuthorizationSegment",
    "ClinicalSegment",
    "AdditionalDocumentationSegment",
    "ResponseStatusSegment",
    "ResponsePaymentSegment",
    "ResponseMessageSegment",
    # Remittance advice
    "RemittanceAdvice",
    "PaymentInfo",
    "PartyIdentification",
    "Address",
    "ClaimPayment",
    "ServicePayment",
    "ClaimLevelAdjustment",
    "ServiceAdjustment",
    # Claims
    "Claim",
    "ServiceLine",
    "ClaimAdjustment",
    "ServiceLineAdjustment",
    # Ingestion
    "IngestRequest",
    "IngestionResult",
    "NcpdpStatusResponse",
    "RawClaimMetadata",
]
