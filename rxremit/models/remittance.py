"""
Remittance advice data model for EDI 835 generation.

A ``RemittanceAdvice`` is one payer-to-payee settlement batch (bucket). It
owns its claim payments; each claim payment owns its service-line payments
and claim-level adjustments; each service-line payment owns its own
adjustments. Nothing refers back up the tree.

Totals, control-number aliases and the segment-count estimate are read-only
properties over the owned data so they cannot drift from it.
"""
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from rxremit.utils.decimal_utils import ZERO
from rxremit.utils.identifiers import ISA_SENDER_ID_MAX_LENGTH, is_valid_isa_sender_id

# ISA, GS, ST, BPR, TRN, DTM, SE, GE, IEA plus the payer and payee N1 loops
BASE_SEGMENT_COUNT = 11
# CLP, CAS, SVC per claim
SEGMENTS_PER_CLAIM = 3


class PaymentInfo(BaseModel):
    """BPR / TRN financial information."""

    transaction_handling_code: Optional[str] = None  # BPR01: I=Information, C=Payment
    total_actual_provider_payment_amount: Optional[Decimal] = None  # BPR02
    credit_debit_flag: Optional[str] = None  # BPR03: C=Credit, D=Debit
    payment_method_code: Optional[str] = None  # BPR04: CHK, ACH, NON
    payment_format_code: Optional[str] = None  # BPR05
    originating_company_identifier: Optional[str] = None  # BPR10
    payment_effective_date: Optional[date] = None  # BPR16
    check_or_eft_trace_number: Optional[str] = None  # TRN02
    payer_identifier: Optional[str] = None
    payee_identifier: Optional[str] = None

    @property
    def total_paid_amount(self) -> Optional[Decimal]:
        return self.total_actual_provider_payment_amount

    @property
    def trace_number(self) -> Optional[str]:
        return self.check_or_eft_trace_number

    @property
    def originating_company_id(self) -> Optional[str]:
        return self.originating_company_identifier


class Address(BaseModel):
    address_line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    @property
    def street(self) -> Optional[str]:
        return self.address_line1

    @property
    def zip(self) -> Optional[str]:
        return self.postal_code


class PartyIdentification(BaseModel):
    """N1 loop party."""

    entity_identifier_code: Optional[str] = None  # PR (payer) or PE (payee)
    name: Optional[str] = None
    identification_code: Optional[str] = None
    identification_code_qualifier: Optional[str] = None
    address: Optional[Address] = None


class ServiceAdjustment(BaseModel):
    adjustment_group_code: Optional[str] = None
    adjustment_reason_code: Optional[str] = None
    adjustment_amount: Optional[Decimal] = None


class ClaimLevelAdjustment(BaseModel):
    adjustment_group_code: Optional[str] = None  # CO, PR, OA, PI
    adjustment_reason_code: Optional[str] = None  # CARC
    adjustment_amount: Optional[Decimal] = None
    adjustment_quantity: Optional[Decimal] = None


class ServicePayment(BaseModel):
    """SVC loop."""

    procedure_code: Optional[str] = None
    line_item_charge_amount: Optional[Decimal] = None
    line_item_provider_payment_amount: Optional[Decimal] = None
    revenue_code: Optional[str] = None
    quantity: Optional[Decimal] = None
    adjustments: List[ServiceAdjustment] = Field(default_factory=list)


class ClaimPayment(BaseModel):
    """CLP loop."""

    claim_id: Optional[str] = None
    patient_control_number: Optional[str] = None
    claim_status_code: Optional[str] = None
    total_claim_charge_amount: Optional[Decimal] = None
    claim_payment_amount: Optional[Decimal] = None
    patient_responsibility_amount: Optional[Decimal] = None
    claim_filing_indicator_code: Optional[str] = None
    payer_claim_control_number: Optional[str] = None
    service_payments: List[ServicePayment] = Field(default_factory=list)
    claim_adjustments: List[ClaimLevelAdjustment] = Field(default_factory=list)


class RemittanceAdvice(BaseModel):
    """Complete remittance information for one bucket of claims."""

    bucket_id: Optional[str] = None
    payer_id: Optional[str] = None
    payer_name: Optional[str] = None
    payee_id: Optional[str] = None
    payee_name: Optional[str] = None

    payment_info: Optional[PaymentInfo] = None
    payer: Optional[PartyIdentification] = None
    payee: Optional[PartyIdentification] = None
    claims: List[ClaimPayment] = Field(default_factory=list)

    production_date: Optional[date] = None
    transaction_set_control_number: Optional[str] = None
    interchange_control_number: Optional[str] = None
    production: bool = True

    # ISA06 / ISA08 / GS02 envelope ids, derived from the payer and payee ids
    isa_sender_id: Optional[str] = None
    isa_receiver_id: Optional[str] = None
    gs_application_sender_id: Optional[str] = None

    @field_validator("isa_sender_id", "isa_receiver_id", "gs_application_sender_id")
    @classmethod
    def validate_envelope_id(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not is_valid_isa_sender_id(v):
            raise ValueError(
                f"Envelope id '{v}' must be 1-{ISA_SENDER_ID_MAX_LENGTH} characters of A-Z and 0-9"
            )
        return v

    @property
    def payer_address(self) -> Optional[Address]:
        return self.payer.address if self.payer is not None else None

    @property
    def payee_address(self) -> Optional[Address]:
        return self.payee.address if self.payee is not None else None

    @property
    def transaction_set_number(self) -> Optional[str]:
        return self.transaction_set_control_number

    @property
    def group_control_number(self) -> Optional[str]:
        return self.interchange_control_number

    @property
    def control_number(self) -> Optional[str]:
        return self.interchange_control_number

    @property
    def total_paid_amount(self) -> Decimal:
        if self.payment_info is None or self.payment_info.total_paid_amount is None:
            return ZERO
        return self.payment_info.total_paid_amount

    @property
    def payment_trace_number(self) -> Optional[str]:
        return self.payment_info.trace_number if self.payment_info is not None else None

    @property
    def originating_company_id(self) -> Optional[str]:
        return self.payment_info.originating_company_id if self.payment_info is not None else None

    @property
    def is_production(self) -> bool:
        return self.production

    @property
    def sender_id(self) -> Optional[str]:
        return self.payer_id

    @property
    def receiver_id(self) -> Optional[str]:
        return self.payee_id

    @property
    def estimated_segment_count(self) -> int:
        """
        Rough 835 segment count: a fixed envelope base plus three per claim.

        This is an estimate. It ignores how many service lines and
        adjustments each claim actually carries, so it must not be written
        into SE01 as an exact count.
        """
        return BASE_SEGMENT_COUNT + SEGMENTS_PER_CLAIM * len(self.claims)

    @property
    def segment_count(self) -> int:
        return self.estimated_segment_count
