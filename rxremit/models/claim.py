"""Payer-neutral claim produced from a decoded pharmacy transaction."""
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from rxremit.models.enums import ClaimStatus


class ServiceLineAdjustment(BaseModel):
    group_code: Optional[str] = None
    reason_code: Optional[str] = None
    amount: Optional[Decimal] = None


class ClaimAdjustment(BaseModel):
    group_code: Optional[str] = None  # CO, PR, OA, PI
    reason_code: Optional[str] = None  # CARC codes
    amount: Optional[Decimal] = None
    quantity: Optional[int] = None


class ServiceLine(BaseModel):
    procedure_code: Optional[str] = None
    modifier: Optional[str] = None
    charged_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    adjustment_amount: Optional[Decimal] = None
    units: Optional[int] = None
    service_date: Optional[date] = None
    adjustments: List[ServiceLineAdjustment] = Field(default_factory=list)


class Claim(BaseModel):
    """A claim ready for bucketing into a remittance advice."""

    id: str
    payer_id: str
    payee_id: Optional[str] = None
    claim_number: Optional[str] = None
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None

    bin_number: Optional[str] = None
    pcn_number: Optional[str] = None

    service_date: Optional[date] = None
    statement_from_date: Optional[date] = None
    statement_to_date: Optional[date] = None

    total_charge_amount: Optional[Decimal] = None
    paid_amount: Optional[Decimal] = None
    patient_responsibility_amount: Optional[Decimal] = None
    adjustment_amount: Optional[Decimal] = None

    status: ClaimStatus = ClaimStatus.PENDING
    status_reason: Optional[str] = None

    service_lines: List[ServiceLine] = Field(default_factory=list)
    adjustments: List[ClaimAdjustment] = Field(default_factory=list)

    processed_date: Optional[datetime] = None
    created_date: Optional[datetime] = None
    last_modified_date: Optional[datetime] = None
    processed_by: Optional[str] = None
