"""
Map decoded NCPDP transactions onto payer-neutral claims.

Field mapping:

| NCPDP                     | Claim                          |
|---------------------------|--------------------------------|
| AM07 carrier id           | payer_id (upper-cased)         |
| AM01 pharmacy id          | payee_id                       |
| AM13 prescription number  | claim_number                   |
| AM07 cardholder id        | patient_id                     |
| AM07 names                | patient_name                   |
| AM07 BIN                  | bin_number                     |
| AM13 date of service      | service_date (YYYYMMDD)        |
| AM17-11                   | total_charge_amount            |
| AN23-05, or AN23-01 + 02  | paid_amount                    |
| AN23-03                   | patient_responsibility_amount  |
| AN02 status               | status (A/P=PAID, R=DENIED)    |
"""
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from rxremit.models.claim import Claim, ClaimAdjustment, ServiceLine
from rxremit.models.enums import ClaimStatus
from rxremit.models.ncpdp import NcpdpTransaction
from rxremit.utils.decimal_utils import ZERO, clamp_non_negative
from rxremit.utils.errors import MappingError
from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

MAPPER_NAME = "NCPDP_D0_MAPPER"
SERVICE_DATE_FORMAT = "%Y%m%d"

# Adjustment group / reason codes
GROUP_CONTRACTUAL = "CO"
GROUP_PATIENT_RESPONSIBILITY = "PR"
REASON_FEE_SCHEDULE = "45"  # CARC 45: charge exceeds fee schedule
REASON_REJECTED = "REJECTED"

_STATUS_MAP = {
    "A": ClaimStatus.PAID,
    "P": ClaimStatus.PAID,
    "R": ClaimStatus.DENIED,
}

_REQUIRED_SEGMENTS = (
    ("patient", "AM07", "Patient"),
    ("header", "AM01", "Header"),
    ("claim", "AM13", "Claim"),
    ("pricing", "AM17", "Pricing"),
)


class NcpdpToClaimMapper:
    """Converts ``NcpdpTransaction`` objects into ``Claim`` objects."""

    def map_to_claim(self, tx: NcpdpTransaction) -> Claim:
        """
        Raises:
            MappingError: the transaction lacks AM01, AM07, AM13 or AM17
        """
        if tx is None:
            raise MappingError("NCPDP transaction cannot be None")

        self._validate_required_segments(tx)

        service_date = self._parse_service_date(tx)
        charge = self._total_charge(tx)
        paid = self._paid_amount(tx)
        patient_pay = self._patient_responsibility(tx, charge, paid)
        adjustment = clamp_non_negative(charge - paid - patient_pay)
        now = datetime.now()

        claim = Claim(
            id=self._generate_claim_id(tx),
            payer_id=tx.patient.carrier_id.upper() if tx.patient.carrier_id else "UNKNOWN",
            payee_id=tx.header.pharmacy_id,
            claim_number=tx.claim.prescription_number,
            patient_id=tx.patient.cardholder_id_number,
            patient_name=tx.patient.full_name,
            bin_number=tx.patient.bin_number,
            pcn_number=None,  # PCN is not carried by the D.0 segments decoded here
            service_date=service_date,
            statement_from_date=service_date,
            statement_to_date=service_date,
            total_charge_amount=charge,
            paid_amount=paid,
            patient_responsibility_amount=patient_pay,
            adjustment_amount=adjustment,
            status=self._map_status(tx),
            status_reason=self._status_reason(tx),
            service_lines=[self._service_line(tx, service_date, paid, adjustment)],
            adjustments=self._adjustments(tx, charge, adjustment),
            processed_date=now,
            created_date=now,
            last_modified_date=now,
            processed_by=MAPPER_NAME,
        )
        logger.debug("Mapped NCPDP transaction to claim", claim_id=claim.id, status=claim.status.value)
        return claim

    def map_to_claims(self, transactions: Optional[List[NcpdpTransaction]]) -> List[Claim]:
        """Map every transaction that can be mapped; failures are logged and skipped."""
        claims = []
        for tx in transactions or []:
            try:
                claims.append(self.map_to_claim(tx))
            except MappingError as e:
                logger.error("Failed to map NCPDP transaction", error=e.message, **e.details)

        logger.info("Mapped NCPDP transactions to claims", mapped=len(claims), total=len(transactions or []))
        return claims

    def _validate_required_segments(self, tx: NcpdpTransaction) -> None:
        for attribute, segment_id, label in _REQUIRED_SEGMENTS:
            if getattr(tx, attribute) is None:
                raise MappingError(f"{label} segment ({segment_id}) is required", segment_id=segment_id)

    def _generate_claim_id(self, tx: NcpdpTransaction) -> str:
        base = f"NCPDP-{tx.header.pharmacy_id}-{tx.claim.prescription_number}-{tx.header.date}"
        return f"{base}-{uuid.uuid4().hex[:8]}"

    def _parse_service_date(self, tx: NcpdpTransaction) -> date:
        value = tx.claim.date_of_service
        if not value:
            logger.warning("Service date is missing, using current date")
            return date.today()
        try:
            return datetime.strptime(value, SERVICE_DATE_FORMAT).date()
        except ValueError:
            logger.error("Failed to parse service date", value=value)
            return date.today()

    def _total_charge(self, tx: NcpdpTransaction) -> Decimal:
        if tx.pricing.gross_amount_due is not None:
            return tx.pricing.gross_amount_due
        return tx.pricing.total_submitted

    def _paid_amount(self, tx: NcpdpTransaction) -> Decimal:
        if tx.response_payment is not None:
            return tx.response_payment.total_paid
        if tx.is_rejected:
            return ZERO
        # Approved or not yet adjudicated: fall back to the paid amounts in pricing
        return tx.pricing.total_paid

    def _patient_responsibility(self, tx: NcpdpTransaction, charge: Decimal, paid: Decimal) -> Decimal:
        if tx.response_payment is not None and tx.response_payment.patient_pay_amount is not None:
            return tx.response_payment.patient_pay_amount
        return clamp_non_negative(charge - paid)

    def _map_status(self, tx: NcpdpTransaction) -> ClaimStatus:
        if tx.response_status is None:
            return ClaimStatus.PROCESSED
        return _STATUS_MAP.get(tx.response_status.response_status, ClaimStatus.PROCESSED)

    def _status_reason(self, tx: NcpdpTransaction) -> Optional[str]:
        if tx.response_status is not None:
            return tx.response_status.response_message
        if tx.response_message is not None:
            return tx.response_message.message_text
        return None

    def _ndc_code(self, tx: NcpdpTransaction) -> str:
        if tx.ndc_code:
            return tx.ndc_code
        if tx.claim.ndc:
            return tx.claim.ndc
        return "UNKNOWN"

    def _service_line(self, tx: NcpdpTransaction, service_date: date, paid: Decimal, adjustment: Decimal) -> ServiceLine:
        quantity = tx.claim.quantity_dispensed
        if tx.is_compound:
            logger.debug(
                "Compound prescription mapped as a single service line",
                ingredients=len(tx.compound.ingredients),
            )
        return ServiceLine(
            procedure_code=self._ndc_code(tx),
            modifier=tx.claim.dosage_form,
            charged_amount=tx.pricing.gross_amount_due,
            paid_amount=paid,
            adjustment_amount=adjustment,
            units=int(quantity) if quantity is not None else 0,
            service_date=service_date,
        )

    def _adjustments(self, tx: NcpdpTransaction, charge: Decimal, adjustment: Decimal) -> List[ClaimAdjustment]:
        adjustments = []
        if tx.is_rejected:
            adjustments.append(
                ClaimAdjustment(group_code=GROUP_PATIENT_RESPONSIBILITY, reason_code=REASON_REJECTED, amount=charge)
            )
        if adjustment > ZERO:
            adjustments.append(
                ClaimAdjustment(group_code=GROUP_CONTRACTUAL, reason_code=REASON_FEE_SCHEDULE, amount=adjustment)
            )
        return adjustments
