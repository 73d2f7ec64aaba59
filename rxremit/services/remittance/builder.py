"""Assemble a RemittanceAdvice from the mapped claims of one payer/payee bucket."""
import time
from datetime import date
from decimal import Decimal
from typing import List, Optional

from rxremit.config.settings import get_settings
from rxremit.models.claim import Claim, ServiceLine
from rxremit.models.remittance import (
    Address,
    ClaimLevelAdjustment,
    ClaimPayment,
    PartyIdentification,
    PaymentInfo,
    RemittanceAdvice,
    ServiceAdjustment,
    ServicePayment,
)
from rxremit.utils.decimal_utils import ZERO, sum_present
from rxremit.utils.identifiers import (
    generate_gs_application_sender_id,
    generate_isa_sender_id,
    is_valid_payer_payee_id,
    normalize_payer_payee_id,
)
from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

ENTITY_PAYER = "PR"
ENTITY_PAYEE = "PE"
ID_QUALIFIER = "XX"

CLAIM_STATUS_PRIMARY = "1"  # Processed as primary
FILING_INDICATOR_PPO = "12"

HANDLING_CODE_INFORMATION = "I"
CREDIT_FLAG = "C"
PAYMENT_METHOD_ACH = "ACH"

TRANSACTION_SET_CONTROL_NUMBER = "0001"


def generate_control_number() -> str:
    """Nine-digit interchange control number derived from the clock."""
    return f"{int(time.time() * 1000) % 1_000_000_000:09d}"


def _party(entity_code: str, party_id: Optional[str], name: Optional[str], address: Optional[Address]) -> PartyIdentification:
    return PartyIdentification(
        entity_identifier_code=entity_code,
        name=name,
        identification_code=party_id,
        identification_code_qualifier=ID_QUALIFIER,
        address=address or Address(address_line1="", city="", state="", postal_code=""),
    )


def _service_payment(line: ServiceLine) -> ServicePayment:
    return ServicePayment(
        procedure_code=line.procedure_code,
        line_item_charge_amount=line.charged_amount if line.charged_amount is not None else ZERO,
        line_item_provider_payment_amount=line.paid_amount if line.paid_amount is not None else ZERO,
        quantity=Decimal(line.units) if line.units is not None else None,
        adjustments=[
            ServiceAdjustment(
                adjustment_group_code=adj.group_code,
                adjustment_reason_code=adj.reason_code,
                adjustment_amount=adj.amount,
            )
            for adj in line.adjustments
        ],
    )


def claim_to_payment(claim: Claim) -> ClaimPayment:
    """Convert one mapped claim into its CLP loop."""
    return ClaimPayment(
        claim_id=claim.id,
        patient_control_number=claim.claim_number or claim.id,
        claim_status_code=CLAIM_STATUS_PRIMARY,
        total_claim_charge_amount=claim.total_charge_amount if claim.total_charge_amount is not None else ZERO,
        claim_payment_amount=claim.paid_amount if claim.paid_amount is not None else ZERO,
        patient_responsibility_amount=(
            claim.patient_responsibility_amount if claim.patient_responsibility_amount is not None else ZERO
        ),
        claim_filing_indicator_code=FILING_INDICATOR_PPO,
        payer_claim_control_number=claim.id,
        service_payments=[_service_payment(line) for line in claim.service_lines],
        claim_adjustments=[
            ClaimLevelAdjustment(
                adjustment_group_code=adj.group_code,
                adjustment_reason_code=adj.reason_code,
                adjustment_amount=adj.amount,
                adjustment_quantity=Decimal(adj.quantity) if adj.quantity is not None else None,
            )
            for adj in claim.adjustments
        ],
    )


def build_remittance_advice(
    bucket_id: str,
    payer_id: str,
    payer_name: str,
    payee_id: str,
    payee_name: str,
    claims: List[Claim],
    payer_address: Optional[Address] = None,
    payee_address: Optional[Address] = None,
    control_number: Optional[str] = None,
    production_date: Optional[date] = None,
) -> RemittanceAdvice:
    """
    Build the remittance advice for one bucket.

    Payer and payee ids are normalized for 835 output and the ISA/GS
    envelope ids are derived from them. The BPR total is the sum of the
    claims' paid amounts; the TRN trace number is the bucket id.
    """
    payer_id = normalize_payer_payee_id(payer_id)
    payee_id = normalize_payer_payee_id(payee_id)
    for role, party_id in (("payer", payer_id), ("payee", payee_id)):
        if not is_valid_payer_payee_id(party_id):
            logger.warning("Identifier is empty after normalization", bucket_id=bucket_id, role=role)
    production_date = production_date or date.today()

    if not claims:
        logger.warning("No claims found for bucket", bucket_id=bucket_id)

    claim_payments = [claim_to_payment(claim) for claim in claims]
    total_paid = sum_present(payment.claim_payment_amount for payment in claim_payments)

    payment_info = PaymentInfo(
        transaction_handling_code=HANDLING_CODE_INFORMATION,
        total_actual_provider_payment_amount=total_paid,
        credit_debit_flag=CREDIT_FLAG,
        payment_method_code=PAYMENT_METHOD_ACH,
        originating_company_identifier=payer_id,
        check_or_eft_trace_number=str(bucket_id),
        payer_identifier=payer_id,
        payee_identifier=payee_id,
        payment_effective_date=production_date,
    )

    remittance = RemittanceAdvice(
        bucket_id=str(bucket_id),
        payer_id=payer_id,
        payer_name=payer_name,
        payee_id=payee_id,
        payee_name=payee_name,
        payment_info=payment_info,
        payer=_party(ENTITY_PAYER, payer_id, payer_name, payer_address),
        payee=_party(ENTITY_PAYEE, payee_id, payee_name, payee_address),
        claims=claim_payments,
        production_date=production_date,
        transaction_set_control_number=TRANSACTION_SET_CONTROL_NUMBER,
        interchange_control_number=control_number.zfill(9) if control_number else generate_control_number(),
        production=get_settings().production_mode,
        isa_sender_id=generate_isa_sender_id(payer_id),
        isa_receiver_id=generate_isa_sender_id(payee_id),
        gs_application_sender_id=generate_gs_application_sender_id(payer_id),
    )

    logger.debug(
        "Built RemittanceAdvice",
        bucket_id=remittance.bucket_id,
        claims=len(claim_payments),
        total_paid=str(total_paid),
    )
    return remittance
