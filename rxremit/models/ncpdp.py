"""
Decoded NCPDP D.0 pharmacy claim transaction.

Each sub-record corresponds to one segment of the transaction. A sub-record
attribute is ``None`` only when its segment did not occur in the input; a
segment that occurred with blank fields yields a sub-record whose fields are
``None``. All models are frozen: a transaction is assembled once by the
parser and never mutated afterwards.
"""
from decimal import Decimal
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from rxremit.utils.decimal_utils import sum_present


def _join_name(first: Optional[str], middle: Optional[str], last: Optional[str]) -> str:
    parts = [part for part in (first, middle, last) if part]
    return " ".join(parts)


class _Segment(BaseModel):
    model_config = ConfigDict(frozen=True)


class TransactionHeader(_Segment):
    """AM01."""

    service_provider_id: Optional[str] = None
    pharmacy_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    transaction_count: Optional[str] = None


class InsuranceSegment(_Segment):
    """AM04."""

    cardholder_id_qualifier: Optional[str] = None
    prescription_origin_code: Optional[str] = None
    fill_number: Optional[int] = None


class PatientSegment(_Segment):
    """AM07."""

    carrier_id: Optional[str] = None
    bin_number: Optional[str] = None
    cardholder_id_number: Optional[str] = None
    cardholder_id_qualifier: Optional[str] = None
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_initial: Optional[str] = None
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    @property
    def full_name(self) -> str:
        return _join_name(self.first_name, self.middle_initial, self.last_name)


class PrescriberSegment(_Segment):
    """AM11."""

    prescriber_id: Optional[str] = None
    prescriber_id_qualifier: Optional[str] = None
    license_number: Optional[str] = None
    last_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_initial: Optional[str] = None
    phone_number: Optional[str] = None

    @property
    def full_name(self) -> str:
        return _join_name(self.first_name, self.middle_initial, self.last_name)


class ClaimSegment(_Segment):
    """AM13."""

    date_of_service: Optional[str] = None
    prescription_number: Optional[str] = None
    fill_number: Optional[int] = None
    ndc: Optional[str] = None
    product_description: Optional[str] = None
    strength: Optional[str] = None
    dosage_form: Optional[str] = None
    quantity_dispensed: Optional[Decimal] = None
    quantity_unit: Optional[str] = None
    daw_code: Optional[int] = None
    refills_authorized: Optional[int] = None
    origin_code: Optional[int] = None
    days_supply: Optional[int] = None

    @property
    def is_new_prescription(self) -> bool:
        return self.fill_number == 1

    @property
    def is_refill(self) -> bool:
        return self.fill_number is not None and self.fill_number > 1


class CompoundIngredient(_Segment):
    """One five-field repeating group of AM14."""

    sequence_number: Optional[int] = None
    product_code: Optional[str] = None
    quantity: Optional[str] = None
    quantity_unit: Optional[str] = None
    cost: Optional[str] = None


class CompoundSegment(_Segment):
    """AM14."""

    ingredients: Tuple[CompoundIngredient, ...] = ()


class PricingSegment(_Segment):
    """
    AM17 amounts, keyed on the wire by two-character amount codes.

    01 ingredient cost submitted, 02 ingredient cost paid, 03 dispensing fee
    submitted, 04 dispensing fee paid, 05 tax, 06 usual and customary charge,
    07 flat sales tax, 11 gross amount due.
    """

    ingredient_cost_submitted: Optional[Decimal] = None
    ingredient_cost_paid: Optional[Decimal] = None
    dispensing_fee_submitted: Optional[Decimal] = None
    dispensing_fee_paid: Optional[Decimal] = None
    tax_amount: Optional[Decimal] = None
    usual_and_customary_charge: Optional[Decimal] = None
    flat_sales_tax_amount: Optional[Decimal] = None
    gross_amount_due: Optional[Decimal] = None

    @property
    def total_submitted(self) -> Decimal:
        return sum_present(
            (self.ingredient_cost_submitted, self.dispensing_fee_submitted, self.tax_amount)
        )

    @property
    def total_paid(self) -> Decimal:
        return sum_present((self.ingredient_cost_paid, self.dispensing_fee_paid))


class PriorAuthorizationSegment(_Segment):
    """AM19."""

    authorization_type: Optional[str] = None
    prior_prescription_date: Optional[str] = None


class ClinicalSegment(_Segment):
    """AM20."""

    diagnosis_code_qualifier: Optional[str] = None
    clinical_information: Optional[str] = None


class AdditionalDocumentationSegment(_Segment):
    """AM21. Type 01 carries DEA/state license data, type 03 a prior auth number."""

    documentation_type: Optional[str] = None
    documentation_date: Optional[str] = None
    dea_number: Optional[str] = None
    state: Optional[str] = None
    state_license_number: Optional[str] = None
    prior_authorization_number: Optional[str] = None


class ResponseStatusSegment(_Segment):
    """AN02."""

    response_status: Optional[str] = None
    response_code: Optional[str] = None
    response_message: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.response_status == "A"

    @property
    def is_rejected(self) -> bool:
        return self.response_status == "R"


class ResponsePaymentSegment(_Segment):
    """AN23: 01 ingredient cost paid, 02 dispensing fee paid, 03 patient pay, 05 total paid."""

    ingredient_cost_paid: Optional[Decimal] = None
    dispensing_fee_paid: Optional[Decimal] = None
    patient_pay_amount: Optional[Decimal] = None
    total_amount_paid: Optional[Decimal] = None

    @property
    def total_paid(self) -> Decimal:
        if self.total_amount_paid is not None:
            return self.total_amount_paid
        return sum_present((self.ingredient_cost_paid, self.dispensing_fee_paid))


class ResponseMessageSegment(_Segment):
    """AN25."""

    message_text: Optional[str] = None
    authorization_number: Optional[str] = None


class NcpdpTransaction(_Segment):
    """One decoded NCPDP D.0 transaction (STX through SE)."""

    raw_content: str
    version: Optional[str] = None

    header: Optional[TransactionHeader] = None
    insurance: Optional[InsuranceSegment] = None
    patient: Optional[PatientSegment] = None
    prescriber: Optional[PrescriberSegment] = None
    claim: Optional[ClaimSegment] = None
    compound: Optional[CompoundSegment] = None
    ndc_code: Optional[str] = None
    pricing: Optional[PricingSegment] = None
    prior_authorization: Optional[PriorAuthorizationSegment] = None
    clinical: Optional[ClinicalSegment] = None
    additional_documentation: Optional[AdditionalDocumentationSegment] = None
    claim_trailer: Optional[str] = None
    response_status: Optional[ResponseStatusSegment] = None
    response_payment: Optional[ResponsePaymentSegment] = None
    response_message: Optional[ResponseMessageSegment] = None

    # Non-fatal conditions seen while decoding (unknown tags, bad numbers)
    notices: Tuple[str, ...] = ()

    @property
    def has_response(self) -> bool:
        return self.response_status is not None

    @property
    def is_approved(self) -> bool:
        return self.has_response and self.response_status.is_approved

    @property
    def is_rejected(self) -> bool:
        return self.has_response and self.response_status.is_rejected

    @property
    def is_compound(self) -> bool:
        return self.compound is not None
