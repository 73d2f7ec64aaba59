"""
One decoding rule per NCPDP D.0 segment.

Every decoder takes the full field list of its line (tag at index 0) and the
warnings list for that line, and returns the decoded value or None. Decoders
with a minimum field count raise ``ParseStructureError`` on a shortfall;
numeric coercion failures only add warnings.

``SEGMENT_RULES`` maps every ``SegmentId`` to its decoder and to the
``NcpdpTransaction`` attribute the result is stored in (None for segments
that assemble nothing).
"""
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from rxremit.models.enums import SegmentId
from rxremit.models.ncpdp import (
    AdditionalDocumentationSegment,
    ClaimSegment,
    ClinicalSegment,
    CompoundIngredient,
    CompoundSegment,
    InsuranceSegment,
    PatientSegment,
    PrescriberSegment,
    PricingSegment,
    PriorAuthorizationSegment,
    ResponseMessageSegment,
    ResponsePaymentSegment,
    ResponseStatusSegment,
    TransactionHeader,
)
from rxremit.services.ncpdp.fields import (
    get_field,
    parse_amount_pairs,
    require_min_fields,
    to_decimal,
    to_integer,
)
from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

COMPOUND_GROUP_SIZE = 5

# AM21 documentation types
DOC_TYPE_DEA = "01"
DOC_TYPE_PRIOR_AUTH = "03"

Decoder = Callable[[List[str], List], Any]


def decode_stx(fields: List[str], warnings: List) -> Optional[str]:
    """STX*D0*  Start of transaction; yields the version token."""
    require_min_fields(fields, 2, SegmentId.STX.value)
    return get_field(fields, 1)


def decode_am01(fields: List[str], warnings: List) -> TransactionHeader:
    """AM01*1234567*PHARMACY001*20241014*143025*1*"""
    require_min_fields(fields, 6, SegmentId.AM01.value)
    return TransactionHeader(
        service_provider_id=get_field(fields, 1),
        pharmacy_id=get_field(fields, 2),
        date=get_field(fields, 3),
        time=get_field(fields, 4),
        transaction_count=get_field(fields, 5),
    )


def decode_am04(fields: List[str], warnings: List) -> InsuranceSegment:
    """AM04*01*R*1*"""
    require_min_fields(fields, 4, SegmentId.AM04.value)
    return InsuranceSegment(
        cardholder_id_qualifier=get_field(fields, 1),
        prescription_origin_code=get_field(fields, 2),
        fill_number=to_integer(get_field(fields, 3), warnings),
    )


def decode_am07(fields: List[str], warnings: List) -> PatientSegment:
    """AM07*BCBSIL*60054*123456789*01*SMITH*JOHN*A*19850515*M*456 PATIENT AVE*CHICAGO*IL*60602*"""
    require_min_fields(fields, 14, SegmentId.AM07.value)
    return PatientSegment(
        carrier_id=get_field(fields, 1),
        bin_number=get_field(fields, 2),
        cardholder_id_number=get_field(fields, 3),
        cardholder_id_qualifier=get_field(fields, 4),
        last_name=get_field(fields, 5),
        first_name=get_field(fields, 6),
        middle_initial=get_field(fields, 7),
        date_of_birth=get_field(fields, 8),
        gender=get_field(fields, 9),
        address=get_field(fields, 10),
        city=get_field(fields, 11),
        state=get_field(fields, 12),
        zip=get_field(fields, 13),
    )


def decode_am11(fields: List[str], warnings: List) -> PrescriberSegment:
    """AM11*00123456789*1*1234567890*JONES*ROBERT*D*555-123-4567*"""
    require_min_fields(fields, 8, SegmentId.AM11.value)
    return PrescriberSegment(
        prescriber_id=get_field(fields, 1),
        prescriber_id_qualifier=get_field(fields, 2),
        license_number=get_field(fields, 3),
        last_name=get_field(fields, 4),
        first_name=get_field(fields, 5),
        middle_initial=get_field(fields, 6),
        phone_number=get_field(fields, 7),
    )


def decode_am13(fields: List[str], warnings: List) -> ClaimSegment:
    """AM13*20241014*12345*1*00002012345678*LIPITOR*20MG*TAB*30*EA*1*0*0*3*"""
    require_min_fields(fields, 14, SegmentId.AM13.value)
    return ClaimSegment(
        date_of_service=get_field(fields, 1),
        prescription_number=get_field(fields, 2),
        fill_number=to_integer(get_field(fields, 3), warnings),
        ndc=get_field(fields, 4),
        product_description=get_field(fields, 5),
        strength=get_field(fields, 6),
        dosage_form=get_field(fields, 7),
        quantity_dispensed=to_decimal(get_field(fields, 8), warnings),
        quantity_unit=get_field(fields, 9),
        daw_code=to_integer(get_field(fields, 10), warnings),
        refills_authorized=to_integer(get_field(fields, 11), warnings),
        origin_code=to_integer(get_field(fields, 12), warnings),
        days_supply=to_integer(get_field(fields, 13), warnings),
    )


def decode_am14(fields: List[str], warnings: List) -> CompoundSegment:
    """
    AM14*01*00006020001234*50*ML*125.00*02*00008820004567*25*GM*85.00*

    Ingredients come in groups of five (sequence, product code, quantity,
    unit, cost). A trailing group with fewer than five fields is dropped.
    """
    ingredients = []
    for start in range(1, len(fields), COMPOUND_GROUP_SIZE):
        if start + COMPOUND_GROUP_SIZE - 1 >= len(fields):
            break
        ingredients.append(
            CompoundIngredient(
                sequence_number=to_integer(get_field(fields, start), warnings),
                product_code=get_field(fields, start + 1),
                quantity=get_field(fields, start + 2),
                quantity_unit=get_field(fields, start + 3),
                cost=get_field(fields, start + 4),
            )
        )
    return CompoundSegment(ingredients=tuple(ingredients))


def decode_am15(fields: List[str], warnings: List) -> Optional[str]:
    """AM15*59762-0123-03*"""
    return get_field(fields, 1)


def decode_am17(fields: List[str], warnings: List) -> PricingSegment:
    """AM17*01*250.00*02*225.00*03*20.00*04*5.00*05*0.00*06*0.00*07*0.00*11*250.00*"""
    amounts = parse_amount_pairs(fields, warnings)
    return PricingSegment(
        ingredient_cost_submitted=amounts.get("01"),
        ingredient_cost_paid=amounts.get("02"),
        dispensing_fee_submitted=amounts.get("03"),
        dispensing_fee_paid=amounts.get("04"),
        tax_amount=amounts.get("05"),
        usual_and_customary_charge=amounts.get("06"),
        flat_sales_tax_amount=amounts.get("07"),
        gross_amount_due=amounts.get("11"),
    )


def decode_am19(fields: List[str], warnings: List) -> PriorAuthorizationSegment:
    """AM19*20*20240714*"""
    return PriorAuthorizationSegment(
        authorization_type=get_field(fields, 1),
        prior_prescription_date=get_field(fields, 2),
    )


def decode_am20(fields: List[str], warnings: List) -> ClinicalSegment:
    """AM20*01*New therapy*"""
    return ClinicalSegment(
        diagnosis_code_qualifier=get_field(fields, 1),
        clinical_information=get_field(fields, 2),
    )


def decode_am21(fields: List[str], warnings: List) -> AdditionalDocumentationSegment:
    """AM21*01*20241014*STATE123456*TX*1234567* or AM21*03*PA123456789*"""
    doc_type = get_field(fields, 1)

    if doc_type == DOC_TYPE_DEA and len(fields) >= 6:
        return AdditionalDocumentationSegment(
            documentation_type=doc_type,
            documentation_date=get_field(fields, 2),
            dea_number=get_field(fields, 3),
            state=get_field(fields, 4),
            state_license_number=get_field(fields, 5),
        )
    if doc_type == DOC_TYPE_PRIOR_AUTH and len(fields) >= 3:
        return AdditionalDocumentationSegment(
            documentation_type=doc_type,
            prior_authorization_number=get_field(fields, 2),
        )
    return AdditionalDocumentationSegment(documentation_type=doc_type)


def decode_amc1(fields: List[str], warnings: List) -> Optional[str]:
    """AMC1*123456789012345*"""
    return get_field(fields, 1)


def decode_an02(fields: List[str], warnings: List) -> ResponseStatusSegment:
    """AN02*A*00*APPROVED*"""
    require_min_fields(fields, 4, SegmentId.AN02.value)
    return ResponseStatusSegment(
        response_status=get_field(fields, 1),
        response_code=get_field(fields, 2),
        response_message=get_field(fields, 3),
    )


def decode_an23(fields: List[str], warnings: List) -> ResponsePaymentSegment:
    """AN23*01*225.00*02*20.00*03*5.00*05*250.00*"""
    amounts = parse_amount_pairs(fields, warnings)
    return ResponsePaymentSegment(
        ingredient_cost_paid=amounts.get("01"),
        dispensing_fee_paid=amounts.get("02"),
        patient_pay_amount=amounts.get("03"),
        total_amount_paid=amounts.get("05"),
    )


def decode_an25(fields: List[str], warnings: List) -> ResponseMessageSegment:
    """AN25*CLAIM APPROVED*AUTH123456*"""
    return ResponseMessageSegment(
        message_text=get_field(fields, 1),
        authorization_number=get_field(fields, 2),
    )


def _response_echo(segment_id: SegmentId) -> Decoder:
    """AN01/AN04/AN07/ANC1 mirror request segments; nothing is extracted."""

    def decode(fields: List[str], warnings: List) -> None:
        logger.debug("Parsed response echo segment", segment_id=segment_id.value)
        return None

    decode.__name__ = f"decode_{segment_id.value.lower()}"
    return decode


def decode_se(fields: List[str], warnings: List) -> None:
    """SE*15*1234567*  The declared segment count is not checked."""
    logger.debug("Parsed SE transaction end", declared_count=get_field(fields, 1))
    return None


class SegmentRule(NamedTuple):
    decode: Decoder
    target: Optional[str]


SEGMENT_RULES: Dict[SegmentId, SegmentRule] = {
    SegmentId.STX: SegmentRule(decode_stx, "version"),
    SegmentId.AM01: SegmentRule(decode_am01, "header"),
    SegmentId.AM04: SegmentRule(decode_am04, "insurance"),
    SegmentId.AM07: SegmentRule(decode_am07, "patient"),
    SegmentId.AM11: SegmentRule(decode_am11, "prescriber"),
    SegmentId.AM13: SegmentRule(decode_am13, "claim"),
    SegmentId.AM14: SegmentRule(decode_am14, "compound"),
    SegmentId.AM15: SegmentRule(decode_am15, "ndc_code"),
    SegmentId.AM17: SegmentRule(decode_am17, "pricing"),
    SegmentId.AM19: SegmentRule(decode_am19, "prior_authorization"),
    SegmentId.AM20: SegmentRule(decode_am20, "clinical"),
    SegmentId.AM21: SegmentRule(decode_am21, "additional_documentation"),
    SegmentId.AMC1: SegmentRule(decode_amc1, "claim_trailer"),
    SegmentId.AN01: SegmentRule(_response_echo(SegmentId.AN01), None),
    SegmentId.AN02: SegmentRule(decode_an02, "response_status"),
    SegmentId.AN04: SegmentRule(_response_echo(SegmentId.AN04), None),
    SegmentId.AN07: SegmentRule(_response_echo(SegmentId.AN07), None),
    SegmentId.AN23: SegmentRule(decode_an23, "response_payment"),
    SegmentId.AN25: SegmentRule(decode_an25, "response_message"),
    SegmentId.ANC1: SegmentRule(_response_echo(SegmentId.ANC1), None),
    SegmentId.SE: SegmentRule(decode_se, None),
}

_unmapped = set(SegmentId) - set(SEGMENT_RULES)
if _unmapped:
    raise RuntimeError(f"No decoder registered for segments: {sorted(s.value for s in _unmapped)}")
