"""Tests for mapping NCPDP transactions to claims."""
import re
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from rxremit.models.enums import ClaimStatus
from rxremit.services.ncpdp.mapper import NcpdpToClaimMapper
from rxremit.utils.errors import MappingError


@pytest.fixture
def mapper():
    return NcpdpToClaimMapper()


@pytest.mark.unit
class TestMapApprovedClaim:
    """Approved transaction with an AN23 payment segment."""

    def test_identity_fields(self, mapper, approved_transaction):
        claim = mapper.map_to_claim(approved_transaction)

        assert re.fullmatch(r"NCPDP-PHARMACY001-12345-20241014-[0-9a-f]{8}", claim.id)
        assert claim.payer_id == "BCBSIL"
        assert claim.payee_id == "PHARMACY001"
        assert claim.claim_number == "12345"
        assert claim.patient_id == "123456789"
        assert claim.patient_name == "JOHN A SMITH"
        assert claim.bin_number == "60054"
        assert claim.processed_by == "NCPDP_D0_MAPPER"

    def test_dates(self, mapper, approved_transaction):
        claim = mapper.map_to_claim(approved_transaction)
        assert claim.service_date == date(2024, 10, 14)
        assert claim.statement_from_date == claim.statement_to_date == claim.service_date

    def test_amounts(self, mapper, approved_transaction):
        claim = mapper.map_to_claim(approved_transaction)

        assert claim.total_charge_amount == Decimal("270.00")
        assert claim.paid_amount == Decimal("230.00")
        assert claim.patient_responsibility_amount == Decimal("20.00")
        assert claim.adjustment_amount == Decimal("20.00")

    def test_status(self, mapper, approved_transaction):
        claim = mapper.map_to_claim(approved_transaction)
        assert claim.status == ClaimStatus.PAID
        assert claim.status_reason == "APPROVED"

    def test_service_line(self, mapper, approved_transaction):
        claim = mapper.map_to_claim(approved_transaction)

        assert len(claim.service_lines) == 1
        line = claim.service_lines[0]
        assert line.procedure_code == "59762-0123-03"
        assert line.modifier == "TAB"
        assert line.units == 30
        assert line.charged_amount == Decimal("270.00")
        assert line.paid_amount == Decimal("230.00")

    def test_contractual_adjustment(self, mapper, approved_transaction):
        claim = mapper.map_to_claim(approved_transaction)

        assert len(claim.adjustments) == 1
        adjustment = claim.adjustments[0]
        assert adjustment.group_code == "CO"
        assert adjustment.reason_code == "45"
        assert adjustment.amount == Decimal("20.00")

    def test_claim_ids_are_unique(self, mapper, approved_transaction):
        first = mapper.map_to_claim(approved_transaction)
        second = mapper.map_to_claim(approved_transaction)
        assert first.id != second.id


@pytest.mark.unit
class TestMapRejectedClaim:
    """Rejected transaction without a payment segment."""

    def test_rejected(self, mapper, rejected_transaction):
        claim = mapper.map_to_claim(rejected_transaction)

        assert claim.payer_id == "AETNA"
        assert claim.status == ClaimStatus.DENIED
        assert claim.status_reason == "PRODUCT NOT COVERED"
        assert claim.total_charge_amount == Decimal("42.50")
        assert claim.paid_amount == Decimal("0")
        assert claim.patient_responsibility_amount == Decimal("42.50")
        assert claim.adjustment_amount == Decimal("0")

    def test_rejection_adjustment(self, mapper, rejected_transaction):
        claim = mapper.map_to_claim(rejected_transaction)

        assert [(a.group_code, a.reason_code, a.amount) for a in claim.adjustments] == [
            ("PR", "REJECTED", Decimal("42.50"))
        ]

    def test_ndc_falls_back_to_claim_segment(self, mapper, rejected_transaction):
        claim = mapper.map_to_claim(rejected_transaction)
        assert claim.service_lines[0].procedure_code == "00093015001"


@pytest.mark.unit
class TestMapWithoutResponse:
    """Request-only transactions."""

    def test_paid_from_pricing(self, mapper, parser):
        tx = parser.parse(
            "STX*D0*\n"
            "AM01*1*PH1*20241014*1*1*\n"
            "AM07*CARRIER*1*2*01*L*F*M*19800101*F*A*C*S*Z*\n"
            "AM13*20241014*RX1*1*NDC1*D*S*CAP*10*EA*0*0*0*10*\n"
            "AM17*01*100.00*02*80.00*03*10.00*04*5.00*\n"
        )
        claim = mapper.map_to_claim(tx)

        assert claim.status == ClaimStatus.PROCESSED
        assert claim.status_reason is None
        assert claim.total_charge_amount == Decimal("110.00")
        assert claim.paid_amount == Decimal("85.00")
        assert claim.patient_responsibility_amount == Decimal("25.00")
        assert claim.adjustment_amount == Decimal("0")
        assert claim.adjustments == []

    def test_bad_service_date_uses_today(self, mapper, parser):
        tx = parser.parse(
            "STX*D0*\n"
            "AM01*1*PH1*20241014*1*1*\n"
            "AM07*CARRIER*1*2*01*L*F*M*19800101*F*A*C*S*Z*\n"
            "AM13*NOTADATE*RX1*1*NDC1*D*S*CAP**EA*0*0*0*10*\n"
            "AM17*11*10.00*\n"
        )
        with patch("rxremit.services.ncpdp.mapper.logger") as mock_logger:
            claim = mapper.map_to_claim(tx)

        assert claim.service_date == date.today()
        assert claim.service_lines[0].units == 0
        mock_logger.error.assert_called_once()

    def test_exponent_quantity_maps_to_zero_units(self, mapper, parser):
        """An exponent-notation quantity decodes as absent instead of a huge number."""
        tx = parser.parse(
            "STX*D0*\n"
            "AM01*1*PH1*20241014*1*1*\n"
            "AM07*CARRIER*1*2*01*L*F*M*19800101*F*A*C*S*Z*\n"
            "AM13*20241014*RX1*1*NDC1*D*S*CAP*1E+999999999*EA*0*0*0*10*\n"
            "AM17*11*10.00*\n"
        )
        claim = mapper.map_to_claim(tx)

        assert tx.claim.quantity_dispensed is None
        assert any("'1E+999999999' as decimal in AM13" in notice for notice in tx.notices)
        assert claim.service_lines[0].units == 0

    def test_compound_maps_to_single_line(self, mapper, compound_transaction):
        claim = mapper.map_to_claim(compound_transaction)
        assert len(claim.service_lines) == 1
        assert claim.payer_id == "CIGNA"


@pytest.mark.unit
class TestMappingErrors:
    """Required segment checks."""

    @pytest.mark.parametrize(
        "segment, message",
        [
            ("AM07", "Patient segment (AM07) is required"),
            ("AM01", "Header segment (AM01) is required"),
            ("AM13", "Claim segment (AM13) is required"),
            ("AM17", "Pricing segment (AM17) is required"),
        ],
    )
    def test_missing_required_segment(self, mapper, parser, approved_transaction_text, segment, message):
        raw = "\n".join(
            line for line in approved_transaction_text.splitlines() if not line.startswith(segment)
        )
        with pytest.raises(MappingError) as exc_info:
            mapper.map_to_claim(parser.parse(raw))
        assert exc_info.value.message == message
        assert exc_info.value.details == {"segment_id": segment}

    def test_none_transaction(self, mapper):
        with pytest.raises(MappingError):
            mapper.map_to_claim(None)

    def test_map_to_claims_skips_failures(self, mapper, parser, approved_transaction, minimal_transaction_text):
        incomplete = parser.parse(minimal_transaction_text)
        claims = mapper.map_to_claims([approved_transaction, incomplete, approved_transaction])
        assert len(claims) == 2

    def test_map_to_claims_empty(self, mapper):
        assert mapper.map_to_claims(None) == []
        assert mapper.map_to_claims([]) == []
