"""
Tests for proposal identifiers.
"""

import re

import pytest

from pricing_api.core.exceptions import ValidationError
from pricing_api.models.proposal import ProposalType
from pricing_api.services.proposal_numbering import (
    deduplicate_base_id,
    format_proposal_number,
    format_typed_id,
    generate_base_id,
    new_version_id,
    next_typed_id,
    next_typed_number,
    parse_typed_id,
    to_base36,
)


class TestBase36:
    def test_digits(self):
        assert to_base36(0) == "0"
        assert to_base36(35) == "Z"
        assert to_base36(36) == "10"
        assert to_base36(36 ** 3) == "1000"


class TestBaseId:
    """Public base id."""

    def test_format(self):
        assert re.fullmatch(r"PROP-[0-9A-Z]+-[0-9A-Z]{6}", generate_base_id())

    def test_timestamp_is_encoded(self):
        assert generate_base_id(36).startswith("PROP-10-")

    def test_deduplicate(self):
        deduplicated = deduplicate_base_id("PROP-ABC-123456", timestamp_ms=1700000000000)
        assert re.fullmatch(r"PROP-ABC-123456_1700000000000[0-9A-Z]{4}", deduplicated)


class TestProposalNumber:
    def test_first_of_the_year(self):
        assert format_proposal_number(0, 2025) == "0001/2025"

    def test_padding(self):
        assert format_proposal_number(41, 2024) == "0042/2024"
        assert format_proposal_number(9999, 2024) == "10000/2024"


class TestTypedId:
    """Prop_<Type>_<NNN>_v<version> identifiers."""

    def test_format(self):
        assert format_typed_id(ProposalType.DOUBLE, 1) == "Prop_Inter_Double_001_v1"
        assert format_typed_id(ProposalType.PABX, 12, version=3) == "Prop_Pabx_Sip_012_v3"
        assert format_typed_id(ProposalType.VM, 1000) == "Prop_MV_1000_v1"

    def test_general_has_no_typed_id(self):
        with pytest.raises(ValidationError):
            format_typed_id(ProposalType.GENERAL, 1)

    def test_parse(self):
        assert parse_typed_id("Prop_Pabx_Sip_007_v2") == ("Pabx_Sip", 7, 2)
        assert parse_typed_id("PROP-ABC-123456") is None

    def test_next_number_per_type(self):
        existing = [
            "Prop_Inter_Double_001_v1",
            "Prop_Inter_Double_004_v2",
            "Prop_Inter_Fibra_009_v1",
            "PROP-ABC-123456",
        ]
        assert next_typed_number(existing, ProposalType.DOUBLE) == 5
        assert next_typed_number(existing, ProposalType.FIBER) == 10
        assert next_typed_id(existing, ProposalType.PABX) == "Prop_Pabx_Sip_001_v1"

    def test_fiber_does_not_count_other_prefixes(self):
        assert next_typed_number(["Prop_Inter_Man_003_v1"], ProposalType.MAN) == 4
        assert next_typed_number(["Prop_Inter_Man_003_v1"], ProposalType.FIBER) == 1


class TestNewVersion:
    def test_bumps_past_highest_stored_version(self):
        existing = ["Prop_Inter_Fibra_001_v1", "Prop_Inter_Fibra_001_v2", "Prop_Inter_Fibra_002_v5"]
        assert new_version_id("Prop_Inter_Fibra_001_v1", existing) == "Prop_Inter_Fibra_001_v3"

    def test_no_stored_versions(self):
        assert new_version_id("Prop_MV_004_v1", []) == "Prop_MV_004_v2"

    def test_generic_id_rejected(self):
        with pytest.raises(ValidationError):
            new_version_id("PROP-ABC-123456", [])
