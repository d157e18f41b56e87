"""Tests for override payload validation."""
from decimal import Decimal

import pytest

from leasing_service.app.enum.rate_governance_enum import RateOverrideType
from leasing_service.app.models.rate_governance.override_terms import (
    FixedRateTerms, NoIncreaseTerms, PercentageCapTerms, build_override_terms
)
from shared.core.exceptions import ValidationError


class TestBuildOverrideTerms:

    def test_fixed_rate(self):
        terms = build_override_terms("fixed_rate", fixed_rate="1050.00")
        assert terms == FixedRateTerms(Decimal("1050.00"))
        assert terms.columns() == {"fixed_rate": Decimal("1050.00"), "percentage_cap": None}

    def test_percentage_cap(self):
        terms = build_override_terms(RateOverrideType.percentage_cap, percentage_cap=5)
        assert isinstance(terms, PercentageCapTerms)
        assert terms.percentage_cap == Decimal("5")

    def test_no_increase(self):
        terms = build_override_terms("no_increase")
        assert isinstance(terms, NoIncreaseTerms)
        assert terms.columns() == {"fixed_rate": None, "percentage_cap": None}

    def test_fixed_rate_missing_value_names_field(self):
        with pytest.raises(ValidationError) as exc:
            build_override_terms("fixed_rate")
        assert exc.value.field == "fixed_rate"
        assert exc.value.status_code == 422

    def test_fixed_rate_must_be_positive(self):
        with pytest.raises(ValidationError) as exc:
            build_override_terms("fixed_rate", fixed_rate=0)
        assert exc.value.field == "fixed_rate"

    def test_percentage_cap_missing_value_names_field(self):
        with pytest.raises(ValidationError) as exc:
            build_override_terms("percentage_cap")
        assert exc.value.field == "percentage_cap"

    @pytest.mark.parametrize("cap", ["-1", "100.01", "NaN"])
    def test_percentage_cap_out_of_range(self, cap):
        with pytest.raises(ValidationError) as exc:
            build_override_terms("percentage_cap", percentage_cap=cap)
        assert exc.value.field == "percentage_cap"

    @pytest.mark.parametrize("cap", ["0", "100"])
    def test_percentage_cap_bounds_are_inclusive(self, cap):
        assert build_override_terms("percentage_cap", percentage_cap=cap).percentage_cap == Decimal(cap)

    def test_payload_for_other_type_is_rejected(self):
        with pytest.raises(ValidationError) as exc:
            build_override_terms("fixed_rate", fixed_rate=10, percentage_cap=5)
        assert exc.value.field == "percentage_cap"

        with pytest.raises(ValidationError) as exc:
            build_override_terms("no_increase", fixed_rate=10)
        assert exc.value.field == "fixed_rate"

    def test_unknown_type(self):
        with pytest.raises(ValidationError) as exc:
            build_override_terms("freeze")
        assert exc.value.field == "override_type"

    def test_non_numeric_value(self):
        with pytest.raises(ValidationError) as exc:
            build_override_terms("fixed_rate", fixed_rate="lots")
        assert exc.value.field == "fixed_rate"

    @pytest.mark.parametrize("override_type,field,value", [
        ("fixed_rate", "fixed_rate", "0.004"),
        ("fixed_rate", "fixed_rate", "1050.005"),
        ("percentage_cap", "percentage_cap", "2.555"),
    ])
    def test_more_than_two_decimals_is_rejected(self, override_type, field, value):
        with pytest.raises(ValidationError) as exc:
            build_override_terms(override_type, **{field: value})
        assert exc.value.field == field
        assert "2 decimal places" in exc.value.detail

    def test_trailing_zeros_are_not_extra_precision(self):
        assert FixedRateTerms("950.000").fixed_rate == Decimal("950")
        assert PercentageCapTerms("2.500").percentage_cap == Decimal("2.5")
