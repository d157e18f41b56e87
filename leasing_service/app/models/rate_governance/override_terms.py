"""Override payloads, one shape per override type.

A ``RateOverride`` row stores ``fixed_rate`` and ``percentage_cap`` as nullable
columns; these dataclasses are the only way the rest of the code reads or
writes them, so a tag can never travel with the wrong payload.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from leasing_service.app.enum.rate_governance_enum import RateOverrideType
from shared.core.exceptions import ValidationError

MAX_PERCENTAGE_CAP = Decimal("100")
CENT = Decimal("0.01")


def _to_decimal(value, field: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    # columns hold two decimals; anything finer would be rounded on write
    try:
        exact = number == number.quantize(CENT)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range", field=field)
    if not exact:
        raise ValidationError(f"{field} must have at most 2 decimal places", field=field)
    return number


@dataclass(frozen=True)
class FixedRateTerms:
    fixed_rate: Decimal
    override_type = RateOverrideType.fixed_rate

    def __post_init__(self):
        rate = _to_decimal(self.fixed_rate, "fixed_rate")
        if rate <= 0:
            raise ValidationError("fixed_rate must be positive", field="fixed_rate")
        object.__setattr__(self, "fixed_rate", rate)

    def columns(self) -> dict:
        return {"fixed_rate": self.fixed_rate, "percentage_cap": None}


@dataclass(frozen=True)
class PercentageCapTerms:
    percentage_cap: Decimal
    override_type = RateOverrideType.percentage_cap

    def __post_init__(self):
        cap = _to_decimal(self.percentage_cap, "percentage_cap")
        if cap < 0 or cap > MAX_PERCENTAGE_CAP:
            raise ValidationError(
                "percentage_cap must be between 0 and 100", field="percentage_cap")
        object.__setattr__(self, "percentage_cap", cap)

    def columns(self) -> dict:
        return {"fixed_rate": None, "percentage_cap": self.percentage_cap}


@dataclass(frozen=True)
class NoIncreaseTerms:
    override_type = RateOverrideType.no_increase

    def columns(self) -> dict:
        return {"fixed_rate": None, "percentage_cap": None}


OverrideTerms = Union[FixedRateTerms, PercentageCapTerms, NoIncreaseTerms]


def build_override_terms(override_type, fixed_rate=None, percentage_cap=None) -> OverrideTerms:
    """Validate a loosely typed payload against its tag and return the matching terms."""
    try:
        override_type = RateOverrideType(override_type)
    except ValueError:
        raise ValidationError(
            f"Unknown override_type '{override_type}'", field="override_type")

    if override_type == RateOverrideType.fixed_rate:
        if fixed_rate is None:
            raise ValidationError(
                "fixed_rate is required for fixed_rate overrides", field="fixed_rate")
        if percentage_cap is not None:
            raise ValidationError(
                "percentage_cap is not allowed for fixed_rate overrides", field="percentage_cap")
        return FixedRateTerms(fixed_rate)

    if override_type == RateOverrideType.percentage_cap:
        if percentage_cap is None:
            raise ValidationError(
                "percentage_cap is required for percentage_cap overrides", field="percentage_cap")
        if fixed_rate is not None:
            raise ValidationError(
                "fixed_rate is not allowed for percentage_cap overrides", field="fixed_rate")
        return PercentageCapTerms(percentage_cap)

    if fixed_rate is not None or percentage_cap is not None:
        field = "fixed_rate" if fixed_rate is not None else "percentage_cap"
        raise ValidationError(
            f"{field} is not allowed for no_increase overrides", field=field)
    return NoIncreaseTerms()


def terms_from_columns(override_type, fixed_rate: Optional[Decimal], percentage_cap: Optional[Decimal]) -> OverrideTerms:
    return build_override_terms(override_type, fixed_rate, percentage_cap)
