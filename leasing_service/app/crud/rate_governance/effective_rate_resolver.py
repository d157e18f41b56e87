"""Which rent rate is in force for a lease unit on a given date.

``resolve_rate`` is pure: it works on already-loaded rows and an explicit
``at_date``, so it answers historical and future questions the same way it
answers "today". ``resolve_effective_rate`` only loads the inputs.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from leasing_service.app.crud.rate_governance.floor_composer import compose_floors
from leasing_service.app.enum.rate_governance_enum import RateApprovalStatus, RateOverrideType, RateSource
from leasing_service.app.models.leasing_tenants.lease_units import LeaseUnit
from leasing_service.app.models.rate_governance.rate_change_requests import RateChangeRequest
from leasing_service.app.models.rate_governance.rate_overrides import RateOverride
from leasing_service.app.schemas.rate_governance.effective_rate_schemas import EffectiveRateOut
from shared.core.exceptions import NotFoundError, ValidationError
from shared.utils.identifiers import as_uuid

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


def to_cents(value, rounding=ROUND_HALF_UP) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=rounding)


@dataclass(frozen=True)
class ResolvedRate:
    rate: Decimal
    source: RateSource
    base: Decimal
    candidate: Decimal
    rate_change_request_id: Any = None
    override_id: Any = None
    warnings: Tuple[str, ...] = ()


def _latest_first(value: Optional[datetime]):
    # rows without an approval timestamp sort as oldest
    return (value is not None, value.replace(tzinfo=None) if value else datetime.min)


def latest_standard_increase(increases: Iterable[Any], at_date: date):
    applicable = [
        r for r in increases
        if r.status == RateApprovalStatus.approved and r.effective_date <= at_date
    ]
    if not applicable:
        return None
    return max(applicable, key=lambda r: (
        r.effective_date, _latest_first(r.approved_at), _latest_first(r.created_at), str(r.id)))


def covering_overrides(overrides: Iterable[Any], at_date: date) -> List[Any]:
    covering = [
        o for o in overrides
        if o.status == RateApprovalStatus.approved and o.covers(at_date)
    ]
    # most recent effective_from wins
    return sorted(
        covering,
        key=lambda o: (o.effective_from, _latest_first(o.approved_at), str(o.id)),
        reverse=True,
    )


def resolve_rate(base, increases: Iterable[Any], overrides: Iterable[Any], at_date: date) -> ResolvedRate:
    base = to_cents(base)

    increase = latest_standard_increase(increases, at_date)
    if increase is not None:
        candidate = to_cents(increase.proposed_rate)
        candidate_source = RateSource.standard_increase
    else:
        candidate = base
        candidate_source = RateSource.base
    increase_id = increase.id if increase is not None else None
    return apply_overrides(base, candidate, candidate_source, overrides, at_date, increase_id)


def apply_overrides(base, candidate, candidate_source: RateSource, overrides: Iterable[Any], at_date: date,
                    increase_id=None) -> ResolvedRate:
    """Rate in force on ``at_date`` if ``candidate`` were the standard rate."""
    base, candidate = to_cents(base), to_cents(candidate)
    warnings: List[str] = []

    covering = covering_overrides(overrides, at_date)
    if not covering:
        return ResolvedRate(candidate, candidate_source, base, candidate, increase_id)

    override, terms = None, None
    for row in covering:
        try:
            override, terms = row, row.terms
            break
        except ValidationError as e:
            message = f"Override {row.id} has malformed terms and was skipped: {e.detail}"
            logger.warning(message)
            warnings.append(message)

    if override is None:
        return ResolvedRate(candidate, candidate_source, base, candidate, increase_id, warnings=tuple(warnings))

    if len(covering) > 1:
        chosen = "latest effective_from" if override is covering[0] else "latest well-formed override"
        message = (
            f"{len(covering)} approved overrides cover {at_date.isoformat()} for lease unit "
            f"{override.lease_unit_id}; using {override.id} ({chosen})")
        logger.warning(message)
        warnings.append(message)

    if terms.override_type == RateOverrideType.fixed_rate:
        rate, source = to_cents(terms.fixed_rate), RateSource.override_fixed
    elif terms.override_type == RateOverrideType.percentage_cap:
        limit = to_cents(base * (1 + terms.percentage_cap / HUNDRED), rounding=ROUND_FLOOR)
        rate, source = min(candidate, limit), RateSource.override_cap
    else:
        rate, source = base, RateSource.override_no_increase

    return ResolvedRate(rate, source, base, candidate, increase_id, override.id, tuple(warnings))


# ----------------------------------------------------
# Loading
# ----------------------------------------------------
def get_lease_unit(db: Session, lease_unit_id) -> LeaseUnit:
    lease_unit = (
        db.query(LeaseUnit)
        .options(selectinload(LeaseUnit.floors))
        .filter(LeaseUnit.id == as_uuid(lease_unit_id, "lease_unit_id"))
        .first()
    )
    if not lease_unit:
        raise NotFoundError("Lease unit not found")
    return lease_unit


def lease_unit_base_rent(lease_unit: LeaseUnit) -> Decimal:
    """Floor snapshot when the lease tracks floors, otherwise the contracted rent."""
    if lease_unit.floors:
        return compose_floors(lease_unit.floors).base_rent
    return Decimal(str(lease_unit.rent_amount))


def lease_unit_rate_inputs(db: Session, lease_unit: LeaseUnit, at_date: date):
    """Base rent plus the approved increases and overrides that can apply on ``at_date``."""
    increases = db.query(RateChangeRequest).filter(
        RateChangeRequest.lease_unit_id == lease_unit.id,
        RateChangeRequest.status == RateApprovalStatus.approved,
        RateChangeRequest.effective_date <= at_date,
    ).all()
    overrides = db.query(RateOverride).filter(
        RateOverride.lease_unit_id == lease_unit.id,
        RateOverride.status == RateApprovalStatus.approved,
        RateOverride.effective_from <= at_date,
    ).all()
    return lease_unit_base_rent(lease_unit), increases, overrides


def resolve_for_lease_unit(db: Session, lease_unit: LeaseUnit, at_date: date) -> ResolvedRate:
    base, increases, overrides = lease_unit_rate_inputs(db, lease_unit, at_date)
    return resolve_rate(base, increases, overrides, at_date)


def resolve_effective_rate(db: Session, lease_unit_id, at_date: date) -> EffectiveRateOut:
    lease_unit = get_lease_unit(db, lease_unit_id)
    resolved = resolve_for_lease_unit(db, lease_unit, at_date)
    return EffectiveRateOut(
        lease_unit_id=lease_unit.id,
        at_date=at_date,
        rate=resolved.rate,
        source=resolved.source,
        base=resolved.base,
        candidate=resolved.candidate,
        rate_change_request_id=resolved.rate_change_request_id,
        override_id=resolved.override_id,
        warnings=list(resolved.warnings),
    )
