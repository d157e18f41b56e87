import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from sqlalchemy.orm import Session, selectinload

from leasing_service.app.crud.rate_governance.effective_rate_resolver import to_cents
from leasing_service.app.crud.rate_governance.floor_composer import compose_unit, floor_rent
from leasing_service.app.enum.leasing_tenants_enum import LeaseStatus, UnitStatus
from leasing_service.app.models.leasing_tenants.lease_unit_floors import LeaseUnitFloor
from leasing_service.app.models.leasing_tenants.lease_units import LeaseUnit
from leasing_service.app.models.leasing_tenants.leases import Lease
from leasing_service.app.models.space_sites.unit_floors import UnitFloor
from leasing_service.app.models.space_sites.units import Unit
from leasing_service.app.schemas.leasing_tenants.lease_units_schemas import (
    FloorRentLineOut, UnitBaseRentOut
)
from shared.core.exceptions import AppException, NotFoundError, ValidationError
from shared.utils.identifiers import as_uuid

logger = logging.getLogger(__name__)


def _number(value, field: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    return number


def _non_negative(value, field: str) -> Decimal:
    number = _number(value, field)
    if number < 0:
        raise ValidationError(f"{field} must not be negative", field=field)
    return number


def _get_unit(db: Session, unit_id) -> Unit:
    unit = (
        db.query(Unit)
        .options(selectinload(Unit.floors))
        .filter(Unit.id == as_uuid(unit_id, "unit_id"), Unit.is_deleted == False)
        .first()
    )
    if not unit:
        raise NotFoundError("Unit not found")
    return unit


def get_unit_base_rent(db: Session, unit_id) -> UnitBaseRentOut:
    unit = _get_unit(db, unit_id)
    composition = compose_unit(unit)
    return UnitBaseRentOut(
        unit_id=unit.id,
        base_rent=to_cents(composition.base_rent),
        base_area=composition.base_area,
        from_floors=composition.from_floors,
        lines=[FloorRentLineOut(**line.__dict__) for line in composition.lines],
        warnings=list(composition.warnings),
    )


def update_unit_floor(db: Session, floor_id, area=None, rate=None) -> UnitFloor:
    floor = db.query(UnitFloor).filter(UnitFloor.id == as_uuid(floor_id, "floor_id")).first()
    if not floor:
        raise NotFoundError("Unit floor not found")
    if area is not None:
        # non-positive areas are kept and reported as composition warnings
        floor.area = _number(area, "area")
    if rate is not None:
        floor.rate = _non_negative(rate, "rate")
    floor.rent = to_cents(floor_rent(floor.area, floor.rate))

    try:
        db.flush()
        unit = floor.unit
        composition = compose_unit(unit)
        unit.total_area = composition.base_area
        unit.total_rent = to_cents(composition.base_rent)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to update unit floor %s", floor_id)
        raise
    db.refresh(floor)
    return floor


def _refresh_lease_total(lease: Lease) -> None:
    lease.total_rent_amount = to_cents(
        sum((Decimal(str(lu.rent_amount)) for lu in lease.lease_units), Decimal("0")))


def setup_lease_unit(
    db: Session,
    lease_id,
    unit_id,
    floor_rate_overrides: Optional[Dict] = None,
    custom_rent_amount=None,
) -> LeaseUnit:
    """Attach a unit to a lease and snapshot its floors at the negotiated rates.

    A ``custom_rent_amount`` replaces the composed rent and no floor snapshot is
    taken, so the agreed amount stays the base the rate resolver sees.
    """
    lease = db.query(Lease).filter(Lease.id == as_uuid(lease_id, "lease_id")).first()
    if not lease:
        raise NotFoundError("Lease not found")
    unit = _get_unit(db, unit_id)

    taken = (
        db.query(LeaseUnit)
        .join(Lease, LeaseUnit.lease_id == Lease.id)
        .filter(
            LeaseUnit.unit_id == unit.id,
            Lease.status == LeaseStatus.active,
        )
        .first()
    )
    if taken:
        if taken.lease_id == lease.id:
            raise ValidationError("Unit is already part of this lease", field="unit_id")
        raise ValidationError("Unit is already leased under another active lease", field="unit_id")

    overrides = {
        as_uuid(floor_id, "floor_rate_overrides"): _non_negative(rate, "floor_rate_overrides")
        for floor_id, rate in (floor_rate_overrides or {}).items()
    }
    composition = compose_unit(unit, overrides)

    if custom_rent_amount is not None:
        rent_amount = _non_negative(custom_rent_amount, "custom_rent_amount")
    else:
        rent_amount = composition.base_rent

    lease_unit = LeaseUnit(lease_id=lease.id, unit_id=unit.id, rent_amount=to_cents(rent_amount))
    snapshot = composition.lines if custom_rent_amount is None else ()
    for order, line in enumerate(snapshot):
        lease_unit.floors.append(LeaseUnitFloor(
            unit_floor_id=line.floor_id,
            floor_type=line.floor_type,
            area=line.area,
            standard_rate=line.standard_rate,
            rate=line.rate,
            rent=to_cents(line.rent),
            is_rate_overridden=line.is_rate_overridden,
            sort_order=order,
        ))

    try:
        lease.lease_units.append(lease_unit)
        _refresh_lease_total(lease)
        if lease.status == LeaseStatus.active:
            unit.status = UnitStatus.occupied.value
        db.commit()
    except AppException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Failed to add unit %s to lease %s", unit.id, lease.id)
        raise

    db.refresh(lease_unit)
    logger.info("Unit %s added to lease %s at %s (%d floors)",
                unit.unit_number, lease.id, lease_unit.rent_amount, len(snapshot))
    return lease_unit
