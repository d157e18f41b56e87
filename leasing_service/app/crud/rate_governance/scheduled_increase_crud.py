"""Periodic standard increases.

Leases with ``auto_increase_enabled`` carry a ``next_scheduled_increase`` date.
Once it is reached each of the lease's units gets a ``standard_increase``
request that still has to pass both approval stages; nothing is applied here.
The proposed rate is the raised rate after any covering approved override, and a
unit whose override keeps it at or below its current rate gets no request.
"""
import logging
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session, selectinload

from leasing_service.app.crud.rate_governance.effective_rate_resolver import (
    HUNDRED, apply_overrides, lease_unit_rate_inputs, resolve_rate, to_cents
)
from leasing_service.app.crud.rate_governance.rate_change_requests_crud import (
    create_rate_change_request, has_open_request
)
from leasing_service.app.enum.leasing_tenants_enum import LeaseStatus
from leasing_service.app.enum.rate_governance_enum import RateChangeType, RateSource
from leasing_service.app.models.leasing_tenants.lease_units import LeaseUnit
from leasing_service.app.models.leasing_tenants.leases import Lease
from leasing_service.app.schemas.rate_governance.rate_change_requests_schemas import (
    DueLeaseOut, RateChangeRequestOut, ScheduledIncreaseResult
)
from shared.core.config import settings
from shared.core.exceptions import AppException
from shared.utils.identifiers import as_uuid

logger = logging.getLogger(__name__)


def _increase_percentage(lease: Lease) -> Decimal:
    if lease.standard_increase_percentage is not None:
        return Decimal(str(lease.standard_increase_percentage))
    return Decimal(str(settings.DEFAULT_STANDARD_INCREASE_PERCENTAGE))


def _interval_years(lease: Lease) -> int:
    return lease.increase_interval_years or settings.DEFAULT_INCREASE_INTERVAL_YEARS


def _due_leases(db: Session, as_of: date):
    return (
        db.query(Lease)
        .options(selectinload(Lease.lease_units).selectinload(LeaseUnit.floors))
        .filter(
            Lease.status == LeaseStatus.active,
            Lease.auto_increase_enabled.is_(True),
            Lease.next_scheduled_increase.isnot(None),
            Lease.next_scheduled_increase <= as_of,
        )
        .order_by(Lease.next_scheduled_increase.asc())
        .all()
    )


def get_leases_due_for_increase(db: Session, as_of: date):
    return [
        DueLeaseOut(
            lease_id=lease.id,
            lease_number=lease.lease_number,
            tenant_name=lease.tenant_name,
            next_scheduled_increase=lease.next_scheduled_increase,
            standard_increase_percentage=_increase_percentage(lease),
            increase_interval_years=_interval_years(lease),
            lease_unit_ids=[lu.id for lu in lease.lease_units],
        )
        for lease in _due_leases(db, as_of)
    ]


def propose_scheduled_increases(db: Session, as_of: date, requested_by) -> ScheduledIncreaseResult:
    requested_by = as_uuid(requested_by, "requested_by")
    proposed, skipped, advanced = [], [], []

    try:
        for lease in _due_leases(db, as_of):
            due_date = lease.next_scheduled_increase
            factor = 1 + _increase_percentage(lease) / HUNDRED

            for lease_unit in lease.lease_units:
                if has_open_request(db, lease_unit.id):
                    logger.info("Lease unit %s already has a pending rate change; skipped", lease_unit.id)
                    skipped.append(lease_unit.id)
                    continue

                base, increases, overrides = lease_unit_rate_inputs(db, lease_unit, due_date)
                current = resolve_rate(base, increases, overrides, due_date)
                raised = apply_overrides(
                    current.base, to_cents(current.candidate * factor), RateSource.standard_increase,
                    overrides, due_date)
                if raised.rate <= current.rate:
                    logger.info("Lease unit %s stays at %s (override %s); no increase proposed",
                                lease_unit.id, current.rate, raised.override_id)
                    skipped.append(lease_unit.id)
                    continue

                proposed.append(create_rate_change_request(
                    db,
                    lease_unit.id,
                    raised.rate,
                    f"Scheduled {_increase_percentage(lease)}% increase due {due_date.isoformat()}",
                    requested_by,
                    change_type=RateChangeType.standard_increase,
                    effective_date=due_date,
                    commit=False,
                ))

            lease.next_scheduled_increase = due_date + relativedelta(years=_interval_years(lease))
            advanced.append(lease.id)

        db.commit()
    except AppException:
        db.rollback()
        raise
    except Exception:
        db.rollback()
        logger.exception("Failed to propose scheduled increases as of %s", as_of)
        raise

    for request in proposed:
        db.refresh(request)
    logger.info("Scheduled increases as of %s: %d proposed, %d skipped, %d leases advanced",
                as_of, len(proposed), len(skipped), len(advanced))
    return ScheduledIncreaseResult(
        proposed=[RateChangeRequestOut.model_validate(r) for r in proposed],
        skipped_lease_unit_ids=skipped,
        leases_advanced=advanced,
    )
