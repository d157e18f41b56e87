import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from leasing_service.app.crud.rate_governance.approval_state_machine import ApprovalSubject
from leasing_service.app.crud.rate_governance.effective_rate_resolver import (
    get_lease_unit, resolve_for_lease_unit, to_cents
)
from leasing_service.app.enum.rate_governance_enum import (
    RateApprovalStatus, RateChangeType, RateRequestKind
)
from leasing_service.app.models.leasing_tenants.lease_units import LeaseUnit
from leasing_service.app.models.rate_governance.rate_change_requests import RateChangeRequest
from leasing_service.app.models.rate_governance.rate_history import RateHistory
from leasing_service.app.schemas.rate_governance.rate_approvals_schemas import PendingApprovalOut
from shared.core.exceptions import NotFoundError, ValidationError
from shared.utils.identifiers import as_uuid

logger = logging.getLogger(__name__)


def _positive_rate(value, field: str = "proposed_rate") -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not rate.is_finite() or rate <= 0:
        raise ValidationError(f"{field} must be positive", field=field)
    try:
        cents = to_cents(rate)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range", field=field)
    if rate != cents:
        raise ValidationError(f"{field} must have at most 2 decimal places", field=field)
    return cents


def create_rate_change_request(
    db: Session,
    lease_unit_id,
    proposed_rate,
    reason: str,
    requested_by,
    change_type=RateChangeType.standard_increase,
    effective_date: Optional[date] = None,
    commit: bool = True,
) -> RateChangeRequest:
    """Record a proposed rate for a lease unit, pending recommendation.

    ``current_rate`` is the rate the resolver gives for ``effective_date``, so the
    approver sees exactly what the proposal replaces.
    """
    requested_by = as_uuid(requested_by, "requested_by")
    proposed = _positive_rate(proposed_rate)
    if not reason or not reason.strip():
        raise ValidationError("reason is required", field="reason")
    try:
        change_type = RateChangeType(change_type)
    except ValueError:
        raise ValidationError(f"Unknown change_type '{change_type}'", field="change_type")

    lease_unit = get_lease_unit(db, lease_unit_id)
    effective_date = effective_date or date.today()
    current = resolve_for_lease_unit(db, lease_unit, effective_date).rate

    request = RateChangeRequest(
        lease_unit_id=lease_unit.id,
        current_rate=current,
        proposed_rate=proposed,
        change_type=change_type,
        effective_date=effective_date,
        reason=reason.strip(),
        requested_by=requested_by,
        status=RateApprovalStatus.pending_recommendation,
        version=1,
    )
    db.add(request)
    if not commit:
        db.flush()
        return request

    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to create rate change request for lease unit %s", lease_unit.id)
        raise
    db.refresh(request)
    logger.info("Rate change request %s: %s -> %s from %s for lease unit %s",
                request.id, current, proposed, effective_date, lease_unit.id)
    return request


def get_rate_change_request(db: Session, request_id) -> RateChangeRequest:
    request = db.query(RateChangeRequest).filter(
        RateChangeRequest.id == as_uuid(request_id, "request_id")).first()
    if not request:
        raise NotFoundError("Rate change request not found")
    return request


def list_for_lease_unit(db: Session, lease_unit_id, status: Optional[RateApprovalStatus] = None):
    q = db.query(RateChangeRequest).filter(
        RateChangeRequest.lease_unit_id == as_uuid(lease_unit_id, "lease_unit_id"))
    if status:
        q = q.filter(RateChangeRequest.status == status)
    requests = q.order_by(RateChangeRequest.created_at.desc()).all()
    return {"requests": requests, "total": len(requests)}


def has_open_request(db: Session, lease_unit_id) -> bool:
    return db.query(RateChangeRequest.id).filter(
        RateChangeRequest.lease_unit_id == lease_unit_id,
        RateChangeRequest.status.in_([
            RateApprovalStatus.pending_recommendation,
            RateApprovalStatus.pending_final,
        ]),
    ).first() is not None


class RateChangeRequestSubject(ApprovalSubject):
    kind = RateRequestKind.rate_change_request
    model = RateChangeRequest
    label = "rate change request"

    def after_final_approval(self, db: Session, record: RateChangeRequest,
                             decided_by: UUID, decided_at: datetime) -> None:
        db.add(RateHistory(
            lease_unit_id=record.lease_unit_id,
            previous_rate=record.current_rate,
            new_rate=record.proposed_rate,
            change_type=record.change_type,
            effective_date=record.effective_date,
            reason=record.reason,
            request_id=record.id,
            is_auto_applied=False,
        ))

    def describe(self, record: RateChangeRequest) -> PendingApprovalOut:
        lease_unit = record.lease_unit
        return PendingApprovalOut(
            kind=self.kind,
            id=record.id,
            lease_unit_id=record.lease_unit_id,
            lease_id=lease_unit.lease_id if lease_unit else None,
            unit_number=lease_unit.unit.unit_number if lease_unit and lease_unit.unit else None,
            tenant_name=lease_unit.lease.tenant_name if lease_unit and lease_unit.lease else None,
            status=record.status,
            summary=(f"{record.change_type.value.replace('_', ' ').capitalize()}: "
                     f"{record.current_rate} -> {record.proposed_rate} "
                     f"from {record.effective_date.isoformat()}"),
            current_rate=record.current_rate,
            proposed_rate=record.proposed_rate,
            effective_from=record.effective_date,
            reason=record.reason,
            requested_by=record.requested_by,
            created_at=record.created_at,
        )

    def pending(self, db: Session, status, exclude_requester=None):
        q = (
            db.query(RateChangeRequest)
            .options(joinedload(RateChangeRequest.lease_unit).joinedload(LeaseUnit.unit),
                     joinedload(RateChangeRequest.lease_unit).joinedload(LeaseUnit.lease))
            .filter(RateChangeRequest.status == status)
        )
        if exclude_requester is not None:
            q = q.filter(RateChangeRequest.requested_by != exclude_requester)
        return q.order_by(RateChangeRequest.created_at.asc()).all()
