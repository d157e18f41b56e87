import logging
from datetime import date
from typing import List, Optional, Union

from sqlalchemy.orm import Session, joinedload

from leasing_service.app.crud.rate_governance.approval_state_machine import ApprovalSubject
from leasing_service.app.enum.rate_governance_enum import RateApprovalStatus, RateRequestKind
from leasing_service.app.models.leasing_tenants.lease_units import LeaseUnit
from leasing_service.app.models.rate_governance.override_terms import (
    FixedRateTerms, NoIncreaseTerms, OverrideTerms, PercentageCapTerms, build_override_terms
)
from leasing_service.app.models.rate_governance.rate_overrides import RateOverride
from leasing_service.app.schemas.rate_governance.rate_approvals_schemas import PendingApprovalOut
from shared.core.exceptions import ConflictError, NotFoundError, ValidationError
from shared.utils.identifiers import as_uuid

logger = logging.getLogger(__name__)


def _terms_from_params(override_type, params: Union[OverrideTerms, dict, None]) -> OverrideTerms:
    if isinstance(params, (FixedRateTerms, PercentageCapTerms, NoIncreaseTerms)):
        if override_type is not None and params.override_type != override_type:
            raise ValidationError(
                f"{params.override_type.value} terms cannot be used for a {override_type} override",
                field="override_type")
        return params
    params = params or {}
    return build_override_terms(
        override_type, params.get("fixed_rate"), params.get("percentage_cap"))


def find_overlapping(db: Session, lease_unit_id, effective_from: date, effective_to: Optional[date],
                     exclude_id=None) -> List[RateOverride]:
    """Approved overrides of the lease unit whose window intersects [effective_from, effective_to)."""
    q = db.query(RateOverride).filter(
        RateOverride.lease_unit_id == lease_unit_id,
        RateOverride.status == RateApprovalStatus.approved,
    )
    if exclude_id is not None:
        q = q.filter(RateOverride.id != exclude_id)
    if effective_to is not None:
        q = q.filter(RateOverride.effective_from < effective_to)
    return [o for o in q.all() if o.overlaps(effective_from, effective_to)]


# ----------------------------------------------------
# Create
# ----------------------------------------------------
def create_override(
    db: Session,
    lease_unit_id,
    override_type,
    params: Union[OverrideTerms, dict, None],
    effective_from: date,
    effective_to: Optional[date],
    reason: str,
    requested_by,
) -> RateOverride:
    lease_unit_id = as_uuid(lease_unit_id, "lease_unit_id")
    requested_by = as_uuid(requested_by, "requested_by")
    terms = _terms_from_params(override_type, params)

    if effective_from is None:
        raise ValidationError("effective_from is required", field="effective_from")
    if effective_to is not None and effective_to <= effective_from:
        raise ValidationError(
            "effective_to must be after effective_from", field="effective_to")
    if not reason or not reason.strip():
        raise ValidationError("reason is required", field="reason")

    lease_unit = db.query(LeaseUnit).filter(LeaseUnit.id == lease_unit_id).first()
    if not lease_unit:
        raise ValidationError("Lease unit not found", field="lease_unit_id")

    overlapping = find_overlapping(db, lease_unit_id, effective_from, effective_to)
    if overlapping:
        # checked again, and enforced, when the override is finally approved
        logger.warning(
            "New %s override for lease unit %s overlaps approved override(s) %s",
            terms.override_type.value, lease_unit_id, ", ".join(str(o.id) for o in overlapping))

    override = RateOverride(
        lease_unit_id=lease_unit_id,
        override_type=terms.override_type,
        effective_from=effective_from,
        effective_to=effective_to,
        reason=reason.strip(),
        requested_by=requested_by,
        status=RateApprovalStatus.pending_recommendation,
        version=1,
        **terms.columns(),
    )
    try:
        db.add(override)
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Failed to create rate override for lease unit %s", lease_unit_id)
        raise
    db.refresh(override)
    logger.info("Rate override %s (%s) requested for lease unit %s",
                override.id, override.override_type.value, lease_unit_id)
    return override


# ----------------------------------------------------
# Read
# ----------------------------------------------------
def get_rate_override(db: Session, override_id) -> RateOverride:
    override = db.query(RateOverride).filter(
        RateOverride.id == as_uuid(override_id, "override_id")).first()
    if not override:
        raise NotFoundError("Rate override not found")
    return override


def list_for_lease_unit(db: Session, lease_unit_id, status: Optional[RateApprovalStatus] = None):
    q = db.query(RateOverride).filter(
        RateOverride.lease_unit_id == as_uuid(lease_unit_id, "lease_unit_id"))
    if status:
        q = q.filter(RateOverride.status == status)
    overrides = q.order_by(RateOverride.created_at.desc()).all()
    return {"overrides": overrides, "total": len(overrides)}


# ----------------------------------------------------
# Approval adapter
# ----------------------------------------------------
def _summary(override: RateOverride) -> str:
    terms = override.terms
    if isinstance(terms, FixedRateTerms):
        head = f"Fixed rate {terms.fixed_rate}"
    elif isinstance(terms, PercentageCapTerms):
        head = f"Increase capped at {terms.percentage_cap}%"
    else:
        head = "No increase"
    until = override.effective_to.isoformat() if override.effective_to else "open ended"
    return f"{head} from {override.effective_from.isoformat()} ({until})"


class RateOverrideSubject(ApprovalSubject):
    kind = RateRequestKind.rate_override
    model = RateOverride
    label = "rate override"

    def before_final_approval(self, db: Session, record: RateOverride) -> None:
        # serialize finalizations per lease unit so sibling reads cannot go stale
        db.query(LeaseUnit).filter(
            LeaseUnit.id == record.lease_unit_id).with_for_update().first()

        conflicts = find_overlapping(
            db, record.lease_unit_id, record.effective_from, record.effective_to, exclude_id=record.id)
        if conflicts:
            ids = [o.id for o in conflicts]
            logger.warning("Override %s conflicts with approved override(s) %s",
                           record.id, ", ".join(str(i) for i in ids))
            raise ConflictError(
                "Override window overlaps an approved override for the same lease unit",
                conflicting_ids=ids)

    def describe(self, record: RateOverride) -> PendingApprovalOut:
        lease_unit = record.lease_unit
        return PendingApprovalOut(
            kind=self.kind,
            id=record.id,
            lease_unit_id=record.lease_unit_id,
            lease_id=lease_unit.lease_id if lease_unit else None,
            unit_number=lease_unit.unit.unit_number if lease_unit and lease_unit.unit else None,
            tenant_name=lease_unit.lease.tenant_name if lease_unit and lease_unit.lease else None,
            status=record.status,
            summary=_summary(record),
            proposed_rate=record.fixed_rate,
            effective_from=record.effective_from,
            effective_to=record.effective_to,
            reason=record.reason,
            requested_by=record.requested_by,
            created_at=record.created_at,
        )

    def pending(self, db: Session, status, exclude_requester=None):
        q = (
            db.query(RateOverride)
            .options(joinedload(RateOverride.lease_unit).joinedload(LeaseUnit.unit),
                     joinedload(RateOverride.lease_unit).joinedload(LeaseUnit.lease))
            .filter(RateOverride.status == status)
        )
        if exclude_requester is not None:
            q = q.filter(RateOverride.requested_by != exclude_requester)
        return q.order_by(RateOverride.created_at.asc()).all()
