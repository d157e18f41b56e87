from typing import Optional

from sqlalchemy.orm import Session

from leasing_service.app.crud.rate_governance.approval_state_machine import ApprovalStateMachine
from leasing_service.app.crud.rate_governance.rate_change_requests_crud import RateChangeRequestSubject
from leasing_service.app.crud.rate_governance.rate_overrides_crud import RateOverrideSubject
from leasing_service.app.models.rate_governance.rate_approval_decisions import RateApprovalDecision
from leasing_service.app.schemas.rate_governance.rate_approvals_schemas import (
    ApprovalTransitionOut, PendingApprovalListResponse
)
from shared.utils.identifiers import as_uuid

rate_approvals = ApprovalStateMachine([RateChangeRequestSubject(), RateOverrideSubject()])


def _transition_out(kind, record) -> ApprovalTransitionOut:
    return ApprovalTransitionOut(kind=kind, id=record.id, status=record.status, version=record.version)


def list_pending_approvals(db: Session, user_id, stage, kind=None) -> PendingApprovalListResponse:
    items = rate_approvals.list_pending(db, user_id, stage, kind)
    return PendingApprovalListResponse(items=items, total=len(items))


def recommend(db: Session, kind, request_id, user_id, outcome, comment: Optional[str] = None):
    record = rate_approvals.recommend(db, kind, request_id, user_id, outcome, comment)
    return _transition_out(kind, record)


def finalize(db: Session, kind, request_id, user_id, outcome, comment: Optional[str] = None):
    record = rate_approvals.finalize(db, kind, request_id, user_id, outcome, comment)
    return _transition_out(kind, record)


def get_decisions(db: Session, kind, request_id):
    subject = rate_approvals.subject_for(kind)
    return (
        db.query(RateApprovalDecision)
        .filter(
            RateApprovalDecision.request_kind == subject.kind,
            RateApprovalDecision.request_id == as_uuid(request_id, "request_id"),
        )
        .order_by(RateApprovalDecision.decided_at.asc())
        .all()
    )
