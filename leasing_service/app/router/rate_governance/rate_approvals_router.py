from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from shared.core.schemas import UserToken
from ...crud.rate_governance import rate_approvals_crud as crud
from ...enum.rate_governance_enum import RateRequestKind
from ...schemas.rate_governance.rate_approvals_schemas import (
    ApprovalDecisionOut, ApprovalDecisionRequest, ApprovalTransitionOut,
    PendingApprovalListResponse, PendingApprovalRequest
)

router = APIRouter(
    prefix="/api/rate-approvals",
    tags=["rate-approvals"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/pending", response_model=PendingApprovalListResponse)
def get_pending_approvals(
    params: PendingApprovalRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.list_pending_approvals(db, current_user.user_id, params.stage, params.kind)


@router.put("/recommend", response_model=ApprovalTransitionOut)
def recommend(
    payload: ApprovalDecisionRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.recommend(
        db, payload.kind, payload.request_id, current_user.user_id, payload.outcome, payload.comment)


@router.put("/finalize", response_model=ApprovalTransitionOut)
def finalize(
    payload: ApprovalDecisionRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.finalize(
        db, payload.kind, payload.request_id, current_user.user_id, payload.outcome, payload.comment)


@router.get("/{kind}/{request_id}/decisions", response_model=List[ApprovalDecisionOut])
def get_decisions(kind: RateRequestKind, request_id: UUID, db: Session = Depends(get_db)):
    return crud.get_decisions(db, kind, request_id)
