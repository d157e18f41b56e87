from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from leasing_service.app.enum.rate_governance_enum import (
    ApprovalOutcome, ApprovalStage, RateApprovalStatus, RateRequestKind
)


class PendingApprovalOut(BaseModel):
    kind: RateRequestKind
    id: UUID
    lease_unit_id: UUID
    lease_id: Optional[UUID] = None
    unit_number: Optional[str] = None
    tenant_name: Optional[str] = None
    status: RateApprovalStatus
    summary: str
    current_rate: Optional[Decimal] = None
    proposed_rate: Optional[Decimal] = None
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    reason: Optional[str] = None
    requested_by: UUID
    created_at: Optional[datetime] = None


class PendingApprovalRequest(BaseModel):
    stage: ApprovalStage
    kind: Optional[RateRequestKind] = None


class PendingApprovalListResponse(BaseModel):
    items: List[PendingApprovalOut]
    total: int


class ApprovalDecisionRequest(BaseModel):
    kind: RateRequestKind
    request_id: UUID
    outcome: ApprovalOutcome
    comment: Optional[str] = None


class ApprovalDecisionOut(BaseModel):
    id: UUID
    request_kind: RateRequestKind
    request_id: UUID
    stage: ApprovalStage
    outcome: ApprovalOutcome
    decided_by: UUID
    decided_at: datetime
    comment: Optional[str] = None

    model_config = {"from_attributes": True}


class ApprovalTransitionOut(BaseModel):
    kind: RateRequestKind
    id: UUID
    status: RateApprovalStatus
    version: int
