from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from leasing_service.app.enum.rate_governance_enum import (
    ApprovalStage, RateApprovalStatus, RateOverrideType
)


class RateOverrideCreate(BaseModel):
    lease_unit_id: UUID
    override_type: RateOverrideType
    # only the field matching override_type may be sent
    fixed_rate: Optional[Decimal] = None
    percentage_cap: Optional[Decimal] = None
    effective_from: date
    effective_to: Optional[date] = None
    reason: str


class RateOverrideOut(BaseModel):
    id: UUID
    lease_unit_id: UUID
    override_type: RateOverrideType
    fixed_rate: Optional[Decimal] = None
    percentage_cap: Optional[Decimal] = None
    effective_from: date
    effective_to: Optional[date] = None
    reason: str
    requested_by: UUID
    status: RateApprovalStatus
    version: int
    recommended_by: Optional[UUID] = None
    recommended_at: Optional[datetime] = None
    recommended_remarks: Optional[str] = None
    approved_by: Optional[UUID] = None
    approved_at: Optional[datetime] = None
    approval_remarks: Optional[str] = None
    rejected_by: Optional[UUID] = None
    rejected_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None
    rejected_at_stage: Optional[ApprovalStage] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RateOverrideListResponse(BaseModel):
    overrides: List[RateOverrideOut]
    total: int
