from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from leasing_service.app.enum.rate_governance_enum import (
    ApprovalStage, RateApprovalStatus, RateChangeType
)


class RateChangeRequestCreate(BaseModel):
    lease_unit_id: UUID
    proposed_rate: Decimal
    reason: str
    change_type: RateChangeType = RateChangeType.standard_increase
    effective_date: Optional[date] = None


class RateChangeRequestOut(BaseModel):
    id: UUID
    lease_unit_id: UUID
    current_rate: Decimal
    proposed_rate: Decimal
    change_type: RateChangeType
    effective_date: date
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


class RateChangeRequestListResponse(BaseModel):
    requests: List[RateChangeRequestOut]
    total: int


class RateHistoryOut(BaseModel):
    id: UUID
    lease_unit_id: UUID
    previous_rate: Decimal
    new_rate: Decimal
    change_type: RateChangeType
    effective_date: date
    reason: Optional[str] = None
    request_id: Optional[UUID] = None
    is_auto_applied: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ScheduledIncreaseRequest(BaseModel):
    as_of: date


class DueLeaseOut(BaseModel):
    lease_id: UUID
    lease_number: Optional[str] = None
    tenant_name: Optional[str] = None
    next_scheduled_increase: date
    standard_increase_percentage: Decimal
    increase_interval_years: int
    lease_unit_ids: List[UUID]


class ScheduledIncreaseResult(BaseModel):
    proposed: List[RateChangeRequestOut]
    skipped_lease_unit_ids: List[UUID]
    leases_advanced: List[UUID]
