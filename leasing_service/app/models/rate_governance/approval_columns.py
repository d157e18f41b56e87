from sqlalchemy import Column, DateTime, Enum, Integer, Text
from sqlalchemy.dialects.postgresql import UUID

from leasing_service.app.enum.rate_governance_enum import ApprovalStage, RateApprovalStatus


class ApprovalColumnsMixin:
    """Workflow columns shared by every request that goes through the approval chain."""

    status = Column(
        Enum(RateApprovalStatus, name="rate_approval_status"),
        default=RateApprovalStatus.pending_recommendation,
        nullable=False,
        index=True
    )
    # bumped on every stage transition, used as the optimistic lock
    version = Column(Integer, nullable=False, default=1)

    recommended_by = Column(UUID(as_uuid=True))
    recommended_at = Column(DateTime(timezone=True))
    recommended_remarks = Column(Text)

    approved_by = Column(UUID(as_uuid=True))
    approved_at = Column(DateTime(timezone=True))
    approval_remarks = Column(Text)

    rejected_by = Column(UUID(as_uuid=True))
    rejected_at = Column(DateTime(timezone=True))
    rejected_reason = Column(Text)
    rejected_at_stage = Column(Enum(ApprovalStage, name="approval_stage"))
