import uuid
from sqlalchemy import Column, DateTime, Enum, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from leasing_service.app.enum.rate_governance_enum import ApprovalOutcome, ApprovalStage, RateRequestKind
from shared.core.database import Base


class RateApprovalDecision(Base):
    __tablename__ = "rate_approval_decisions"
    # one decision per stage per request
    __table_args__ = (
        UniqueConstraint("request_kind", "request_id", "stage",
                         name="uq_rate_approval_decision_stage"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    request_kind = Column(
        Enum(RateRequestKind, name="rate_request_kind"), nullable=False)
    request_id = Column(UUID(as_uuid=True), nullable=False, index=True)
    stage = Column(Enum(ApprovalStage, name="approval_stage"), nullable=False)
    outcome = Column(Enum(ApprovalOutcome, name="approval_outcome"), nullable=False)
    decided_by = Column(UUID(as_uuid=True), nullable=False)
    decided_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    comment = Column(Text)
