import uuid
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from leasing_service.app.enum.rate_governance_enum import RateChangeType
from leasing_service.app.models.rate_governance.approval_columns import ApprovalColumnsMixin
from shared.core.database import Base


class RateChangeRequest(ApprovalColumnsMixin, Base):
    __tablename__ = "rate_change_requests"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lease_unit_id = Column(UUID(as_uuid=True), ForeignKey(
        "lease_units.id"), nullable=False, index=True)

    current_rate = Column(Numeric(14, 2), nullable=False)  # snapshot at request time
    proposed_rate = Column(Numeric(14, 2), nullable=False)
    change_type = Column(
        Enum(RateChangeType, name="rate_change_type"),
        default=RateChangeType.standard_increase,
        nullable=False
    )
    effective_date = Column(Date, nullable=False)
    reason = Column(Text, nullable=False)

    requested_by = Column(UUID(as_uuid=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    lease_unit = relationship("LeaseUnit")
