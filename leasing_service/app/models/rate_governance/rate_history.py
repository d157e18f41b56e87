import uuid
from sqlalchemy import Boolean, Column, Date, DateTime, Enum, ForeignKey, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from leasing_service.app.enum.rate_governance_enum import RateChangeType
from shared.core.database import Base


class RateHistory(Base):
    __tablename__ = "rate_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lease_unit_id = Column(UUID(as_uuid=True), ForeignKey(
        "lease_units.id"), nullable=False, index=True)
    previous_rate = Column(Numeric(14, 2), nullable=False)
    new_rate = Column(Numeric(14, 2), nullable=False)
    change_type = Column(Enum(RateChangeType, name="rate_change_type"), nullable=False)
    effective_date = Column(Date, nullable=False)
    reason = Column(Text)
    request_id = Column(UUID(as_uuid=True), ForeignKey(
        "rate_change_requests.id"), nullable=True)
    is_auto_applied = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
