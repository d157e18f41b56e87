import uuid
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Numeric, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from leasing_service.app.enum.rate_governance_enum import RateOverrideType
from leasing_service.app.models.rate_governance.approval_columns import ApprovalColumnsMixin
from leasing_service.app.models.rate_governance.override_terms import terms_from_columns
from shared.core.database import Base


class RateOverride(ApprovalColumnsMixin, Base):
    __tablename__ = "rate_overrides"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lease_unit_id = Column(UUID(as_uuid=True), ForeignKey(
        "lease_units.id"), nullable=False, index=True)

    override_type = Column(
        Enum(RateOverrideType, name="rate_override_type"), nullable=False)
    fixed_rate = Column(Numeric(14, 2))     # only for fixed_rate
    percentage_cap = Column(Numeric(5, 2))  # only for percentage_cap

    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date)  # exclusive, open ended when null
    reason = Column(Text, nullable=False)

    requested_by = Column(UUID(as_uuid=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    lease_unit = relationship("LeaseUnit")

    @property
    def terms(self):
        return terms_from_columns(self.override_type, self.fixed_rate, self.percentage_cap)

    def covers(self, at_date) -> bool:
        return self.effective_from <= at_date and (
            self.effective_to is None or at_date < self.effective_to)

    def overlaps(self, effective_from, effective_to) -> bool:
        starts_before_other_ends = effective_to is None or self.effective_from < effective_to
        other_starts_before_end = self.effective_to is None or effective_from < self.effective_to
        return starts_before_other_ends and other_starts_before_end
