import uuid
from sqlalchemy import Boolean, Column, Integer, String, Numeric, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shared.core.database import Base


class LeaseUnitFloor(Base):
    """Per-floor rent breakdown captured when a unit is added to a lease."""
    __tablename__ = "lease_unit_floors"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lease_unit_id = Column(UUID(as_uuid=True), ForeignKey(
        "lease_units.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_floor_id = Column(UUID(as_uuid=True), ForeignKey(
        "unit_floors.id", ondelete="SET NULL"), nullable=True)

    floor_type = Column(String(64))
    area = Column(Numeric(12, 2), nullable=False)
    standard_rate = Column(Numeric(14, 2), nullable=False)
    rate = Column(Numeric(14, 2), nullable=False)
    rent = Column(Numeric(14, 2), nullable=False)
    is_rate_overridden = Column(Boolean, nullable=False, default=False)
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)

    lease_unit = relationship("LeaseUnit", back_populates="floors")
