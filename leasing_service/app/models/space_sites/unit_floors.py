import uuid
from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, DateTime, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from shared.core.database import Base


class UnitFloor(Base):
    __tablename__ = "unit_floors"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    unit_id = Column(UUID(as_uuid=True), ForeignKey(
        "units.id", ondelete="CASCADE"), nullable=False, index=True)
    floor_type = Column(String(64))       # "ground" | "mezzanine" | ...
    area = Column(Numeric(12, 2), nullable=False, default=0)  # sqm
    rate = Column(Numeric(14, 2), nullable=False, default=0)  # per sqm
    rent = Column(Numeric(14, 2), nullable=False, default=0)  # area * rate
    sort_order = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    unit = relationship("Unit", back_populates="floors")
