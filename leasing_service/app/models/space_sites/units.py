import uuid
from sqlalchemy import Column, String, Numeric, DateTime, Boolean, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from shared.core.database import Base


class Unit(Base):
    __tablename__ = "units"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    unit_number = Column(String(64), nullable=False)
    property_name = Column(String(200))  # display only
    # Used when the unit has no floor records
    total_area = Column(Numeric(12, 2), nullable=True)
    total_rent = Column(Numeric(14, 2), nullable=True)
    status = Column(String(24), default="vacant")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    is_deleted = Column(Boolean, default=False, nullable=False)

    floors = relationship(
        "UnitFloor", back_populates="unit",
        order_by="UnitFloor.sort_order", cascade="all, delete-orphan")
    lease_units = relationship("LeaseUnit", back_populates="unit")
