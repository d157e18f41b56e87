import uuid
from sqlalchemy import Column, Numeric, ForeignKey, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from shared.core.database import Base


class LeaseUnit(Base):
    __tablename__ = "lease_units"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lease_id = Column(UUID(as_uuid=True), ForeignKey(
        "leases.id", ondelete="CASCADE"), nullable=False, index=True)
    unit_id = Column(UUID(as_uuid=True), ForeignKey(
        "units.id"), nullable=False, index=True)

    # contracted rent for this unit within the lease
    rent_amount = Column(Numeric(14, 2), nullable=False)

    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    lease = relationship("Lease", back_populates="lease_units")
    unit = relationship("Unit", back_populates="lease_units")
    floors = relationship(
        "LeaseUnitFloor", back_populates="lease_unit",
        order_by="LeaseUnitFloor.sort_order", cascade="all, delete-orphan")
