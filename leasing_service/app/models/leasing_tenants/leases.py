import uuid
from sqlalchemy import Boolean, Column, Integer, String, Date, Numeric, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from leasing_service.app.enum.leasing_tenants_enum import LeaseStatus
from shared.core.database import Base


class Lease(Base):
    __tablename__ = "leases"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lease_number = Column(String(64), nullable=True)
    tenant_name = Column(String(200), nullable=True)  # display only

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(
        Enum(LeaseStatus, name="lease_status"),
        default=LeaseStatus.draft,
        nullable=False
    )
    total_rent_amount = Column(Numeric(14, 2), nullable=False, default=0)

    # scheduled escalation
    auto_increase_enabled = Column(Boolean, nullable=False, default=False)
    standard_increase_percentage = Column(Numeric(5, 2), nullable=True)
    increase_interval_years = Column(Integer, nullable=True)
    next_scheduled_increase = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    lease_units = relationship(
        "LeaseUnit", back_populates="lease", cascade="all, delete-orphan")
