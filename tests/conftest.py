"""Pytest configuration and fixtures for the leasing service tests.

Every test gets a fresh in-memory SQLite database with all tables created.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import leasing_service.app.models  # noqa: F401
from leasing_service.app.enum.leasing_tenants_enum import LeaseStatus
from leasing_service.app.models.leasing_tenants.lease_units import LeaseUnit
from leasing_service.app.models.leasing_tenants.leases import Lease
from leasing_service.app.models.space_sites.unit_floors import UnitFloor
from leasing_service.app.models.space_sites.units import Unit
from shared.core.config import settings
from shared.core.database import Base
from shared.models.users import Users


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def policy(monkeypatch):
    """Restore the default approval policy after a test changes it."""
    monkeypatch.setattr(settings, "RATE_ALLOW_SELF_APPROVAL", True)
    monkeypatch.setattr(settings, "RATE_REJECTION_REQUIRES_COMMENT", False)
    return settings


@pytest.fixture
def make_user(db):
    def _make(name="User", recommending=False, final=False, status="active"):
        user = Users(
            full_name=name,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            status=status,
            is_recommending_approver=recommending,
            is_final_approver=final,
            is_deleted=False,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def requester(make_user):
    return make_user("Leasing Agent")


@pytest.fixture
def recommender(make_user):
    return make_user("Area Manager", recommending=True)


@pytest.fixture
def final_approver(make_user):
    return make_user("Finance Director", final=True)


@pytest.fixture
def make_unit(db):
    def _make(unit_number="G-01", floors=(), total_area=None, total_rent=None):
        unit = Unit(unit_number=unit_number, property_name="Harbour Mall",
                    total_area=total_area, total_rent=total_rent)
        for order, (floor_type, area, rate) in enumerate(floors):
            area, rate = Decimal(str(area)), Decimal(str(rate))
            unit.floors.append(UnitFloor(
                floor_type=floor_type, area=area, rate=rate, rent=area * rate, sort_order=order))
        db.add(unit)
        db.commit()
        db.refresh(unit)
        return unit
    return _make


@pytest.fixture
def make_lease(db):
    def _make(status=LeaseStatus.active, **kwargs):
        lease = Lease(
            lease_number=kwargs.pop("lease_number", "L-0001"),
            tenant_name=kwargs.pop("tenant_name", "Blue Bottle Coffee"),
            start_date=kwargs.pop("start_date", date(2024, 1, 1)),
            end_date=kwargs.pop("end_date", date(2029, 12, 31)),
            status=status,
            total_rent_amount=Decimal("0"),
            **kwargs,
        )
        db.add(lease)
        db.commit()
        db.refresh(lease)
        return lease
    return _make


@pytest.fixture
def lease_unit(db, make_unit, make_lease):
    """A lease unit with a contracted rent of 1000.00 and no floor snapshot."""
    unit = make_unit("G-01", total_area=Decimal("100"), total_rent=Decimal("1000"))
    lease = make_lease()
    lease_unit = LeaseUnit(lease_id=lease.id, unit_id=unit.id, rent_amount=Decimal("1000.00"))
    db.add(lease_unit)
    db.commit()
    db.refresh(lease_unit)
    return lease_unit
