from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel


class LeaseUnitSetup(BaseModel):
    lease_id: UUID
    unit_id: UUID
    # unit_floor_id -> negotiated rate for this lease
    floor_rate_overrides: Optional[Dict[UUID, Decimal]] = None
    custom_rent_amount: Optional[Decimal] = None


class LeaseUnitFloorOut(BaseModel):
    id: UUID
    unit_floor_id: Optional[UUID] = None
    floor_type: Optional[str] = None
    area: Decimal
    standard_rate: Decimal
    rate: Decimal
    rent: Decimal
    is_rate_overridden: bool

    model_config = {"from_attributes": True}


class LeaseUnitOut(BaseModel):
    id: UUID
    lease_id: UUID
    unit_id: UUID
    rent_amount: Decimal
    floors: List[LeaseUnitFloorOut] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UnitFloorUpdate(BaseModel):
    area: Optional[Decimal] = None
    rate: Optional[Decimal] = None


class FloorRentLineOut(BaseModel):
    floor_id: Optional[UUID] = None
    floor_type: Optional[str] = None
    area: Decimal
    standard_rate: Decimal
    rate: Decimal
    rent: Decimal
    is_rate_overridden: bool


class UnitBaseRentOut(BaseModel):
    unit_id: UUID
    base_rent: Decimal
    base_area: Decimal
    from_floors: bool
    lines: List[FloorRentLineOut]
    warnings: List[str]
