from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from ...crud.leasing_tenants import lease_units_crud as crud
from ...schemas.leasing_tenants.lease_units_schemas import UnitBaseRentOut, UnitFloorUpdate

router = APIRouter(
    prefix="/api/units",
    tags=["units"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/{unit_id}/base-rent", response_model=UnitBaseRentOut)
def get_unit_base_rent(unit_id: UUID, db: Session = Depends(get_db)):
    return crud.get_unit_base_rent(db, unit_id)


@router.put("/floors/{floor_id}", response_model=UnitBaseRentOut)
def update_unit_floor(floor_id: UUID, payload: UnitFloorUpdate, db: Session = Depends(get_db)):
    floor = crud.update_unit_floor(db, floor_id, area=payload.area, rate=payload.rate)
    return crud.get_unit_base_rent(db, floor.unit_id)
