from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from ...crud.leasing_tenants import lease_units_crud as crud
from ...crud.rate_governance.effective_rate_resolver import resolve_effective_rate
from ...crud.rate_governance.rate_history_crud import get_rate_history
from ...schemas.leasing_tenants.lease_units_schemas import LeaseUnitOut, LeaseUnitSetup
from ...schemas.rate_governance.effective_rate_schemas import EffectiveRateOut
from ...schemas.rate_governance.rate_change_requests_schemas import RateHistoryOut

router = APIRouter(
    prefix="/api/lease-units",
    tags=["lease-units"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/setup", response_model=LeaseUnitOut)
def setup_lease_unit(payload: LeaseUnitSetup, db: Session = Depends(get_db)):
    return crud.setup_lease_unit(
        db,
        payload.lease_id,
        payload.unit_id,
        floor_rate_overrides=payload.floor_rate_overrides,
        custom_rent_amount=payload.custom_rent_amount,
    )


@router.get("/{lease_unit_id}/effective-rate", response_model=EffectiveRateOut)
def get_effective_rate(
    lease_unit_id: UUID,
    at_date: date = Query(...),
    db: Session = Depends(get_db)
):
    return resolve_effective_rate(db, lease_unit_id, at_date)


@router.get("/{lease_unit_id}/rate-history", response_model=List[RateHistoryOut])
def rate_history(lease_unit_id: UUID, db: Session = Depends(get_db)):
    return get_rate_history(db, lease_unit_id)
