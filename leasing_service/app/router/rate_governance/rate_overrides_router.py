from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from shared.core.schemas import UserToken
from ...crud.rate_governance import rate_overrides_crud as crud
from ...schemas.rate_governance.rate_overrides_schemas import (
    RateOverrideCreate, RateOverrideListResponse, RateOverrideOut
)

router = APIRouter(
    prefix="/api/rate-overrides",
    tags=["rate-overrides"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/", response_model=RateOverrideOut)
def create_rate_override(
    payload: RateOverrideCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_override(
        db,
        payload.lease_unit_id,
        payload.override_type,
        {"fixed_rate": payload.fixed_rate, "percentage_cap": payload.percentage_cap},
        payload.effective_from,
        payload.effective_to,
        payload.reason,
        current_user.user_id,
    )


@router.get("/lease-unit/{lease_unit_id}", response_model=RateOverrideListResponse)
def list_lease_unit_overrides(lease_unit_id: UUID, db: Session = Depends(get_db)):
    return crud.list_for_lease_unit(db, lease_unit_id)


@router.get("/{override_id}", response_model=RateOverrideOut)
def get_rate_override(override_id: UUID, db: Session = Depends(get_db)):
    return crud.get_rate_override(db, override_id)
