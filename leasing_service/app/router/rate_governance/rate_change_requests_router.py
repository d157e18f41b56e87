from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from shared.core.schemas import UserToken
from ...crud.rate_governance import rate_change_requests_crud as crud
from ...schemas.rate_governance.rate_change_requests_schemas import (
    RateChangeRequestCreate, RateChangeRequestListResponse, RateChangeRequestOut
)

router = APIRouter(
    prefix="/api/rate-change-requests",
    tags=["rate-change-requests"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/", response_model=RateChangeRequestOut)
def create_rate_change_request(
    payload: RateChangeRequestCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create_rate_change_request(
        db,
        payload.lease_unit_id,
        payload.proposed_rate,
        payload.reason,
        current_user.user_id,
        change_type=payload.change_type,
        effective_date=payload.effective_date,
    )


@router.get("/lease-unit/{lease_unit_id}", response_model=RateChangeRequestListResponse)
def list_lease_unit_requests(lease_unit_id: UUID, db: Session = Depends(get_db)):
    return crud.list_for_lease_unit(db, lease_unit_id)


@router.get("/{request_id}", response_model=RateChangeRequestOut)
def get_rate_change_request(request_id: UUID, db: Session = Depends(get_db)):
    return crud.get_rate_change_request(db, request_id)
