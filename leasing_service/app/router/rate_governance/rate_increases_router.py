from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from shared.core.schemas import UserToken
from ...crud.rate_governance import scheduled_increase_crud as crud
from ...schemas.rate_governance.rate_change_requests_schemas import (
    DueLeaseOut, ScheduledIncreaseRequest, ScheduledIncreaseResult
)

router = APIRouter(
    prefix="/api/rate-increases",
    tags=["rate-increases"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/due", response_model=List[DueLeaseOut])
def get_due_leases(as_of: date = Query(...), db: Session = Depends(get_db)):
    return crud.get_leases_due_for_increase(db, as_of)


@router.post("/propose", response_model=ScheduledIncreaseResult)
def propose_increases(
    payload: ScheduledIncreaseRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.propose_scheduled_increases(db, payload.as_of, current_user.user_id)
