from sqlalchemy.orm import Session

from leasing_service.app.crud.rate_governance.effective_rate_resolver import get_lease_unit
from leasing_service.app.models.rate_governance.rate_history import RateHistory


def get_rate_history(db: Session, lease_unit_id):
    lease_unit = get_lease_unit(db, lease_unit_id)
    return (
        db.query(RateHistory)
        .filter(RateHistory.lease_unit_id == lease_unit.id)
        .order_by(RateHistory.effective_date.asc(), RateHistory.created_at.asc())
        .all()
    )
