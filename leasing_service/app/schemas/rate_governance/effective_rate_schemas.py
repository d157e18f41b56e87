from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from leasing_service.app.enum.rate_governance_enum import RateSource


class EffectiveRateOut(BaseModel):
    lease_unit_id: UUID
    at_date: date
    rate: Decimal
    source: RateSource
    base: Decimal
    candidate: Decimal
    rate_change_request_id: Optional[UUID] = None
    override_id: Optional[UUID] = None
    warnings: List[str] = []
