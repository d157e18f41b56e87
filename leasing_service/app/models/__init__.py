# Import all models to ensure they are registered with SQLAlchemy
from shared.models.users import Users
from .space_sites.units import Unit
from .space_sites.unit_floors import UnitFloor
from .leasing_tenants.leases import Lease
from .leasing_tenants.lease_units import LeaseUnit
from .leasing_tenants.lease_unit_floors import LeaseUnitFloor
from .rate_governance.rate_change_requests import RateChangeRequest
from .rate_governance.rate_overrides import RateOverride
from .rate_governance.rate_approval_decisions import RateApprovalDecision
from .rate_governance.rate_history import RateHistory
