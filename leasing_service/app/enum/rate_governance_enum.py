from enum import Enum


class RateApprovalStatus(str, Enum):
    pending_recommendation = "pending_recommendation"
    pending_final = "pending_final"
    approved = "approved"
    rejected = "rejected"


class ApprovalStage(str, Enum):
    recommending = "recommending"
    final = "final"


class ApprovalOutcome(str, Enum):
    approved = "approved"
    rejected = "rejected"


class RateOverrideType(str, Enum):
    fixed_rate = "fixed_rate"
    percentage_cap = "percentage_cap"
    no_increase = "no_increase"


class RateChangeType(str, Enum):
    standard_increase = "standard_increase"
    renewal_increase = "renewal_increase"
    manual_adjustment = "manual_adjustment"


class RateRequestKind(str, Enum):
    rate_change_request = "rate_change_request"
    rate_override = "rate_override"


class RateSource(str, Enum):
    base = "base"
    standard_increase = "standard_increase"
    override_fixed = "override_fixed"
    override_cap = "override_cap"
    override_no_increase = "override_no_increase"


# Status a request must be in for a stage to act on it
PENDING_STATUS_FOR_STAGE = {
    ApprovalStage.recommending: RateApprovalStatus.pending_recommendation,
    ApprovalStage.final: RateApprovalStatus.pending_final,
}
