"""Tests for effective rate resolution."""
import uuid
from datetime import date, datetime
from decimal import Decimal

import pytest

from leasing_service.app.crud.leasing_tenants.lease_units_crud import setup_lease_unit
from leasing_service.app.crud.rate_governance import rate_approvals_crud
from leasing_service.app.crud.rate_governance.effective_rate_resolver import (
    resolve_effective_rate, resolve_rate
)
from leasing_service.app.crud.rate_governance.rate_change_requests_crud import create_rate_change_request
from leasing_service.app.crud.rate_governance.rate_overrides_crud import create_override
from leasing_service.app.enum.rate_governance_enum import (
    RateApprovalStatus, RateOverrideType, RateSource
)
from leasing_service.app.models.rate_governance.rate_change_requests import RateChangeRequest
from leasing_service.app.models.rate_governance.rate_overrides import RateOverride
from shared.core.exceptions import NotFoundError

BASE = Decimal("80000")


def increase(rate, effective, approved_at=None, status=RateApprovalStatus.approved):
    return RateChangeRequest(
        id=uuid.uuid4(),
        proposed_rate=Decimal(rate),
        effective_date=effective,
        status=status,
        approved_at=approved_at or datetime(2023, 12, 1),
        created_at=datetime(2023, 11, 1),
    )


def override(override_type, effective_from, effective_to=None, fixed_rate=None, percentage_cap=None,
             status=RateApprovalStatus.approved, approved_at=None):
    return RateOverride(
        id=uuid.uuid4(),
        lease_unit_id=uuid.uuid4(),
        override_type=override_type,
        fixed_rate=Decimal(fixed_rate) if fixed_rate is not None else None,
        percentage_cap=Decimal(percentage_cap) if percentage_cap is not None else None,
        effective_from=effective_from,
        effective_to=effective_to,
        status=status,
        approved_at=approved_at or datetime(2023, 12, 15),
    )


class TestResolveRate:

    def test_base_when_nothing_applies(self):
        result = resolve_rate(BASE, [], [], date(2024, 6, 1))

        assert result.rate == Decimal("80000.00")
        assert result.source == RateSource.base
        assert result.override_id is None

    def test_fixed_override_wins(self):
        fixed = override(RateOverrideType.fixed_rate, date(2024, 1, 1), fixed_rate="75000")

        result = resolve_rate(BASE, [], [fixed], date(2024, 6, 1))

        assert result.rate == Decimal("75000.00")
        assert result.source == RateSource.override_fixed
        assert result.override_id == fixed.id

    def test_percentage_cap_limits_standard_increase(self):
        cap = override(RateOverrideType.percentage_cap, date(2024, 1, 1), percentage_cap="5")
        step = increase("90000", date(2024, 1, 1))

        result = resolve_rate(BASE, [step], [cap], date(2024, 2, 1))

        assert result.rate == Decimal("84000.00")
        assert result.source == RateSource.override_cap
        assert result.candidate == Decimal("90000.00")
        assert result.rate_change_request_id == step.id

    def test_percentage_cap_keeps_lower_candidate(self):
        cap = override(RateOverrideType.percentage_cap, date(2024, 1, 1), percentage_cap="20")
        step = increase("82000", date(2024, 1, 1))

        result = resolve_rate(BASE, [step], [cap], date(2024, 2, 1))

        assert result.rate == Decimal("82000.00")

    @pytest.mark.parametrize("base,cap,candidate", [
        ("1000", "0", "1200"),
        ("999.99", "3.33", "1100"),
        ("1234.56", "7.5", "1000"),
        ("80000", "100", "200000"),
    ])
    def test_cap_never_exceeds_limit(self, base, cap, candidate):
        result = resolve_rate(
            Decimal(base),
            [increase(candidate, date(2024, 1, 1))],
            [override(RateOverrideType.percentage_cap, date(2024, 1, 1), percentage_cap=cap)],
            date(2024, 1, 1),
        )
        limit = Decimal(base) * (1 + Decimal(cap) / 100)
        assert result.rate <= limit
        assert result.rate <= Decimal(candidate)

    def test_no_increase_returns_base(self):
        freeze = override(RateOverrideType.no_increase, date(2024, 1, 1))
        step = increase("90000", date(2024, 1, 1))

        result = resolve_rate(BASE, [step], [freeze], date(2024, 3, 1))

        assert result.rate == Decimal("80000.00")
        assert result.source == RateSource.override_no_increase

    def test_latest_increase_on_or_before_date(self):
        first = increase("84000", date(2024, 1, 1))
        second = increase("88000", date(2025, 1, 1))

        assert resolve_rate(BASE, [first, second], [], date(2024, 12, 31)).rate == Decimal("84000.00")
        assert resolve_rate(BASE, [first, second], [], date(2025, 1, 1)).rate == Decimal("88000.00")
        assert resolve_rate(BASE, [first, second], [], date(2023, 12, 31)).source == RateSource.base

    def test_same_effective_date_prefers_later_approval(self):
        earlier = increase("84000", date(2024, 1, 1), approved_at=datetime(2023, 12, 1))
        later = increase("86000", date(2024, 1, 1), approved_at=datetime(2023, 12, 20))

        result = resolve_rate(BASE, [later, earlier], [], date(2024, 1, 2))

        assert result.rate == Decimal("86000.00")
        assert result.source == RateSource.standard_increase

    def test_unapproved_rows_are_ignored(self):
        pending = increase("90000", date(2024, 1, 1), status=RateApprovalStatus.pending_final)
        rejected = override(RateOverrideType.fixed_rate, date(2024, 1, 1), fixed_rate="1",
                            status=RateApprovalStatus.rejected)

        result = resolve_rate(BASE, [pending], [rejected], date(2024, 6, 1))

        assert result.rate == Decimal("80000.00")
        assert result.source == RateSource.base

    def test_effective_to_is_exclusive(self):
        fixed = override(RateOverrideType.fixed_rate, date(2024, 1, 1), date(2024, 7, 1), fixed_rate="75000")

        assert resolve_rate(BASE, [], [fixed], date(2024, 6, 30)).rate == Decimal("75000.00")
        assert resolve_rate(BASE, [], [fixed], date(2024, 7, 1)).rate == Decimal("80000.00")
        assert resolve_rate(BASE, [], [fixed], date(2023, 12, 31)).rate == Decimal("80000.00")

    def test_overlapping_overrides_use_latest_and_warn(self, caplog):
        older = override(RateOverrideType.fixed_rate, date(2024, 1, 1), fixed_rate="70000")
        newer = override(RateOverrideType.fixed_rate, date(2024, 3, 1), fixed_rate="72000")

        result = resolve_rate(BASE, [], [older, newer], date(2024, 6, 1))

        assert result.rate == Decimal("72000.00")
        assert result.override_id == newer.id
        assert len(result.warnings) == 1
        assert "approved overrides cover" in caplog.text

    def test_malformed_override_is_skipped(self):
        broken = override(RateOverrideType.fixed_rate, date(2024, 3, 1))
        good = override(RateOverrideType.no_increase, date(2024, 1, 1))

        result = resolve_rate(BASE, [increase("90000", date(2024, 1, 1))], [broken, good], date(2024, 6, 1))

        assert result.source == RateSource.override_no_increase
        assert any("malformed" in w for w in result.warnings)

    def test_overlap_warning_names_fallback_when_newest_is_malformed(self):
        broken = override(RateOverrideType.fixed_rate, date(2024, 3, 1))
        good = override(RateOverrideType.no_increase, date(2024, 1, 1))

        result = resolve_rate(BASE, [], [broken, good], date(2024, 6, 1))

        overlap = [w for w in result.warnings if "approved overrides cover" in w]
        assert len(overlap) == 1
        assert f"using {good.id} (latest well-formed override)" in overlap[0]
        assert "latest effective_from" not in overlap[0]

    def test_resolution_is_idempotent(self):
        inputs = (
            BASE,
            [increase("90000", date(2024, 1, 1))],
            [override(RateOverrideType.percentage_cap, date(2024, 1, 1), percentage_cap="5")],
            date(2024, 2, 1),
        )
        assert resolve_rate(*inputs) == resolve_rate(*inputs)


def _approve(db, kind, request_id, recommender, final_approver):
    rate_approvals_crud.recommend(db, kind, request_id, recommender.id, "approved")
    return rate_approvals_crud.finalize(db, kind, request_id, final_approver.id, "approved")


class TestResolveEffectiveRate:

    @pytest.fixture
    def floored_lease_unit(self, db, make_unit, make_lease):
        unit = make_unit("A-12", floors=[("ground", "100", "500"), ("mezzanine", "50", "600")])
        lease = make_lease()
        return setup_lease_unit(db, lease.id, unit.id)

    def test_base_comes_from_floor_snapshot(self, db, floored_lease_unit):
        result = resolve_effective_rate(db, floored_lease_unit.id, date(2024, 6, 1))

        assert result.base == Decimal("80000.00")
        assert result.rate == Decimal("80000.00")
        assert result.source == RateSource.base

    def test_approved_fixed_override(self, db, floored_lease_unit, requester, recommender, final_approver, policy):
        created = create_override(
            db, floored_lease_unit.id, "fixed_rate", {"fixed_rate": Decimal("75000")},
            date(2024, 1, 1), None, "Anchor tenant retention", requester.id)
        _approve(db, "rate_override", created.id, recommender, final_approver)

        result = resolve_effective_rate(db, floored_lease_unit.id, date(2024, 6, 1))

        assert result.rate == Decimal("75000.00")
        assert result.source == RateSource.override_fixed
        assert result.override_id == created.id

    def test_cap_over_approved_increase(self, db, floored_lease_unit, requester, recommender,
                                        final_approver, policy):
        step = create_rate_change_request(
            db, floored_lease_unit.id, Decimal("90000"), "Annual review", requester.id,
            effective_date=date(2024, 1, 1))
        _approve(db, "rate_change_request", step.id, recommender, final_approver)
        cap = create_override(
            db, floored_lease_unit.id, "percentage_cap", {"percentage_cap": Decimal("5")},
            date(2024, 1, 1), None, "Negotiated cap", requester.id)
        _approve(db, "rate_override", cap.id, recommender, final_approver)

        result = resolve_effective_rate(db, floored_lease_unit.id, date(2024, 2, 1))

        assert result.rate == Decimal("84000.00")
        assert result.candidate == Decimal("90000.00")
        assert result.source == RateSource.override_cap

    def test_two_decimal_cap_binds_after_approval(self, db, floored_lease_unit, requester, recommender,
                                                  final_approver, policy):
        step = create_rate_change_request(
            db, floored_lease_unit.id, Decimal("90000"), "Annual review", requester.id,
            effective_date=date(2024, 1, 1))
        _approve(db, "rate_change_request", step.id, recommender, final_approver)
        cap = create_override(
            db, floored_lease_unit.id, "percentage_cap", {"percentage_cap": "2.55"},
            date(2024, 1, 1), None, "Negotiated cap", requester.id)
        _approve(db, "rate_override", cap.id, recommender, final_approver)

        result = resolve_effective_rate(db, floored_lease_unit.id, date(2024, 2, 1))

        assert result.rate == Decimal("82040.00")
        assert result.rate <= Decimal("80000") * (1 + Decimal("2.55") / 100)
        assert result.source == RateSource.override_cap

    def test_pending_requests_do_not_change_rate(self, db, floored_lease_unit, requester):
        create_rate_change_request(
            db, floored_lease_unit.id, Decimal("90000"), "Annual review", requester.id,
            effective_date=date(2024, 1, 1))

        result = resolve_effective_rate(db, floored_lease_unit.id, date(2024, 2, 1))

        assert result.rate == Decimal("80000.00")

    def test_unknown_lease_unit(self, db):
        with pytest.raises(NotFoundError):
            resolve_effective_rate(db, uuid.uuid4(), date(2024, 1, 1))
