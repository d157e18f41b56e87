"""Tests for scheduled standard increase proposals."""
from datetime import date
from decimal import Decimal

import pytest

from leasing_service.app.crud.rate_governance import rate_approvals_crud, scheduled_increase_crud
from leasing_service.app.crud.rate_governance.rate_change_requests_crud import create_rate_change_request
from leasing_service.app.crud.rate_governance.rate_overrides_crud import create_override
from leasing_service.app.enum.leasing_tenants_enum import LeaseStatus
from leasing_service.app.enum.rate_governance_enum import RateApprovalStatus, RateChangeType
from leasing_service.app.models.leasing_tenants.lease_units import LeaseUnit
from leasing_service.app.models.leasing_tenants.leases import Lease
from leasing_service.app.models.rate_governance.rate_change_requests import RateChangeRequest


@pytest.fixture
def escalating_lease(db, make_unit, make_lease):
    lease = make_lease(
        lease_number="L-ESC",
        auto_increase_enabled=True,
        standard_increase_percentage=Decimal("10"),
        increase_interval_years=3,
        next_scheduled_increase=date(2024, 1, 1),
    )
    for number, rent in (("B-01", "1000"), ("B-02", "2500")):
        unit = make_unit(number, total_rent=Decimal(rent))
        db.add(LeaseUnit(lease_id=lease.id, unit_id=unit.id, rent_amount=Decimal(rent)))
    db.commit()
    db.refresh(lease)
    return lease


class TestDueLeases:

    def test_lists_due_leases(self, db, escalating_lease):
        due = scheduled_increase_crud.get_leases_due_for_increase(db, date(2024, 1, 1))

        assert [d.lease_id for d in due] == [escalating_lease.id]
        assert len(due[0].lease_unit_ids) == 2
        assert due[0].standard_increase_percentage == Decimal("10")

    def test_not_yet_due(self, db, escalating_lease):
        assert scheduled_increase_crud.get_leases_due_for_increase(db, date(2023, 12, 31)) == []

    def test_ignores_inactive_and_manual_leases(self, db, make_lease):
        make_lease(lease_number="L-DRAFT", status=LeaseStatus.draft, auto_increase_enabled=True,
                   next_scheduled_increase=date(2024, 1, 1))
        make_lease(lease_number="L-MANUAL", auto_increase_enabled=False,
                   next_scheduled_increase=date(2024, 1, 1))

        assert scheduled_increase_crud.get_leases_due_for_increase(db, date(2024, 6, 1)) == []


class TestProposeScheduledIncreases:

    def test_creates_pending_proposals_and_advances_schedule(self, db, escalating_lease, requester):
        result = scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 15), requester.id)

        assert sorted(p.proposed_rate for p in result.proposed) == [Decimal("1100.00"), Decimal("2750.00")]
        assert all(p.status == RateApprovalStatus.pending_recommendation for p in result.proposed)
        assert all(p.change_type == RateChangeType.standard_increase for p in result.proposed)
        assert all(p.effective_date == date(2024, 1, 1) for p in result.proposed)
        assert result.leases_advanced == [escalating_lease.id]

        lease = db.query(Lease).filter(Lease.id == escalating_lease.id).one()
        assert lease.next_scheduled_increase == date(2027, 1, 1)

    def test_skips_units_with_open_requests(self, db, escalating_lease, requester):
        busy = escalating_lease.lease_units[0]
        create_rate_change_request(db, busy.id, Decimal("1200"), "Manual review", requester.id,
                                   effective_date=date(2023, 12, 1))

        result = scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 1), requester.id)

        assert result.skipped_lease_unit_ids == [busy.id]
        assert len(result.proposed) == 1
        assert db.query(RateChangeRequest).count() == 2

    def test_running_twice_does_not_duplicate(self, db, escalating_lease, requester):
        scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 1), requester.id)
        second = scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 1), requester.id)

        assert second.proposed == []
        assert db.query(RateChangeRequest).count() == 2

    def test_default_percentage_applies(self, db, make_unit, make_lease, requester):
        lease = make_lease(auto_increase_enabled=True, next_scheduled_increase=date(2024, 1, 1))
        unit = make_unit("C-01", total_rent=Decimal("500"))
        db.add(LeaseUnit(lease_id=lease.id, unit_id=unit.id, rent_amount=Decimal("500")))
        db.commit()

        result = scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 1), requester.id)

        assert result.proposed[0].proposed_rate == Decimal("550.00")
        lease = db.query(Lease).filter(Lease.id == lease.id).one()
        assert lease.next_scheduled_increase == date(2027, 1, 1)


class TestScheduledIncreasesWithOverrides:

    @pytest.fixture
    def small_unit(self, escalating_lease):
        return next(lu for lu in escalating_lease.lease_units if lu.rent_amount == Decimal("1000"))

    def _approved_override(self, db, lease_unit_id, override_type, terms, requester, recommender, final_approver):
        override = create_override(
            db, lease_unit_id, override_type, terms, date(2023, 1, 1), None, "Negotiated", requester.id)
        rate_approvals_crud.recommend(db, "rate_override", override.id, recommender.id, "approved")
        rate_approvals_crud.finalize(db, "rate_override", override.id, final_approver.id, "approved")
        return override

    def test_no_increase_override_gets_no_proposal(self, db, escalating_lease, small_unit, requester,
                                                   recommender, final_approver, policy):
        self._approved_override(db, small_unit.id, "no_increase", None,
                                requester, recommender, final_approver)

        result = scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 1), requester.id)

        assert [p.proposed_rate for p in result.proposed] == [Decimal("2750.00")]
        assert result.skipped_lease_unit_ids == [small_unit.id]
        assert result.leases_advanced == [escalating_lease.id]
        assert db.query(RateChangeRequest).filter(
            RateChangeRequest.lease_unit_id == small_unit.id).count() == 0

    def test_fixed_rate_override_gets_no_proposal(self, db, escalating_lease, small_unit, requester,
                                                  recommender, final_approver, policy):
        self._approved_override(db, small_unit.id, "fixed_rate", {"fixed_rate": "1200"},
                                requester, recommender, final_approver)

        result = scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 1), requester.id)

        assert small_unit.id in result.skipped_lease_unit_ids
        assert all(p.lease_unit_id != small_unit.id for p in result.proposed)

    def test_cap_override_limits_proposal(self, db, escalating_lease, small_unit, requester,
                                          recommender, final_approver, policy):
        self._approved_override(db, small_unit.id, "percentage_cap", {"percentage_cap": "5"},
                                requester, recommender, final_approver)

        result = scheduled_increase_crud.propose_scheduled_increases(db, date(2024, 1, 1), requester.id)

        capped = [p for p in result.proposed if p.lease_unit_id == small_unit.id]
        assert [p.proposed_rate for p in capped] == [Decimal("1050.00")]
        assert capped[0].current_rate == Decimal("1000.00")
        assert result.skipped_lease_unit_ids == []
