"""Tests for portfolio rollups, rankings and stats."""
from datetime import date, timedelta

import pytest

from common.models.base import (
    ApprovalStatus,
    Channel,
    Client,
    Consultant,
    Demand,
    DemandStatus,
    Payment,
    ProjectStatus,
    User,
)
from modules.controlling.rollups import (
    admin_stats,
    consultant_hours_ranking,
    consultant_stats,
    consultant_summaries,
    dashboard_stats,
    demand_stats,
    financial_overview,
    group_approvals_by_consultant,
    portfolio_totals,
    top_n,
    top_projects_by_profit,
    week_start,
)
from tests.fixtures.records import make_approval, make_assignment, make_entry, make_project

TODAY = date(2025, 4, 3)


@pytest.fixture
def projects():
    return [
        make_project("p-1", estimated_hours=100, worked_hours=95, channel_rate=150, consultant_rate=60,
                     assignments=[make_assignment("c-1", 60)], end_date=TODAY + timedelta(days=60)),
        make_project("p-2", estimated_hours=200, worked_hours=20, channel_rate=120, consultant_rate=70,
                     status=ProjectStatus.PLANNING, assignments=[make_assignment("c-1", 60), make_assignment("c-2", 80)],
                     end_date=TODAY + timedelta(days=5)),
        make_project("p-3", estimated_hours=40, worked_hours=38, channel_rate=150, consultant_rate=50,
                     status=ProjectStatus.COMPLETED, end_date=TODAY - timedelta(days=100)),
    ]


class TestPortfolio:

    def test_totals(self, projects):
        totals = portfolio_totals(projects, TODAY)
        assert totals.project_count == 3
        assert totals.by_status["in-progress"] == 1
        assert totals.by_status["paused"] == 0
        assert totals.revenue == 95 * 150 + 20 * 120 + 38 * 150
        assert totals.cost == 95 * 60 + 20 * 70 + 38 * 50
        assert totals.profit == totals.revenue - totals.cost
        assert totals.completion_rate == pytest.approx(100 / 3)
        assert totals.at_risk == 1
        assert totals.ending_soon == 1

    def test_empty_portfolio(self):
        totals = portfolio_totals([], TODAY)
        assert totals.project_count == 0
        assert totals.profit_margin == 0
        assert totals.completion_rate == 0
        assert set(totals.by_status) == {s.value for s in ProjectStatus}

    def test_dashboard_stats(self, projects):
        stats = dashboard_stats(projects, TODAY)
        assert stats.active_projects == 2
        assert stats.total_hours == 153
        assert stats.active_consultants == 2
        assert stats.active_clients == 3
        assert stats.projects_at_risk == 1
        assert stats.projects_ending_soon == 1


class TestRankings:

    def test_top_n_stable_on_ties(self):
        items = [("a", 1), ("b", 3), ("c", 3), ("d", 2)]
        assert top_n(items, key=lambda i: i[1], n=3) == [("b", 3), ("c", 3), ("d", 2)]

    def test_top_projects_by_profit(self, projects):
        ranked = top_projects_by_profit(projects, 2)
        assert [p.id for p in ranked] == ["p-1", "p-3"]
        assert ranked[0].profit == 95 * 150 - 95 * 60

    def test_consultant_hours_ranking(self):
        entries = [
            make_entry(4, TODAY, "c-1", "Ana"),
            make_entry(6, TODAY, "c-2", "Bia"),
            make_entry(3, TODAY - timedelta(days=1), "c-1", "Ana"),
            make_entry(0, TODAY, "c-3", "Caio"),
        ]
        ranking = consultant_hours_ranking(entries, 5)
        assert [(r.name, r.hours) for r in ranking] == [("Ana", 7), ("Bia", 6)]


class TestApprovalGroups:

    def test_group_by_consultant(self):
        approvals = [
            make_approval("a-1", 8, 60, consultant_id="c-1", day=date(2025, 4, 1)),
            make_approval("a-2", 6.5, 75, consultant_id="c-2", day=date(2025, 4, 2)),
            make_approval("a-3", 5, 60, consultant_id="c-1", day=date(2025, 3, 28)),
        ]
        batches = group_approvals_by_consultant(approvals)
        assert [b.consultant_id for b in batches] == ["c-1", "c-2"]
        first = batches[0]
        assert first.total_hours == 13
        assert first.total_amount == 780
        assert (first.period_start, first.period_end) == (date(2025, 3, 28), date(2025, 4, 1))

    def test_consultant_summaries(self):
        approvals = [
            make_approval("a-1", 8, 60, ApprovalStatus.APPROVED),
            make_approval("a-2", 2, 60, ApprovalStatus.PENDING),
            make_approval("a-3", 1, 60, ApprovalStatus.REJECTED),
            make_approval("a-4", 4, 60, ApprovalStatus.PAID),
        ]
        consultants = [Consultant(id="c-1", name="C1", hourly_rate=65)]
        (summary,) = consultant_summaries(approvals, consultants)
        assert summary.hourly_rate == 65
        assert summary.hours_logged == 15
        assert summary.hours_approved == 12
        assert summary.hours_pending == 2
        assert summary.total_earned == 720
        assert summary.total_pending == 120


class TestFinancialOverview:

    def test_overview(self, projects):
        approvals = [
            make_approval("a-1", 4, 60, ApprovalStatus.APPROVED, day=TODAY, project_id="p-1"),
            make_approval("a-2", 2, 60, ApprovalStatus.PENDING, day=TODAY),
        ]
        overview = financial_overview(projects, approvals, today=TODAY, months=3, top=2)
        assert overview.total_profit == overview.total_revenue - overview.total_costs
        assert overview.pending_approvals_amount == 120
        assert overview.pending_payments_amount == 240
        assert len(overview.monthly) == 3
        assert overview.monthly[-1].costs == 240
        assert len(overview.top_projects) == 2
        assert overview.error is None


class TestConsultantStats:

    def test_month_year_and_pending(self, projects):
        approvals = [
            make_approval("a-1", 4, 60, ApprovalStatus.APPROVED, day=date(2025, 4, 1)),
            make_approval("a-2", 3, 60, ApprovalStatus.PAID, day=date(2025, 2, 1)),
            make_approval("a-3", 2, 60, ApprovalStatus.PENDING, day=date(2025, 4, 2)),
            make_approval("a-4", 9, 60, ApprovalStatus.APPROVED, day=date(2024, 12, 1)),
            make_approval("a-5", 9, 60, ApprovalStatus.APPROVED, day=date(2025, 4, 1), consultant_id="c-2"),
        ]
        payments = [
            Payment(id="pay-1", consultant_id="c-1", total_hours=3, total_amount=180, payment_date=date(2025, 2, 10)),
            Payment(id="pay-2", consultant_id="c-1", total_hours=1, total_amount=60, payment_date=date(2025, 3, 10)),
        ]
        stats = consultant_stats("c-1", approvals, projects, payments, TODAY)
        assert stats.month_hours == 4
        assert stats.month_earnings == 240
        assert stats.year_hours == 7
        assert stats.pending_amount == 120
        assert stats.active_projects == 2
        assert stats.last_payment.id == "pay-2"


class TestAdminAndDemandStats:

    def test_admin_stats(self):
        stats = admin_stats(
            [User(id="u-1", name="A", email="a@x"), User(id="u-2", name="B", email="b@x", is_active=False)],
            [Consultant(id="c-1", name="C")],
            [Channel(id="ch-1", name="Direct", is_active=False)],
            [Client(id="cl-1", name="Client")],
        )
        assert (stats.total_users, stats.active_users) == (2, 1)
        assert (stats.total_channels, stats.active_channels) == (1, 0)
        assert stats.active_clients == 1

    def test_week_starts_on_sunday(self):
        assert week_start(date(2025, 4, 3)) == date(2025, 3, 30)  # Thursday
        assert week_start(date(2025, 3, 30)) == date(2025, 3, 30)

    def test_demand_stats(self):
        demands = [
            Demand(id="d-1", title="A", status=DemandStatus.IN_PROGRESS, assigned_to="c-1",
                   total_logged_hours=6, due_date=TODAY - timedelta(days=1)),
            Demand(id="d-2", title="B", status=DemandStatus.COMPLETED, assigned_to="c-1",
                   total_logged_hours=4, due_date=TODAY - timedelta(days=10)),
            Demand(id="d-3", title="C", status=DemandStatus.PENDING, assigned_to="c-2"),
        ]
        entries = [
            make_entry(2, date(2025, 3, 31), "c-1"),
            make_entry(5, date(2025, 3, 29), "c-1"),
            make_entry(1, date(2025, 4, 1), "c-2"),
        ]
        stats = demand_stats(demands, entries, TODAY)
        assert (stats.total, stats.active, stats.completed, stats.overdue) == (3, 2, 1, 1)
        assert stats.total_logged_hours == 10
        assert stats.week_hours == 3

        mine = demand_stats(demands, entries, TODAY, consultant_id="c-1")
        assert mine.total == 2
        assert mine.week_hours == 2
