"""Tests for chart series: bucket windows and aggregation."""
from datetime import date

import pytest

from common.models.base import ApprovalStatus
from modules.controlling.series import (
    month_buckets,
    monthly_financials,
    monthly_revenue,
    week_buckets,
    weekly_hours,
)
from tests.fixtures.records import make_approval, make_assignment, make_entry, make_project

TODAY = date(2025, 6, 18)


class TestBuckets:

    @pytest.mark.parametrize("n", [1, 4, 6, 12])
    def test_exactly_n_buckets(self, n):
        assert len(week_buckets(n, TODAY)) == n
        assert len(month_buckets(n, TODAY)) == n

    def test_weeks_are_contiguous_and_end_after_today(self):
        buckets = week_buckets(4, TODAY)
        assert buckets[-1].end == date(2025, 6, 19)
        assert buckets[0].start == date(2025, 5, 22)
        for a, b in zip(buckets, buckets[1:]):
            assert a.end == b.start

    def test_week_label(self):
        assert week_buckets(1, TODAY)[0].label == "12/6-18/6"

    def test_months_cross_year(self):
        buckets = month_buckets(3, date(2025, 1, 10))
        assert [b.label for b in buckets] == ["Nov", "Dec", "Jan"]
        assert buckets[0].start == date(2024, 11, 1)
        assert buckets[-1].end == date(2025, 2, 1)


class TestMonthlyRevenue:

    def test_revenue_in_start_month_only(self):
        # Window Jan..Jun, projects starting only in the third month (March)
        projects = [
            make_project("p-1", worked_hours=10, channel_rate=100, start_date=date(2025, 3, 4)),
            make_project("p-2", worked_hours=5, channel_rate=100, start_date=date(2025, 3, 20)),
        ]
        points = monthly_revenue(projects, 6, TODAY)
        assert len(points) == 6
        assert [p.value for p in points] == [0, 0, 1500, 0, 0, 0]

    def test_projects_outside_window_ignored(self):
        projects = [
            make_project(worked_hours=10, start_date=date(2024, 12, 31)),
            make_project(worked_hours=10, start_date=None),
        ]
        assert all(p.value == 0 for p in monthly_revenue(projects, 6, TODAY))

    def test_consultant_view_uses_cost_of_their_projects(self):
        mine = make_project("p-1", worked_hours=10, consultant_rate=60, start_date=date(2025, 6, 2),
                            assignments=[make_assignment("c-1", 60)])
        other = make_project("p-2", worked_hours=10, start_date=date(2025, 6, 2),
                             assignments=[make_assignment("c-2", 60)])
        points = monthly_revenue([mine, other], 2, TODAY, rate="consultant", consultant_id="c-1")
        assert [p.value for p in points] == [0, 600]

    def test_unknown_rate(self):
        with pytest.raises(ValueError):
            monthly_revenue([], 6, TODAY, rate="hourly")


class TestWeeklyHours:

    def test_sums_per_week(self):
        entries = [
            make_entry(4, date(2025, 6, 18)),
            make_entry(2, date(2025, 6, 12)),
            make_entry(3, date(2025, 6, 11)),
            make_entry(8, date(2025, 4, 1)),
        ]
        points = weekly_hours(entries, 4, TODAY)
        assert [p.value for p in points] == [0, 0, 3, 6]

    def test_consultant_filter(self):
        entries = [make_entry(4, TODAY, "c-1"), make_entry(5, TODAY, "c-2")]
        assert weekly_hours(entries, 1, TODAY, consultant_id="c-2")[0].value == 5


class TestMonthlyFinancials:

    def test_only_approved_and_paid(self):
        project = make_project("p-1", channel_rate=150)
        approvals = [
            make_approval("a-1", 4, 60, ApprovalStatus.APPROVED, day=date(2025, 6, 2), project_id="p-1"),
            make_approval("a-2", 2, 60, ApprovalStatus.PAID, day=date(2025, 5, 2), project_id="p-1"),
            make_approval("a-3", 8, 60, ApprovalStatus.PENDING, day=date(2025, 6, 2), project_id="p-1"),
            make_approval("a-4", 1, 60, ApprovalStatus.APPROVED, day=date(2025, 6, 3)),
        ]
        months = monthly_financials(approvals, [project], 2, TODAY)
        assert [m.label for m in months] == ["May", "Jun"]
        may, jun = months
        assert (may.revenue, may.costs, may.profit) == (300, 120, 180)
        assert (jun.revenue, jun.costs, jun.profit) == (600, 300, 300)
