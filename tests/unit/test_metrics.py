"""Tests for project metrics.

Covers:
  - Usage/progress clamping and zero-estimate handling
  - Revenue, cost (single rate and per-assignment hours), profit, margin
  - Risk reasons: overdue, over-budget, near-budget
  - Ending-soon window
  - Display formatting
"""
from datetime import date, timedelta

import pytest

from common.models.base import ProjectStatus
from modules.controlling import metrics
from tests.fixtures.records import make_assignment, make_project

TODAY = date(2025, 4, 3)


class TestOverrunProject:
    """40h estimated, 44h worked, ended yesterday."""

    @pytest.fixture
    def project(self):
        return make_project(
            estimated_hours=40,
            worked_hours=44,
            channel_rate=100,
            consultant_rate=60,
            status=ProjectStatus.IN_PROGRESS,
            end_date=TODAY - timedelta(days=1),
        )

    def test_progress_clamped(self, project):
        assert metrics.usage(project) == pytest.approx(110)
        assert metrics.progress(project) == 100

    def test_financials(self, project):
        assert metrics.revenue(project) == 4400
        assert metrics.cost(project) == 2640
        assert metrics.profit(project) == 1760
        assert metrics.profit_margin(project) == pytest.approx(40)

    def test_at_risk_because_overdue(self, project):
        assert metrics.is_at_risk(project, TODAY)
        assert metrics.risk_reason(project, TODAY) == "overdue"

    def test_not_ending_soon_once_past(self, project):
        assert not metrics.is_ending_soon(project, TODAY)


class TestEmptyProject:

    def test_all_zero(self):
        project = make_project(estimated_hours=0, worked_hours=0)
        assert metrics.progress(project) == 0
        assert metrics.revenue(project) == 0
        assert metrics.cost(project) == 0
        assert metrics.profit(project) == 0
        assert metrics.profit_margin(project) == 0
        assert not metrics.is_at_risk(project, TODAY)

    def test_ending_soon_depends_on_end_date_only(self):
        project = make_project(estimated_hours=0, worked_hours=0, end_date=TODAY + timedelta(days=3))
        assert metrics.is_ending_soon(project, TODAY)
        assert not metrics.is_ending_soon(make_project(estimated_hours=0), TODAY)


class TestRisk:

    def test_over_budget_even_when_completed(self):
        project = make_project(estimated_hours=100, worked_hours=111, status=ProjectStatus.COMPLETED)
        assert metrics.risk_reason(project, TODAY) == "over-budget"

    def test_near_budget_ignored_for_completed(self):
        project = make_project(estimated_hours=100, worked_hours=95, status=ProjectStatus.COMPLETED)
        assert metrics.risk_reason(project, TODAY) is None

    def test_near_budget(self):
        project = make_project(estimated_hours=100, worked_hours=95)
        assert metrics.risk_reason(project, TODAY) == "near-budget"

    def test_thresholds_are_strict(self):
        assert metrics.risk_reason(make_project(estimated_hours=100, worked_hours=90), TODAY) is None

    def test_completed_past_end_is_not_overdue(self):
        project = make_project(status=ProjectStatus.COMPLETED, end_date=TODAY - timedelta(days=30))
        assert not metrics.is_overdue(project, TODAY)


class TestEndingSoon:

    @pytest.mark.parametrize("offset, expected", [(0, True), (7, True), (8, False), (-1, False)])
    def test_window(self, offset, expected):
        project = make_project(end_date=TODAY + timedelta(days=offset))
        assert metrics.is_ending_soon(project, TODAY) is expected

    def test_completed_never_ending_soon(self):
        project = make_project(status=ProjectStatus.COMPLETED, end_date=TODAY + timedelta(days=2))
        assert not metrics.is_ending_soon(project, TODAY)

    def test_days_until_deadline(self):
        assert metrics.days_until_deadline(make_project(end_date=TODAY + timedelta(days=5)), TODAY) == 5
        assert metrics.days_until_deadline(make_project(), TODAY) is None


class TestCostPolicy:

    def test_assignment_hours_costed_at_their_rate(self):
        project = make_project(
            worked_hours=30,
            consultant_rate=50,
            assignments=[make_assignment("c-1", 60, hours=10), make_assignment("c-2", 80, hours=5)],
        )
        # 10*60 + 5*80 + 15 unattributed * 50
        assert metrics.cost(project) == 600 + 400 + 750

    def test_attributed_hours_capped_at_worked(self):
        project = make_project(
            worked_hours=12,
            consultant_rate=50,
            assignments=[make_assignment("c-1", 60, hours=10), make_assignment("c-2", 80, hours=10)],
        )
        assert metrics.cost(project) == 10 * 60 + 2 * 80

    def test_untracked_assignments_use_project_rate(self):
        project = make_project(
            worked_hours=10,
            consultant_rate=70,
            assignments=[make_assignment("c-1", 60), make_assignment("c-2", 80)],
        )
        assert metrics.cost(project) == 700


class TestEstimates:

    def test_estimated_budget_and_profit(self):
        project = make_project(estimated_hours=40, channel_rate=100, consultant_rate=60)
        assert metrics.estimated_budget(project) == 2400
        assert metrics.estimated_profit(project) == 1600

    def test_remaining_hours_never_negative(self):
        assert metrics.remaining_hours(make_project(estimated_hours=40, worked_hours=44)) == 0
        assert metrics.remaining_hours(make_project(estimated_hours=40, worked_hours=10)) == 30


class TestFormatting:

    def test_currency(self):
        assert metrics.format_currency(1234.5) == "R$ 1.234,50"
        assert metrics.format_currency(0) == "R$ 0,00"
        assert metrics.format_currency(-1760) == "-R$ 1.760,00"

    def test_hours(self):
        assert metrics.format_hours(19.5) == "19.5h"
