"""Controlling service: dashboard, charts and financial views.

Views never raise on a store failure. The error is logged and the view
comes back as a placeholder (zero counters, zero-filled series) with
``error`` set, so a page can render "failed to load" instead of crashing.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from common.auth import Session, require_admin
from common.config import DashboardConfig
from common.storage import DataSource, DataStoreError
from common.storage.fetcher import RecordFetcher
from modules.projects.service import EndingSoonItem, RiskItem, ending_soon_items, risk_items

from .rollups import (
    ConsultantHours,
    ConsultantStats,
    DashboardStats,
    FinancialOverview,
    PortfolioTotals,
    ProjectFinancials,
    consultant_hours_ranking,
    consultant_stats,
    dashboard_stats,
    financial_overview,
    portfolio_totals,
    top_projects_by_profit,
)
from .series import MonthlyFinancials, SeriesPoint, month_buckets, monthly_revenue, weekly_hours, week_buckets

logger = logging.getLogger(__name__)

LOAD_ERROR = 'failed to load'


@dataclass
class DashboardView:
    stats: DashboardStats = field(default_factory=DashboardStats)
    totals: PortfolioTotals = field(default_factory=PortfolioTotals)
    top_projects: List[ProjectFinancials] = field(default_factory=list)
    at_risk: List[RiskItem] = field(default_factory=list)
    ending_soon: List[EndingSoonItem] = field(default_factory=list)
    consultant: Optional[ConsultantStats] = None
    error: Optional[str] = None


@dataclass
class ChartsView:
    weekly_hours: List[SeriesPoint] = field(default_factory=list)
    monthly_revenue: List[SeriesPoint] = field(default_factory=list)
    consultant_hours: List[ConsultantHours] = field(default_factory=list)
    error: Optional[str] = None


def _zero_series(buckets) -> List[SeriesPoint]:
    return [SeriesPoint(b.label, b.start, b.end) for b in buckets]


class ControllingService:
    """Service for financial analysis and reporting."""

    def __init__(self, source: DataSource, settings: Optional[DashboardConfig] = None):
        self.source = source
        self.fetcher = RecordFetcher(source)
        self.settings = settings or DashboardConfig()

    async def dashboard(self, session: Session, today: Optional[date] = None) -> DashboardView:
        today = today or date.today()
        try:
            projects = await self.fetcher.projects()
            consultant = None
            if session.consultant_id and not session.is_admin:
                approvals, payments = await asyncio.gather(
                    self.fetcher.approvals(consultant_id=session.consultant_id),
                    self.fetcher.payments(consultant_id=session.consultant_id),
                )
                consultant = consultant_stats(session.consultant_id, approvals, projects, payments, today)
        except DataStoreError as e:
            logger.error(f'Failed to load dashboard: {e}')
            return DashboardView(error=LOAD_ERROR)

        horizon = self.settings.ending_soon_days
        return DashboardView(
            stats=dashboard_stats(projects, today),
            totals=portfolio_totals(projects, today),
            top_projects=top_projects_by_profit(projects, self.settings.top_n),
            at_risk=risk_items(projects, today),
            ending_soon=ending_soon_items(projects, today, horizon),
            consultant=consultant,
        )

    async def charts(self, session: Session, today: Optional[date] = None) -> ChartsView:
        """Weekly hours, monthly revenue and the consultant ranking.

        Consultant sessions see their own hours and earnings only.
        """
        today = today or date.today()
        weeks, months, top = self.settings.weeks, self.settings.months, self.settings.top_n
        scope = None if session.is_admin else (session.consultant_id or '')
        try:
            entries, projects = await asyncio.gather(
                self.fetcher.time_entries(consultant_id=scope),
                self.fetcher.projects(),
            )
        except DataStoreError as e:
            logger.error(f'Failed to load charts: {e}')
            return ChartsView(
                weekly_hours=_zero_series(week_buckets(weeks, today)),
                monthly_revenue=_zero_series(month_buckets(months, today)),
                error=LOAD_ERROR,
            )

        if scope is None:
            revenue = monthly_revenue(projects, months, today)
        else:
            revenue = monthly_revenue(projects, months, today, rate='consultant', consultant_id=scope)
        return ChartsView(
            weekly_hours=weekly_hours(entries, weeks, today),
            monthly_revenue=revenue,
            consultant_hours=consultant_hours_ranking(entries, top),
        )

    async def financial_overview(self, session: Session, today: Optional[date] = None) -> FinancialOverview:
        require_admin(session)
        today = today or date.today()
        try:
            projects, approvals, consultants = await asyncio.gather(
                self.fetcher.projects(),
                self.fetcher.approvals(),
                self.fetcher.consultants(),
            )
        except DataStoreError as e:
            logger.error(f'Failed to load financial overview: {e}')
            return FinancialOverview(
                monthly=[MonthlyFinancials(b.label, b.start, b.end) for b in month_buckets(self.settings.months, today)],
                error=LOAD_ERROR,
            )
        return financial_overview(
            projects, approvals, consultants, today, self.settings.months, self.settings.top_n
        )

    async def consultant_stats(
        self, session: Session, consultant_id: str, today: Optional[date] = None
    ) -> ConsultantStats:
        """Figures for one consultant; consultants may only ask for themselves."""
        if not session.is_admin and consultant_id != session.consultant_id:
            require_admin(session)
        try:
            approvals, projects, payments = await asyncio.gather(
                self.fetcher.approvals(consultant_id=consultant_id),
                self.fetcher.projects(),
                self.fetcher.payments(consultant_id=consultant_id),
            )
        except DataStoreError as e:
            logger.error(f'Failed to load stats for consultant {consultant_id}: {e}')
            return ConsultantStats(consultant_id=consultant_id)
        return consultant_stats(consultant_id, approvals, projects, payments, today)
