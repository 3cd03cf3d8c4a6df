"""Portfolio rollups: totals, counts, rankings.

Every function is a single linear pass over already-fetched records.
Rankings use a stable descending sort, so ties keep input order.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from common.models.base import (
    Approval,
    ApprovalStatus,
    Channel,
    Client,
    Consultant,
    Demand,
    DemandStatus,
    Payment,
    Project,
    ProjectStatus,
    TimeEntry,
    User,
)

from . import metrics
from .series import MonthlyFinancials, monthly_financials

T = TypeVar('T')

ACTIVE_PROJECT_STATUSES = (ProjectStatus.PLANNING, ProjectStatus.IN_PROGRESS)
OPEN_DEMAND_STATUSES = (
    DemandStatus.PENDING,
    DemandStatus.IN_PROGRESS,
    DemandStatus.AWAITING_FEEDBACK,
    DemandStatus.IN_REVIEW,
)
EARNED_STATUSES = (ApprovalStatus.APPROVED, ApprovalStatus.PAID)


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def top_n(items: Iterable[T], key: Callable[[T], float], n: int = 5) -> List[T]:
    """First ``n`` items by descending ``key``; ties keep input order."""
    return sorted(items, key=key, reverse=True)[:n]


# --- Projects ---


@dataclass
class PortfolioTotals:
    project_count: int = 0
    by_status: Dict[str, int] = field(default_factory=lambda: {s.value: 0 for s in ProjectStatus})
    estimated_hours: float = 0.0
    worked_hours: float = 0.0
    revenue: float = 0.0
    potential_revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    profit_margin: float = 0.0
    completion_rate: float = 0.0
    hours_usage: float = 0.0
    at_risk: int = 0
    ending_soon: int = 0


def portfolio_totals(projects: Sequence[Project], today: Optional[date] = None) -> PortfolioTotals:
    today = today or date.today()
    totals = PortfolioTotals(project_count=len(projects))
    for p in projects:
        totals.by_status[p.status.value] += 1
        totals.estimated_hours += p.estimated_hours
        totals.worked_hours += p.worked_hours
        totals.revenue += metrics.revenue(p)
        totals.potential_revenue += p.estimated_hours * p.channel_rate
        totals.cost += metrics.cost(p)
        totals.at_risk += metrics.is_at_risk(p, today)
        totals.ending_soon += metrics.is_ending_soon(p, today)
    totals.profit = totals.revenue - totals.cost
    totals.profit_margin = _percent(totals.profit, totals.revenue)
    totals.completion_rate = _percent(totals.by_status[ProjectStatus.COMPLETED.value], len(projects))
    totals.hours_usage = _percent(totals.worked_hours, totals.estimated_hours)
    return totals


@dataclass
class DashboardStats:
    total_revenue: float = 0.0
    active_projects: int = 0
    total_hours: float = 0.0
    active_consultants: int = 0
    active_clients: int = 0
    projects_at_risk: int = 0
    projects_ending_soon: int = 0


def dashboard_stats(projects: Sequence[Project], today: Optional[date] = None) -> DashboardStats:
    today = today or date.today()
    consultants, clients = set(), set()
    stats = DashboardStats()
    for p in projects:
        stats.total_revenue += metrics.revenue(p)
        stats.total_hours += p.worked_hours
        stats.active_projects += p.status in ACTIVE_PROJECT_STATUSES
        stats.projects_at_risk += metrics.is_at_risk(p, today)
        stats.projects_ending_soon += metrics.is_ending_soon(p, today)
        consultants.update(a.consultant_id for a in p.assignments if a.consultant_id)
        if p.client_id:
            clients.add(p.client_id)
    stats.active_consultants = len(consultants)
    stats.active_clients = len(clients)
    return stats


@dataclass
class ProjectFinancials:
    id: str
    name: str
    client: str
    status: str
    estimated_hours: float
    worked_hours: float
    revenue: float
    cost: float
    profit: float
    profit_margin: float
    progress: float


def project_financials(project: Project) -> ProjectFinancials:
    return ProjectFinancials(
        id=project.id,
        name=project.name,
        client=project.client_name,
        status=project.status.value,
        estimated_hours=project.estimated_hours,
        worked_hours=project.worked_hours,
        revenue=metrics.revenue(project),
        cost=metrics.cost(project),
        profit=metrics.profit(project),
        profit_margin=metrics.profit_margin(project),
        progress=metrics.progress(project),
    )


def top_projects_by_profit(projects: Sequence[Project], n: int = 5) -> List[ProjectFinancials]:
    return [project_financials(p) for p in top_n(projects, metrics.profit, n)]


# --- Consultants and approvals ---


@dataclass
class ConsultantHours:
    consultant_id: str
    name: str
    hours: float


def consultant_hours_ranking(entries: Iterable[TimeEntry], n: int = 5) -> List[ConsultantHours]:
    """Most active consultants by logged hours; zero-hour consultants are left out."""
    grouped: Dict[str, ConsultantHours] = OrderedDict()
    for entry in entries:
        key = entry.consultant_id or entry.consultant_name
        if key not in grouped:
            grouped[key] = ConsultantHours(consultant_id=entry.consultant_id, name=entry.consultant_name, hours=0.0)
        row = grouped[key]
        row.hours += entry.hours
        if not row.name:
            row.name = entry.consultant_name
    ranked = [row for row in grouped.values() if row.hours > 0]
    return top_n(ranked, lambda r: r.hours, n)


@dataclass
class ApprovalBatch:
    consultant_id: str
    consultant_name: str
    entries: List[Approval] = field(default_factory=list)
    total_hours: float = 0.0
    total_amount: float = 0.0
    period_start: Optional[date] = None
    period_end: Optional[date] = None


def group_approvals_by_consultant(approvals: Iterable[Approval]) -> List[ApprovalBatch]:
    """One batch per consultant, in order of first appearance."""
    batches: Dict[str, ApprovalBatch] = OrderedDict()
    for a in approvals:
        batch = batches.get(a.consultant_id)
        if batch is None:
            batch = batches[a.consultant_id] = ApprovalBatch(a.consultant_id, a.consultant_name)
        batch.entries.append(a)
        batch.total_hours += a.hours
        batch.total_amount += a.total_amount
        if a.date:
            batch.period_start = min(filter(None, (batch.period_start, a.date)))
            batch.period_end = max(filter(None, (batch.period_end, a.date)))
    return list(batches.values())


@dataclass
class ConsultantSummary:
    consultant_id: str
    consultant_name: str
    hourly_rate: float = 0.0
    hours_logged: float = 0.0
    hours_approved: float = 0.0
    hours_pending: float = 0.0
    total_earned: float = 0.0
    total_pending: float = 0.0


def consultant_summaries(
    approvals: Iterable[Approval], consultants: Sequence[Consultant] = ()
) -> List[ConsultantSummary]:
    """Per-consultant hours and amounts; rejected entries count as logged only."""
    rates = {c.id: c.hourly_rate for c in consultants}
    summaries: Dict[str, ConsultantSummary] = OrderedDict()
    for a in approvals:
        s = summaries.get(a.consultant_id)
        if s is None:
            s = summaries[a.consultant_id] = ConsultantSummary(
                consultant_id=a.consultant_id,
                consultant_name=a.consultant_name,
                hourly_rate=rates.get(a.consultant_id, a.consultant_hourly_rate),
            )
        s.hours_logged += a.hours
        if a.status in EARNED_STATUSES:
            s.hours_approved += a.hours
            s.total_earned += a.total_amount
        elif a.status == ApprovalStatus.PENDING:
            s.hours_pending += a.hours
            s.total_pending += a.total_amount
    return list(summaries.values())


@dataclass
class FinancialOverview:
    total_revenue: float = 0.0
    total_costs: float = 0.0
    total_profit: float = 0.0
    profit_margin: float = 0.0
    pending_approvals_amount: float = 0.0
    pending_payments_amount: float = 0.0
    monthly: List[MonthlyFinancials] = field(default_factory=list)
    top_projects: List[ProjectFinancials] = field(default_factory=list)
    consultants: List[ConsultantSummary] = field(default_factory=list)
    error: Optional[str] = None


def financial_overview(
    projects: Sequence[Project],
    approvals: Sequence[Approval],
    consultants: Sequence[Consultant] = (),
    today: Optional[date] = None,
    months: int = 6,
    top: int = 5,
) -> FinancialOverview:
    today = today or date.today()
    revenue = sum(metrics.revenue(p) for p in projects)
    costs = sum(metrics.cost(p) for p in projects)
    return FinancialOverview(
        total_revenue=revenue,
        total_costs=costs,
        total_profit=revenue - costs,
        profit_margin=_percent(revenue - costs, revenue),
        pending_approvals_amount=sum(a.total_amount for a in approvals if a.status == ApprovalStatus.PENDING),
        pending_payments_amount=sum(a.total_amount for a in approvals if a.status == ApprovalStatus.APPROVED),
        monthly=monthly_financials(approvals, projects, months, today),
        top_projects=top_projects_by_profit(projects, top),
        consultants=consultant_summaries(approvals, consultants),
    )


@dataclass
class ConsultantStats:
    consultant_id: str
    month_hours: float = 0.0
    month_earnings: float = 0.0
    pending_hours: float = 0.0
    pending_amount: float = 0.0
    active_projects: int = 0
    year_hours: float = 0.0
    year_earnings: float = 0.0
    last_payment: Optional[Payment] = None


def consultant_stats(
    consultant_id: str,
    approvals: Sequence[Approval],
    projects: Sequence[Project] = (),
    payments: Sequence[Payment] = (),
    today: Optional[date] = None,
) -> ConsultantStats:
    """Month and year figures for one consultant from their approvals."""
    today = today or date.today()
    stats = ConsultantStats(consultant_id=consultant_id)
    for a in approvals:
        if a.consultant_id != consultant_id:
            continue
        if a.status == ApprovalStatus.PENDING:
            stats.pending_hours += a.hours
            stats.pending_amount += a.total_amount
        elif a.status in EARNED_STATUSES and a.date and a.date.year == today.year:
            stats.year_hours += a.hours
            stats.year_earnings += a.total_amount
            if a.date.month == today.month:
                stats.month_hours += a.hours
                stats.month_earnings += a.total_amount
    stats.active_projects = sum(
        1 for p in projects
        if p.status in ACTIVE_PROJECT_STATUSES
        and any(x.consultant_id == consultant_id for x in p.assignments)
    )
    paid = [p for p in payments if p.consultant_id == consultant_id and p.payment_date]
    if paid:
        stats.last_payment = max(paid, key=lambda p: p.payment_date)
    return stats


# --- Admin & demands ---


@dataclass
class AdminStats:
    total_users: int = 0
    active_users: int = 0
    total_consultants: int = 0
    active_consultants: int = 0
    total_channels: int = 0
    active_channels: int = 0
    total_clients: int = 0
    active_clients: int = 0


def admin_stats(
    users: Sequence[User],
    consultants: Sequence[Consultant],
    channels: Sequence[Channel],
    clients: Sequence[Client],
) -> AdminStats:
    return AdminStats(
        total_users=len(users),
        active_users=sum(1 for u in users if u.is_active),
        total_consultants=len(consultants),
        active_consultants=sum(1 for c in consultants if c.is_active),
        total_channels=len(channels),
        active_channels=sum(1 for c in channels if c.is_active),
        total_clients=len(clients),
        active_clients=sum(1 for c in clients if c.is_active),
    )


@dataclass
class DemandStats:
    total: int = 0
    active: int = 0
    completed: int = 0
    overdue: int = 0
    total_logged_hours: float = 0.0
    week_hours: float = 0.0


def week_start(today: date) -> date:
    """Sunday opening the week that contains ``today``."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def demand_stats(
    demands: Sequence[Demand],
    entries: Sequence[TimeEntry],
    today: Optional[date] = None,
    consultant_id: Optional[str] = None,
) -> DemandStats:
    """Demand counters; with ``consultant_id`` only that consultant's work counts."""
    today = today or date.today()
    if consultant_id is not None:
        demands = [d for d in demands if d.assigned_to == consultant_id]
        entries = [e for e in entries if e.consultant_id == consultant_id]
    stats = DemandStats(total=len(demands))
    for d in demands:
        stats.active += d.status in OPEN_DEMAND_STATUSES
        stats.completed += d.status == DemandStatus.COMPLETED
        stats.overdue += (
            d.due_date is not None
            and d.due_date < today
            and d.status not in (DemandStatus.COMPLETED, DemandStatus.CANCELLED)
        )
        stats.total_logged_hours += d.total_logged_hours
    start = week_start(today)
    stats.week_hours = sum(e.hours for e in entries if e.date and start <= e.date <= today)
    return stats
