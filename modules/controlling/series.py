"""Time-bucketed series for charts.

A window of ``n`` periods ends at ``today``: buckets are half-open
``[start, end)``, oldest first, and the last one contains today. Every
bucket is present even when nothing falls into it, so chart axes stay
stable.
"""
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional, Sequence

from common.models.base import Approval, ApprovalStatus, Project, TimeEntry

from . import metrics

MONTH_ABBR = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun', 'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')


@dataclass(frozen=True)
class Bucket:
    label: str
    start: date
    end: date


@dataclass
class SeriesPoint:
    label: str
    start: date
    end: date
    value: float = 0.0


@dataclass
class MonthlyFinancials:
    label: str
    start: date
    end: date
    revenue: float = 0.0
    costs: float = 0.0
    profit: float = 0.0


def week_buckets(n: int = 4, today: Optional[date] = None) -> List[Bucket]:
    """``n`` seven-day windows, the last one ending with today."""
    today = today or date.today()
    last_end = today + timedelta(days=1)
    buckets = []
    for i in range(n - 1, -1, -1):
        end = last_end - timedelta(weeks=i)
        start = end - timedelta(weeks=1)
        last_day = end - timedelta(days=1)
        label = f'{start.day}/{start.month}-{last_day.day}/{last_day.month}'
        buckets.append(Bucket(label, start, end))
    return buckets


def _shift_month(year: int, month: int, delta: int):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_buckets(n: int = 6, today: Optional[date] = None) -> List[Bucket]:
    """``n`` calendar months, the last one being the current month."""
    today = today or date.today()
    buckets = []
    for i in range(n - 1, -1, -1):
        year, month = _shift_month(today.year, today.month, -i)
        next_year, next_month = _shift_month(year, month, 1)
        buckets.append(Bucket(MONTH_ABBR[month - 1], date(year, month, 1), date(next_year, next_month, 1)))
    return buckets


def _points(buckets: Sequence[Bucket]) -> List[SeriesPoint]:
    return [SeriesPoint(b.label, b.start, b.end) for b in buckets]


def _find(points: Sequence[SeriesPoint], day: Optional[date]) -> Optional[SeriesPoint]:
    if day is None:
        return None
    for point in points:
        if point.start <= day < point.end:
            return point
    return None


def weekly_hours(
    entries: Iterable[TimeEntry],
    n: int = 4,
    today: Optional[date] = None,
    consultant_id: Optional[str] = None,
) -> List[SeriesPoint]:
    points = _points(week_buckets(n, today))
    for entry in entries:
        if consultant_id is not None and entry.consultant_id != consultant_id:
            continue
        point = _find(points, entry.date)
        if point is not None:
            point.value += entry.hours
    return points


def monthly_revenue(
    projects: Iterable[Project],
    n: int = 6,
    today: Optional[date] = None,
    rate: str = 'channel',
    consultant_id: Optional[str] = None,
) -> List[SeriesPoint]:
    """Project revenue attributed to the month the project started.

    ``rate='consultant'`` charts what consultants earned (project cost)
    instead of what the channel billed.
    """
    if rate not in ('channel', 'consultant'):
        raise ValueError(f'Unknown rate: {rate}')
    value_of = metrics.revenue if rate == 'channel' else metrics.cost
    points = _points(month_buckets(n, today))
    for project in projects:
        if consultant_id is not None and all(a.consultant_id != consultant_id for a in project.assignments):
            continue
        point = _find(points, project.start_date)
        if point is not None:
            point.value += value_of(project)
    return points


def monthly_financials(
    approvals: Iterable[Approval],
    projects: Sequence[Project] = (),
    n: int = 6,
    today: Optional[date] = None,
) -> List[MonthlyFinancials]:
    """Revenue and costs per month from approved or paid entries.

    Costs are the entry amounts; revenue bills the entry hours at the
    channel rate of the entry's project (0 for entries without one).
    """
    channel_rates = {p.id: p.channel_rate for p in projects}
    months = [MonthlyFinancials(b.label, b.start, b.end) for b in month_buckets(n, today)]
    for a in approvals:
        if a.status not in (ApprovalStatus.APPROVED, ApprovalStatus.PAID) or a.date is None:
            continue
        for month in months:
            if month.start <= a.date < month.end:
                month.costs += a.total_amount
                month.revenue += a.hours * channel_rates.get(a.project_id, 0.0)
                break
    for month in months:
        month.profit = month.revenue - month.costs
    return months
