"""Derived project metrics.

Pure functions over one ``Project``. All of them are total: they never
raise, treat missing numbers as 0 and return 0 for degenerate
divisions. Date-dependent checks take ``today`` explicitly.
"""
from datetime import date, timedelta
from typing import Optional

from common.models.base import Project, ProjectStatus

# Usage thresholds (percent of estimated hours)
NEAR_BUDGET = 90
OVER_BUDGET = 110
ENDING_SOON_DAYS = 7


def usage(project: Project) -> float:
    """Worked hours as a percentage of estimated hours, unclamped."""
    if not project.estimated_hours:
        return 0.0
    return project.worked_hours / project.estimated_hours * 100


def progress(project: Project) -> float:
    """Usage clamped to [0, 100] for display."""
    return min(usage(project), 100.0)


def revenue(project: Project) -> float:
    return project.worked_hours * project.channel_rate


def cost(project: Project) -> float:
    """Consultant cost of the worked hours.

    Hours attributed to an assignment are costed at that assignment's
    rate, in assignment order, capped at worked_hours. Whatever worked
    time is left unattributed is costed at the project consultant rate.
    """
    remaining = project.worked_hours
    total = 0.0
    for assignment in project.assignments:
        if assignment.hours is None or remaining <= 0:
            continue
        hours = min(assignment.hours, remaining)
        total += hours * assignment.hourly_rate
        remaining -= hours
    return total + remaining * project.consultant_rate


def profit(project: Project) -> float:
    return revenue(project) - cost(project)


def profit_margin(project: Project) -> float:
    """Profit as a percentage of revenue (0 without revenue)."""
    value = revenue(project)
    if not value:
        return 0.0
    return profit(project) / value * 100


def remaining_hours(project: Project) -> float:
    return max(project.estimated_hours - project.worked_hours, 0.0)


def estimated_budget(project: Project) -> float:
    return project.estimated_hours * project.consultant_rate


def estimated_profit(project: Project) -> float:
    return project.estimated_hours * (project.channel_rate - project.consultant_rate)


def days_until_deadline(project: Project, today: Optional[date] = None) -> Optional[int]:
    if project.end_date is None:
        return None
    return (project.end_date - (today or date.today())).days


def is_overdue(project: Project, today: Optional[date] = None) -> bool:
    return (
        project.end_date is not None
        and project.end_date < (today or date.today())
        and project.status != ProjectStatus.COMPLETED
    )


def is_at_risk(project: Project, today: Optional[date] = None) -> bool:
    """Over budget, overdue, or past the early-warning threshold."""
    return risk_reason(project, today) is not None


def risk_reason(project: Project, today: Optional[date] = None) -> Optional[str]:
    """Why a project is at risk: overdue, over-budget or near-budget."""
    used = usage(project)
    if is_overdue(project, today):
        return 'overdue'
    if used > OVER_BUDGET:
        return 'over-budget'
    if used > NEAR_BUDGET and project.status != ProjectStatus.COMPLETED:
        return 'near-budget'
    return None


def is_ending_soon(
    project: Project, today: Optional[date] = None, horizon: int = ENDING_SOON_DAYS
) -> bool:
    if project.end_date is None or project.status == ProjectStatus.COMPLETED:
        return False
    today = today or date.today()
    return today <= project.end_date <= today + timedelta(days=horizon)


# --- Display ---


def format_currency(value: float) -> str:
    """Brazilian real, e.g. ``R$ 1.234,50``."""
    sign = '-' if value < 0 else ''
    text = f'{abs(value):,.2f}'.replace(',', '_').replace('.', ',').replace('_', '.')
    return f'{sign}R$ {text}'


def format_hours(hours: float) -> str:
    return f'{hours:.1f}h'
