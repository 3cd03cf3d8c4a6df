"""Base data models.

Records are immutable snapshots of rows fetched from the data store.
They are only built through ``from_dict`` so the rest of the code base
sees one consistent shape (missing numbers are 0, dates are ``date``).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class ProjectStatus(str, Enum):
    PLANNING = 'planning'
    IN_PROGRESS = 'in-progress'
    PAUSED = 'paused'
    AWAITING_CLIENT = 'awaiting-client'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class ApprovalStatus(str, Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    PAID = 'paid'


class PaymentStatus(str, Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    PAID = 'paid'
    FAILED = 'failed'


class ChannelType(str, Enum):
    DIRECT = 'direct'
    PARTNER = 'partner'
    REFERRAL = 'referral'
    MARKETING = 'marketing'


class UserRole(str, Enum):
    VIEW = 'view'
    CONSULTANT = 'consultant'
    ADMIN = 'admin'
    MASTER_ADMIN = 'master-admin'


class DemandStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in-progress'
    AWAITING_FEEDBACK = 'awaiting-feedback'
    IN_REVIEW = 'in-review'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class TaskStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in-progress'
    IN_REVIEW = 'in-review'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class Priority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'
    URGENT = 'urgent'


# Display labels used by listings and cards
PROJECT_STATUS_LABELS = {
    ProjectStatus.PLANNING: 'Planning',
    ProjectStatus.IN_PROGRESS: 'In Progress',
    ProjectStatus.PAUSED: 'Paused',
    ProjectStatus.AWAITING_CLIENT: 'Awaiting Client',
    ProjectStatus.COMPLETED: 'Completed',
    ProjectStatus.CANCELLED: 'Cancelled',
}

APPROVAL_STATUS_LABELS = {
    ApprovalStatus.PENDING: 'Pending',
    ApprovalStatus.APPROVED: 'Approved',
    ApprovalStatus.REJECTED: 'Rejected',
    ApprovalStatus.PAID: 'Paid',
}

CHANNEL_TYPE_LABELS = {
    ChannelType.DIRECT: 'Direct',
    ChannelType.PARTNER: 'Partner',
    ChannelType.REFERRAL: 'Referral',
    ChannelType.MARKETING: 'Marketing',
}

USER_ROLE_LABELS = {
    UserRole.VIEW: 'Viewer',
    UserRole.CONSULTANT: 'Consultant',
    UserRole.ADMIN: 'Administrator',
    UserRole.MASTER_ADMIN: 'Master Administrator',
}

DEMAND_STATUS_LABELS = {
    DemandStatus.PENDING: 'Pending',
    DemandStatus.IN_PROGRESS: 'In Progress',
    DemandStatus.AWAITING_FEEDBACK: 'Awaiting Feedback',
    DemandStatus.IN_REVIEW: 'In Review',
    DemandStatus.COMPLETED: 'Completed',
    DemandStatus.CANCELLED: 'Cancelled',
}

PRIORITY_LABELS = {
    Priority.LOW: 'Low',
    Priority.MEDIUM: 'Medium',
    Priority.HIGH: 'High',
    Priority.URGENT: 'Urgent',
}


def label_for(value: Any) -> str:
    """Display label for any vocabulary member (falls back to the raw value)."""
    for labels in (
        PROJECT_STATUS_LABELS, APPROVAL_STATUS_LABELS, CHANNEL_TYPE_LABELS,
        USER_ROLE_LABELS, DEMAND_STATUS_LABELS, PRIORITY_LABELS,
    ):
        if value in labels:
            return labels[value]
    return str(getattr(value, 'value', value))


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def as_number(value: Any) -> float:
    """Coerce a stored numeric value; None, '' and garbage become 0."""
    if value is None or value == '':
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def as_hours(value: Any) -> float:
    """Hours are never negative."""
    return max(as_number(value), 0.0)


def as_date(value: Any) -> Optional[date]:
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).date()
    except ValueError:
        return None


def as_day_of_month(value: Any) -> Optional[int]:
    """Channel cycle markers are days 1-31; anything else is unset."""
    if value is None or value == '':
        return None
    try:
        day = int(value)
    except (TypeError, ValueError):
        return None
    return day if 1 <= day <= 31 else None


def as_enum(enum_cls, value: Any, default):
    try:
        return enum_cls(value)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Assignment:
    """A consultant assigned to a project with an individual rate."""
    consultant_id: str
    consultant_name: str = ''
    hourly_rate: float = 0.0
    hours: Optional[float] = None  # hours attributed to this consultant, if tracked

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Assignment':
        hours = data.get('hours')
        return cls(
            consultant_id=str(data.get('consultant_id') or ''),
            consultant_name=data.get('consultant_name') or '',
            hourly_rate=as_number(data.get('hourly_rate')),
            hours=None if hours is None else as_hours(hours),
        )


@dataclass(frozen=True)
class Project:
    """A unit of client work."""
    id: str
    status: ProjectStatus = ProjectStatus.PLANNING
    channel_id: str = ''
    client_id: str = ''
    channel_name: str = ''
    client_name: str = ''
    description: str = ''
    product: str = ''
    channel_rate: float = 0.0
    consultant_rate: float = 0.0
    assignments: List[Assignment] = field(default_factory=list)
    estimated_hours: float = 0.0
    worked_hours: float = 0.0
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: str = ''

    @property
    def name(self) -> str:
        return self.description or self.client_name or self.client_id

    @property
    def consultant_names(self) -> List[str]:
        return [a.consultant_name for a in self.assignments if a.consultant_name]

    @classmethod
    def from_dict(cls, data: Dict[str, Any], assignments: Optional[List[Dict]] = None) -> 'Project':
        """Build a project, folding the legacy single-consultant fields
        into the assignment list.

        ``assignments`` are rows from the project/consultant link table;
        when omitted, an inline ``assignments`` key is used.
        """
        rows = assignments if assignments is not None else data.get('assignments') or []
        items = [Assignment.from_dict(r) for r in rows]

        legacy_name = data.get('consultant') or ''
        legacy_rate = as_number(data.get('consultant_rate'))
        if not items and legacy_name:
            items = [Assignment(
                consultant_id=str(data.get('consultant_id') or legacy_name),
                consultant_name=legacy_name,
                hourly_rate=legacy_rate,
            )]

        consultant_rate = legacy_rate
        if not consultant_rate and items:
            consultant_rate = sum(a.hourly_rate for a in items) / len(items)

        return cls(
            id=str(data.get('id') or ''),
            status=as_enum(ProjectStatus, data.get('status'), ProjectStatus.PLANNING),
            channel_id=str(data.get('channel_id') or ''),
            client_id=str(data.get('client_id') or ''),
            channel_name=data.get('channel_name') or '',
            client_name=data.get('client_name') or '',
            description=data.get('description') or '',
            product=data.get('product') or '',
            channel_rate=as_number(data.get('channel_rate')),
            consultant_rate=consultant_rate,
            assignments=items,
            estimated_hours=as_hours(data.get('estimated_hours')),
            worked_hours=as_hours(data.get('worked_hours')),
            start_date=as_date(data.get('start_date')),
            end_date=as_date(data.get('end_date')),
            notes=data.get('notes') or '',
        )


@dataclass(frozen=True)
class Consultant:
    id: str
    name: str
    email: str = ''
    hourly_rate: float = 0.0
    pix_key: Optional[str] = None
    bank: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Consultant':
        return cls(
            id=str(data.get('id') or ''),
            name=data.get('name') or '',
            email=data.get('email') or '',
            hourly_rate=as_number(data.get('hourly_rate')),
            pix_key=data.get('pix_key'),
            bank=data.get('bank'),
            is_active=bool(data.get('is_active', True)),
        )


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: UserRole = UserRole.VIEW
    phone: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(
            id=str(data.get('id') or ''),
            name=data.get('name') or '',
            email=data.get('email') or '',
            role=as_enum(UserRole, data.get('role'), UserRole.VIEW),
            phone=data.get('phone'),
            is_active=bool(data.get('is_active', True)),
        )


@dataclass(frozen=True)
class Channel:
    """Sales channel (canal) with its own billing rate and cycle days."""
    id: str
    name: str
    type: ChannelType = ChannelType.DIRECT
    description: Optional[str] = None
    contact_person: Optional[str] = None
    contact_emails: List[str] = field(default_factory=list)
    contact_phone: Optional[str] = None
    timesheet_day: Optional[int] = None
    invoice_day: Optional[int] = None
    payment_day: Optional[int] = None
    hourly_rate: float = 0.0
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Channel':
        return cls(
            id=str(data.get('id') or ''),
            name=data.get('name') or '',
            type=as_enum(ChannelType, data.get('type'), ChannelType.DIRECT),
            description=data.get('description'),
            contact_person=data.get('contact_person'),
            contact_emails=list(data.get('contact_emails') or []),
            contact_phone=data.get('contact_phone'),
            timesheet_day=as_day_of_month(data.get('timesheet_day')),
            invoice_day=as_day_of_month(data.get('invoice_day')),
            payment_day=as_day_of_month(data.get('payment_day')),
            hourly_rate=as_number(data.get('hourly_rate')),
            is_active=bool(data.get('is_active', True)),
        )


@dataclass(frozen=True)
class Client:
    id: str
    name: str = ''
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    contact_person: Optional[str] = None
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return self.company or self.name or self.id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Client':
        return cls(
            id=str(data.get('id') or ''),
            name=data.get('name') or '',
            email=data.get('email'),
            phone=data.get('phone'),
            company=data.get('company'),
            contact_person=data.get('contact_person'),
            is_active=bool(data.get('is_active', True)),
        )


@dataclass(frozen=True)
class ClientContact:
    id: str
    client_id: str
    name: str
    email: str = ''
    is_primary: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ClientContact':
        return cls(
            id=str(data.get('id') or ''),
            client_id=str(data.get('client_id') or ''),
            name=data.get('name') or '',
            email=data.get('email') or '',
            is_primary=bool(data.get('is_primary', False)),
        )


@dataclass(frozen=True)
class Demand:
    """A unit of requested work, tracked with logged hours."""
    id: str
    title: str
    description: str = ''
    client: str = ''
    project_id: Optional[str] = None
    status: DemandStatus = DemandStatus.PENDING
    priority: Priority = Priority.MEDIUM
    assigned_to: str = ''
    assigned_to_name: str = ''
    estimated_hours: float = 0.0
    total_logged_hours: float = 0.0
    due_date: Optional[date] = None
    completed_at: Optional[date] = None
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Demand':
        return cls(
            id=str(data.get('id') or ''),
            title=data.get('title') or '',
            description=data.get('description') or '',
            client=data.get('client') or '',
            project_id=data.get('project_id') or None,
            status=as_enum(DemandStatus, data.get('status'), DemandStatus.PENDING),
            priority=as_enum(Priority, data.get('priority'), Priority.MEDIUM),
            assigned_to=str(data.get('assigned_to') or ''),
            assigned_to_name=data.get('assigned_to_name') or '',
            estimated_hours=as_hours(data.get('estimated_hours')),
            total_logged_hours=as_hours(data.get('total_logged_hours')),
            due_date=as_date(data.get('due_date')),
            completed_at=as_date(data.get('completed_at')),
            tags=list(data.get('tags') or []),
        )


@dataclass(frozen=True)
class TimeEntry:
    """Hours logged by a consultant against a demand."""
    id: str
    demand_id: str
    consultant_id: str
    hours: float
    date: Optional[date] = None
    description: str = ''
    consultant_name: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TimeEntry':
        return cls(
            id=str(data.get('id') or ''),
            demand_id=str(data.get('demand_id') or ''),
            consultant_id=str(data.get('consultant_id') or ''),
            hours=as_hours(data.get('hours')),
            date=as_date(data.get('date')),
            description=data.get('description') or '',
            consultant_name=data.get('consultant_name') or '',
        )


@dataclass(frozen=True)
class Task:
    """A task inside a project."""
    id: str
    project_id: str
    title: str
    description: str = ''
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    assigned_to: str = ''
    estimated_hours: float = 0.0
    worked_hours: float = 0.0
    due_date: Optional[date] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Task':
        return cls(
            id=str(data.get('id') or ''),
            project_id=str(data.get('project_id') or ''),
            title=data.get('title') or '',
            description=data.get('description') or '',
            status=as_enum(TaskStatus, data.get('status'), TaskStatus.PENDING),
            priority=as_enum(Priority, data.get('priority'), Priority.MEDIUM),
            assigned_to=str(data.get('assigned_to') or ''),
            estimated_hours=as_hours(data.get('estimated_hours')),
            worked_hours=as_hours(data.get('worked_hours')),
            due_date=as_date(data.get('due_date')),
        )


@dataclass(frozen=True)
class Approval:
    """Financial review state of a logged time entry."""
    id: str
    time_entry_id: str
    consultant_id: str
    hours: float
    consultant_hourly_rate: float = 0.0
    status: ApprovalStatus = ApprovalStatus.PENDING
    total_amount: float = 0.0
    demand_id: str = ''
    demand_title: str = ''
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    consultant_name: str = ''
    description: str = ''
    date: Optional[date] = None
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_reason: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Approval':
        hours = as_hours(data.get('hours'))
        rate = as_number(data.get('consultant_hourly_rate'))
        amount = data.get('total_amount')
        return cls(
            id=str(data.get('id') or ''),
            time_entry_id=str(data.get('time_entry_id') or ''),
            consultant_id=str(data.get('consultant_id') or ''),
            hours=hours,
            consultant_hourly_rate=rate,
            status=as_enum(ApprovalStatus, data.get('status'), ApprovalStatus.PENDING),
            total_amount=hours * rate if amount is None else as_number(amount),
            demand_id=str(data.get('demand_id') or ''),
            demand_title=data.get('demand_title') or '',
            project_id=data.get('project_id'),
            project_name=data.get('project_name'),
            consultant_name=data.get('consultant_name') or '',
            description=data.get('description') or '',
            date=as_date(data.get('date')),
            approved_by=data.get('approved_by'),
            approved_at=data.get('approved_at'),
            rejected_reason=data.get('rejected_reason'),
        )


@dataclass(frozen=True)
class Payment:
    """A payout to a consultant covering approved entries."""
    id: str
    consultant_id: str
    total_hours: float
    total_amount: float
    consultant_name: str = ''
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    entry_ids: List[str] = field(default_factory=list)
    status: PaymentStatus = PaymentStatus.PENDING
    payment_date: Optional[date] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payment':
        return cls(
            id=str(data.get('id') or ''),
            consultant_id=str(data.get('consultant_id') or ''),
            total_hours=as_hours(data.get('total_hours')),
            total_amount=as_number(data.get('total_amount')),
            consultant_name=data.get('consultant_name') or '',
            period_start=as_date(data.get('period_start')),
            period_end=as_date(data.get('period_end')),
            entry_ids=list(data.get('entry_ids') or []),
            status=as_enum(PaymentStatus, data.get('status'), PaymentStatus.PENDING),
            payment_date=as_date(data.get('payment_date')),
            payment_method=data.get('payment_method'),
            notes=data.get('notes'),
        )
