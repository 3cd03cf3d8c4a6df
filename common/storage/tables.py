"""Database tables for the backoffice store.

Uses SQLAlchemy 2.0 with async support.
Backend-agnostic: works with SQLite (dev) and PostgreSQL (production).
Enum-valued columns are stored as their string values.
"""

import uuid
import datetime as dt
from typing import Any, Dict, Optional, Type

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    func,
    inspect,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# Server-maintained, never part of a record
AUDIT_COLUMNS = ("created_at", "updated_at")


def _new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all tables."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            c.key: getattr(self, c.key)
            for c in inspect(self).mapper.column_attrs
            if c.key not in AUDIT_COLUMNS
        }


class TimestampMixin:
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )


# --- Admin records ---


class UserRow(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    role: Mapped[str] = mapped_column(String(30), default="view", nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    consultant_id: Mapped[Optional[str]] = mapped_column(String(36))  # set for consultant logins


class ConsultantRow(TimestampMixin, Base):
    __tablename__ = "consultants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False)
    hourly_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    pix_key: Mapped[Optional[str]] = mapped_column(String(200))
    bank: Mapped[Optional[str]] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class ChannelRow(TimestampMixin, Base):
    __tablename__ = "channels"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(30), default="direct", nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    contact_person: Mapped[Optional[str]] = mapped_column(String(200))
    contact_emails: Mapped[Optional[list]] = mapped_column(JSON)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(50))
    timesheet_day: Mapped[Optional[int]] = mapped_column(Integer)
    invoice_day: Mapped[Optional[int]] = mapped_column(Integer)
    payment_day: Mapped[Optional[int]] = mapped_column(Integer)
    hourly_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class ClientRow(TimestampMixin, Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    company: Mapped[Optional[str]] = mapped_column(String(300))
    name: Mapped[Optional[str]] = mapped_column(String(200))
    email: Mapped[Optional[str]] = mapped_column(String(200))
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    contact_person: Mapped[Optional[str]] = mapped_column(String(200))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class ClientContactRow(Base):
    __tablename__ = "client_contacts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    client_id: Mapped[str] = mapped_column(String(36), ForeignKey("clients.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(200), nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


# --- Projects ---


class ProjectRow(TimestampMixin, Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    channel_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("channels.id"))
    client_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("clients.id"))
    product: Mapped[Optional[str]] = mapped_column(String(300))
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(30), default="planning", nullable=False)
    channel_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    consultant_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    # Legacy single-consultant column, folded into assignments on read
    consultant: Mapped[Optional[str]] = mapped_column(String(200))
    estimated_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    worked_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    start_date: Mapped[Optional[dt.date]] = mapped_column(Date)
    end_date: Mapped[Optional[dt.date]] = mapped_column(Date)
    notes: Mapped[Optional[str]] = mapped_column(Text)


class ProjectConsultantRow(Base):
    """Project/consultant link table with the per-project rate."""

    __tablename__ = "project_consultants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    project_id: Mapped[str] = mapped_column(String(36), ForeignKey("projects.id"), nullable=False)
    consultant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    consultant_name: Mapped[Optional[str]] = mapped_column(String(200))
    hourly_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    hours: Mapped[Optional[float]] = mapped_column(Float)


class TaskRow(TimestampMixin, Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    project_id: Mapped[str] = mapped_column(String(36), ForeignKey("projects.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(36))
    estimated_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    worked_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    due_date: Mapped[Optional[dt.date]] = mapped_column(Date)


# --- Demands & time ---


class DemandRow(TimestampMixin, Base):
    __tablename__ = "demands"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    client: Mapped[Optional[str]] = mapped_column(String(300))
    project_id: Mapped[Optional[str]] = mapped_column(String(36))
    status: Mapped[str] = mapped_column(String(30), default="pending", nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)
    assigned_to: Mapped[Optional[str]] = mapped_column(String(36))
    assigned_to_name: Mapped[Optional[str]] = mapped_column(String(200))
    estimated_hours: Mapped[Optional[float]] = mapped_column(Float)
    total_logged_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    due_date: Mapped[Optional[dt.date]] = mapped_column(Date)
    completed_at: Mapped[Optional[dt.date]] = mapped_column(Date)
    tags: Mapped[Optional[list]] = mapped_column(JSON)


class TimeEntryRow(TimestampMixin, Base):
    __tablename__ = "time_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    demand_id: Mapped[str] = mapped_column(String(36), ForeignKey("demands.id"), nullable=False)
    consultant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    consultant_name: Mapped[Optional[str]] = mapped_column(String(200))
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)


class ApprovalRow(TimestampMixin, Base):
    __tablename__ = "approvals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    time_entry_id: Mapped[str] = mapped_column(String(36), nullable=False)
    demand_id: Mapped[Optional[str]] = mapped_column(String(36))
    demand_title: Mapped[Optional[str]] = mapped_column(String(300))
    project_id: Mapped[Optional[str]] = mapped_column(String(36))
    project_name: Mapped[Optional[str]] = mapped_column(String(300))
    consultant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    consultant_name: Mapped[Optional[str]] = mapped_column(String(200))
    consultant_hourly_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    hours: Mapped[float] = mapped_column(Float, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    date: Mapped[Optional[dt.date]] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    total_amount: Mapped[Optional[float]] = mapped_column(Float)
    approved_by: Mapped[Optional[str]] = mapped_column(String(36))
    approved_at: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    rejected_reason: Mapped[Optional[str]] = mapped_column(Text)


class PaymentRow(TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    consultant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    consultant_name: Mapped[Optional[str]] = mapped_column(String(200))
    period_start: Mapped[Optional[dt.date]] = mapped_column(Date)
    period_end: Mapped[Optional[dt.date]] = mapped_column(Date)
    entry_ids: Mapped[Optional[list]] = mapped_column(JSON)
    total_hours: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    payment_date: Mapped[Optional[dt.date]] = mapped_column(Date)
    payment_method: Mapped[Optional[str]] = mapped_column(String(50))
    notes: Mapped[Optional[str]] = mapped_column(Text)


TABLES: Dict[str, Type[Base]] = {
    "users": UserRow,
    "consultants": ConsultantRow,
    "channels": ChannelRow,
    "clients": ClientRow,
    "client_contacts": ClientContactRow,
    "projects": ProjectRow,
    "project_consultants": ProjectConsultantRow,
    "demands": DemandRow,
    "time_entries": TimeEntryRow,
    "tasks": TaskRow,
    "approvals": ApprovalRow,
    "payments": PaymentRow,
}
