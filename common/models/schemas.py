"""Pydantic schemas for form submissions.

Payloads are validated before anything is sent to the data store, so a
missing required field never reaches it. ``to_fields()`` returns the
column dict handed to ``DataSource.create`` / ``update``.
"""

from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from .base import (
    ChannelType,
    DemandStatus,
    Priority,
    ProjectStatus,
    TaskStatus,
    UserRole,
)


class FormData(BaseModel):
    """Base for all create/update payloads."""

    model_config = ConfigDict(use_enum_values=True, validate_default=True)

    def to_fields(self) -> dict:
        return self.model_dump()


class PatchData(FormData):
    """Partial update: only the fields the form actually set."""

    def to_fields(self) -> dict:
        return self.model_dump(exclude_unset=True)


# --- Admin records ---


class CreateUserData(FormData):
    name: str = Field(..., min_length=1)
    email: EmailStr
    role: UserRole = UserRole.VIEW
    phone: Optional[str] = None
    is_active: bool = True


class UpdateUserData(PatchData):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    phone: Optional[str] = None
    is_active: Optional[bool] = None


class CreateConsultantData(FormData):
    name: str = Field(..., min_length=1)
    email: EmailStr
    hourly_rate: float = Field(..., ge=0)
    pix_key: Optional[str] = None
    bank: Optional[str] = None
    is_active: bool = True


class UpdateConsultantData(PatchData):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    pix_key: Optional[str] = None
    bank: Optional[str] = None
    is_active: Optional[bool] = None


class CreateChannelData(FormData):
    name: str = Field(..., min_length=1)
    type: ChannelType
    description: Optional[str] = None
    contact_person: Optional[str] = None
    contact_emails: List[EmailStr] = []
    contact_phone: Optional[str] = None
    timesheet_day: Optional[int] = Field(None, ge=1, le=31)
    invoice_day: Optional[int] = Field(None, ge=1, le=31)
    payment_day: Optional[int] = Field(None, ge=1, le=31)
    hourly_rate: float = Field(0, ge=0)
    is_active: bool = True


class UpdateChannelData(PatchData):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[ChannelType] = None
    description: Optional[str] = None
    contact_person: Optional[str] = None
    contact_emails: Optional[List[EmailStr]] = None
    contact_phone: Optional[str] = None
    timesheet_day: Optional[int] = Field(None, ge=1, le=31)
    invoice_day: Optional[int] = Field(None, ge=1, le=31)
    payment_day: Optional[int] = Field(None, ge=1, le=31)
    hourly_rate: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CreateClientData(FormData):
    company: str = Field(..., min_length=1)
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    contact_person: Optional[str] = None
    is_active: bool = True


class UpdateClientData(PatchData):
    company: Optional[str] = Field(None, min_length=1)
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    contact_person: Optional[str] = None
    is_active: Optional[bool] = None


class CreateClientContactData(FormData):
    name: str = Field(..., min_length=1)
    email: EmailStr
    is_primary: bool = False


# --- Projects ---


class AssignmentData(BaseModel):
    consultant_id: str = Field(..., min_length=1)
    consultant_name: Optional[str] = None
    hourly_rate: float = Field(..., ge=0)
    hours: Optional[float] = Field(None, ge=0)


class CreateProjectData(FormData):
    channel_id: str = Field(..., min_length=1)
    client_id: str = Field(..., min_length=1)
    product: str = Field(..., min_length=1)
    status: ProjectStatus = ProjectStatus.PLANNING
    description: Optional[str] = None
    channel_rate: float = Field(..., ge=0)
    consultant_rate: float = Field(0, ge=0)
    assignments: List[AssignmentData] = []
    estimated_hours: float = Field(0, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    def to_fields(self) -> dict:
        fields = super().to_fields()
        fields.pop("assignments", None)
        return fields


class UpdateProjectData(PatchData):
    channel_id: Optional[str] = None
    client_id: Optional[str] = None
    product: Optional[str] = None
    status: Optional[ProjectStatus] = None
    description: Optional[str] = None
    channel_rate: Optional[float] = Field(None, ge=0)
    consultant_rate: Optional[float] = Field(None, ge=0)
    assignments: Optional[List[AssignmentData]] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    worked_hours: Optional[float] = Field(None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

    def to_fields(self) -> dict:
        fields = super().to_fields()
        fields.pop("assignments", None)
        return fields


class CreateTaskData(FormData):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING
    priority: Priority = Priority.MEDIUM
    assigned_to: Optional[str] = None
    estimated_hours: float = Field(0, ge=0)
    due_date: Optional[date] = None


# --- Demands & time ---


class CreateDemandData(FormData):
    title: str = Field(..., min_length=1)
    description: str = ""
    client: str = Field(..., min_length=1)
    project_id: Optional[str] = None
    status: DemandStatus = DemandStatus.PENDING
    priority: Priority = Priority.MEDIUM
    assigned_to: str = Field(..., min_length=1)
    estimated_hours: Optional[float] = Field(None, ge=0)
    due_date: Optional[date] = None
    tags: List[str] = []


class UpdateDemandData(PatchData):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    client: Optional[str] = None
    project_id: Optional[str] = None
    status: Optional[DemandStatus] = None
    priority: Optional[Priority] = None
    assigned_to: Optional[str] = None
    estimated_hours: Optional[float] = Field(None, ge=0)
    due_date: Optional[date] = None
    tags: Optional[List[str]] = None


class CreateTimeEntryData(FormData):
    demand_id: str = Field(..., min_length=1)
    hours: float = Field(..., gt=0, le=24)
    description: str = ""
    date: date


# --- Approvals ---


class ApprovalAction(BaseModel):
    """Bulk approve/reject request."""

    entry_ids: List[str] = Field(..., min_length=1)
    action: Literal["approve", "reject"]
    reason: Optional[str] = None

    @model_validator(mode="after")
    def _reason_required_for_reject(self):
        if self.action == "reject" and not (self.reason or "").strip():
            raise ValueError("a reason is required to reject entries")
        return self


class CreatePaymentData(BaseModel):
    consultant_id: str = Field(..., min_length=1)
    period_start: date
    period_end: date
    entry_ids: List[str] = Field(..., min_length=1)
    payment_method: Optional[str] = None
    notes: Optional[str] = None
