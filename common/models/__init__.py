"""Shared data models across modules."""

from .base import (
    Approval,
    ApprovalStatus,
    Assignment,
    Channel,
    ChannelType,
    Client,
    ClientContact,
    Consultant,
    Demand,
    DemandStatus,
    Payment,
    PaymentStatus,
    Priority,
    Project,
    ProjectStatus,
    Task,
    TaskStatus,
    TimeEntry,
    User,
    UserRole,
    label_for,
)

__all__ = [
    'Approval', 'ApprovalStatus', 'Assignment', 'Channel', 'ChannelType',
    'Client', 'ClientContact', 'Consultant', 'Demand', 'DemandStatus',
    'Payment', 'PaymentStatus', 'Priority', 'Project', 'ProjectStatus',
    'Task', 'TaskStatus', 'TimeEntry', 'User', 'UserRole', 'label_for',
]
