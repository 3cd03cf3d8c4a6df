"""Approval lifecycle of a logged time entry.

Status Flow:
    pending → approved → paid
    pending → rejected          (terminal, with reason)

Nothing leaves ``paid`` or ``rejected``.
"""
from typing import Dict, FrozenSet

from common.models.base import ApprovalStatus

TRANSITIONS: Dict[ApprovalStatus, FrozenSet[ApprovalStatus]] = {
    ApprovalStatus.PENDING: frozenset({ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}),
    ApprovalStatus.APPROVED: frozenset({ApprovalStatus.PAID}),
    ApprovalStatus.REJECTED: frozenset(),
    ApprovalStatus.PAID: frozenset(),
}

ACTION_TARGETS = {
    'approve': ApprovalStatus.APPROVED,
    'reject': ApprovalStatus.REJECTED,
    'pay': ApprovalStatus.PAID,
}


class InvalidTransition(Exception):
    def __init__(self, approval_id: str, current: ApprovalStatus, target: ApprovalStatus):
        super().__init__(
            f"Cannot move approval {approval_id} from '{current.value}' to '{target.value}'"
        )
        self.approval_id = approval_id
        self.current = current
        self.target = target


def can_transition(current: ApprovalStatus, target: ApprovalStatus) -> bool:
    return target in TRANSITIONS[current]


def check_transition(approval_id: str, current: ApprovalStatus, target: ApprovalStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransition(approval_id, current, target)


def amount(hours: float, rate: float) -> float:
    """Monetary value of logged hours."""
    return hours * rate
