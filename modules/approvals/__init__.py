"""Time entry approvals: review queue, bulk approve/reject, payouts.

Status Flow:
    pending → approved → paid
    pending → rejected
"""

from .service import ApprovalService
from .workflow import InvalidTransition, amount, can_transition

__all__ = ['ApprovalService', 'InvalidTransition', 'amount', 'can_transition']
