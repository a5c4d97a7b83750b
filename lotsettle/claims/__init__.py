"""Claim lifecycle: transition table, approval policies and the state machine."""

from .locks import DEFAULT_TICKET_LOCKS, TicketLockRegistry
from .policy import (
    AlwaysRequireApproval,
    ApprovalPolicy,
    NeverRequireApproval,
    ThresholdApprovalPolicy,
    policy_from_settings,
)
from .service import ClaimOutcome, ClaimStateMachine
from .transitions import TERMINAL_STATUSES, TRANSITIONS, can_transition, ensure_transition

__all__ = [
    "AlwaysRequireApproval",
    "ApprovalPolicy",
    "ClaimOutcome",
    "ClaimStateMachine",
    "DEFAULT_TICKET_LOCKS",
    "NeverRequireApproval",
    "TERMINAL_STATUSES",
    "TRANSITIONS",
    "ThresholdApprovalPolicy",
    "TicketLockRegistry",
    "can_transition",
    "ensure_transition",
    "policy_from_settings",
]
