"""Allowed ticket status transitions."""

from __future__ import annotations

from typing import Mapping, Optional

from ..errors import InvalidTransition
from ..models.enums import TicketStatus

# Every status has an entry; a missing entry is a programming error.
TRANSITIONS: Mapping[TicketStatus, frozenset[TicketStatus]] = {
    TicketStatus.ACTIVE: frozenset(
        {TicketStatus.SETTLED_WIN, TicketStatus.SETTLED_LOSE, TicketStatus.CANCELLED}
    ),
    TicketStatus.SETTLED_WIN: frozenset(
        {TicketStatus.PENDING_APPROVAL, TicketStatus.CLAIMED, TicketStatus.CANCELLED}
    ),
    TicketStatus.SETTLED_LOSE: frozenset({TicketStatus.CANCELLED}),
    # Rejection sends a pending claim back to SETTLED_WIN.
    TicketStatus.PENDING_APPROVAL: frozenset(
        {TicketStatus.CLAIMED, TicketStatus.SETTLED_WIN, TicketStatus.CANCELLED}
    ),
    TicketStatus.CLAIMED: frozenset(),
    TicketStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in TRANSITIONS.items() if not targets
)


def can_transition(current: TicketStatus, target: TicketStatus) -> bool:
    """Return whether a ticket may move from ``current`` to ``target``."""
    return TicketStatus(target) in TRANSITIONS[TicketStatus(current)]


def ensure_transition(
    current: TicketStatus,
    target: TicketStatus,
    *,
    ticket_id: Optional[int] = None,
) -> None:
    """Raise :class:`InvalidTransition` unless ``current -> target`` is allowed."""
    if not can_transition(current, target):
        raise InvalidTransition(ticket_id, TicketStatus(current).value, TicketStatus(target).value)


__all__ = ["TERMINAL_STATUSES", "TRANSITIONS", "can_transition", "ensure_transition"]
