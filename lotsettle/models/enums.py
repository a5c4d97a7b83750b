"""Closed enumerations shared by the models and the settlement core."""

from __future__ import annotations

import enum


class DrawTime(str, enum.Enum):
    """Fixed daily draw slots."""

    TWO_PM = "two_pm"
    FIVE_PM = "five_pm"
    NINE_PM = "nine_pm"


class DrawStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BetType(str, enum.Enum):
    STANDARD = "standard"
    RAMBOLITO = "rambolito"


class TicketStatus(str, enum.Enum):
    """Claim lifecycle of a ticket.

    ``CLAIMED`` and ``CANCELLED`` are terminal.
    """

    ACTIVE = "active"
    SETTLED_WIN = "settled_win"
    SETTLED_LOSE = "settled_lose"
    PENDING_APPROVAL = "pending_approval"
    CLAIMED = "claimed"
    CANCELLED = "cancelled"


class LedgerStatus(str, enum.Enum):
    PENDING = "pending"
    CREDITED = "credited"
    FAILED = "failed"


class ClaimAction(str, enum.Enum):
    TICKET_SETTLED = "ticket_settled"
    CLAIM_REQUESTED = "claim_requested"
    CLAIM_APPROVED = "claim_approved"
    CLAIM_REJECTED = "claim_rejected"
    CLAIM_PAID = "claim_paid"
    LEDGER_FAILED = "ledger_failed"
    TICKET_CANCELLED = "ticket_cancelled"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Persist enum members by value rather than by name."""
    return [member.value for member in enum_cls]


__all__ = [
    "DrawTime",
    "DrawStatus",
    "BetType",
    "TicketStatus",
    "LedgerStatus",
    "ClaimAction",
    "enum_values",
]
