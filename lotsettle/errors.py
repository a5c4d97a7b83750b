"""Exception hierarchy for settlement and claim outcomes.

Every exception carries a stable ``kind`` string that agent-facing screens
render, and an ``http_status`` that API adapters return unchanged.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional


class SettlementError(Exception):
    """Base exception for all settlement and claim errors."""

    kind = "settlement_error"
    http_status = 500


class InvalidState(SettlementError):
    """Raised when matching is attempted against an unsettled draw."""

    kind = "invalid_state"
    http_status = 422


class InvalidCombination(InvalidState):
    """Raised when a combination or winning number is not a fixed-width digit string."""

    kind = "invalid_combination"

    def __init__(self, value: object, digits: int):
        self.value = value
        self.digits = digits
        super().__init__(
            f"Invalid combination {value!r}: expected exactly {digits} digits"
        )


class DrawAlreadyCompleted(InvalidState):
    """Raised when a winning number is written to a draw that is already completed."""

    kind = "draw_already_completed"
    http_status = 409

    def __init__(self, draw_id: Optional[int]):
        self.draw_id = draw_id
        super().__init__(f"Draw {draw_id} is already completed")


class UnknownBetType(SettlementError):
    """Raised when a bet type falls outside the supported enumeration."""

    kind = "unknown_bet_type"
    http_status = 422

    def __init__(self, bet_type: object):
        self.bet_type = bet_type
        super().__init__(f"Unknown bet type {bet_type!r}")


class DrawNotSettled(SettlementError):
    """Raised when settlement or a claim is requested before the draw has a result."""

    kind = "draw_not_settled"
    http_status = 422

    def __init__(self, draw_id: Optional[int]):
        self.draw_id = draw_id
        super().__init__(f"Draw {draw_id} has not been settled yet")


class NotAWinningTicket(SettlementError):
    kind = "not_a_winning_ticket"
    http_status = 422

    def __init__(self, ticket_id: int):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} is not a winning ticket")


class AlreadyClaimed(SettlementError):
    kind = "already_claimed"
    http_status = 409

    def __init__(self, ticket_id: int):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} has already been claimed")


class TicketCancelled(SettlementError):
    kind = "ticket_cancelled"
    http_status = 422

    def __init__(self, ticket_id: int):
        self.ticket_id = ticket_id
        super().__init__(f"Ticket {ticket_id} has been cancelled")


class InvalidTransition(SettlementError):
    """Raised when a ticket status change is not allowed from its current state."""

    kind = "invalid_transition"
    http_status = 409

    def __init__(self, ticket_id: Optional[int], current: object, target: object):
        self.ticket_id = ticket_id
        self.current = current
        self.target = target
        super().__init__(
            f"Ticket {ticket_id} cannot move from {current} to {target}"
        )


class TicketNotFound(SettlementError):
    kind = "ticket_not_found"
    http_status = 404

    def __init__(self, ticket_ref: object):
        self.ticket_ref = ticket_ref
        super().__init__(f"Ticket {ticket_ref} not found")


class DrawNotFound(SettlementError):
    kind = "draw_not_found"
    http_status = 404

    def __init__(self, draw_id: object):
        self.draw_id = draw_id
        super().__init__(f"Draw {draw_id} not found")


class PrizeConfigurationMissing(SettlementError):
    kind = "prize_configuration_missing"
    http_status = 503

    def __init__(self):
        super().__init__("No prize configuration has been recorded")


class LedgerError(SettlementError):
    """Raised when the Balance Ledger rejects or cannot receive a credit."""

    kind = "ledger_error"
    http_status = 502

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class LedgerReconciliationError(SettlementError):
    """Raised when a claim is committed but its ledger credit failed.

    The claim is left in its paid state; operators must reconcile the ledger
    by hand.
    """

    kind = "ledger_reconciliation_required"
    http_status = 500

    def __init__(self, ticket_id: int, amount: Decimal, cause: BaseException):
        self.ticket_id = ticket_id
        self.amount = amount
        self.cause = cause
        super().__init__(
            f"Ticket {ticket_id} was claimed for {amount} but the ledger credit "
            f"failed: {cause}"
        )


def error_payload(exc: SettlementError) -> dict[str, str]:
    """Return the documented error body for ``exc``."""
    return {"error": exc.kind, "message": str(exc)}


__all__ = [
    "SettlementError",
    "InvalidState",
    "InvalidCombination",
    "DrawAlreadyCompleted",
    "UnknownBetType",
    "DrawNotSettled",
    "NotAWinningTicket",
    "AlreadyClaimed",
    "TicketCancelled",
    "InvalidTransition",
    "TicketNotFound",
    "DrawNotFound",
    "PrizeConfigurationMissing",
    "LedgerError",
    "LedgerReconciliationError",
    "error_payload",
]
