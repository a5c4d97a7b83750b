"""Balance Ledger collaborator interface and implementations."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Protocol

from .api import LedgerClient


class BalanceLedger(Protocol):
    """Receives exactly one credit instruction per successful claim."""

    def credit(self, ticket_id: int, amount: Decimal) -> Optional[str]:
        ...


@dataclass(frozen=True)
class CreditInstruction:
    ticket_id: int
    amount: Decimal


class RecordingLedger:
    """In-memory ledger that records credit instructions."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.credits: list[CreditInstruction] = []

    def credit(self, ticket_id: int, amount: Decimal) -> Optional[str]:
        with self._lock:
            self.credits.append(CreditInstruction(ticket_id=ticket_id, amount=amount))
            return f"local-{len(self.credits)}"


__all__ = ["BalanceLedger", "CreditInstruction", "LedgerClient", "RecordingLedger"]
