"""Settlement engine evaluating a ticket's bets against its draw result."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional

from ..errors import DrawNotSettled, InvalidState, UnknownBetType
from ..models import Draw, DrawStatus, PrizeMultipliers, Ticket
from .matching import is_winning, normalize_bet_type
from .prize import WinType, compute_payout, win_type_for

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


class DerivedStatus(str, enum.Enum):
    """Informational ticket label; claim eligibility is decided elsewhere."""

    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class BetSettlement:
    """Outcome of one bet.

    Attributes
    ----------
    bet_id : Optional[int]
        Primary key of the bet, if persisted.
    position : int
        Zero-based index of the bet on its ticket.
    bet_type : str
        Normalized bet type value.
    combination : str
        Digits wagered.
    amount : Decimal
        Stake of the bet.
    is_winner : bool
        Whether the bet matched the winning number.
    payout : Decimal
        Prize for the bet; ``0.00`` for losing bets.
    win_type : Optional[WinType]
        Multiplier bucket used for a winning bet.
    """

    bet_id: Optional[int]
    position: int
    bet_type: str
    combination: str
    amount: Decimal
    is_winner: bool
    payout: Decimal
    win_type: Optional[WinType]

    def to_json(self) -> dict:
        return {
            "bet_id": self.bet_id,
            "position": self.position,
            "bet_type": self.bet_type,
            "combination": self.combination,
            "amount": str(self.amount),
            "is_winner": self.is_winner,
            "payout": str(self.payout),
            "win_type": self.win_type.value if self.win_type is not None else None,
        }


@dataclass(frozen=True)
class SettlementSummary:
    """Pure projection of a ticket's settlement against a completed draw."""

    ticket_id: Optional[int]
    ticket_number: str
    agent_id: int
    draw_id: Optional[int]
    winning_number: str
    bets: tuple[BetSettlement, ...]
    total_payout: Decimal
    winning_bet_count: int
    configuration_id: Optional[int] = None

    @property
    def derived_status(self) -> DerivedStatus:
        return DerivedStatus.WON if self.winning_bet_count > 0 else DerivedStatus.LOST

    @property
    def is_winning(self) -> bool:
        return self.winning_bet_count > 0

    def to_json(self) -> dict:
        """Return a JSON-serializable representation for the verification API."""
        return {
            "ticket_id": self.ticket_id,
            "ticket_number": self.ticket_number,
            "agent_id": self.agent_id,
            "draw_id": self.draw_id,
            "winning_number": self.winning_number,
            "bets": [bet.to_json() for bet in self.bets],
            "total_payout": str(self.total_payout),
            "winning_bet_count": self.winning_bet_count,
            "derived_status": self.derived_status.value,
            "configuration_id": self.configuration_id,
        }


def draw_is_settled(draw: Draw) -> bool:
    return draw.status == DrawStatus.COMPLETED and draw.winning_number is not None


class SettlementEngine:
    """Stateless orchestrator of bet matching and prize calculation.

    Instances hold no mutable state and may be shared across threads.
    """

    def __init__(self, *, digits: Optional[int] = None) -> None:
        """Create an engine.

        Parameters
        ----------
        digits : Optional[int], default: None
            Fixed combination width. Defaults to the ``DRAW_DIGITS`` setting.
        """
        self._digits = digits

    def settle(
        self,
        ticket: Ticket,
        draw: Draw,
        configuration: PrizeMultipliers,
    ) -> SettlementSummary:
        """Settle every bet of ``ticket`` against ``draw``.

        Parameters
        ----------
        ticket : Ticket
            Ticket whose bets are evaluated in their stored order.
        draw : Draw
            The ticket's draw. It must be completed with a winning number.
        configuration : PrizeMultipliers
            Multiplier snapshot in effect for this settlement.

        Returns
        -------
        SettlementSummary
            Per-bet outcomes, total payout and winning bet count.

        Raises
        ------
        DrawNotSettled
            If the draw is not completed.
        ValueError
            If the ticket belongs to a different draw.
        UnknownBetType, InvalidState
            If a bet or the draw record is malformed.
        """
        if not draw_is_settled(draw):
            raise DrawNotSettled(draw.id)
        if (
            ticket.draw_id is not None
            and draw.id is not None
            and ticket.draw_id != draw.id
        ):
            raise ValueError(
                f"Ticket {ticket.ticket_number} belongs to draw {ticket.draw_id}, "
                f"not {draw.id}"
            )

        winning_number = draw.winning_number
        results: list[BetSettlement] = []
        total = ZERO
        winners = 0

        for index, bet in enumerate(ticket.bets):
            try:
                won = is_winning(bet, winning_number, digits=self._digits)
                payout = compute_payout(bet, configuration) if won else ZERO
                win_type = win_type_for(bet) if won else None
                bet_type = normalize_bet_type(bet.bet_type).value
            except (UnknownBetType, InvalidState) as exc:
                logger.warning(
                    "Malformed bet %s on ticket %s (draw %s): %s",
                    getattr(bet, "id", None),
                    ticket.ticket_number,
                    draw.id,
                    exc,
                )
                raise

            if won:
                winners += 1
                total += payout
            results.append(
                BetSettlement(
                    bet_id=getattr(bet, "id", None),
                    position=index,
                    bet_type=bet_type,
                    combination=bet.combination,
                    amount=Decimal(str(bet.amount)),
                    is_winner=won,
                    payout=payout,
                    win_type=win_type,
                )
            )

        return SettlementSummary(
            ticket_id=ticket.id,
            ticket_number=ticket.ticket_number,
            agent_id=ticket.agent_id,
            draw_id=draw.id,
            winning_number=winning_number,
            bets=tuple(results),
            total_payout=total,
            winning_bet_count=winners,
            configuration_id=configuration.configuration_id,
        )

    def derive_status(
        self,
        ticket: Ticket,
        draw: Draw,
        configuration: PrizeMultipliers,
    ) -> DerivedStatus:
        """Return ``active`` for a pending draw, else ``won`` or ``lost``."""
        if not draw_is_settled(draw):
            return DerivedStatus.ACTIVE
        return self.settle(ticket, draw, configuration).derived_status

    def settle_many(
        self,
        pairs: Iterable[tuple[Ticket, Draw]],
        configuration: PrizeMultipliers,
    ) -> list[SettlementSummary]:
        """Settle each (ticket, draw) pair, skipping draws without a result."""
        summaries: list[SettlementSummary] = []
        for ticket, draw in pairs:
            if not draw_is_settled(draw):
                continue
            summaries.append(self.settle(ticket, draw, configuration))
        return summaries


__all__ = [
    "BetSettlement",
    "DerivedStatus",
    "SettlementEngine",
    "SettlementSummary",
    "draw_is_settled",
]
