"""Roll-ups of per-ticket settlements for dashboards."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from ..models import Draw, DrawTime, PrizeMultipliers, Ticket
from .engine import SettlementEngine, draw_is_settled
from .prize import WinType

ZERO = Decimal("0.00")


@dataclass
class AgentWinnings:
    winning_ticket_count: int = 0
    amount: Decimal = ZERO


@dataclass
class WinTypeBreakdown:
    count: int = 0
    amount: Decimal = ZERO


@dataclass
class SettlementReport:
    """Aggregate figures over the settled tickets in scope.

    Every amount is a sum of :meth:`SettlementEngine.settle` results.
    """

    total_winnings: Decimal = ZERO
    winning_ticket_count: int = 0
    settled_ticket_count: int = 0
    gross_sales: Decimal = ZERO
    by_draw_time: dict[DrawTime, Decimal] = field(default_factory=dict)
    by_agent: dict[int, AgentWinnings] = field(default_factory=dict)
    by_win_type: dict[WinType, WinTypeBreakdown] = field(default_factory=dict)

    @property
    def net_sales(self) -> Decimal:
        return self.gross_sales - self.total_winnings

    def to_json(self) -> dict:
        return {
            "total_winnings": str(self.total_winnings),
            "winning_ticket_count": self.winning_ticket_count,
            "settled_ticket_count": self.settled_ticket_count,
            "gross_sales": str(self.gross_sales),
            "net_sales": str(self.net_sales),
            "by_draw_time": {
                slot.value: str(amount) for slot, amount in self.by_draw_time.items()
            },
            "by_agent": {
                str(agent_id): {
                    "winning_ticket_count": entry.winning_ticket_count,
                    "amount": str(entry.amount),
                }
                for agent_id, entry in self.by_agent.items()
            },
            "by_win_type": {
                win_type.value: {"count": entry.count, "amount": str(entry.amount)}
                for win_type, entry in self.by_win_type.items()
            },
        }


class SettlementReportAggregator:
    """Fan-in over settlement summaries; never reads storage itself."""

    def __init__(self, engine: Optional[SettlementEngine] = None) -> None:
        self._engine = engine or SettlementEngine()

    def aggregate(
        self,
        pairs: Iterable[tuple[Ticket, Draw]],
        configuration: PrizeMultipliers,
        *,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        draw_times: Optional[Iterable[DrawTime]] = None,
        agent_id: Optional[int] = None,
    ) -> SettlementReport:
        """Aggregate settlements of ``pairs`` within the requested scope.

        Parameters
        ----------
        pairs : Iterable[tuple[Ticket, Draw]]
            Tickets with their draws. Pairs whose draw has no result are
            ignored.
        configuration : PrizeMultipliers
            Multiplier snapshot used for every settlement in the report.
        date_from, date_to : Optional[date]
            Inclusive bounds on ``Draw.draw_date``.
        draw_times : Optional[Iterable[DrawTime]]
            Restrict to these draw slots.
        agent_id : Optional[int]
            Restrict to tickets sold by this agent.

        Returns
        -------
        SettlementReport
            Totals and breakdowns by draw slot, agent and win type.
        """
        slots = set(draw_times) if draw_times is not None else None
        report = SettlementReport()

        for ticket, draw in pairs:
            if date_from is not None and draw.draw_date < date_from:
                continue
            if date_to is not None and draw.draw_date > date_to:
                continue
            if slots is not None and draw.draw_time not in slots:
                continue
            if agent_id is not None and ticket.agent_id != agent_id:
                continue
            if not draw_is_settled(draw):
                continue

            summary = self._engine.settle(ticket, draw, configuration)
            report.settled_ticket_count += 1
            report.gross_sales += Decimal(str(ticket.total_amount))
            if not summary.is_winning:
                continue

            report.winning_ticket_count += 1
            report.total_winnings += summary.total_payout
            report.by_draw_time[draw.draw_time] = (
                report.by_draw_time.get(draw.draw_time, ZERO) + summary.total_payout
            )
            agent = report.by_agent.setdefault(ticket.agent_id, AgentWinnings())
            agent.winning_ticket_count += 1
            agent.amount += summary.total_payout
            for bet in summary.bets:
                if bet.win_type is None:
                    continue
                bucket = report.by_win_type.setdefault(bet.win_type, WinTypeBreakdown())
                bucket.count += 1
                bucket.amount += bet.payout

        return report


__all__ = [
    "AgentWinnings",
    "SettlementReport",
    "SettlementReportAggregator",
    "WinTypeBreakdown",
]
