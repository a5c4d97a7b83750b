import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from .errors import DrawAlreadyCompleted, DrawNotSettled, TicketNotFound
from .models import (
    ClaimAction,
    ClaimAuditEntry,
    Draw,
    DrawStatus,
    DrawTime,
    PrizeConfiguration,
    PrizeMultipliers,
    Ticket,
    TicketStatus,
    current_prize_multipliers,
)
from .claims.transitions import ensure_transition
from .settlement.engine import SettlementEngine, SettlementSummary, draw_is_settled
from .settlement.matching import validate_digits
from .settlement.report import SettlementReport, SettlementReportAggregator

logger = logging.getLogger(__name__)


def submit_winning_number(session: Session, draw: Draw, value: str) -> Draw:
    """Record the winning number of ``draw`` and mark it completed.

    This is the only writer of ``Draw.winning_number``. A completed draw is
    immutable.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session used for persistence.
    draw : Draw
        Draw receiving its result.
    value : str
        Winning number; must be a digit string of the configured width.

    Returns
    -------
    Draw
        The updated draw.

    Raises
    ------
    DrawAlreadyCompleted
        If the draw already has a result.
    InvalidCombination
        If ``value`` is malformed.
    """
    if draw.status == DrawStatus.COMPLETED or draw.winning_number is not None:
        raise DrawAlreadyCompleted(draw.id)
    if draw.status == DrawStatus.CANCELLED:
        raise ValueError(f"Draw {draw.id} was cancelled and cannot receive a result")

    draw.winning_number = validate_digits(value)
    draw.status = DrawStatus.COMPLETED
    draw.completed_at = datetime.now(timezone.utc)
    session.add(draw)
    session.flush()
    logger.info(
        "Draw %s (%s %s) completed with winning number %s",
        draw.id,
        draw.draw_date,
        draw.draw_time.value,
        draw.winning_number,
    )
    return draw


def record_prize_configuration(
    session: Session,
    *,
    standard: Decimal,
    rambolito_unique: Decimal,
    rambolito_double: Decimal,
    created_by: Optional[str] = None,
) -> PrizeConfiguration:
    """Store a new version of the prize multipliers.

    Earlier versions are kept so existing claim records still point at the
    snapshot their payout was computed with.
    """
    multipliers = PrizeMultipliers(
        standard=standard,
        rambolito_unique=rambolito_unique,
        rambolito_double=rambolito_double,
    )
    configuration = PrizeConfiguration(
        standard=multipliers.standard,
        rambolito_unique=multipliers.rambolito_unique,
        rambolito_double=multipliers.rambolito_double,
        created_by=created_by,
    )
    session.add(configuration)
    session.flush()
    return configuration


def current_prize_configuration(session: Session) -> PrizeMultipliers:
    """Return a fresh snapshot of the prize multipliers in effect."""
    return current_prize_multipliers(session)


def settle_draw(
    session: Session,
    draw: Draw,
    configuration: Optional[PrizeMultipliers] = None,
    *,
    engine: Optional[SettlementEngine] = None,
) -> list[SettlementSummary]:
    """Label every active ticket of a completed draw as won or lost.

    Tickets already past ``active`` (claimed, pending approval, cancelled)
    are left alone. Payouts are not stored; claims recompute them.

    Parameters
    ----------
    session : Session
        Active session used for queries and persistence.
    draw : Draw
        Completed draw whose tickets are settled.
    configuration : Optional[PrizeMultipliers], default: None
        Multiplier snapshot. Defaults to the configuration in effect.
    engine : Optional[SettlementEngine], default: None
        Engine used for settlement.

    Returns
    -------
    list[SettlementSummary]
        Summaries of the tickets that changed status, in ticket id order.

    Raises
    ------
    DrawNotSettled
        If the draw has no result yet.
    """
    if not draw_is_settled(draw):
        raise DrawNotSettled(draw.id)

    engine = engine or SettlementEngine()
    configuration = configuration or current_prize_multipliers(session)

    tickets = session.scalars(
        select(Ticket)
        .where(Ticket.draw_id == draw.id, Ticket.status == TicketStatus.ACTIVE)
        .options(selectinload(Ticket.bets))
        .order_by(Ticket.id)
    ).all()

    summaries: list[SettlementSummary] = []
    for ticket in tickets:
        summary = engine.settle(ticket, draw, configuration)
        target = (
            TicketStatus.SETTLED_WIN if summary.is_winning else TicketStatus.SETTLED_LOSE
        )
        ensure_transition(ticket.status, target, ticket_id=ticket.id)
        session.add(
            ClaimAuditEntry(
                ticket_id=ticket.id,
                action=ClaimAction.TICKET_SETTLED,
                old_status=ticket.status,
                new_status=target,
                notes=f"Draw {draw.id} result {draw.winning_number}",
            )
        )
        ticket.status = target
        summaries.append(summary)

    session.flush()
    logger.info(
        "Settled %d ticket(s) for draw %s (%d winning)",
        len(summaries),
        draw.id,
        sum(1 for s in summaries if s.is_winning),
    )
    return summaries


def verify_ticket(
    session: Session,
    ticket_number: str,
    *,
    engine: Optional[SettlementEngine] = None,
) -> dict:
    """Return the settlement view of a ticket without changing anything.

    The payload is :meth:`SettlementSummary.to_json` plus the ticket's
    stored ``status``. ``claimed`` is set once the ticket is paid and
    ``pending_approval`` while a claim waits for a supervisor. While the draw
    has no result the ``derived_status`` is ``"active"`` and no bets are
    evaluated.

    Raises
    ------
    TicketNotFound
        If no ticket carries ``ticket_number``.
    """
    ticket = Ticket.get_by_ticket_number(session, ticket_number)
    if ticket is None:
        raise TicketNotFound(ticket_number)

    draw = ticket.draw
    claimed = ticket.status == TicketStatus.CLAIMED
    pending_approval = ticket.status == TicketStatus.PENDING_APPROVAL

    if not draw_is_settled(draw):
        return {
            "ticket_id": ticket.id,
            "ticket_number": ticket.ticket_number,
            "agent_id": ticket.agent_id,
            "draw_id": draw.id,
            "winning_number": None,
            "bets": [],
            "total_payout": "0.00",
            "winning_bet_count": 0,
            "derived_status": "active",
            "configuration_id": None,
            "status": ticket.status.value,
            "claimed": claimed,
            "pending_approval": pending_approval,
        }

    engine = engine or SettlementEngine()
    summary = engine.settle(ticket, draw, current_prize_multipliers(session))
    payload = summary.to_json()
    payload["status"] = ticket.status.value
    payload["claimed"] = claimed
    payload["pending_approval"] = pending_approval
    return payload


def build_settlement_report(
    session: Session,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    draw_times: Optional[Iterable[DrawTime]] = None,
    agent_id: Optional[int] = None,
    configuration: Optional[PrizeMultipliers] = None,
) -> SettlementReport:
    """Load settled tickets in scope and aggregate their winnings.

    The query narrows by date range and agent; the aggregator applies the
    same filters again so its result does not depend on the query.
    """
    configuration = configuration or current_prize_multipliers(session)

    stmt = (
        select(Ticket, Draw)
        .join(Draw, Ticket.draw_id == Draw.id)
        .where(Draw.status == DrawStatus.COMPLETED)
        .options(selectinload(Ticket.bets))
        .order_by(Draw.draw_date, Ticket.id)
    )
    if date_from is not None:
        stmt = stmt.where(Draw.draw_date >= date_from)
    if date_to is not None:
        stmt = stmt.where(Draw.draw_date <= date_to)
    if agent_id is not None:
        stmt = stmt.where(Ticket.agent_id == agent_id)

    pairs = [(ticket, draw) for ticket, draw in session.execute(stmt).all()]
    return SettlementReportAggregator().aggregate(
        pairs,
        configuration,
        date_from=date_from,
        date_to=date_to,
        draw_times=draw_times,
        agent_id=agent_id,
    )


__all__ = [
    "build_settlement_report",
    "current_prize_configuration",
    "record_prize_configuration",
    "settle_draw",
    "submit_winning_number",
    "verify_ticket",
]
