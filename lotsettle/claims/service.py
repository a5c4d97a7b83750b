"""Claim lifecycle for winning tickets with a single-payout guarantee."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.orm.attributes import set_committed_value

from ..db.utils import dt_iso
from ..errors import (
    AlreadyClaimed,
    DrawNotSettled,
    InvalidTransition,
    LedgerReconciliationError,
    NotAWinningTicket,
    SettlementError,
    TicketCancelled,
    TicketNotFound,
)
from ..ledger import BalanceLedger
from ..models import (
    ClaimAction,
    ClaimAuditEntry,
    ClaimRecord,
    LedgerStatus,
    PrizeMultipliers,
    Ticket,
    TicketStatus,
    current_prize_multipliers,
)
from ..settlement.engine import SettlementEngine, SettlementSummary, draw_is_settled
from .locks import DEFAULT_TICKET_LOCKS, TicketLockRegistry
from .policy import ApprovalPolicy, policy_from_settings
from .transitions import ensure_transition

logger = logging.getLogger(__name__)

ConfigurationProvider = Callable[[Session], PrizeMultipliers]


@dataclass(frozen=True)
class ClaimOutcome:
    """Result of a claim transition returned to the Claims API."""

    ticket_id: int
    status: TicketStatus
    payout_amount: Decimal
    claimed_at: Optional[datetime] = None
    claim_record_id: Optional[int] = None

    def to_json(self) -> dict:
        return {
            "ticket_id": self.ticket_id,
            "status": self.status.value,
            "payout_amount": str(self.payout_amount),
            "claimed_at": dt_iso(self.claimed_at),
        }


@dataclass(frozen=True)
class _PendingCredit:
    claim_record_id: int
    ticket_id: int
    amount: Decimal


class ClaimStateMachine:
    """Drives tickets through the claim lifecycle.

    Every transition for a ticket runs in its own transaction while holding
    that ticket's lock. The status change itself is a conditional update
    (``WHERE status = <expected>``), and ``claim_records.ticket_id`` is unique,
    so separate processes cannot pay the same ticket twice either.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        ledger: BalanceLedger,
        *,
        policy: Optional[ApprovalPolicy] = None,
        engine: Optional[SettlementEngine] = None,
        locks: Optional[TicketLockRegistry] = None,
        configuration_provider: Optional[ConfigurationProvider] = None,
    ) -> None:
        """Create a state machine.

        Parameters
        ----------
        session_factory : sessionmaker
            Factory producing sessions bound to the ticket database.
        ledger : BalanceLedger
            Receives one credit instruction per paid claim.
        policy : Optional[ApprovalPolicy], default: None
            Decides whether a claim waits for manual approval. Defaults to the
            policy selected by ``CLAIM_APPROVAL_MODE``.
        engine : Optional[SettlementEngine], default: None
            Engine used to recompute payouts.
        locks : Optional[TicketLockRegistry], default: None
            Per-ticket lock registry; the process-wide registry by default.
        configuration_provider : Optional[ConfigurationProvider], default: None
            Returns a fresh multiplier snapshot for a session. Defaults to the
            newest stored prize configuration.
        """
        self._session_factory = session_factory
        self._ledger = ledger
        self._policy = policy or policy_from_settings()
        self._engine = engine or SettlementEngine()
        self._locks = locks or DEFAULT_TICKET_LOCKS
        self._configuration_provider = configuration_provider or current_prize_multipliers

    # -------- claim transitions --------
    def request_claim(
        self,
        ticket_id: int,
        *,
        claimer_name: Optional[str] = None,
        claimer_phone: Optional[str] = None,
        claimer_address: Optional[str] = None,
        requested_by: Optional[str] = None,
    ) -> ClaimOutcome:
        """Request payout of a winning ticket.

        The payout is always recomputed from the ticket's bets. The ticket
        moves to ``pending_approval``, or directly to ``claimed`` when the
        approval policy waives manual review.

        Raises
        ------
        TicketNotFound
            If no ticket has ``ticket_id``.
        DrawNotSettled
            If the ticket's draw has no winning number yet.
        TicketCancelled
            If the ticket was voided.
        NotAWinningTicket
            If none of the ticket's bets win.
        AlreadyClaimed
            If the ticket is pending approval, paid, or lost a concurrent race.
        LedgerReconciliationError
            If the claim was paid but the ledger credit failed.
        """
        with self._locks.hold(ticket_id):
            credit: Optional[_PendingCredit] = None
            with self._session_factory.begin() as session:
                ticket = self._load_ticket(session, ticket_id)
                draw = ticket.draw
                if not draw_is_settled(draw):
                    raise DrawNotSettled(draw.id)
                if ticket.status == TicketStatus.CANCELLED:
                    raise TicketCancelled(ticket.id)

                configuration = self._configuration_provider(session)
                summary = self._engine.settle(ticket, draw, configuration)
                if not summary.is_winning:
                    raise NotAWinningTicket(ticket.id)
                if ticket.status in (
                    TicketStatus.PENDING_APPROVAL,
                    TicketStatus.CLAIMED,
                ) or self._has_claim_record(session, ticket.id):
                    raise AlreadyClaimed(ticket.id)

                current = ticket.status
                if current == TicketStatus.ACTIVE:
                    self._transition(
                        session,
                        ticket,
                        TicketStatus.ACTIVE,
                        TicketStatus.SETTLED_WIN,
                        ClaimAction.TICKET_SETTLED,
                        on_conflict=AlreadyClaimed,
                    )
                    current = TicketStatus.SETTLED_WIN

                ticket.claimer_name = _clean(claimer_name)
                ticket.claimer_phone = _clean(claimer_phone)
                ticket.claimer_address = _clean(claimer_address)

                notes = f"Claim for {summary.total_payout} requested"
                if ticket.claimer_name:
                    notes += f" by {ticket.claimer_name}"

                if self._policy.requires_approval(summary):
                    self._transition(
                        session,
                        ticket,
                        current,
                        TicketStatus.PENDING_APPROVAL,
                        ClaimAction.CLAIM_REQUESTED,
                        performed_by=requested_by,
                        notes=notes,
                        on_conflict=AlreadyClaimed,
                    )
                    outcome = ClaimOutcome(
                        ticket_id=ticket.id,
                        status=TicketStatus.PENDING_APPROVAL,
                        payout_amount=summary.total_payout,
                    )
                    logger.info(
                        "Claim for ticket %s awaiting approval (payout %s)",
                        ticket.ticket_number,
                        summary.total_payout,
                    )
                else:
                    self._transition(
                        session,
                        ticket,
                        current,
                        TicketStatus.CLAIMED,
                        ClaimAction.CLAIM_REQUESTED,
                        performed_by=requested_by,
                        notes=notes,
                        on_conflict=AlreadyClaimed,
                    )
                    record = self._create_claim_record(session, ticket, summary, None)
                    outcome = _claimed_outcome(ticket, record)
                    credit = _PendingCredit(record.id, ticket.id, record.payout_amount)

            if credit is not None:
                self._credit_ledger(credit)
            return outcome

    def approve_claim(self, ticket_id: int, *, approved_by: str) -> ClaimOutcome:
        """Approve a pending claim, record the payout and credit the ledger.

        Raises
        ------
        AlreadyClaimed
            If the ticket has already been paid.
        InvalidTransition
            If the ticket is not awaiting approval.
        """
        with self._locks.hold(ticket_id):
            with self._session_factory.begin() as session:
                ticket = self._load_ticket(session, ticket_id)
                if ticket.status == TicketStatus.CLAIMED or self._has_claim_record(
                    session, ticket.id
                ):
                    raise AlreadyClaimed(ticket.id)
                ensure_transition(
                    ticket.status, TicketStatus.CLAIMED, ticket_id=ticket.id
                )
                if ticket.status != TicketStatus.PENDING_APPROVAL:
                    raise InvalidTransition(
                        ticket.id, ticket.status.value, TicketStatus.CLAIMED.value
                    )

                draw = ticket.draw
                if not draw_is_settled(draw):  # pragma: no cover - draws are immutable
                    raise DrawNotSettled(draw.id)
                configuration = self._configuration_provider(session)
                summary = self._engine.settle(ticket, draw, configuration)
                if not summary.is_winning:
                    raise NotAWinningTicket(ticket.id)

                self._transition(
                    session,
                    ticket,
                    TicketStatus.PENDING_APPROVAL,
                    TicketStatus.CLAIMED,
                    ClaimAction.CLAIM_APPROVED,
                    performed_by=approved_by,
                    notes=f"Approved payout of {summary.total_payout}",
                    on_conflict=AlreadyClaimed,
                )
                record = self._create_claim_record(session, ticket, summary, approved_by)
                outcome = _claimed_outcome(ticket, record)
                credit = _PendingCredit(record.id, ticket.id, record.payout_amount)

            self._credit_ledger(credit)
            return outcome

    def reject_claim(
        self, ticket_id: int, *, rejected_by: str, reason: str
    ) -> TicketStatus:
        """Send a pending claim back to ``settled_win`` with ``reason`` on record."""
        if not reason or not reason.strip():
            raise ValueError("A rejection reason is required")
        with self._locks.hold(ticket_id):
            with self._session_factory.begin() as session:
                ticket = self._load_ticket(session, ticket_id)
                if ticket.status != TicketStatus.PENDING_APPROVAL:
                    raise InvalidTransition(
                        ticket.id, ticket.status.value, TicketStatus.SETTLED_WIN.value
                    )
                self._transition(
                    session,
                    ticket,
                    TicketStatus.PENDING_APPROVAL,
                    TicketStatus.SETTLED_WIN,
                    ClaimAction.CLAIM_REJECTED,
                    performed_by=rejected_by,
                    notes=reason.strip(),
                )
                ticket.claimer_name = None
                ticket.claimer_phone = None
                ticket.claimer_address = None
                logger.info("Claim for ticket %s rejected", ticket.ticket_number)
                return ticket.status

    def cancel_ticket(
        self, ticket_id: int, *, reason: str, cancelled_by: Optional[str] = None
    ) -> TicketStatus:
        """Void a ticket. A claimed ticket cannot be cancelled."""
        with self._locks.hold(ticket_id):
            with self._session_factory.begin() as session:
                ticket = self._load_ticket(session, ticket_id)
                self._transition(
                    session,
                    ticket,
                    ticket.status,
                    TicketStatus.CANCELLED,
                    ClaimAction.TICKET_CANCELLED,
                    performed_by=cancelled_by,
                    notes=reason,
                )
                ticket.cancelled_reason = reason
                return ticket.status

    # -------- read side --------
    def ticket_status(self, ticket_id: int) -> TicketStatus:
        """Re-read the status of a ticket, e.g. after a client-side timeout."""
        with self._session_factory() as session:
            status = session.scalar(select(Ticket.status).where(Ticket.id == ticket_id))
            if status is None:
                raise TicketNotFound(ticket_id)
            return status

    def pending_claims(self) -> list[Ticket]:
        """Return tickets awaiting approval, oldest request first."""
        with self._session_factory() as session:
            stmt = (
                select(Ticket)
                .where(Ticket.status == TicketStatus.PENDING_APPROVAL)
                .options(selectinload(Ticket.bets), selectinload(Ticket.draw))
                .order_by(Ticket.updated_at.asc(), Ticket.id.asc())
            )
            return list(session.scalars(stmt).all())

    def claim_stats(self) -> dict[str, int]:
        """Return counts of pending, approved, rejected and paid claims."""
        with self._session_factory() as session:
            pending = session.scalar(
                select(func.count(Ticket.id)).where(
                    Ticket.status == TicketStatus.PENDING_APPROVAL
                )
            )
            by_action = dict(
                session.execute(
                    select(ClaimAuditEntry.action, func.count(ClaimAuditEntry.id))
                    .where(
                        ClaimAuditEntry.action.in_(
                            [ClaimAction.CLAIM_APPROVED, ClaimAction.CLAIM_REJECTED]
                        )
                    )
                    .group_by(ClaimAuditEntry.action)
                ).all()
            )
            paid = session.scalar(select(func.count(ClaimRecord.id)))
        return {
            "pending": int(pending or 0),
            "approved": int(by_action.get(ClaimAction.CLAIM_APPROVED, 0)),
            "rejected": int(by_action.get(ClaimAction.CLAIM_REJECTED, 0)),
            "paid": int(paid or 0),
        }

    # -------- internals --------
    def _load_ticket(self, session: Session, ticket_id: int) -> Ticket:
        ticket = session.scalar(
            select(Ticket).where(Ticket.id == ticket_id).with_for_update()
        )
        if ticket is None:
            raise TicketNotFound(ticket_id)
        return ticket

    @staticmethod
    def _has_claim_record(session: Session, ticket_id: int) -> bool:
        return (
            session.scalar(
                select(ClaimRecord.id).where(ClaimRecord.ticket_id == ticket_id)
            )
            is not None
        )

    def _transition(
        self,
        session: Session,
        ticket: Ticket,
        expected: TicketStatus,
        target: TicketStatus,
        action: ClaimAction,
        *,
        performed_by: Optional[str] = None,
        notes: Optional[str] = None,
        on_conflict: Optional[Callable[[int], SettlementError]] = None,
    ) -> None:
        """Compare-and-set the ticket status and append an audit entry."""
        ensure_transition(expected, target, ticket_id=ticket.id)
        result = session.execute(
            update(Ticket)
            .where(Ticket.id == ticket.id, Ticket.status == expected)
            .values(status=target)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            if on_conflict is not None:
                raise on_conflict(ticket.id)
            raise InvalidTransition(ticket.id, expected.value, target.value)
        set_committed_value(ticket, "status", target)
        session.add(
            ClaimAuditEntry(
                ticket_id=ticket.id,
                action=action,
                old_status=expected,
                new_status=target,
                performed_by=performed_by,
                notes=notes,
            )
        )

    def _create_claim_record(
        self,
        session: Session,
        ticket: Ticket,
        summary: SettlementSummary,
        approved_by: Optional[str],
    ) -> ClaimRecord:
        record = ClaimRecord(
            ticket_id=ticket.id,
            payout_amount=summary.total_payout,
            claimed_at=datetime.now(timezone.utc),
            approved_by=approved_by,
            prize_configuration_id=summary.configuration_id,
            ledger_status=LedgerStatus.PENDING,
        )
        session.add(record)
        try:
            session.flush()
        except IntegrityError as exc:
            raise AlreadyClaimed(ticket.id) from exc
        logger.info(
            "Ticket %s claimed for %s", ticket.ticket_number, record.payout_amount
        )
        return record

    def _credit_ledger(self, credit: _PendingCredit) -> None:
        """Issue the single ledger credit for a committed claim."""
        try:
            reference = self._ledger.credit(credit.ticket_id, credit.amount)
        except Exception as exc:
            logger.critical(
                "Ledger credit failed for claimed ticket %s (amount %s); "
                "manual reconciliation required: %s",
                credit.ticket_id,
                credit.amount,
                exc,
            )
            self._record_ledger_result(
                credit, LedgerStatus.FAILED, None, ClaimAction.LEDGER_FAILED, str(exc)
            )
            raise LedgerReconciliationError(credit.ticket_id, credit.amount, exc) from exc

        self._record_ledger_result(
            credit,
            LedgerStatus.CREDITED,
            reference,
            ClaimAction.CLAIM_PAID,
            f"Ledger credited {credit.amount}",
        )

    def _record_ledger_result(
        self,
        credit: _PendingCredit,
        status: LedgerStatus,
        reference: Optional[str],
        action: ClaimAction,
        notes: str,
    ) -> None:
        with self._session_factory.begin() as session:
            record = session.get(ClaimRecord, credit.claim_record_id)
            record.ledger_status = status
            record.ledger_reference = reference
            session.add(
                ClaimAuditEntry(
                    ticket_id=credit.ticket_id,
                    action=action,
                    old_status=TicketStatus.CLAIMED,
                    new_status=TicketStatus.CLAIMED,
                    notes=notes,
                )
            )


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _claimed_outcome(ticket: Ticket, record: ClaimRecord) -> ClaimOutcome:
    return ClaimOutcome(
        ticket_id=ticket.id,
        status=TicketStatus.CLAIMED,
        payout_amount=record.payout_amount,
        claimed_at=record.claimed_at,
        claim_record_id=record.id,
    )


__all__ = ["ClaimOutcome", "ClaimStateMachine"]
