"""Database models for sold tickets and their bets."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    select,
)
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import ID_TYPE, MONEY, Base, utcnow
from .enums import TicketStatus, enum_values

if TYPE_CHECKING:
    from .claim import ClaimAuditEntry, ClaimRecord
    from .draw import Draw


class Ticket(Base):
    """A sold ticket referencing exactly one draw."""

    __tablename__ = "tickets"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    ticket_number: Mapped[str] = mapped_column(String(32), nullable=False)
    """Unique printed identifier; immutable after sale."""

    agent_id: Mapped[int] = mapped_column(ID_TYPE, nullable=False, index=True)
    """Agent who sold the ticket."""

    draw_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("draws.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    total_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    """Sum of the bet amounts."""

    status: Mapped[TicketStatus] = mapped_column(
        Enum(TicketStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=False,
        default=TicketStatus.ACTIVE,
    )
    """Claim lifecycle state; only changed by the claim state machine."""

    claimer_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    claimer_phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    claimer_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    cancelled_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    draw: Mapped["Draw"] = relationship(back_populates="tickets")

    bets: Mapped[list["Bet"]] = relationship(
        back_populates="ticket",
        order_by="Bet.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    """Bets in the order they were placed."""

    claim_record: Mapped[Optional["ClaimRecord"]] = relationship(
        back_populates="ticket", uselist=False
    )
    audit_entries: Mapped[list["ClaimAuditEntry"]] = relationship(
        back_populates="ticket",
        order_by="ClaimAuditEntry.id",
    )

    __table_args__ = (
        UniqueConstraint("ticket_number", name="uq_tickets_ticket_number"),
        Index("ix_tickets_status", "status"),
    )

    def __init__(
        self,
        *,
        ticket_number: str,
        agent_id: int,
        draw: Optional["Draw"] = None,
        draw_id: Optional[int] = None,
        bets: Optional[list["Bet"]] = None,
        total_amount: Optional[Decimal] = None,
        status: TicketStatus = TicketStatus.ACTIVE,
        created_at: Optional[datetime] = None,
    ) -> None:
        self.ticket_number = ticket_number
        self.agent_id = agent_id
        if draw is not None:
            self.draw = draw
        if draw_id is not None:
            self.draw_id = draw_id
        if bets is not None:
            self.bets.extend(bets)
        if total_amount is None:
            total_amount = sum((Decimal(str(b.amount)) for b in self.bets), Decimal("0"))
        self.total_amount = total_amount
        self.status = status
        if created_at is not None:
            self.created_at = created_at

    @classmethod
    def get_by_ticket_number(
        cls, session: Session, ticket_number: str
    ) -> Optional["Ticket"]:
        """Return the ticket printed with ``ticket_number`` if it exists."""
        return session.scalar(select(cls).where(cls.ticket_number == ticket_number))

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Ticket(id={id}, number={number}, draw_id={draw}, status={status})>".format(
            id=self.id,
            number=self.ticket_number,
            draw=self.draw_id,
            status=getattr(self.status, "value", self.status),
        )


class Bet(Base):
    """A single combination wagered on a ticket."""

    __tablename__ = "bets"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)

    ticket_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )

    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Zero-based order of the bet on its ticket."""

    bet_type: Mapped[str] = mapped_column(String(20), nullable=False)
    """Raw bet type; values outside :class:`BetType` surface as errors at settlement."""

    combination: Mapped[str] = mapped_column(String(16), nullable=False)
    """Fixed-width digit string."""

    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    ticket: Mapped["Ticket"] = relationship(back_populates="bets")

    __table_args__ = (
        CheckConstraint("amount > 0", name="positive_amount"),
    )

    def __init__(
        self,
        *,
        bet_type: str,
        combination: str,
        amount: Decimal,
        position: Optional[int] = None,
    ) -> None:
        self.bet_type = getattr(bet_type, "value", bet_type)
        self.combination = combination
        self.amount = Decimal(str(amount))
        if position is not None:
            self.position = position

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Bet(id={id}, type={type}, combination={combo}, amount={amount})>".format(
            id=self.id,
            type=self.bet_type,
            combo=self.combination,
            amount=self.amount,
        )


__all__ = ["Ticket", "Bet"]
