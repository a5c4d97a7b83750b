"""Database models owned by the claim state machine."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    DateTime,
    Enum,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import ID_TYPE, MONEY, Base, utcnow
from .enums import ClaimAction, LedgerStatus, TicketStatus, enum_values

if TYPE_CHECKING:
    from .ticket import Ticket


class ClaimRecord(Base):
    """The single payout record of a claimed ticket."""

    __tablename__ = "claim_records"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)

    ticket_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("tickets.id", ondelete="RESTRICT"), nullable=False
    )
    """At most one record per ticket, enforced by a unique constraint."""

    payout_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    """Recomputed total payout at the moment of claiming."""

    claimed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    approved_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """Approver when the claim went through manual approval."""

    prize_configuration_id: Mapped[Optional[int]] = mapped_column(
        ID_TYPE,
        ForeignKey("prize_configurations.id", ondelete="SET NULL"),
        nullable=True,
    )
    """Prize configuration snapshot used to compute ``payout_amount``."""

    ledger_status: Mapped[LedgerStatus] = mapped_column(
        Enum(LedgerStatus, native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
        default=LedgerStatus.PENDING,
    )
    ledger_reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    ticket: Mapped["Ticket"] = relationship(back_populates="claim_record")

    __table_args__ = (
        UniqueConstraint("ticket_id", name="uq_claim_records_ticket_id"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<ClaimRecord(id={id}, ticket_id={ticket}, payout={payout})>".format(
            id=self.id,
            ticket=self.ticket_id,
            payout=self.payout_amount,
        )


class ClaimAuditEntry(Base):
    """Append-only trail of claim lifecycle actions."""

    __tablename__ = "claim_audit_entries"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    ticket_id: Mapped[int] = mapped_column(
        ID_TYPE, ForeignKey("tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    action: Mapped[ClaimAction] = mapped_column(
        Enum(ClaimAction, native_enum=False, length=32, values_callable=enum_values),
        nullable=False,
    )
    old_status: Mapped[Optional[TicketStatus]] = mapped_column(
        Enum(TicketStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=True,
    )
    new_status: Mapped[Optional[TicketStatus]] = mapped_column(
        Enum(TicketStatus, native_enum=False, length=20, values_callable=enum_values),
        nullable=True,
    )
    performed_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    ticket: Mapped["Ticket"] = relationship(back_populates="audit_entries")

    __table_args__ = (
        Index("ix_claim_audit_entries_action", "action"),
    )


__all__ = ["ClaimRecord", "ClaimAuditEntry"]
