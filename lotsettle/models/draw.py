"""Database model for scheduled lottery draws."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, DateTime, Enum, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from .base import ID_TYPE, Base, utcnow
from .enums import DrawStatus, DrawTime, enum_values

if TYPE_CHECKING:
    from .ticket import Ticket


class Draw(Base):
    """One lottery event in a fixed daily slot."""

    __tablename__ = "draws"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    draw_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    """Calendar date of the draw."""

    draw_time: Mapped[DrawTime] = mapped_column(
        Enum(DrawTime, native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
    )
    """Daily slot the draw belongs to."""

    winning_number: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    """Fixed-width digit string; ``None`` until the result is submitted."""

    status: Mapped[DrawStatus] = mapped_column(
        Enum(DrawStatus, native_enum=False, length=16, values_callable=enum_values),
        nullable=False,
        default=DrawStatus.PENDING,
    )
    """Lifecycle state. Immutable once ``completed``."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    """Timestamp when the winning number was recorded."""

    tickets: Mapped[list["Ticket"]] = relationship(back_populates="draw")

    __table_args__ = (
        UniqueConstraint("draw_date", "draw_time", name="uq_draws_date_time"),
    )

    @property
    def is_completed(self) -> bool:
        """Whether the draw is completed and carries a winning number."""
        return self.status == DrawStatus.COMPLETED and self.winning_number is not None

    @classmethod
    def get_by_slot(
        cls, session: Session, draw_date: date, draw_time: DrawTime
    ) -> Optional["Draw"]:
        """Return the draw scheduled for ``draw_date`` and ``draw_time``."""
        return session.scalar(
            select(cls).where(cls.draw_date == draw_date, cls.draw_time == draw_time)
        )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<Draw(id={id}, date={date}, time={time}, status={status})>".format(
            id=self.id,
            date=self.draw_date,
            time=getattr(self.draw_time, "value", self.draw_time),
            status=getattr(self.status, "value", self.status),
        )


__all__ = ["Draw"]
