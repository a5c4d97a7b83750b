"""Versioned prize multipliers supplied by the configuration provider."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Numeric, String, select
from sqlalchemy.orm import Mapped, Session, mapped_column

from ..errors import PrizeConfigurationMissing
from .base import ID_TYPE, Base, utcnow


@dataclass(frozen=True)
class PrizeMultipliers:
    """Read-only snapshot of the multipliers in effect for one settlement.

    Attributes
    ----------
    standard : Decimal
        Multiplier for exact-order wins.
    rambolito_unique : Decimal
        Multiplier for rambolito wins on an all-distinct combination.
    rambolito_double : Decimal
        Multiplier for rambolito wins on a combination with a repeated digit.
    configuration_id : Optional[int]
        Row the snapshot was taken from, when it came from the database.
    """

    standard: Decimal
    rambolito_unique: Decimal
    rambolito_double: Decimal
    configuration_id: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("standard", "rambolito_unique", "rambolito_double"):
            value = Decimal(str(getattr(self, name)))
            if value < 0:
                raise ValueError(f"{name} multiplier must not be negative")
            object.__setattr__(self, name, value)


class PrizeConfiguration(Base):
    """One version of the prize multipliers; the newest row is in effect."""

    __tablename__ = "prize_configurations"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)

    standard: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    rambolito_unique: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    rambolito_double: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    created_by: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    """Operator who recorded this version."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        CheckConstraint(
            "standard >= 0 AND rambolito_unique >= 0 AND rambolito_double >= 0",
            name="non_negative_multipliers",
        ),
    )

    def snapshot(self) -> PrizeMultipliers:
        """Return an immutable copy of the multipliers in this row."""
        return PrizeMultipliers(
            standard=Decimal(str(self.standard)),
            rambolito_unique=Decimal(str(self.rambolito_unique)),
            rambolito_double=Decimal(str(self.rambolito_double)),
            configuration_id=self.id,
        )

    @classmethod
    def latest(cls, session: Session) -> Optional["PrizeConfiguration"]:
        """Return the most recently recorded configuration."""
        stmt = select(cls).order_by(cls.created_at.desc(), cls.id.desc())
        return session.scalars(stmt).first()

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return "<PrizeConfiguration(id={id}, standard={s}, unique={u}, double={d})>".format(
            id=self.id,
            s=self.standard,
            u=self.rambolito_unique,
            d=self.rambolito_double,
        )


def current_prize_multipliers(session: Session) -> PrizeMultipliers:
    """Return a fresh snapshot of the configuration in effect.

    Raises
    ------
    PrizeConfigurationMissing
        If no configuration has been recorded.
    """
    configuration = PrizeConfiguration.latest(session)
    if configuration is None:
        raise PrizeConfigurationMissing()
    return configuration.snapshot()


__all__ = ["PrizeConfiguration", "PrizeMultipliers", "current_prize_multipliers"]
