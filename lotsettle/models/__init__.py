from .base import Base

# import models so Alembic/autoloaders can discover mappers
from .enums import (  # noqa: F401
    BetType,
    ClaimAction,
    DrawStatus,
    DrawTime,
    LedgerStatus,
    TicketStatus,
)
from .draw import Draw  # noqa: F401
from .ticket import Bet, Ticket  # noqa: F401
from .prize_configuration import (  # noqa: F401
    PrizeConfiguration,
    PrizeMultipliers,
    current_prize_multipliers,
)
from .claim import ClaimAuditEntry, ClaimRecord  # noqa: F401

__all__ = [
    "Base",
    "BetType",
    "ClaimAction",
    "DrawStatus",
    "DrawTime",
    "LedgerStatus",
    "TicketStatus",
    "Draw",
    "Bet",
    "Ticket",
    "PrizeConfiguration",
    "PrizeMultipliers",
    "current_prize_multipliers",
    "ClaimAuditEntry",
    "ClaimRecord",
]
