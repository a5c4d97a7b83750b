"""Pure settlement core: bet matching, prize calculation and reporting."""

from .engine import (
    BetSettlement,
    DerivedStatus,
    SettlementEngine,
    SettlementSummary,
    draw_is_settled,
)
from .matching import is_winning, normalize_bet_type, validate_digits
from .prize import WinType, compute_payout, is_double_pattern, multiplier_for
from .report import SettlementReport, SettlementReportAggregator

__all__ = [
    "BetSettlement",
    "DerivedStatus",
    "SettlementEngine",
    "SettlementReport",
    "SettlementReportAggregator",
    "SettlementSummary",
    "WinType",
    "compute_payout",
    "draw_is_settled",
    "is_double_pattern",
    "is_winning",
    "multiplier_for",
    "normalize_bet_type",
    "validate_digits",
]
