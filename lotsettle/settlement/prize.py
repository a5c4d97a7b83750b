"""Payout computation for winning bets."""

from __future__ import annotations

import enum
from decimal import Decimal
from itertools import combinations

from ..db.utils import q2
from ..errors import UnknownBetType
from ..models.enums import BetType
from ..models.prize_configuration import PrizeMultipliers
from .matching import BetLike, normalize_bet_type


class WinType(str, enum.Enum):
    """Which multiplier a winning bet is paid with."""

    STRAIGHT = "straight"
    RAMBOLITO_UNIQUE = "rambolito_unique"
    RAMBOLITO_DOUBLE = "rambolito_double"


def is_double_pattern(combination: str) -> bool:
    """Return ``True`` when any two digits of ``combination`` are equal.

    ``"223"`` and ``"222"`` are doubles; ``"123"`` is not.
    """
    return any(left == right for left, right in combinations(combination, 2))


def win_type_for(bet: BetLike) -> WinType:
    """Classify the multiplier bucket for ``bet``, assuming it is winning."""
    bet_type = normalize_bet_type(bet.bet_type)
    if bet_type is BetType.STANDARD:
        return WinType.STRAIGHT
    if bet_type is BetType.RAMBOLITO:
        if is_double_pattern(bet.combination):
            return WinType.RAMBOLITO_DOUBLE
        return WinType.RAMBOLITO_UNIQUE
    raise UnknownBetType(bet.bet_type)  # pragma: no cover - enum is closed


def multiplier_for(bet: BetLike, configuration: PrizeMultipliers) -> Decimal:
    """Return the multiplier from ``configuration`` that applies to ``bet``."""
    win_type = win_type_for(bet)
    if win_type is WinType.STRAIGHT:
        return configuration.standard
    if win_type is WinType.RAMBOLITO_DOUBLE:
        return configuration.rambolito_double
    return configuration.rambolito_unique


def compute_payout(bet, configuration: PrizeMultipliers) -> Decimal:
    """Compute the payout of a bet already known to be winning.

    Parameters
    ----------
    bet : Bet
        Winning bet providing ``bet_type``, ``combination`` and ``amount``.
    configuration : PrizeMultipliers
        Snapshot of the multipliers in effect.

    Returns
    -------
    Decimal
        ``bet.amount`` times the applicable multiplier, rounded to cents.

    Raises
    ------
    UnknownBetType
        If the bet type is not supported.
    """
    amount = Decimal(str(bet.amount))
    return q2(amount * multiplier_for(bet, configuration))


__all__ = [
    "WinType",
    "compute_payout",
    "is_double_pattern",
    "multiplier_for",
    "win_type_for",
]
