"""Win/lose decision for a single bet against a draw's winning number."""

from __future__ import annotations

from typing import Optional, Protocol, Union

from ..config import settings
from ..errors import InvalidCombination, InvalidState, UnknownBetType
from ..models.enums import BetType

# Spellings accepted from older sales records.
_BET_TYPE_ALIASES = {
    "straight": BetType.STANDARD,
}


class BetLike(Protocol):
    bet_type: Union[str, BetType]
    combination: str


def normalize_bet_type(value: Union[str, BetType, None]) -> BetType:
    """Map a raw bet type onto :class:`BetType`.

    Raises
    ------
    UnknownBetType
        If ``value`` is not one of the supported bet types.
    """
    if isinstance(value, BetType):
        return value
    if not isinstance(value, str):
        raise UnknownBetType(value)
    key = value.strip().lower()
    if key in _BET_TYPE_ALIASES:
        return _BET_TYPE_ALIASES[key]
    try:
        return BetType(key)
    except ValueError as exc:
        raise UnknownBetType(value) from exc


def validate_digits(value: object, digits: Optional[int] = None) -> str:
    """Return ``value`` if it is a digit string of the configured width."""
    width = digits if digits is not None else settings.DRAW_DIGITS
    if not isinstance(value, str) or len(value) != width or not value.isdigit():
        raise InvalidCombination(value, width)
    # str.isdigit() also accepts non-ASCII digits such as superscripts.
    if not value.isascii():
        raise InvalidCombination(value, width)
    return value


def is_winning(
    bet: BetLike,
    winning_number: Optional[str],
    *,
    digits: Optional[int] = None,
) -> bool:
    """Decide whether ``bet`` wins against ``winning_number``.

    Parameters
    ----------
    bet : BetLike
        Bet providing ``bet_type`` and ``combination``.
    winning_number : Optional[str]
        Draw result. ``None`` means the draw has not been settled.
    digits : Optional[int], default: None
        Expected width of both strings. Defaults to ``DRAW_DIGITS``.

    Returns
    -------
    bool
        ``True`` for a standard bet whose combination equals the winning
        number exactly, or a rambolito bet whose digits are a permutation of
        it.

    Raises
    ------
    InvalidState
        If ``winning_number`` is ``None``.
    InvalidCombination
        If either string is not a digit string of the expected width.
    UnknownBetType
        If the bet type is not supported.
    """
    if winning_number is None:
        raise InvalidState("Cannot match a bet against a draw without a winning number")

    bet_type = normalize_bet_type(bet.bet_type)
    combination = validate_digits(bet.combination, digits)
    winning = validate_digits(winning_number, digits)

    if bet_type is BetType.STANDARD:
        return combination == winning
    if bet_type is BetType.RAMBOLITO:
        return sorted(combination) == sorted(winning)
    raise UnknownBetType(bet.bet_type)  # pragma: no cover - enum is closed


__all__ = ["BetLike", "is_winning", "normalize_bet_type", "validate_digits"]
