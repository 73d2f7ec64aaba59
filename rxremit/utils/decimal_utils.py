"""Decimal helpers for claim amounts."""
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

ZERO = Decimal("0")

# Plain fixed-point notation only: no exponent, no digit separators
_PLAIN_DECIMAL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")


def parse_decimal(value: Optional[Union[str, int, Decimal]], precision: Optional[Decimal] = None) -> Optional[Decimal]:
    """
    Parse a value to Decimal, or None when it is not a finite number.

    Strings are stripped first and must be plain fixed-point text. Exponent
    notation and digit-group underscores, which ``Decimal`` itself accepts,
    are rejected: neither appears in claim amounts, and an exponent lets a
    short field stand for an arbitrarily large number.

    Example:
        >>> parse_decimal("123.456", precision=Decimal("0.01"))
        Decimal('123.46')
    """
    if value is None:
        return None

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int) and not isinstance(value, bool):
        result = Decimal(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _PLAIN_DECIMAL.fullmatch(text) is None:
            logger.warning("Failed to parse decimal string", value=text)
            return None
        result = Decimal(text)
    else:
        logger.warning("Unsupported type for decimal parsing", type=type(value).__name__)
        return None

    if not result.is_finite():
        logger.warning("Rejected non-finite decimal", value=str(value))
        return None

    if precision is not None:
        result = result.quantize(precision, rounding=ROUND_HALF_UP)
    return result


def sum_present(values: Iterable[Optional[Decimal]]) -> Decimal:
    """Sum the amounts that are present, treating absent ones as zero."""
    total = ZERO
    for value in values:
        if value is not None:
            total += value
    return total


def clamp_non_negative(value: Decimal) -> Decimal:
    return value if value > ZERO else ZERO
