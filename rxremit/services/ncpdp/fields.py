"""
Positional field access and lenient numeric coercion.

Coercion never raises: a malformed number decodes as ``None``, is logged,
and a ``FieldCoercionNotice`` is appended to the caller's warnings list.
Only a field-count shortfall (``require_min_fields``) is fatal.
"""
import re
from decimal import Decimal
from typing import Dict, List, Optional

from rxremit.services.ncpdp.notices import FieldCoercionNotice
from rxremit.utils.decimal_utils import parse_decimal
from rxremit.utils.errors import ParseStructureError
from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

_INTEGER = re.compile(r"^[+-]?[0-9]+$")
INT32_MIN = -(2 ** 31)
INT32_MAX = 2 ** 31 - 1


def get_field(fields: List[str], index: int) -> Optional[str]:
    """Return the trimmed field at ``index``; None when out of range or blank."""
    if 0 <= index < len(fields):
        value = fields[index].strip()
        return value or None
    return None


def require_min_fields(fields: List[str], min_fields: int, segment_id: str) -> None:
    """
    Raises:
        ParseStructureError: fewer than ``min_fields`` fields (tag included)
    """
    if len(fields) < min_fields:
        raise ParseStructureError(segment_id, min_fields, len(fields))


def _coercion_failed(value: str, target_type: str, warnings: Optional[List]) -> None:
    if warnings is not None:
        warnings.append(FieldCoercionNotice(value=value, target_type=target_type))


def to_integer(value: Optional[str], warnings: Optional[List] = None) -> Optional[int]:
    """Parse a 32-bit signed integer field."""
    if value is None or value == "":
        return None
    if _INTEGER.match(value):
        number = int(value)
        if INT32_MIN <= number <= INT32_MAX:
            return number
    logger.warning("Failed to parse integer", value=value)
    _coercion_failed(value, "integer", warnings)
    return None


def to_decimal(value: Optional[str], warnings: Optional[List] = None) -> Optional[Decimal]:
    """Parse a decimal field; digit-group underscores are not valid on the wire."""
    if value is None or value == "":
        return None
    result = parse_decimal(value)  # logs its own failure
    if result is None:
        _coercion_failed(value, "decimal", warnings)
    return result


def parse_amount_pairs(fields: List[str], warnings: Optional[List] = None) -> Dict[str, Optional[Decimal]]:
    """
    Read alternating amount-code / amount fields starting at index 1.

    A trailing code with no amount field after it is dropped, as is a pair
    whose code is blank. A repeated code keeps its last amount.
    """
    amounts: Dict[str, Optional[Decimal]] = {}
    for index in range(1, len(fields) - 1, 2):
        code = get_field(fields, index)
        amount = to_decimal(get_field(fields, index + 1), warnings)
        if code is None:
            continue
        amounts[code] = amount
    return amounts
