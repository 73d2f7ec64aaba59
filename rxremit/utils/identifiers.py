"""
Identifier normalization for X12 835 output.

Pharmacy claims carry free-form carrier and pharmacy ids ("bcbs-il",
"Pharmacy 001"). 835 consumers only accept:

- Payer/payee ids: A-Z, 0-9 and underscore
- ISA / GS sender ids: A-Z and 0-9, at most 15 characters
"""
import re
import time
from typing import Optional

from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

ISA_SENDER_ID_MAX_LENGTH = 15

_SEPARATORS = re.compile(r"[-\s.]")
_DISALLOWED_ID_CHARS = re.compile(r"[^A-Z0-9_]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")
_PAYER_PAYEE_ID = re.compile(r"[A-Z0-9_]+")
_ISA_SENDER_ID = re.compile(r"[A-Z0-9]+")


def normalize_payer_payee_id(raw_id: Optional[str]) -> Optional[str]:
    """
    Normalize a payer or payee id.

    Upper-cases, turns hyphens, whitespace and dots into underscores, drops
    every other character outside A-Z/0-9/_, then collapses and trims
    underscores. ``None`` and empty strings are returned unchanged.
    """
    if not raw_id:
        return raw_id

    normalized = _SEPARATORS.sub("_", raw_id.upper())
    normalized = _DISALLOWED_ID_CHARS.sub("", normalized)
    normalized = _REPEATED_UNDERSCORES.sub("_", normalized)
    normalized = normalized.strip("_")

    if normalized != raw_id:
        logger.debug("Normalized identifier", raw_id=raw_id, normalized=normalized)

    return normalized


def generate_isa_sender_id(payer_id: Optional[str]) -> str:
    """Derive an ISA sender id (alphanumeric, max 15 chars) from a payer id."""
    if not payer_id:
        return "DEFAULT"

    sender_id = normalize_payer_payee_id(payer_id).replace("_", "")
    sender_id = sender_id[:ISA_SENDER_ID_MAX_LENGTH]

    if not sender_id:
        sender_id = f"PAYER{int(time.time() * 1000) % 10000}"

    logger.debug("Generated ISA sender id", payer_id=payer_id, sender_id=sender_id)
    return sender_id


def generate_gs_application_sender_id(payer_id: Optional[str]) -> str:
    """GS02 follows the ISA sender id rules."""
    return generate_isa_sender_id(payer_id)


def is_valid_payer_payee_id(value: Optional[str]) -> bool:
    return bool(value) and _PAYER_PAYEE_ID.fullmatch(value) is not None


def is_valid_isa_sender_id(value: Optional[str]) -> bool:
    return (
        bool(value)
        and len(value) <= ISA_SENDER_ID_MAX_LENGTH
        and _ISA_SENDER_ID.fullmatch(value) is not None
    )
