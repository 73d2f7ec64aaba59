"""Read multi-transaction NCPDP files and pull indexing metadata from raw text."""
import os
import re
from datetime import date, datetime
from typing import List, Optional

from rxremit.models.ingestion import RawClaimMetadata
from rxremit.utils.errors import IngestionFailure
from rxremit.utils.logger import get_logger

logger = get_logger(__name__)

SERVICE_DATE_FORMAT = "%Y%m%d"

_PAYER = re.compile(r"AM07\*([^*]+)\*")
_PHARMACY = re.compile(r"AM01\*[^*]*\*([^*]+)\*")
_PATIENT = re.compile(r"AM07\*[^*]*\*[^*]*\*([^*]+)\*")
_SERVICE_DATE = re.compile(r"AM13\*([^*]+)\*")
_PRESCRIPTION = re.compile(r"AM13\*[^*]*\*([^*]+)\*")


def split_transactions(content: str) -> List[str]:
    """
    Split file content into raw transactions (STX through SE or ANC1).

    Blank and ``#`` lines between transactions are skipped. Each returned
    transaction holds its trimmed lines joined with ``\\n``, with a trailing
    newline. Content after the last terminator that never closes is dropped.
    """
    transactions = []
    current: List[str] = []
    in_transaction = False

    for line in content.splitlines():
        line = line.strip()

        if not in_transaction and (not line or line.startswith("#")):
            continue

        if line.startswith("STX"):
            current = []
            in_transaction = True

        if in_transaction:
            current.append(line)

        if line.startswith("SE") or line.startswith("ANC1"):
            if in_transaction:
                transactions.append("\n".join(current) + "\n")
                in_transaction = False

    if in_transaction:
        logger.warning("Dropping unterminated transaction at end of input", lines=len(current))

    return transactions


def read_transactions_from_file(file_path: str) -> List[str]:
    """
    Read and split an NCPDP claims file.

    Raises:
        IngestionFailure: the file is missing, unreadable or cannot be decoded
    """
    if not os.path.exists(file_path):
        logger.error("File not found", file_path=file_path)
        raise IngestionFailure(f"File not found: {file_path}", file_path=file_path)

    if os.path.isdir(file_path) or not os.access(file_path, os.R_OK):
        logger.error("File not readable", file_path=file_path)
        raise IngestionFailure(f"File not readable: {file_path}", file_path=file_path)

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to read NCPDP file", file_path=file_path, error=str(e))
        raise IngestionFailure(f"Failed to read file: {e}", file_path=file_path) from e

    return split_transactions(content)


def _first_group(pattern: re.Pattern, raw_content: str) -> Optional[str]:
    match = pattern.search(raw_content)
    if match:
        return match.group(1).strip() or None
    return None


def _parse_service_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value, SERVICE_DATE_FORMAT).date()
    except ValueError:
        logger.debug("Failed to parse service date", value=value)
        return None


def extract_metadata(raw_content: str) -> RawClaimMetadata:
    """Pull payer, pharmacy, patient, Rx number and service date for indexing."""
    return RawClaimMetadata(
        payer_id=_first_group(_PAYER, raw_content) or "UNKNOWN",
        pharmacy_id=_first_group(_PHARMACY, raw_content),
        patient_id=_first_group(_PATIENT, raw_content),
        prescription_number=_first_group(_PRESCRIPTION, raw_content),
        service_date=_parse_service_date(_first_group(_SERVICE_DATE, raw_content)),
    )
