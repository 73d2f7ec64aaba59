"""
Parser for NCPDP D.0 pharmacy claim transactions.

Format:
- Segment separator: newline
- Field delimiter: ``*``
- Transaction start: ``STX*D0*``
- Transaction end: ``SE*{count}*{id}*``

Example:
    >>> parser = NcpdpD0Parser()
    >>> tx = parser.parse("STX*D0*\\nAM01*1234567*PHARMACY001*20241014*143025*1*\\nSE*15*1234567*")
    >>> tx.header.pharmacy_id
    'PHARMACY001'

Decoding is a single synchronous pass holding no state between calls, so one
parser instance can be shared across threads.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from rxremit.config.settings import SUPPORTED_NCPDP_VERSION, get_settings
from rxremit.models.enums import DecodeErrorKind, SegmentId
from rxremit.models.ncpdp import NcpdpTransaction
from rxremit.services.ncpdp.decoders import SEGMENT_RULES
from rxremit.services.ncpdp.notices import FieldCoercionNotice, UnknownSegmentNotice
from rxremit.services.ncpdp.tokenizer import SegmentLine, tokenize
from rxremit.utils.errors import AppError, EmptyInputError, ParseStructureError
from rxremit.utils.logger import get_logger

logger = get_logger(__name__)


class DecodeError(BaseModel):
    """Tagged decode failure returned by ``NcpdpD0Parser.parse_safe``."""

    model_config = ConfigDict(frozen=True)

    kind: DecodeErrorKind
    message: str
    segment_id: Optional[str] = None
    line_number: Optional[int] = None

    @classmethod
    def from_exception(cls, exc: AppError) -> "DecodeError":
        if isinstance(exc, ParseStructureError):
            return cls(
                kind=DecodeErrorKind.PARSE_STRUCTURE,
                message=exc.message,
                segment_id=exc.segment_id,
                line_number=exc.line_number,
            )
        return cls(kind=DecodeErrorKind.EMPTY_INPUT, message=exc.message)


class ParseOutcome(BaseModel):
    """Either a decoded transaction or the error that stopped decoding."""

    model_config = ConfigDict(frozen=True)

    transaction: Optional[NcpdpTransaction] = None
    error: Optional[DecodeError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TransactionDraft:
    """
    Optional sub-records collected while decoding one document.

    Later occurrences of a segment replace earlier ones. The draft is private
    to a single ``parse`` call and only ever leaves it as a frozen
    ``NcpdpTransaction``.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self.notices: List[str] = []

    def set(self, target: str, value: Any) -> None:
        self._values[target] = value

    def get(self, target: str) -> Any:
        return self._values.get(target)

    def finalize(self, raw_content: str) -> NcpdpTransaction:
        return NcpdpTransaction(
            raw_content=raw_content,
            notices=tuple(self.notices),
            **self._values,
        )


class NcpdpD0Parser:
    """Decodes raw NCPDP D.0 text into an ``NcpdpTransaction``."""

    def __init__(self, strict_version: Optional[bool] = None):
        """
        Args:
            strict_version: Record a notice when STX carries a version other
                than D0. Defaults to the NCPDP_STRICT_VERSION setting.
        """
        if strict_version is None:
            strict_version = get_settings().strict_version
        self.strict_version = strict_version

    def parse(self, raw_content: Optional[str]) -> NcpdpTransaction:
        """
        Parse a complete transaction.

        Raises:
            EmptyInputError: raw_content is None or blank
            ParseStructureError: a segment is shorter than its minimum field
                count; carries the segment id and 1-based line number
        """
        segments = tokenize(raw_content)
        logger.debug("Parsing NCPDP transaction", raw_length=len(raw_content), segment_count=len(segments))

        draft = TransactionDraft()
        for segment in segments:
            self._apply_segment(segment, draft)

        if self.strict_version:
            self._check_version(draft)

        transaction = draft.finalize(raw_content)
        logger.debug("Parsed NCPDP transaction", notices=len(transaction.notices))
        return transaction

    def parse_safe(self, raw_content: Optional[str]) -> ParseOutcome:
        """Parse without raising for decode failures; see ``parse``."""
        try:
            return ParseOutcome(transaction=self.parse(raw_content))
        except (EmptyInputError, ParseStructureError) as e:
            return ParseOutcome(error=DecodeError.from_exception(e))

    def _apply_segment(self, segment: SegmentLine, draft: TransactionDraft) -> None:
        segment_id = SegmentId.lookup(segment.segment_id)
        if segment_id is None:
            notice = UnknownSegmentNotice(segment_id=segment.segment_id, line_number=segment.line_number)
            logger.debug(
                "Skipping unknown segment",
                segment_id=segment.segment_id,
                line_number=segment.line_number,
            )
            draft.notices.append(str(notice))
            return

        rule = SEGMENT_RULES[segment_id]
        warnings: List = []
        try:
            value = rule.decode(segment.fields, warnings)
        except ParseStructureError as e:
            error = e.at_line(segment.line_number)
            logger.error(
                "Failed to parse segment",
                segment_id=error.segment_id,
                line_number=error.line_number,
                required_min=error.required_min,
                found=error.found,
            )
            raise error from e

        for warning in warnings:
            if isinstance(warning, FieldCoercionNotice):
                warning = warning.model_copy(
                    update={"segment_id": segment_id.value, "line_number": segment.line_number}
                )
            draft.notices.append(str(warning))

        if rule.target is not None:
            draft.set(rule.target, value)

    def _check_version(self, draft: TransactionDraft) -> None:
        version = draft.get("version")
        if version != SUPPORTED_NCPDP_VERSION:
            logger.warning("Unsupported NCPDP version", version=version)
            draft.notices.append(f"Unsupported NCPDP version {version!r}; expected {SUPPORTED_NCPDP_VERSION}")
