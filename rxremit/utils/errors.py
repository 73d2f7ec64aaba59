"""Custom exception classes for the NCPDP codec and ingestion pipeline."""
from typing import Optional


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        self.message = message
        self.code = code or "APP_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class EmptyInputError(AppError):
    """Raw transaction text is missing or blank."""

    def __init__(self, message: str = "Raw content is empty or null"):
        super().__init__(message=message, code="EMPTY_INPUT")


class ParseStructureError(AppError):
    """
    A segment occurrence has fewer fields than its contract minimum.

    Raised by a decoder without positional context; the parser attaches the
    1-based line number via ``at_line`` before surfacing it.
    """

    def __init__(
        self,
        segment_id: str,
        required_min: int,
        found: int,
        line_number: Optional[int] = None,
    ):
        self.segment_id = segment_id
        self.required_min = required_min
        self.found = found
        self.line_number = line_number

        message = f"Segment {segment_id} requires at least {required_min} fields, found {found}"
        if line_number is not None:
            message += f" (Line: {line_number})"

        super().__init__(
            message=message,
            code="PARSE_STRUCTURE",
            details={
                "segment_id": segment_id,
                "required_min": required_min,
                "found": found,
                "line_number": line_number,
            },
        )

    def at_line(self, line_number: int) -> "ParseStructureError":
        """Return a copy of this error carrying the line it occurred on."""
        return ParseStructureError(
            self.segment_id, self.required_min, self.found, line_number=line_number
        )


class IngestionFailure(AppError):
    """A batch input could not be read at all."""

    def __init__(self, message: str, file_path: Optional[str] = None):
        super().__init__(
            message=message,
            code="INGESTION_FAILURE",
            details={"file_path": file_path} if file_path else {},
        )


class MappingError(AppError):
    """A decoded transaction lacks a segment required to build a claim."""

    def __init__(self, message: str, segment_id: Optional[str] = None):
        super().__init__(
            message=message,
            code="MAPPING_ERROR",
            details={"segment_id": segment_id} if segment_id else {},
        )
