"""Non-fatal conditions reported while decoding a transaction."""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class UnknownSegmentNotice(BaseModel):
    """A segment tag the decoder does not recognize; the line is skipped."""

    model_config = ConfigDict(frozen=True)

    segment_id: str
    line_number: int

    def __str__(self) -> str:
        return f"Skipped unknown segment {self.segment_id!r} on line {self.line_number}"


class FieldCoercionNotice(BaseModel):
    """A numeric field that failed to parse and was decoded as absent."""

    model_config = ConfigDict(frozen=True)

    value: str
    target_type: str
    segment_id: Optional[str] = None
    line_number: Optional[int] = None

    def __str__(self) -> str:
        where = ""
        if self.segment_id:
            where = f" in {self.segment_id}"
            if self.line_number is not None:
                where += f" on line {self.line_number}"
        return f"Could not parse {self.value!r} as {self.target_type}{where}"
