"""Split raw NCPDP D.0 text into tagged segment lines."""
from typing import List, NamedTuple, Optional

from rxremit.utils.errors import EmptyInputError

SEGMENT_DELIMITER = "\n"
FIELD_DELIMITER = "*"
COMMENT_PREFIX = "#"


class SegmentLine(NamedTuple):
    """One retained line: its 1-based position in the input, tag and fields."""

    line_number: int
    segment_id: str
    fields: List[str]


def extract_segment_id(line: str) -> str:
    """Return the text before the first ``*``, or the whole line when there is none."""
    return line.split(FIELD_DELIMITER, 1)[0]


def split_fields(line: str) -> List[str]:
    """
    Split a segment line into fields, tag included at index 0.

    Trailing empty fields are kept: ``"AM15*X*"`` gives ``["AM15", "X", ""]``.
    """
    return line.split(FIELD_DELIMITER)


def tokenize(raw_content: Optional[str]) -> List[SegmentLine]:
    """
    Tokenize a transaction into segment lines.

    Lines are trimmed; blank lines and lines starting with ``#`` are skipped
    but still count towards line numbering.

    Raises:
        EmptyInputError: raw_content is None or whitespace only
    """
    if raw_content is None or not raw_content.strip():
        raise EmptyInputError()

    segments = []
    for line_number, line in enumerate(raw_content.split(SEGMENT_DELIMITER), start=1):
        line = line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        segments.append(SegmentLine(line_number, extract_segment_id(line), split_fields(line)))

    return segments
