"""Parsing of single ``bytes`` Range headers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import RangeNotSatisfiableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, size: int) -> str:
        return f"bytes {self.start}-{self.end}/{size}"


def parse_range(range_header: Optional[str], size: int) -> Optional[ByteRange]:
    """Return the inclusive byte window requested by ``range_header``.

    ``None`` means the header is absent or should be ignored (unknown unit,
    malformed syntax, several ranges) and the full file is served. Ranges
    that cannot be satisfied against ``size`` raise
    :class:`RangeNotSatisfiableError`. An ``end`` past the last byte is
    clamped to it and ``bytes=-N`` selects the last ``N`` bytes.
    """
    if not range_header:
        return None

    units, sep, ranges = range_header.partition("=")
    if not sep or units.strip().lower() != "bytes":
        logger.debug("Ignoring Range header with unsupported unit: %s", range_header)
        return None

    range_set = ranges.strip()
    if "," in range_set:
        logger.debug("Ignoring multi-range request: %s", range_header)
        return None

    start_str, sep, end_str = range_set.partition("-")
    start_str, end_str = start_str.strip(), end_str.strip()
    if not sep or not _is_digits(start_str, allow_empty=True) or not _is_digits(end_str, allow_empty=True):
        logger.debug("Ignoring malformed Range header: %s", range_header)
        return None

    if not start_str:
        if not end_str:
            return None
        suffix_length = int(end_str)
        if suffix_length == 0 or size == 0:
            raise RangeNotSatisfiableError(size)
        return ByteRange(max(size - suffix_length, 0), size - 1)

    start = int(start_str)
    end = int(end_str) if end_str else size - 1
    if start >= size or start > end:
        raise RangeNotSatisfiableError(size)
    return ByteRange(start, min(end, size - 1))


def _is_digits(value: str, *, allow_empty: bool = False) -> bool:
    if not value:
        return allow_empty
    return value.isascii() and value.isdigit()
