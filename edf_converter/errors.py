"""Error taxonomy for EDF decoding and conversion.

Every failure raised while converting one file is an :class:`EdfError`.
The batch driver catches exactly this base class, records ``str(error)``
in the status log and moves on to the next file.
"""

from __future__ import annotations


class EdfError(Exception):
    """Base class. ``context`` is the human-readable detail (field, offset, file)."""

    kind = "EDF error"

    def __init__(self, context: str):
        super().__init__(context)
        self.context = context

    def __str__(self) -> str:
        return f"{self.kind}: {self.context}"


class IoError(EdfError):
    """Stream truncated or unreadable."""

    kind = "Can't perform I/O operation"


class ParseError(EdfError, ValueError):
    """Text field expected to be numeric (or ASCII) is not."""

    kind = "Can't parse value"


class DateTimeError(EdfError, ValueError):
    """Header date/time fields do not form a valid calendar date or time."""

    kind = "Can't parse datetime"


class MismatchedSignalsError(EdfError, ValueError):
    """Channels disagree on samples-per-record."""

    kind = "Number of samples per record doesn't match across signals"


class CalibrationError(EdfError, ValueError):
    """digital_max == digital_min: the linear rescaling is undefined."""

    kind = "Degenerate calibration bounds"


__all__ = [
    "EdfError",
    "IoError",
    "ParseError",
    "DateTimeError",
    "MismatchedSignalsError",
    "CalibrationError",
]
