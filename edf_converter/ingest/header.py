from __future__ import annotations

import logging
import re
from datetime import date, datetime, time

from edf_converter.errors import DateTimeError, ParseError
from edf_converter.ingest.cursor import ByteCursor
from edf_converter.models.recording import RecordingHeader

logger = logging.getLogger(__name__)


# Fixed layout of the recording-level header (byte counts).
_IDENTIFICATION_BYTES = 168   # version + patient id + recording id
_RESERVED_BYTES = 52          # header size + reserved/equipment fields
_RECORD_COUNT_BYTES = 8
_RECORD_DURATION_BYTES = 8
_CHANNEL_COUNT_BYTES = 4
_CENTURY = 2000

_RE_COUNT = re.compile(r"^\+?\d+$")


def parse_count(text: str, *, field: str, source: str = "<stream>") -> int:
    """Trim and parse a space-padded non-negative integer field."""
    s = text.strip()
    if not _RE_COUNT.match(s):
        raise ParseError(f"{source}: {field} is not a non-negative integer: {text!r}")
    return int(s)


def _read_two_digits(cursor: ByteCursor, field: str) -> int:
    s = cursor.read_text(2, field=field)
    if not (s.isascii() and s.isdigit()):
        raise ParseError(f"{cursor.source}: {field} is not two digits: {s!r}")
    return int(s)


def decode_start_date(cursor: ByteCursor) -> date:
    """Skip the identification fields and decode ``dd.mm.yy`` (years 2000-2099)."""
    cursor.skip(_IDENTIFICATION_BYTES, field="identification")
    day = _read_two_digits(cursor, "start day")
    cursor.skip(1, field="date separator")
    month = _read_two_digits(cursor, "start month")
    cursor.skip(1, field="date separator")
    year = _CENTURY + _read_two_digits(cursor, "start year")
    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateTimeError(f"{cursor.source}: invalid start date {day:02d}.{month:02d}.{year} ({e})") from e


def decode_start_time(cursor: ByteCursor) -> time:
    """Decode ``hh.mm.ss``."""
    hour = _read_two_digits(cursor, "start hour")
    cursor.skip(1, field="time separator")
    minute = _read_two_digits(cursor, "start minute")
    cursor.skip(1, field="time separator")
    second = _read_two_digits(cursor, "start second")
    try:
        return time(hour, minute, second)
    except ValueError as e:
        raise DateTimeError(f"{cursor.source}: invalid start time {hour:02d}:{minute:02d}:{second:02d} ({e})") from e


def decode_header(cursor: ByteCursor) -> RecordingHeader:
    """
    Decode the recording-level header from a cursor at offset 0.

    Leaves the cursor at offset 256, the start of the signal table.
    """
    start_date = decode_start_date(cursor)
    start_time = decode_start_time(cursor)

    cursor.skip(_RESERVED_BYTES, field="reserved")
    record_count = parse_count(
        cursor.read_text(_RECORD_COUNT_BYTES, field="record count"), field="record count", source=cursor.source
    )
    record_duration = parse_count(
        cursor.read_text(_RECORD_DURATION_BYTES, field="record duration"), field="record duration", source=cursor.source
    )
    channel_count = parse_count(
        cursor.read_text(_CHANNEL_COUNT_BYTES, field="channel count"), field="channel count", source=cursor.source
    )

    header = RecordingHeader(
        start=datetime.combine(start_date, start_time),
        record_count=record_count,
        record_duration_s=record_duration,
        channel_count=channel_count,
    )
    logger.debug(
        "%s: start=%s records=%d duration=%ds channels=%d",
        cursor.source, header.start.isoformat(), record_count, record_duration, channel_count,
    )
    return header
