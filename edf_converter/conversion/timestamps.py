from __future__ import annotations

from datetime import datetime, timedelta
from typing import List

import numpy as np


_I16_MIN = int(np.iinfo(np.int16).min)
_I16_MAX = int(np.iinfo(np.int16).max)


def _raw_interval_ms(record_duration_s: int, samples_per_record: int) -> np.float32:
    with np.errstate(all="ignore"):
        return np.float32(np.float32(1000.0) * np.float32(record_duration_s) / np.float32(samples_per_record))


def sample_interval_ms(record_duration_s: int, samples_per_record: int) -> int:
    """
    Per-sample interval in whole milliseconds.

    ``1000 * duration / samples_per_record`` is evaluated in float32, then cast
    through a 16-bit integer: truncated toward zero and saturated to the int16
    range (NaN -> 0). Sub-millisecond fractions are dropped, so one record can
    advance by less than its declared duration.
    """
    x = _raw_interval_ms(record_duration_s, samples_per_record)
    if np.isnan(x):
        return 0
    if x >= _I16_MAX:
        return _I16_MAX
    if x <= _I16_MIN:
        return _I16_MIN
    return int(x)


def interval_warnings(record_duration_s: int, samples_per_record: int) -> List[str]:
    """Describe any precision lost by :func:`sample_interval_ms` (empty when exact)."""
    x = float(_raw_interval_ms(record_duration_s, samples_per_record))
    ms = sample_interval_ms(record_duration_s, samples_per_record)
    if x != x:
        return [f"sample interval undefined (duration={record_duration_s}s, samples_per_record={samples_per_record}); using 0 ms"]
    if x != ms:
        kind = "saturated" if abs(x) >= _I16_MAX else "truncated"
        total = float(ms) * samples_per_record
        return [
            f"sample interval {kind} from {x:.6g} ms to {ms} ms; "
            f"each record advances {total:.6g} ms instead of {1000.0 * record_duration_s:.6g} ms"
        ]
    return []


class TimestampSequencer:
    """
    Stateful generator of per-sample instants.

    State is a whole-second instant plus a millisecond field kept in [0, 1000).
    Rows are stamped with the current instant *before* :meth:`advance` is called.
    """

    def __init__(self, start: datetime, interval_ms: int):
        self._second = start.replace(microsecond=0)
        self._millis = 0
        self.interval_ms = int(interval_ms)
        # Integer division/remainder of a non-negative 16-bit value.
        self.interval_seconds = int(self.interval_ms / 1000)
        self.interval_millis = self.interval_ms - 1000 * self.interval_seconds

    @classmethod
    def for_recording(cls, start: datetime, record_duration_s: int, samples_per_record: int) -> "TimestampSequencer":
        return cls(start, sample_interval_ms(record_duration_s, samples_per_record))

    @property
    def milliseconds(self) -> int:
        return self._millis

    @property
    def instant(self) -> datetime:
        """Current instant at millisecond resolution."""
        return self._second + timedelta(milliseconds=self._millis)

    def timestamp_text(self) -> str:
        """ISO-8601 local date-time with milliseconds (e.g. ``2021-03-04T05:06:07.500``)."""
        return self.instant.isoformat(timespec="milliseconds")

    def advance(self) -> None:
        self._second += timedelta(seconds=self.interval_seconds)
        self._millis += self.interval_millis
        if self._millis >= 1000:
            self._second += timedelta(seconds=self._millis // 1000)
            self._millis = self._millis % 1000
