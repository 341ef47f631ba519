from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import numpy as np


# Reserved digital value: minimum representable int16, means "missing / out of calibration".
SENTINEL = int(np.iinfo(np.int16).min)


@dataclass(frozen=True)
class CalibrationBounds:
    """
    Linear digital -> physical calibration of one channel.

    Notes
    - All four bounds are float32; scaling is evaluated in float32 and the
      value text is the shortest float32 representation.
    - digital_max != digital_min is enforced when the signal table is decoded.
    """
    digital_min: np.float32
    digital_max: np.float32
    physical_min: np.float32
    physical_max: np.float32

    @property
    def digital_range(self) -> np.float32:
        return np.float32(self.digital_max - self.digital_min)

    @property
    def physical_range(self) -> np.float32:
        return np.float32(self.physical_max - self.physical_min)


@dataclass(frozen=True)
class Channel:
    """One recorded signal, in declared order. Read-only once decoded."""
    label: str
    unit: str
    bounds: CalibrationBounds
    samples_per_record: int


@dataclass(frozen=True)
class RecordingHeader:
    """
    Recording-level fields decoded from the first 256 header bytes.

    start:
        Naive local date-time of the first sample (second precision).
    record_duration_s:
        Duration of one data record in whole seconds.
    """
    start: datetime
    record_count: int
    record_duration_s: int
    channel_count: int
