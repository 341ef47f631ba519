from __future__ import annotations

import logging
from decimal import MAX_EMAX, MIN_EMIN, Decimal, InvalidOperation, localcontext
from typing import Dict, List, Optional, Tuple

import numpy as np

from edf_converter.errors import CalibrationError, ParseError
from edf_converter.ingest.cursor import ByteCursor
from edf_converter.ingest.header import parse_count
from edf_converter.models.recording import CalibrationBounds, Channel

logger = logging.getLogger(__name__)


# Field-major signal table: each slot is stored for all channels before the next slot.
# Slots named None are consumed and discarded (transducer type, prefiltering, reserved).
SIGNAL_SLOTS: Tuple[Tuple[Optional[str], int], ...] = (
    ("label", 16),
    (None, 80),
    ("unit", 8),
    ("physical_min", 8),
    ("physical_max", 8),
    ("digital_min", 8),
    ("digital_max", 8),
    (None, 80),
    ("samples_per_record", 8),
    (None, 32),
)

CAPTURED_FIELDS: Tuple[str, ...] = tuple(name for name, _ in SIGNAL_SLOTS if name is not None)

_FLOAT32_OVERFLOW = Decimal(2) ** 128


def read_signal_columns(cursor: ByteCursor, channel_count: int) -> Dict[str, List[str]]:
    """
    Read the signal table into a column-indexed structure.

    Returns ``{field: [value for channel 0, value for channel 1, ...]}`` with every
    value trimmed of surrounding whitespace. Discarded slots are skipped.
    """
    n = int(channel_count)
    columns: Dict[str, List[str]] = {name: [] for name in CAPTURED_FIELDS}
    for name, width in SIGNAL_SLOTS:
        for j in range(n):
            if name is None:
                cursor.skip(width, field=f"discarded signal field (channel {j})")
            else:
                columns[name].append(cursor.read_text(width, field=f"{name} (channel {j})").strip())
    return columns


def _float32_magnitude(value: np.float32) -> Decimal:
    # infinity sits one ulp past the largest finite float32 when rounding
    if np.isinf(value):
        return _FLOAT32_OVERFLOW.copy_sign(Decimal(float(value)))
    return Decimal(float(value))


def _to_float32(text: str) -> np.float32:
    """
    Round a decimal string straight to the nearest float32, ties to even.

    Going through a float64 first rounds twice, which can land one ulp off
    for strings close to a float32 midpoint.
    """
    exact = Decimal(text)
    with np.errstate(over="ignore"):
        guess = np.float32(float(exact))
    if not exact.is_finite() or (np.isinf(guess) and abs(exact) > _FLOAT32_OVERFLOW):
        return guess

    candidates = (
        guess,
        np.nextafter(guess, np.float32(-np.inf)),
        np.nextafter(guess, np.float32(np.inf)),
    )
    with localcontext() as ctx:
        ctx.prec = 1200
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        return min(
            candidates,
            key=lambda c: (
                abs(exact - _float32_magnitude(c)),
                np.array(c, dtype=np.float32).view(np.uint32).item() & 1,
            ),
        )


def _parse_real(text: str, *, field: str, source: str) -> np.float32:
    # digit separators are accepted by float() and Decimal(), never written by EDF tools
    if not text or "_" in text:
        raise ParseError(f"{source}: {field} is not a real number: {text!r}")
    try:
        return _to_float32(text)
    except (InvalidOperation, ValueError) as e:
        raise ParseError(f"{source}: {field} is not a real number: {text!r}") from e


def transpose_signal_columns(columns: Dict[str, List[str]], *, source: str = "<stream>") -> List[Channel]:
    """
    Turn the column-indexed table into per-channel records, in declared order.

    Pure function (no I/O): the field-major -> channel-major transposition is
    tested on its own.
    """
    missing = [f for f in CAPTURED_FIELDS if f not in columns]
    if missing:
        raise KeyError(f"Missing signal table columns: {missing}")
    lengths = {len(columns[f]) for f in CAPTURED_FIELDS}
    if len(lengths) != 1:
        raise ValueError(f"Signal table columns have different lengths: {sorted(lengths)}")
    n = lengths.pop()

    channels: List[Channel] = []
    for j in range(n):
        label = columns["label"][j]

        def real(field: str) -> np.float32:
            return _parse_real(columns[field][j], field=f"{field} of channel {j} ({label!r})", source=source)

        bounds = CalibrationBounds(
            digital_min=real("digital_min"),
            digital_max=real("digital_max"),
            physical_min=real("physical_min"),
            physical_max=real("physical_max"),
        )
        if bounds.digital_max == bounds.digital_min:
            raise CalibrationError(
                f"{source}: channel {j} ({label!r}) has digital_min == digital_max == {bounds.digital_min}"
            )
        spr = parse_count(
            columns["samples_per_record"][j], field=f"samples_per_record of channel {j} ({label!r})", source=source
        )
        channels.append(Channel(label=label, unit=columns["unit"][j], bounds=bounds, samples_per_record=spr))
    return channels


def decode_signal_table(cursor: ByteCursor, channel_count: int) -> List[Channel]:
    """Decode the signal table that directly follows the recording header."""
    columns = read_signal_columns(cursor, channel_count)
    channels = transpose_signal_columns(columns, source=cursor.source)
    logger.debug("%s: decoded %d channels: %s", cursor.source, len(channels), [c.label for c in channels])
    return channels
