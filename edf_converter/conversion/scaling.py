from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from edf_converter.models.recording import SENTINEL, CalibrationBounds, Channel


def scale_sample(raw: int, bounds: CalibrationBounds) -> Optional[np.float32]:
    """
    Rescale one digital sample to its physical value, or None for the sentinel.

    physical = (raw - digital_min) * (physical_max - physical_min) / (digital_max - digital_min) + physical_min

    Evaluated in float32, in exactly this operation order.
    """
    if int(raw) == SENTINEL:
        return None
    v = np.float32(raw)
    return np.float32((v - bounds.digital_min) * bounds.physical_range / bounds.digital_range + bounds.physical_min)


def scale_record(block: np.ndarray, channels: Sequence[Channel]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Vectorised :func:`scale_sample` over a time-major block.

    Parameters
    ----------
    block:
        int16 array of shape ``(samples_per_record, n_channels)``.
    channels:
        Channels in column order.

    Returns
    -------
    (values, missing)
        float32 values of the same shape, and a boolean mask of sentinel samples
        (their value entries are meaningless).
    """
    block = np.asarray(block)
    if block.ndim != 2 or block.shape[1] != len(channels):
        raise ValueError(f"Expected block of shape (n, {len(channels)}), got {block.shape}")

    dmin = np.array([c.bounds.digital_min for c in channels], dtype=np.float32)
    drange = np.array([c.bounds.digital_range for c in channels], dtype=np.float32)
    pmin = np.array([c.bounds.physical_min for c in channels], dtype=np.float32)
    prange = np.array([c.bounds.physical_range for c in channels], dtype=np.float32)

    missing = block == SENTINEL
    with np.errstate(all="ignore"):
        values = (block.astype(np.float32) - dmin) * prange / drange + pmin
    return values.astype(np.float32, copy=False), missing


def format_value(value: Optional[float]) -> str:
    """
    Text of one physical value: shortest round-trip decimal of the float32,
    positional (never an exponent), trailing ``.0`` trimmed. None -> "".
    """
    if value is None:
        return ""
    v = np.float32(value)
    if np.isnan(v):
        return "NaN"
    return np.format_float_positional(v, trim="-")
