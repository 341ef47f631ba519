from __future__ import annotations

import numpy as np

from edf_converter.ingest.cursor import ByteCursor


SAMPLE_DTYPE = np.dtype("<i2")


def sample_offset(sample_index: int, channel_index: int, samples_per_record: int) -> int:
    """Flat offset of (sample i, channel j) in a signal-major record block."""
    return sample_index + channel_index * samples_per_record


def decode_record(cursor: ByteCursor, channel_count: int, samples_per_record: int) -> np.ndarray:
    """
    Read one data record: ``channel_count * samples_per_record`` little-endian int16,
    signal-major (all samples of channel 0, then channel 1, ...).

    Returns the flat int16 buffer. Raises IoError if the stream ends early.
    """
    n = int(channel_count) * int(samples_per_record)
    raw = cursor.read_exact(n * SAMPLE_DTYPE.itemsize, field=f"data record ({n} samples)")
    return np.frombuffer(raw, dtype=SAMPLE_DTYPE).astype(np.int16)


def record_to_time_major(raw: np.ndarray, channel_count: int, samples_per_record: int) -> np.ndarray:
    """
    Rearrange a flat signal-major block into shape ``(samples_per_record, channel_count)``.

    Row i, column j holds ``raw[sample_offset(i, j, samples_per_record)]``.
    """
    raw = np.asarray(raw)
    n = int(channel_count) * int(samples_per_record)
    if raw.ndim != 1 or raw.size != n:
        raise ValueError(f"Expected flat block of {n} samples, got shape {raw.shape}")
    idx = np.arange(int(samples_per_record))[:, None]
    ch = np.arange(int(channel_count))[None, :]
    return raw[sample_offset(idx, ch, int(samples_per_record))]
