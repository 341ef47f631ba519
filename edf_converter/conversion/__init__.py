"""Conversion package - rescaling, timestamp sequencing and row output.

Design principle:
  - Ingest decodes bytes into Channel / RecordingHeader and raw int16 blocks.
  - Conversion turns them into physical values and time-stamped rows, in strict
    sample order (row N's timestamp depends on every previous advance).
"""

from .scaling import format_value, scale_record, scale_sample
from .timestamps import TimestampSequencer, sample_interval_ms
from .pipeline import ConverterConfig, convert_file, iter_rows
from .batch import convert_batch

__all__ = [
    "format_value",
    "scale_record",
    "scale_sample",
    "TimestampSequencer",
    "sample_interval_ms",
    "ConverterConfig",
    "convert_file",
    "iter_rows",
    "convert_batch",
]
