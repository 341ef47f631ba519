from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from edf_converter.conversion.scaling import format_value, scale_record
from edf_converter.conversion.timestamps import TimestampSequencer, interval_warnings
from edf_converter.errors import IoError, MismatchedSignalsError, ParseError
from edf_converter.ingest.cursor import ByteCursor
from edf_converter.ingest.header import decode_header
from edf_converter.ingest.records import decode_record, record_to_time_major
from edf_converter.ingest.signals import decode_signal_table
from edf_converter.models.recording import Channel, RecordingHeader
from edf_converter.models.results import ConversionResult

logger = logging.getLogger(__name__)


TIMESTAMP_COLUMN = "timestamp"
TIMESTAMP_UNIT = "YYYY-MM-DD hh:mm:ss"


@dataclass(frozen=True)
class ConverterConfig:
    """
    Conversion and batch settings.

    output_extension:
        Replaces the input file's extension in the output file name.
    delimiter:
        Field delimiter of the output table.
    input_extension:
        Suffix used to recognise EDF inputs during discovery.
    status_log_name, status_delimiter, success_message:
        Append-only status log layout (one line per file outcome).
    workers:
        Files converted concurrently by the batch driver (1 = sequential).
    """
    output_extension: str = ".csv"
    delimiter: str = ","
    input_extension: str = ".edf"
    status_log_name: str = "status.txt"
    status_delimiter: str = ":"
    success_message: str = "File parsed successfully!"
    workers: int = 1


def validate_channels(channels: Sequence[Channel], *, source: str = "<stream>") -> int:
    """Return the shared samples_per_record, or raise MismatchedSignalsError."""
    if not channels:
        raise ParseError(f"{source}: recording declares no signals")
    spr = channels[0].samples_per_record
    bad = [(j, c.label, c.samples_per_record) for j, c in enumerate(channels) if c.samples_per_record != spr]
    if bad:
        detail = ", ".join(f"channel {j} ({label!r}): {n}" for j, label, n in bad[:10])
        raise MismatchedSignalsError(
            f"{source}: Not all signals have the same number of samples per record! "
            f"expected {spr} (channel 0), got {detail}"
        )
    return spr


def read_recording(cursor: ByteCursor) -> Tuple[RecordingHeader, List[Channel], int]:
    """Decode header and signal table; returns (header, channels, samples_per_record)."""
    header = decode_header(cursor)
    channels = decode_signal_table(cursor, header.channel_count)
    spr = validate_channels(channels, source=cursor.source)
    return header, channels, spr


def header_rows(channels: Sequence[Channel]) -> Tuple[List[str], List[str]]:
    """Column-name row and unit row."""
    names = [TIMESTAMP_COLUMN] + [c.label for c in channels]
    units = [TIMESTAMP_UNIT] + [c.unit for c in channels]
    return names, units


def iter_record_rows(
    cursor: ByteCursor,
    header: RecordingHeader,
    channels: Sequence[Channel],
    sequencer: TimestampSequencer,
) -> Iterator[List[List[str]]]:
    """
    Yield the data rows of each record in order (one list of rows per record).

    Each row is ``[timestamp, value_1, ..., value_N]``; the sequencer advances once
    per row, after the row is built.
    """
    n_ch = len(channels)
    spr = channels[0].samples_per_record if channels else 0
    for _ in range(header.record_count):
        raw = decode_record(cursor, n_ch, spr)
        block = record_to_time_major(raw, n_ch, spr)
        values, missing = scale_record(block, channels)
        rows: List[List[str]] = []
        for i in range(spr):
            row = [sequencer.timestamp_text()]
            for j in range(n_ch):
                row.append("" if missing[i, j] else format_value(values[i, j]))
            rows.append(row)
            sequencer.advance()
        yield rows


def iter_rows(cursor: ByteCursor) -> Iterator[List[str]]:
    """
    Decode a whole recording lazily: column-name row, unit row, then one row per sample instant.
    """
    header, channels, spr = read_recording(cursor)
    sequencer = TimestampSequencer.for_recording(header.start, header.record_duration_s, spr)
    names, units = header_rows(channels)
    yield names
    yield units
    for rows in iter_record_rows(cursor, header, channels, sequencer):
        yield from rows


def output_path_for(source: Path, out_dir: Path, extension: str = ".csv") -> Path:
    """``<out_dir>/<source stem><extension>``."""
    return Path(out_dir) / Path(source).with_suffix(extension).name


def _write_rows(handle, rows: List[List[str]], *, delimiter: str, header: Optional[List[str]] = None) -> None:
    df = pd.DataFrame(rows, dtype=object)
    if header is not None:
        df.columns = header
    df.to_csv(handle, sep=delimiter, index=False, header=header is not None, lineterminator="\n")


def convert_file(
    source: str | Path,
    out_dir: str | Path,
    config: Optional[ConverterConfig] = None,
) -> ConversionResult:
    """
    Convert one EDF file into ``<out_dir>/<stem><ext>``.

    Rows are flushed one record at a time. On failure the EdfError propagates and
    whatever was already written stays on disk.
    """
    cfg = config or ConverterConfig()
    src = Path(source)
    out_path = output_path_for(src, Path(out_dir), cfg.output_extension)

    try:
        f = open(src, "rb")
    except OSError as e:
        raise IoError(f"{src}: cannot open ({e})") from e

    with f:
        cursor = ByteCursor(f, source=str(src))
        header, channels, spr = read_recording(cursor)
        warnings = interval_warnings(header.record_duration_s, spr)
        for w in warnings:
            logger.warning("%s: %s", src, w)
        sequencer = TimestampSequencer.for_recording(header.start, header.record_duration_s, spr)
        names, units = header_rows(channels)

        n_rows = 0
        try:
            with open(out_path, "w", newline="", encoding="utf-8") as out:
                _write_rows(out, [units], delimiter=cfg.delimiter, header=names)
                for rows in iter_record_rows(cursor, header, channels, sequencer):
                    if rows:
                        _write_rows(out, rows, delimiter=cfg.delimiter)
                    n_rows += len(rows)
        except OSError as e:
            raise IoError(f"{out_path}: cannot write output ({e})") from e

    logger.info("%s -> %s (%d rows, %d channels)", src, out_path, n_rows, len(channels))
    return ConversionResult(
        source_path=src,
        output_path=out_path,
        rows_written=n_rows,
        warnings=tuple(warnings),
    )
