"""EDF to CSV converter -- Python tooling for clinical waveform recordings.

This package provides tools for:
- Decoding the fixed-layout EDF header (start date/time, record count,
  record duration, channel count)
- Decoding the field-major signal table into per-channel calibration metadata
- Decoding signal-major int16 data records
- Rescaling digital samples to physical values (with a reserved "missing" sentinel)
- Sequencing per-sample timestamps with a 16-bit millisecond interval
- Streaming the result into one delimited text table per input file

Key principles:
- Single pass: the byte stream is read strictly sequentially, never seeked
- Exact numeric replication: float32 arithmetic and the 16-bit interval
  truncation are preserved, not corrected
- One file's failure never affects another file of the same batch

Main subpackages:
- ingest: Byte cursor, header/signal-table/record decoders, file discovery
- conversion: Scaling, timestamp sequencing, row pipeline, batch driver
- models: Data models (CalibrationBounds, Channel, RecordingHeader)
- scripts: Command-line entry point
"""

__all__ = []
