"""Ingest package - byte cursor, EDF decoders and input discovery.

This package handles:
- Sequential reading of the byte stream (ByteCursor)
- Decoding the recording header (start instant, record count/duration, channel count)
- Decoding the field-major signal table into Channel records
- Decoding signal-major int16 data records
- Discovering *.edf inputs from file and directory arguments

Design principle:
- Decoders take the cursor explicitly and never seek
- Every failure is an EdfError carrying the field, offset and source
"""
