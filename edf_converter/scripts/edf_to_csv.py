"""Batch EDF -> CSV conversion from the command line.

Usage
-----
    python -m edf_converter.scripts.edf_to_csv recordings/ extra.edf --out-dir edf_to_csv_files

Each argument is an EDF file or a directory searched recursively. One status
line per file is appended to the status log.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from edf_converter.conversion.batch import convert_batch
from edf_converter.conversion.pipeline import ConverterConfig
from edf_converter.conversion.status import StatusLog
from edf_converter.ingest.discovery import discover_edf_files


DEFAULT_OUT_DIR = "./edf_to_csv_files/"


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    defaults = ConverterConfig()
    p = argparse.ArgumentParser(
        prog="edf-to-csv",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Convert EDF recordings into CSV tables (timestamp + one column per signal).

            Row 1 holds the signal labels, row 2 the physical units, then one row
            per sample instant. Missing samples are written as empty fields.
            """
        ),
    )
    p.add_argument("paths", nargs="*", help="EDF files or directories (searched recursively)")
    p.add_argument("--out-dir", default=DEFAULT_OUT_DIR, help=f"Output directory (default: {DEFAULT_OUT_DIR})")
    p.add_argument("--status-log", default=defaults.status_log_name, help="Append-only status log file")
    p.add_argument("--extension", default=defaults.output_extension, help="Output file extension")
    p.add_argument("--delimiter", default=defaults.delimiter, help="Output field delimiter")
    p.add_argument("--workers", type=int, default=defaults.workers, help="Files converted concurrently")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    p.add_argument("-q", "--quiet", action="store_true", help="Only log errors")

    ns = p.parse_args(list(argv) if argv is not None else None)

    level = logging.DEBUG if ns.verbose else (logging.ERROR if ns.quiet else logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    cfg = ConverterConfig(
        output_extension=ns.extension,
        delimiter=ns.delimiter,
        status_log_name=ns.status_log,
        workers=max(1, int(ns.workers)),
    )

    sources = discover_edf_files(ns.paths, cfg.input_extension)
    if not sources:
        logging.getLogger(__name__).error("no %s files found in %s", cfg.input_extension, list(ns.paths))
        return 2

    status_log = StatusLog(Path(cfg.status_log_name), delimiter=cfg.status_delimiter)
    results = convert_batch(sources, Path(ns.out_dir), cfg, status_log)

    for r in results:
        if r.ok:
            print(f"[ok] {r.source_path} -> {r.output_path} ({r.rows_written} rows)")
            for w in r.warnings:
                print(f"  WARNING: {w}")
        else:
            print(f"[failed] {r.source_path}: {r.error}")

    return 0 if all(r.ok for r in results) else 1


if __name__ == "__main__":
    raise SystemExit(main())
