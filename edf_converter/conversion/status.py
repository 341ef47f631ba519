from __future__ import annotations

import csv
import threading
from datetime import datetime
from pathlib import Path


class StatusLog:
    """
    Append-only status log, one line per converted file:

        "<local now, ISO-8601>":"<file path>":"<success marker or error text>"

    Every field is quoted. Writes are serialised with a lock so concurrent
    conversions never interleave lines.
    """

    def __init__(self, path: str | Path, *, delimiter: str = ":"):
        self.path = Path(path)
        self.delimiter = delimiter
        self._lock = threading.Lock()

    def append(self, source: str | Path, message: str) -> None:
        entry = [datetime.now().isoformat(timespec="milliseconds"), str(source), message]
        with self._lock:
            with self.path.open("a", newline="", encoding="utf-8") as f:
                csv.writer(f, delimiter=self.delimiter, quoting=csv.QUOTE_ALL, lineterminator="\n").writerow(entry)
