from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one input file.

    Attributes
    ----------
    source_path:
        The EDF file that was converted.
    output_path:
        Target table. Set as soon as it is known, so a failed conversion still
        points at the partially written file (partial output is never rolled back).
    rows_written:
        Data rows written (header and unit rows excluded).
    error:
        ``None`` on success, else the text of the :class:`~edf_converter.errors.EdfError`.
    warnings:
        Non-fatal caveats, e.g. interval truncation.
    """

    source_path: Path
    output_path: Optional[Path] = None
    rows_written: int = 0
    error: Optional[str] = None
    warnings: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None
