from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


def is_edf_file(path: Path, extension: str = ".edf") -> bool:
    """A regular file whose suffix matches ``extension`` (case-sensitive)."""
    p = Path(path)
    return p.is_file() and p.suffix == extension


def list_edf_files(directory: Path, extension: str = ".edf") -> List[Path]:
    """Recursively list EDF files below ``directory``, entries sorted by name at every level."""
    found: List[Path] = []
    for entry in sorted(Path(directory).iterdir(), key=lambda p: p.name):
        if is_edf_file(entry, extension):
            found.append(entry)
        elif entry.is_dir():
            found.extend(list_edf_files(entry, extension))
    return found


def discover_edf_files(paths: Iterable[str | Path], extension: str = ".edf") -> List[Path]:
    """
    Expand command-line arguments into EDF file paths.

    - an EDF file is taken as is
    - a directory is walked recursively
    - anything else (missing path, other extension) is ignored with a warning
    """
    out: List[Path] = []
    for arg in paths:
        p = Path(arg)
        if is_edf_file(p, extension):
            out.append(p)
        elif p.is_dir():
            out.extend(list_edf_files(p, extension))
        else:
            logger.warning("ignoring %s: not a %s file or directory", p, extension)
    return out
