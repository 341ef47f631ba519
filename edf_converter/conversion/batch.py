from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from edf_converter.conversion.pipeline import ConverterConfig, convert_file, output_path_for
from edf_converter.conversion.status import StatusLog
from edf_converter.errors import EdfError
from edf_converter.models.results import ConversionResult

logger = logging.getLogger(__name__)


def convert_one(
    source: Path,
    out_dir: Path,
    config: ConverterConfig,
    status_log: Optional[StatusLog] = None,
) -> ConversionResult:
    """
    Convert one file and turn its outcome into an explicit result value.

    EdfError is caught here (never further up), logged, and written to the status log.
    """
    try:
        result = convert_file(source, out_dir, config)
    except EdfError as e:
        logger.error("%s: %s", source, e)
        result = ConversionResult(
            source_path=Path(source),
            output_path=output_path_for(source, out_dir, config.output_extension),
            error=str(e),
        )
    if status_log is not None:
        status_log.append(source, config.success_message if result.ok else str(result.error))
    return result


def _group_by_output(paths: List[Path], out: Path, extension: str) -> List[List[int]]:
    """
    Group input indices by output file, in input order.

    Inputs that map to the same output (same stem in different directories)
    share a group and are converted one after another, so the last one wins
    exactly as in a sequential run.
    """
    groups: Dict[Path, List[int]] = {}
    for i, p in enumerate(paths):
        groups.setdefault(output_path_for(p, out, extension), []).append(i)
    for target, indices in groups.items():
        if len(indices) > 1:
            logger.warning(
                "%d inputs write to %s; converting them sequentially: %s",
                len(indices), target, ", ".join(str(paths[i]) for i in indices),
            )
    return list(groups.values())


def convert_batch(
    sources: Iterable[str | Path],
    out_dir: str | Path,
    config: Optional[ConverterConfig] = None,
    status_log: Optional[StatusLog] = None,
) -> List[ConversionResult]:
    """
    Convert every source file into ``out_dir`` (created if needed).

    Files are independent: one failure never stops the batch. With
    ``config.workers > 1`` files run on a thread pool; results keep input order.
    """
    cfg = config or ConverterConfig()
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    paths = [Path(s) for s in sources]

    if cfg.workers <= 1 or len(paths) <= 1:
        results = [convert_one(p, out, cfg, status_log) for p in paths]
    else:
        groups = _group_by_output(paths, out, cfg.output_extension)
        by_index: Dict[int, ConversionResult] = {}

        def run_group(indices: List[int]) -> None:
            for i in indices:
                by_index[i] = convert_one(paths[i], out, cfg, status_log)

        with ThreadPoolExecutor(max_workers=int(cfg.workers)) as pool:
            # list() re-raises anything a worker raised
            list(pool.map(run_group, groups))
        results = [by_index[i] for i in range(len(paths))]

    n_failed = sum(1 for r in results if not r.ok)
    logger.info("converted %d/%d files into %s", len(results) - n_failed, len(results), out)
    return results
