from __future__ import annotations

import csv
from pathlib import Path

from edf_converter.conversion.batch import convert_batch
from edf_converter.conversion.pipeline import ConverterConfig
from edf_converter.conversion.status import StatusLog
from edf_converter.scripts.edf_to_csv import main
from edf_converter.tests.edf_factory import SignalSpec, build_edf, two_channel_signals


def _write_inputs(root: Path) -> tuple[Path, Path, Path]:
    good = root / "good.edf"
    good.write_bytes(build_edf(two_channel_signals(2), [[1, 2, 3, 4], [5, 6, 7, 8]]))
    bad_date = root / "bad_date.edf"
    bad_date.write_bytes(build_edf(two_channel_signals(2), [], start_date="31.04.21"))
    mismatched = root / "mismatched.edf"
    mismatched.write_bytes(
        build_edf([SignalSpec(label="A", samples_per_record="2"), SignalSpec(label="B", samples_per_record="4")], [])
    )
    return good, bad_date, mismatched


def _read_log(path: Path) -> list[list[str]]:
    with path.open(newline="", encoding="utf-8") as f:
        return list(csv.reader(f, delimiter=":"))


def test_one_failure_does_not_stop_the_batch(tmp_path: Path) -> None:
    good, bad_date, mismatched = _write_inputs(tmp_path)
    out = tmp_path / "out"
    log = StatusLog(tmp_path / "status.txt")

    results = convert_batch([bad_date, good, mismatched], out, ConverterConfig(), log)

    assert [r.ok for r in results] == [False, True, False]
    assert results[1].rows_written == 4
    assert (out / "good.csv").exists()
    assert "datetime" in results[0].error
    assert "samples per record" in results[2].error

    entries = _read_log(tmp_path / "status.txt")
    assert [e[1] for e in entries] == [str(bad_date), str(good), str(mismatched)]
    assert entries[1][2] == "File parsed successfully!"
    assert entries[0][2] == results[0].error
    assert all(len(e) == 3 for e in entries)


def test_status_log_quotes_every_field_and_appends(tmp_path: Path) -> None:
    log = StatusLog(tmp_path / "status.txt")
    log.append("a.edf", "ok")
    log.append("C:/x.edf", "fail: x")
    lines = (tmp_path / "status.txt").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].startswith('"') and lines[0].endswith('":"a.edf":"ok"')
    assert _read_log(tmp_path / "status.txt")[1][1:] == ["C:/x.edf", "fail: x"]


def test_parallel_batch_keeps_order_and_log_lines_intact(tmp_path: Path) -> None:
    sources = []
    for k in range(8):
        p = tmp_path / f"rec{k}.edf"
        p.write_bytes(build_edf(two_channel_signals(2), [[k, k, k, k]] * 3))
        sources.append(p)
    log = StatusLog(tmp_path / "status.txt")

    results = convert_batch(sources, tmp_path / "out", ConverterConfig(workers=4), log)

    assert [r.source_path for r in results] == sources
    assert all(r.ok and r.rows_written == 6 for r in results)
    entries = _read_log(tmp_path / "status.txt")
    assert sorted(e[1] for e in entries) == sorted(str(s) for s in sources)
    assert all(len(e) == 3 for e in entries)


def test_parallel_batch_with_shared_output_name_matches_sequential_run(tmp_path: Path) -> None:
    first = tmp_path / "a" / "rec.edf"
    second = tmp_path / "b" / "rec.edf"
    first.parent.mkdir()
    second.parent.mkdir()
    first.write_bytes(build_edf(two_channel_signals(2), [[1, 1, 1, 1]] * 40))
    second.write_bytes(build_edf(two_channel_signals(2), [[2, 2, 2, 2]] * 3))
    sources = [first, second]

    par = convert_batch(sources, tmp_path / "par", ConverterConfig(workers=4))
    seq = convert_batch(sources, tmp_path / "seq", ConverterConfig(workers=1))

    assert [r.source_path for r in par] == sources
    assert [r.rows_written for r in par] == [80, 6]
    par_text = (tmp_path / "par" / "rec.csv").read_text(encoding="utf-8")
    assert par_text == (tmp_path / "seq" / "rec.csv").read_text(encoding="utf-8")
    lines = par_text.splitlines()
    assert len(lines) == 2 + 6
    assert all(line.count(",") == 2 for line in lines)


def test_cli_exit_codes(tmp_path: Path) -> None:
    good, bad_date, _ = _write_inputs(tmp_path)
    out = tmp_path / "csv"
    status = tmp_path / "log.txt"

    assert main([str(good), "--out-dir", str(out), "--status-log", str(status), "-q"]) == 0
    assert (out / "good.csv").exists()

    assert main([str(tmp_path), "--out-dir", str(out), "--status-log", str(status), "-q"]) == 1
    assert len(_read_log(status)) == 1 + 3

    empty = tmp_path / "empty"
    empty.mkdir()
    assert main([str(empty), "--out-dir", str(out), "--status-log", str(status), "-q"]) == 2
