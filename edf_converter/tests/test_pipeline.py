from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from edf_converter.conversion.pipeline import (
    TIMESTAMP_UNIT,
    ConverterConfig,
    convert_file,
    header_rows,
    iter_rows,
    output_path_for,
    validate_channels,
)
from edf_converter.conversion.scaling import format_value, scale_sample
from edf_converter.errors import IoError, MismatchedSignalsError, ParseError
from edf_converter.ingest.cursor import ByteCursor
from edf_converter.models.recording import SENTINEL, CalibrationBounds, Channel
from edf_converter.tests.edf_factory import SignalSpec, build_edf, two_channel_signals


def _channel(label: str, spr: int) -> Channel:
    b = CalibrationBounds(np.float32(0), np.float32(1), np.float32(0), np.float32(1))
    return Channel(label=label, unit="u", bounds=b, samples_per_record=spr)


def test_end_to_end_two_channels_with_sentinel() -> None:
    data = build_edf(two_channel_signals(2), [[0, 16384, SENTINEL, 100]], record_duration="1")
    rows = list(iter_rows(ByteCursor.from_bytes(data)))

    assert rows[0] == ["timestamp", "A", "B"]
    assert rows[1] == [TIMESTAMP_UNIT, "uV", "mV"]
    assert len(rows) == 4

    b = CalibrationBounds(np.float32(-32768), np.float32(32767), np.float32(-200), np.float32(200))
    r0, r1 = rows[2], rows[3]
    assert r0 == ["2021-03-04T05:06:07.000", format_value(scale_sample(0, b)), ""]
    assert r1 == [
        "2021-03-04T05:06:07.500",
        format_value(scale_sample(16384, b)),
        format_value(scale_sample(100, b)),
    ]
    assert r0[0] < r1[0]


def test_rows_are_time_major_across_records() -> None:
    signals = [
        SignalSpec(label="X", physical_min="0", physical_max="100", digital_min="0", digital_max="100", samples_per_record="3"),
        SignalSpec(label="Y", physical_min="0", physical_max="100", digital_min="0", digital_max="100", samples_per_record="3"),
    ]
    records = [[1, 2, 3, 11, 12, 13], [4, 5, 6, 14, 15, 16]]
    data = build_edf(signals, records, record_duration="3")
    rows = list(iter_rows(ByteCursor.from_bytes(data)))[2:]
    assert [r[1:] for r in rows] == [
        ["1", "11"], ["2", "12"], ["3", "13"],
        ["4", "14"], ["5", "15"], ["6", "16"],
    ]
    # 1 s per row, continuous across the record boundary
    assert [r[0][-6:] for r in rows] == ["07.000", "08.000", "09.000", "10.000", "11.000", "12.000"]


def test_four_samples_per_second_get_distinct_increasing_timestamps() -> None:
    signals = [SignalSpec(label="A", samples_per_record="4")]
    data = build_edf(signals, [[1, 2, 3, 4], [5, 6, 7, 8]], record_duration="1")
    stamps = [r[0] for r in list(iter_rows(ByteCursor.from_bytes(data)))[2:]]

    assert len(stamps) == len(set(stamps)) == 8
    assert all(b > a for a, b in zip(stamps, stamps[1:]))
    assert stamps[:5] == [
        "2021-03-04T05:06:07.000",
        "2021-03-04T05:06:07.250",
        "2021-03-04T05:06:07.500",
        "2021-03-04T05:06:07.750",
        "2021-03-04T05:06:08.000",
    ]


@pytest.mark.parametrize("n", [1, 2, 3, 7])
def test_header_and_unit_rows_for_any_channel_count(n: int) -> None:
    signals = [SignalSpec(label=f"S{j}", unit=f"u{j}", samples_per_record="1") for j in range(n)]
    rows = list(iter_rows(ByteCursor.from_bytes(build_edf(signals, []))))
    assert rows == [
        ["timestamp"] + [f"S{j}" for j in range(n)],
        ["YYYY-MM-DD hh:mm:ss"] + [f"u{j}" for j in range(n)],
    ]
    names, units = header_rows([_channel(f"S{j}", 1) for j in range(n)])
    assert len(names) == len(units) == n + 1


def test_mismatch_raised_iff_a_channel_differs() -> None:
    assert validate_channels([_channel("a", 4), _channel("b", 4), _channel("c", 4)]) == 4
    with pytest.raises(MismatchedSignalsError) as exc:
        validate_channels([_channel("a", 4), _channel("b", 4), _channel("c", 5)], source="x.edf")
    assert "x.edf" in str(exc.value)
    with pytest.raises(MismatchedSignalsError):
        validate_channels([_channel("a", 4), _channel("b", 2)])


def test_no_channels_is_parse_error() -> None:
    with pytest.raises(ParseError):
        validate_channels([])


def test_mismatched_file_fails_before_any_row() -> None:
    signals = [SignalSpec(label="A", samples_per_record="2"), SignalSpec(label="B", samples_per_record="3")]
    gen = iter_rows(ByteCursor.from_bytes(build_edf(signals, [])))
    with pytest.raises(MismatchedSignalsError):
        next(gen)


def test_output_path_replaces_extension(tmp_path: Path) -> None:
    assert output_path_for(Path("/data/night 1/rec.EDF"), tmp_path) == tmp_path / "rec.csv"
    assert output_path_for(Path("rec.edf"), tmp_path, ".tsv") == tmp_path / "rec.tsv"


def test_convert_file_writes_table(tmp_path: Path) -> None:
    signals = [
        SignalSpec(label="Temp, rectal", unit="DegC", physical_min="0", physical_max="10",
                   digital_min="0", digital_max="100", samples_per_record="2"),
        SignalSpec(label="Pulse", unit="bpm", physical_min="0", physical_max="200",
                   digital_min="0", digital_max="2000", samples_per_record="2"),
    ]
    src = tmp_path / "night.edf"
    src.write_bytes(build_edf(signals, [[50, SENTINEL, 600, 610]], record_duration="2"))

    res = convert_file(src, tmp_path)
    assert res.ok
    assert res.output_path == tmp_path / "night.csv"
    assert res.rows_written == 2
    assert res.warnings == ()

    text = res.output_path.read_text(encoding="utf-8")
    assert text == (
        'timestamp,"Temp, rectal",Pulse\n'
        "YYYY-MM-DD hh:mm:ss,DegC,bpm\n"
        "2021-03-04T05:06:07.000,5,60\n"
        "2021-03-04T05:06:08.000,,61\n"
    )

    df = pd.read_csv(res.output_path, skiprows=[1], dtype=str, keep_default_na=False)
    assert list(df.columns) == ["timestamp", "Temp, rectal", "Pulse"]


def test_convert_file_uses_configured_delimiter(tmp_path: Path) -> None:
    src = tmp_path / "r.edf"
    src.write_bytes(build_edf(two_channel_signals(1), [[0, 0]]))
    res = convert_file(src, tmp_path, ConverterConfig(delimiter=";", output_extension=".txt"))
    lines = res.output_path.read_text(encoding="utf-8").splitlines()
    assert res.output_path.suffix == ".txt"
    assert lines[0] == "timestamp;A;B"


def test_truncated_data_leaves_partial_output(tmp_path: Path) -> None:
    src = tmp_path / "cut.edf"
    data = build_edf(two_channel_signals(2), [[1, 2, 3, 4]], record_count="3")
    src.write_bytes(data)

    with pytest.raises(IoError):
        convert_file(src, tmp_path)

    lines = (tmp_path / "cut.csv").read_text(encoding="utf-8").splitlines()
    # header + units + the one complete record
    assert len(lines) == 4


def test_truncation_warning_reported(tmp_path: Path) -> None:
    src = tmp_path / "w.edf"
    src.write_bytes(build_edf(two_channel_signals(3), [[0] * 6]))
    res = convert_file(src, tmp_path)
    assert res.rows_written == 3
    assert any("truncated" in w for w in res.warnings)


def test_missing_input_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(IoError):
        convert_file(tmp_path / "nope.edf", tmp_path)
