from __future__ import annotations

import math

import pytest

from shst_speeds.movement.domain_types import (
    AggregatedSpeedRecord,
    HourlySpeedRecord,
    SpeedFileKind,
)
from shst_speeds.movement.speed_reader import (
    count_speed_records,
    iter_speed_records,
    parse_float,
    parse_int,
    parse_speed_row,
)

QUARTERLY_HEADER = (
    "year,quarter,hour_of_day,segment_id,start_junction_id,end_junction_id,"
    "speed_mph_mean,speed_mph_stddev,speed_mph_p50,speed_mph_p85"
)
HOURLY_HEADER = (
    "year,quarter,hour_of_day,segment_id,start_junction_id,end_junction_id,"
    "speed_mph_mean,speed_mph_stddev"
)


def test_quarterly_rows_become_aggregated_records(tmp_path):
    path = tmp_path / "quarterly.csv"
    path.write_text(
        QUARTERLY_HEADER + "\n2018,4,7,seg-a,j1,j2,31.5,4.2,30.0,38.5\n",
        encoding="utf-8",
    )

    records = list(iter_speed_records(path, SpeedFileKind.QUARTERLY))

    assert records == [
        AggregatedSpeedRecord(
            year=2018,
            quarter=4,
            hour=7,
            segment_id="seg-a",
            from_junction_id="j1",
            to_junction_id="j2",
            mean=31.5,
            std_dev=4.2,
            p50=30.0,
            p85=38.5,
        )
    ]


def test_hourly_rows_ignore_trailing_fields(tmp_path):
    path = tmp_path / "hourly.csv"
    path.write_text(HOURLY_HEADER + "\n2018,1,23,seg-a,j1,j2,12.0,1.5,99,99\n", encoding="utf-8")

    (record,) = iter_speed_records(path, SpeedFileKind.HOURLY)

    assert type(record) is HourlySpeedRecord
    assert record.hour == 23
    assert record.mean == pytest.approx(12.0)
    assert "p50" not in record.measurement_properties()


def test_malformed_numbers_become_nan(tmp_path):
    path = tmp_path / "quarterly.csv"
    path.write_text(QUARTERLY_HEADER + "\nyear?,4.0, 5 ,seg-a,j1,j2,fast,,1e1\n", encoding="utf-8")

    (record,) = iter_speed_records(path, SpeedFileKind.QUARTERLY)

    assert math.isnan(record.year)
    assert record.quarter == 4
    assert record.hour == 5
    assert math.isnan(record.mean)
    assert math.isnan(record.std_dev)
    assert record.p50 == pytest.approx(10.0)
    assert math.isnan(record.p85)


def test_short_rows_yield_empty_ids():
    record = parse_speed_row(["2018", "1"], SpeedFileKind.HOURLY)

    assert record.segment_id == ""
    assert record.from_junction_id == ""
    assert math.isnan(record.hour)


def test_count_excludes_header_and_blank_lines(tmp_path):
    path = tmp_path / "hourly.csv"
    path.write_text(
        HOURLY_HEADER + "\n2018,1,0,a,j1,j2,1,1\n\n2018,1,1,b,j1,j2,1,1\n",
        encoding="utf-8",
    )

    assert count_speed_records(path) == 2
    assert [r.segment_id for r in iter_speed_records(path, SpeedFileKind.HOURLY)] == ["a", "b"]


def test_reader_is_lazy(tmp_path):
    path = tmp_path / "hourly.csv"
    path.write_text(HOURLY_HEADER + "\n2018,1,0,a,j1,j2,1,1\n", encoding="utf-8")

    iterator = iter_speed_records(path, SpeedFileKind.HOURLY)
    path.unlink()

    with pytest.raises(FileNotFoundError):
        next(iterator)


@pytest.mark.parametrize(
    ("token", "expected"),
    [("2018", 2018), (" 3 ", 3), ("4.0", 4), ("-2", -2), ("12abc", 12)],
)
def test_parse_int_reads_leading_digits(token, expected):
    assert parse_int(token) == expected


def test_parse_int_without_digits_is_nan():
    assert math.isnan(parse_int("abc"))
    assert math.isnan(parse_int(""))


def test_unbalanced_quote_stays_within_its_line(tmp_path):
    path = tmp_path / "quarterly.csv"
    path.write_text(
        QUARTERLY_HEADER
        + '\n2018,4,7,"seg-a,j1,j2,31.5,4.2,30.0,38.5'
        + "\n2018,4,8,seg-b,j1,j2,20.0,1.0,19.0,24.0\n",
        encoding="utf-8",
    )

    records = list(iter_speed_records(path, SpeedFileKind.QUARTERLY))

    assert [r.segment_id for r in records] == ['"seg-a', "seg-b"]
    assert records[0].mean == pytest.approx(31.5)
    assert count_speed_records(path) == 2


@pytest.mark.parametrize(
    ("token", "expected"),
    [("12abc", 12.0), ("1_000", 1.0), (" 3.5mph", 3.5), (".5", 0.5), ("-2e2x", -200.0)],
)
def test_parse_float_reads_leading_number(token, expected):
    assert parse_float(token) == pytest.approx(expected)


def test_parse_float_without_number_is_nan():
    assert math.isnan(parse_float("infinity"))
    assert math.isnan(parse_float("abc"))
    assert parse_float("Infinity") == math.inf
