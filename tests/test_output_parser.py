from __future__ import annotations

from datetime import datetime
import os

import pytest

from geolocate.exif.output_parser import (
    ExifOutputParser,
    parse_degrees,
    parse_exif_datetime,
    parse_float,
    parse_output,
    parse_time,
)


def test_parse_degrees_north_east() -> None:
    assert parse_degrees("48 deg 51' 30.12\" N", "N", "S") == pytest.approx(48.858367, abs=1e-5)
    assert parse_degrees("2 deg 17' 40.20\" E", "E", "W") == pytest.approx(2.2945, abs=1e-5)


def test_parse_degrees_negative_hemisphere() -> None:
    assert parse_degrees("33 deg 51' 35.90\" S", "N", "S") == pytest.approx(-33.859972, abs=1e-5)
    assert parse_degrees("151 deg 12' 40.00\" E", "E", "W") == pytest.approx(151.211111, abs=1e-5)
    assert parse_degrees("0 deg 30' 0.00\" w", "E", "W") == pytest.approx(-0.5)


def test_parse_degrees_rejects_malformed() -> None:
    assert parse_degrees("xx deg 00' 00.0\" N", "N", "S") is None
    assert parse_degrees("48 deg 51' 30\" N", "N", "S") is None
    assert parse_degrees("48 deg 51' 30.12\" E", "N", "S") is None
    assert parse_degrees("", "N", "S") is None


def test_parse_time_and_float() -> None:
    assert parse_time("0:00:12") == 12.0
    assert parse_time("1:02:03.5") == 3723.5
    assert parse_time("0:01:02 (approx)") == 62.0
    assert parse_time("12.5 s") is None
    assert parse_float("29.97") == 29.97
    assert parse_float("n/a") is None


def test_parse_exif_datetime() -> None:
    assert parse_exif_datetime("2021:06:15 14:30:00") == datetime(2021, 6, 15, 14, 30, 0)
    assert parse_exif_datetime("2021:06:15 14:30:00+02:00") == datetime(2021, 6, 15, 14, 30, 0)
    assert parse_exif_datetime("0000:00:00 00:00:00") is None
    assert parse_exif_datetime("2021-06-15") is None


def test_single_file_read_flushes_at_end() -> None:
    lines = [
        "GPSLatitude: 48 deg 51' 30.12\" N",
        "GPSLongitude: 2 deg 17' 40.20\" E",
        "DateTimeOriginal: 2021:06:15 14:30:00",
    ]
    records = parse_output(lines, current_key="k")
    rec = records["k"]
    assert rec.geolocation is not None
    assert rec.geolocation.latitude == pytest.approx(48.858367, abs=1e-5)
    assert rec.geolocation.longitude == pytest.approx(2.294500, abs=1e-5)
    assert rec.creation_timestamp == datetime(2021, 6, 15, 14, 30)


def test_date_time_original_wins_over_create_date() -> None:
    lines = [
        "DateTimeOriginal: 2020:01:01 10:00:00",
        "CreateDate: 2020:02:02 11:00:00",
    ]
    assert parse_output(lines, current_key="k")["k"].creation_timestamp == datetime(2020, 1, 1, 10)
    only_create = parse_output(["CreateDate: 2020:02:02 11:00:00"], current_key="k")
    assert only_create["k"].creation_timestamp == datetime(2020, 2, 2, 11)


def test_duration_forms() -> None:
    seconds = parse_output(["Duration: 12.00 s", "VideoFrameRate: 24"], current_key="k")["k"]
    assert seconds.duration_seconds == 12.0
    assert seconds.frame_rate == 24.0
    clock = parse_output(["Duration: 0:01:30"], current_key="k")["k"]
    assert clock.duration_seconds == 90.0


def test_geolocation_requires_both_coordinates() -> None:
    rec = parse_output(["GPSLatitude: 48 deg 51' 30.12\" N"], current_key="k")["k"]
    assert rec.geolocation is None


def test_malformed_degrees_is_silent_and_parsing_continues() -> None:
    lines = [
        "GPSLatitude: xx deg 00' 00.0\" N",
        "GPSLongitude: 2 deg 17' 40.20\" E",
        "DateTimeOriginal: 2021:06:15 14:30:00",
    ]
    rec = parse_output(lines, current_key="k")["k"]
    assert rec.geolocation is None
    assert rec.creation_timestamp == datetime(2021, 6, 15, 14, 30)


def test_multi_file_output_flushes_per_boundary() -> None:
    flushed = []
    parser = ExifOutputParser(lambda key, rec: flushed.append((key, rec)))
    for line in [
        "======== /photos/a.jpg",
        "GPSLatitude: 10 deg 30' 0.00\" N",
        "GPSLongitude: 20 deg 15' 0.00\" E",
        "======== /photos/b.mp4",
        "Duration: 0:00:10",
        "VideoFrameRate: 30",
    ]:
        parser.feed(line)
    assert len(flushed) == 1
    parser.close()

    keys = [k for k, _ in flushed]
    assert keys == [os.path.normpath("/photos/a.jpg"), os.path.normpath("/photos/b.mp4")]
    a, b = flushed[0][1], flushed[1][1]
    assert a.geolocation.latitude == pytest.approx(10.5)
    assert a.geolocation.longitude == pytest.approx(20.25)
    assert a.duration_seconds is None
    assert b.geolocation is None
    assert b.duration_seconds == 10.0
    assert b.frame_rate == 30.0


def test_lines_before_first_boundary_without_key_are_dropped() -> None:
    records = parse_output(["GPSLatitude: 1 deg 0' 0.00\" N", "    1 image files read"])
    assert records == {}


def test_out_of_range_coordinates_yield_no_geolocation() -> None:
    lines = [
        "GPSLatitude: 95 deg 0' 0.00\" N",
        "GPSLongitude: 2 deg 0' 0.00\" E",
    ]
    assert parse_output(lines, current_key="k")["k"].geolocation is None
