from __future__ import annotations

from pathlib import Path

from geolocate.core.models import LatLong
from geolocate.exif.commands import (
    frame_index,
    is_tool_available,
    read_metadata_argv,
    resolve_binary,
    thumbnail_argv,
    thumbnail_source,
    write_geolocation_argv,
)
from geolocate.util.paths import thumbnail_path


def test_resolve_binary_falls_back_to_default() -> None:
    assert resolve_binary("", "exiftool") == "exiftool"
    assert resolve_binary(None, "convert") == "convert"
    assert resolve_binary("  /opt/bin/exiftool ", "exiftool") == "/opt/bin/exiftool"


def test_read_argv() -> None:
    argv = read_metadata_argv("exiftool", [Path("/a.jpg"), Path("/b.jpg")])
    assert argv == [
        "exiftool", "-S", "-gpslatitude", "-gpslongitude", "-alldates",
        "-duration", "-videoframerate", "/a.jpg", "/b.jpg",
    ]


def test_write_argv_positive() -> None:
    argv = write_geolocation_argv("exiftool", LatLong(10.5, 20.25), Path("/tmp/list.txt"))
    assert argv == [
        "exiftool", "-P", "-overwrite_original", "-q",
        "-gpslatitude=10.5", "-gpslatituderef=N",
        "-gpslongitude=20.25", "-gpslongituderef=E",
        "-@", "/tmp/list.txt",
    ]


def test_write_argv_southern_western() -> None:
    argv = write_geolocation_argv("exiftool", LatLong(-33.5, -70.25), Path("/tmp/list.txt"))
    assert "-gpslatitude=33.5" in argv
    assert "-gpslatituderef=S" in argv
    assert "-gpslongitude=70.25" in argv
    assert "-gpslongituderef=W" in argv


def test_frame_index_picks_middle_frame() -> None:
    assert frame_index(10.0, 30.0) == 150
    assert frame_index(12.0, 24.0) == 144
    assert frame_index(None, 30.0) is None
    assert frame_index(10.0, 0.0) is None
    assert frame_index(0.0, 30.0) is None


def test_thumbnail_source_and_argv() -> None:
    assert thumbnail_source(Path("/path/vid.mp4"), 12.0, 24.0) == "/path/vid.mp4[144]"
    assert thumbnail_source(Path("/path/a.jpg")) == "/path/a.jpg"
    argv = thumbnail_argv("convert", "/path/a.jpg", Path("/path/.a.thumb"))
    assert argv == [
        "convert", "/path/a.jpg", "-background", "white", "-flatten",
        "-thumbnail", "192x384>", "-quality", "60%", "jpg:/path/.a.thumb",
    ]


def test_thumbnail_path_contract() -> None:
    assert thumbnail_path(Path("/photos/IMG_1.JPG")) == Path("/photos/.IMG_1.thumb")
    assert thumbnail_path(Path("/photos/.hidden.jpg")) == Path("/photos/.hidden.thumb")


def test_is_tool_available(tmp_path: Path) -> None:
    tool = tmp_path / "exiftool"
    tool.write_text("#!/bin/sh\n", encoding="utf-8")
    assert is_tool_available(str(tool), "exiftool") is True
    assert is_tool_available(str(tmp_path / "missing-tool"), "exiftool") is False
