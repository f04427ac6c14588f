"""GPX生成のテスト"""
from datetime import datetime, timedelta, timezone

import gpxpy
import pytest

from gpx_creator.features.geo.domain.models import Coordinate
from gpx_creator.features.geo.services.geo_math import polyline_length
from gpx_creator.features.gpx.services.gpx_serializer import (
    route_filename,
    segment_seconds,
    serialize_route,
    serialize_waypoint,
    speed_to_mps,
    waypoint_filename,
)
from gpx_creator.shared.exceptions.errors import InvalidCoordinateError, InvalidSpeedError

NOW = datetime(2025, 9, 15, 10, 0, 0, tzinfo=timezone.utc)


def meridian(count: int, total_degrees: float) -> list[Coordinate]:
    """子午線に沿った等間隔の座標列"""
    return [
        Coordinate(latitude=35.0 + total_degrees * i / (count - 1), longitude=139.0)
        for i in range(count)
    ]


def test_route_gpx_structure() -> None:
    """経路GPXはGPX 1.1、metadataと<wpt>の並び（<trk>なし）"""
    points = meridian(5, 0.01)
    xml = serialize_route(points, 60.0, "Tokyo Station, Tokyo", "Shinagawa, Tokyo", NOW)

    assert xml.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert 'xmlns="http://www.topografix.com/GPX/1/1"' in xml
    assert "<metadata>" in xml

    gpx = gpxpy.parse(xml)
    assert gpx.version == "1.1"
    assert gpx.creator == "GPX Creator"
    assert gpx.tracks == []
    assert gpx.routes == []
    assert gpx.name == "Route from Tokyo Station, Tokyo to Shinagawa, Tokyo"
    assert gpx.time == NOW
    assert len(gpx.waypoints) == 5


def test_route_metadata_uses_placeholders_for_empty_labels() -> None:
    """住所が空の場合は Start / End"""
    gpx = gpxpy.parse(serialize_route(meridian(3, 0.01), 20.0, "", "", NOW))
    assert gpx.name == "Route from Start to End"


def test_route_coordinates_round_trip() -> None:
    """出力した緯度経度は元の値に戻せる"""
    points = [
        Coordinate(latitude=37.774929, longitude=-122.419416),
        Coordinate(latitude=37.8044, longitude=-122.2712),
        Coordinate(latitude=-33.8688197, longitude=151.2092955),
    ]
    gpx = gpxpy.parse(serialize_route(points, 50.0, "A", "B", NOW))

    parsed = [Coordinate(latitude=w.latitude, longitude=w.longitude) for w in gpx.waypoints]
    assert parsed == points


def test_route_timestamps_strictly_increase() -> None:
    """同一座標が続いても時刻は最低1秒ずつ進む"""
    p = Coordinate(latitude=35.0, longitude=139.0)
    points = [p, p, p, Coordinate(latitude=35.0001, longitude=139.0)]

    times = [w.time for w in gpxpy.parse(serialize_route(points, 100.0, "A", "B", NOW)).waypoints]

    assert times[0] == NOW
    assert all(b - a >= timedelta(seconds=1) for a, b in zip(times, times[1:]))


def test_route_timestamps_follow_speed() -> None:
    """80km・3000点の経路を60km/hで出力すると約4800秒"""
    points = meridian(3000, 0.7195)
    total = polyline_length(points)
    assert total == pytest.approx(80_000, rel=0.01)

    times = [w.time for w in gpxpy.parse(serialize_route(points, 60.0, "A", "B", NOW)).waypoints]

    assert len(times) <= 200
    assert times[0] == NOW

    elapsed = (times[-1] - times[0]).total_seconds()
    expected = total / (60.0 / 3.6)
    segments = len(times) - 1
    # 区間ごとの切り捨てで最大1秒ずつ短くなる
    assert expected - segments - 1 <= elapsed <= expected + 1


def test_naive_start_time_is_interpreted_in_assumed_timezone() -> None:
    """タイムゾーンなしの開始時刻は assume_tz として解釈しUTCで出力"""
    naive = datetime(2025, 9, 15, 19, 0, 0)
    xml = serialize_route(meridian(2, 0.001), 20.0, "A", "B", naive, assume_tz="Asia/Tokyo")
    assert "<time>2025-09-15T10:00:00Z</time>" in xml
    assert gpxpy.parse(xml).time == NOW


def test_start_time_is_truncated_to_seconds() -> None:
    """時刻は秒精度で出力する"""
    xml = serialize_route(meridian(2, 0.001), 20.0, "A", "B", NOW.replace(microsecond=750_000))
    assert "<time>2025-09-15T10:00:00Z</time>" in xml


@pytest.mark.parametrize("speed", [0.0, -10.0])
def test_non_positive_speed_rejected(speed: float) -> None:
    """速度0以下はエラー"""
    with pytest.raises(InvalidSpeedError):
        serialize_route(meridian(3, 0.01), speed, "A", "B", NOW)
    with pytest.raises(InvalidSpeedError):
        speed_to_mps(speed)


def test_segment_seconds_floor_with_minimum() -> None:
    """区間秒数は切り捨てで最低1秒"""
    a = Coordinate(latitude=0.0, longitude=0.0)
    b = Coordinate(latitude=0.0, longitude=1.0)  # 約111319m
    assert segment_seconds(a, b, 10.0) == 11131
    assert segment_seconds(a, a, 10.0) == 1


def test_waypoint_gpx() -> None:
    """単一地点GPXは<name>と<time>を持つ<wpt>1件"""
    c = Coordinate(latitude=37.7749, longitude=-122.4194)
    xml = serialize_waypoint(c, "Golden Gate Park, San Francisco", NOW)
    gpx = gpxpy.parse(xml)

    assert len(gpx.waypoints) == 1
    wpt = gpx.waypoints[0]
    assert (wpt.latitude, wpt.longitude) == (37.7749, -122.4194)
    assert wpt.name == "Golden Gate Park, San Francisco"
    assert wpt.time == NOW
    assert "<time>2025-09-15T10:00:00Z</time>" in xml


def test_waypoint_label_is_escaped() -> None:
    """ラベル中のXML特殊文字はエスケープされる"""
    c = Coordinate(latitude=1.0, longitude=2.0)
    xml = serialize_waypoint(c, "Tom & Jerry <Cafe>", NOW)
    assert "<Cafe>" not in xml
    assert gpxpy.parse(xml).waypoints[0].name == "Tom & Jerry <Cafe>"


def test_waypoint_invalid_coordinate_rejected() -> None:
    """不正な座標はエラー"""
    with pytest.raises(InvalidCoordinateError):
        serialize_waypoint(Coordinate(latitude=95.0, longitude=0.0), "X", NOW)


@pytest.mark.parametrize(
    "start,end,expected",
    [
        ("Golden Gate Park, San Francisco, CA", "Oakland, CA", "Golden_Gate_Park_to_Oakland"),
        ("San Francisco City Hall", "Pier 39", "San_Francisco_City_Hall_to_Pier_39"),
        ("\"Quoted Place\", X", "End.", "Quoted_Place\"_to_End"),
    ],
)
def test_route_filename(start: str, end: str, expected: str) -> None:
    """経路のファイル名は先頭要素同士を _to_ で連結"""
    assert route_filename(start, end) == expected


@pytest.mark.parametrize(
    "label,expected",
    [
        ("Golden Gate Park, San Francisco, CA", "Golden_Gate_Park"),
        ("東京駅, 東京都", "東京駅"),
        ("Waypoint", "Waypoint"),
        ("Unit 5/7 Main St, Springfield", "Unit_5_7_Main_St"),
    ],
)
def test_waypoint_filename(label: str, expected: str) -> None:
    """単一地点のファイル名はラベルの先頭要素"""
    assert waypoint_filename(label) == expected
