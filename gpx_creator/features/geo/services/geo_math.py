"""
距離・範囲計算

距離はWGS-84楕円体上の測地線距離（pyproj.Geod）で計算する。
"""
from typing import Sequence

from pyproj import Geod

from ....shared.exceptions.errors import InvalidCoordinateError
from ..domain.models import Coordinate, MapRegion

_GEOD = Geod(ellps="WGS84")

# 単一地点にズームする際の表示幅（度）
POINT_SPAN_DEGREES = 0.05
# 2地点を表示する際の余白倍率
BETWEEN_PADDING = 1.5


def is_valid_coordinate(coordinate: Coordinate) -> bool:
    """座標が有効範囲内かどうか"""
    return coordinate.is_valid


def validate_coordinate(coordinate: Coordinate) -> Coordinate:
    """
    座標を検証

    Raises:
        InvalidCoordinateError: 緯度・経度が範囲外の場合
    """
    if not coordinate.is_valid:
        raise InvalidCoordinateError(
            f"Invalid coordinate: ({coordinate.latitude}, {coordinate.longitude})"
        )
    return coordinate


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """
    2点間の地表距離（メートル）

    Args:
        a: 始点
        b: 終点

    Returns:
        float: 測地線距離（メートル）

    Raises:
        InvalidCoordinateError: いずれかの座標が不正な場合
    """
    validate_coordinate(a)
    validate_coordinate(b)
    if a == b:
        return 0.0
    # Geod.invは (lon, lat) の順
    _, _, dist = _GEOD.inv(a.longitude, a.latitude, b.longitude, b.latitude)
    return float(dist)


def polyline_length(points: Sequence[Coordinate]) -> float:
    """
    ポリラインの全長（メートル）

    0点・1点の場合は0を返す
    """
    total = 0.0
    for prev, cur in zip(points, points[1:]):
        total += distance_meters(prev, cur)
    return total


def region_around(coordinate: Coordinate, span: float = POINT_SPAN_DEGREES) -> MapRegion:
    """指定地点を中心とした表示範囲"""
    return MapRegion(center=coordinate, latitude_delta=span, longitude_delta=span)


def region_between(a: Coordinate, b: Coordinate) -> MapRegion:
    """
    2地点がともに収まる表示範囲

    中心は2点の中点、幅は差分の1.5倍（最小0.05度）
    """
    center = Coordinate(
        latitude=(a.latitude + b.latitude) / 2,
        longitude=(a.longitude + b.longitude) / 2,
    )
    lat_delta = abs(a.latitude - b.latitude) * BETWEEN_PADDING
    lon_delta = abs(a.longitude - b.longitude) * BETWEEN_PADDING
    return MapRegion(
        center=center,
        latitude_delta=max(lat_delta, POINT_SPAN_DEGREES),
        longitude_delta=max(lon_delta, POINT_SPAN_DEGREES),
    )


def bounding_region(points: Sequence[Coordinate]) -> MapRegion:
    """
    全点を囲む矩形の表示範囲（経路全体表示用）

    Raises:
        ValueError: 点が空の場合
    """
    if not points:
        raise ValueError("Cannot compute bounding region of an empty polyline")

    min_lat = min(p.latitude for p in points)
    max_lat = max(p.latitude for p in points)
    min_lon = min(p.longitude for p in points)
    max_lon = max(p.longitude for p in points)

    return MapRegion(
        center=Coordinate(latitude=(min_lat + max_lat) / 2, longitude=(min_lon + max_lon) / 2),
        latitude_delta=max_lat - min_lat,
        longitude_delta=max_lon - min_lon,
    )
