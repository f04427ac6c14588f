"""
GPX 1.1 の生成

経路は<trk>ではなく<wpt>の並びとして出力する。各点には走行速度から
算出した時刻を付与し、位置シミュレーターが移動するトラックとして
再生できるようにする。
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Sequence

import gpxpy.gpx

from ....shared.exceptions.errors import InvalidSpeedError
from ....shared.logging.config import get_logger
from ....shared.utils.datetime_utils import format_duration, to_utc
from ....shared.utils.text import first_comma_segment, to_filename_part
from ...geo.domain.models import Coordinate
from ...geo.services.geo_math import distance_meters, validate_coordinate
from ...geo.services.polyline_sampler import DEFAULT_MAX_POINTS, sample

logger = get_logger(__name__)

GPX_VERSION = "1.1"
DEFAULT_CREATOR = "GPX Creator"


@dataclass(frozen=True)
class ExportArtifact:
    """保存ダイアログに渡すGPX本文と推奨ファイル名"""

    content: str
    suggested_filename: str


def speed_to_mps(speed_kmh: float) -> float:
    """
    km/h を m/s に変換

    Raises:
        InvalidSpeedError: 速度が0以下の場合
    """
    if speed_kmh <= 0:
        raise InvalidSpeedError(f"Speed must be positive, got {speed_kmh} km/h")
    return speed_kmh / 3.6


def segment_seconds(a: Coordinate, b: Coordinate, speed_mps: float) -> int:
    """区間の所要秒数（切り捨て、最低1秒）"""
    return max(1, int(distance_meters(a, b) / speed_mps))


def serialize_route(
    points: Sequence[Coordinate],
    speed_kmh: float,
    start_label: str,
    end_label: str,
    now: datetime,
    max_points: int = DEFAULT_MAX_POINTS,
    creator: str = DEFAULT_CREATOR,
    assume_tz: str = "UTC",
) -> str:
    """
    経路をGPX文字列に変換

    Args:
        points: 経路の座標列
        speed_kmh: シミュレーション速度（km/h）
        start_label: 出発地の表示名（空なら "Start"）
        end_label: 目的地の表示名（空なら "End"）
        now: 最初のウェイポイントの時刻
        max_points: 出力する最大ウェイポイント数
        creator: gpx要素のcreator属性
        assume_tz: nowがnaiveな場合に仮定するタイムゾーン

    Returns:
        str: GPX 1.1 XML

    Raises:
        InvalidSpeedError: 速度が0以下の場合
    """
    speed_mps = speed_to_mps(speed_kmh)
    sampled = sample(points, max_points)

    start_name = start_label or "Start"
    end_name = end_label or "End"
    current_time = _start_time(now, assume_tz)

    gpx = _new_gpx(creator)
    gpx.name = f"Route from {start_name} to {end_name}"
    gpx.time = current_time

    elapsed = 0
    previous: Optional[Coordinate] = None
    for coordinate in sampled:
        if previous is not None:
            seconds = segment_seconds(previous, coordinate, speed_mps)
            elapsed += seconds
            current_time += timedelta(seconds=seconds)
        previous = coordinate

        gpx.waypoints.append(
            gpxpy.gpx.GPXWaypoint(
                latitude=coordinate.latitude,
                longitude=coordinate.longitude,
                time=current_time,
            )
        )

    logger.info(
        f"Route GPX generated: {len(sampled)} waypoints, "
        f"{speed_kmh} km/h, duration {format_duration(elapsed)}"
    )
    return gpx.to_xml(version=GPX_VERSION)


def serialize_waypoint(
    coordinate: Coordinate,
    label: str,
    now: datetime,
    creator: str = DEFAULT_CREATOR,
    assume_tz: str = "UTC",
) -> str:
    """
    単一地点をGPX文字列に変換

    Raises:
        InvalidCoordinateError: 座標が不正な場合
    """
    validate_coordinate(coordinate)

    gpx = _new_gpx(creator)
    gpx.waypoints.append(
        gpxpy.gpx.GPXWaypoint(
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
            time=_start_time(now, assume_tz),
            name=label,
        )
    )

    logger.info(f"Waypoint GPX generated: {label}")
    return gpx.to_xml(version=GPX_VERSION)


def route_filename(start_label: str, end_label: str) -> str:
    """経路GPXの推奨ファイル名（拡張子なし）"""
    return to_filename_part(
        f"{first_comma_segment(start_label)}_to_{first_comma_segment(end_label)}"
    )


def waypoint_filename(label: str) -> str:
    """単一地点GPXの推奨ファイル名（拡張子なし）"""
    return to_filename_part(first_comma_segment(label))


def _new_gpx(creator: str) -> gpxpy.gpx.GPX:
    gpx = gpxpy.gpx.GPX()
    gpx.creator = creator
    return gpx


def _start_time(now: datetime, assume_tz: str) -> datetime:
    # <time>は秒精度
    return to_utc(now, assume_tz).replace(microsecond=0)
