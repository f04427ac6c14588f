"""ポリラインの間引き（距離ベース）"""
from typing import Sequence

from ....shared.logging.config import get_logger
from ..domain.models import Coordinate
from .geo_math import distance_meters, polyline_length

logger = get_logger(__name__)

DEFAULT_MAX_POINTS = 200


def sample(points: Sequence[Coordinate], max_points: int = DEFAULT_MAX_POINTS) -> list[Coordinate]:
    """
    ポリラインを最大 max_points 点に間引く

    インデックス間隔ではなく経路上の距離が均等になるように点を選ぶため、
    都市部の密な区間でもカーブ形状が崩れにくい。
    始点と終点は必ず含まれる。

    Args:
        points: 入力座標列
        max_points: 出力する最大点数（2以上）

    Returns:
        list[Coordinate]: 間引き後の座標列（max_points 以下なら入力そのまま）

    Raises:
        ValueError: max_points が2未満の場合
    """
    if max_points < 2:
        raise ValueError(f"max_points must be at least 2, got {max_points}")

    count = len(points)
    if count == 0:
        return []

    if count <= max_points:
        return list(points)

    sampled: list[Coordinate] = [points[0]]

    total_distance = polyline_length(points)
    target_distance = total_distance / (max_points - 1)

    accumulated = 0.0
    last_index = count - 1

    for i in range(1, count):
        accumulated += distance_meters(points[i - 1], points[i])

        if accumulated >= target_distance or i == last_index:
            current = points[i]
            if sampled[-1] != current:
                sampled.append(current)
            accumulated = 0.0

            if len(sampled) >= max_points - 1 and i < last_index:
                break

    # 上限で打ち切った場合も終点は必ず含める
    if sampled[-1] != points[last_index]:
        sampled.append(points[last_index])

    logger.debug(
        f"Polyline sampled: {count} points -> {len(sampled)} points "
        f"(target spacing {target_distance:.1f} m)"
    )
    return sampled
