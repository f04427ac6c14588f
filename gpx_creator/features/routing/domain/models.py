"""経路機能のドメインモデル"""
from dataclasses import dataclass
from typing import Optional

from ...geo.domain.models import Coordinate


@dataclass(frozen=True)
class RoutePolyline:
    """経路プロバイダーが返すポリライン（受信後は不変）"""

    points: tuple[Coordinate, ...]
    distance_meters: Optional[float] = None  # プロバイダー報告の距離
    expected_travel_seconds: Optional[float] = None  # プロバイダー報告の所要時間

    def __len__(self) -> int:
        return len(self.points)
