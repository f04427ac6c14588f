"""経路プロバイダーの抽象基底クラス"""

from abc import ABC, abstractmethod

from ...geo.domain.models import Coordinate
from ..domain.models import RoutePolyline


class DirectionsProvider(ABC):
    """2地点間の自動車経路を返すプロバイダー（結果をそのまま採用し、リトライしない）"""

    @abstractmethod
    async def calculate_route(self, start: Coordinate, end: Coordinate) -> RoutePolyline:
        """
        経路を計算

        Args:
            start: 出発地
            end: 目的地

        Returns:
            RoutePolyline: 経路

        Raises:
            RouteCalculationFailedError: 計算に失敗した場合、または経路が見つからない場合
        """
        pass
