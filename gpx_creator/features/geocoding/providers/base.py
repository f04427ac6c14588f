"""逆ジオコーダーの抽象基底クラス"""

from abc import ABC, abstractmethod

from ...geo.domain.models import Coordinate
from ..domain.models import GeoLocation


class ReverseGeocoder(ABC):
    """座標から住所を取得するプロバイダー"""

    @abstractmethod
    async def reverse_geocode(self, coordinate: Coordinate) -> GeoLocation:
        """
        座標から住所を取得

        Args:
            coordinate: 対象座標

        Returns:
            GeoLocation: 住所情報

        Raises:
            GeocodingError: 取得に失敗した場合、または結果がない場合
        """
        pass
