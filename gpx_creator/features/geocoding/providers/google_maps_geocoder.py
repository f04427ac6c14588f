"""Google Maps Geocoding API実装"""
import asyncio
from typing import Any, Optional

import googlemaps

from ....shared.exceptions.errors import GeocodingError
from ....shared.logging.config import get_logger
from ...geo.domain.models import Coordinate
from ..domain.models import GeoLocation
from .base import ReverseGeocoder

logger = get_logger(__name__)

# 地点名として扱うaddress_componentsのタイプ（優先順）
_NAME_TYPES = ("point_of_interest", "establishment", "premise", "natural_feature", "airport", "park")


class GoogleMapsGeocoder(ReverseGeocoder):
    """Google Maps Geocoding API実装"""

    def __init__(self, client: googlemaps.Client) -> None:
        """
        Args:
            client: Google Maps クライアント
        """
        self.client = client
        logger.info("GoogleMapsGeocoder initialized")

    async def reverse_geocode(self, coordinate: Coordinate) -> GeoLocation:
        """
        座標から住所を取得（逆ジオコーディング）

        同期APIクライアントをワーカースレッドで実行する

        Raises:
            GeocodingError: APIリクエストに失敗した場合、または結果がない場合
        """
        latitude, longitude = coordinate.to_tuple()
        try:
            logger.debug(f"Reverse geocoding: ({latitude}, {longitude})")

            # Google Maps Reverse Geocoding APIを呼び出し
            results = await asyncio.to_thread(self.client.reverse_geocode, (latitude, longitude))

        except googlemaps.exceptions.ApiError as e:
            raise GeocodingError(f"Google Maps API error: {e}") from e
        except googlemaps.exceptions.TransportError as e:
            raise GeocodingError(f"Google Maps transport error: {e}") from e
        except googlemaps.exceptions.Timeout as e:
            raise GeocodingError(f"Google Maps request timed out: {e}") from e

        if not results:
            raise GeocodingError(f"No address found for: ({latitude}, {longitude})")

        # 最初の結果を使用
        geo_location = parse_geocode_result(results[0], coordinate)

        logger.debug(
            f"Reverse geocoded: ({latitude}, {longitude}) -> {geo_location.formatted_address}"
        )
        return geo_location


def parse_geocode_result(result: dict[str, Any], coordinate: Coordinate) -> GeoLocation:
    """
    Geocoding APIの結果1件をGeoLocationに変換

    Args:
        result: APIレスポンスの1要素
        coordinate: 問い合わせた座標

    Returns:
        GeoLocation
    """
    components = result.get("address_components", [])

    def find(*types: str) -> Optional[str]:
        for wanted in types:
            for component in components:
                if wanted in component.get("types", []):
                    return component.get("long_name")
        return None

    name = find(*_NAME_TYPES)
    if name is None:
        # 番地 + 通り名（"1 Infinite Loop"）
        street = find("route")
        number = find("street_number")
        if street:
            name = f"{number} {street}" if number else street

    return GeoLocation(
        latitude=coordinate.latitude,
        longitude=coordinate.longitude,
        name=name,
        locality=find("locality", "postal_town", "administrative_area_level_2"),
        administrative_area=find("administrative_area_level_1"),
        formatted_address=result.get("formatted_address"),
        place_id=result.get("place_id"),
    )
