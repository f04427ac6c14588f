"""Google Places Text Search による場所検索"""
import asyncio
from typing import Any, Optional

import googlemaps

from ....shared.exceptions.errors import SearchFailedError
from ....shared.logging.config import get_logger
from ...geo.domain.models import Coordinate, MapRegion
from ..domain.models import Named, SearchResult, Untitled
from .base import SearchProvider

logger = get_logger(__name__)

# 緯度1度あたりの距離（メートル）
METERS_PER_DEGREE = 111_320.0
# Places APIが受け付ける最大半径（メートル）
MAX_BIAS_RADIUS_METERS = 50_000


class GooglePlacesSearchProvider(SearchProvider):
    """Google Places Text Search 実装"""

    def __init__(self, client: googlemaps.Client) -> None:
        """
        Args:
            client: Google Maps クライアント
        """
        self.client = client
        logger.info("GooglePlacesSearchProvider initialized")

    async def search(self, query: str, region_hint: Optional[MapRegion] = None) -> list[SearchResult]:
        """
        場所を検索

        Raises:
            SearchFailedError: APIリクエストに失敗した場合
        """
        kwargs: dict[str, Any] = {}
        if region_hint is not None:
            kwargs["location"] = region_hint.center.to_tuple()
            kwargs["radius"] = bias_radius_meters(region_hint)

        try:
            logger.debug(f"Searching places: {query!r} {kwargs}")
            response = await asyncio.to_thread(self.client.places, query, **kwargs)

        except googlemaps.exceptions.ApiError as e:
            raise SearchFailedError(f"Google Places API error: {e}") from e
        except googlemaps.exceptions.TransportError as e:
            raise SearchFailedError(f"Google Places transport error: {e}") from e
        except googlemaps.exceptions.Timeout as e:
            raise SearchFailedError(f"Google Places request timed out: {e}") from e

        results = [
            result
            for result in (parse_place(place) for place in response.get("results", []))
            if result is not None
        ]
        logger.debug(f"Places search {query!r}: {len(results)} results")
        return results


def bias_radius_meters(region: MapRegion) -> int:
    """表示範囲の半分の幅を検索半径に換算（APIの上限で切り詰め）"""
    half_span = max(region.latitude_delta, region.longitude_delta) / 2
    radius = half_span * METERS_PER_DEGREE
    if radius > MAX_BIAS_RADIUS_METERS:
        logger.debug(f"Bias radius {radius:.0f} m capped at {MAX_BIAS_RADIUS_METERS} m")
        return MAX_BIAS_RADIUS_METERS
    return int(radius)


def parse_place(place: dict[str, Any]) -> Optional[SearchResult]:
    """
    Places APIの結果1件をSearchResultに変換

    位置情報のない結果はNoneを返す
    """
    location = place.get("geometry", {}).get("location", {})
    lat = location.get("lat")
    lng = location.get("lng")
    if lat is None or lng is None:
        logger.warning(f"Invalid place result (missing lat/lng): {place.get('name')}")
        return None

    name = place.get("name")
    return SearchResult(
        display_name=Named(name) if name else Untitled(),
        subtitle=place.get("formatted_address") or "",
        coordinate=Coordinate(latitude=lat, longitude=lng),
    )
