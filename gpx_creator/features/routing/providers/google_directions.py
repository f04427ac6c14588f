"""Google Maps Directions API による経路計算"""
import asyncio
from typing import Any

import googlemaps
from googlemaps.convert import decode_polyline

from ....shared.exceptions.errors import RouteCalculationFailedError
from ....shared.logging.config import get_logger
from ...geo.domain.models import Coordinate
from ..domain.models import RoutePolyline
from .base import DirectionsProvider

logger = get_logger(__name__)


class GoogleDirectionsProvider(DirectionsProvider):
    """Google Maps Directions API 実装（自動車）"""

    def __init__(self, client: googlemaps.Client) -> None:
        """
        Args:
            client: Google Maps クライアント
        """
        self.client = client
        logger.info("GoogleDirectionsProvider initialized")

    async def calculate_route(self, start: Coordinate, end: Coordinate) -> RoutePolyline:
        """
        経路を計算

        Raises:
            RouteCalculationFailedError: APIリクエストに失敗した場合、または経路がない場合
        """
        try:
            logger.debug(f"Requesting directions: {start.to_tuple()} -> {end.to_tuple()}")
            routes = await asyncio.to_thread(
                self.client.directions,
                start.to_tuple(),
                end.to_tuple(),
                mode="driving",
            )

        except googlemaps.exceptions.ApiError as e:
            raise RouteCalculationFailedError(f"Google Directions API error: {e}") from e
        except googlemaps.exceptions.TransportError as e:
            raise RouteCalculationFailedError(f"Google Directions transport error: {e}") from e
        except googlemaps.exceptions.Timeout as e:
            raise RouteCalculationFailedError(f"Google Directions request timed out: {e}") from e

        if not routes:
            raise RouteCalculationFailedError("No route found")

        # 最初の経路を使用
        route = parse_directions_route(routes[0])
        logger.info(f"Route received: {len(route)} points, {route.distance_meters} m")
        return route


def parse_directions_route(route: dict[str, Any]) -> RoutePolyline:
    """
    Directions APIの経路1件をRoutePolylineに変換

    概要ポリラインは簡略化されているため、各ステップの詳細ポリラインを連結する

    Raises:
        RouteCalculationFailedError: ポリラインを含まない場合
    """
    points: list[Coordinate] = []
    distance = 0.0
    duration = 0.0

    for leg in route.get("legs", []):
        distance += leg.get("distance", {}).get("value", 0)
        duration += leg.get("duration", {}).get("value", 0)
        for step in leg.get("steps", []):
            encoded = step.get("polyline", {}).get("points")
            if not encoded:
                continue
            for latlng in decode_polyline(encoded):
                coordinate = Coordinate(latitude=latlng["lat"], longitude=latlng["lng"])
                # ステップの境界点は重複するため除外
                if not points or points[-1] != coordinate:
                    points.append(coordinate)

    if not points:
        encoded = route.get("overview_polyline", {}).get("points")
        if encoded:
            points = [Coordinate(latitude=p["lat"], longitude=p["lng"]) for p in decode_polyline(encoded)]

    if not points:
        raise RouteCalculationFailedError("Route has no geometry")

    return RoutePolyline(
        points=tuple(points),
        distance_meters=distance or None,
        expected_travel_seconds=duration or None,
    )
