"""
OSRM /route エンドポイントによる経路計算

OSRM固有の事情（座標は lon,lat の順、URL構成、レスポンスの code 判定）はここに閉じ込める
"""
import asyncio
from typing import Any, Optional

from ....shared.exceptions.errors import HTTPError, RouteCalculationFailedError
from ....shared.http.client import HTTPClient
from ....shared.logging.config import get_logger
from ...geo.domain.models import Coordinate
from ..domain.models import RoutePolyline
from .base import DirectionsProvider

logger = get_logger(__name__)


class OSRMDirectionsProvider(DirectionsProvider):
    """OSRM 実装"""

    def __init__(
        self,
        base_url: str,
        http_client: Optional[HTTPClient] = None,
        profile: str = "driving",
    ) -> None:
        """
        Args:
            base_url: OSRMサーバーのベースURL
            http_client: HTTPクライアント（Noneの場合は新規作成）
            profile: 移動手段 (driving, walking, cycling)
        """
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client or HTTPClient()
        self.profile = profile
        logger.info(f"OSRMDirectionsProvider initialized: {self.base_url} ({profile})")

    def build_url(self, start: Coordinate, end: Coordinate) -> str:
        """/route のURLを構築（OSRMは lon,lat の順）"""
        coordinates = ";".join(f"{c.longitude},{c.latitude}" for c in (start, end))
        return f"{self.base_url}/route/v1/{self.profile}/{coordinates}"

    async def calculate_route(self, start: Coordinate, end: Coordinate) -> RoutePolyline:
        """
        経路を計算

        Raises:
            RouteCalculationFailedError: リクエストに失敗した場合、または経路がない場合
        """
        url = self.build_url(start, end)
        params = {"overview": "full", "geometries": "geojson"}

        try:
            data = await asyncio.to_thread(self.http_client.get_json, url, params)
        except HTTPError as e:
            raise RouteCalculationFailedError(str(e)) from e

        route = parse_osrm_response(data)
        logger.info(f"Route received: {len(route)} points, {route.distance_meters} m")
        return route


def parse_osrm_response(data: dict[str, Any]) -> RoutePolyline:
    """
    OSRMのレスポンスをRoutePolylineに変換

    Raises:
        RouteCalculationFailedError: code が Ok でない場合、または経路がない場合
    """
    if data.get("code") != "Ok":
        raise RouteCalculationFailedError(f"OSRM error: {data.get('message', 'Unknown error')}")

    routes = data.get("routes") or []
    if not routes:
        raise RouteCalculationFailedError("No route found")

    # 最初の経路を使用
    route = routes[0]
    geometry = route.get("geometry", {}).get("coordinates", [])
    if not geometry:
        raise RouteCalculationFailedError("Route has no geometry")

    return RoutePolyline(
        points=tuple(Coordinate(latitude=lat, longitude=lon) for lon, lat in geometry),
        distance_meters=route.get("distance"),
        expected_travel_seconds=route.get("duration"),
    )
