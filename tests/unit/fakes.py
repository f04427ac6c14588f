"""ユニットテスト用の固定値とテスト用プロバイダー"""
import asyncio
from datetime import datetime, timezone
from typing import Optional

from gpx_creator.features.geo.domain.models import Coordinate, MapRegion
from gpx_creator.features.geocoding.domain.models import GeoLocation
from gpx_creator.features.geocoding.providers.base import ReverseGeocoder
from gpx_creator.features.routing.domain.models import RoutePolyline
from gpx_creator.features.routing.providers.base import DirectionsProvider
from gpx_creator.features.search.domain.models import Named, SearchResult
from gpx_creator.features.search.providers.base import SearchProvider
from gpx_creator.shared.exceptions.errors import GeocodingError, RouteCalculationFailedError

FIXED_NOW = datetime(2025, 9, 15, 10, 0, 0, tzinfo=timezone.utc)

SAN_FRANCISCO = Coordinate(latitude=37.7749, longitude=-122.4194)
OAKLAND = Coordinate(latitude=37.8044, longitude=-122.2712)


def make_result(name: str, latitude: float, longitude: float, subtitle: str = "") -> SearchResult:
    """検索結果を作成"""
    return SearchResult(
        display_name=Named(name),
        subtitle=subtitle,
        coordinate=Coordinate(latitude=latitude, longitude=longitude),
    )


class FakeSearchProvider(SearchProvider):
    """呼び出しを記録するテスト用検索プロバイダー"""

    def __init__(
        self,
        results: Optional[list[SearchResult]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.results = results if results is not None else [make_result("San Francisco", 37.7749, -122.4194)]
        self.error = error
        self.delay = delay
        self.calls: list[tuple[str, Optional[MapRegion]]] = []

    async def search(self, query: str, region_hint: Optional[MapRegion] = None) -> list[SearchResult]:
        self.calls.append((query, region_hint))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.results)


class FakeReverseGeocoder(ReverseGeocoder):
    """座標ごとに決まった住所を返すテスト用逆ジオコーダー"""

    def __init__(self, labels: Optional[dict[tuple[float, float], str]] = None, fail: bool = False) -> None:
        self.labels = labels or {}
        self.fail = fail
        self.calls: list[Coordinate] = []

    async def reverse_geocode(self, coordinate: Coordinate) -> GeoLocation:
        self.calls.append(coordinate)
        if self.fail:
            raise GeocodingError("geocoder unavailable")
        return GeoLocation(
            latitude=coordinate.latitude,
            longitude=coordinate.longitude,
            name=self.labels.get(coordinate.key),
        )


class FakeDirectionsProvider(DirectionsProvider):
    """直線の経路を返すテスト用経路プロバイダー"""

    def __init__(self, fail: bool = False, points: int = 10) -> None:
        self.fail = fail
        self.points = points
        self.calls: list[tuple[Coordinate, Coordinate]] = []

    async def calculate_route(self, start: Coordinate, end: Coordinate) -> RoutePolyline:
        self.calls.append((start, end))
        if self.fail:
            raise RouteCalculationFailedError("directions unavailable")
        steps = self.points - 1
        return RoutePolyline(
            points=tuple(
                Coordinate(
                    latitude=start.latitude + (end.latitude - start.latitude) * i / steps,
                    longitude=start.longitude + (end.longitude - start.longitude) * i / steps,
                )
                for i in range(self.points)
            )
        )
