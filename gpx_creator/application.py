"""
アプリケーションの組み立て

設定からプロバイダー・キャッシュ・通知センターを生成し、状態機械に注入する
"""
from dataclasses import dataclass
from typing import Optional

from .features.geocoding.providers.cache_geocoder import CacheGeocoder
from .features.geocoding.providers.google_maps_geocoder import GoogleMapsGeocoder
from .features.notifications.services.notification_center import NotificationCenter
from .features.routing.providers.base import DirectionsProvider
from .features.routing.providers.google_directions import GoogleDirectionsProvider
from .features.routing.providers.osrm_directions import OSRMDirectionsProvider
from .features.search.providers.base import SearchProvider
from .features.search.providers.google_places_search import GooglePlacesSearchProvider
from .features.selection.services.selection_state_machine import SelectionStateMachine
from .infrastructure.config.settings import Settings
from .infrastructure.google.maps_client import create_maps_client
from .shared.http.client import HTTPClient
from .shared.logging.config import get_logger

logger = get_logger(__name__)


@dataclass
class Providers:
    """外部サービスのプロバイダー一式（セッション間で共有する）"""

    search: SearchProvider
    geocoder: CacheGeocoder
    directions: DirectionsProvider
    http_client: Optional[HTTPClient] = None  # OSRM用（Google利用時はNone）

    def close(self) -> None:
        """キャッシュ統計をログに出し、HTTPセッションを閉じる"""
        stats = self.geocoder.get_cache_stats()
        logger.info(
            f"Geocode cache: {stats['cache_size']} entries, "
            f"{stats['hit_count']} hits / {stats['miss_count']} misses "
            f"({stats['hit_rate_percent']}%)"
        )
        if self.http_client is not None:
            self.http_client.close()


def build_providers(settings: Settings) -> Providers:
    """
    設定からプロバイダーを生成

    Raises:
        ConfigurationError: Google Maps API キーが未設定の場合
    """
    maps_client = create_maps_client(settings.google_maps_api_key, timeout=settings.http_timeout)

    http_client: Optional[HTTPClient] = None
    if settings.directions_backend == "osrm":
        http_client = HTTPClient(timeout=settings.http_timeout, max_retries=settings.http_retry)
        directions: DirectionsProvider = OSRMDirectionsProvider(
            settings.osrm_base_url, http_client=http_client
        )
    else:
        directions = GoogleDirectionsProvider(maps_client)

    logger.info(f"Providers built: directions={settings.directions_backend}")
    return Providers(
        search=GooglePlacesSearchProvider(maps_client),
        geocoder=CacheGeocoder(GoogleMapsGeocoder(maps_client), capacity=settings.geocode_cache_capacity),
        directions=directions,
        http_client=http_client,
    )


def build_session(
    settings: Settings,
    providers: Optional[Providers] = None,
    notifications: Optional[NotificationCenter] = None,
) -> SelectionStateMachine:
    """
    1セッション分の状態機械を生成

    Args:
        settings: アプリケーション設定
        providers: 共有するプロバイダー（Noneの場合は設定から生成）
        notifications: 通知センター（Noneの場合は設定の表示時間で新規作成）

    Returns:
        SelectionStateMachine
    """
    providers = providers or build_providers(settings)
    notifications = notifications or NotificationCenter(
        error_seconds=settings.error_display_seconds,
        warning_seconds=settings.warning_display_seconds,
    )

    return SelectionStateMachine(
        search_provider=providers.search,
        geocoder=providers.geocoder,
        directions=providers.directions,
        notifications=notifications,
        settings=settings,
    )
