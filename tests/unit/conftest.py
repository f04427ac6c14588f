"""ユニットテスト共通のフィクスチャ"""
import pytest

from gpx_creator.features.geocoding.providers.cache_geocoder import CacheGeocoder
from gpx_creator.features.notifications.services.notification_center import NotificationCenter
from gpx_creator.features.selection.services.selection_state_machine import SelectionStateMachine
from gpx_creator.infrastructure.config.settings import Settings
from tests.unit.fakes import (
    FIXED_NOW,
    OAKLAND,
    SAN_FRANCISCO,
    FakeDirectionsProvider,
    FakeReverseGeocoder,
    FakeSearchProvider,
)


@pytest.fixture
def settings() -> Settings:
    """テスト用設定（.envは読み込まない）"""
    return Settings(_env_file=None, search_debounce_seconds=0.01, google_maps_api_key=None)


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def geocoder() -> FakeReverseGeocoder:
    return FakeReverseGeocoder(
        labels={
            SAN_FRANCISCO.key: "San Francisco City Hall, San Francisco, CA",
            OAKLAND.key: "Oakland, CA",
        }
    )


@pytest.fixture
def search_provider() -> FakeSearchProvider:
    return FakeSearchProvider()


@pytest.fixture
def directions() -> FakeDirectionsProvider:
    return FakeDirectionsProvider()


@pytest.fixture
def make_session(settings, notifications, geocoder, search_provider, directions):
    """状態機械を作成する関数（イベントループ内で呼び出すこと）"""

    def _make(**overrides) -> SelectionStateMachine:
        return SelectionStateMachine(
            search_provider=overrides.get("search_provider", search_provider),
            geocoder=CacheGeocoder(overrides.get("geocoder", geocoder), capacity=settings.geocode_cache_capacity),
            directions=overrides.get("directions", directions),
            notifications=notifications,
            settings=overrides.get("settings", settings),
            clock=lambda: FIXED_NOW,
        )

    return _make
