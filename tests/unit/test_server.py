"""HTTPサーバーのテスト"""
import pytest
from fastapi.testclient import TestClient

from gpx_creator.application import Providers
from gpx_creator.features.geocoding.providers.cache_geocoder import CacheGeocoder
from gpx_creator.server import create_app
from gpx_creator.shared.exceptions.errors import SearchFailedError
from tests.unit.fakes import OAKLAND, SAN_FRANCISCO, FakeDirectionsProvider, FakeSearchProvider, make_result


def coordinate_json(coordinate) -> dict[str, float]:
    return {"latitude": coordinate.latitude, "longitude": coordinate.longitude}


@pytest.fixture
def make_client(settings, geocoder):
    """テスト用プロバイダーを注入したクライアントを作成"""

    def _make(search=None, directions=None) -> TestClient:
        providers = Providers(
            search=search or FakeSearchProvider(),
            geocoder=CacheGeocoder(geocoder),
            directions=directions or FakeDirectionsProvider(),
        )
        return TestClient(create_app(settings, providers))

    return _make


def test_health(make_client) -> None:
    """ヘルスチェック"""
    response = make_client().get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_search_truncates_results(make_client) -> None:
    """検索結果は最大5件、切り詰めたかどうかを返す"""
    search = FakeSearchProvider(results=[make_result(f"Place {i}", 35.0, 139.0) for i in range(7)])
    response = make_client(search=search).get("/search", params={"q": "Place", "lat": 35.0, "lon": 139.0})

    assert response.status_code == 200
    body = response.json()
    assert body["truncated"] is True
    assert [r["label"] for r in body["results"]] == [f"Place {i}" for i in range(5)]
    _, region = search.calls[0]
    assert region.latitude_delta == 10.0


def test_search_failure_returns_bad_gateway(make_client) -> None:
    """検索失敗は502"""
    response = make_client(search=FakeSearchProvider(error=SearchFailedError("offline"))).get(
        "/search", params={"q": "x"}
    )
    assert response.status_code == 502


def test_export_route(make_client) -> None:
    """経路GPXを添付ファイルとして返す"""
    response = make_client().post(
        "/export/route",
        json={"start": coordinate_json(SAN_FRANCISCO), "end": coordinate_json(OAKLAND), "speed_kmh": 40},
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/gpx+xml")
    assert "San_Francisco_City_Hall_to_Oakland.gpx" in response.headers["content-disposition"]
    assert response.text.count("<wpt ") == 10


def test_export_route_with_labels(make_client) -> None:
    """指定した住所ラベルを使う"""
    response = make_client().post(
        "/export/route",
        json={
            "start": coordinate_json(SAN_FRANCISCO),
            "end": coordinate_json(OAKLAND),
            "start_label": "Ferry Building, San Francisco",
            "end_label": "Jack London Square, Oakland",
        },
    )

    assert response.status_code == 200
    assert "Ferry_Building_to_Jack_London_Square.gpx" in response.headers["content-disposition"]


def test_export_route_invalid_speed(make_client) -> None:
    """範囲外の速度は400"""
    response = make_client().post(
        "/export/route",
        json={"start": coordinate_json(SAN_FRANCISCO), "end": coordinate_json(OAKLAND), "speed_kmh": 150},
    )
    assert response.status_code == 400


def test_export_route_provider_failure(make_client) -> None:
    """経路計算の失敗は502"""
    response = make_client(directions=FakeDirectionsProvider(fail=True)).post(
        "/export/route",
        json={"start": coordinate_json(SAN_FRANCISCO), "end": coordinate_json(OAKLAND)},
    )
    assert response.status_code == 502


def test_export_route_rejects_out_of_range_coordinates(make_client) -> None:
    """範囲外の座標はリクエスト検証で拒否"""
    response = make_client().post(
        "/export/route",
        json={"start": {"latitude": 91.0, "longitude": 0.0}, "end": coordinate_json(OAKLAND)},
    )
    assert response.status_code == 422


def test_export_waypoint(make_client) -> None:
    """単一地点GPXを返す"""
    response = make_client().post("/export/waypoint", json={"point": coordinate_json(SAN_FRANCISCO)})

    assert response.status_code == 200
    assert "San_Francisco_City_Hall.gpx" in response.headers["content-disposition"]
    assert "<name>San Francisco City Hall, San Francisco, CA</name>" in response.text
