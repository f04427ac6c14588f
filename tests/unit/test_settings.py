"""設定・ユーティリティのテスト"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from gpx_creator.infrastructure.config.settings import Settings
from gpx_creator.shared.utils.datetime_utils import format_duration, to_utc
from gpx_creator.shared.utils.text import first_comma_segment, is_blank, strip_punctuation, to_filename_part


def test_settings_defaults() -> None:
    """既定値"""
    settings = Settings(_env_file=None)

    assert settings.default_simulation_speed_kmh == 20.0
    assert settings.min_simulation_speed_kmh == 20.0
    assert settings.max_simulation_speed_kmh == 100.0
    assert settings.geocode_cache_capacity == 50
    assert settings.search_result_limit == 5
    assert settings.route_max_points == 200
    assert settings.error_display_seconds == 4.0
    assert settings.warning_display_seconds == 3.0
    assert settings.environment == "development"


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """環境変数で上書きできる"""
    monkeypatch.setenv("DIRECTIONS_BACKEND", "osrm")
    monkeypatch.setenv("ROUTE_MAX_POINTS", "500")
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = Settings(_env_file=None)

    assert settings.directions_backend == "osrm"
    assert settings.route_max_points == 500
    assert settings.environment == "production"


def test_settings_rejects_inverted_speed_bounds() -> None:
    """速度の下限が上限を超える設定はエラー"""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, min_simulation_speed_kmh=120.0, max_simulation_speed_kmh=100.0)


def test_settings_rejects_unknown_backend() -> None:
    """未対応の経路バックエンドはエラー"""
    with pytest.raises(ValidationError):
        Settings(_env_file=None, directions_backend="mapbox")


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Golden Gate Park, San Francisco", "Golden Gate Park"),
        ("No comma", "No comma"),
        ("", ""),
    ],
)
def test_first_comma_segment(text: str, expected: str) -> None:
    """カンマ区切りの先頭要素"""
    assert first_comma_segment(text) == expected


def test_filename_helpers() -> None:
    """空白はアンダースコア、前後の句読点は除去"""
    assert to_filename_part("Pier 39") == "Pier_39"
    assert to_filename_part("Unit 5/7 Main St") == "Unit_5_7_Main_St"
    assert to_filename_part("C:\\Temp") == "C:_Temp"
    assert strip_punctuation("...hello!?") == "hello"
    assert strip_punctuation("「東京」") == "東京"
    assert is_blank("   ")
    assert not is_blank(" a ")


def test_to_utc_localizes_naive_datetime() -> None:
    """タイムゾーンなしは指定タイムゾーンとして解釈しUTCに変換"""
    assert to_utc(datetime(2025, 1, 1, 18, 0, 0), "Asia/Tokyo") == datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "seconds,expected",
    [
        (0, "0s"),
        (59, "59s"),
        (4800, "1h 20m"),
        (5025, "1h 23m 45s"),
    ],
)
def test_format_duration(seconds: float, expected: str) -> None:
    """所要時間の表示"""
    assert format_duration(seconds) == expected
