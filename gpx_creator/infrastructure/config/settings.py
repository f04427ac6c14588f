"""アプリケーション設定（Pydantic Settings）"""
from typing import Literal, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    environment: str = Field(
        default="development",
        description="環境 (development, staging, production)",
    )
    gpx_creator_name: str = Field(
        default="GPX Creator",
        description="GPXファイルのcreator属性",
    )

    # Providers
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps API Key（検索・逆ジオコーディング・経路計算）",
    )
    directions_backend: Literal["google", "osrm"] = Field(
        default="google",
        description="経路計算バックエンド (google, osrm)",
    )
    osrm_base_url: str = Field(
        default="https://router.project-osrm.org",
        description="OSRMサーバーのベースURL",
    )
    http_timeout: int = Field(
        default=10,
        description="HTTPリクエストのタイムアウト（秒）",
    )
    http_retry: int = Field(
        default=3,
        description="HTTPリクエストのリトライ回数",
    )

    # Search
    search_debounce_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="検索入力のデバウンス時間（秒）",
    )
    search_result_limit: int = Field(
        default=5,
        gt=0,
        description="表示する検索結果の最大件数",
    )
    search_bias_span_degrees: float = Field(
        default=10.0,
        gt=0.0,
        description="出発地周辺に検索を寄せる範囲（度、約1000km）",
    )

    # Geocoding
    geocode_cache_capacity: int = Field(
        default=50,
        gt=0,
        description="逆ジオコーディングキャッシュの最大件数",
    )

    # Route / GPX
    route_max_points: int = Field(
        default=200,
        ge=2,
        description="GPXに出力する最大ウェイポイント数",
    )
    default_simulation_speed_kmh: float = Field(
        default=20.0,
        description="初期シミュレーション速度（km/h）",
    )
    min_simulation_speed_kmh: float = Field(
        default=20.0,
        gt=0.0,
        description="シミュレーション速度の下限（km/h）",
    )
    max_simulation_speed_kmh: float = Field(
        default=100.0,
        gt=0.0,
        description="シミュレーション速度の上限（km/h）",
    )
    export_timezone: str = Field(
        default="UTC",
        description="タイムゾーン情報のない開始時刻を解釈するタイムゾーン",
    )

    # Map
    fallback_latitude: float = Field(
        default=22.47769553,
        ge=-90.0,
        le=90.0,
        description="初期表示地点の緯度",
    )
    fallback_longitude: float = Field(
        default=70.0467413,
        ge=-180.0,
        le=180.0,
        description="初期表示地点の経度",
    )
    fallback_span_degrees: float = Field(
        default=0.15,
        gt=0.0,
        description="初期表示範囲（度）",
    )

    # Notifications
    error_display_seconds: float = Field(
        default=4.0,
        description="エラー通知の表示時間（秒）",
    )
    warning_display_seconds: float = Field(
        default=3.0,
        description="警告通知の表示時間（秒）",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # HTTP server
    port: int = Field(
        default=8080,
        description="HTTPサーバーのポート番号",
    )

    @model_validator(mode="after")
    def _check_speed_bounds(self) -> "Settings":
        """速度の上下限の整合性をチェック"""
        if self.min_simulation_speed_kmh > self.max_simulation_speed_kmh:
            raise ValueError("min_simulation_speed_kmh must not exceed max_simulation_speed_kmh")
        return self
