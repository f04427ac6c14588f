"""Google Maps APIクライアントの生成"""
from typing import Optional

import googlemaps

from ...shared.exceptions.errors import ConfigurationError
from ...shared.logging.config import get_logger

logger = get_logger(__name__)


def create_maps_client(api_key: Optional[str], timeout: Optional[int] = None) -> googlemaps.Client:
    """
    検索・逆ジオコーディング・経路計算で共有するクライアントを生成

    Args:
        api_key: Google Maps API キー
        timeout: リクエスト全体のタイムアウト（秒、Noneなら無制限）

    Returns:
        googlemaps.Client

    Raises:
        ConfigurationError: APIキーが未設定、または不正な場合
    """
    if not api_key:
        raise ConfigurationError("GOOGLE_MAPS_API_KEY is not set")

    try:
        client = googlemaps.Client(key=api_key, timeout=timeout)
    except ValueError as e:
        raise ConfigurationError(f"Failed to initialize Google Maps client: {e}") from e

    logger.info("Google Maps client initialized")
    return client
