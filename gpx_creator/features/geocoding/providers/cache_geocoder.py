"""キャッシュ付き逆ジオコーダー"""

from typing import Optional

from ....shared.logging.config import get_logger
from ...geo.domain.models import Coordinate, CoordinateKey
from .base import ReverseGeocoder

logger = get_logger(__name__)

DEFAULT_CAPACITY = 50


class GeocodeCache:
    """
    座標 → 住所ラベルの容量制限付きキャッシュ

    - キーは丸めない（完全一致のみヒット）
    - 満杯時は最初に列挙されるエントリ（挿入が最も古いもの）を1件削除してから追加する
    - 参照しても順序は更新しない（LRUではない）
    - スレッドセーフではない（イベントループのスレッドからのみ操作すること）
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        """
        Args:
            capacity: 最大エントリ数
        """
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._entries: dict[CoordinateKey, str] = {}

    def get(self, coordinate: Coordinate) -> Optional[str]:
        """キャッシュ済みの住所ラベル（なければNone）"""
        return self._entries.get(coordinate.key)

    def put(self, coordinate: Coordinate, address: str) -> None:
        """住所ラベルを保存（満杯なら1件追い出す）"""
        key = coordinate.key
        if key not in self._entries and len(self._entries) >= self.capacity:
            evicted = next(iter(self._entries))
            del self._entries[evicted]
            logger.debug(f"Geocode cache full, evicted: {evicted}")
        self._entries[key] = address

    def clear(self) -> None:
        """全エントリを削除"""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, coordinate: Coordinate) -> bool:
        return coordinate.key in self._entries


class CacheGeocoder:
    """
    キャッシュ付き逆ジオコーダー

    同じ座標に対するAPI呼び出しを削減するため、
    メモリ内キャッシュを使用
    """

    def __init__(self, geocoder: ReverseGeocoder, capacity: int = DEFAULT_CAPACITY) -> None:
        """
        Args:
            geocoder: ベースとなる逆ジオコーダー
            capacity: キャッシュの最大件数
        """
        self.geocoder = geocoder
        self.cache = GeocodeCache(capacity)
        self.hit_count = 0
        self.miss_count = 0

        logger.info(f"CacheGeocoder initialized: capacity={capacity}")

    async def address_for(self, coordinate: Coordinate) -> str:
        """
        座標の住所ラベルを取得（キャッシュあり）

        Args:
            coordinate: 対象座標

        Returns:
            str: 表示用の住所ラベル

        Raises:
            GeocodingError: 逆ジオコーディングに失敗した場合（失敗結果はキャッシュしない）
        """
        cached = self.cache.get(coordinate)
        if cached is not None:
            self.hit_count += 1
            logger.debug(f"Cache hit for coordinates: {coordinate.to_tuple()}")
            return cached

        # キャッシュミス: API呼び出し
        self.miss_count += 1
        logger.debug(f"Cache miss for coordinates: {coordinate.to_tuple()}")

        geo_location = await self.geocoder.reverse_geocode(coordinate)
        address = geo_location.display_label()

        # 結果をキャッシュ
        self.cache.put(coordinate, address)

        return address

    def get_cache_stats(self) -> dict[str, float]:
        """
        キャッシュ統計を取得

        Returns:
            dict[str, float]: キャッシュ統計（サイズ、ヒット数、ミス数、ヒット率）
        """
        total_requests = self.hit_count + self.miss_count
        hit_rate = (self.hit_count / total_requests * 100) if total_requests > 0 else 0.0

        return {
            "cache_size": len(self.cache),
            "hit_count": self.hit_count,
            "miss_count": self.miss_count,
            "total_requests": total_requests,
            "hit_rate_percent": round(hit_rate, 2),
        }
