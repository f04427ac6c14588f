"""ジオコーディング機能のドメインモデル"""
from dataclasses import dataclass
from typing import Optional

FALLBACK_LABEL = "Selected Location"


@dataclass
class GeoLocation:
    """逆ジオコーディング結果"""

    latitude: float  # 緯度
    longitude: float  # 経度
    name: Optional[str] = None  # 地点名・番地
    locality: Optional[str] = None  # 市区町村
    administrative_area: Optional[str] = None  # 都道府県・州
    formatted_address: Optional[str] = None  # 正規化された住所
    place_id: Optional[str] = None  # Google Maps Place ID（オプション）

    def __repr__(self) -> str:
        return f"GeoLocation(lat={self.latitude}, lng={self.longitude})"

    def display_label(self) -> str:
        """
        入力欄に表示する住所ラベル

        地点名 → 市区町村 → 都道府県の順で最初に見つかったもの
        """
        for part in (self.name, self.locality, self.administrative_area):
            if part:
                return part
        return FALLBACK_LABEL
