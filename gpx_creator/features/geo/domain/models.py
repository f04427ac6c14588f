"""地理座標のドメインモデル"""
import math
from dataclasses import dataclass

# 座標キャッシュ用のキー（丸めなし・完全一致）
CoordinateKey = tuple[float, float]


@dataclass(frozen=True)
class Coordinate:
    """緯度・経度"""

    latitude: float  # 緯度
    longitude: float  # 経度

    @property
    def is_valid(self) -> bool:
        """緯度 [-90, 90]・経度 [-180, 180] の範囲内かどうか"""
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90.0 <= self.latitude <= 90.0
            and -180.0 <= self.longitude <= 180.0
        )

    @property
    def key(self) -> CoordinateKey:
        """キャッシュ検索用のキー"""
        return (self.latitude, self.longitude)

    def format_short(self) -> str:
        """逆ジオコーディング完了前に表示する座標文字列"""
        return f"{self.latitude:.4f}, {self.longitude:.4f}"

    def to_tuple(self) -> tuple[float, float]:
        """(緯度, 経度)のタプルとして返す"""
        return (self.latitude, self.longitude)

    @classmethod
    def parse(cls, text: str) -> "Coordinate":
        """
        "37.7749,-122.4194" 形式の文字列から生成

        Raises:
            ValueError: 形式が不正な場合
        """
        parts = [part.strip() for part in text.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Expected 'lat,lon', got: {text!r}")
        return cls(latitude=float(parts[0]), longitude=float(parts[1]))


@dataclass(frozen=True)
class MapRegion:
    """地図の表示範囲（中心と緯度・経度方向の幅）"""

    center: Coordinate
    latitude_delta: float
    longitude_delta: float
