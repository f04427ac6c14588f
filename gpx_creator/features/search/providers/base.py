"""場所検索プロバイダーの抽象基底クラス"""

from abc import ABC, abstractmethod
from typing import Optional

from ...geo.domain.models import MapRegion
from ..domain.models import SearchResult


class SearchProvider(ABC):
    """自然言語クエリから候補地点を返すプロバイダー"""

    @abstractmethod
    async def search(self, query: str, region_hint: Optional[MapRegion] = None) -> list[SearchResult]:
        """
        場所を検索

        Args:
            query: 検索クエリ
            region_hint: 結果を寄せる範囲（フィルタではなくヒント）

        Returns:
            list[SearchResult]: 候補地点（プロバイダー定義の順序）

        Raises:
            SearchFailedError: 検索に失敗した場合
        """
        pass
