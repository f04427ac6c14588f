"""場所検索機能のドメインモデル"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

from ...geo.domain.models import Coordinate


class SearchField(str, Enum):
    """住所入力欄（単一地点モードでは START のみ使用）"""

    START = "start"
    END = "end"


@dataclass(frozen=True)
class Named:
    """名前付きの検索結果"""

    value: str


@dataclass(frozen=True)
class Untitled:
    """名前のない検索結果"""


DisplayName = Union[Named, Untitled]


@dataclass(frozen=True)
class SearchResult:
    """検索プロバイダーが返す候補地点（並び順はプロバイダー定義のまま保持）"""

    display_name: DisplayName
    subtitle: str
    coordinate: Coordinate

    def label(self) -> str:
        """
        入力欄に表示するラベル

        名前 → サブタイトル → 空文字 の順でフォールバック
        """
        if isinstance(self.display_name, Named) and self.display_name.value:
            return self.display_name.value
        if self.subtitle:
            return self.subtitle
        return ""


@dataclass
class SearchFieldState:
    """入力欄ごとの検索状態"""

    query: str = ""  # 入力テキスト
    results: list[SearchResult] = field(default_factory=list)  # 表示中の候補
    is_showing_results: bool = False  # 候補リストを表示しているか
    suppress_next_search: bool = False  # プログラムからの書き込みで検索を起動しない
    pending_task: Optional[asyncio.Task] = None  # デバウンス待ち・検索中のタスク
