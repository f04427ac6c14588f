"""地点選択機能のドメインモデル"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ...geo.domain.models import Coordinate, MapRegion
from ...routing.domain.models import RoutePolyline
from ...search.domain.models import SearchField


class SelectionMode(str, Enum):
    """入力欄のモード"""

    SINGLE = "single"  # 単一地点（入力欄1つ）
    TWO = "two"  # 出発地・目的地（入力欄2つ、両方が埋まっているとは限らない）


class SelectionPhase(str, Enum):
    """選択の進行状況"""

    EMPTY = "empty"  # 未選択
    START_SET = "start_set"  # 出発地のみ
    END_SET = "end_set"  # 目的地のみ（2欄モードで目的地を先に検索選択した場合）
    BOTH_SET = "both_set"  # 出発地・目的地


class SelectionEventKind(str, Enum):
    """状態変化の種類"""

    START_CHANGED = "start_changed"
    END_CHANGED = "end_changed"
    MODE_CHANGED = "mode_changed"
    ROUTE_CHANGED = "route_changed"
    REGION_CHANGED = "region_changed"
    SPEED_CHANGED = "speed_changed"
    FIELD_CHANGED = "field_changed"
    CALCULATION_CHANGED = "calculation_changed"
    CLEARED = "cleared"


@dataclass
class SelectionState:
    """
    セッション全体の選択状態

    不変条件: route が設定されているのは start と end の両方が設定されている場合のみ
    """

    region: MapRegion  # 地図の表示範囲
    simulation_speed_kmh: float  # シミュレーション速度
    start: Optional[Coordinate] = None  # 出発地
    end: Optional[Coordinate] = None  # 目的地
    mode: SelectionMode = SelectionMode.SINGLE
    route: Optional[RoutePolyline] = None  # 計算済みの経路
    is_calculating_route: bool = False  # 経路計算中

    @property
    def phase(self) -> SelectionPhase:
        """選択の進行状況"""
        if self.start is not None and self.end is not None:
            return SelectionPhase.BOTH_SET
        if self.start is not None:
            return SelectionPhase.START_SET
        if self.end is not None:
            return SelectionPhase.END_SET
        return SelectionPhase.EMPTY


@dataclass(frozen=True)
class SelectionEvent:
    """購読者に通知する状態変化"""

    kind: SelectionEventKind
    state: SelectionState
    search_field: Optional[SearchField] = None  # FIELD_CHANGED の対象欄
