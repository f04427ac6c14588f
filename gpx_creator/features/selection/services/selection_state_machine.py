"""
出発地・目的地・モードの状態機械

状態はこのクラスだけが保持し、公開メソッド経由でのみ変更する。
変更は subscribe() した購読者に SelectionEvent として通知する。
すべての操作はイベントループのスレッドから呼び出すこと。
ネットワーク処理（検索・逆ジオコーディング・経路計算）は await で待ち、
再開後に同じスレッドで状態を更新する。
"""
import asyncio
import math
from datetime import datetime
from typing import Callable, Optional

from ....infrastructure.config.settings import Settings
from ....shared.exceptions.errors import (
    InvalidSpeedError,
    InvalidTransitionError,
    MissingAddressError,
    ProviderError,
)
from ....shared.logging.config import get_logger
from ....shared.utils.datetime_utils import now_utc
from ....shared.utils.text import is_blank
from ...geo.domain.models import Coordinate, MapRegion
from ...geo.services.geo_math import bounding_region, region_around, region_between, validate_coordinate
from ...geocoding.providers.cache_geocoder import CacheGeocoder
from ...gpx.services.gpx_serializer import (
    ExportArtifact,
    route_filename,
    serialize_route,
    serialize_waypoint,
    waypoint_filename,
)
from ...notifications.domain.models import NotificationCode
from ...notifications.services.notification_center import NotificationCenter
from ...routing.providers.base import DirectionsProvider
from ...search.domain.models import SearchField, SearchResult
from ...search.providers.base import SearchProvider
from ...search.services.search_orchestrator import SearchOrchestrator
from ..domain.models import SelectionEvent, SelectionEventKind, SelectionMode, SelectionState

logger = get_logger(__name__)

DEFAULT_WAYPOINT_LABEL = "Waypoint"

SelectionListener = Callable[[SelectionEvent], None]


class SelectionStateMachine:
    """
    地点選択の状態機械

    EMPTY → START_SET → BOTH_SET の進行と、それに直交するモード（単一/2欄）・
    経路の有無を管理し、UI操作の可否を判定する
    """

    def __init__(
        self,
        search_provider: SearchProvider,
        geocoder: CacheGeocoder,
        directions: DirectionsProvider,
        notifications: NotificationCenter,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        """
        Args:
            search_provider: 場所検索プロバイダー
            geocoder: キャッシュ付き逆ジオコーダー
            directions: 経路プロバイダー
            notifications: 通知センター
            settings: アプリケーション設定（Noneの場合は既定値）
            clock: エクスポート時刻の既定値を返す関数
        """
        self.settings = settings or Settings()
        self.geocoder = geocoder
        self.directions = directions
        self.notifications = notifications
        self.clock = clock

        fallback = Coordinate(
            latitude=self.settings.fallback_latitude,
            longitude=self.settings.fallback_longitude,
        )
        self._state = SelectionState(
            region=region_around(fallback, self.settings.fallback_span_degrees),
            simulation_speed_kmh=self.settings.default_simulation_speed_kmh,
        )

        self.search = SearchOrchestrator(
            provider=search_provider,
            notifications=notifications,
            region_hint=self.search_region_hint,
            debounce_seconds=self.settings.search_debounce_seconds,
            result_limit=self.settings.search_result_limit,
        )
        self.search.subscribe(self._on_field_changed)

        self._listeners: list[SelectionListener] = []
        self._geocode_tasks: set[asyncio.Task] = set()

        logger.info("SelectionStateMachine initialized")

    # ------------------------------------------------------------------
    # 参照
    # ------------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        """現在の選択状態（変更は公開メソッド経由で行うこと）"""
        return self._state

    def address(self, search_field: SearchField) -> str:
        """入力欄に表示中のテキスト"""
        return self.search.field(search_field).query

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """
        状態変化を購読

        Returns:
            購読を解除する関数
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def search_region_hint(self) -> MapRegion:
        """
        検索を寄せる範囲

        出発地が決まっていればその周辺（約1000km）、なければ現在の表示範囲
        """
        if self._state.start is not None:
            span = self.settings.search_bias_span_degrees
            return MapRegion(center=self._state.start, latitude_delta=span, longitude_delta=span)
        return self._state.region

    def can_calculate_route(self) -> bool:
        """経路計算が可能か"""
        return (
            self._state.start is not None
            and self._state.end is not None
            and not self._state.is_calculating_route
        )

    def can_export_route(self) -> bool:
        """経路GPXを出力可能か"""
        return self._state.route is not None

    def can_export_waypoint(self) -> bool:
        """単一地点GPXを出力可能か"""
        return self._state.start is not None or self._state.end is not None

    def waypoint_label(self) -> str:
        """単一地点GPXの名前（目的地 → 出発地 → "Waypoint"）"""
        for search_field in (SearchField.END, SearchField.START):
            text = self.address(search_field)
            if not is_blank(text):
                return text
        return DEFAULT_WAYPOINT_LABEL

    # ------------------------------------------------------------------
    # 地図操作
    # ------------------------------------------------------------------

    def handle_map_click(self, coordinate: Coordinate) -> None:
        """
        地図クリックを処理

        出発地が未設定なら出発地、目的地が未設定なら目的地、
        両方設定済みなら目的地を置き換える
        """
        if not coordinate.is_valid:
            self.notifications.error(NotificationCode.INVALID_COORDINATE)
            return

        if self._state.start is None:
            self.set_start(coordinate)
        elif self._state.end is None:
            self.set_end(coordinate)
        else:
            self.replace_end(coordinate)

    def set_start(self, coordinate: Coordinate) -> None:
        """
        出発地を設定

        Raises:
            InvalidCoordinateError: 座標が不正な場合
            InvalidTransitionError: 出発地が設定済みの場合
        """
        validate_coordinate(coordinate)
        if self._state.start is not None:
            raise InvalidTransitionError("Start is already set; clear the selection first")

        self._state.start = coordinate
        if self._state.end is not None:
            self._state.mode = SelectionMode.TWO
        self._state.region = region_around(coordinate)
        self._show_placeholder_and_geocode(SearchField.START, coordinate)
        self._emit(SelectionEventKind.START_CHANGED)

    def set_end(self, coordinate: Coordinate) -> None:
        """
        目的地を設定し、2欄モードに切り替える

        Raises:
            InvalidCoordinateError: 座標が不正な場合
            InvalidTransitionError: 出発地が未設定、または目的地が設定済みの場合
        """
        validate_coordinate(coordinate)
        if self._state.start is None:
            raise InvalidTransitionError("Start must be set before end")
        if self._state.end is not None:
            raise InvalidTransitionError("End is already set; use replace_end")

        self._state.end = coordinate
        self._state.mode = SelectionMode.TWO
        self._state.route = None
        self._state.region = region_between(self._state.start, coordinate)
        self._show_placeholder_and_geocode(SearchField.END, coordinate)
        self._emit(SelectionEventKind.END_CHANGED)

    def replace_end(self, coordinate: Coordinate) -> None:
        """
        設定済みの目的地を置き換え、経路を無効化する

        Raises:
            InvalidCoordinateError: 座標が不正な場合
            InvalidTransitionError: 出発地・目的地の両方が設定されていない場合
        """
        validate_coordinate(coordinate)
        if self._state.start is None or self._state.end is None:
            raise InvalidTransitionError("replace_end requires both start and end")

        self._state.end = coordinate
        self._state.route = None
        self._state.region = region_between(self._state.start, coordinate)
        self._show_placeholder_and_geocode(SearchField.END, coordinate)
        self._emit(SelectionEventKind.END_CHANGED)

    def handle_location_update(self, coordinate: Coordinate) -> None:
        """現在地の更新（何も選択していない間だけ地図を現在地に合わせる）"""
        if self._state.start is not None or self._state.end is not None:
            return
        if not coordinate.is_valid:
            logger.warning(f"Ignoring invalid location update: {coordinate.to_tuple()}")
            return
        self._state.region = region_around(coordinate)
        self._emit(SelectionEventKind.REGION_CHANGED)

    def fit_to_route(self) -> None:
        """地図の表示範囲を経路全体に合わせる"""
        route = self._state.route
        if route is None or len(route) == 0:
            return
        self._state.region = bounding_region(route.points)
        self._emit(SelectionEventKind.REGION_CHANGED)

    # ------------------------------------------------------------------
    # 検索
    # ------------------------------------------------------------------

    def on_text_changed(self, search_field: SearchField, text: str) -> None:
        """ユーザーのキー入力（デバウンス後に検索）"""
        self.search.on_text_changed(search_field, text)

    def select_result(self, search_field: SearchField, result: SearchResult) -> None:
        """
        検索候補を選択

        入力欄に候補名を表示し、座標を設定してモードを更新する

        Raises:
            InvalidCoordinateError: 候補の座標が不正な場合
        """
        coordinate = validate_coordinate(result.coordinate)
        self.search.select(search_field, result)

        if search_field == SearchField.START:
            changed = self._state.start != coordinate
            self._state.start = coordinate
            kind = SelectionEventKind.START_CHANGED
        else:
            changed = self._state.end != coordinate
            self._state.end = coordinate
            kind = SelectionEventKind.END_CHANGED

        if changed and self._state.route is not None:
            self._state.route = None

        self._state.region = MapRegion(
            center=coordinate,
            latitude_delta=self._state.region.latitude_delta,
            longitude_delta=self._state.region.longitude_delta,
        )
        self._update_mode_after_selection()
        self._emit(kind)

    # ------------------------------------------------------------------
    # モード・リセット
    # ------------------------------------------------------------------

    def toggle_mode(self) -> None:
        """
        単一地点モードと2欄モードを切り替える

        2欄 → 単一 では埋まっている地点を1つだけ残す（目的地を優先）。
        残した地点は出発地の欄に移し、経路は破棄する。
        2回適用してもモードは戻るが、座標は元に戻らない場合がある。
        """
        if self._state.mode == SelectionMode.SINGLE:
            self._state.mode = SelectionMode.TWO
        else:
            self._collapse_to_single()

        self.search.clear_results()
        self._emit(SelectionEventKind.MODE_CHANGED)

    def clear(self) -> None:
        """すべての選択と検索状態を初期化"""
        self.search.reset()
        for task in list(self._geocode_tasks):
            task.cancel()

        self._state.start = None
        self._state.end = None
        self._state.route = None
        self._state.mode = SelectionMode.SINGLE

        logger.info("Selections cleared")
        self._emit(SelectionEventKind.CLEARED)

    def pick_point(self) -> None:
        """地点を選び直す（clear と同じ）"""
        self.clear()

    # ------------------------------------------------------------------
    # 速度
    # ------------------------------------------------------------------

    def set_simulation_speed(self, speed_kmh: float) -> None:
        """速度をそのまま設定（範囲チェックは各操作の実行時に行う）"""
        self._state.simulation_speed_kmh = speed_kmh
        self._emit(SelectionEventKind.SPEED_CHANGED)

    def update_simulation_speed(self, speed_kmh: float) -> None:
        """速度を範囲内に収め、10km/h単位に丸めて設定（範囲外なら警告）"""
        low = self.settings.min_simulation_speed_kmh
        high = self.settings.max_simulation_speed_kmh
        validated = max(low, min(high, speed_kmh))
        rounded = math.floor(validated / 10 + 0.5) * 10

        if self._state.simulation_speed_kmh != rounded:
            self.set_simulation_speed(rounded)
            if validated != speed_kmh:
                self.notifications.warning(NotificationCode.SPEED_ADJUSTED)

    # ------------------------------------------------------------------
    # 経路計算・エクスポート
    # ------------------------------------------------------------------

    async def calculate_route(self) -> bool:
        """
        出発地から目的地までの経路を計算

        Returns:
            bool: 経路を設定した場合True（ブロック・失敗時はFalse、状態は変更しない）
        """
        if not self.can_calculate_route():
            logger.debug("Route calculation not available in current state")
            return False
        if not self._passes_input_guard():
            return False

        start = self._state.start
        end = self._state.end
        self._set_calculating(True)
        try:
            route = await self.directions.calculate_route(start, end)
        except ProviderError as e:
            logger.error(f"Route calculation failed: {e}")
            self.notifications.error(NotificationCode.ROUTE_CALCULATION_FAILED)
            return False
        finally:
            self._set_calculating(False)

        if self._state.start != start or self._state.end != end:
            logger.info("Endpoints changed during route calculation; discarding result")
            return False

        self._state.route = route
        self._state.mode = SelectionMode.TWO
        logger.info(f"Route calculated: {len(route)} points")
        self._emit(SelectionEventKind.ROUTE_CHANGED)
        self.fit_to_route()
        return True

    def export_route(self, now: Optional[datetime] = None) -> Optional[ExportArtifact]:
        """
        経路GPXを生成

        Args:
            now: 最初のウェイポイントの時刻（Noneなら現在時刻）

        Returns:
            Optional[ExportArtifact]: GPX本文と推奨ファイル名（ブロック時はNone）
        """
        route = self._state.route
        if route is None:
            self.notifications.warning(NotificationCode.NO_ROUTE_CALCULATED)
            return None
        if not self._passes_input_guard():
            return None

        start_text = self.address(SearchField.START)
        end_text = self.address(SearchField.END)
        content = serialize_route(
            route.points,
            self._state.simulation_speed_kmh,
            start_text,
            end_text,
            now or self.clock(),
            max_points=self.settings.route_max_points,
            creator=self.settings.gpx_creator_name,
            assume_tz=self.settings.export_timezone,
        )
        return ExportArtifact(content=content, suggested_filename=route_filename(start_text, end_text))

    def export_waypoint(self, now: Optional[datetime] = None) -> Optional[ExportArtifact]:
        """
        単一地点GPXを生成（目的地があれば目的地、なければ出発地）

        Args:
            now: ウェイポイントの時刻（Noneなら現在時刻）

        Returns:
            Optional[ExportArtifact]: GPX本文と推奨ファイル名（ブロック時はNone）
        """
        point = self._state.end or self._state.start
        if point is None:
            self.notifications.warning(NotificationCode.NO_LOCATION_SELECTED)
            return None
        if not self._passes_input_guard():
            return None

        label = self.waypoint_label()
        content = serialize_waypoint(
            point,
            label,
            now or self.clock(),
            creator=self.settings.gpx_creator_name,
            assume_tz=self.settings.export_timezone,
        )
        return ExportArtifact(content=content, suggested_filename=waypoint_filename(label))

    async def drain(self) -> None:
        """実行中の検索・逆ジオコーディングがすべて終わるまで待つ"""
        await self.search.drain()
        if self._geocode_tasks:
            await asyncio.gather(*list(self._geocode_tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # 内部処理
    # ------------------------------------------------------------------

    def validate_inputs(self) -> None:
        """
        経路計算・エクスポート前の入力チェック

        Raises:
            InvalidSpeedError: 速度が範囲外の場合
            MissingAddressError: 必要な住所欄が空の場合
        """
        low = self.settings.min_simulation_speed_kmh
        high = self.settings.max_simulation_speed_kmh
        speed = self._state.simulation_speed_kmh
        if not low <= speed <= high:
            raise InvalidSpeedError(
                f"Simulation speed must be between {low:g} and {high:g} km/h (got {speed:g})"
            )

        # 住所欄のチェックは2欄モードのみ
        if self._state.mode != SelectionMode.TWO:
            return
        if is_blank(self.address(SearchField.START)):
            raise MissingAddressError("Start address is empty")
        if is_blank(self.address(SearchField.END)):
            raise MissingAddressError("End address is empty")

    def _passes_input_guard(self) -> bool:
        try:
            self.validate_inputs()
        except InvalidSpeedError as e:
            self.notifications.warning(NotificationCode.INVALID_SPEED, str(e))
            return False
        except MissingAddressError as e:
            logger.debug(f"Action blocked: {e}")
            self.notifications.warning(NotificationCode.MISSING_ADDRESS)
            return False
        return True

    def _collapse_to_single(self) -> None:
        # 目的地を優先して1地点だけ残し、出発地の欄に移す
        if self._state.end is not None:
            retained = self._state.end
            retained_text = self.address(SearchField.END)
        else:
            retained = self._state.start
            retained_text = self.address(SearchField.START)

        self._state.mode = SelectionMode.SINGLE
        self._state.start = retained
        self._state.end = None
        self._state.route = None

        self.search.reset(SearchField.END)
        if retained is not None:
            self.search.write_programmatically(SearchField.START, retained_text)
            self._state.region = region_around(retained)
            logger.info(f"Collapsed to single point: {retained.to_tuple()}")

    def _update_mode_after_selection(self) -> None:
        # 目的地があれば2欄、出発地のみなら1欄
        if self._state.end is not None:
            self._state.mode = SelectionMode.TWO
        elif self._state.start is not None:
            self._state.mode = SelectionMode.SINGLE

    def _show_placeholder_and_geocode(self, search_field: SearchField, coordinate: Coordinate) -> None:
        # 逆ジオコーディング完了までは座標文字列を表示
        self.search.write_programmatically(search_field, coordinate.format_short())

        task = asyncio.get_running_loop().create_task(self._resolve_address(search_field, coordinate))
        self._geocode_tasks.add(task)
        task.add_done_callback(self._geocode_tasks.discard)

    async def _resolve_address(self, search_field: SearchField, coordinate: Coordinate) -> None:
        try:
            address = await self.geocoder.address_for(coordinate)
        except ProviderError as e:
            # 座標文字列が表示済みなのでユーザーには通知しない
            logger.info(f"Reverse geocoding failed, keeping coordinate text: {e}")
            return

        current = self._state.start if search_field == SearchField.START else self._state.end
        if current != coordinate:
            logger.debug(f"Discarding stale address for {search_field.value}: {address}")
            return

        self.search.write_programmatically(search_field, address)

    def _set_calculating(self, value: bool) -> None:
        self._state.is_calculating_route = value
        self._emit(SelectionEventKind.CALCULATION_CHANGED)

    def _on_field_changed(self, search_field: SearchField) -> None:
        self._emit(SelectionEventKind.FIELD_CHANGED, search_field)

    def _emit(self, kind: SelectionEventKind, search_field: Optional[SearchField] = None) -> None:
        event = SelectionEvent(kind=kind, state=self._state, search_field=search_field)
        for listener in list(self._listeners):
            listener(event)
