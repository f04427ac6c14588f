"""
入力欄ごとの検索制御

キー入力をデバウンスし、入力欄ごとに実行中の検索を最大1件に保つ。
新しい入力は古いタスクをキャンセルして置き換える（キューイングしない）。
状態の更新はすべてイベントループのスレッドで行う。
"""
import asyncio
from typing import Callable, Optional

from ....shared.exceptions.errors import SearchFailedError
from ....shared.logging.config import get_logger
from ....shared.utils.text import is_blank
from ...geo.domain.models import MapRegion
from ...notifications.domain.models import NotificationCode
from ...notifications.services.notification_center import NotificationCenter
from ..domain.models import SearchField, SearchFieldState, SearchResult
from ..providers.base import SearchProvider

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5
DEFAULT_RESULT_LIMIT = 5

FieldListener = Callable[[SearchField], None]


class SearchOrchestrator:
    """
    デバウンス・キャンセル・件数制限付きの検索オーケストレーター

    プロバイダーのエラーは通知として表示し、キャンセルは表示しない。
    """

    def __init__(
        self,
        provider: SearchProvider,
        notifications: NotificationCenter,
        region_hint: Callable[[], Optional[MapRegion]] = lambda: None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        result_limit: int = DEFAULT_RESULT_LIMIT,
    ) -> None:
        """
        Args:
            provider: 検索プロバイダー
            notifications: 通知センター
            region_hint: 検索時点の範囲ヒントを返す関数
            debounce_seconds: 最後の入力から検索開始までの待機時間（秒）
            result_limit: 表示する候補の最大件数
        """
        self.provider = provider
        self.notifications = notifications
        self.region_hint = region_hint
        self.debounce_seconds = debounce_seconds
        self.result_limit = result_limit
        self.fields: dict[SearchField, SearchFieldState] = {f: SearchFieldState() for f in SearchField}
        self._listeners: list[FieldListener] = []

        logger.info(
            f"SearchOrchestrator initialized: debounce={debounce_seconds}s, limit={result_limit}"
        )

    def subscribe(self, listener: FieldListener) -> None:
        """入力欄の状態変化を購読"""
        self._listeners.append(listener)

    def field(self, search_field: SearchField) -> SearchFieldState:
        """入力欄の状態"""
        return self.fields[search_field]

    def on_text_changed(self, search_field: SearchField, text: str) -> None:
        """
        入力テキストの変更を処理

        イベントループのスレッドから呼び出すこと（検索タスクを生成するため）

        Args:
            search_field: 対象の入力欄
            text: 変更後のテキスト
        """
        state = self.fields[search_field]
        state.query = text

        # プログラムからの書き込みは検索しない
        if state.suppress_next_search:
            state.suppress_next_search = False
            state.is_showing_results = False
            self._notify(search_field)
            return

        self.cancel(search_field)

        if is_blank(text):
            self.clear_results(search_field)
            return

        loop = asyncio.get_running_loop()
        state.pending_task = loop.create_task(self._debounced_search(search_field, text))
        logger.debug(f"Search scheduled for {search_field.value}: {text!r}")
        self._notify(search_field)

    def write_programmatically(self, search_field: SearchField, text: str) -> None:
        """
        住所テキストをプログラムから書き込む（検索は起動しない）

        入力欄へのバインディングと同様に、テキストが変わった場合のみ変更処理を通す
        """
        state = self.fields[search_field]
        self.cancel(search_field)

        if state.query == text:
            state.is_showing_results = False
            self._notify(search_field)
            return

        state.suppress_next_search = True
        self.on_text_changed(search_field, text)

    def select(self, search_field: SearchField, result: SearchResult) -> str:
        """
        候補の選択を入力欄に反映

        Returns:
            str: 入力欄に表示したラベル
        """
        label = result.label()
        self.write_programmatically(search_field, label)
        self.clear_results(search_field)
        return label

    def cancel(self, search_field: SearchField) -> None:
        """待機中・実行中の検索をキャンセル"""
        state = self.fields[search_field]
        task = state.pending_task
        state.pending_task = None
        if task is not None and not task.done():
            task.cancel()
            logger.debug(f"Search cancelled for {search_field.value}")

    def cancel_all(self) -> None:
        """全入力欄の検索をキャンセル"""
        for search_field in SearchField:
            self.cancel(search_field)

    def clear_results(self, search_field: Optional[SearchField] = None) -> None:
        """候補をクリア（Noneなら全入力欄）"""
        targets = [search_field] if search_field is not None else list(SearchField)
        for target in targets:
            state = self.fields[target]
            state.results = []
            state.is_showing_results = False
            self._notify(target)

    def reset(self, search_field: Optional[SearchField] = None) -> None:
        """入力欄を初期状態に戻す（Noneなら全入力欄）"""
        targets = [search_field] if search_field is not None else list(SearchField)
        for target in targets:
            self.cancel(target)
            self.fields[target] = SearchFieldState()
            self._notify(target)

    async def drain(self) -> None:
        """実行中の検索タスクがすべて終わるまで待つ"""
        tasks = [s.pending_task for s in self.fields.values() if s.pending_task is not None]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _debounced_search(self, search_field: SearchField, query: str) -> None:
        # キャンセルされた場合は sleep で CancelledError となり何もしない
        await asyncio.sleep(self.debounce_seconds)

        region = self.region_hint()
        try:
            raw_results = await self.provider.search(query, region)
        except SearchFailedError as e:
            if self._is_current(search_field):
                self._fail(search_field, str(e))
            return
        except Exception as e:
            logger.error(f"Unexpected error during search for {query!r}: {e}", exc_info=True)
            if self._is_current(search_field):
                self._fail(search_field, str(e))
            return

        # 後から開始された検索に置き換えられていれば結果は捨てる
        if not self._is_current(search_field):
            logger.debug(f"Discarding stale results for {search_field.value}: {query!r}")
            return

        state = self.fields[search_field]
        state.pending_task = None
        state.results = list(raw_results[: self.result_limit])
        state.is_showing_results = True
        logger.debug(f"Search results for {search_field.value}: {len(state.results)} shown")

        if len(raw_results) >= self.result_limit:
            self.notifications.warning(NotificationCode.RESULTS_TRUNCATED)

        self._notify(search_field)

    def _is_current(self, search_field: SearchField) -> bool:
        return self.fields[search_field].pending_task is asyncio.current_task()

    def _fail(self, search_field: SearchField, detail: str) -> None:
        logger.warning(f"Search failed for {search_field.value}: {detail}")
        self.fields[search_field].pending_task = None
        self.notifications.error(NotificationCode.SEARCH_FAILED)
        self.clear_results(search_field)

    def _notify(self, search_field: SearchField) -> None:
        for listener in list(self._listeners):
            listener(search_field)
