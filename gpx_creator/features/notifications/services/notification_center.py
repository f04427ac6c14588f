"""ユーザー向け通知（トースト）の管理"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from ....shared.logging.config import get_logger
from ....shared.utils.datetime_utils import now_utc
from ..domain.models import NotificationCode, NotificationMessage, NotificationType

logger = get_logger(__name__)

NotificationListener = Callable[[NotificationMessage], None]


class NotificationCenter:
    """
    通知センター

    エラー・警告を自動的に期限切れになる通知として保持する。
    表示側は active() をポーリングするか subscribe() で購読する。
    """

    def __init__(
        self,
        error_seconds: float = 4.0,
        warning_seconds: float = 3.0,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        """
        Args:
            error_seconds: エラー通知の表示時間（秒）
            warning_seconds: 警告通知の表示時間（秒）
            clock: 現在時刻を返す関数
        """
        self._ttl = {
            NotificationType.ERROR: timedelta(seconds=error_seconds),
            NotificationType.WARNING: timedelta(seconds=warning_seconds),
        }
        self._clock = clock
        self._next_id = 1
        self._listeners: list[NotificationListener] = []
        self._dismissed: set[int] = set()
        self.history: list[NotificationMessage] = []

    def subscribe(self, listener: NotificationListener) -> Callable[[], None]:
        """
        通知を購読

        Returns:
            購読を解除する関数
        """
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def error(self, code: NotificationCode, message: Optional[str] = None) -> NotificationMessage:
        """エラー通知を発行"""
        return self._post(NotificationType.ERROR, code, message)

    def warning(self, code: NotificationCode, message: Optional[str] = None) -> NotificationMessage:
        """警告通知を発行"""
        return self._post(NotificationType.WARNING, code, message)

    def active(self) -> list[NotificationMessage]:
        """表示期間内かつ未破棄の通知"""
        now = self._clock()
        return [
            n
            for n in self.history
            if n.is_active(now) and n.notification_id not in self._dismissed
        ]

    def latest(self, notification_type: Optional[NotificationType] = None) -> Optional[NotificationMessage]:
        """最新の通知（種別で絞り込み可）"""
        for notification in reversed(self.history):
            if notification_type is None or notification.notification_type == notification_type:
                return notification
        return None

    def dismiss(self, notification_id: int) -> None:
        """通知を手動で閉じる"""
        self._dismissed.add(notification_id)

    def codes(self) -> list[NotificationCode]:
        """発行済み通知のコード一覧（発行順）"""
        return [n.code for n in self.history]

    def _post(
        self,
        notification_type: NotificationType,
        code: NotificationCode,
        message: Optional[str],
    ) -> NotificationMessage:
        created_at = self._clock()
        notification = NotificationMessage(
            notification_id=self._next_id,
            code=code,
            message=message or code.default_message,
            notification_type=notification_type,
            created_at=created_at,
            expires_at=created_at + self._ttl[notification_type],
        )
        self._next_id += 1
        self.history.append(notification)

        log_map = {
            NotificationType.ERROR: logger.error,
            NotificationType.WARNING: logger.warning,
        }
        log_map[notification_type](f"Notification [{code.value}]: {notification.message}")

        for listener in list(self._listeners):
            listener(notification)

        return notification
