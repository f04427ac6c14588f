"""通知センターのテスト"""
from datetime import datetime, timedelta, timezone

from gpx_creator.features.notifications.domain.models import NotificationCode, NotificationType
from gpx_creator.features.notifications.services.notification_center import NotificationCenter


class FakeClock:
    """手動で進める時計"""

    def __init__(self) -> None:
        self.now = datetime(2025, 9, 15, 10, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def test_error_and_warning_expire_after_their_ttl() -> None:
    """エラーは4秒、警告は3秒で非表示になる"""
    clock = FakeClock()
    center = NotificationCenter(clock=clock)

    error = center.error(NotificationCode.SEARCH_FAILED)
    warning = center.warning(NotificationCode.RESULTS_TRUNCATED)
    assert center.active() == [error, warning]

    clock.advance(3.5)
    assert center.active() == [error]

    clock.advance(1.0)
    assert center.active() == []
    # 履歴には残る
    assert center.codes() == [NotificationCode.SEARCH_FAILED, NotificationCode.RESULTS_TRUNCATED]


def test_default_and_custom_messages() -> None:
    """メッセージ省略時はコードの既定メッセージ"""
    center = NotificationCenter()

    default = center.warning(NotificationCode.MISSING_ADDRESS)
    custom = center.error(NotificationCode.FILE_WRITE_FAILED, "disk full")

    assert default.message == NotificationCode.MISSING_ADDRESS.default_message
    assert custom.message == "disk full"
    assert custom.notification_type == NotificationType.ERROR


def test_dismiss() -> None:
    """手動で閉じた通知は表示しない"""
    center = NotificationCenter()
    notification = center.error(NotificationCode.ROUTE_CALCULATION_FAILED)

    center.dismiss(notification.notification_id)
    assert center.active() == []


def test_subscribe_and_unsubscribe() -> None:
    """購読者に通知し、解除後は通知しない"""
    center = NotificationCenter()
    received = []
    unsubscribe = center.subscribe(received.append)

    center.warning(NotificationCode.SPEED_ADJUSTED)
    unsubscribe()
    center.warning(NotificationCode.SPEED_ADJUSTED)

    assert [n.code for n in received] == [NotificationCode.SPEED_ADJUSTED]


def test_latest_filters_by_type() -> None:
    """種別ごとの最新通知"""
    center = NotificationCenter()
    first_error = center.error(NotificationCode.SEARCH_FAILED)
    center.warning(NotificationCode.INVALID_SPEED)

    assert center.latest().code == NotificationCode.INVALID_SPEED
    assert center.latest(NotificationType.ERROR) is first_error
    assert NotificationCenter().latest() is None
