"""通知機能のドメインモデル"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationType(str, Enum):
    """通知タイプ"""

    WARNING = "warning"  # 警告
    ERROR = "error"  # エラー


class NotificationCode(str, Enum):
    """通知の種別コード"""

    INVALID_COORDINATE = "invalid_coordinate"
    INVALID_SPEED = "invalid_speed"
    MISSING_ADDRESS = "missing_address"
    NO_ROUTE_CALCULATED = "no_route_calculated"
    NO_LOCATION_SELECTED = "no_location_selected"
    SPEED_ADJUSTED = "speed_adjusted"
    RESULTS_TRUNCATED = "results_truncated"
    SEARCH_FAILED = "search_failed"
    ROUTE_CALCULATION_FAILED = "route_calculation_failed"
    FILE_WRITE_FAILED = "file_write_failed"

    @property
    def default_message(self) -> str:
        """ユーザー向けの既定メッセージ"""
        return DEFAULT_MESSAGES[self]


# ユーザー向け既定メッセージ
DEFAULT_MESSAGES = {
    NotificationCode.INVALID_COORDINATE: "Invalid location selected. Please select valid locations on the map.",
    NotificationCode.INVALID_SPEED: "Simulation speed must be between 20 and 100 km/h.",
    NotificationCode.MISSING_ADDRESS: "No location selected. Click on the map or search for a location.",
    NotificationCode.NO_ROUTE_CALCULATED: "No route calculated yet. Select start and end points first.",
    NotificationCode.NO_LOCATION_SELECTED: "No location selected. Click on the map or search for a location.",
    NotificationCode.SPEED_ADJUSTED: "Simulation speed adjusted to recommended range (20-100 km/h).",
    NotificationCode.RESULTS_TRUNCATED: "Showing first 5 search results. Refine your search for more specific results.",
    NotificationCode.SEARCH_FAILED: "Location search failed. Check your internet connection and try again.",
    NotificationCode.ROUTE_CALCULATION_FAILED: "Route calculation failed. Check your internet connection and try different locations.",
    NotificationCode.FILE_WRITE_FAILED: "Failed to save file. Check that you have write permissions.",
}


@dataclass
class NotificationMessage:
    """通知メッセージ"""

    notification_id: int  # 通知ID（セッション内で連番）
    code: NotificationCode  # 種別コード
    message: str  # メッセージ本文
    notification_type: NotificationType
    created_at: datetime
    expires_at: datetime  # 自動的に非表示になる時刻

    def is_active(self, now: datetime) -> bool:
        """まだ表示期間内かどうか"""
        return now < self.expires_at
