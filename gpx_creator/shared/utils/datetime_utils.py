"""日時関連ユーティリティ"""

from datetime import datetime, timezone

import pytz


def now_utc() -> datetime:
    """現在のUTC時間を取得"""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime, assume_tz: str = "UTC") -> datetime:
    """
    datetimeをUTCに変換

    Args:
        dt: 変換対象のdatetime
        assume_tz: タイムゾーン情報がない場合に仮定するタイムゾーン名

    Returns:
        UTCのdatetime
    """
    if dt.tzinfo is None:
        # タイムゾーン情報がない場合は指定のタイムゾーンとして扱う
        dt = pytz.timezone(assume_tz).localize(dt)

    return dt.astimezone(timezone.utc)


def format_duration(seconds: float) -> str:
    """
    秒数を読みやすい形式に変換

    Args:
        seconds: 秒数

    Returns:
        "1h 23m 45s" のような文字列
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")

    return " ".join(parts)
