"""テキスト処理ユーティリティ"""

import unicodedata
from typing import Optional


def is_blank(text: Optional[str]) -> bool:
    """空文字・空白のみの場合True"""
    return not text or not text.strip()


def first_comma_segment(text: str) -> str:
    """
    カンマ区切りの先頭要素を取得

    "Golden Gate Park, San Francisco, CA" -> "Golden Gate Park"
    """
    return text.split(",", 1)[0]


def strip_punctuation(text: str) -> str:
    """前後の句読点（Unicodeカテゴリ P*）を除去"""
    start = 0
    end = len(text)
    while start < end and unicodedata.category(text[start]).startswith("P"):
        start += 1
    while end > start and unicodedata.category(text[end - 1]).startswith("P"):
        end -= 1
    return text[start:end]


def to_filename_part(text: str) -> str:
    """
    ファイル名用の文字列に変換

    - 空白とパス区切り文字をアンダースコアに置換
    - 前後の句読点を除去
    """
    for separator in (" ", "/", "\\"):
        text = text.replace(separator, "_")
    return strip_punctuation(text)
