"""カスタム例外定義"""


class GPXCreatorError(Exception):
    """GPX Creator 基底例外"""

    pass


class ValidationError(GPXCreatorError):
    """入力バリデーションエラー（ユーザー入力の不足・不正）"""

    pass


class InvalidCoordinateError(ValidationError):
    """緯度・経度が範囲外"""

    pass


class InvalidSpeedError(ValidationError):
    """シミュレーション速度が不正"""

    pass


class MissingAddressError(ValidationError):
    """住所フィールドが未入力"""

    pass


class InvalidTransitionError(ValidationError):
    """選択状態で許可されていない遷移"""

    pass


class ProviderError(GPXCreatorError):
    """外部プロバイダー（検索・経路・逆ジオコーディング）のエラー"""

    pass


class SearchFailedError(ProviderError):
    """場所検索エラー"""

    pass


class RouteCalculationFailedError(ProviderError):
    """経路計算エラー"""

    pass


class GeocodingError(ProviderError):
    """ジオコーディングエラー"""

    pass


class HTTPError(GPXCreatorError):
    """HTTP関連のエラー"""

    pass


class FileWriteError(GPXCreatorError):
    """GPXファイルの書き込みエラー"""

    pass


class ConfigurationError(GPXCreatorError):
    """設定エラー"""

    pass
