"""カスタム例外定義"""


class PipelineError(Exception):
    """パイプライン基底例外"""

    pass


class NetworkError(PipelineError):
    """HTTP通信（接続・転送）のエラー"""

    pass


class ParseError(PipelineError):
    """構造化レスポンス（JSON）の解析エラー"""

    pass


class GeocodingError(PipelineError):
    """ジオコーディングエラー"""

    pass


class RateLimitedError(GeocodingError):
    """レート制限（OVER_QUERY_LIMIT）のリトライ上限超過"""

    def __init__(self, message: str, retries: int = 0):
        super().__init__(message)
        self.retries = retries


class GeocodingServiceError(GeocodingError):
    """ジオコーディングサービス側のエラー（APIキー不正など）"""

    def __init__(self, message: str, status: str = ""):
        super().__init__(message)
        self.status = status


class ConfigurationError(PipelineError):
    """設定エラー"""

    pass
