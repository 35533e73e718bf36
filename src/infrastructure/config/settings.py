"""アプリケーション設定（Pydantic Settings）"""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    environment: str = Field(
        default="development",
        description="環境 (development, staging, production)",
    )

    # Order feed
    order_feed_url: str = Field(
        default="http://mobapply.com/tests/orders/",
        description="輸送オーダー一覧（JSON配列）のURL",
    )

    # HTTP
    http_timeout: float = Field(
        default=20.0,
        gt=0,
        description="HTTPリクエストのタイムアウト（秒）",
    )
    http_retry: int = Field(
        default=3,
        ge=0,
        description="5xx応答時のHTTPリトライ回数",
    )
    http_user_agent: str = Field(
        default="transport-order-geocoder/1.0",
        description="HTTPリクエストのUser-Agent",
    )

    # Geocoding
    geocoding_base_url: str = Field(
        default="https://maps.googleapis.com/maps/api/geocode/",
        description="Google Geocoding APIのベースURL（末尾スラッシュ付き）",
    )
    google_maps_api_key: Optional[str] = Field(
        default=None,
        description="Google Maps API Key（未設定の場合はkeyパラメータを付与しない）",
    )
    geocoding_retry_base_delay: float = Field(
        default=0.2,
        ge=0,
        description="OVER_QUERY_LIMIT時の初回待機時間（秒）",
    )
    geocoding_retry_max_delay: float = Field(
        default=5.0,
        ge=0,
        description="OVER_QUERY_LIMIT時の待機時間の上限（秒）",
    )
    geocoding_retry_jitter: float = Field(
        default=0.5,
        ge=0,
        le=1,
        description="待機時間のジッター幅（0で無効）",
    )
    geocoding_max_retries: Optional[int] = Field(
        default=10,
        ge=0,
        description="OVER_QUERY_LIMIT時の最大リトライ回数（既定10。空文字・none・unlimitedで無制限）",
    )
    geocoding_concurrency: int = Field(
        default=1,
        ge=1,
        description="同時に実行するジオコーディングの最大数",
    )
    geocoding_rate_limit: Optional[float] = Field(
        default=None,
        gt=0,
        description="ジオコーディングのレート制限（リクエスト/秒、未設定の場合は制限なし）",
    )

    # Pipeline
    show_progress: bool = Field(
        default=False,
        description="ジオコーディングの進捗バーを表示するか",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    @field_validator("geocoding_max_retries", mode="before")
    @classmethod
    def parse_unbounded_retries(cls, value):
        """空文字・none・unlimitedは無制限（None）として扱う"""
        if isinstance(value, str) and value.strip().lower() in ("", "none", "unlimited"):
            return None
        return value
