"""Google Geocoding API（HTTP/JSON）による住所→座標の解決"""
import math
import threading
import time
from typing import Any, Callable, Optional
from urllib.parse import quote_plus

from ...orders.domain.models import Address, Coordinates
from ..domain.enums import GeocodingStatus
from ....shared.exceptions.errors import (
    GeocodingError,
    GeocodingServiceError,
    NetworkError,
    ParseError,
    RateLimitedError,
)
from ....shared.http.client import HTTPClient
from ....shared.http.rate_limiter import RateLimiter, backoff_delay
from ....shared.logging.config import get_logger

logger = get_logger(__name__)

DEFAULT_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/"


class GoogleGeocodingResolver:
    """
    Google Geocoding APIで住所を座標に変換する

    OVER_QUERY_LIMITが返された場合は同じリクエストを指数バックオフで再送する。
    max_retriesがNoneの場合は成功するまで無制限に再送する。
    """

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        base_url: str = DEFAULT_GEOCODE_URL,
        api_key: Optional[str] = None,
        max_retries: Optional[int] = 10,
        base_delay: float = 0.2,
        max_delay: float = 5.0,
        jitter: float = 0.5,
        rate_limiter: Optional[RateLimiter] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            http_client: HTTPクライアント（Noneの場合は新規作成）
            base_url: APIのベースURL（末尾スラッシュ付き）
            api_key: Google Maps API キー（Noneの場合はkeyパラメータを付与しない）
            max_retries: OVER_QUERY_LIMIT時の最大リトライ回数（Noneで無制限）
            base_delay: 初回リトライまでの待機時間（秒）
            max_delay: 待機時間の上限（秒）
            jitter: 待機時間のジッター幅（0で固定間隔）
            rate_limiter: リクエスト間隔の制御（オプション）
            sleep: 待機に使う関数
        """
        # 自分で生成したクライアントのみclose対象
        self._owns_http_client = http_client is None
        self.http_client = http_client or HTTPClient()
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.api_key = api_key
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.jitter = jitter
        self.rate_limiter = rate_limiter
        self.sleep = sleep

        # リトライ回数はスレッドごとに保持し、合計はロック下で集計する
        self._local = threading.local()
        self._lock = threading.Lock()
        self.total_retries = 0

        logger.info(
            f"GoogleGeocodingResolver initialized: max_retries={max_retries}, "
            f"base_delay={base_delay}s, api_key={'set' if api_key else 'not set'}"
        )

    @property
    def retry_count(self) -> int:
        """現在のスレッドで直近に呼び出したgeocodeのリトライ回数"""
        return getattr(self._local, "retry_count", 0)

    def close(self) -> None:
        """自分で生成したHTTPクライアントを閉じる"""
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "GoogleGeocodingResolver":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @staticmethod
    def build_address_query(address: Address) -> str:
        """
        ジオコーディング用の1行住所を作成

        番地, 通り, 市区町村, 郵便番号, 2文字国コードの順に、
        空でない値だけをカンマ区切りで連結する。
        """
        components = [
            address.house_number,
            address.street,
            address.city,
            address.zip_code,
            address.two_letter_country_code,
        ]
        return ",".join(component for component in components if component)

    def build_request_url(self, address: Address) -> str:
        """住所をURLエンコードしてリクエストURLを作成"""
        url = f"{self.base_url}json?address={quote_plus(self.build_address_query(address))}"
        if self.api_key:
            url += f"&key={quote_plus(self.api_key)}"
        return url

    def resolve(self, address: Address) -> Optional[Coordinates]:
        """
        住所を座標に変換（失敗時はNone）

        エラーはすべてログに記録し、呼び出し元には伝播しない。

        Args:
            address: 住所

        Returns:
            Optional[Coordinates]: 座標（解決できない場合はNone）
        """
        try:
            return self.geocode(address)
        except RateLimitedError as e:
            logger.error(f"Rate limit retries exhausted for '{address.to_display_string()}': {e}")
        except GeocodingServiceError as e:
            logger.error(
                f"Geocoding service error ({e.status}) for '{address.to_display_string()}': {e}"
            )
        except (GeocodingError, NetworkError, ParseError) as e:
            logger.error(f"Geocoding failed for '{address.to_display_string()}': {e}")
        return None

    def geocode(self, address: Address) -> Optional[Coordinates]:
        """
        住所をジオコーディング

        Args:
            address: 住所

        Returns:
            Optional[Coordinates]: 座標（該当なしの場合はNone）

        Raises:
            RateLimitedError: OVER_QUERY_LIMITのリトライ上限を超えた場合
            GeocodingServiceError: APIがエラーステータスを返した場合
            NetworkError: 通信に失敗した場合
            ParseError: レスポンスが不正な場合
        """
        self._local.retry_count = 0

        query = self.build_address_query(address)
        if not query:
            logger.warning("Empty address provided for geocoding")
            return None

        url = self.build_request_url(address)
        logger.debug(f"Geocoding address: {query}")

        attempt = 0
        while True:
            body = self._request(url)
            status = _parse_status(body)

            if status != GeocodingStatus.OVER_QUERY_LIMIT:
                break

            if self.max_retries is not None and attempt >= self.max_retries:
                raise RateLimitedError(
                    f"OVER_QUERY_LIMIT after {attempt} retries: {query}",
                    retries=attempt,
                )

            delay = backoff_delay(
                attempt,
                base_delay=self.base_delay,
                max_delay=self.max_delay,
                jitter=self.jitter,
            )
            logger.warning(
                f"Geocoding rate limited, retrying in {delay:.2f}s "
                f"(retry {attempt + 1}): {query}"
            )
            self.sleep(delay)
            attempt += 1
            self._local.retry_count = attempt
            with self._lock:
                self.total_retries += 1

        if status not in (GeocodingStatus.OK, GeocodingStatus.ZERO_RESULTS):
            message = body.get("error_message") or "no error message"
            raise GeocodingServiceError(
                f"Geocoding API returned {status.value}: {message}",
                status=status.value,
            )

        coordinates = _parse_coordinates(body)
        if coordinates is None:
            logger.warning(f"No geocoding results for address: {query}")
            return None

        logger.debug(f"Geocoded: {query} -> ({coordinates.latitude}, {coordinates.longitude})")
        return coordinates

    def _request(self, url: str) -> dict[str, Any]:
        """APIを呼び出し、JSONオブジェクトを返す"""
        if self.rate_limiter:
            self.rate_limiter.wait()

        body = self.http_client.get_json(url)
        if not isinstance(body, dict):
            raise ParseError(f"Geocoding response must be a JSON object, got {type(body).__name__}")
        return body


def _parse_status(body: dict[str, Any]) -> GeocodingStatus:
    status = body.get("status")
    if not isinstance(status, str):
        raise ParseError("Geocoding response has no 'status' field")
    return GeocodingStatus.from_value(status)


def _parse_coordinates(body: dict[str, Any]) -> Optional[Coordinates]:
    """最初の結果のgeometry.locationから座標を取り出す"""
    results = body.get("results")
    if results is None:
        return None
    if not isinstance(results, list):
        raise ParseError("Geocoding response 'results' must be an array")
    if not results:
        return None

    try:
        location = results[0]["geometry"]["location"]
        latitude = location["lat"]
        longitude = location["lng"]
    except (KeyError, TypeError) as e:
        raise ParseError(f"Invalid geocoding result (missing lat/lng): {e}") from e

    if isinstance(latitude, bool) or isinstance(longitude, bool):
        raise ParseError("Invalid geocoding result (lat/lng must be numbers)")
    try:
        coordinates = Coordinates(latitude=float(latitude), longitude=float(longitude))
    except (TypeError, ValueError, OverflowError) as e:
        raise ParseError(f"Invalid geocoding result (lat/lng must be numbers): {e}") from e

    if not (math.isfinite(coordinates.latitude) and math.isfinite(coordinates.longitude)):
        raise ParseError(f"Invalid geocoding result (non-finite lat/lng): {coordinates}")
    return coordinates
