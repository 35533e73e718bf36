"""パイプラインオーケストレーター"""

import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Iterable, Iterator, Optional

from tqdm import tqdm

from ...infrastructure.config.settings import Settings
from ...shared.exceptions.errors import NetworkError, ParseError
from ...shared.http.client import HTTPClient
from ...shared.http.rate_limiter import RateLimiter
from ...shared.logging.config import get_logger
from ..countries.translator import CountryCodeTranslator
from ..geocoding.providers.google_geocoding_resolver import GoogleGeocodingResolver
from ..orders.domain.enums import AddressKind
from ..orders.domain.models import Order
from ..orders.sources.order_source import OrderSource
from .domain.models import PipelineResult, PipelineStatus

logger = get_logger(__name__)


class PipelineOrchestrator:
    """
    オーダー取得とジオコーディングを順に実行する

    処理フロー:
    1. OrderSourceからオーダー一覧を取得（1回のみ）
    2. 各オーダーの出発地→目的地の順に座標を解決し、その場で設定
    3. 座標を解決できなかったオーダーも含めて全件を返す
    """

    def __init__(
        self,
        order_source: OrderSource,
        resolver: GoogleGeocodingResolver,
        concurrency: int = 1,
        show_progress: bool = False,
    ) -> None:
        """
        Args:
            order_source: オーダー取得元
            resolver: ジオコーダー
            concurrency: 同時に解決するオーダー数（1の場合は逐次処理）
            show_progress: プログレスバーを表示するか
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")

        self.order_source = order_source
        self.resolver = resolver
        self.concurrency = concurrency
        self.show_progress = show_progress

        # from_settingsで生成したHTTPクライアント（closeで閉じる）
        self._owned_http_client: Optional[HTTPClient] = None

        logger.info(f"PipelineOrchestrator initialized: concurrency={concurrency}")

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: Optional[HTTPClient] = None
    ) -> "PipelineOrchestrator":
        """
        設定から各コンポーネントを組み立てる

        Args:
            settings: アプリケーション設定
            http_client: 共有するHTTPクライアント（Noneの場合は新規作成）
        """
        owned_http_client = None
        if http_client is None:
            owned_http_client = HTTPClient(
                timeout=settings.http_timeout,
                max_retries=settings.http_retry,
                user_agent=settings.http_user_agent,
            )
            http_client = owned_http_client

        order_source = OrderSource(
            http_client=http_client,
            feed_url=settings.order_feed_url,
            translator=CountryCodeTranslator(),
        )

        rate_limiter = None
        if settings.geocoding_rate_limit:
            rate_limiter = RateLimiter(requests_per_second=settings.geocoding_rate_limit)

        resolver = GoogleGeocodingResolver(
            http_client=http_client,
            base_url=settings.geocoding_base_url,
            api_key=settings.google_maps_api_key,
            max_retries=settings.geocoding_max_retries,
            base_delay=settings.geocoding_retry_base_delay,
            max_delay=settings.geocoding_retry_max_delay,
            jitter=settings.geocoding_retry_jitter,
            rate_limiter=rate_limiter,
        )

        orchestrator = cls(
            order_source=order_source,
            resolver=resolver,
            concurrency=settings.geocoding_concurrency,
            show_progress=settings.show_progress,
        )
        orchestrator._owned_http_client = owned_http_client
        return orchestrator

    def close(self) -> None:
        """from_settingsで生成したHTTPクライアントを閉じる"""
        if self._owned_http_client is not None:
            self._owned_http_client.close()
            self._owned_http_client = None

    def __enter__(self) -> "PipelineOrchestrator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def run(self) -> list[Order]:
        """
        パイプラインを実行し、座標付きのオーダー一覧を返す

        Returns:
            list[Order]: オーダー一覧（座標を解決できなかったものも含む）
        """
        return self.execute().orders

    def execute(self) -> PipelineResult:
        """
        パイプラインを実行し、統計付きの結果を返す

        Returns:
            PipelineResult: 実行結果
        """
        started_at = datetime.now()
        result = PipelineResult(
            run_id=uuid.uuid4().hex[:8],
            started_at=started_at,
            status=PipelineStatus.RUNNING,
        )

        logger.info(f"Starting pipeline (run_id={result.run_id})")

        # 1. オーダー取得
        try:
            orders = self.order_source.fetch()
        except NetworkError as e:
            logger.error(f"Failed to fetch orders: {e}")
            result.errors.append(f"NetworkError: {e}")
            return self._finish(result, PipelineStatus.FAILED)
        except ParseError as e:
            logger.error(f"Failed to parse order feed: {e}")
            result.errors.append(f"ParseError: {e}")
            return self._finish(result, PipelineStatus.FAILED)

        result.orders = orders
        result.skipped_records = self.order_source.skipped_records

        # 2. ジオコーディング
        for resolved, failed in self._resolve_orders(orders):
            result.geocoded_addresses += resolved
            result.failed_addresses += failed

        status = PipelineStatus.SUCCESS
        if result.skipped_records or result.failed_addresses:
            status = PipelineStatus.PARTIAL

        return self._finish(result, status)

    def resolve_order(self, order: Order) -> tuple[int, int]:
        """
        オーダーの出発地・目的地の座標を順に解決して設定

        Returns:
            tuple[int, int]: (解決できた住所数, 解決できなかった住所数)
        """
        resolved = 0
        failed = 0

        for kind in (AddressKind.DEPARTURE, AddressKind.DESTINATION):
            address = order.get_address(kind)
            if address.has_coordinates:
                resolved += 1
                continue

            coordinates = self.resolver.resolve(address)
            if coordinates is None:
                failed += 1
                continue

            address.assign_coordinates(coordinates)
            resolved += 1

        return resolved, failed

    def _resolve_orders(self, orders: list[Order]) -> Iterator[tuple[int, int]]:
        """全オーダーを解決し、オーダーごとの(解決数, 失敗数)を順に返す"""
        if self.concurrency == 1:
            results = map(self.resolve_order, orders)
            yield from self._with_progress(results, len(orders))
            return

        with ThreadPoolExecutor(max_workers=self.concurrency) as executor:
            # mapは入力順に結果を返す
            results = executor.map(self.resolve_order, orders)
            yield from self._with_progress(results, len(orders))

    def _with_progress(
        self, iterable: Iterable[tuple[int, int]], total: int
    ) -> Iterable[tuple[int, int]]:
        if not self.show_progress:
            return iterable
        return tqdm(iterable, total=total, desc="Geocoding orders", unit="order")

    def _finish(self, result: PipelineResult, status: PipelineStatus) -> PipelineResult:
        result.status = status
        result.completed_at = datetime.now()
        result.duration_seconds = (result.completed_at - result.started_at).total_seconds()

        logger.info(
            f"Pipeline completed: {result.status.value}, {result.total_orders} orders "
            f"({result.complete_orders} with coordinates), "
            f"{result.geocoded_addresses} addresses geocoded, "
            f"{result.failed_addresses} failed, {result.skipped_records} records skipped"
        )
        return result
