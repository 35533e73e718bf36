"""輸送オーダーの取得・解析"""

from typing import Any, Optional

from ....shared.exceptions.errors import ParseError
from ....shared.http.client import HTTPClient
from ....shared.logging.config import get_logger
from ...countries.translator import CountryCodeTranslator
from ..domain.enums import AddressField, AddressKind
from ..domain.models import Address, Order

logger = get_logger(__name__)

DEFAULT_ORDER_FEED_URL = "http://mobapply.com/tests/orders/"


class OrderSource:
    """
    リモートのオーダーフィード（JSON配列）からオーダー一覧を取得する

    レコード単位で解析し、必須フィールドが欠けたレコードのみをスキップする。
    """

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        feed_url: str = DEFAULT_ORDER_FEED_URL,
        translator: Optional[CountryCodeTranslator] = None,
    ) -> None:
        """
        Args:
            http_client: HTTPクライアント（Noneの場合は新規作成）
            feed_url: オーダーフィードのURL
            translator: 国コード変換（Noneの場合は新規作成）
        """
        self._owns_http_client = http_client is None
        self.http_client = http_client or HTTPClient()
        self.feed_url = feed_url
        self.translator = translator or CountryCodeTranslator()

        # 直近のfetchでスキップしたレコード数
        self.skipped_records = 0

        logger.info(f"OrderSource initialized: {self.feed_url}")

    def close(self) -> None:
        """自分で生成したHTTPクライアントを閉じる"""
        if self._owns_http_client:
            self.http_client.close()

    def __enter__(self) -> "OrderSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def fetch(self) -> list[Order]:
        """
        オーダーフィードを取得して解析

        Returns:
            list[Order]: 解析に成功したオーダー（フィードと同じ順序）

        Raises:
            NetworkError: フィードの取得に失敗した場合
            ParseError: フィード全体がJSON配列として解析できない場合
        """
        logger.info(f"Fetching orders from {self.feed_url}")

        payload = self.http_client.get_json(self.feed_url)
        orders = self.parse_orders(payload)

        logger.info(
            f"Fetched {len(orders)} orders ({self.skipped_records} records skipped)"
        )
        return orders

    def parse_orders(self, payload: Any) -> list[Order]:
        """
        デコード済みのフィードをオーダーのリストに変換

        Args:
            payload: JSONデコード済みのフィード

        Returns:
            list[Order]: 解析に成功したオーダー

        Raises:
            ParseError: フィードがJSON配列でない場合
        """
        if not isinstance(payload, list):
            raise ParseError(
                f"Order feed must be a JSON array, got {type(payload).__name__}"
            )

        orders: list[Order] = []
        self.skipped_records = 0

        for index, record in enumerate(payload):
            try:
                orders.append(self.parse_order(record))
            except ParseError as e:
                # 不正なレコードのみスキップし、残りは解析を続ける
                self.skipped_records += 1
                logger.warning(f"Skipping order record #{index}: {e}")

        return orders

    def parse_order(self, record: Any) -> Order:
        """
        オーダーレコード1件を解析

        Raises:
            ParseError: 住所オブジェクトや必須フィールドが欠けている場合
        """
        if not isinstance(record, dict):
            raise ParseError(f"order record must be an object, got {type(record).__name__}")

        departure = self.parse_address(
            record.get(AddressKind.DEPARTURE.feed_key), AddressKind.DEPARTURE
        )
        destination = self.parse_address(
            record.get(AddressKind.DESTINATION.feed_key), AddressKind.DESTINATION
        )

        return Order(departure=departure, destination=destination)

    def parse_address(self, data: Any, kind: AddressKind) -> Address:
        """
        住所オブジェクトを解析し、2文字の国コードを付与

        Args:
            data: 住所オブジェクト
            kind: 住所の種別（エラーメッセージ用）

        Returns:
            Address: 住所

        Raises:
            ParseError: 住所オブジェクトや必須フィールドが欠けている場合
        """
        if not isinstance(data, dict):
            raise ParseError(f"missing '{kind.feed_key}' object")

        values = {
            address_field: _require_string(data, address_field.value, kind)
            for address_field in AddressField
        }
        country_code = values[AddressField.COUNTRY_CODE]

        two_letter_country_code = self.translator.translate(country_code)
        if two_letter_country_code is None:
            logger.debug(f"Unknown country code '{country_code}' in {kind.feed_key}")

        return Address(
            country=values[AddressField.COUNTRY],
            zip_code=values[AddressField.ZIP_CODE],
            city=values[AddressField.CITY],
            country_code=country_code,
            street=values[AddressField.STREET],
            house_number=values[AddressField.HOUSE_NUMBER],
            two_letter_country_code=two_letter_country_code,
        )


def _require_string(data: dict[str, Any], key: str, kind: AddressKind) -> str:
    """必須フィールドを文字列として取り出す（数値は文字列化する）"""
    if key not in data:
        raise ParseError(f"missing field '{key}' in {kind.feed_key}")

    value = data[key]

    if isinstance(value, str):
        return value
    # boolはintのサブクラスなので先に除外
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)

    raise ParseError(
        f"field '{key}' in {kind.feed_key} must be a string, got {type(value).__name__}"
    )
