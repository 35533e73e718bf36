"""オーダーフィード取得・解析のテスト"""

from unittest.mock import MagicMock

import pytest

from conftest import FEED_URL, make_address_record, make_order_record
from src.features.orders.domain.enums import AddressField
from src.features.orders.sources.order_source import OrderSource
from src.shared.exceptions.errors import NetworkError, ParseError


def _source(http_client: MagicMock) -> OrderSource:
    return OrderSource(http_client=http_client, feed_url=FEED_URL)


def test_fetch_parses_all_fields(http_client: MagicMock) -> None:
    """住所フィールドは入力文字列のまま保持される"""
    http_client.get_json.return_value = [make_order_record()]

    orders = _source(http_client).fetch()

    http_client.get_json.assert_called_once_with(FEED_URL)
    assert len(orders) == 1

    departure = orders[0].departure
    assert departure.country == "Germany"
    assert departure.zip_code == "10117"
    assert departure.city == "Berlin"
    assert departure.country_code == "DEU"
    assert departure.street == "Unter den Linden"
    assert departure.house_number == "77"
    assert departure.two_letter_country_code == "DE"
    assert not departure.has_coordinates

    destination = orders[0].destination
    assert destination.city == "Wien"
    assert destination.two_letter_country_code == "AT"


def test_fetch_preserves_feed_order(http_client: MagicMock) -> None:
    """並び替え・重複除去はしない"""
    records = [
        make_order_record(departure=make_address_record(houseNumber=str(i)))
        for i in (3, 1, 2, 2)
    ]
    http_client.get_json.return_value = records

    orders = _source(http_client).fetch()

    assert [order.departure.house_number for order in orders] == ["3", "1", "2", "2"]


@pytest.mark.parametrize("missing_field", [f.value for f in AddressField])
def test_record_missing_field_is_skipped(http_client: MagicMock, missing_field: str) -> None:
    """必須フィールドが欠けたレコードのみスキップされる"""
    broken = make_address_record()
    del broken[missing_field]
    http_client.get_json.return_value = [
        make_order_record(),
        make_order_record(destination=broken),
        make_order_record(departure=make_address_record(city="Hamburg")),
    ]
    source = _source(http_client)

    orders = source.fetch()

    assert [order.departure.city for order in orders] == ["Berlin", "Hamburg"]
    assert source.skipped_records == 1


@pytest.mark.parametrize(
    "record",
    [
        "not an object",
        {"departureAddress": make_address_record()},
        {"departureAddress": None, "destinationAddress": make_address_record()},
        make_order_record(departure=make_address_record(city=None)),
        make_order_record(departure=make_address_record(zipCode={"code": "1"})),
        make_order_record(departure=make_address_record(houseNumber=True)),
    ],
)
def test_invalid_records_are_skipped(http_client: MagicMock, record: object) -> None:
    http_client.get_json.return_value = [record]
    source = _source(http_client)

    assert source.fetch() == []
    assert source.skipped_records == 1


def test_numeric_values_are_stringified(http_client: MagicMock) -> None:
    http_client.get_json.return_value = [
        make_order_record(departure=make_address_record(zipCode=10117, houseNumber=77))
    ]

    orders = _source(http_client).fetch()

    assert orders[0].departure.zip_code == "10117"
    assert orders[0].departure.house_number == "77"


def test_unknown_country_code_leaves_two_letter_code_unset(http_client: MagicMock) -> None:
    """国コードが変換できなくてもエラーにはならない"""
    http_client.get_json.return_value = [
        make_order_record(departure=make_address_record(countryCode="XYZ"))
    ]

    orders = _source(http_client).fetch()

    assert orders[0].departure.country_code == "XYZ"
    assert orders[0].departure.two_letter_country_code is None


def test_feed_must_be_array(http_client: MagicMock) -> None:
    http_client.get_json.return_value = {"orders": []}

    with pytest.raises(ParseError):
        _source(http_client).fetch()


def test_network_error_propagates(http_client: MagicMock) -> None:
    http_client.get_json.side_effect = NetworkError("connection refused")

    with pytest.raises(NetworkError):
        _source(http_client).fetch()


def test_skipped_records_reset_per_fetch(http_client: MagicMock) -> None:
    source = _source(http_client)

    http_client.get_json.return_value = ["bad"]
    source.fetch()
    assert source.skipped_records == 1

    http_client.get_json.return_value = [make_order_record()]
    source.fetch()
    assert source.skipped_records == 0


def test_close_only_owned_client(http_client: MagicMock) -> None:
    """自分で生成したHTTPクライアントのみ閉じる"""
    _source(http_client).close()
    http_client.close.assert_not_called()

    with OrderSource(feed_url=FEED_URL) as source:
        session = MagicMock()
        source.http_client.session = session

    session.close.assert_called_once()
