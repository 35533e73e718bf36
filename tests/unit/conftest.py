"""ユニットテスト共通のフィクスチャ"""

from typing import Any
from unittest.mock import MagicMock

import pytest

from src.features.orders.domain.models import Address
from src.shared.http.client import HTTPClient

FEED_URL = "http://orders.example.test/orders/"
GEOCODE_URL = "https://geocode.example.test/geocode/"


def make_address_record(**overrides: Any) -> dict[str, Any]:
    """オーダーフィードの住所オブジェクトを作成"""
    record = {
        "country": "Germany",
        "zipCode": "10117",
        "city": "Berlin",
        "countryCode": "DEU",
        "street": "Unter den Linden",
        "houseNumber": "77",
    }
    record.update(overrides)
    return record


def make_order_record(
    departure: dict[str, Any] | None = None,
    destination: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """オーダーフィードのレコードを作成"""
    return {
        "departureAddress": departure or make_address_record(),
        "destinationAddress": destination
        or make_address_record(
            country="Austria",
            zipCode="1010",
            city="Wien",
            countryCode="AUT",
            street="Stephansplatz",
            houseNumber="3",
        ),
    }


def make_geocode_body(lat: float = 52.5163, lng: float = 13.3777) -> dict[str, Any]:
    """Geocoding APIの成功レスポンスを作成"""
    return {
        "status": "OK",
        "results": [
            {
                "formatted_address": "Unter den Linden 77, 10117 Berlin, Germany",
                "geometry": {"location": {"lat": lat, "lng": lng}},
            }
        ],
    }


OVER_QUERY_LIMIT_BODY = {"status": "OVER_QUERY_LIMIT", "results": []}
ZERO_RESULTS_BODY = {"status": "ZERO_RESULTS", "results": []}


@pytest.fixture
def http_client() -> MagicMock:
    """get_jsonをテストごとに差し替えるHTTPクライアント"""
    return MagicMock(spec=HTTPClient)


@pytest.fixture
def address() -> Address:
    return Address(
        country="Germany",
        zip_code="10117",
        city="Berlin",
        country_code="DEU",
        street="Unter den Linden",
        house_number="77",
        two_letter_country_code="DE",
    )
