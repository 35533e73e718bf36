"""輸送オーダー機能のEnum定義"""
from enum import Enum


class AddressKind(str, Enum):
    """オーダー内の住所の種別"""

    DEPARTURE = "departure"
    DESTINATION = "destination"

    @property
    def feed_key(self) -> str:
        """オーダーフィードJSON上のキー名"""
        return f"{self.value}Address"


class AddressField(str, Enum):
    """オーダーフィードJSON上の住所フィールド名（すべて必須）"""

    COUNTRY = "country"
    ZIP_CODE = "zipCode"
    CITY = "city"
    COUNTRY_CODE = "countryCode"
    STREET = "street"
    HOUSE_NUMBER = "houseNumber"
