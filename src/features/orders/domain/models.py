"""輸送オーダー機能のドメインモデル"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .enums import AddressKind


@dataclass(frozen=True)
class Coordinates:
    """地理座標（緯度・経度）"""

    latitude: float  # 緯度
    longitude: float  # 経度

    def __repr__(self) -> str:
        return f"Coordinates(lat={self.latitude}, lng={self.longitude})"

    def to_tuple(self) -> tuple[float, float]:
        """(緯度, 経度)のタプルとして返す"""
        return (self.latitude, self.longitude)


@dataclass
class Address:
    """
    住所情報

    6つの基本フィールドは常に存在する。
    緯度・経度はCoordinatesとしてまとめて保持するため、両方あるか両方ないかのどちらか。
    """

    country: str  # 国名
    zip_code: str  # 郵便番号
    city: str  # 市区町村
    country_code: str  # 国コード（ISO 3166-1 alpha-3）
    street: str  # 通り
    house_number: str  # 番地

    two_letter_country_code: Optional[str] = None  # 国コード（alpha-2、変換できない場合はNone）
    coordinates: Optional[Coordinates] = field(default=None)  # ジオコーディング後に設定

    @property
    def has_coordinates(self) -> bool:
        return self.coordinates is not None

    @property
    def latitude(self) -> Optional[float]:
        return self.coordinates.latitude if self.coordinates else None

    @property
    def longitude(self) -> Optional[float]:
        return self.coordinates.longitude if self.coordinates else None

    def assign_coordinates(self, coordinates: Optional[Coordinates]) -> None:
        """
        ジオコーディング結果を設定（一度だけ）

        Args:
            coordinates: 座標（Noneの場合は何もしない）

        Raises:
            ValueError: 既に座標が設定されている場合
        """
        if coordinates is None:
            return

        if self.coordinates is not None:
            raise ValueError(f"Coordinates already assigned for address: {self.to_display_string()}")

        self.coordinates = coordinates

    def to_display_string(self) -> str:
        """地図表示用の住所文字列（番地 通り 市区町村 郵便番号 国コード）"""
        return " ".join(
            [self.house_number, self.street, self.city, self.zip_code, self.country_code]
        )

    def to_dict(self) -> dict[str, Any]:
        """オーダーフィードと同じキー名の辞書に変換"""
        return {
            "country": self.country,
            "zipCode": self.zip_code,
            "city": self.city,
            "countryCode": self.country_code,
            "street": self.street,
            "houseNumber": self.house_number,
            "twoLetterCountryCode": self.two_letter_country_code,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


@dataclass
class Order:
    """
    輸送オーダー

    出発地と目的地の住所を1つずつ持つ。
    住所オブジェクトは生成後に差し替えず、座標のみを後から設定する。
    """

    departure: Address  # 出発地
    destination: Address  # 目的地

    def get_address(self, kind: AddressKind) -> Address:
        """種別に対応する住所を取得"""
        if kind == AddressKind.DEPARTURE:
            return self.departure
        return self.destination

    def has_coordinates(self) -> bool:
        """出発地・目的地の両方に座標が設定されているか"""
        return self.departure.has_coordinates and self.destination.has_coordinates

    @property
    def departure_coordinates(self) -> Optional[Coordinates]:
        return self.departure.coordinates

    @property
    def destination_coordinates(self) -> Optional[Coordinates]:
        return self.destination.coordinates

    def address_to_string(self, kind: AddressKind) -> str:
        """地図のマーカーに表示する住所文字列"""
        return self.get_address(kind).to_display_string()

    def to_dict(self) -> dict[str, Any]:
        """JSON出力用の辞書に変換"""
        return {
            AddressKind.DEPARTURE.feed_key: self.departure.to_dict(),
            AddressKind.DESTINATION.feed_key: self.destination.to_dict(),
            "hasCoordinates": self.has_coordinates(),
        }
