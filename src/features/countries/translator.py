"""国コード変換（ISO 3166-1 alpha-3 → alpha-2）"""
from typing import Iterable, Optional

from ...shared.logging.config import get_logger
from .iso3166 import ISO_3166_COUNTRIES

logger = get_logger(__name__)


class CountryCodeTranslator:
    """
    3文字の国コードを2文字の国コードに変換する

    マッピングはインスタンス生成時に一度だけ構築し、以降は読み取り専用。
    """

    def __init__(self, countries: Optional[Iterable[tuple[str, str]]] = None) -> None:
        """
        Args:
            countries: (alpha-2, alpha-3) のペア（省略時はISO 3166-1の全件）
        """
        mapping: dict[str, str] = {}
        for two_letter_code, three_letter_code in countries or ISO_3166_COUNTRIES:
            # 同じalpha-3が重複した場合は後勝ち
            mapping[three_letter_code.upper()] = two_letter_code.upper()

        self._mapping = mapping

        logger.debug(f"CountryCodeTranslator initialized: {len(mapping)} countries")

    def translate(self, three_letter_code: Optional[str]) -> Optional[str]:
        """
        3文字の国コードを2文字の国コードに変換

        Args:
            three_letter_code: ISO 3166-1 alpha-3 コード（例: "DEU"）

        Returns:
            Optional[str]: alpha-2 コード（例: "DE"）。未知のコードの場合はNone
        """
        if not three_letter_code:
            return None

        return self._mapping.get(three_letter_code.strip().upper())

    def __contains__(self, three_letter_code: object) -> bool:
        if not isinstance(three_letter_code, str):
            return False
        return three_letter_code.strip().upper() in self._mapping

    def __len__(self) -> int:
        return len(self._mapping)
