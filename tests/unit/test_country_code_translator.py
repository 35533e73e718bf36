"""国コード変換のテスト"""

import pytest

from src.features.countries.iso3166 import ISO_3166_COUNTRIES
from src.features.countries.translator import CountryCodeTranslator


@pytest.mark.parametrize(
    "three_letter_code,expected",
    [
        ("DEU", "DE"),
        ("AUT", "AT"),
        ("USA", "US"),
        ("GBR", "GB"),
        ("JPN", "JP"),
        ("deu", "DE"),
        (" fra ", "FR"),
    ],
)
def test_translate_known_codes(three_letter_code: str, expected: str) -> None:
    """既知の3文字コードは2文字コードに変換される"""
    translator = CountryCodeTranslator()
    assert translator.translate(three_letter_code) == expected


@pytest.mark.parametrize("three_letter_code", ["XXX", "DE", "", None, "GERMANY"])
def test_translate_unknown_codes(three_letter_code: str | None) -> None:
    """未知のコードはNone"""
    translator = CountryCodeTranslator()
    assert translator.translate(three_letter_code) is None


def test_every_registry_code_translates() -> None:
    """レジストリの全alpha-3コードが対応するalpha-2コードに変換される"""
    translator = CountryCodeTranslator()

    for two_letter_code, three_letter_code in ISO_3166_COUNTRIES:
        assert translator.translate(three_letter_code) == two_letter_code


def test_registry_codes_are_unique() -> None:
    """静的テーブルにコードの重複がない"""
    two_letter_codes = [two for two, _ in ISO_3166_COUNTRIES]
    three_letter_codes = [three for _, three in ISO_3166_COUNTRIES]

    assert len(set(two_letter_codes)) == len(two_letter_codes)
    assert len(set(three_letter_codes)) == len(three_letter_codes)
    assert len(CountryCodeTranslator()) == len(ISO_3166_COUNTRIES)


def test_duplicate_keys_last_write_wins() -> None:
    """alpha-3が重複した場合は後に登録した値が使われる"""
    translator = CountryCodeTranslator([("AA", "aaa"), ("BB", "AAA")])

    assert translator.translate("AAA") == "BB"
    assert len(translator) == 1


def test_contains() -> None:
    translator = CountryCodeTranslator()

    assert "DEU" in translator
    assert "deu" in translator
    assert "XXX" not in translator
    assert 42 not in translator
