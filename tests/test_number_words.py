from decimal import Decimal

import pytest

from lpjdesa.utils.number_words import amount_to_words, amount_to_words_plain, spell_number


@pytest.mark.parametrize(
    "value,expected",
    [
        (0, "Nol"),
        (1, "Satu"),
        (11, "Sebelas"),
        (15, "Lima Belas"),
        (21, "Dua Puluh Satu"),
        (100, "Seratus"),
        (115, "Seratus Lima Belas"),
        (1000, "Seribu"),
        (1500, "Seribu Lima Ratus"),
        (2_500_000, "Dua Juta Lima Ratus Ribu"),
        (1_000_000, "Satu Juta"),
        (3_000_000_000, "Tiga Miliar"),
    ],
)
def test_spell_number_indonesian(value, expected):
    assert spell_number(value) == expected


def test_spell_number_english():
    assert spell_number(6_000_000, locale="en") == "Six Million"
    assert spell_number(1_215, locale="en") == "One Thousand Two Hundred Fifteen"
    assert spell_number(42, locale="en") == "Forty Two"


def test_amount_to_words_appends_currency():
    assert amount_to_words(2_500_000) == "Dua Juta Lima Ratus Ribu Rupiah"
    assert amount_to_words(Decimal("6000000.00"), locale="en") == "Six Million Rupiah"
    assert amount_to_words(1000, currency="Dollar", locale="en") == "One Thousand Dollar"


def test_amount_rounds_to_whole_units():
    assert amount_to_words_plain(Decimal("1499.50")) == "Seribu Lima Ratus"
    assert amount_to_words_plain(Decimal("1499.49")) == "Seribu Empat Ratus Sembilan Puluh Sembilan"


def test_negative_and_missing_amounts():
    assert amount_to_words(-1500) == "Minus Seribu Lima Ratus Rupiah"
    assert amount_to_words(None) == "Nol Rupiah"
    assert amount_to_words("not a number") == "Nol Rupiah"


def test_amount_too_large_has_no_currency():
    assert amount_to_words(10 ** 15) == "Angka terlalu besar"
    assert amount_to_words(10 ** 15, locale="en") == "Number too large"


def test_unknown_locale_rejected():
    with pytest.raises(ValueError):
        spell_number(5, locale="fr")
