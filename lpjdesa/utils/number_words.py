"""Spell monetary amounts in words ("terbilang").

Receipts and report summaries print totals both as figures and as words, e.g.
``Terbilang : # Dua Juta Lima Ratus Ribu Rupiah #``.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Optional, Tuple, Union

Number = Union[int, float, Decimal, str, None]

LIMIT = 10 ** 15


@dataclass(frozen=True)
class Lexicon:
    small: Tuple[str, ...]
    zero: str
    minus: str
    too_large: str
    currency: str
    scales: Tuple[Tuple[int, str], ...]
    teen_suffix: Optional[str] = None
    tens: Optional[Tuple[str, ...]] = None
    tens_suffix: Optional[str] = None
    single_forms: Dict[int, str] = field(default_factory=dict)


INDONESIAN = Lexicon(
    small=(
        "",
        "Satu",
        "Dua",
        "Tiga",
        "Empat",
        "Lima",
        "Enam",
        "Tujuh",
        "Delapan",
        "Sembilan",
        "Sepuluh",
        "Sebelas",
    ),
    zero="Nol",
    minus="Minus",
    too_large="Angka terlalu besar",
    currency="Rupiah",
    scales=((10 ** 12, "Triliun"), (10 ** 9, "Miliar"), (10 ** 6, "Juta"), (1000, "Ribu"), (100, "Ratus")),
    teen_suffix="Belas",
    tens_suffix="Puluh",
    single_forms={100: "Seratus", 1000: "Seribu"},
)

ENGLISH = Lexicon(
    small=(
        "",
        "One",
        "Two",
        "Three",
        "Four",
        "Five",
        "Six",
        "Seven",
        "Eight",
        "Nine",
        "Ten",
        "Eleven",
        "Twelve",
        "Thirteen",
        "Fourteen",
        "Fifteen",
        "Sixteen",
        "Seventeen",
        "Eighteen",
        "Nineteen",
    ),
    zero="Zero",
    minus="Minus",
    too_large="Number too large",
    currency="Rupiah",
    scales=((10 ** 12, "Trillion"), (10 ** 9, "Billion"), (10 ** 6, "Million"), (1000, "Thousand"), (100, "Hundred")),
    tens=("", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"),
)

LEXICONS = {"id": INDONESIAN, "en": ENGLISH}


def _lexicon(locale: str) -> Lexicon:
    try:
        return LEXICONS[locale]
    except KeyError:
        raise ValueError(f"Unsupported locale for number words: {locale!r}") from None


def _join(head: str, tail: str) -> str:
    return f"{head} {tail}" if tail else head


def _spell(n: int, lex: Lexicon) -> str:
    if n < len(lex.small):
        return lex.small[n]
    if n < 20:
        return f"{_spell(n - 10, lex)} {lex.teen_suffix}"
    if n < 100:
        tens, rest = divmod(n, 10)
        head = lex.tens[tens] if lex.tens else f"{_spell(tens, lex)} {lex.tens_suffix}"
        return _join(head, _spell(rest, lex))
    for scale, name in lex.scales:
        if n >= scale:
            count, rest = divmod(n, scale)
            if count == 1 and scale in lex.single_forms:
                head = lex.single_forms[scale]
            else:
                head = f"{_spell(count, lex)} {name}"
            return _join(head, _spell(rest, lex))
    raise AssertionError(f"unreachable magnitude {n}")


def _whole_units(amount: Number) -> int:
    if amount is None:
        return 0
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return 0
    if value.is_nan():
        return 0
    if value.is_infinite() or abs(value) >= LIMIT:
        return LIMIT if value > 0 else -LIMIT
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def spell_number(n: int, locale: str = "id") -> str:
    """Spell a non-negative whole number; zero spells as the locale's zero word."""
    lex = _lexicon(locale)
    if n < 0:
        raise ValueError("spell_number expects a non-negative integer")
    if n == 0:
        return lex.zero
    if n >= LIMIT:
        return lex.too_large
    return _spell(n, lex)


def amount_to_words_plain(amount: Number, locale: str = "id") -> str:
    """Words for ``amount`` without a currency suffix, for composing longer texts."""
    lex = _lexicon(locale)
    units = _whole_units(amount)
    words = spell_number(abs(units), locale)
    if units < 0 and words != lex.too_large:
        return f"{lex.minus} {words}"
    return words


def amount_to_words(amount: Number, currency: Optional[str] = None, locale: str = "id") -> str:
    """Words for ``amount`` followed by the currency name.

    >>> amount_to_words(2_500_000)
    'Dua Juta Lima Ratus Ribu Rupiah'
    >>> amount_to_words(1000, currency="Rupiah", locale="en")
    'One Thousand Rupiah'
    """
    lex = _lexicon(locale)
    words = amount_to_words_plain(amount, locale)
    if words == lex.too_large:
        return words
    return f"{words} {currency or lex.currency}"
