from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

from ..constants import MONTH_NAMES

Amount = Union[Decimal, int, float, None]


def as_decimal(value: Amount) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal("0.01"))


def _grouped(units: int) -> str:
    return f"{units:,}".replace(",", ".")


def format_rupiah(value: Amount) -> str:
    """``Rp 10.000.000`` style, whole rupiah, dot thousands separator."""
    units = int(as_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if units < 0:
        return f"-Rp {_grouped(-units)}"
    return f"Rp {_grouped(units)}"


def format_number(value: Amount) -> str:
    amount = as_decimal(value)
    if amount == amount.to_integral_value():
        return _grouped(int(amount))
    whole, _, fraction = f"{amount:f}".partition(".")
    return f"{_grouped(int(whole))},{fraction.rstrip('0')}"


def format_percent(value: Decimal) -> str:
    return f"{value:.1f}%"


def format_date(value: Optional[Union[date, datetime]]) -> str:
    if value is None:
        return "-"
    return f"{value.day} {MONTH_NAMES[value.month - 1]} {value.year}"


def safe_file_stem(value: Optional[str], fallback: str = "Desa", max_length: Optional[int] = None) -> str:
    """Reduce a display name to ``[A-Za-z0-9_]`` for use in download file names."""
    cleaned = "".join(ch if (ch.isascii() and ch.isalnum()) else "_" for ch in (value or "").strip())
    cleaned = cleaned or fallback
    return cleaned[:max_length] if max_length else cleaned
