from datetime import date
from decimal import Decimal

from lpjdesa.utils.formatting import format_date, format_number, format_percent, format_rupiah, safe_file_stem


def test_format_rupiah_groups_thousands_with_dots():
    assert format_rupiah(Decimal("10000000")) == "Rp 10.000.000"
    assert format_rupiah(Decimal("1500.50")) == "Rp 1.501"
    assert format_rupiah(-2500) == "-Rp 2.500"
    assert format_rupiah(None) == "Rp 0"


def test_format_number_keeps_fraction_with_comma():
    assert format_number(Decimal("12")) == "12"
    assert format_number(Decimal("2.5")) == "2,5"
    assert format_number(Decimal("1234.25")) == "1.234,25"


def test_format_percent_and_date():
    assert format_percent(Decimal("60")) == "60.0%"
    assert format_date(date(2026, 8, 17)) == "17 Agustus 2026"
    assert format_date(None) == "-"


def test_safe_file_stem():
    assert safe_file_stem("Desa Suka-Maju") == "Desa_Suka_Maju"
    assert safe_file_stem("  ") == "Desa"
    assert safe_file_stem("Sukamaju Kidul Wetan Lor", max_length=10) == "Sukamaju_K"
