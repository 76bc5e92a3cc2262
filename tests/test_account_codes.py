from types import SimpleNamespace

from lpjdesa.utils.account_codes import account_code_key, compare_account_codes, sort_by_account_code


def test_numeric_segments_sort_naturally():
    codes = ["1.10", "1.2", "1.1.3", "2", "1.1", "10.1"]
    assert sort_by_account_code(codes, code=lambda value: value) == ["1.1", "1.1.3", "1.2", "1.10", "2", "10.1"]


def test_empty_codes_come_first_and_keep_input_order():
    rows = [
        SimpleNamespace(account_code="2.1", name="b"),
        SimpleNamespace(account_code=None, name="first-empty"),
        SimpleNamespace(account_code="", name="second-empty"),
        SimpleNamespace(account_code="1.1", name="a"),
    ]
    ordered = [row.name for row in sort_by_account_code(rows)]
    assert ordered == ["first-empty", "second-empty", "a", "b"]


def test_dict_rows_use_account_code_key():
    rows = [{"account_code": "5.2"}, {"account_code": "5.10"}, {"account_code": "5.3"}]
    assert [row["account_code"] for row in sort_by_account_code(rows)] == ["5.2", "5.3", "5.10"]


def test_distinct_codes_never_compare_equal():
    assert compare_account_codes("1.01", "1.1") != 0
    assert compare_account_codes("1.2", "1.2") == 0
    assert compare_account_codes("1.2", "1.10") == -1
    assert compare_account_codes("3", "2.9") == 1


def test_whitespace_is_ignored():
    assert account_code_key(" 1.2 ") == account_code_key("1.2")
