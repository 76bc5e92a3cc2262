"""Canonical ordering for account codes ("kode rekening").

Codes are dot-separated numeric segments such as ``"1.1.01"``. Every list view
and every renderer orders records through :func:`sort_by_account_code`, so the
three document formats always agree on row order.
"""

import re
from typing import Any, Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")

_DIGIT_RUN = re.compile(r"(\d+)")

CodeKey = Tuple[Tuple[Tuple[int, int, str], ...], str]


def _chunk_key(chunk: str) -> Tuple[int, int, str]:
    if chunk.isdecimal():
        return (1, int(chunk), "")
    # Separators sort before digits, letters after.
    if chunk[0].isalpha():
        return (2, 0, chunk.casefold())
    return (0, 0, chunk)


def account_code_key(code: Optional[str]) -> CodeKey:
    """Natural-sort key: digit runs compare numerically, empty codes come first.

    The stripped code itself is the last component so two distinct codes never
    compare equal (``"1.01"`` and ``"1.1"`` keep a fixed relative order).
    """
    text = (code or "").strip()
    chunks = tuple(_chunk_key(chunk) for chunk in _DIGIT_RUN.split(text) if chunk)
    return chunks, text


def compare_account_codes(left: Optional[str], right: Optional[str]) -> int:
    left_key = account_code_key(left)
    right_key = account_code_key(right)
    if left_key < right_key:
        return -1
    if left_key > right_key:
        return 1
    return 0


def _default_code(item: Any) -> Optional[str]:
    if isinstance(item, dict):
        return item.get("account_code")
    return getattr(item, "account_code", None)


def sort_by_account_code(
    items: Iterable[T],
    code: Callable[[T], Optional[str]] = _default_code,
) -> List[T]:
    """Return a new list ordered by account code; ties keep their input order."""
    return sorted(items, key=lambda item: account_code_key(code(item)))


