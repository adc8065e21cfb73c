"""Consistent formatting for statement numbers and counts. Never render raw floats."""
from __future__ import annotations

import math
from typing import Any


def _numeric_or_none(value: Any) -> float | None:
    if value in (None, "") or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        n = float(value)
    elif isinstance(value, str):
        try:
            n = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(n) or math.isinf(n):
        return None
    return n


def format_currency(value: Any) -> str:
    """USD with two fraction digits and thousands separators; blank when missing or NaN."""
    n = _numeric_or_none(value)
    if n is None:
        return ""
    text = f"${abs(n):,.2f}"
    # Rounds to -0.00 should not print a sign
    if n < 0 and text != "$0.00":
        return f"-{text}"
    return text


def format_scalar(value: Any) -> str:
    """Culture-invariant string for a JSON scalar."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_page_count_label(page_count: int | None) -> str:
    if page_count is None:
        return ""
    return f"{page_count} page" if page_count == 1 else f"{page_count} pages"
