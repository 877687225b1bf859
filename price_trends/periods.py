"""
Period labels and month ordinals derived from ``YYYYMMDD`` transaction dates.
"""
from __future__ import annotations

import re
from math import ceil

DATE_PREFIX_REGEX = re.compile(r"^(\d{4})(\d{2})")
MONTH_LABEL_REGEX = re.compile(r"^(\d{4})-(\d{1,2})$")
QUARTER_LABEL_REGEX = re.compile(r"^(\d{4})-Q(\d)$")


def _split_date(date_str: str) -> tuple[str, int]:
    text = str(date_str)
    if len(text) < 6:
        raise ValueError(f"Date '{text}' is shorter than YYYYMM.")
    try:
        month = int(text[4:6])
    except ValueError as exc:
        raise ValueError(f"Date '{text}' has a non-numeric month.") from exc
    return text[:4], month


def format_period(date_str: str, period_type: str) -> str:
    """
    Map a transaction date to its bucket label.

    ``"20240315"`` becomes ``"2024-03"`` in month mode and ``"2024-Q1"`` in
    quarter mode. Months are not range-checked here; month 13 yields ``Q5``.
    """
    year, month = _split_date(date_str)
    if period_type == "month":
        return f"{year}-{month:02d}"
    return f"{year}-Q{ceil(month / 3)}"


def is_valid_date(date_str: str) -> bool:
    match = DATE_PREFIX_REGEX.match(str(date_str))
    if not match:
        return False
    return 1 <= int(match.group(2)) <= 12


def period_ordinal(label: str, period_type: str) -> int:
    """Months since year zero for a ``YYYY-MM`` or ``YYYY-Qn`` label."""
    if period_type == "month":
        match = MONTH_LABEL_REGEX.match(label)
        if not match:
            raise ValueError(f"Invalid month period '{label}'.")
        year, month = int(match.group(1)), int(match.group(2))
        return year * 12 + month - 1

    match = QUARTER_LABEL_REGEX.match(label)
    if not match:
        raise ValueError(f"Invalid quarter period '{label}'.")
    year, quarter = int(match.group(1)), int(match.group(2))
    return year * 12 + (quarter - 1) * 3


def month_ordinal_of_date(date_str: str) -> int:
    return period_ordinal(format_period(date_str, "month"), "month")
