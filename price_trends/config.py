"""
Tunables for the analysis pipeline, overridable through Django settings.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Tuple

from django.conf import settings

DEFAULT_TOP_N = 5
TOP_N_MIN = 1
TOP_N_MAX = 80
RECENT_YEARS = 2
RECENT_MIN_COUNT = 5
PRICE_GRADE_PERCENTILES: Tuple[float, ...] = (0.0, 0.2, 0.4, 0.6, 0.8, 0.99)


def get_setting(name: str, default: Any) -> Any:
    """Read ``name`` from Django settings, falling back when settings are not configured."""
    if not settings.configured:
        return default
    return getattr(settings, name, default)


def default_top_n() -> int:
    return int(get_setting("PRICE_TRENDS_DEFAULT_TOP_N", DEFAULT_TOP_N))


def top_n_bounds() -> Tuple[int, int]:
    return (
        int(get_setting("PRICE_TRENDS_TOP_N_MIN", TOP_N_MIN)),
        int(get_setting("PRICE_TRENDS_TOP_N_MAX", TOP_N_MAX)),
    )


def recent_activity_window() -> Tuple[int, int]:
    """Return ``(years, min_count)`` for the recent-activity filter."""
    return (
        int(get_setting("PRICE_TRENDS_RECENT_YEARS", RECENT_YEARS)),
        int(get_setting("PRICE_TRENDS_RECENT_MIN_COUNT", RECENT_MIN_COUNT)),
    )


def price_grade_percentiles() -> Tuple[float, ...]:
    return tuple(get_setting("PRICE_TRENDS_PRICE_GRADE_PERCENTILES", PRICE_GRADE_PERCENTILES))


def csv_path() -> Optional[Path]:
    configured = get_setting("PRICE_TRENDS_CSV_PATH", None)
    if configured:
        return Path(configured)
    base_dir = get_setting("BASE_DIR", None)
    if base_dir is None:
        return None
    return Path(base_dir) / "media" / "transactions.csv"
