"""
Rule-based parser turning a loose settings mapping (as posted by a dashboard
form, in camelCase or snake_case) into ``AnalysisSettings``.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Iterable, List, Mapping

from . import config
from .data_filter import clamp_top_n
from .records import AGGREGATION_TYPES, PERIOD_TYPES, SORT_CRITERIA, AnalysisSettings

logger = logging.getLogger(__name__)

MONTH_BOUND_REGEX = re.compile(r"^(\d{4})-?(\d{2})")

KEY_ALIASES = {
    "periodType": "period_type",
    "aggregationType": "aggregation_type",
    "topN": "top_n",
    "sortCriteria": "sort_criteria",
    "selectedDistricts": "selected_districts",
    "selectedCommunities": "selected_communities",
    "startDate": "start_date",
    "endDate": "end_date",
    "useLogTransform": "use_log_transform",
    "requireRecentActivity": "require_recent_activity",
}

# A bare "mpe" ranks the most over-valued communities first.
SORT_ALIASES = {"mpe": "mpe_desc"}

TRUE_VALUES = ("1", "true", "yes", "on")


def _normalize_keys(params: Mapping[str, Any]) -> dict[str, Any]:
    return {KEY_ALIASES.get(key, key): value for key, value in params.items()}


def _choice(value: Any, choices: Iterable[str], default: str, name: str) -> str:
    if value is None or value == "":
        return default
    lowered = str(value).strip().lower()
    lowered = SORT_ALIASES.get(lowered, lowered) if name == "sort_criteria" else lowered
    if lowered in choices:
        return lowered
    logger.warning("Unknown %s '%s', falling back to '%s'", name, value, default)
    return default


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    # Remove duplicates while preserving order
    return list(dict.fromkeys(str(item).strip() for item in items if str(item).strip()))


def _month_bound(value: Any) -> str | None:
    """Accept ``YYYY-MM``, ``YYYYMM`` or a full ``YYYYMMDD`` date."""
    if value is None:
        return None
    match = MONTH_BOUND_REGEX.match(str(value).strip())
    if not match:
        if str(value).strip():
            logger.warning("Ignoring unparseable date bound '%s'", value)
        return None
    return f"{match.group(1)}-{match.group(2)}"


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def _top_n(value: Any) -> int:
    if value is None or value == "":
        return config.default_top_n()
    try:
        return clamp_top_n(int(value))
    except (TypeError, ValueError):
        logger.warning("Invalid top_n '%s', using default", value)
        return config.default_top_n()


def parse_settings(params: Mapping[str, Any] | None = None) -> AnalysisSettings:
    """
    Build analysis settings, clamping ``top_n`` and replacing unknown choices
    with their defaults.
    """
    normalized = _normalize_keys(params or {})
    return AnalysisSettings(
        period_type=_choice(normalized.get("period_type"), PERIOD_TYPES, "month", "period_type"),
        aggregation_type=_choice(
            normalized.get("aggregation_type"), AGGREGATION_TYPES, "mean", "aggregation_type"
        ),
        top_n=_top_n(normalized.get("top_n")),
        sort_criteria=_choice(normalized.get("sort_criteria"), SORT_CRITERIA, "count", "sort_criteria"),
        selected_districts=_string_list(normalized.get("selected_districts")),
        selected_communities=_string_list(normalized.get("selected_communities")),
        start_date=_month_bound(normalized.get("start_date")),
        end_date=_month_bound(normalized.get("end_date")),
        use_log_transform=_flag(normalized.get("use_log_transform")),
        require_recent_activity=_flag(normalized.get("require_recent_activity")),
    )
