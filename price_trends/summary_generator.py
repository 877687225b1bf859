"""
Generate lightweight natural language summaries and legend labels.
"""
from __future__ import annotations

from math import isfinite

from .records import DerivedResults, TrendLine

STATUS_MESSAGES = {
    "no_valid_records": "No valid records were found. Please check the file format.",
    "no_data_after_filtering": "No transactions match the selected districts and date range.",
}

SORT_PHRASES = {
    "count": "transaction count",
    "mape": "MAPE",
    "mpe_desc": "MPE (highest first)",
    "mpe_asc": "MPE (lowest first)",
}


def _format_value(value: float | int | None) -> str:
    if value is None:
        return "N/A"
    if not isinstance(value, (int, float)):
        return str(value)
    if not isfinite(value):
        return "N/A"

    absolute = abs(value)
    if absolute >= 1_000_000_000:
        return f"{value / 1_000_000_000:.2f}B"
    if absolute >= 1_000_000:
        return f"{value / 1_000_000:.2f}M"
    if absolute >= 1_000:
        return f"{value / 1_000:.1f}K"
    if float(absolute).is_integer():
        return f"{int(value)}"
    return f"{value:.2f}"


def trend_label(community: str, trend: TrendLine) -> str:
    """Legend text for a fitted line, e.g. ``Oak Gardens trend (slope: 100000.00, R²: 1.00)``."""
    marker = " (log)" if trend.is_log_transformed else ""
    return f"{community} trend{marker} (slope: {trend.slope:.2f}, R²: {trend.r2:.2f})"


def summarize_results(results: DerivedResults) -> str:
    """
    Produce a deterministic, human-readable summary of a pipeline run.
    """
    if results.status in STATUS_MESSAGES:
        return STATUS_MESSAGES[results.status]

    base = (
        f"Analysed {results.filtered_records} of {results.total_records} transactions "
        f"across {len(results.community_stats)} communities."
    )
    if not results.selected_stats:
        return base + " Not enough periods to fit any trend line."

    ranked = sorted(results.selected_stats, key=lambda stat: stat.trend_slope or 0.0, reverse=True)
    top = ranked[0]
    trend = results.trend_lines.get(top.name)
    growth = _format_value(top.trend_slope)
    unit = " log-price per month" if trend is not None and trend.is_log_transformed else " per month"
    sort_phrase = SORT_PHRASES.get(results.sort_criteria, SORT_PHRASES["count"])
    return (
        f"{base} Communities ranked by {sort_phrase}; {top.name} shows the steepest trend at "
        f"{growth}{unit} (R² {top.r2:.2f}, average price {_format_value(top.avg_price)})."
    )
