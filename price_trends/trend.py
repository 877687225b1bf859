"""
Least-squares trend lines over a community's period price series.

The independent variable is the period's month ordinal minus the earliest
ordinal of the series, so quarters advance in steps of three months. With
``use_log_transform`` the fit runs on ``log(price)`` and fitted values are
exponentiated back into price units.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import numpy as np

from .history import community_series
from .periods import period_ordinal
from .records import PriceHistoryRow, TrendLine

logger = logging.getLogger(__name__)

ZERO_TOLERANCE = 1e-12


def fit_trend_line(
    prices: Sequence[float],
    periods: Sequence[str],
    period_type: str = "month",
    use_log_transform: bool = False,
) -> TrendLine:
    """
    Fit ``y = intercept + slope * x`` by ordinary least squares.

    Fewer than two usable points give a zero-valued degenerate line carrying
    the requested ``use_log_transform`` flag. When every ``y`` is identical the
    R² is 1.0 if the line passes through all points and 0.0 otherwise.
    """
    pairs = list(zip(prices, periods))
    if use_log_transform:
        pairs = [(price, period) for price, period in pairs if price > 0]
    if len(pairs) < 2:
        return TrendLine.degenerate(use_log_transform)

    try:
        ordinals = np.array([period_ordinal(period, period_type) for _, period in pairs], dtype=float)
    except ValueError:
        logger.warning("Invalid period labels for trend fit: %s", [period for _, period in pairs])
        return TrendLine.degenerate(use_log_transform)

    y = np.array([price for price, _ in pairs], dtype=float)
    if use_log_transform:
        y = np.log(y)
    x = ordinals - ordinals.min()

    n = len(x)
    sum_x = x.sum()
    sum_y = y.sum()
    sum_xy = (x * y).sum()
    sum_xx = (x * x).sum()

    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        logger.warning("Trend fit needs at least two distinct periods, got %s", sorted(set(periods)))
        return TrendLine.degenerate(use_log_transform)

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_total = float(((y - y_mean) ** 2).sum())
    ss_residual = float(((y - (slope * x + intercept)) ** 2).sum())
    if ss_total <= ZERO_TOLERANCE:
        r2 = 1.0 if ss_residual <= ZERO_TOLERANCE else 0.0
    else:
        r2 = 1.0 - ss_residual / ss_total

    return TrendLine(
        slope=float(slope),
        intercept=float(intercept),
        r2=float(r2),
        is_log_transformed=use_log_transform,
    )


def fit_trend_lines(
    history: Sequence[PriceHistoryRow],
    communities: Sequence[str],
    period_type: str = "month",
    use_log_transform: bool = False,
) -> Dict[str, TrendLine]:
    """Trend line per community with at least two observed periods."""
    trend_lines: Dict[str, TrendLine] = {}
    for community in communities:
        periods, prices = community_series(history, community)
        if len(periods) < 2:
            continue
        trend_lines[community] = fit_trend_line(prices, periods, period_type, use_log_transform)
        logger.debug("Trend for %s: %s", community, trend_lines[community])
    return trend_lines


def attach_trend_values(
    history: Sequence[PriceHistoryRow],
    trend_lines: Dict[str, TrendLine],
    period_type: str = "month",
) -> List[PriceHistoryRow]:
    """
    Return a copy of ``history`` with fitted values for each trended community.

    Values only cover the rows from a community's first to last observed
    period; rows outside that span stay without a trend value. Degenerate
    lines mean "insufficient data" and get no values at all.
    """
    rows = [PriceHistoryRow(period=row.period, prices=dict(row.prices), trends=dict(row.trends)) for row in history]

    for community, trend in trend_lines.items():
        if trend.is_degenerate:
            continue
        observed = [index for index, row in enumerate(rows) if community in row.prices]
        if not observed:
            continue
        first, last = observed[0], observed[-1]
        origin = period_ordinal(rows[first].period, period_type)
        if trend.is_log_transformed:
            # Leading non-positive prices are excluded from log fits, so the
            # line's origin is the first positive observation.
            positive = [index for index in observed if rows[index].prices[community] > 0]
            if positive:
                origin = period_ordinal(rows[positive[0]].period, period_type)
        for index in range(first, last + 1):
            x = period_ordinal(rows[index].period, period_type) - origin
            rows[index].trends[community] = trend.value_at(x)
    return rows
