"""
Period-by-community price history for the trend chart.
"""
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .csv_reader import records_to_frame
from .periods import format_period
from .records import PriceHistoryRow, TransactionRecord


def build_price_history(
    records: Iterable[TransactionRecord],
    selected_communities: Sequence[str],
    period_type: str = "month",
    aggregation_type: str = "mean",
) -> List[PriceHistoryRow]:
    """
    One row per period holding the aggregated price of every selected
    community that transacted in it.

    ``aggregation_type`` is ``"mean"`` or ``"median"``; the median of an
    even-sized group averages the two middle prices.
    """
    df = records_to_frame(records)
    selected = list(dict.fromkeys(selected_communities))
    if df.empty or not selected:
        return []

    working = df[df["community"].isin(selected)].copy()
    if working.empty:
        return []
    working["period"] = working["date"].map(lambda value: format_period(value, period_type))

    grouped = working.groupby(["period", "community"])["price"]
    aggregated = grouped.median() if aggregation_type == "median" else grouped.mean()

    rows: List[PriceHistoryRow] = []
    for period in sorted(aggregated.index.get_level_values("period").unique()):
        period_values = aggregated.loc[period]
        prices = {
            community: float(period_values[community])
            for community in selected
            if community in period_values.index
        }
        rows.append(PriceHistoryRow(period=period, prices=prices))
    return rows


def community_series(
    history: Sequence[PriceHistoryRow],
    community: str,
) -> Tuple[List[str], List[float]]:
    """Non-sparse ``(periods, prices)`` projection of one community."""
    periods: List[str] = []
    prices: List[float] = []
    for row in history:
        if community in row.prices:
            periods.append(row.period)
            prices.append(row.prices[community])
    return periods, prices
