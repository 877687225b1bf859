"""
Per-community descriptive statistics, valuation error metrics and map locations.
"""
from __future__ import annotations

from math import floor
from typing import Iterable, List, Sequence

import numpy as np
import pandas as pd

from . import config
from .csv_reader import records_to_frame
from .records import CommunityLocation, CommunityStat, TransactionRecord

TIER_COUNT = 5


def _percentage_errors(df: pd.DataFrame) -> pd.DataFrame:
    """
    Attach per-record APE and PE columns.

    Records with a zero valuation contribute 0 to both metrics.
    """
    working = df.copy()
    valuation = working["valuation"]
    has_valuation = valuation != 0
    safe_valuation = valuation.where(has_valuation, 1.0)
    diff = working["price"] - valuation
    working["pe"] = np.where(has_valuation, diff / safe_valuation, 0.0)
    working["ape"] = np.where(has_valuation, diff.abs() / safe_valuation, 0.0)
    return working


def compute_basic_stats(records: Iterable[TransactionRecord]) -> List[CommunityStat]:
    """
    Group records by community and compute count, price extrema, mean price,
    MAPE and MPE against the valuation estimate.

    Communities come out in order of first appearance.
    """
    df = records_to_frame(records)
    if df.empty:
        return []

    working = _percentage_errors(df)
    grouped = working.groupby("community", sort=False).agg(
        count=("price", "size"),
        avg_price=("price", "mean"),
        min_price=("price", "min"),
        max_price=("price", "max"),
        mape=("ape", "mean"),
        mpe=("pe", "mean"),
    )

    stats: List[CommunityStat] = []
    for name, row in grouped.iterrows():
        stats.append(
            CommunityStat(
                name=str(name),
                count=int(row["count"]),
                avg_price=float(row["avg_price"]),
                min_price=float(row["min_price"]) if pd.notna(row["min_price"]) else 0.0,
                max_price=float(row["max_price"]) if pd.notna(row["max_price"]) else 0.0,
                mape=float(row["mape"]) if pd.notna(row["mape"]) else 0.0,
                mpe=float(row["mpe"]) if pd.notna(row["mpe"]) else 0.0,
            )
        )
    return stats


SORT_KEYS = {
    "count": (lambda stat: stat.count, True),
    "mape": (lambda stat: stat.mape, True),
    "mpe_desc": (lambda stat: stat.mpe, True),
    "mpe_asc": (lambda stat: stat.mpe, False),
}


def sort_stats(stats: Sequence[CommunityStat], criteria: str = "count") -> List[CommunityStat]:
    """Order stats for display; ties keep their incoming order."""
    key, descending = SORT_KEYS.get(criteria, SORT_KEYS["count"])
    return sorted(stats, key=key, reverse=descending)


def compute_community_locations(records: Iterable[TransactionRecord]) -> List[CommunityLocation]:
    df = records_to_frame(records)
    if df.empty:
        return []

    grouped = df.groupby("community", sort=False).agg(
        lat=("lat", "mean"),
        lng=("lng", "mean"),
        count=("price", "size"),
        avg_price=("price", "mean"),
    )
    return [
        CommunityLocation(
            name=str(name),
            lat=float(row["lat"]),
            lng=float(row["lng"]),
            count=int(row["count"]),
            avg_price=float(row["avg_price"]),
        )
        for name, row in grouped.iterrows()
    ]


def price_grades(
    locations: Sequence[CommunityLocation],
    percentiles: Sequence[float] | None = None,
) -> List[float]:
    """
    Cut points for the map colour bands.

    Each grade is the average price at index ``floor(n * p)`` of the
    ascending price list, or 0 when that index is out of range.
    """
    if percentiles is None:
        percentiles = config.price_grade_percentiles()
    prices = sorted(location.avg_price for location in locations)
    grades: List[float] = []
    for percentile in percentiles:
        index = floor(len(prices) * percentile)
        grades.append(prices[index] if 0 <= index < len(prices) else 0.0)
    return grades


def price_tier(price: float, grades: Sequence[float]) -> int:
    tier = -1
    for index, grade in enumerate(grades):
        upper_ok = index == len(grades) - 1 or price < grades[index + 1]
        if price >= grade and upper_ok:
            tier = index
            break
    return min(max(0, tier), TIER_COUNT - 1)


def assign_price_tiers(
    locations: Sequence[CommunityLocation],
    grades: Sequence[float] | None = None,
) -> List[CommunityLocation]:
    if grades is None:
        grades = price_grades(locations)
    return [
        CommunityLocation(
            name=location.name,
            lat=location.lat,
            lng=location.lng,
            count=location.count,
            avg_price=location.avg_price,
            tier=price_tier(location.avg_price, grades),
        )
        for location in locations
    ]
