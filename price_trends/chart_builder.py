from __future__ import annotations

from math import isfinite
from typing import Dict, Iterable, List, Sequence

from .records import TREND_SUFFIX, CommunityLocation, CommunityStat, PriceHistoryRow


def _sanitize_values(values: Iterable[float | int | None]) -> List[float | None]:
    sanitized: List[float | None] = []
    for value in values:
        if value is None or not isfinite(value):
            sanitized.append(None)
        else:
            sanitized.append(float(value))
    return sanitized


def build_price_history_chart(
    history: Sequence[PriceHistoryRow],
    communities: Sequence[str],
) -> Dict[str, Dict | List]:
    """
    Building a multi-series payload keyed by community, ``None`` where a
    community had no transaction in the period.
    """
    labels = [row.period for row in history]
    series = {
        community: _sanitize_values(row.prices.get(community) for row in history)
        for community in communities
    }
    return {"labels": labels, "series": series}


def build_trend_chart(
    history: Sequence[PriceHistoryRow],
    communities: Sequence[str],
) -> Dict[str, Dict | List]:
    """
    Price series plus the matching ``<community>_trend`` fitted series.
    """
    payload = build_price_history_chart(history, communities)
    for community in communities:
        payload["series"][f"{community}{TREND_SUFFIX}"] = _sanitize_values(
            row.trends.get(community) for row in history
        )
    return payload


def build_stats_table(stats: Sequence[CommunityStat]) -> List[Dict]:
    return [stat.to_dict() for stat in stats]


def build_map_points(locations: Sequence[CommunityLocation]) -> List[Dict]:
    return [
        {
            "name": location.name,
            "lat": location.lat,
            "lng": location.lng,
            "count": location.count,
            "avg_price": location.avg_price,
            "tier": location.tier,
        }
        for location in locations
    ]
