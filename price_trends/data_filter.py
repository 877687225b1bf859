from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Set

from . import config
from .periods import format_period, month_ordinal_of_date
from .records import TransactionRecord
from .stats import compute_basic_stats, sort_stats

logger = logging.getLogger(__name__)


def filter_by_districts(
    records: Sequence[TransactionRecord],
    districts: Iterable[str] | None = None,
) -> List[TransactionRecord]:
    """
    Keep records inside the selected districts. No selection means every district.
    """
    wanted = set(districts or [])
    if not wanted:
        return list(records)
    return [record for record in records if record.district in wanted]


def filter_by_date_range(
    records: Sequence[TransactionRecord],
    start_date: str | None = None,
    end_date: str | None = None,
) -> List[TransactionRecord]:
    """
    Keep records whose ``YYYY-MM`` month lies inside ``[start_date, end_date]``.

    Either bound may be omitted. Comparison is on the zero-padded label text,
    whatever period granularity the caller later aggregates with.
    """
    if not start_date and not end_date:
        return list(records)

    filtered: List[TransactionRecord] = []
    for record in records:
        month = format_period(record.date, "month")
        if start_date and month < start_date:
            continue
        if end_date and month > end_date:
            continue
        filtered.append(record)
    return filtered


def filter_records(
    records: Sequence[TransactionRecord],
    districts: Iterable[str] | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> List[TransactionRecord]:
    """
    Generic filter that narrows down by district and month range.
    """
    working = filter_by_districts(records, districts)
    return filter_by_date_range(working, start_date, end_date)


def recently_active_communities(
    records: Sequence[TransactionRecord],
    years: int | None = None,
    min_count: int | None = None,
) -> Set[str]:
    """
    Communities with at least ``min_count`` transactions in the last ``years``
    years, counted back from the latest month present in ``records``.
    """
    default_years, default_min_count = config.recent_activity_window()
    years = default_years if years is None else years
    min_count = default_min_count if min_count is None else min_count
    if not records:
        return set()

    ordinals = [month_ordinal_of_date(record.date) for record in records]
    cutoff = max(ordinals) - years * 12
    counts: dict[str, int] = {}
    for record, ordinal in zip(records, ordinals):
        if ordinal > cutoff:
            counts[record.community] = counts.get(record.community, 0) + 1
    return {community for community, count in counts.items() if count >= min_count}


def clamp_top_n(top_n: int) -> int:
    lower, upper = config.top_n_bounds()
    return max(lower, min(upper, int(top_n)))


def select_top_communities(
    records: Sequence[TransactionRecord],
    sort_criteria: str = "count",
    top_n: int | None = None,
    require_recent_activity: bool = False,
) -> List[str]:
    """
    Rank communities by ``sort_criteria`` and return the first ``top_n`` names.
    """
    if top_n is None:
        top_n = config.default_top_n()
    ranked = sort_stats(compute_basic_stats(records), sort_criteria)

    if require_recent_activity:
        active = recently_active_communities(records)
        ranked = [stat for stat in ranked if stat.name in active]
        logger.debug("%d communities pass the recent-activity threshold", len(ranked))

    return [stat.name for stat in ranked[: clamp_top_n(top_n)]]
