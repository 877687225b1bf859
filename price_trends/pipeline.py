"""
Full recomputation of every derived view from the raw records and settings.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping, Sequence

from .csv_reader import list_districts
from .data_filter import filter_records, select_top_communities
from .history import build_price_history
from .records import AnalysisSettings, DerivedResults, TransactionRecord
from .settings_parser import parse_settings
from .stats import assign_price_tiers, compute_basic_stats, compute_community_locations, price_grades, sort_stats
from .trend import attach_trend_values, fit_trend_lines

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_NO_RECORDS = "no_valid_records"
STATUS_NO_FILTERED = "no_data_after_filtering"


def recompute(
    raw_records: Sequence[TransactionRecord],
    settings: AnalysisSettings | Mapping | None = None,
) -> DerivedResults:
    """
    Run the pipeline end to end.

    Nothing is mutated and nothing is cached; the same inputs always produce
    equal results. Empty inputs yield a result with cleared collections and a
    non-``"ok"`` status instead of raising.
    """
    if not isinstance(settings, AnalysisSettings):
        settings = parse_settings(settings)

    if not raw_records:
        logger.info("No valid records to analyse")
        return DerivedResults(status=STATUS_NO_RECORDS)

    districts = list_districts(raw_records)
    filtered = filter_records(
        raw_records,
        districts=settings.selected_districts,
        start_date=settings.start_date,
        end_date=settings.end_date,
    )
    if not filtered:
        logger.info("No data after filtering %d records", len(raw_records))
        return DerivedResults(
            status=STATUS_NO_FILTERED,
            sort_criteria=settings.sort_criteria,
            total_records=len(raw_records),
            districts=districts,
        )

    available = select_top_communities(
        filtered,
        sort_criteria=settings.sort_criteria,
        top_n=settings.top_n,
        require_recent_activity=settings.require_recent_activity,
    )
    selected = list(settings.selected_communities) or available

    stats = sort_stats(compute_basic_stats(filtered), settings.sort_criteria)
    history = build_price_history(filtered, selected, settings.period_type, settings.aggregation_type)
    trend_lines = fit_trend_lines(history, selected, settings.period_type, settings.use_log_transform)
    history = attach_trend_values(history, trend_lines, settings.period_type)

    stats_by_name = {stat.name: stat for stat in stats}
    selected_stats = [
        replace(stats_by_name[community], trend_slope=trend.slope, r2=trend.r2)
        for community, trend in trend_lines.items()
        if community in stats_by_name and not trend.is_degenerate
    ]

    locations = compute_community_locations(filtered)
    grades = price_grades(locations)

    return DerivedResults(
        status=STATUS_OK,
        sort_criteria=settings.sort_criteria,
        total_records=len(raw_records),
        filtered_records=len(filtered),
        districts=districts,
        available_communities=available,
        selected_communities=selected,
        community_stats=stats,
        selected_stats=selected_stats,
        price_history=history,
        trend_lines=trend_lines,
        locations=assign_price_tiers(locations, grades),
        price_grades=grades,
    )
