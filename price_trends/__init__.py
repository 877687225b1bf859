"""
Community price-trend analysis for real estate transaction exports.

This package centralizes reusable helpers for reading the transaction CSV,
filtering records, aggregating per-community statistics, building period
price histories, fitting trend lines and producing chart-ready payloads.
"""
from .pipeline import recompute
from .records import (
    AnalysisSettings,
    CommunityLocation,
    CommunityStat,
    DerivedResults,
    PriceHistoryRow,
    TransactionRecord,
    TrendLine,
)

__all__ = [
    "AnalysisSettings",
    "CommunityLocation",
    "CommunityStat",
    "DerivedResults",
    "PriceHistoryRow",
    "TransactionRecord",
    "TrendLine",
    "recompute",
]
