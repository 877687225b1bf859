"""
Data shapes flowing through the analysis pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from math import exp
from typing import Dict, List

PERIOD_TYPES = ("month", "quarter")
AGGREGATION_TYPES = ("mean", "median")
SORT_CRITERIA = ("count", "mape", "mpe_desc", "mpe_asc")

TREND_SUFFIX = "_trend"


@dataclass(frozen=True)
class TransactionRecord:
    date: str  # YYYYMMDD
    community: str
    price: float
    valuation: float = 0.0
    city: str = ""
    district: str = ""
    lat: float = 0.0
    lng: float = 0.0
    address: str = ""


@dataclass(frozen=True)
class CommunityStat:
    name: str
    count: int
    avg_price: float
    min_price: float
    max_price: float
    mape: float
    mpe: float
    trend_slope: float | None = None
    r2: float | None = None

    def to_dict(self) -> Dict[str, float | int | str | None]:
        return {
            "name": self.name,
            "count": self.count,
            "avg_price": self.avg_price,
            "min_price": self.min_price,
            "max_price": self.max_price,
            "mape": self.mape,
            "mpe": self.mpe,
            "trend_slope": self.trend_slope,
            "r2": self.r2,
        }


@dataclass
class PriceHistoryRow:
    """
    One period of the price history.

    ``prices`` only holds communities with at least one transaction in the
    period; a missing key means "no transaction", never a zero price.
    """

    period: str
    prices: Dict[str, float] = field(default_factory=dict)
    trends: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, float | str]:
        flat: Dict[str, float | str] = {"period": self.period}
        flat.update(self.prices)
        for community, value in self.trends.items():
            flat[f"{community}{TREND_SUFFIX}"] = value
        return flat


@dataclass(frozen=True)
class TrendLine:
    slope: float
    intercept: float
    r2: float
    is_log_transformed: bool = False

    @classmethod
    def degenerate(cls, use_log_transform: bool) -> "TrendLine":
        return cls(slope=0.0, intercept=0.0, r2=0.0, is_log_transformed=use_log_transform)

    @property
    def is_degenerate(self) -> bool:
        return self.slope == 0.0 and self.intercept == 0.0 and self.r2 == 0.0

    def value_at(self, x: float) -> float:
        """Fitted value in price units at ``x`` periods-in-months after the first observation."""
        fitted = self.intercept + self.slope * x
        return exp(fitted) if self.is_log_transformed else fitted

    def to_dict(self) -> Dict[str, float | bool]:
        return {
            "slope": self.slope,
            "intercept": self.intercept,
            "r2": self.r2,
            "is_log_transformed": self.is_log_transformed,
        }


@dataclass(frozen=True)
class CommunityLocation:
    name: str
    lat: float
    lng: float
    count: int
    avg_price: float
    tier: int | None = None


@dataclass
class AnalysisSettings:
    period_type: str = "month"
    aggregation_type: str = "mean"
    top_n: int = 5
    sort_criteria: str = "count"
    selected_districts: List[str] = field(default_factory=list)
    selected_communities: List[str] = field(default_factory=list)
    start_date: str | None = None  # YYYY-MM
    end_date: str | None = None  # YYYY-MM
    use_log_transform: bool = False
    require_recent_activity: bool = False


@dataclass
class DerivedResults:
    status: str = "ok"
    sort_criteria: str = "count"
    total_records: int = 0
    filtered_records: int = 0
    districts: List[str] = field(default_factory=list)
    available_communities: List[str] = field(default_factory=list)
    selected_communities: List[str] = field(default_factory=list)
    community_stats: List[CommunityStat] = field(default_factory=list)
    selected_stats: List[CommunityStat] = field(default_factory=list)
    price_history: List[PriceHistoryRow] = field(default_factory=list)
    trend_lines: Dict[str, TrendLine] = field(default_factory=dict)
    locations: List[CommunityLocation] = field(default_factory=list)
    price_grades: List[float] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.status != "ok"
