import pytest

from conftest import make_record

from price_trends import AnalysisSettings, recompute


def test_no_records():
    results = recompute([], AnalysisSettings())
    assert results.status == "no_valid_records"
    assert results.is_empty
    assert results.community_stats == []
    assert results.price_history == []


def test_filters_remove_everything(mixed_records):
    results = recompute(mixed_records, AnalysisSettings(start_date="2030-01"))

    assert results.status == "no_data_after_filtering"
    assert results.total_records == len(mixed_records)
    assert results.districts == ["Da'an", "Xinyi"]
    assert results.trend_lines == {}


def test_oak_gardens_end_to_end(oak_gardens):
    results = recompute(oak_gardens, AnalysisSettings())

    assert results.status == "ok"
    assert results.available_communities == ["Oak Gardens"]
    assert results.selected_communities == ["Oak Gardens"]

    trend = results.trend_lines["Oak Gardens"]
    assert trend.slope == pytest.approx(100_000)
    assert trend.intercept == pytest.approx(1_000_000)
    assert trend.r2 == pytest.approx(1.0)

    assert [row.to_dict() for row in results.price_history] == [
        pytest.approx({"period": "2023-01", "Oak Gardens": 1_000_000, "Oak Gardens_trend": 1_000_000}),
        pytest.approx({"period": "2023-02", "Oak Gardens": 1_100_000, "Oak Gardens_trend": 1_100_000}),
        pytest.approx({"period": "2023-03", "Oak Gardens": 1_200_000, "Oak Gardens_trend": 1_200_000}),
    ]

    selected = results.selected_stats[0]
    assert selected.count == 3
    assert selected.trend_slope == pytest.approx(100_000)
    assert selected.r2 == pytest.approx(1.0)


def test_counts_match_filtered_set(mixed_records):
    results = recompute(mixed_records, {"selectedDistricts": ["Xinyi"]})

    assert results.filtered_records == 3
    assert sum(stat.count for stat in results.community_stats) == results.filtered_records
    assert results.available_communities == ["Maple Court", "Pine Tower"]


def test_default_selection_is_top_n(mixed_records):
    results = recompute(mixed_records, {"topN": 2})

    assert results.selected_communities == ["Oak Gardens", "Maple Court"]
    assert [stat.name for stat in results.community_stats] == ["Oak Gardens", "Maple Court", "Pine Tower"]
    assert [stat.name for stat in results.selected_stats] == ["Oak Gardens", "Maple Court"]


def test_explicit_selection_overrides_top_n(mixed_records):
    results = recompute(mixed_records, {"selectedCommunities": ["Pine Tower", "Maple Court"]})

    assert results.selected_communities == ["Pine Tower", "Maple Court"]
    # Pine Tower has a single period, so it gets no trend line.
    assert list(results.trend_lines) == ["Maple Court"]
    assert all("Pine Tower" not in row.trends for row in results.price_history)


def test_log_transform_flag_propagates(mixed_records):
    results = recompute(mixed_records, AnalysisSettings(use_log_transform=True))
    assert all(trend.is_log_transformed for trend in results.trend_lines.values())


def test_locations_carry_price_tiers(mixed_records):
    results = recompute(mixed_records, AnalysisSettings())

    assert len(results.price_grades) == 6
    tiers = {location.name: location.tier for location in results.locations}
    assert tiers["Maple Court"] < tiers["Pine Tower"]


def test_recompute_is_idempotent(mixed_records):
    settings = AnalysisSettings(period_type="quarter", aggregation_type="median", use_log_transform=True)
    assert recompute(mixed_records, settings) == recompute(mixed_records, settings)


def test_input_records_are_untouched(mixed_records):
    snapshot = list(mixed_records)
    recompute(mixed_records, AnalysisSettings(selected_districts=["Xinyi"]))
    assert mixed_records == snapshot


def test_failed_log_fit_writes_no_trend_values():
    records = [
        make_record("20230101", "Birch", 0),
        make_record("20230201", "Birch", 500_000),
        make_record("20230301", "Birch", -1),
    ]
    results = recompute(records, AnalysisSettings(use_log_transform=True))

    assert results.trend_lines["Birch"].is_degenerate
    assert all(row.trends == {} for row in results.price_history)
    assert all("Birch_trend" not in row.to_dict() for row in results.price_history)
    assert results.selected_stats == []


def test_results_remember_sort_criteria(mixed_records):
    assert recompute(mixed_records, {"sortCriteria": "mape"}).sort_criteria == "mape"
    assert recompute(mixed_records, {"sortCriteria": "mpe_asc", "startDate": "2030-01"}).sort_criteria == "mpe_asc"
