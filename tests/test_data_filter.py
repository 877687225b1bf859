from django.test import override_settings

from price_trends.data_filter import (
    clamp_top_n,
    filter_by_date_range,
    filter_by_districts,
    filter_records,
    recently_active_communities,
    select_top_communities,
)


class TestDistrictFilter:
    def test_keeps_selected_districts(self, mixed_records):
        filtered = filter_by_districts(mixed_records, ["Xinyi"])
        assert {record.community for record in filtered} == {"Maple Court", "Pine Tower"}
        assert len(filtered) == 3

    def test_empty_selection_means_all(self, mixed_records):
        assert filter_by_districts(mixed_records, []) == mixed_records
        assert filter_by_districts(mixed_records, None) == mixed_records


class TestDateFilter:
    def test_start_bound_only(self, mixed_records):
        filtered = filter_by_date_range(mixed_records, start_date="2023-01")
        assert len(filtered) == 3
        assert all(record.date >= "20230101" for record in filtered)

    def test_end_bound_only(self, mixed_records):
        filtered = filter_by_date_range(mixed_records, end_date="2022-02")
        assert len(filtered) == 3

    def test_bounds_are_inclusive_at_month_granularity(self, mixed_records):
        filtered = filter_by_date_range(mixed_records, "2022-04", "2022-04")
        assert [record.date for record in filtered] == ["20220410"]

    def test_no_bounds(self, mixed_records):
        assert filter_by_date_range(mixed_records) == mixed_records


def test_filter_records_combines_district_and_dates(mixed_records):
    filtered = filter_records(mixed_records, ["Xinyi"], start_date="2022-03")
    assert [record.community for record in filtered] == ["Maple Court", "Pine Tower"]


def test_recently_active_counts_back_from_latest_month(mixed_records):
    assert recently_active_communities(mixed_records, years=1, min_count=2) == {"Oak Gardens"}
    assert recently_active_communities(mixed_records, years=2, min_count=1) == {
        "Oak Gardens",
        "Maple Court",
        "Pine Tower",
    }
    assert recently_active_communities([], years=2, min_count=1) == set()


class TestTopCommunities:
    def test_top_n_by_count(self, mixed_records):
        assert select_top_communities(mixed_records, "count", 2) == ["Oak Gardens", "Maple Court"]

    def test_top_n_by_mape(self, mixed_records):
        assert select_top_communities(mixed_records, "mape", 1) == ["Maple Court"]

    def test_default_top_n_comes_from_settings(self, mixed_records):
        with override_settings(PRICE_TRENDS_DEFAULT_TOP_N=1):
            assert select_top_communities(mixed_records) == ["Oak Gardens"]

    def test_recent_activity_threshold(self, mixed_records):
        assert select_top_communities(mixed_records, "count", 5, require_recent_activity=True) == []
        with override_settings(PRICE_TRENDS_RECENT_YEARS=1, PRICE_TRENDS_RECENT_MIN_COUNT=2):
            assert select_top_communities(mixed_records, "count", 5, require_recent_activity=True) == [
                "Oak Gardens"
            ]


def test_clamp_top_n():
    assert clamp_top_n(0) == 1
    assert clamp_top_n(200) == 80
    assert clamp_top_n(10) == 10
