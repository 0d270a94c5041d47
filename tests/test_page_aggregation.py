"""
Test Suite for Record Aggregation

Tests:
- Position merging (weighted and running)
- Per-page aggregation and ordering
- Per-query aggregation for clustering
"""

import pytest

from searchlens.scoring import (
    PositionAveraging,
    aggregate_pages,
    aggregate_queries,
    merge_positions,
)


class TestMergePositions:
    """Test merging positions of repeated rows."""

    def test_weighted_by_impressions(self, record):
        rows = [record("q", "/a", 0, 300, 2), record("q", "/a", 0, 100, 10)]
        assert merge_positions(rows) == pytest.approx(4.0)

    def test_weighted_without_impressions_uses_mean(self, record):
        rows = [record("q", "/a", 0, 0, 2), record("q", "/a", 0, 0, 6)]
        assert merge_positions(rows) == pytest.approx(4.0)

    def test_running_average(self, record):
        """Each row halves the distance from the running value, which starts at 0."""
        rows = [
            record("q", "/a", 0, 10, 2),
            record("q", "/a", 0, 10, 6),
            record("q", "/a", 0, 10, 10),
        ]
        assert merge_positions(rows, PositionAveraging.RUNNING) == pytest.approx(6.75)

    def test_single_row(self, record):
        rows = [record("q", "/a", 0, 10, 5)]
        assert merge_positions(rows) == 5

    def test_running_single_row_is_halved(self, record):
        """The first row is averaged with the zero starting value."""
        rows = [record("q", "/a", 0, 10, 4)]
        assert merge_positions(rows, PositionAveraging.RUNNING) == pytest.approx(2.0)

    def test_empty(self):
        assert merge_positions([]) == 0.0


class TestAggregatePages:
    """Test per-page aggregation."""

    def test_totals_and_ctr(self, site_records):
        pages = {p.page_url: p for p in aggregate_pages(site_records)}
        tools = pages["https://example.com/tools"]

        assert tools.total_clicks == 160
        assert tools.total_impressions == 2900
        assert tools.avg_ctr == pytest.approx(160 / 2900)
        assert tools.avg_position == pytest.approx((4 * 2000 + 6 * 900) / 2900)

    def test_queries_sorted_by_impressions(self, site_records):
        pages = {p.page_url: p for p in aggregate_pages(site_records)}
        queries = pages["https://example.com/tools"].queries

        assert [q.query for q in queries] == ["seo tools", "free seo tools"]

    def test_pages_sorted_by_score(self, site_records):
        pages = aggregate_pages(site_records)
        scores = [p.performance_score for p in pages]

        assert scores == sorted(scores, reverse=True)
        assert len(pages) == 6

    def test_repeated_query_rows_merge(self, record):
        rows = [
            record("q", "/a", 5, 100, 3),
            record("q", "/a", 5, 100, 5),
        ]
        page = aggregate_pages(rows)[0]

        assert len(page.queries) == 1
        assert page.queries[0].clicks == 10
        assert page.queries[0].position == pytest.approx(4.0)

    def test_zero_impression_page(self, record):
        page = aggregate_pages([record("q", "/a", 0, 0, 7)])[0]

        assert page.avg_ctr == 0.0
        assert page.avg_position == 7

    def test_deterministic(self, site_records):
        first = [p.to_dict() for p in aggregate_pages(site_records)]
        second = [p.to_dict() for p in aggregate_pages(list(site_records))]
        assert first == second

    def test_empty_input(self):
        assert aggregate_pages([]) == []


class TestAggregateQueries:
    """Test per-query aggregation."""

    def test_sums_across_pages(self, site_records):
        queries = {q.query: q for q in aggregate_queries(site_records)}
        seo_tools = queries["seo tools"]

        assert seo_tools.clicks == 135
        assert seo_tools.impressions == 2800
        assert seo_tools.position == pytest.approx(7.5)
        assert seo_tools.ctr == pytest.approx(135 / 2800)

    def test_first_seen_order(self, site_records):
        queries = aggregate_queries(site_records)
        assert queries[0].query == "seo tools"
        assert queries[1].query == "free seo tools"

    def test_exact_string_grouping(self, record):
        """Case differences are separate queries here."""
        rows = [record("SEO", "/a", 1, 10, 1), record("seo", "/a", 1, 10, 1)]
        assert len(aggregate_queries(rows)) == 2
