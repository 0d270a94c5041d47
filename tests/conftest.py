"""
Pytest Configuration and Shared Fixtures

Provides common record fixtures for all test modules.
"""

from typing import List

import pytest

from searchlens.models import PerformanceRecord


def make_record(query, page, clicks, impressions, position, ctr=None) -> PerformanceRecord:
    """Build a record, deriving CTR from clicks/impressions when omitted."""
    if ctr is None:
        ctr = clicks / impressions if impressions else 0.0
    return PerformanceRecord(
        query=query,
        page=page,
        clicks=clicks,
        impressions=impressions,
        ctr=ctr,
        position=position,
    )


# ============================================================================
# Record Fixtures
# ============================================================================

@pytest.fixture
def record():
    """Factory fixture for single records."""
    return make_record


@pytest.fixture
def cannibalized_records() -> List[PerformanceRecord]:
    """One query split across two pages, one strong and one weak."""
    return [
        make_record("seo tools", "https://example.com/x", 100, 1000, 3),
        make_record("seo tools", "https://example.com/y", 10, 500, 12),
    ]


@pytest.fixture
def site_records() -> List[PerformanceRecord]:
    """A small site with several pages and overlapping queries."""
    return [
        make_record("seo tools", "https://example.com/tools", 120, 2000, 4),
        make_record("seo tools", "https://example.com/blog/seo-tools", 15, 800, 11),
        make_record("free seo tools", "https://example.com/tools", 40, 900, 6),
        make_record("seo audit tools", "https://example.com/audit", 30, 600, 8),
        make_record("how to do keyword research", "https://example.com/blog/keywords", 60, 700, 3),
        make_record("keyword research guide", "https://example.com/blog/keywords", 25, 400, 5),
        make_record("buy backlinks", "https://example.com/pricing", 2, 300, 14),
        make_record("example login", "https://example.com/login", 80, 90, 1),
    ]


@pytest.fixture
def similar_queries():
    """Queries forming two obvious topics."""
    from searchlens.scoring.aggregation import QueryAggregate

    return [
        QueryAggregate("seo tools", 100, 2000, 4.0),
        QueryAggregate("best seo tools", 50, 1500, 6.0),
        QueryAggregate("coffee grinder", 30, 1200, 5.0),
        QueryAggregate("manual coffee grinder", 20, 900, 7.0),
    ]
