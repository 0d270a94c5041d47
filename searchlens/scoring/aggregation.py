"""
Record Aggregation

Folds raw PerformanceRecord rows into per-page and per-query aggregates.

Grouping is a pure function of the record list: records are bucketed in
first-seen order and every metric is computed from the bucket, so the same
input always produces the same output.

Position merging:
    weighted - impression-weighted mean of row positions (default)
    running  - (existing + new) / 2 applied on every row, starting from 0;
               order dependent, reproduces positions in stored results
               (a single row at position 4 merges to 2)
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from functools import reduce
from typing import Dict, Any, List, Sequence, Callable, Hashable

from searchlens.models import PerformanceRecord
from .helpers import safe_divide
from .performance import calculate_page_performance_score

logger = logging.getLogger(__name__)


class PositionAveraging(Enum):
    """How row positions are merged for one page/query entry."""
    WEIGHTED = "weighted"
    RUNNING = "running"


def merge_positions(
    records: Sequence[PerformanceRecord],
    averaging: PositionAveraging = PositionAveraging.WEIGHTED
) -> float:
    """
    Merge the positions of records that describe the same entry.

    Args:
        records: Rows in encounter order (at least one)
        averaging: Merge strategy

    Returns:
        Merged position (0.0 for no records)
    """
    if not records:
        return 0.0

    positions = [r.position for r in records]

    if averaging is PositionAveraging.RUNNING:
        return reduce(lambda merged, p: (merged + p) / 2, positions, 0.0)

    total_impressions = sum(r.impressions for r in records)
    if total_impressions == 0:
        return sum(positions) / len(positions)
    return sum(r.position * r.impressions for r in records) / total_impressions


def group_records(
    records: Sequence[PerformanceRecord],
    key: Callable[[PerformanceRecord], Hashable]
) -> "OrderedDict[Hashable, List[PerformanceRecord]]":
    """Bucket records by key, preserving first-seen order of keys and rows."""
    groups: "OrderedDict[Hashable, List[PerformanceRecord]]" = OrderedDict()
    for record in records:
        groups.setdefault(key(record), []).append(record)
    return groups


# ============================================================================
# PER-PAGE AGGREGATION
# ============================================================================

@dataclass
class QueryMetrics:
    """One query's totals on one page."""
    query: str
    clicks: int
    impressions: int
    ctr: float
    position: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "ctr": self.ctr,
            "position": self.position,
        }


@dataclass
class PageAggregate:
    """Performance totals and score for one page."""
    page_url: str
    total_clicks: int
    total_impressions: int
    avg_ctr: float
    avg_position: float  # Impression-weighted across queries
    performance_score: int
    queries: List[QueryMetrics] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_url": self.page_url,
            "total_clicks": self.total_clicks,
            "total_impressions": self.total_impressions,
            "avg_ctr": self.avg_ctr,
            "avg_position": self.avg_position,
            "performance_score": self.performance_score,
            "queries": [q.to_dict() for q in self.queries],
        }


def _query_metrics(
    query: str,
    rows: Sequence[PerformanceRecord],
    averaging: PositionAveraging
) -> QueryMetrics:
    clicks = sum(r.clicks for r in rows)
    impressions = sum(r.impressions for r in rows)
    return QueryMetrics(
        query=query,
        clicks=clicks,
        impressions=impressions,
        ctr=safe_divide(clicks, impressions),
        position=merge_positions(rows, averaging),
    )


def aggregate_pages(
    records: Sequence[PerformanceRecord],
    averaging: PositionAveraging = PositionAveraging.WEIGHTED
) -> List[PageAggregate]:
    """
    Aggregate records by page and score each page.

    Query sub-rows are keyed by the exact query string and sorted by
    impressions (descending). Page position is the impression-weighted mean
    of its query positions; when a page has no impressions the plain mean is
    used instead.

    Args:
        records: All records for one scope
        averaging: Position merge strategy for repeated query rows

    Returns:
        Pages sorted by performance score (descending), then URL
    """
    pages: List[PageAggregate] = []

    for page_url, page_rows in group_records(records, lambda r: r.page).items():
        queries = [
            _query_metrics(query, rows, averaging)
            for query, rows in group_records(page_rows, lambda r: r.query).items()
        ]
        queries.sort(key=lambda q: q.impressions, reverse=True)

        total_clicks = sum(q.clicks for q in queries)
        total_impressions = sum(q.impressions for q in queries)
        avg_ctr = safe_divide(total_clicks, total_impressions)

        if total_impressions > 0:
            avg_position = sum(q.position * q.impressions for q in queries) / total_impressions
        else:
            avg_position = sum(q.position for q in queries) / len(queries)

        pages.append(PageAggregate(
            page_url=page_url,
            total_clicks=total_clicks,
            total_impressions=total_impressions,
            avg_ctr=avg_ctr,
            avg_position=avg_position,
            performance_score=calculate_page_performance_score(
                total_clicks, total_impressions, avg_ctr, avg_position
            ),
            queries=queries,
        ))

    pages.sort(key=lambda p: (-p.performance_score, p.page_url))
    logger.debug(f"Aggregated {len(records)} records into {len(pages)} pages")
    return pages


# ============================================================================
# PER-QUERY AGGREGATION
# ============================================================================

@dataclass
class QueryAggregate:
    """One query's totals across all pages."""
    query: str
    clicks: int
    impressions: int
    position: float  # Arithmetic mean of row positions

    @property
    def ctr(self) -> float:
        return safe_divide(self.clicks, self.impressions)


def aggregate_queries(records: Sequence[PerformanceRecord]) -> List[QueryAggregate]:
    """
    Aggregate records by exact query string.

    Args:
        records: All records for one scope

    Returns:
        Query aggregates in first-seen order
    """
    return [
        QueryAggregate(
            query=query,
            clicks=sum(r.clicks for r in rows),
            impressions=sum(r.impressions for r in rows),
            position=sum(r.position for r in rows) / len(rows),
        )
        for query, rows in group_records(records, lambda r: r.query).items()
    ]
