"""
Keyword Cannibalization Detector

Finds queries for which several pages of the same site compete, scores how
badly they compete and picks the page to consolidate into.

Formula:
    Cannibalization_Score = (Page_Count - 1) × (1 + Weighted_Variance / 10)

    Weighted_Variance = Σ (Position - Weighted_Avg_Position)² × Impression_Share

Thresholds:
    <5: Mild
    5-10: Moderate
    >=10: Severe

Primary page:
    Composite = 0.5 × Impressions/Max_Impressions
              + 0.7 × Clicks/Max_Clicks
              + 0.6 × Min_Position/Position
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Sequence

from searchlens.models import PerformanceRecord
from .aggregation import PositionAveraging, group_records, merge_positions
from .helpers import safe_divide, round_half_up, calculate_expected_ctr
from .performance import calculate_keyword_difficulty

logger = logging.getLogger(__name__)

# Assumed position multiplier after consolidation (40% improvement)
CONSOLIDATION_POSITION_FACTOR = 0.6

DEFAULT_MIN_IMPRESSIONS = 50


class EmptyInputError(ValueError):
    """Raised when an operation needs at least one element and got none."""


class CannibalizationSeverity(Enum):
    """Cannibalization severity levels."""
    MILD = "mild"          # score < 5
    MODERATE = "moderate"  # 5 <= score < 10
    SEVERE = "severe"      # score >= 10


def get_cannibalization_severity(score: float) -> CannibalizationSeverity:
    """Classify a cannibalization score."""
    if score < 5:
        return CannibalizationSeverity.MILD
    elif score < 10:
        return CannibalizationSeverity.MODERATE
    else:
        return CannibalizationSeverity.SEVERE


@dataclass
class CannibalizationPage:
    """One competing page's totals for a query."""
    url: str
    clicks: int
    impressions: int
    position: float
    ctr: float = 0.0
    composite_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "position": self.position,
            "ctr": self.ctr,
            "composite_score": round(self.composite_score, 4),
        }


@dataclass
class CannibalizationScore:
    """Score, variance and severity for one group of competing pages."""
    score: float
    variance: float
    severity: CannibalizationSeverity


@dataclass
class PrimarySelection:
    """Consolidation target and the pages that should support it."""
    primary_page: CannibalizationPage
    supporting_pages: List[CannibalizationPage] = field(default_factory=list)


@dataclass
class QueryCluster:
    """A query ranking on several competing pages."""
    query: str
    pages: List[CannibalizationPage]
    weighted_avg_position: float
    variance: float
    cannibalization_score: float
    severity: CannibalizationSeverity
    primary_page: str
    supporting_pages: List[CannibalizationPage]
    total_clicks: int
    total_impressions: int
    keyword_difficulty: int
    expected_ctr: float
    traffic_gain_estimate: int
    consolidation_score: int

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "page_count": self.page_count,
            "pages": [p.to_dict() for p in self.pages],
            "weighted_avg_position": self.weighted_avg_position,
            "variance": self.variance,
            "cannibalization_score": self.cannibalization_score,
            "severity": self.severity.value,
            "primary_page": self.primary_page,
            "supporting_pages": [p.to_dict() for p in self.supporting_pages],
            "total_clicks": self.total_clicks,
            "total_impressions": self.total_impressions,
            "keyword_difficulty": self.keyword_difficulty,
            "expected_ctr": self.expected_ctr,
            "traffic_gain_estimate": self.traffic_gain_estimate,
            "consolidation_score": self.consolidation_score,
        }


# ============================================================================
# SCORING PRIMITIVES
# ============================================================================

def calculate_weighted_position(pages: Sequence[CannibalizationPage]) -> float:
    """Impression-weighted average position (0.0 without impressions)."""
    total_impressions = sum(p.impressions for p in pages)
    return sum(
        p.position * safe_divide(p.impressions, total_impressions)
        for p in pages
    )


def calculate_weighted_position_variance(pages: Sequence[CannibalizationPage]) -> float:
    """
    Impression-weighted variance of position around the weighted mean.

    Returns:
        Variance (0.0 when the pages have no impressions)
    """
    total_impressions = sum(p.impressions for p in pages)
    if total_impressions == 0:
        return 0.0

    weighted_avg = calculate_weighted_position(pages)
    return sum(
        (p.position - weighted_avg) ** 2 * (p.impressions / total_impressions)
        for p in pages
    )


def calculate_cannibalization_score(pages: Sequence[CannibalizationPage]) -> CannibalizationScore:
    """
    Score how strongly a set of pages competes for one query.

    For a fixed page count the score never decreases as variance grows.
    """
    variance = calculate_weighted_position_variance(pages)
    score = (len(pages) - 1) * (1 + variance / 10)

    return CannibalizationScore(
        score=score,
        variance=variance,
        severity=get_cannibalization_severity(score),
    )


def select_primary_candidate(pages: Sequence[CannibalizationPage]) -> PrimarySelection:
    """
    Select the page to consolidate into.

    Each page gets a composite of its impressions and clicks (relative to
    the group maxima) and its position (relative to the group best). The
    highest composite wins; ties go to the lexicographically smaller URL.
    Supporting pages follow in the same order.

    Args:
        pages: Competing pages (at least one)

    Returns:
        PrimarySelection; composite scores are written to the returned pages

    Raises:
        EmptyInputError: If no pages were given
    """
    if not pages:
        raise EmptyInputError("Primary page selection needs at least one page")

    max_impressions = max(p.impressions for p in pages)
    max_clicks = max(p.clicks for p in pages)
    min_position = min(p.position for p in pages)

    scored = [
        CannibalizationPage(
            url=p.url,
            clicks=p.clicks,
            impressions=p.impressions,
            position=p.position,
            ctr=p.ctr,
            composite_score=(
                0.5 * safe_divide(p.impressions, max_impressions) +
                0.7 * safe_divide(p.clicks, max_clicks) +
                0.6 * safe_divide(min_position, p.position)
            ),
        )
        for p in pages
    ]
    scored.sort(key=lambda p: (-p.composite_score, p.url))

    return PrimarySelection(primary_page=scored[0], supporting_pages=scored[1:])


def estimate_consolidation_gain(
    total_impressions: int,
    weighted_avg_position: float,
    position_factor: float = CONSOLIDATION_POSITION_FACTOR
) -> int:
    """
    Estimate extra clicks if competing pages are merged into one.

    Assumes the merged page reaches `weighted_avg_position × position_factor`.

    Args:
        total_impressions: Impressions across all competing pages
        weighted_avg_position: Current impression-weighted position
        position_factor: Position multiplier after consolidation

    Returns:
        Estimated click gain
    """
    new_position = weighted_avg_position * position_factor
    return round_half_up(
        total_impressions * (
            calculate_expected_ctr(new_position) -
            calculate_expected_ctr(weighted_avg_position)
        )
    )


def calculate_consolidation_score(
    page_count: int,
    total_impressions: int,
    avg_position: float,
    difficulty: int
) -> int:
    """
    Consolidation opportunity score.

    More pages, more impressions and a weaker average position make
    consolidation more attractive; difficulty lowers it slightly.
    """
    page_count_score = min(100.0, page_count * 20) * 0.35
    impressions_score = min(100.0, total_impressions / 1000 * 25) * 0.3
    position_score = max(0.0, avg_position / 20 * 50) * 0.2
    difficulty_score = (100 - difficulty) * 0.15 * 0.15

    return round_half_up(page_count_score + impressions_score + position_score + difficulty_score)


# ============================================================================
# DETECTION
# ============================================================================

def _build_pages(
    rows: Sequence[PerformanceRecord],
    averaging: PositionAveraging
) -> List[CannibalizationPage]:
    pages = []
    for url, page_rows in group_records(rows, lambda r: r.page).items():
        clicks = sum(r.clicks for r in page_rows)
        impressions = sum(r.impressions for r in page_rows)
        pages.append(CannibalizationPage(
            url=url,
            clicks=clicks,
            impressions=impressions,
            position=merge_positions(page_rows, averaging),
            ctr=safe_divide(clicks, impressions),
        ))
    return pages


def analyze_query_group(
    query: str,
    pages: Sequence[CannibalizationPage]
) -> QueryCluster:
    """
    Build the cluster for one query whose pages already passed filtering.

    Args:
        query: Normalized query
        pages: Competing pages (at least one)

    Returns:
        QueryCluster
    """
    total_clicks = sum(p.clicks for p in pages)
    total_impressions = sum(p.impressions for p in pages)

    weighted_avg_position = calculate_weighted_position(pages)
    scored = calculate_cannibalization_score(pages)
    score = round(scored.score, 2)
    selection = select_primary_candidate(pages)
    difficulty = calculate_keyword_difficulty(total_impressions)

    return QueryCluster(
        query=query,
        pages=[selection.primary_page] + selection.supporting_pages,
        weighted_avg_position=weighted_avg_position,
        variance=scored.variance,
        cannibalization_score=score,
        severity=get_cannibalization_severity(score),
        primary_page=selection.primary_page.url,
        supporting_pages=selection.supporting_pages,
        total_clicks=total_clicks,
        total_impressions=total_impressions,
        keyword_difficulty=difficulty,
        expected_ctr=calculate_expected_ctr(weighted_avg_position),
        traffic_gain_estimate=estimate_consolidation_gain(total_impressions, weighted_avg_position),
        consolidation_score=calculate_consolidation_score(
            len(pages), total_impressions, weighted_avg_position, difficulty
        ),
    )


def detect_cannibalization(
    records: Sequence[PerformanceRecord],
    min_impressions: int = DEFAULT_MIN_IMPRESSIONS,
    averaging: PositionAveraging = PositionAveraging.WEIGHTED
) -> List[QueryCluster]:
    """
    Detect queries on which two or more pages compete.

    Queries are compared case-insensitively. A query yields a cluster only
    when it appears on at least two distinct pages and its total
    impressions reach `min_impressions`.

    Args:
        records: All records for one scope
        min_impressions: Minimum impressions across the query's pages
        averaging: Position merge strategy for repeated page rows

    Returns:
        Clusters sorted by cannibalization score (descending), then query
    """
    if min_impressions < 0:
        raise ValueError(f"min_impressions must be >= 0, got {min_impressions}")

    clusters: List[QueryCluster] = []

    for query, rows in group_records(records, lambda r: r.query.lower()).items():
        pages = _build_pages(rows, averaging)
        total_impressions = sum(p.impressions for p in pages)

        if len(pages) < 2 or total_impressions < min_impressions or total_impressions == 0:
            continue

        clusters.append(analyze_query_group(query, pages))

    clusters.sort(key=lambda c: (-c.cannibalization_score, c.query))
    logger.info(f"Found {len(clusters)} cannibalization clusters in {len(records)} records")
    return clusters


def get_cannibalization_summary(clusters: List[QueryCluster]) -> Dict[str, Any]:
    """
    Generate summary statistics from detected clusters.

    Args:
        clusters: Output of detect_cannibalization

    Returns:
        Summary dict with severity distribution and totals
    """
    severity_counts = {
        sev.value: sum(1 for c in clusters if c.severity == sev)
        for sev in CannibalizationSeverity
    }

    if not clusters:
        return {
            "total_clusters": 0,
            "avg_cannibalization_score": 0,
            "total_impressions_affected": 0,
            "total_traffic_gain_estimate": 0,
            "severity_distribution": severity_counts,
            "top_clusters": [],
        }

    return {
        "total_clusters": len(clusters),
        "avg_cannibalization_score": round(
            sum(c.cannibalization_score for c in clusters) / len(clusters), 2
        ),
        "total_impressions_affected": sum(c.total_impressions for c in clusters),
        "total_traffic_gain_estimate": sum(c.traffic_gain_estimate for c in clusters),
        "severity_distribution": severity_counts,
        "top_clusters": [
            {
                "query": c.query,
                "cannibalization_score": c.cannibalization_score,
                "severity": c.severity.value,
                "primary_page": c.primary_page,
                "page_count": c.page_count,
                "traffic_gain_estimate": c.traffic_gain_estimate,
            }
            for c in clusters[:20]
        ],
    }
