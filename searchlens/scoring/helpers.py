"""
Scoring Helper Functions and Constants

Contains the CTR curve, SERP feature multipliers, CTR gap analysis and
small numeric utilities used across all scoring calculations.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Iterable, Optional


# ============================================================================
# NUMERIC UTILITIES
# ============================================================================

def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning `default` when the denominator is zero."""
    if not denominator:
        return default
    return numerator / denominator


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def clamp(value: float, lower: float = 0.0, upper: float = 100.0) -> float:
    """Clamp a value to [lower, upper]."""
    return max(lower, min(upper, value))


# ============================================================================
# CTR CURVE (industry benchmark averages, positions 1-10)
# ============================================================================

CTR_CURVE: Dict[int, float] = {
    1: 0.316,   # 31.6% CTR for position 1
    2: 0.158,   # 15.8%
    3: 0.108,   # 10.8%
    4: 0.081,   # 8.1%
    5: 0.066,   # 6.6%
    6: 0.053,   # 5.3%
    7: 0.044,   # 4.4%
    8: 0.037,   # 3.7%
    9: 0.032,   # 3.2%
    10: 0.028,  # 2.8%
}

# Decay rate for positions beyond the first page
CTR_DECAY_RATE = 0.15


def get_base_ctr(position: float) -> float:
    """
    Get benchmark CTR for any position.

    Positions 1-10 use the fixed table (fractional positions use the
    floor). Beyond 10 the curve decays exponentially from the position-10
    value, so it is continuous at the boundary and never increases.
    Positions below 1 are treated as position 1.

    Args:
        position: Average SERP position

    Returns:
        Estimated CTR as decimal (0.0 - 1.0)
    """
    position = max(1.0, float(position))
    if position <= 10:
        return CTR_CURVE[int(math.floor(position))]
    return CTR_CURVE[10] * math.exp(-CTR_DECAY_RATE * (position - 10))


# ============================================================================
# SERP FEATURE MULTIPLIERS
# ============================================================================

class SerpFeature(Enum):
    """SERP features that shift expected CTR."""
    # Features you own (positive)
    FEATURED_SNIPPET = "featured_snippet"
    SITELINKS = "sitelinks"
    OPTIMAL_TITLE = "optimal_title"
    NUMBERS_IN_TITLE = "numbers_in_title"
    EMOJI_IN_TITLE = "emoji_in_title"

    # Features that pull clicks away (negative)
    FEATURED_SNIPPET_COMPETITOR = "featured_snippet_competitor"
    PEOPLE_ALSO_ASK = "people_also_ask"
    LOCAL_PACK = "local_pack"
    KNOWLEDGE_PANEL = "knowledge_panel"
    IMAGE_PACK = "image_pack"
    VIDEO_CAROUSEL = "video_carousel"
    SHOPPING_RESULTS = "shopping_results"
    TOP_STORIES = "top_stories"


SERP_FEATURE_MULTIPLIERS: Dict[str, float] = {
    "featured_snippet": 1.25,
    "sitelinks": 1.15,
    "optimal_title": 1.10,
    "numbers_in_title": 1.08,
    "emoji_in_title": 1.05,
    "featured_snippet_competitor": 0.85,
    "people_also_ask": 0.95,
    "local_pack": 0.80,
    "knowledge_panel": 0.90,
    "image_pack": 0.93,
    "video_carousel": 0.92,
    "shopping_results": 0.88,
    "top_stories": 0.94,
}


def get_feature_multiplier(serp_features: Optional[Iterable[str]] = None) -> float:
    """
    Combined CTR multiplier for a set of SERP features.

    Each known feature contributes its factor once; duplicates and unknown
    names are ignored. Factors are applied in a fixed order so the result
    does not depend on the order of the input.

    Args:
        serp_features: Feature names (see SerpFeature)

    Returns:
        Product of the matching factors (1.0 when none match)
    """
    if not serp_features:
        return 1.0

    present = {
        f.value if isinstance(f, SerpFeature) else str(f).lower()
        for f in serp_features
    }

    multiplier = 1.0
    for feature, factor in SERP_FEATURE_MULTIPLIERS.items():
        if feature in present:
            multiplier *= factor
    return multiplier


def calculate_expected_ctr(
    position: float,
    serp_features: Optional[Iterable[str]] = None
) -> float:
    """
    Expected CTR for a position, adjusted for SERP features.

    Args:
        position: Average SERP position
        serp_features: Optional feature names present on the SERP

    Returns:
        Expected CTR as decimal
    """
    return get_base_ctr(position) * get_feature_multiplier(serp_features)


# ============================================================================
# CTR GAP ANALYSIS
# ============================================================================

class CtrStatus(Enum):
    """CTR performance relative to the benchmark."""
    EXCELLENT = "excellent"                  # >= 110% of expected
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs_improvement"  # < 80% of expected


@dataclass
class CtrGap:
    """Gap between actual and expected CTR."""
    gap: float
    gap_percentage: float
    potential_extra_clicks: int  # Negative when over-performing
    improvement_opportunity: float


@dataclass
class CtrAnalysis:
    """CTR performance for one query/page at one position."""
    position: float
    current_ctr: float
    expected_ctr: float
    ctr_gap: float
    potential_clicks: int
    improvement_opportunity: float
    status: CtrStatus

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position,
            "current_ctr": self.current_ctr,
            "expected_ctr": self.expected_ctr,
            "ctr_gap": self.ctr_gap,
            "potential_clicks": self.potential_clicks,
            "improvement_opportunity": self.improvement_opportunity,
            "status": self.status.value,
        }


def calculate_ctr_gap(
    current_ctr: float,
    expected_ctr: float,
    impressions: int
) -> CtrGap:
    """
    Calculate CTR gap and potential traffic gain.

    Args:
        current_ctr: Observed CTR (decimal)
        expected_ctr: Benchmark CTR (decimal)
        impressions: Impressions the gap applies to

    Returns:
        CtrGap; gap percentage is 0 when current CTR is 0
    """
    gap = expected_ctr - current_ctr
    gap_percentage = safe_divide(gap, current_ctr) * 100

    return CtrGap(
        gap=gap,
        gap_percentage=gap_percentage,
        potential_extra_clicks=round_half_up(impressions * gap),
        improvement_opportunity=gap_percentage,
    )


def analyze_ctr(
    position: float,
    current_ctr: float,
    impressions: int,
    serp_features: Optional[Iterable[str]] = None
) -> CtrAnalysis:
    """
    Compare observed CTR against the feature-adjusted benchmark.

    Args:
        position: Average SERP position
        current_ctr: Observed CTR (decimal)
        impressions: Impressions (or search volume) for click estimates
        serp_features: Optional SERP features

    Returns:
        CtrAnalysis with status classification
    """
    expected = calculate_expected_ctr(position, serp_features)
    gap = calculate_ctr_gap(current_ctr, expected, impressions)

    if current_ctr >= expected * 1.1:
        status = CtrStatus.EXCELLENT
    elif current_ctr < expected * 0.8:
        status = CtrStatus.NEEDS_IMPROVEMENT
    else:
        status = CtrStatus.GOOD

    return CtrAnalysis(
        position=position,
        current_ctr=current_ctr,
        expected_ctr=expected,
        ctr_gap=gap.gap,
        potential_clicks=gap.potential_extra_clicks,
        improvement_opportunity=gap.improvement_opportunity,
        status=status,
    )

