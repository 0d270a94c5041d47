"""
Performance, Priority and Difficulty Scores

Formulas:
    Page_Performance = round(
        max(0, 100 - Position × 5) × 0.40 +
        min(100, CTR × 100 × 5) × 0.40 +
        min(100, Clicks / 10 × 2) × 0.20
    )

    Priority = round(Impact × Value / max(1, Effort) × Confidence)

    Keyword_Difficulty (full) = (
        Volume × 0.20 + Commercial × 0.15 + Authority × 0.30 +
        Backlinks × 0.25 + Content × 0.10
    )
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, Optional

from .helpers import round_half_up, clamp

logger = logging.getLogger(__name__)


def calculate_page_performance_score(
    clicks: int,
    impressions: int,
    ctr: float,
    position: float
) -> int:
    """
    Calculate page performance score (0-100).

    Args:
        clicks: Total clicks
        impressions: Total impressions (informational; not weighted)
        ctr: Click-through rate as decimal
        position: Average position

    Returns:
        Score between 0 and 100
    """
    position_score = max(0.0, 100 - position * 5)
    ctr_score = min(100.0, ctr * 100 * 5)
    click_score = min(100.0, clicks / 10 * 2)

    score = position_score * 0.4 + ctr_score * 0.4 + click_score * 0.2
    return int(clamp(round_half_up(score)))


def calculate_priority_score(
    impact: float,
    value: float,
    effort: float,
    confidence: float
) -> int:
    """
    Calculate priority score for an action.

    Effort is clamped to a minimum of 1 so the result is always finite.

    Args:
        impact: Expected impact
        value: Business value
        effort: Effort estimate (>= 1 after clamping)
        confidence: Confidence multiplier

    Returns:
        Rounded priority score
    """
    return round_half_up(impact * value / max(1.0, effort) * confidence)


# ============================================================================
# KEYWORD DIFFICULTY
# ============================================================================

def calculate_keyword_difficulty(search_volume: float) -> int:
    """
    Coarse difficulty proxy from volume alone (0-50).

    Not a competitive metric; used where only impressions are known.
    """
    volume_score = min(100.0, search_volume / 10000 * 100)
    return round_half_up(volume_score * 0.5)


class CompetitionLevel(Enum):
    """Competition tiers by estimated difficulty."""
    LOW = "low"              # < 30
    MEDIUM = "medium"        # 30-49
    HIGH = "high"            # 50-69
    VERY_HIGH = "very_high"  # >= 70


@dataclass
class DifficultyEstimate:
    """Keyword difficulty estimate from competitor metrics."""
    difficulty: int
    time_to_rank: int  # Months
    required_backlinks: int
    competition_level: CompetitionLevel

    def to_dict(self) -> Dict[str, Any]:
        return {
            "difficulty": self.difficulty,
            "time_to_rank": self.time_to_rank,
            "required_backlinks": self.required_backlinks,
            "competition_level": self.competition_level.value,
        }


DEFAULT_COMPETITOR_METRICS: Dict[str, float] = {
    "avg_domain_authority": 50,
    "avg_backlinks": 100,
    "avg_content_length": 2000,
    "cpc": 1.0,
}


def estimate_keyword_difficulty(
    search_volume: float,
    competitor_metrics: Optional[Dict[str, float]] = None
) -> DifficultyEstimate:
    """
    Estimate keyword difficulty from volume and competitor averages.

    Args:
        search_volume: Monthly search volume
        competitor_metrics: Optional dict with avg_domain_authority,
            avg_backlinks, avg_content_length, cpc (missing or zero values
            fall back to defaults)

    Returns:
        DifficultyEstimate
    """
    metrics = dict(DEFAULT_COMPETITOR_METRICS)
    for key, value in (competitor_metrics or {}).items():
        if value:
            metrics[key] = value

    volume_score = min(100.0, search_volume / 10000 * 100)
    commercial_score = min(100.0, metrics["cpc"] * 20)
    authority_score = metrics["avg_domain_authority"]
    backlink_score = min(100.0, metrics["avg_backlinks"] / 500 * 100)
    content_score = min(100.0, metrics["avg_content_length"] / 5000 * 100)

    difficulty = (
        volume_score * 0.20 +
        commercial_score * 0.15 +
        authority_score * 0.30 +
        backlink_score * 0.25 +
        content_score * 0.10
    )

    if difficulty < 30:
        level = CompetitionLevel.LOW
    elif difficulty < 50:
        level = CompetitionLevel.MEDIUM
    elif difficulty < 70:
        level = CompetitionLevel.HIGH
    else:
        level = CompetitionLevel.VERY_HIGH

    return DifficultyEstimate(
        difficulty=round_half_up(difficulty),
        time_to_rank=max(1, round_half_up(difficulty / 10 + metrics["avg_backlinks"] / 50)),
        required_backlinks=max(5, round_half_up(metrics["avg_backlinks"] * 0.8)),
        competition_level=level,
    )
