"""
Action Generator

Turns raw performance rows into a prioritized list of SEO actions:

1. Quick wins       - position 4-15 with enough impressions and a click gap
2. Low CTR          - CTR under 60% of the benchmark for the position
3. Cannibalization  - query served by several distinct pages
4. Featured snippet - question query already ranking 2-5

Thresholds for quick wins and cannibalization are supplied by the caller.
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence

from searchlens.models import PerformanceRecord
from .aggregation import group_records
from .helpers import calculate_expected_ctr

logger = logging.getLogger(__name__)

QUICK_WIN_MIN_POSITION = 4
QUICK_WIN_MAX_POSITION = 15
QUICK_WIN_MIN_IMPRESSIONS = 100
LOW_CTR_RATIO = 0.6
LOW_CTR_MIN_IMPRESSIONS = 50
SNIPPET_MIN_POSITION = 2
SNIPPET_MAX_POSITION = 5

_QUESTION = re.compile(r"^(who|what|where|when|why|how|is|are|can|do|does)\b", re.IGNORECASE)


class ActionType(Enum):
    """SEO action categories."""
    QUICK_WIN = "quick_win"
    LOW_CTR = "low_ctr"
    CANNIBALIZATION = "cannibalization"
    FEATURED_SNIPPET = "featured_snippet"


ACTION_PRIORITIES: Dict[ActionType, int] = {
    ActionType.QUICK_WIN: 90,
    ActionType.CANNIBALIZATION: 85,
    ActionType.FEATURED_SNIPPET: 80,
    ActionType.LOW_CTR: 75,
}

ACTION_RECOMMENDATIONS: Dict[ActionType, str] = {
    ActionType.QUICK_WIN: "Optimize title/meta, add FAQ schema, build internal links",
    ActionType.LOW_CTR: "A/B test new title tags, add power words, improve meta description",
    ActionType.CANNIBALIZATION: "Consolidate content or set canonical to {page}",
    ActionType.FEATURED_SNIPPET: "Add concise paragraph answer at top, use lists/tables, implement FAQ schema",
}


@dataclass
class SeoAction:
    """One recommended action for a page/query."""
    id: str
    type: ActionType
    priority: int
    page: str
    query: Optional[str]
    reason: str
    recommendation: str
    metrics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "priority": self.priority,
            "page": self.page,
            "query": self.query,
            "reason": self.reason,
            "recommendation": self.recommendation,
            "metrics": dict(self.metrics),
        }


def is_question_query(query: str) -> bool:
    """True for queries starting with a question word."""
    return bool(_QUESTION.match(query.strip()))


def find_quick_wins(
    records: Sequence[PerformanceRecord],
    quick_win_threshold: float = 7
) -> List[SeoAction]:
    """
    Rows close to page one whose benchmark clicks exceed actual clicks.

    Args:
        records: Raw rows
        quick_win_threshold: Minimum potential click gain

    Returns:
        Quick-win actions in input order
    """
    actions = []
    for r in records:
        if not (QUICK_WIN_MIN_POSITION <= r.position <= QUICK_WIN_MAX_POSITION):
            continue
        if r.impressions < QUICK_WIN_MIN_IMPRESSIONS:
            continue

        expected_ctr = calculate_expected_ctr(r.position)
        gain = r.impressions * expected_ctr - r.clicks
        if gain <= quick_win_threshold:
            continue

        actions.append(SeoAction(
            id=f"qw-{r.page}-{r.query}",
            type=ActionType.QUICK_WIN,
            priority=ACTION_PRIORITIES[ActionType.QUICK_WIN],
            page=r.page,
            query=r.query,
            reason=f"Position {r.position:.1f} with {r.impressions} impressions",
            recommendation=ACTION_RECOMMENDATIONS[ActionType.QUICK_WIN],
            metrics={
                "clicks": r.clicks,
                "impressions": r.impressions,
                "ctr": r.ctr,
                "position": r.position,
                "expected_ctr": expected_ctr,
                "potential_click_gain": round(gain, 1),
            },
        ))
    return actions


def find_low_ctr(records: Sequence[PerformanceRecord]) -> List[SeoAction]:
    """Rows whose CTR is well below the benchmark for their position."""
    actions = []
    for r in records:
        expected_ctr = calculate_expected_ctr(r.position)
        if r.impressions < LOW_CTR_MIN_IMPRESSIONS or r.ctr >= expected_ctr * LOW_CTR_RATIO:
            continue

        actions.append(SeoAction(
            id=f"ctr-{r.page}-{r.query}",
            type=ActionType.LOW_CTR,
            priority=ACTION_PRIORITIES[ActionType.LOW_CTR],
            page=r.page,
            query=r.query,
            reason=f"CTR {r.ctr * 100:.2f}% vs expected {expected_ctr * 100:.1f}%",
            recommendation=ACTION_RECOMMENDATIONS[ActionType.LOW_CTR],
            metrics={
                "clicks": r.clicks,
                "impressions": r.impressions,
                "ctr": r.ctr,
                "position": r.position,
                "expected_ctr": expected_ctr,
            },
        ))
    return actions


def find_cannibalized_queries(
    records: Sequence[PerformanceRecord],
    page_threshold: int = 2
) -> List[SeoAction]:
    """
    Queries served by at least `page_threshold` distinct pages.

    The first page seen for the query is suggested as canonical.
    """
    actions = []
    for query, rows in group_records(records, lambda r: r.query).items():
        pages = list(dict.fromkeys(r.page for r in rows))
        if len(pages) < page_threshold:
            continue

        top_page = pages[0]
        actions.append(SeoAction(
            id=f"cannibal-{query}",
            type=ActionType.CANNIBALIZATION,
            priority=ACTION_PRIORITIES[ActionType.CANNIBALIZATION],
            page=top_page,
            query=query,
            reason=f"Query ranks on {len(pages)} pages: {', '.join(pages)}",
            recommendation=ACTION_RECOMMENDATIONS[ActionType.CANNIBALIZATION].format(page=top_page),
            metrics={"page_count": len(pages)},
        ))
    return actions


def find_snippet_opportunities(records: Sequence[PerformanceRecord]) -> List[SeoAction]:
    """Question queries ranking just below the top spot."""
    actions = []
    for r in records:
        if not is_question_query(r.query):
            continue
        if not (SNIPPET_MIN_POSITION <= r.position <= SNIPPET_MAX_POSITION):
            continue

        actions.append(SeoAction(
            id=f"snippet-{r.page}-{r.query}",
            type=ActionType.FEATURED_SNIPPET,
            priority=ACTION_PRIORITIES[ActionType.FEATURED_SNIPPET],
            page=r.page,
            query=r.query,
            reason=f"Question query at position {r.position:.1f}",
            recommendation=ACTION_RECOMMENDATIONS[ActionType.FEATURED_SNIPPET],
            metrics={
                "impressions": r.impressions,
                "position": r.position,
            },
        ))
    return actions


def generate_actions(
    records: Sequence[PerformanceRecord],
    quick_win_threshold: float = 7,
    cannibalization_threshold: int = 2
) -> List[SeoAction]:
    """
    Generate all action types for a record set.

    Args:
        records: Raw rows for one scope
        quick_win_threshold: Minimum click gain for a quick win
        cannibalization_threshold: Minimum distinct pages per query

    Returns:
        Actions sorted by priority (descending); equal priorities keep
        generation order
    """
    actions = (
        find_quick_wins(records, quick_win_threshold) +
        find_low_ctr(records) +
        find_cannibalized_queries(records, cannibalization_threshold) +
        find_snippet_opportunities(records)
    )
    actions.sort(key=lambda a: a.priority, reverse=True)

    logger.info(f"Generated {len(actions)} actions from {len(records)} records")
    return actions


def get_action_summary(actions: List[SeoAction]) -> Dict[str, int]:
    """Count actions per type; every type is present."""
    return {
        action_type.value: sum(1 for a in actions if a.type == action_type)
        for action_type in ActionType
    }
