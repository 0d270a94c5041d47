"""
Analytics Engine - Orchestrates one full analysis pass.

This engine coordinates:
1. Page aggregation and performance scoring
2. Cannibalization detection
3. Topic clustering of queries
4. Action generation

Every run recomputes everything from the given records; nothing is kept
between runs.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Sequence

from searchlens.models import PerformanceRecord
from searchlens.scoring.actions import SeoAction, generate_actions, get_action_summary
from searchlens.scoring.aggregation import (
    PageAggregate,
    PositionAveraging,
    aggregate_pages,
    aggregate_queries,
)
from searchlens.scoring.cannibalization import (
    DEFAULT_MIN_IMPRESSIONS,
    QueryCluster,
    detect_cannibalization,
    get_cannibalization_summary,
)
from searchlens.scoring.clustering import (
    ClusteringBudget,
    ClusteringResult,
    cluster_keywords,
    get_cluster_summary,
)
from searchlens.scoring.intent import get_intent_distribution

logger = logging.getLogger(__name__)


@dataclass
class EngineConfig:
    """Tunable parameters for one engine instance."""

    min_impressions: int = DEFAULT_MIN_IMPRESSIONS
    position_averaging: PositionAveraging = PositionAveraging.WEIGHTED
    clustering_budget: ClusteringBudget = field(default_factory=ClusteringBudget)
    quick_win_threshold: float = 7
    cannibalization_page_threshold: int = 2

    def __post_init__(self):
        if self.min_impressions < 0:
            raise ValueError(f"min_impressions must be >= 0, got {self.min_impressions}")
        if self.cannibalization_page_threshold < 2:
            raise ValueError(
                "cannibalization_page_threshold must be >= 2, "
                f"got {self.cannibalization_page_threshold}"
            )
        if not isinstance(self.position_averaging, PositionAveraging):
            self.position_averaging = PositionAveraging(self.position_averaging)

    @classmethod
    def from_settings(cls, settings) -> "EngineConfig":
        """Build a config from application Settings."""
        return cls(
            min_impressions=settings.MIN_IMPRESSIONS,
            position_averaging=PositionAveraging(settings.POSITION_AVERAGING),
            clustering_budget=ClusteringBudget.from_settings(settings),
            quick_win_threshold=settings.QUICK_WIN_THRESHOLD,
            cannibalization_page_threshold=settings.CANNIBALIZATION_PAGE_THRESHOLD,
        )


@dataclass
class EngineResult:
    """Complete output of one engine run."""

    # Metadata
    timestamp: datetime
    duration_seconds: float
    record_count: int

    # Analysis outputs
    pages: List[PageAggregate] = field(default_factory=list)
    cannibalization_clusters: List[QueryCluster] = field(default_factory=list)
    clustering: ClusteringResult = field(default_factory=ClusteringResult)
    actions: List[SeoAction] = field(default_factory=list)

    # Roll-ups
    summary: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "duration_seconds": round(self.duration_seconds, 4),
            "record_count": self.record_count,
            "pages": [p.to_dict() for p in self.pages],
            "cannibalization_clusters": [c.to_dict() for c in self.cannibalization_clusters],
            "clustering": self.clustering.to_dict(),
            "actions": [a.to_dict() for a in self.actions],
            "summary": self.summary,
        }


class AnalyticsEngine:
    """
    Runs every analysis over one record set.

    Usage:
        engine = AnalyticsEngine()
        result = engine.run(records)
        print(result.summary["cannibalization"]["total_clusters"])
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        """
        Initialize analytics engine.

        Args:
            config: Engine parameters (defaults to EngineConfig())
        """
        self.config = config or EngineConfig()

    def run(self, records: Sequence[PerformanceRecord]) -> EngineResult:
        """
        Run the full analysis.

        Args:
            records: Validated performance records for one scope

        Returns:
            EngineResult with all outputs and summaries
        """
        started = datetime.now(timezone.utc)
        config = self.config

        logger.info(f"Starting analysis of {len(records)} records")

        # ================================================================
        # PAGES
        # ================================================================
        pages = aggregate_pages(records, config.position_averaging)
        logger.info(f"Pages: {len(pages)} scored")

        # ================================================================
        # CANNIBALIZATION
        # ================================================================
        cannibalization = detect_cannibalization(
            records,
            min_impressions=config.min_impressions,
            averaging=config.position_averaging,
        )

        # ================================================================
        # TOPIC CLUSTERS
        # ================================================================
        queries = aggregate_queries(records)
        clustering = cluster_keywords(queries, config.clustering_budget)

        # ================================================================
        # ACTIONS
        # ================================================================
        actions = generate_actions(
            records,
            quick_win_threshold=config.quick_win_threshold,
            cannibalization_threshold=config.cannibalization_page_threshold,
        )

        duration = (datetime.now(timezone.utc) - started).total_seconds()

        summary = {
            "total_clicks": sum(p.total_clicks for p in pages),
            "total_impressions": sum(p.total_impressions for p in pages),
            "page_count": len(pages),
            "query_count": len(queries),
            "cannibalization": get_cannibalization_summary(cannibalization),
            "clustering": get_cluster_summary(clustering),
            "actions": get_action_summary(actions),
            "intent_distribution": get_intent_distribution(q.query for q in queries),
        }

        logger.info(
            f"Analysis complete in {duration:.3f}s: {len(cannibalization)} cannibalized queries, "
            f"{len(clustering.clusters)} topics, {len(actions)} actions"
        )

        return EngineResult(
            timestamp=started,
            duration_seconds=duration,
            record_count=len(records),
            pages=pages,
            cannibalization_clusters=cannibalization,
            clustering=clustering,
            actions=actions,
            summary=summary,
        )
