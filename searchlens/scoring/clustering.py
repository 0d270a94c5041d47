"""
Keyword Topic Clustering

Groups queries that share vocabulary into topic clusters using a bounded
agglomerative merge.

Pipeline:
    1. Tokenize (lower-case, strip punctuation, drop tokens of <= 2 chars)
    2. Raw term-frequency vectors over the shared vocabulary
    3. Keep the top N queries by impressions
    4. Start from singleton clusters and repeatedly merge the most similar
       pair inside the search window, while the budget allows
    5. Drop clusters smaller than the minimum size, name and score the rest

The merge is deliberately approximate. ClusteringBudget caps the work done
(query count, cluster target, iterations, search window, sampled pairs);
raising the caps trades latency for completeness.

Topic_Score = min(100, Total_Impressions / 1000 × Member_Count / 5)
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional, Sequence, Tuple

from .aggregation import QueryAggregate
from .similarity import cosine_similarity

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class ClusteringBudget:
    """
    Work limits for one clustering run.

    Attributes:
        similarity_threshold: Minimum sampled similarity for a merge
        max_clusters: Stop merging once this many clusters remain
        max_iterations: Maximum merge iterations
        top_query_cap: Only the top N queries by impressions are clustered
        search_window: Only pairs among the first N clusters are compared
        sample_pairs: Member pairs averaged per candidate cluster pair
        min_cluster_size: Smallest cluster that is reported
        name_terms: Number of tokens used in a cluster name
    """
    similarity_threshold: float = 0.5
    max_clusters: int = 50
    max_iterations: int = 100
    top_query_cap: int = 500
    search_window: int = 50
    sample_pairs: int = 3
    min_cluster_size: int = 2
    name_terms: int = 3

    def __post_init__(self):
        if not 0 <= self.similarity_threshold <= 1:
            raise ValueError(
                f"similarity_threshold must be within [0, 1], got {self.similarity_threshold}"
            )
        for name in ("max_clusters", "max_iterations", "top_query_cap",
                     "search_window", "sample_pairs", "min_cluster_size", "name_terms"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")

    @classmethod
    def from_settings(cls, settings) -> "ClusteringBudget":
        """Build a budget from application Settings."""
        return cls(
            similarity_threshold=settings.SIMILARITY_THRESHOLD,
            max_clusters=settings.MAX_CLUSTERS,
            max_iterations=settings.MAX_ITERATIONS,
            top_query_cap=settings.TOP_QUERY_CAP,
            search_window=settings.CLUSTER_SEARCH_WINDOW,
            sample_pairs=settings.CLUSTER_SAMPLE_PAIRS,
        )


class StopReason(Enum):
    """Why the merge loop ended."""
    TARGET_REACHED = "target_reached"          # <= max_clusters remain
    BUDGET_EXHAUSTED = "budget_exhausted"      # max_iterations used
    BELOW_THRESHOLD = "below_threshold"        # best pair under threshold
    NO_CANDIDATES = "no_candidates"            # search window holds < 2 clusters


@dataclass
class KeywordVector:
    """A query with its tokens and term-frequency vector."""
    query: str
    clicks: int
    impressions: int
    position: float
    tokens: List[str]
    vector: Dict[int, int]


@dataclass
class TopicCluster:
    """Queries grouped under one topic."""
    cluster_name: str
    keywords: List[str]
    total_clicks: int
    total_impressions: int
    avg_position: float
    topic_score: float

    @property
    def member_count(self) -> int:
        return len(self.keywords)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cluster_name": self.cluster_name,
            "keywords": list(self.keywords),
            "member_count": self.member_count,
            "total_clicks": self.total_clicks,
            "total_impressions": self.total_impressions,
            "avg_position": self.avg_position,
            "topic_score": self.topic_score,
        }


@dataclass
class ClusteringResult:
    """Topic clusters plus bookkeeping about the merge run."""
    clusters: List[TopicCluster] = field(default_factory=list)
    candidate_count: int = 0
    iterations: int = 0
    stop_reason: StopReason = StopReason.NO_CANDIDATES

    def to_dict(self) -> Dict[str, Any]:
        return {
            "clusters": [c.to_dict() for c in self.clusters],
            "candidate_count": self.candidate_count,
            "iterations": self.iterations,
            "stop_reason": self.stop_reason.value,
        }


# ============================================================================
# VECTORIZATION
# ============================================================================

def tokenize(text: str) -> List[str]:
    """
    Split a query into word tokens.

    Example:
        "Best SEO-tools, 2024!" -> ["best", "seotools", "2024"]
    """
    cleaned = _NON_WORD.sub("", text.lower())
    return [w for w in cleaned.split() if len(w) > 2]


def build_keyword_vectors(queries: Sequence[QueryAggregate]) -> List[KeywordVector]:
    """
    Vectorize queries over one shared vocabulary.

    Vectors are sparse: vocabulary index -> raw term count.
    """
    vocabulary: Dict[str, int] = {}
    tokenized = []
    for q in queries:
        tokens = tokenize(q.query)
        for token in tokens:
            vocabulary.setdefault(token, len(vocabulary))
        tokenized.append(tokens)

    return [
        KeywordVector(
            query=q.query,
            clicks=q.clicks,
            impressions=q.impressions,
            position=q.position,
            tokens=tokens,
            vector=dict(Counter(vocabulary[t] for t in tokens)),
        )
        for q, tokens in zip(queries, tokenized)
    ]


def select_top_queries(vectors: Sequence[KeywordVector], cap: int) -> List[KeywordVector]:
    """
    Keep the `cap` highest-impression queries, in their original order.

    Impression ties are resolved by original order.
    """
    ranked = sorted(range(len(vectors)), key=lambda i: -vectors[i].impressions)
    keep = set(ranked[:cap])
    return [v for i, v in enumerate(vectors) if i in keep]


# ============================================================================
# BOUNDED AGGLOMERATIVE MERGE
# ============================================================================

def sampled_similarity(
    cluster_a: Sequence[KeywordVector],
    cluster_b: Sequence[KeywordVector],
    sample_pairs: int = 3
) -> float:
    """
    Estimate cluster similarity from a few member pairs.

    Averages the cosine similarity of the first k aligned members, where k
    is `sample_pairs` capped by the size of the smaller cluster.
    """
    sample = min(sample_pairs, len(cluster_a), len(cluster_b))
    if sample == 0:
        return 0.0
    total = sum(
        cosine_similarity(cluster_a[k].vector, cluster_b[k].vector)
        for k in range(sample)
    )
    return total / sample


def merge_clusters(
    members: Sequence[KeywordVector],
    budget: ClusteringBudget
) -> Tuple[List[List[KeywordVector]], int, StopReason]:
    """
    Run the bounded merge loop over singleton clusters.

    Each iteration compares every pair among the first `search_window`
    clusters and merges the most similar one into the earlier cluster.
    The first pair found wins ties.

    Args:
        members: Vectorized queries, one singleton cluster each
        budget: Work limits

    Returns:
        (clusters, iterations used, stop reason)
    """
    clusters: List[List[KeywordVector]] = [[m] for m in members]
    iterations = 0
    stop_reason = StopReason.TARGET_REACHED

    while len(clusters) > budget.max_clusters:
        if iterations >= budget.max_iterations:
            stop_reason = StopReason.BUDGET_EXHAUSTED
            break
        iterations += 1

        window = min(len(clusters), budget.search_window)
        best_similarity = -1.0
        best_pair: Optional[Tuple[int, int]] = None

        for i in range(window):
            for j in range(i + 1, window):
                similarity = sampled_similarity(clusters[i], clusters[j], budget.sample_pairs)
                if similarity > best_similarity:
                    best_similarity = similarity
                    best_pair = (i, j)

        if best_pair is None:
            stop_reason = StopReason.NO_CANDIDATES
            break
        if best_similarity < budget.similarity_threshold:
            stop_reason = StopReason.BELOW_THRESHOLD
            break

        i, j = best_pair
        clusters[i] = clusters[i] + clusters[j]
        del clusters[j]

    return clusters, iterations, stop_reason


# ============================================================================
# NAMING & SCORING
# ============================================================================

def name_cluster(members: Sequence[KeywordVector], terms: int = 3) -> str:
    """
    Name a cluster by its most frequent member tokens.

    Ties keep the order in which tokens were first seen across members.

    Example:
        ["seo tools", "free seo tools", "seo audit"] -> "seo + tools + free"
    """
    frequency = Counter(token for m in members for token in m.tokens)
    ranked = sorted(frequency.items(), key=lambda item: -item[1])
    return " + ".join(token for token, _ in ranked[:terms])


def calculate_topic_score(total_impressions: int, member_count: int) -> float:
    """Topic score (0-100) from impressions and cluster size."""
    return min(100.0, (total_impressions / 1000) * (member_count / 5))


def build_topic_cluster(members: Sequence[KeywordVector], name_terms: int = 3) -> TopicCluster:
    """Summarize a merged group of queries."""
    total_impressions = sum(m.impressions for m in members)
    return TopicCluster(
        cluster_name=name_cluster(members, name_terms),
        keywords=[m.query for m in members],
        total_clicks=sum(m.clicks for m in members),
        total_impressions=total_impressions,
        avg_position=round(sum(m.position for m in members) / len(members), 2),
        topic_score=round(calculate_topic_score(total_impressions, len(members)), 2),
    )


def cluster_keywords(
    queries: Sequence[QueryAggregate],
    budget: Optional[ClusteringBudget] = None
) -> ClusteringResult:
    """
    Group queries into topic clusters.

    Args:
        queries: Per-query aggregates for one scope
        budget: Work limits (defaults to ClusteringBudget())

    Returns:
        ClusteringResult with clusters sorted by total impressions (descending)
    """
    budget = budget or ClusteringBudget()
    if not queries:
        return ClusteringResult()

    vectors = build_keyword_vectors(queries)
    candidates = select_top_queries(vectors, budget.top_query_cap)

    groups, iterations, stop_reason = merge_clusters(candidates, budget)
    logger.info(
        f"Clustering {len(candidates)}/{len(queries)} queries finished after "
        f"{iterations} iterations ({stop_reason.value})"
    )

    clusters = [
        build_topic_cluster(group, budget.name_terms)
        for group in groups
        if len(group) >= budget.min_cluster_size
    ]
    clusters.sort(key=lambda c: c.total_impressions, reverse=True)

    return ClusteringResult(
        clusters=clusters,
        candidate_count=len(candidates),
        iterations=iterations,
        stop_reason=stop_reason,
    )


def get_cluster_summary(result: ClusteringResult) -> Dict[str, Any]:
    """
    Generate summary statistics from a clustering run.

    Args:
        result: Output of cluster_keywords

    Returns:
        Summary dict with totals and the largest topics
    """
    clusters = result.clusters
    clustered_keywords = sum(c.member_count for c in clusters)

    return {
        "total_clusters": len(clusters),
        "clustered_keywords": clustered_keywords,
        "unclustered_keywords": result.candidate_count - clustered_keywords,
        "iterations": result.iterations,
        "stop_reason": result.stop_reason.value,
        "avg_topic_score": round(
            sum(c.topic_score for c in clusters) / len(clusters), 2
        ) if clusters else 0,
        "top_topics": [
            {
                "cluster_name": c.cluster_name,
                "member_count": c.member_count,
                "total_impressions": c.total_impressions,
                "topic_score": c.topic_score,
            }
            for c in clusters[:10]
        ],
    }
