"""
Scoring Module for SearchLens

Deterministic calculations over search-performance records:

1. **Page Performance** (0-100)
   Position, CTR and click volume combined per page.

2. **Cannibalization** (score + severity)
   Queries served by several pages, with a consolidation target and an
   estimated click gain.

3. **Topic Clusters**
   Bounded agglomerative merge of queries that share vocabulary.

4. **Content Quality** (0-100)
   Length, keyword density, readability, media, links, vocabulary, headings.

5. **Search Intent**
   Transactional / commercial / navigational / informational.

Example Usage:
    from searchlens.models import PerformanceRecord
    from searchlens.scoring import aggregate_pages, detect_cannibalization

    records = [
        PerformanceRecord("seo tools", "/x", 100, 1000, 0.1, 3),
        PerformanceRecord("seo tools", "/y", 10, 500, 0.02, 12),
    ]

    for cluster in detect_cannibalization(records):
        print(cluster.query, cluster.primary_page, cluster.traffic_gain_estimate)
"""

# Helper utilities and constants
from .helpers import (
    # Numeric
    safe_divide,
    round_half_up,
    clamp,

    # CTR curve
    CTR_CURVE,
    get_base_ctr,

    # SERP features
    SerpFeature,
    SERP_FEATURE_MULTIPLIERS,
    get_feature_multiplier,
    calculate_expected_ctr,

    # CTR gap
    CtrStatus,
    CtrGap,
    CtrAnalysis,
    calculate_ctr_gap,
    analyze_ctr,
)

# Performance, priority and difficulty
from .performance import (
    calculate_page_performance_score,
    calculate_priority_score,
    calculate_keyword_difficulty,
    CompetitionLevel,
    DifficultyEstimate,
    estimate_keyword_difficulty,
)

# Aggregation
from .aggregation import (
    PositionAveraging,
    merge_positions,
    group_records,
    QueryMetrics,
    PageAggregate,
    aggregate_pages,
    QueryAggregate,
    aggregate_queries,
)

# Cannibalization
from .cannibalization import (
    EmptyInputError,
    CannibalizationSeverity,
    get_cannibalization_severity,
    CannibalizationPage,
    CannibalizationScore,
    PrimarySelection,
    QueryCluster,
    calculate_weighted_position,
    calculate_weighted_position_variance,
    calculate_cannibalization_score,
    select_primary_candidate,
    estimate_consolidation_gain,
    calculate_consolidation_score,
    analyze_query_group,
    detect_cannibalization,
    get_cannibalization_summary,
)

# Similarity
from .similarity import (
    cosine_similarity,
    generate_ngrams,
    calculate_jaccard_similarity,
    calculate_ngram_similarity,
    calculate_topical_overlap,
    calculate_link_opportunity_score,
)

# Topic clustering
from .clustering import (
    ClusteringBudget,
    StopReason,
    KeywordVector,
    TopicCluster,
    ClusteringResult,
    tokenize,
    build_keyword_vectors,
    select_top_queries,
    sampled_similarity,
    merge_clusters,
    name_cluster,
    calculate_topic_score,
    cluster_keywords,
    get_cluster_summary,
)

# Content quality
from .content import (
    ContentMetadata,
    ContentQualityReport,
    count_syllables,
    calculate_flesch_score,
    analyze_content_quality,
)

# Search intent
from .intent import (
    SearchIntent,
    classify_search_intent,
    get_intent_distribution,
)

# Actions
from .actions import (
    ActionType,
    SeoAction,
    generate_actions,
    get_action_summary,
)

__all__ = [
    # Helpers
    "safe_divide",
    "round_half_up",
    "clamp",
    "CTR_CURVE",
    "get_base_ctr",
    "SerpFeature",
    "SERP_FEATURE_MULTIPLIERS",
    "get_feature_multiplier",
    "calculate_expected_ctr",
    "CtrStatus",
    "CtrGap",
    "CtrAnalysis",
    "calculate_ctr_gap",
    "analyze_ctr",

    # Performance
    "calculate_page_performance_score",
    "calculate_priority_score",
    "calculate_keyword_difficulty",
    "CompetitionLevel",
    "DifficultyEstimate",
    "estimate_keyword_difficulty",

    # Aggregation
    "PositionAveraging",
    "merge_positions",
    "group_records",
    "QueryMetrics",
    "PageAggregate",
    "aggregate_pages",
    "QueryAggregate",
    "aggregate_queries",

    # Cannibalization
    "EmptyInputError",
    "CannibalizationSeverity",
    "get_cannibalization_severity",
    "CannibalizationPage",
    "CannibalizationScore",
    "PrimarySelection",
    "QueryCluster",
    "calculate_weighted_position",
    "calculate_weighted_position_variance",
    "calculate_cannibalization_score",
    "select_primary_candidate",
    "estimate_consolidation_gain",
    "calculate_consolidation_score",
    "analyze_query_group",
    "detect_cannibalization",
    "get_cannibalization_summary",

    # Similarity
    "cosine_similarity",
    "generate_ngrams",
    "calculate_jaccard_similarity",
    "calculate_ngram_similarity",
    "calculate_topical_overlap",
    "calculate_link_opportunity_score",

    # Clustering
    "ClusteringBudget",
    "StopReason",
    "KeywordVector",
    "TopicCluster",
    "ClusteringResult",
    "tokenize",
    "build_keyword_vectors",
    "select_top_queries",
    "sampled_similarity",
    "merge_clusters",
    "name_cluster",
    "calculate_topic_score",
    "cluster_keywords",
    "get_cluster_summary",

    # Content
    "ContentMetadata",
    "ContentQualityReport",
    "count_syllables",
    "calculate_flesch_score",
    "analyze_content_quality",

    # Intent
    "SearchIntent",
    "classify_search_intent",
    "get_intent_distribution",

    # Actions
    "ActionType",
    "SeoAction",
    "generate_actions",
    "get_action_summary",
]
