"""
SearchLens Analytics Engine

Deterministic analytics over search-performance records:
1. Page performance scoring (CTR curve, SERP features, priority)
2. Keyword cannibalization detection
3. Bounded topic clustering of queries
4. Content quality scoring
5. Search intent classification
"""

__version__ = "0.4.0"
