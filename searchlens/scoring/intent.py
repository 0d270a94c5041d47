"""
Search Intent Classifier

Pattern-based 4-way classification. Pattern lists are checked in priority
order (transactional, commercial, navigational) and the first list with a
substring match wins; everything else is informational.
"""

from enum import Enum
from typing import Dict, Iterable, List, Tuple


class SearchIntent(Enum):
    """Search intent classification."""
    TRANSACTIONAL = "transactional"
    COMMERCIAL = "commercial"
    NAVIGATIONAL = "navigational"
    INFORMATIONAL = "informational"


TRANSACTIONAL_PATTERNS: List[str] = [
    "buy", "purchase", "order", "shop", "cart", "checkout", "discount",
    "coupon", "deal", "price", "cheap", "affordable", "subscribe",
    "download", "free trial",
]

COMMERCIAL_PATTERNS: List[str] = [
    "best", "top", "review", "comparison", "vs", "versus", "alternative",
    "compare", "recommended", "rating",
]

NAVIGATIONAL_PATTERNS: List[str] = [
    "login", "sign in", "account", "dashboard", "portal", "official",
    "website", "homepage",
]

# Checked in this order; the first match wins
INTENT_PATTERNS: List[Tuple[SearchIntent, List[str]]] = [
    (SearchIntent.TRANSACTIONAL, TRANSACTIONAL_PATTERNS),
    (SearchIntent.COMMERCIAL, COMMERCIAL_PATTERNS),
    (SearchIntent.NAVIGATIONAL, NAVIGATIONAL_PATTERNS),
]


def classify_search_intent(keyword: str) -> SearchIntent:
    """
    Classify a keyword's search intent.

    Matching is case-insensitive substring matching, so "shopping"
    matches "shop" and "top" matches "laptop".

    Example:
        classify_search_intent("best price for seo tools") -> TRANSACTIONAL
    """
    lower = keyword.lower()
    for intent, patterns in INTENT_PATTERNS:
        if any(p in lower for p in patterns):
            return intent
    return SearchIntent.INFORMATIONAL


def get_intent_distribution(keywords: Iterable[str]) -> Dict[str, int]:
    """Count keywords per intent; every intent is present in the result."""
    distribution = {intent.value: 0 for intent in SearchIntent}
    for keyword in keywords:
        distribution[classify_search_intent(keyword).value] += 1
    return distribution
