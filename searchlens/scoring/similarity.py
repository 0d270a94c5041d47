"""
Similarity Primitives

- Cosine similarity over sparse term-frequency vectors (keyword clustering)
- Character n-gram similarity (topical overlap between short texts)
- Jaccard similarity over keyword sets
"""

import math
from typing import Dict, Iterable, List, Set, Hashable

# Weight of each character n-gram size in the combined score
NGRAM_WEIGHTS: Dict[int, float] = {
    2: 0.5,  # Bigrams matter most for short strings
    3: 0.3,
    4: 0.2,
}


def cosine_similarity(vec1: Dict[Hashable, float], vec2: Dict[Hashable, float]) -> float:
    """
    Cosine similarity of two sparse vectors.

    Returns:
        Similarity in [0, 1] for non-negative vectors; 0.0 if either is zero
    """
    if not vec1 or not vec2:
        return 0.0

    if len(vec1) > len(vec2):
        vec1, vec2 = vec2, vec1
    dot_product = sum(value * vec2.get(key, 0) for key, value in vec1.items())

    magnitude = math.sqrt(sum(v * v for v in vec1.values())) * math.sqrt(sum(v * v for v in vec2.values()))
    if magnitude == 0:
        return 0.0
    return dot_product / magnitude


def generate_ngrams(text: str, n: int) -> List[str]:
    """
    Every contiguous substring of length n of the lower-cased text.

    Example:
        generate_ngrams("SEO", 2) -> ["se", "eo"]
    """
    normalized = text.lower()
    return [normalized[i:i + n] for i in range(len(normalized) - n + 1)]


def calculate_jaccard_similarity(set1: Set[str], set2: Set[str]) -> float:
    """|A ∩ B| / |A ∪ B|, 0.0 when both sets are empty."""
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def calculate_ngram_similarity(text1: str, text2: str) -> float:
    """
    Weighted Jaccard similarity over character n-grams.

    Bigrams weigh 0.5, trigrams 0.3 and four-grams 0.2. Works on
    characters, so "seo tool" and "seo tools" score high even though
    their word tokens differ.

    Returns:
        Similarity between 0.0 and 1.0
    """
    return sum(
        weight * calculate_jaccard_similarity(
            set(generate_ngrams(text1, n)),
            set(generate_ngrams(text2, n)),
        )
        for n, weight in NGRAM_WEIGHTS.items()
    )


def calculate_topical_overlap(keywords1: Iterable[str], keywords2: Iterable[str]) -> float:
    """Jaccard similarity of two keyword lists (case-insensitive)."""
    return calculate_jaccard_similarity(
        {k.lower() for k in keywords1},
        {k.lower() for k in keywords2},
    )


def calculate_link_opportunity_score(
    donor_authority: float,
    topical_overlap: float,
    target_need: float
) -> int:
    """
    Score an internal/external link opportunity (0-100).

    Args:
        donor_authority: 0-1, normalized authority of the linking page
        topical_overlap: 0-1, shared-keyword similarity
        target_need: 0-1, normalized CTR gap of the target page

    Returns:
        Rounded score
    """
    score = donor_authority * 0.5 + topical_overlap * 0.3 + target_need * 0.2
    return round(score * 100)
