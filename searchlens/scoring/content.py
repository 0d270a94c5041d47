"""
Content Quality Analyzer

Scores a text body on eight sub-scores (0-100 each) and combines them:

    Overall = Length × 0.25 + Keyword × 0.20 + Readability × 0.15 +
              Media × 0.15 + Internal_Links × 0.10 + External_Links × 0.05 +
              Vocabulary × 0.05 + Headings × 0.05

Readability is Flesch Reading Ease:
    206.835 - 1.015 × (Words / Sentences) - 84.6 × (Syllables / Words)
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, Any, List, Optional

from .helpers import safe_divide, clamp, round_half_up

logger = logging.getLogger(__name__)


CONTENT_QUALITY_WEIGHTS: Dict[str, float] = {
    "length": 0.25,
    "keyword": 0.20,
    "readability": 0.15,
    "media": 0.15,
    "internal_links": 0.10,
    "external_links": 0.05,
    "vocabulary": 0.05,
    "heading": 0.05,
}

WORDS_PER_IMAGE = 300
WORDS_PER_INTERNAL_LINK = 200

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_SILENT_ENDING = re.compile(r"(?:[^laeiouy]es|ed|[^laeiouy]e)$")
_LEADING_Y = re.compile(r"^y")
_VOWEL_GROUP = re.compile(r"[aeiouy]{1,2}")


@dataclass
class ContentMetadata:
    """Page facts that the text alone does not reveal."""
    image_count: int = 0
    video_count: int = 0
    internal_links: int = 0
    external_links: int = 0
    heading_count: int = 0
    target_keyword: Optional[str] = None


@dataclass
class ContentQualityReport:
    """Sub-scores and overall score for one text body."""
    overall_score: int
    length_score: int
    keyword_score: int
    readability_score: int
    media_score: int
    internal_links_score: int
    external_links_score: int
    vocabulary_score: int
    heading_score: int

    # Raw metrics
    word_count: int = 0
    sentence_count: int = 0
    keyword_density: float = 0.0

    @classmethod
    def empty(cls) -> "ContentQualityReport":
        """Report for text with no words."""
        return cls(
            overall_score=0,
            length_score=0,
            keyword_score=0,
            readability_score=0,
            media_score=0,
            internal_links_score=0,
            external_links_score=0,
            vocabulary_score=0,
            heading_score=0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "length_score": self.length_score,
            "keyword_score": self.keyword_score,
            "readability_score": self.readability_score,
            "media_score": self.media_score,
            "internal_links_score": self.internal_links_score,
            "external_links_score": self.external_links_score,
            "vocabulary_score": self.vocabulary_score,
            "heading_score": self.heading_score,
            "word_count": self.word_count,
            "sentence_count": self.sentence_count,
            "keyword_density": round(self.keyword_density, 2),
        }


# ============================================================================
# READABILITY
# ============================================================================

def count_syllables(word: str) -> int:
    """
    Approximate the syllable count of an English word.

    Words of three letters or fewer count as one syllable. Silent endings
    and a leading "y" are removed before counting vowel groups.

    Example:
        count_syllables("readability") -> 5
    """
    word = word.lower()
    if len(word) <= 3:
        return 1
    word = _SILENT_ENDING.sub("", word)
    word = _LEADING_Y.sub("", word)
    return len(_VOWEL_GROUP.findall(word)) or 1


def count_sentences(text: str) -> int:
    """Number of non-empty segments between sentence terminators."""
    return sum(1 for s in _SENTENCE_SPLIT.split(text) if s.strip())


def calculate_flesch_score(text: str) -> float:
    """
    Flesch Reading Ease clamped to [0, 100].

    Returns:
        0.0 for text without words or sentences
    """
    words = text.split()
    sentences = count_sentences(text)
    if not words or sentences == 0:
        return 0.0

    syllables = sum(count_syllables(w) for w in words)
    score = 206.835 - 1.015 * (len(words) / sentences) - 84.6 * (syllables / len(words))
    return clamp(score)


# ============================================================================
# SUB-SCORES
# ============================================================================

def get_length_score(word_count: int) -> float:
    """Length score; 1500-2500 words is ideal."""
    if word_count < 300:
        return 20
    elif word_count < 500:
        return 40
    elif word_count < 1000:
        return 60
    elif 1500 <= word_count <= 2500:
        return 100
    elif word_count < 1500:
        return 80
    elif word_count > 10000:
        return 60
    else:
        return 90


def get_keyword_density(content: str, keyword: str, word_count: int) -> float:
    """Keyword occurrences per 100 words (case-insensitive substring count)."""
    if not keyword:
        return 0.0
    occurrences = content.lower().count(keyword.lower())
    return safe_divide(occurrences, word_count) * 100


def get_keyword_score(density: float) -> float:
    """Keyword score; 1-2% density is ideal."""
    if density < 0.5:
        return 30
    elif 1 <= density <= 2:
        return 100
    elif density > 4:
        return 40
    else:
        return 70


def get_media_score(image_count: int, video_count: int, word_count: int) -> float:
    """One image per 300 words scores 100; videos add up to 30, capped at 100."""
    optimal_images = math.ceil(word_count / WORDS_PER_IMAGE)
    score = min(100.0, safe_divide(image_count, optimal_images) * 100)
    score += min(30, video_count * 15)
    return min(100.0, score)


def get_internal_links_score(internal_links: int, word_count: int) -> float:
    """One internal link per 200 words scores 100."""
    optimal_links = math.ceil(word_count / WORDS_PER_INTERNAL_LINK)
    return min(100.0, safe_divide(internal_links, optimal_links) * 100)


def get_external_links_score(external_links: int) -> float:
    return min(100.0, external_links * 10)


def get_vocabulary_score(unique_words: int, word_count: int) -> float:
    return min(100.0, safe_divide(unique_words, word_count) * 150)


def get_heading_score(heading_count: int) -> float:
    return min(100.0, heading_count * 10)


# ============================================================================
# ANALYSIS
# ============================================================================

def analyze_content_quality(
    content: str,
    metadata: Optional[ContentMetadata] = None
) -> ContentQualityReport:
    """
    Score a text body.

    Args:
        content: Plain text of the page
        metadata: Optional media/link/heading counts and target keyword

    Returns:
        ContentQualityReport; all zeros for text without words
    """
    metadata = metadata or ContentMetadata()

    words: List[str] = content.split()
    word_count = len(words)
    if word_count == 0:
        return ContentQualityReport.empty()

    unique_words = len({w.lower() for w in words})

    keyword_density = 0.0
    if metadata.target_keyword:
        keyword_density = get_keyword_density(content, metadata.target_keyword, word_count)
        keyword_score = get_keyword_score(keyword_density)
    else:
        keyword_score = 70

    sub_scores = {
        "length": get_length_score(word_count),
        "keyword": keyword_score,
        "readability": calculate_flesch_score(content),
        "media": get_media_score(metadata.image_count, metadata.video_count, word_count),
        "internal_links": get_internal_links_score(metadata.internal_links, word_count),
        "external_links": get_external_links_score(metadata.external_links),
        "vocabulary": get_vocabulary_score(unique_words, word_count),
        "heading": get_heading_score(metadata.heading_count),
    }

    overall = sum(sub_scores[name] * weight for name, weight in CONTENT_QUALITY_WEIGHTS.items())

    return ContentQualityReport(
        overall_score=int(clamp(round_half_up(overall))),
        length_score=round_half_up(sub_scores["length"]),
        keyword_score=round_half_up(sub_scores["keyword"]),
        readability_score=round_half_up(sub_scores["readability"]),
        media_score=round_half_up(sub_scores["media"]),
        internal_links_score=round_half_up(sub_scores["internal_links"]),
        external_links_score=round_half_up(sub_scores["external_links"]),
        vocabulary_score=round_half_up(sub_scores["vocabulary"]),
        heading_score=round_half_up(sub_scores["heading"]),
        word_count=word_count,
        sentence_count=count_sentences(content),
        keyword_density=keyword_density,
    )
