"""
Test Suite for Content Quality Scoring

Tests:
- Syllable and sentence counting
- Flesch Reading Ease
- Banded sub-scores
- Overall report
"""

import pytest

from searchlens.scoring import (
    ContentMetadata,
    analyze_content_quality,
    calculate_flesch_score,
    count_syllables,
)
from searchlens.scoring.content import (
    count_sentences,
    get_external_links_score,
    get_heading_score,
    get_internal_links_score,
    get_keyword_score,
    get_length_score,
    get_media_score,
    get_vocabulary_score,
)


SAMPLE_TEXT = (
    "Search engines reward pages that answer a question clearly. "
    "Short sentences help readers. Clear headings help them scan. "
    "Good pages link to related guides and cite their sources!"
)


class TestSyllables:
    """Test syllable approximation."""

    @pytest.mark.parametrize("word,expected", [
        ("the", 1),
        ("cake", 1),
        ("table", 2),
        ("running", 2),
        ("readability", 5),
        ("rhythm", 1),
    ])
    def test_count_syllables(self, word, expected):
        assert count_syllables(word) == expected

    def test_count_sentences(self):
        assert count_sentences("Hello world. How are you? Fine!") == 3
        assert count_sentences("No terminator here") == 1
        assert count_sentences("") == 0


class TestFleschScore:
    """Test readability score."""

    def test_empty_text(self):
        assert calculate_flesch_score("") == 0.0

    def test_score_is_clamped(self):
        score = calculate_flesch_score(SAMPLE_TEXT)
        assert 0 <= score <= 100

    def test_run_on_text_clamps_to_zero(self):
        text = " ".join(["internationalization"] * 200)
        assert calculate_flesch_score(text) == 0.0


class TestSubScores:
    """Test banded sub-scores."""

    @pytest.mark.parametrize("words,score", [
        (299, 20),
        (300, 40),
        (500, 60),
        (1000, 80),
        (1499, 80),
        (1500, 100),
        (2500, 100),
        (2501, 90),
        (10001, 60),
    ])
    def test_length_bands(self, words, score):
        assert get_length_score(words) == score

    @pytest.mark.parametrize("density,score", [
        (0.4, 30),
        (0.5, 70),
        (1.0, 100),
        (2.0, 100),
        (3.0, 70),
        (4.1, 40),
    ])
    def test_keyword_bands(self, density, score):
        assert get_keyword_score(density) == score

    def test_media_score(self):
        assert get_media_score(2, 0, 600) == 100
        assert get_media_score(1, 0, 600) == 50
        assert get_media_score(1, 2, 600) == 80

    def test_media_score_capped_after_video_bonus(self):
        assert get_media_score(4, 3, 300) == 100

    def test_media_score_without_words(self):
        assert get_media_score(3, 0, 0) == 0

    def test_link_scores(self):
        assert get_internal_links_score(3, 600) == 100
        assert get_internal_links_score(1, 600) == pytest.approx(100 / 3)
        assert get_external_links_score(5) == 50
        assert get_external_links_score(20) == 100

    def test_vocabulary_and_headings(self):
        assert get_vocabulary_score(50, 100) == pytest.approx(75)
        assert get_heading_score(12) == 100


class TestAnalyzeContentQuality:
    """Test the full report."""

    def test_empty_text(self):
        report = analyze_content_quality("")

        assert report.overall_score == 0
        assert report.word_count == 0
        assert report.readability_score == 0
        assert report.media_score == 0

    def test_whitespace_only_text(self):
        assert analyze_content_quality("   \n\t ").overall_score == 0

    def test_overall_in_range(self):
        report = analyze_content_quality(
            SAMPLE_TEXT,
            ContentMetadata(image_count=1, internal_links=1, external_links=2, heading_count=3),
        )
        assert 0 <= report.overall_score <= 100
        assert report.sentence_count == 4

    def test_keyword_density(self):
        content = "seo guide for beginners " * 50
        report = analyze_content_quality(content, ContentMetadata(target_keyword="SEO"))

        assert report.word_count == 200
        assert report.keyword_density == pytest.approx(25.0)
        assert report.keyword_score == 40
        assert report.length_score == 20

    def test_default_keyword_score(self):
        report = analyze_content_quality(SAMPLE_TEXT)
        assert report.keyword_score == 70

    def test_to_dict(self):
        data = analyze_content_quality(SAMPLE_TEXT).to_dict()

        assert set(data) >= {"overall_score", "readability_score", "word_count"}
        assert data["word_count"] == len(SAMPLE_TEXT.split())
