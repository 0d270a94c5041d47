"""
Test Suite for Action Generation

Tests each action rule and the final priority ordering.
"""

from searchlens.scoring import ActionType, generate_actions, get_action_summary
from searchlens.scoring.actions import (
    find_cannibalized_queries,
    find_low_ctr,
    find_quick_wins,
    find_snippet_opportunities,
    is_question_query,
)


class TestQuickWins:
    """Test quick-win detection."""

    def test_page_one_gap(self, record):
        actions = find_quick_wins([record("seo tools", "/a", 5, 1000, 6)])

        assert len(actions) == 1
        assert actions[0].type == ActionType.QUICK_WIN
        assert actions[0].priority == 90
        assert actions[0].metrics["potential_click_gain"] == 48.0

    def test_outside_position_range(self, record):
        assert find_quick_wins([record("q", "/a", 0, 1000, 3)]) == []
        assert find_quick_wins([record("q", "/a", 0, 1000, 16)]) == []

    def test_too_few_impressions(self, record):
        assert find_quick_wins([record("q", "/a", 0, 99, 6)]) == []

    def test_gain_below_threshold(self, record):
        assert find_quick_wins([record("q", "/a", 50, 1000, 6)]) == []

    def test_custom_threshold(self, record):
        rows = [record("q", "/a", 5, 1000, 6)]
        assert find_quick_wins(rows, quick_win_threshold=100) == []


class TestLowCtr:
    """Test low-CTR detection."""

    def test_ctr_far_below_benchmark(self, record):
        actions = find_low_ctr([record("q", "/a", 5, 1000, 6)])

        assert len(actions) == 1
        assert actions[0].priority == 75

    def test_ctr_near_benchmark(self, record):
        assert find_low_ctr([record("q", "/a", 50, 1000, 6)]) == []

    def test_too_few_impressions(self, record):
        assert find_low_ctr([record("q", "/a", 0, 49, 6)]) == []


class TestCannibalizedQueries:
    """Test multi-page query detection."""

    def test_first_page_is_canonical(self, cannibalized_records):
        actions = find_cannibalized_queries(cannibalized_records)

        assert len(actions) == 1
        assert actions[0].page == "https://example.com/x"
        assert actions[0].metrics["page_count"] == 2
        assert "https://example.com/x" in actions[0].recommendation

    def test_page_threshold(self, cannibalized_records):
        assert find_cannibalized_queries(cannibalized_records, page_threshold=3) == []

    def test_repeated_rows_for_one_page(self, record):
        rows = [record("q", "/a", 1, 10, 3), record("q", "/a", 1, 10, 4)]
        assert find_cannibalized_queries(rows) == []


class TestSnippetOpportunities:
    """Test featured-snippet detection."""

    def test_question_words(self):
        assert is_question_query("How to do keyword research")
        assert is_question_query("is seo dead")
        assert not is_question_query("however seo")
        assert not is_question_query("seo tools")

    def test_question_near_top(self, record):
        actions = find_snippet_opportunities([record("what is seo", "/a", 10, 500, 3)])

        assert len(actions) == 1
        assert actions[0].type == ActionType.FEATURED_SNIPPET

    def test_question_at_top_or_too_low(self, record):
        rows = [record("what is seo", "/a", 10, 500, 1), record("what is seo", "/b", 1, 500, 6)]
        assert find_snippet_opportunities(rows) == []


class TestGenerateActions:
    """Test the combined generator."""

    def test_sorted_by_priority(self, site_records):
        actions = generate_actions(site_records)
        priorities = [a.priority for a in actions]

        assert priorities == sorted(priorities, reverse=True)
        assert {a.type for a in actions} >= {ActionType.QUICK_WIN, ActionType.CANNIBALIZATION}

    def test_equal_priorities_keep_generation_order(self, record):
        rows = [record("q1", "/a", 5, 1000, 6), record("q2", "/b", 5, 1000, 7)]
        quick_wins = [a for a in generate_actions(rows) if a.type == ActionType.QUICK_WIN]

        assert [a.query for a in quick_wins] == ["q1", "q2"]

    def test_empty_input(self):
        assert generate_actions([]) == []

    def test_summary(self, record):
        actions = generate_actions([record("seo tools", "/a", 5, 1000, 6)])

        assert get_action_summary(actions) == {
            "quick_win": 1,
            "low_ctr": 1,
            "cannibalization": 0,
            "featured_snippet": 0,
        }

    def test_to_dict(self, record):
        action = generate_actions([record("seo tools", "/a", 5, 1000, 6)])[0]
        data = action.to_dict()

        assert data["type"] == "quick_win"
        assert data["page"] == "/a"
