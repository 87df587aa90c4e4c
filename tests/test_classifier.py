"""Tests for keyword intent classification and slot detection."""

import pytest

from pickleai.core.context import UserContext, extract_context_from_message
from pickleai.core.intent import analyze_user_message, has_context_info
from pickleai.core.knowledge import parse_categories

# =========================================================================
# Scoring and tie-breaks
# =========================================================================


class TestCategoryScoring:
    def test_paddle_recommendation_scenario(self):
        message = "What paddle should I buy, I'm a beginner with a budget of $75"
        context = extract_context_from_message(message)

        analysis = analyze_user_message(message, context)

        assert analysis.category == "paddleRecommendation"
        assert "experience" not in analysis.missing_info
        assert "budget" not in analysis.missing_info
        assert analysis.missing_info == ["playFrequency", "playStyle"]
        assert analysis.confidence == 1.0

    def test_no_keywords_returns_none(self):
        analysis = analyze_user_message("hello")
        assert analysis.category is None
        assert analysis.missing_info == []
        assert analysis.confidence == 0.0

    def test_exact_tie_goes_to_earlier_category(self):
        # "fault" scores 5 for both "rules" and "rulesAndRegulations";
        # "rules" is registered first.
        analysis = analyze_user_message("Is that a fault?")
        assert analysis.category == "rules"

    def test_three_way_tie_goes_to_first(self):
        # equipment, paddleRecommendation and equipmentGeneral all score 9.
        assert analyze_user_message("equipment").category == "equipment"

    def test_longer_keywords_outweigh_shorter(self):
        # "compare paddles" + "compare" + "paddle" beats the bare "paddle" match.
        analysis = analyze_user_message("can you compare paddles for me")
        assert analysis.category == "paddleComparison"

    def test_confidence_is_scaled_score(self):
        analysis = analyze_user_message("serve")
        assert analysis.category == "skills"
        assert analysis.score == 5
        assert analysis.confidence == pytest.approx(0.5)

    def test_custom_table_order_decides_ties(self):
        table = parse_categories(
            {
                "first": {"name": "First", "keywords": ["dink"]},
                "second": {"name": "Second", "keywords": ["dink"]},
            }
        )
        assert analyze_user_message("dink", categories=table).category == "first"


# =========================================================================
# Missing info
# =========================================================================


class TestMissingInfo:
    def test_required_slots_reported_first(self):
        analysis = analyze_user_message("what paddle should I buy")
        assert analysis.category == "paddleRecommendation"
        assert analysis.missing_info == ["experience", "budget"]

    def test_context_satisfies_required_slots(self):
        context = UserContext(experience="intermediate", budget="premium")
        analysis = analyze_user_message("what paddle should I buy", context)
        assert analysis.missing_info == ["playFrequency", "playStyle"]

    def test_unknown_value_does_not_count(self):
        context = UserContext(experience="unknown", budget="premium")
        analysis = analyze_user_message("what paddle should I buy", context)
        assert analysis.missing_info == ["experience"]

    def test_only_two_optional_slots_checked(self):
        context = UserContext(experience="advanced", budget="premium")
        analysis = analyze_user_message("what paddle", context)
        assert "physicalConsiderations" not in analysis.missing_info
        assert len(analysis.missing_info) <= 2

    def test_everything_known(self):
        context = UserContext(
            experience="advanced",
            budget="premium",
            play_frequency="daily",
            play_style="power",
        )
        assert analyze_user_message("what paddle", context).missing_info == []


class TestSlotHeuristics:
    @pytest.mark.parametrize(
        "slot, message",
        [
            ("experience", "I've never played"),
            ("budget", "around 100 bucks"),
            ("location", "tournaments near Denver"),
            ("paddlesToCompare", "Selkirk vs Joola"),
            ("duprIntent", "my rating"),
            ("equipmentType", "need new shoes"),
        ],
    )
    def test_message_evidence(self, slot, message):
        assert has_context_info(UserContext(), slot, message)

    def test_context_evidence(self):
        context = UserContext(location={"city": "Austin"})
        assert has_context_info(context, "location", "any games?")

    def test_unregistered_slot_is_missing(self):
        assert not has_context_info(UserContext(), "weaknesses", "my backhand is weak")
