"""Tests for the conversation category registry."""

import pytest
from pydantic import ValidationError

from pickleai.core.knowledge import (
    CONVERSATION_CATEGORIES,
    ConversationCategory,
    get_category,
    load_categories,
    parse_categories,
)

EXPECTED_ORDER = [
    "skills",
    "rules",
    "equipment",
    "general",
    "paddleRecommendation",
    "paddleComparison",
    "duprRating",
    "tournamentFinder",
    "skillDevelopment",
    "strategyAdvice",
    "equipmentGeneral",
    "rulesAndRegulations",
]


class TestCategoryTable:
    def test_registration_order_preserved(self):
        assert list(CONVERSATION_CATEGORIES) == EXPECTED_ORDER

    def test_keys_match_entries(self):
        for key, category in CONVERSATION_CATEGORIES.items():
            assert category.key == key
            assert category.name
            assert category.keywords

    def test_paddle_recommendation_slots(self):
        category = get_category("paddleRecommendation")
        assert category is not None
        assert category.required_info == ("experience", "budget")
        assert category.optional_info[:2] == ("playFrequency", "playStyle")

    def test_paddle_recommendation_asks_required_slots(self):
        category = get_category("paddleRecommendation")
        assert category.questions_for("budget")
        assert category.questions_for("experience")

    def test_unknown_slot_has_no_questions(self):
        assert get_category("skills").questions_for("notASlot") == ()

    def test_unknown_and_none_category(self):
        assert get_category("croquet") is None
        assert get_category(None) is None

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            CONVERSATION_CATEGORIES["extra"] = CONVERSATION_CATEGORIES["skills"]  # type: ignore[index]

    def test_loader_is_cached(self):
        assert load_categories() is load_categories()


class TestParseCategories:
    def test_extra_rows_extend_table(self):
        table = parse_categories(
            {
                "courtBooking": {
                    "name": "Court Booking",
                    "keywords": ["book a court", "reserve"],
                    "required_info": ["location"],
                    "follow_up_questions": {"location": ["Where do you play?"]},
                }
            }
        )
        entry = table["courtBooking"]
        assert isinstance(entry, ConversationCategory)
        assert entry.optional_info == ()
        assert entry.questions_for("location") == ("Where do you play?",)

    def test_missing_name_rejected(self):
        with pytest.raises(ValidationError):
            parse_categories({"broken": {"keywords": ["x"]}})
