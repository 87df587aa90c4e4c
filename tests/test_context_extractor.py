"""Tests for rule-based context extraction and merging."""

import pytest

from pickleai.core.context import (
    Location,
    UserContext,
    extract_context_from_message,
    find_player_lookup,
    merge_context,
)

# =========================================================================
# Field detectors
# =========================================================================


class TestExperience:
    @pytest.mark.parametrize(
        "message, expected",
        [
            ("I'm a beginner", "beginner"),
            ("I just started last month", "beginner"),
            ("I have some experience", "intermediate"),
            ("I'm an advanced player", "advanced"),
            # Beginner rules run first.
            ("I'm new but I want to play a tournament", "beginner"),
        ],
    )
    def test_experience_levels(self, message, expected):
        assert extract_context_from_message(message).experience == expected

    def test_no_experience_keywords(self):
        assert extract_context_from_message("what paddle is good").experience is None


class TestBudget:
    def test_single_amount_is_upper_bound(self):
        assert extract_context_from_message("I have $75").budget == "under $75"

    def test_range(self):
        assert extract_context_from_message("between $50-$100 please").budget == "$50-$100"

    def test_range_without_second_dollar(self):
        assert extract_context_from_message("$80 - 120 is fine").budget == "$80-$120"

    def test_words(self):
        assert extract_context_from_message("something cheap").budget == "budget-friendly"
        assert extract_context_from_message("a premium paddle").budget == "premium"

    def test_amount_beats_words(self):
        assert extract_context_from_message("cheap, maybe $40").budget == "under $40"


class TestPlayHabits:
    def test_frequency(self):
        assert extract_context_from_message("I play daily").play_frequency == "daily"
        assert extract_context_from_message("twice a week").play_frequency == "weekly"

    def test_style(self):
        assert extract_context_from_message("I like to attack").play_style == "power"
        assert extract_context_from_message("I prefer placement").play_style == "control"
        assert extract_context_from_message("lots of topspin").play_style == "spin"


class TestDupr:
    def test_numeric_score(self):
        assert extract_context_from_message("I have a 3.75 dupr").dupr_score == 3.75

    def test_lookup_scenario(self):
        context = extract_context_from_message("what's John Smith's dupr")
        assert context.dupr_intent == "lookup"
        assert context.player_name == "John Smith"

    def test_lookup_possessive_only(self):
        context = extract_context_from_message("Ben Johns' rating?")
        assert context.dupr_intent == "lookup"
        assert context.player_name == "Ben Johns"

    def test_lookup_of_form(self):
        assert find_player_lookup("show me the dupr of Anna Leigh") == "Anna Leigh"

    def test_my_dupr_is_personal_not_lookup(self):
        context = extract_context_from_message("what's my dupr")
        assert context.dupr_intent == "personal"
        assert context.player_name is None

    def test_check_my_rating_is_personal(self):
        assert find_player_lookup("check my rating") is None
        assert extract_context_from_message("check my rating").dupr_intent == "personal"

    def test_general(self):
        assert extract_context_from_message("explain dupr to me").dupr_intent == "general"

    @pytest.mark.parametrize(
        "message",
        [
            "what is good rating",
            "what is an average rating",
            "find beginner rating",
            "what's a typical dupr",
            "check pickleball rating",
        ],
    )
    def test_rating_adjectives_are_not_names(self, message):
        context = extract_context_from_message(message)
        assert context.dupr_intent != "lookup"
        assert context.player_name is None


class TestLocation:
    def test_preposition_with_state(self):
        location = extract_context_from_message("courts in Austin, TX").location
        assert isinstance(location, Location)
        assert (location.city, location.state, location.zip_code) == ("Austin", "TX", None)

    def test_preposition_zip(self):
        assert extract_context_from_message("games near 78701").location.zip_code == "78701"

    def test_city_state_without_preposition(self):
        location = extract_context_from_message("Playing out of San Diego, CA lately").location
        assert location.city == "San Diego"
        assert location.state == "CA"

    def test_bare_zip(self):
        assert extract_context_from_message("my zip is 10001").location.zip_code == "10001"

    def test_in_inside_word_ignored(self):
        assert extract_context_from_message("I keep winning").location is None

    @pytest.mark.parametrize(
        "message",
        [
            "I'm interested in improving my serve",
            "I struggle in the kitchen",
            "around three times a week",
        ],
    )
    def test_lowercase_phrase_is_not_a_place(self, message):
        assert extract_context_from_message(message).location is None

    def test_place_capture_stops_at_lowercase_words(self):
        location = extract_context_from_message("open play near Denver with friends").location
        assert location.city == "Denver"
        assert location.state is None

    def test_multi_word_city(self):
        location = extract_context_from_message("looking for courts in Salt Lake City").location
        assert location.city == "Salt Lake City"


class TestOtherTables:
    def test_travel_and_date(self):
        context = extract_context_from_message("within 50 miles, next month")
        assert context.travel_distance == "50_miles"
        assert context.date_preference == "next_month"

    def test_skill_level_number(self):
        assert extract_context_from_message("I play at 3.5 level").skill_level == "3.5"

    def test_tournament_preference(self):
        context = extract_context_from_message("a sanctioned event")
        assert context.tournament_preference == "competitive"


# =========================================================================
# Purity and merging
# =========================================================================


class TestExtractionContract:
    def test_only_detected_fields_set(self):
        context = extract_context_from_message("I'm a beginner")
        assert context.model_fields_set == {"experience"}

    def test_idempotent(self):
        message = "Beginner in Austin, TX with $100, looking at John Smith's dupr"
        first = extract_context_from_message(message)
        second = extract_context_from_message(message)
        assert first == second
        assert first.model_fields_set == second.model_fields_set

    def test_nothing_detected(self):
        assert extract_context_from_message("hello").is_empty()


class TestMergeContext:
    def test_new_detection_overwrites_field(self):
        base = UserContext(experience="beginner", budget="under $50")
        merged = merge_context(base, UserContext(experience="advanced"))
        assert merged.experience == "advanced"
        assert merged.budget == "under $50"

    def test_unrelated_message_keeps_known_value(self):
        base = UserContext(experience="advanced")
        merged = merge_context(base, extract_context_from_message("what paddle should I get"))
        assert merged.experience == "advanced"

    def test_explicit_none_does_not_clear(self):
        base = UserContext(budget="premium")
        merged = merge_context(base, {"budget": None})
        assert merged.budget == "premium"

    def test_camel_case_update(self):
        merged = merge_context(UserContext(), {"playStyle": "spin", "duprScore": 4.1})
        assert merged.play_style == "spin"
        assert merged.dupr_score == 4.1

    def test_base_not_mutated(self):
        base = UserContext(experience="beginner")
        merge_context(base, UserContext(experience="advanced"))
        assert base.experience == "beginner"
