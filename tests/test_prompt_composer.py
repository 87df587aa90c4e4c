"""Tests for system prompt composition."""

from pickleai.core.context import UserContext
from pickleai.core.prompt import (
    build_context_prompt,
    format_known_context,
    generate_intelligent_system_prompt,
    generic_system_prompt,
)
from pickleai.core.security import validate_system_prompt

QUESTIONS = ["What's your budget range for a paddle?", "How often do you play?"]


class TestIntelligentPrompt:
    def test_generic_without_category(self):
        prompt = generate_intelligent_system_prompt(None, ["budget"], UserContext(), QUESTIONS)
        assert prompt == generic_system_prompt()

    def test_generic_when_nothing_missing(self):
        prompt = generate_intelligent_system_prompt("equipment", [], UserContext(), QUESTIONS)
        assert prompt == generic_system_prompt()

    def test_sections_in_order(self):
        context = UserContext(experience="beginner", budget="under $75")
        prompt = generate_intelligent_system_prompt(
            "paddleRecommendation", ["playFrequency"], context, QUESTIONS
        )

        topic = prompt.index("TOPIC: Paddle Recommendation")
        need = prompt.index("NEED MORE INFO:")
        known = prompt.index("KNOWN CONTEXT:")
        style = prompt.index("RESPONSE STYLE:")
        assert topic < need < known < style
        for question in QUESTIONS:
            assert f"• {question}" in prompt
        assert "• experience: beginner" in prompt
        assert "• budget: under $75" in prompt

    def test_none_yet_placeholder(self):
        prompt = generate_intelligent_system_prompt(
            "skills", ["experience"], UserContext(), QUESTIONS[:1]
        )
        assert "• None yet" in prompt

    def test_unknown_values_filtered(self):
        context = UserContext(experience="unknown", play_style="control")
        text = format_known_context(context)
        assert "experience" not in text
        assert "• playStyle: control" in text

    def test_category_guidance_only_for_listed_categories(self):
        skills = generate_intelligent_system_prompt(
            "skills", ["experience"], UserContext(), QUESTIONS[:1]
        )
        dupr = generate_intelligent_system_prompt(
            "duprRating", ["duprIntent"], UserContext(), QUESTIONS[:1]
        )
        assert skills.endswith("techniques they can implement immediately.")
        assert dupr.endswith("Keep it conversational but concise")

    def test_composed_prompts_pass_validation(self):
        context = UserContext(experience="advanced", goals=["win a tournament"])
        for category in ("skills", "rules", "equipment", "general", "tournamentFinder"):
            prompt = generate_intelligent_system_prompt(category, ["location"], context, QUESTIONS)
            assert validate_system_prompt(prompt)


class TestContextPrompt:
    def test_empty_context_is_persona_only(self):
        prompt = build_context_prompt(UserContext())
        assert "USER CONTEXT" not in prompt
        assert prompt.startswith("You are PickleAI")

    def test_labelled_lines(self):
        context = UserContext(
            experience="intermediate",
            travel_distance="25_miles",
            date_preference="this_weekend",
            location={"city": "Austin", "state": "TX"},
            goals=["consistency", "footwork"],
        )
        prompt = build_context_prompt(context)

        assert "USER CONTEXT:" in prompt
        assert "Experience: intermediate" in prompt
        assert "Travel: 25 miles" in prompt
        assert "Date: this weekend" in prompt
        assert "Location: Austin, TX" in prompt
        assert "Goals: consistency, footwork" in prompt
        assert validate_system_prompt(prompt)
