"""Rule-based extraction of ``UserContext`` fields from one message.

Each detector is independent and fills at most one field.  Within a
detector the rules are ordered and the first match wins, so a message
that says both "beginner" and "tournament" is a beginner.
"""

from __future__ import annotations

import re
from typing import Any

from .models import UserContext

_I = re.IGNORECASE

# (pattern, value) tables, checked top to bottom.
EXPERIENCE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(beginner|new|first time|never played|just started)\b", _I), "beginner"),
    (re.compile(r"\b(intermediate|some experience|played before)\b", _I), "intermediate"),
    (re.compile(r"\b(advanced|expert|experienced|competitive|tournament)\b", _I), "advanced"),
]

PLAY_FREQUENCY_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(daily|every day)\b", _I), "daily"),
    (re.compile(r"\b(weekly|week|regularly)\b", _I), "weekly"),
    (re.compile(r"\b(casual|occasionally|sometimes)\b", _I), "casual"),
    (re.compile(r"\b(competitive|tournament|serious)\b", _I), "competitive"),
]

PLAY_STYLE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(power|hard|aggressive|attack)\b", _I), "power"),
    (re.compile(r"\b(control|placement|precise|accurate)\b", _I), "control"),
    (re.compile(r"\b(spin|topspin|slice)\b", _I), "spin"),
    (re.compile(r"\b(balanced|all-around|versatile)\b", _I), "balanced"),
]

TRAVEL_DISTANCE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(local|nearby|close)\b", _I), "local"),
    (re.compile(r"\bwithin\s+25\s*miles?", _I), "25_miles"),
    (re.compile(r"\bwithin\s+50\s*miles?", _I), "50_miles"),
    (re.compile(r"\bwithin\s+100\s*miles?", _I), "100_miles"),
    (re.compile(r"\b(anywhere|willing to travel|don['’]t mind traveling)\b", _I), "anywhere"),
]

DATE_PREFERENCE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(this weekend|weekend)\b", _I), "this_weekend"),
    (re.compile(r"\bnext week\b", _I), "next_week"),
    (re.compile(r"\bthis month\b", _I), "this_month"),
    (re.compile(r"\bnext month\b", _I), "next_month"),
    (re.compile(r"\b(flexible|anytime|open)\b", _I), "flexible"),
]

TOURNAMENT_PREFERENCE_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(recreational|fun|casual)\b", _I), "recreational"),
    (re.compile(r"\b(competitive|serious|sanctioned)\b", _I), "competitive"),
]

SKILL_LEVEL_NUMBER = re.compile(r"\b(\d\.\d+)\s*(?:level|division)?", _I)
SKILL_LEVEL_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(recreational|rec|casual)\b", _I), "recreational"),
    (re.compile(r"\b(expert|advanced)\b", _I), "5.0+"),
]

BUDGET_AMOUNT = re.compile(r"\$(\d+)(?:\s*-\s*\$?(\d+))?")
BUDGET_RULES: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(cheap|budget|affordable)\b", _I), "budget-friendly"),
    (re.compile(r"\b(expensive|premium|high-end)\b", _I), "premium"),
]

DUPR_SCORE = re.compile(r"\b(\d+\.\d+|\d+)\s*(?:dupr|rating)\b", _I)

_NAME = r"([a-z][\w.-]*(?:\s+[a-z][\w.-]*)?)"
_POSSESSIVE = r"(?:['’]s|['’])"
PLAYER_LOOKUP_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        rf"\b(?:what\s+is|what['’]s|whats|find|look\s+up|check)\s+{_NAME}"
        rf"{_POSSESSIVE}?\s+(?:dupr|rating)\b",
        _I,
    ),
    re.compile(rf"\b{_NAME}{_POSSESSIVE}\s+(?:dupr|rating)\b", _I),
    re.compile(rf"\b(?:dupr|rating)\s+(?:of|for)\s+{_NAME}", _I),
]
DUPR_PERSONAL = re.compile(r"\b(my|get|how do i|improve my)\s*(dupr|rating)", _I)
DUPR_GENERAL = re.compile(r"\b(what is|how does|explain)\s*(dupr|rating)", _I)

# Tokens that can sit where a player name is expected but never are one.
NON_NAME_TOKENS = frozenset(
    {
        "a", "an", "the", "my", "i", "me", "mine", "your", "you", "his",
        "her", "their", "our", "its", "it", "this", "that", "is", "s",
        "what", "whats", "dupr", "rating", "score", "get", "improve",
        "check", "find", "up", "of", "for", "someone", "somebody",
        # adjectives and quantifiers that describe a rating, not a person
        "good", "bad", "average", "typical", "normal", "decent", "high", "low",
        "best", "top", "beginner", "intermediate", "advanced", "pro",
        "pickleball", "player", "players", "any", "every", "some", "all",
    }
)

# A place is a ZIP or one to three capitalised words; "in improving my
# serve" is not a place.
LOCATION_PREPOSITION = re.compile(
    r"\b(?:[Ii]n|[Nn]ear|[Aa]round)\s+"
    r"(\d{5}\b|[A-Z][\w'.-]*(?:\s+[A-Z][\w'.-]*){0,2})"
    r"(?:\s*,\s*([A-Z]{2})\b)?"
)
LOCATION_CITY_STATE = re.compile(r"\b((?:[A-Z][a-z]+\s+){0,2}[A-Z][a-z]+),\s*([A-Z]{2})\b")
LOCATION_ZIP = re.compile(r"\b(\d{5})\b")
_ZIP_ONLY = re.compile(r"\d{5}")


def _first_match(rules: list[tuple[re.Pattern[str], str]], message: str) -> str | None:
    for pattern, value in rules:
        if pattern.search(message):
            return value
    return None


def _clean_name(candidate: str) -> str | None:
    name = " ".join(candidate.split())
    if not name:
        return None
    if any(token.lower() in NON_NAME_TOKENS for token in name.split()):
        return None
    return name


def find_player_lookup(message: str) -> str | None:
    """Return the player name when ``message`` asks for someone's DUPR."""
    for pattern in PLAYER_LOOKUP_PATTERNS:
        for match in pattern.finditer(message):
            name = _clean_name(match.group(1))
            if name:
                return name
    return None


def _extract_budget(message: str) -> str | None:
    amount = BUDGET_AMOUNT.search(message)
    if amount:
        low, high = amount.groups()
        if high:
            return f"${low}-${high}"
        return f"under ${low}"
    return _first_match(BUDGET_RULES, message)


def _extract_dupr(message: str) -> dict[str, Any]:
    player = find_player_lookup(message)
    if player:
        return {"dupr_intent": "lookup", "player_name": player}
    if DUPR_PERSONAL.search(message):
        return {"dupr_intent": "personal"}
    if DUPR_GENERAL.search(message):
        return {"dupr_intent": "general"}
    return {}


def _extract_location(message: str) -> dict[str, str] | None:
    match = LOCATION_PREPOSITION.search(message)
    if match:
        place, state = match.group(1).strip(), match.group(2)
        if _ZIP_ONLY.fullmatch(place):
            return {"zip_code": place}
        location = {"city": place}
        if state:
            location["state"] = state.upper()
        return location

    match = LOCATION_CITY_STATE.search(message)
    if match:
        return {"city": match.group(1), "state": match.group(2)}

    match = LOCATION_ZIP.search(message)
    if match:
        return {"zip_code": match.group(1)}
    return None


def _extract_skill_level(message: str) -> str | None:
    number = SKILL_LEVEL_NUMBER.search(message)
    if number:
        return number.group(1)
    return _first_match(SKILL_LEVEL_RULES, message)


def extract_context_from_message(message: str) -> UserContext:
    """Infer context fields from ``message``.

    Pure and deterministic.  Only detected fields are set on the returned
    model (see ``model_fields_set``); merging into the stored context is
    the caller's job.
    """
    fields: dict[str, Any] = {
        "experience": _first_match(EXPERIENCE_RULES, message),
        "budget": _extract_budget(message),
        "play_frequency": _first_match(PLAY_FREQUENCY_RULES, message),
        "play_style": _first_match(PLAY_STYLE_RULES, message),
        "location": _extract_location(message),
        "travel_distance": _first_match(TRAVEL_DISTANCE_RULES, message),
        "date_preference": _first_match(DATE_PREFERENCE_RULES, message),
        "skill_level": _extract_skill_level(message),
        "tournament_preference": _first_match(TOURNAMENT_PREFERENCE_RULES, message),
    }

    score = DUPR_SCORE.search(message)
    if score:
        fields["dupr_score"] = float(score.group(1))
    fields.update(_extract_dupr(message))

    return UserContext(**{k: v for k, v in fields.items() if v is not None})
