"""Slot presence heuristics.

A slot counts as present when the stored context already knows it, or
when the message itself carries evidence for it.  Each rule pairs an
optional context check with an optional message pattern.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from pickleai.core.context.extractor import find_player_lookup
from pickleai.core.context.models import UNKNOWN, UserContext

_I = re.IGNORECASE

ContextCheck = Callable[[UserContext], bool]
MessageCheck = Callable[[str], bool]


@dataclass(frozen=True)
class SlotRule:
    in_context: ContextCheck | None = None
    in_message: MessageCheck | None = None

    def is_present(self, context: UserContext, message: str) -> bool:
        if self.in_context is not None and self.in_context(context):
            return True
        if self.in_message is not None and self.in_message(message):
            return True
        return False


def _words(*words: str) -> MessageCheck:
    pattern = re.compile(r"\b(" + "|".join(words) + r")\b", _I)
    return lambda message: pattern.search(message) is not None


def _regex(expr: str) -> MessageCheck:
    pattern = re.compile(expr, _I)
    return lambda message: pattern.search(message) is not None


def _known(field: str) -> ContextCheck:
    def check(context: UserContext) -> bool:
        value = getattr(context, field)
        return value is not None and value != UNKNOWN and value != ""

    return check


_COMPARE_TARGET = re.compile(r"\b(vs|versus|compare|difference between)\s+\w+", _I)
_PADDLE_WORD = re.compile(r"paddle|racket", _I)


def _names_paddles_to_compare(message: str) -> bool:
    if _COMPARE_TARGET.search(message):
        return True
    return sum(1 for word in message.split() if _PADDLE_WORD.search(word)) >= 2


def _location_known(context: UserContext) -> bool:
    loc = context.location
    return loc is not None and bool(loc.city or loc.state or loc.zip_code)


SLOT_RULES: dict[str, SlotRule] = {
    "experience": SlotRule(
        _known("experience"),
        _words(
            "beginner", "new", "first time", "never played", "intermediate",
            "advanced", "expert", "experienced",
        ),
    ),
    "budget": SlotRule(
        _known("budget"),
        _regex(r"\$|\b(budget|price|cost|cheap|expensive|under|around)\b"),
    ),
    "playFrequency": SlotRule(
        _known("play_frequency"),
        _words("daily", "weekly", "casual", "competitive", "tournament", "often", "rarely"),
    ),
    "playStyle": SlotRule(
        _known("play_style"),
        _words("power", "control", "spin", "aggressive", "defensive", "balanced"),
    ),
    "specificSkill": SlotRule(
        in_message=_words(
            "serve", "volley", "dink", "backhand", "forehand", "footwork",
            "positioning", "smash", "consistency", "third shot", "warm up",
            "teamwork", "mental", "focus", "mistakes", "beginners", "alone",
            "opponent", "anticipate",
        ),
    ),
    "equipmentType": SlotRule(
        in_message=_words(
            "paddle", "shoes", "bag", "shorts", "shirt", "hat", "sunglasses",
            "gear", "racket", "grip", "materials", "balls", "outdoor",
        ),
    ),
    "ruleQuestion": SlotRule(
        in_message=_words(
            "fault", "violation", "legal", "allowed", "rule", "kitchen",
            "non-volley", "pickle-over", "score", "serving", "line",
            "double-bounce", "paddle size", "specifications", "tiebreaker",
            "singles", "doubles", "let", "court dimensions", "timeout",
            "substitution",
        ),
    ),
    "generalQuestion": SlotRule(
        in_message=_words(
            "injury", "prevent", "tournament", "rating", "history", "coaching",
            "courts", "clubs", "beginner", "fitness", "partner", "group",
            "recreational", "competitive", "weather", "popularity", "future",
            "ai", "analyze",
        ),
    ),
    "paddlesToCompare": SlotRule(in_message=_names_paddles_to_compare),
    "comparisonCriteria": SlotRule(
        lambda context: bool(context.comparison_criteria),
        _words("weight", "power", "control", "price", "durability", "spin", "feel", "grip", "specs"),
    ),
    "currentPaddle": SlotRule(_known("current_paddle")),
    "physicalConsiderations": SlotRule(_known("physical_considerations")),
    "duprQuestion": SlotRule(in_message=_words("dupr", "rating", "score", "ranking")),
    "duprIntent": SlotRule(_known("dupr_intent"), _words("dupr", "rating", "score")),
    "playerName": SlotRule(
        _known("player_name"), lambda message: find_player_lookup(message) is not None
    ),
    "duprScore": SlotRule(_known("dupr_score"), _regex(r"\b(\d+\.\d+|\d+)\s*(dupr|rating)\b")),
    "duprGoals": SlotRule(
        lambda context: bool(context.dupr_goals),
        _words("improve", "tournament", "track", "understand", "get rated"),
    ),
    "tournamentPreference": SlotRule(_known("tournament_preference")),
    "skillLevel": SlotRule(_known("skill_level")),
    "location": SlotRule(
        _location_known,
        _regex(r"\b(\w+,\s*\w{2}|\d{5}|in\s+\w+|near\s+\w+|around\s+\w+)\b"),
    ),
    "eventType": SlotRule(
        in_message=_words("tournament", "game", "match", "league", "pickup", "recreational", "competitive"),
    ),
    "travelDistance": SlotRule(
        _known("travel_distance"), _regex(r"\b(local|nearby|within\s+\d+|miles|travel|drive)\b")
    ),
    "datePreference": SlotRule(
        _known("date_preference"),
        _words("this weekend", "next week", "soon", "today", "tomorrow", "this month", "next month"),
    ),
    "goals": SlotRule(
        lambda context: bool(context.goals),
        _words("goal", "improve", "win", "tournament", "fun", "competitive", "recreational"),
    ),
    "practiceTime": SlotRule(in_message=_words("practice", "drill", "time", "schedule", "routine")),
    "gameContext": SlotRule(
        in_message=_words("tournament", "casual", "singles", "doubles", "competitive", "recreational"),
    ),
}


def has_context_info(context: UserContext, slot: str, message: str) -> bool:
    """Whether ``slot`` is already known or evidenced by ``message``.

    Slots without a rule are never present, so they always get asked.
    """
    rule = SLOT_RULES.get(slot)
    if rule is None:
        return False
    return rule.is_present(context, message)
